"""Schema registry: table name -> versioned field layouts.

Definitions come from a directory of YAML or JSON files loaded once at
startup.  Each file maps table names to lists of versions::

    units_tables:
      - version: 3
        fields:
          - {name: key, kind: string_u8, is_key: true}
          - {name: cost, kind: i32}

Lookups prefer the exact version and otherwise fall back to the highest
version below the requested one, so data written by a newer minor version that
only appended optional trailing fields still opens.
"""

from __future__ import annotations

import bisect
import json
import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from packfile_manager.errors import FieldTooLarge, SchemaLoadError, TypeMismatch, UnknownSchema
from packfile_manager.tables.cells import default_cell
from packfile_manager.tables.schema import SchemaFile, SchemaVersion

logger = logging.getLogger(__name__)

_YAML_EXTENSIONS = {".yaml", ".yml"}
_JSON_EXTENSIONS = {".json"}


class SchemaRegistry:
    """Read-mostly store of table definitions, safe to share between sessions."""

    def __init__(self, versions: list[SchemaVersion] | None = None) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, dict[int, SchemaVersion]] = {}
        self._sorted: dict[str, list[int]] = {}
        for definition in versions or []:
            self.register(definition)

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._tables

    def __len__(self) -> int:
        return sum(len(v) for v in self._tables.values())

    def register(self, definition: SchemaVersion, *, replace: bool = False) -> None:
        """Add one table version.  Duplicates are rejected unless *replace*."""
        for field in definition.fields:
            try:
                default_cell(field)
            except (TypeMismatch, FieldTooLarge) as exc:
                raise SchemaLoadError(
                    f"{definition.table_name} v{definition.version}", exc.message
                ) from exc
        with self._lock:
            versions = dict(self._tables.get(definition.table_name, {}))
            if definition.version in versions and not replace:
                raise SchemaLoadError(
                    definition.table_name, f"version {definition.version} defined twice"
                )
            versions[definition.version] = definition
            # Publish new containers so concurrent readers never see a half update.
            self._tables[definition.table_name] = versions
            self._sorted[definition.table_name] = sorted(versions)

    def table_names(self) -> list[str]:
        return sorted(self._tables)

    def versions(self, table_name: str) -> list[int]:
        return list(self._sorted.get(table_name, []))

    def lookup(self, table_name: str, declared_version: int) -> SchemaVersion:
        """Exact version if known, else the highest version <= *declared_version*.

        Raises:
            UnknownSchema: no definition at or below *declared_version*.
        """
        versions = self._tables.get(table_name)
        if not versions:
            raise UnknownSchema(table_name, declared_version)
        exact = versions.get(declared_version)
        if exact is not None:
            return exact
        ordered = self._sorted[table_name]
        pos = bisect.bisect_right(ordered, declared_version)
        if pos == 0:
            raise UnknownSchema(table_name, declared_version)
        fallback = versions[ordered[pos - 1]]
        logger.debug(
            "No %s v%d definition, decoding with v%d",
            table_name,
            declared_version,
            fallback.version,
        )
        return fallback

    def latest(self, table_name: str) -> SchemaVersion:
        ordered = self._sorted.get(table_name)
        if not ordered:
            raise UnknownSchema(table_name, 0)
        return self._tables[table_name][ordered[-1]]

    # -- loading -----------------------------------------------------------

    @classmethod
    def from_directory(cls, directory: str | Path) -> SchemaRegistry:
        """Load every ``*.yaml``, ``*.yml`` and ``*.json`` file in *directory*."""
        directory = Path(directory)
        registry = cls()
        if not directory.is_dir():
            logger.warning("Schema directory %s does not exist, registry is empty", directory)
            return registry
        files = sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in _YAML_EXTENSIONS | _JSON_EXTENSIONS
        )
        for path in files:
            for definition in load_schema_file(path):
                registry.register(definition)
        logger.info(
            "Loaded %d definitions for %d tables from %d schema files",
            len(registry),
            len(registry.table_names()),
            len(files),
        )
        return registry


def load_schema_file(path: Path) -> list[SchemaVersion]:
    """Parse and validate one schema file."""
    text = path.read_text(encoding="utf-8-sig")
    raw: Any
    try:
        if path.suffix.lower() in _JSON_EXTENSIONS:
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SchemaLoadError(path.name, f"cannot be parsed: {exc}") from exc
    if raw is None:
        return []
    try:
        return SchemaFile.model_validate(raw).to_versions()
    except ValidationError as exc:
        raise SchemaLoadError(path.name, str(exc)) from exc


@lru_cache(maxsize=1)
def default_registry() -> SchemaRegistry:
    """Process-wide registry built from ``settings.schema_dir`` on first use."""
    from packfile_manager.config import settings

    return SchemaRegistry.from_directory(settings.schema_dir)
