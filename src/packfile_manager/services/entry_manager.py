"""Entry-level editing of one open PackFile.

:class:`PackFileManager` is the only way the rest of the application mutates
an archive.  It keeps a case-insensitive index of entry paths, since the game
resolves paths case-insensitively, and tracks whether anything changed since
the archive was opened or last saved::

    Clean --add/remove/rename/commit--> Dirty --save--> Clean
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from packfile_manager.archive.formats import PFHFileType, PFHVersion, get_profile
from packfile_manager.archive.models import Archive, Entry
from packfile_manager.archive.packfile import parse_packfile, serialize_packfile
from packfile_manager.archive.tree import TreeNode, build_tree
from packfile_manager.config import settings
from packfile_manager.constants import GAME_REGISTRY
from packfile_manager.errors import (
    DuplicatePath,
    InvalidPath,
    NonEditableArchive,
    NotFound,
    UnsupportedFormat,
)
from packfile_manager.schemas.pack import EntryInfo
from packfile_manager.services.table_service import decode_entry_table, encode_table
from packfile_manager.tables.registry import SchemaRegistry, default_registry
from packfile_manager.tables.table import Table
from packfile_manager.utils.paths import is_under, join_entry_path, path_key, split_entry_path

logger = logging.getLogger(__name__)

EntryPath = str | tuple[str, ...]


class PackFileManager:
    def __init__(self, archive: Archive, *, source_path: Path | None = None) -> None:
        """Raises :class:`DuplicatePath` if two entries differ only by case."""
        self.archive = archive
        self.source_path = source_path
        self._dirty = False
        self._index: dict[str, Entry] = {}
        for entry in archive.entries:
            key = path_key(entry.path)
            if key in self._index:
                raise DuplicatePath(entry.display_path)
            self._index[key] = entry

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def open(
        cls,
        data: bytes | bytearray | memoryview,
        *,
        source_path: Path | None = None,
    ) -> PackFileManager:
        archive = parse_packfile(data)
        logger.info(
            "Opened %s PackFile %s with %d entries",
            archive.version,
            source_path or "<memory>",
            len(archive.entries),
        )
        return cls(archive, source_path=source_path)

    @classmethod
    def open_file(cls, file_path: str | Path) -> PackFileManager:
        file_path = Path(file_path)
        return cls.open(file_path.read_bytes(), source_path=file_path)

    @classmethod
    def new(
        cls,
        version: PFHVersion | str | None = None,
        file_type: PFHFileType = PFHFileType.MOD,
        *,
        game: str | None = None,
    ) -> PackFileManager:
        """Empty archive.  *game* picks the version used by that game."""
        if version is None and game is not None:
            known = GAME_REGISTRY.get(game)
            if known is None:
                raise UnsupportedFormat(f"unknown game {game!r}")
            version = known["pfh_version"]
        profile = get_profile(version or settings.default_pfh_version)
        return cls(Archive(version=profile.version, file_type=file_type))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_editable(self) -> bool:
        return settings.allow_editing_of_ca_packfiles or not self.archive.file_type.is_game_file

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _check_compression(self) -> None:
        if not get_profile(self.archive.version).has_compression_flag:
            raise UnsupportedFormat(
                f"{self.archive.version} PackFiles cannot hold compressed entries"
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, tuple)):
            return False
        try:
            segments = split_entry_path(path)
        except InvalidPath:
            return False
        return path_key(segments) in self._index

    def __len__(self) -> int:
        return len(self.archive.entries)

    def get_entry(self, path: EntryPath) -> Entry:
        segments = split_entry_path(path)
        entry = self._index.get(path_key(segments))
        if entry is None:
            raise NotFound(join_entry_path(segments))
        return entry

    def list_entries(self) -> list[EntryInfo]:
        return [
            EntryInfo(
                path=entry.display_path,
                size=entry.size,
                is_compressed=entry.is_compressed,
                timestamp=entry.timestamp,
                kind=entry.kind,
            )
            for entry in self.archive.entries
        ]

    def tree(self) -> TreeNode:
        return build_tree((e.path for e in self.archive.entries))

    def extract(self, path: EntryPath) -> bytes:
        """Decompressed payload of one entry.  Does not change the state."""
        return self.get_entry(path).data

    def extract_all(self, dest_dir: str | Path) -> list[Path]:
        """Write every entry below *dest_dir*, keeping the folder layout."""
        root = Path(dest_dir).resolve()
        written: list[Path] = []
        for entry in self.archive.entries:
            target = root.joinpath(*entry.path).resolve()
            if not target.is_relative_to(root):
                raise InvalidPath(entry.display_path, "escapes the extraction folder")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(entry.data)
            written.append(target)
        logger.info("Extracted %d entries to %s", len(written), root)
        return written

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(
        self,
        path: EntryPath,
        data: bytes | bytearray | memoryview,
        *,
        compress: bool = False,
    ) -> Entry:
        segments = split_entry_path(path)
        key = path_key(segments)
        if key in self._index:
            raise DuplicatePath(join_entry_path(segments))
        if compress:
            self._check_compression()
        entry = Entry.from_data(
            segments,
            data,
            is_compressed=compress,
            timestamp=int(time.time()) if self.archive.has_index_timestamps else 0,
        )
        self.archive.entries.append(entry)
        self._index[key] = entry
        self._mark_dirty()
        return entry

    def replace(
        self,
        path: EntryPath,
        data: bytes | bytearray | memoryview,
        *,
        compress: bool | None = None,
    ) -> Entry:
        """Swap the payload of an existing entry.

        *compress* ``None`` keeps the entry's compression.  Nothing changes if
        the requested compression is not supported.
        """
        entry = self.get_entry(path)
        if compress and not entry.is_compressed:
            self._check_compression()
        if compress is not None:
            entry.is_compressed = compress
        entry.set_data(data)
        self._mark_dirty()
        return entry

    def set_compressed(self, path: EntryPath, is_compressed: bool) -> Entry:
        entry = self.get_entry(path)
        if is_compressed == entry.is_compressed:
            return entry
        if is_compressed:
            self._check_compression()
        entry.set_compressed(is_compressed)
        self._mark_dirty()
        return entry

    def remove(self, path: EntryPath) -> Entry:
        entry = self.get_entry(path)
        self.archive.entries.remove(entry)
        del self._index[path_key(entry.path)]
        self._mark_dirty()
        return entry

    def remove_folder(self, folder: EntryPath) -> list[str]:
        """Remove every entry under *folder*.  Returns the removed paths."""
        prefix = split_entry_path(folder)
        doomed = [e for e in self.archive.entries if is_under(e.path, prefix)]
        if not doomed:
            raise NotFound(join_entry_path(prefix))
        for entry in doomed:
            self.archive.entries.remove(entry)
            del self._index[path_key(entry.path)]
        self._mark_dirty()
        return [e.display_path for e in doomed]

    def rename(self, old: EntryPath, new: EntryPath) -> Entry:
        entry = self.get_entry(old)
        segments = split_entry_path(new)
        if segments == entry.path:
            return entry
        old_key, new_key = path_key(entry.path), path_key(segments)
        if new_key != old_key and new_key in self._index:
            raise DuplicatePath(join_entry_path(segments))
        del self._index[old_key]
        entry.path = segments
        self._index[new_key] = entry
        self._mark_dirty()
        return entry

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def decode_table(
        self,
        path: EntryPath,
        registry: SchemaRegistry | None = None,
        *,
        with_tooltip: bool = True,
    ) -> Table:
        entry = self.get_entry(path)
        if registry is None:
            registry = default_registry()
        return decode_entry_table(entry, registry, with_tooltip=with_tooltip)

    def commit_table(self, path: EntryPath, table: Table) -> bytes:
        """Re-encode *table* into the entry at *path*.

        The table is encoded before the entry is touched, so a value that
        cannot be written leaves the old payload in place.
        """
        entry = self.get_entry(path)
        if entry.kind.value != table.kind.value:
            raise UnsupportedFormat(
                f"cannot commit a {table.kind} table into the {entry.kind} entry "
                f"{entry.display_path}"
            )
        payload = encode_table(table)
        entry.set_data(payload)
        self._mark_dirty()
        return payload

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, *, sort_entries: bool | None = None) -> bytes:
        """Serialize the archive and return to the clean state."""
        payload, timestamp, sort_entries = self._serialize(sort_entries)
        self._mark_clean(timestamp, sort_entries)
        logger.info(
            "Saved PackFile with %d entries (%d bytes)", len(self.archive.entries), len(payload)
        )
        return payload

    def save_to(self, file_path: str | Path, *, sort_entries: bool | None = None) -> int:
        """Save to disk.  The state stays dirty if the file cannot be written."""
        file_path = Path(file_path)
        payload, timestamp, sort_entries = self._serialize(sort_entries)
        file_path.write_bytes(payload)
        self._mark_clean(timestamp, sort_entries)
        self.source_path = file_path
        logger.info("Saved PackFile to %s (%d bytes)", file_path, len(payload))
        return len(payload)

    def _serialize(self, sort_entries: bool | None) -> tuple[bytes, int, bool]:
        if not self.is_editable:
            raise NonEditableArchive(self.archive.file_type.name)
        if sort_entries is None:
            sort_entries = settings.sort_entries_on_save
        timestamp = int(time.time())
        payload = serialize_packfile(self.archive, sort_entries=sort_entries, timestamp=timestamp)
        return payload, timestamp, sort_entries

    def _mark_clean(self, timestamp: int, sorted_entries: bool) -> None:
        self.archive.timestamp = timestamp
        if sorted_entries:
            self.archive.entries.sort(key=lambda e: path_key(e.path))
        for entry in self.archive.entries:
            entry.mark_saved()
        self._dirty = False
