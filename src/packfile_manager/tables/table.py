"""Decoded, editable form of a DB or Loc entry.

A :class:`Table` is a view: edits change only its rows.  They reach the
PackFile when the owning manager commits the table, which re-encodes it and
swaps the entry payload in one step.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from packfile_manager.errors import NotFound
from packfile_manager.tables.cells import CellValue, default_cell, validate_cell, validate_row
from packfile_manager.tables.schema import SchemaVersion


class TableKind(StrEnum):
    DB = "db"
    LOC = "loc"


@dataclass(slots=True)
class DBHeader:
    """Header values of a DB entry that must survive a re-encode."""

    guid: str | None = None
    has_version_marker: bool = False
    version: int = 0
    marker: int = 1


@dataclass(slots=True)
class LocHeader:
    version: int = 1


@dataclass(slots=True, eq=False)
class Table:
    definition: SchemaVersion
    rows: list[list[Any]] = field(default_factory=list)
    kind: TableKind = TableKind.DB
    header: DBHeader | LocHeader = field(default_factory=DBHeader)

    @property
    def table_name(self) -> str:
        return self.definition.table_name

    @property
    def version(self) -> int:
        return self.definition.version

    @property
    def row_count(self) -> int:
        return len(self.rows)

    # -- lookup ------------------------------------------------------------

    def column_index(self, column: int | str) -> int:
        if isinstance(column, str):
            index = self.definition.index_of(column)
            if index is None:
                raise NotFound(f"{self.table_name}.{column}")
            return index
        if not 0 <= column < len(self.definition.fields):
            raise NotFound(f"{self.table_name}[column {column}]")
        return column

    def _check_row(self, row: int) -> None:
        if not 0 <= row < len(self.rows):
            raise NotFound(f"{self.table_name}[row {row}]")

    def get_row(self, row: int) -> list[Any]:
        self._check_row(row)
        return list(self.rows[row])

    def get_cell(self, row: int, column: int | str) -> CellValue:
        self._check_row(row)
        return self.rows[row][self.column_index(column)]

    def find_key(self, *key: CellValue) -> int | None:
        """Index of the first row whose key column(s) equal *key*."""
        indices = self.definition.key_indices or [0]
        for i, row in enumerate(self.rows):
            if tuple(row[c] for c in indices) == key:
                return i
        return None

    def as_dicts(self) -> list[dict[str, Any]]:
        names = self.definition.field_names
        return [dict(zip(names, row)) for row in self.rows]

    # -- edits -------------------------------------------------------------

    def set_cell(self, row: int, column: int | str, value: Any) -> None:
        """Replace one cell.  The row is untouched if *value* does not fit."""
        self._check_row(row)
        index = self.column_index(column)
        stored = validate_cell(self.definition.fields[index], value)
        self.rows[row][index] = stored

    def default_row(self) -> list[CellValue]:
        return [default_cell(f) for f in self.definition.fields]

    def insert_row(self, at_index: int, row: Sequence[Any] | None = None) -> None:
        if not 0 <= at_index <= len(self.rows):
            raise NotFound(f"{self.table_name}[row {at_index}]")
        values = self.default_row() if row is None else validate_row(self.definition, row)
        self.rows.insert(at_index, values)

    def append_row(self, row: Sequence[Any] | None = None) -> None:
        self.insert_row(len(self.rows), row)

    def delete_row(self, row: int) -> list[Any]:
        self._check_row(row)
        return self.rows.pop(row)

    def move_row(self, source: int, destination: int) -> None:
        self._check_row(source)
        self._check_row(destination)
        self.rows.insert(destination, self.rows.pop(source))

    def apply_edits(self, edits: Sequence[tuple[int, int | str, Any]]) -> None:
        """Apply several ``(row, column, value)`` edits, all or nothing."""
        staged = [list(r) for r in self.rows]
        for row, column, value in edits:
            self._check_row(row)
            index = self.column_index(column)
            staged[row][index] = validate_cell(self.definition.fields[index], value)
        self.rows = staged

