"""Schemas for decoded DB and Loc tables."""

from typing import Any

from pydantic import BaseModel

from packfile_manager.tables.schema import FieldKind
from packfile_manager.tables.table import TableKind


class FieldOut(BaseModel):
    name: str
    kind: FieldKind
    is_key: bool
    max_length: int | None = None
    description: str = ""
    enum_values: list[str] = []
    reference: str | None = None


class TableOut(BaseModel):
    path: str
    kind: TableKind
    table_name: str
    version: int
    fields: list[FieldOut]
    rows: list[list[Any]]
    display_rows: list[list[str]]
    row_count: int


class CellEdit(BaseModel):
    row: int
    field: int | str
    value: Any = None

