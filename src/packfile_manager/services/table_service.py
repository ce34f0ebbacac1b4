"""Decode and encode dispatch between entries and tables."""

from __future__ import annotations

from packfile_manager.archive.models import Entry, EntryKind
from packfile_manager.errors import UnsupportedFormat
from packfile_manager.tables.db import decode_db, encode_db, table_name_from_path
from packfile_manager.tables.loc import decode_loc, encode_loc
from packfile_manager.tables.registry import SchemaRegistry
from packfile_manager.tables.table import Table, TableKind


def decode_entry_table(
    entry: Entry,
    registry: SchemaRegistry,
    *,
    with_tooltip: bool = True,
) -> Table:
    """Decode *entry* as a DB or Loc table, chosen by its path."""
    path = entry.display_path
    if entry.kind == EntryKind.LOC:
        return decode_loc(entry.data, with_tooltip=with_tooltip, path=path)
    table_name = table_name_from_path(entry.path)
    if table_name is None:
        raise UnsupportedFormat(f"{path} is a {entry.kind} entry, not a DB or Loc table")
    return decode_db(entry.data, table_name, registry, path=path)


def encode_table(table: Table) -> bytes:
    match table.kind:
        case TableKind.DB:
            return encode_db(table)
        case TableKind.LOC:
            return encode_loc(table)
