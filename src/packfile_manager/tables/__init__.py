from packfile_manager.tables.db import decode_db, decode_db_with, encode_db, new_db_table
from packfile_manager.tables.loc import decode_loc, encode_loc, new_loc_table
from packfile_manager.tables.registry import SchemaRegistry, default_registry
from packfile_manager.tables.schema import FieldDef, FieldKind, SchemaVersion
from packfile_manager.tables.table import Table, TableKind

__all__ = [
    "FieldDef",
    "FieldKind",
    "SchemaRegistry",
    "SchemaVersion",
    "Table",
    "TableKind",
    "decode_db",
    "decode_db_with",
    "decode_loc",
    "default_registry",
    "encode_db",
    "encode_loc",
    "new_db_table",
    "new_loc_table",
]
