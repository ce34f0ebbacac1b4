"""DB table codec.

Layout of a DB entry::

    [FD FE FC FF][string_u16 guid]     optional GUID block
    [FC FD FE FF][u32 version]         optional version block, absent means v0
    [u8 marker]                        1 in every known table, kept as read
    [u32 row count]
    rows                               cells in definition order

The table name is not stored in the payload; it comes from the entry path
(``db/<table_name>/<file>``).
"""

from __future__ import annotations

from packfile_manager.archive.cursor import ByteReader, ByteWriter
from packfile_manager.constants import DB_FOLDER
from packfile_manager.errors import CorruptEntry, OutOfBounds
from packfile_manager.tables.cells import read_rows, write_rows
from packfile_manager.tables.registry import SchemaRegistry
from packfile_manager.tables.schema import SchemaVersion
from packfile_manager.tables.table import DBHeader, Table, TableKind

GUID_MARKER = b"\xfd\xfe\xfc\xff"
VERSION_MARKER = b"\xfc\xfd\xfe\xff"


def table_name_from_path(path: tuple[str, ...]) -> str | None:
    """``("db", "units_tables", "data__")`` -> ``"units_tables"``."""
    if len(path) == 3 and path[0].lower() == DB_FOLDER:
        return path[1]
    return None


def read_db_header(reader: ByteReader, *, path: str | None = None) -> tuple[DBHeader, int]:
    """Read the header.  Returns ``(header, row_count)``."""
    header = DBHeader()
    try:
        if reader.peek(4) == GUID_MARKER:
            reader.skip(4)
            header.guid = reader.read_string_u16()
        if reader.peek(4) == VERSION_MARKER:
            reader.skip(4)
            header.has_version_marker = True
            header.version = reader.read_u32()
        header.marker = reader.read_u8()
        row_count = reader.read_u32()
    except (OutOfBounds, UnicodeDecodeError) as exc:
        raise CorruptEntry(path, f"DB header is incomplete: {exc}") from exc
    return header, row_count


def decode_db(
    data: bytes | memoryview,
    table_name: str,
    registry: SchemaRegistry,
    *,
    path: str | None = None,
) -> Table:
    """Decode a DB entry, resolving its definition from the header version.

    Raises:
        CorruptEntry: header cannot be read.
        UnknownSchema: no usable definition for this table/version.
        MalformedRow: a row does not match the definition.
    """
    reader = ByteReader(data)
    header, row_count = read_db_header(reader, path=path)
    definition = registry.lookup(table_name, header.version)
    rows = read_rows(reader, definition, row_count)
    return Table(definition=definition, rows=rows, kind=TableKind.DB, header=header)


def decode_db_with(
    data: bytes | memoryview,
    definition: SchemaVersion,
    *,
    path: str | None = None,
) -> Table:
    """Decode a DB entry with an explicit definition, ignoring the header version."""
    reader = ByteReader(data)
    header, row_count = read_db_header(reader, path=path)
    rows = read_rows(reader, definition, row_count)
    return Table(definition=definition, rows=rows, kind=TableKind.DB, header=header)


def encode_db(table: Table) -> bytes:
    header = table.header if isinstance(table.header, DBHeader) else DBHeader()
    writer = ByteWriter()
    if header.guid is not None:
        writer.write_bytes(GUID_MARKER)
        writer.write_string_u16(header.guid, name="guid")
    if header.has_version_marker:
        writer.write_bytes(VERSION_MARKER)
        writer.write_u32(header.version)
    writer.write_u8(header.marker)
    writer.write_u32(table.row_count)
    write_rows(writer, table.definition, table.rows)
    return writer.getvalue()


def new_db_table(definition: SchemaVersion) -> Table:
    """Empty table ready to be filled and committed as a new entry."""
    return Table(
        definition=definition,
        kind=TableKind.DB,
        header=DBHeader(has_version_marker=definition.version > 0, version=definition.version),
    )
