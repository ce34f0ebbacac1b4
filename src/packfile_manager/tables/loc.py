"""Localisation (Loc) codec.

Loc entries use a built-in layout that has not changed across games::

    [FF FE] "LOC" [00] [u32 version] [u32 row count]
    rows: key string_u16, text string_u16, tooltip boolean

Some tools write loc tables without the tooltip column; those decode with
``with_tooltip=False``.
"""

from __future__ import annotations

from packfile_manager.archive.cursor import ByteReader, ByteWriter
from packfile_manager.errors import CorruptEntry, OutOfBounds
from packfile_manager.tables.cells import read_rows, write_rows
from packfile_manager.tables.schema import FieldDef, FieldKind, SchemaVersion
from packfile_manager.tables.table import LocHeader, Table, TableKind

LOC_MAGIC = b"\xff\xfeLOC\x00"
LOC_VERSION = 1
LOC_TABLE_NAME = "loc"

LOC_DEFINITION = SchemaVersion(
    table_name=LOC_TABLE_NAME,
    version=LOC_VERSION,
    fields=(
        FieldDef(name="key", kind=FieldKind.STRING_U16, is_key=True),
        FieldDef(name="text", kind=FieldKind.STRING_U16),
        FieldDef(name="tooltip", kind=FieldKind.BOOLEAN, default=True),
    ),
)

LOC_DEFINITION_NO_TOOLTIP = SchemaVersion(
    table_name=LOC_TABLE_NAME,
    version=LOC_VERSION,
    fields=LOC_DEFINITION.fields[:2],
)


def loc_definition(with_tooltip: bool = True) -> SchemaVersion:
    return LOC_DEFINITION if with_tooltip else LOC_DEFINITION_NO_TOOLTIP


def is_loc_payload(data: bytes | memoryview) -> bool:
    return bytes(data[: len(LOC_MAGIC)]) == LOC_MAGIC


def decode_loc(
    data: bytes | memoryview,
    *,
    with_tooltip: bool = True,
    path: str | None = None,
) -> Table:
    """Decode a Loc entry.

    Raises:
        CorruptEntry: missing magic or incomplete header.
        MalformedRow: a row cannot be read with the chosen layout.
    """
    if not is_loc_payload(data):
        raise CorruptEntry(path, "not a Loc payload (bad magic)")
    reader = ByteReader(data)
    reader.skip(len(LOC_MAGIC))
    try:
        version = reader.read_u32()
        row_count = reader.read_u32()
    except OutOfBounds as exc:
        raise CorruptEntry(path, f"Loc header is incomplete: {exc}") from exc
    definition = loc_definition(with_tooltip)
    rows = read_rows(reader, definition, row_count)
    return Table(
        definition=definition,
        rows=rows,
        kind=TableKind.LOC,
        header=LocHeader(version=version),
    )


def encode_loc(table: Table) -> bytes:
    version = table.header.version if isinstance(table.header, LocHeader) else LOC_VERSION
    writer = ByteWriter()
    writer.write_bytes(LOC_MAGIC)
    writer.write_u32(version)
    writer.write_u32(table.row_count)
    write_rows(writer, table.definition, table.rows)
    return writer.getvalue()


def new_loc_table(*, with_tooltip: bool = True) -> Table:
    return Table(
        definition=loc_definition(with_tooltip),
        kind=TableKind.LOC,
        header=LocHeader(version=LOC_VERSION),
    )
