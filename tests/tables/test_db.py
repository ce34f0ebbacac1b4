"""Tests for the DB table codec."""

from __future__ import annotations

import struct

import pytest

from packfile_manager.errors import CorruptEntry, MalformedRow, UnknownSchema
from packfile_manager.tables.db import (
    GUID_MARKER,
    decode_db,
    decode_db_with,
    encode_db,
    new_db_table,
    table_name_from_path,
)
from packfile_manager.tables.schema import FieldDef, FieldKind, SchemaVersion
from packfile_manager.tables.table import DBHeader, TableKind

ROWS = [("unit_a", 10, 1.5), ("unit_b", -3, 0.25), ("unit_c", 700, 12.0)]

BANNERS = SchemaVersion(
    table_name="banners_tables",
    version=0,
    fields=(
        FieldDef(name="colour", kind=FieldKind.COLOUR_RGB),
        FieldDef(name="is_default", kind=FieldKind.BOOLEAN),
    ),
)


def banners_payload(*cells: bytes) -> bytes:
    """Version-less DB payload with one ``banners_tables`` row."""
    return b"\x01" + struct.pack("<I", 1) + b"".join(cells)


class TestDecodeDb:
    def test_rows_are_typed(self, registry, db_payload):
        table = decode_db(db_payload(ROWS), "units_tables", registry)
        assert table.kind == TableKind.DB
        assert table.version == 1
        assert table.rows == [list(row) for row in ROWS]
        assert table.header.has_version_marker
        assert table.header.guid is None

    def test_re_encode_is_identical(self, registry, db_payload):
        payload = db_payload(ROWS)
        assert encode_db(decode_db(payload, "units_tables", registry)) == payload

    def test_guid_block_is_preserved(self, registry, db_payload):
        guid = "5d4c3b2a-0000-1111-2222-333344445555"
        payload = GUID_MARKER + struct.pack("<H", len(guid)) + guid.encode("utf-16-le")
        payload += db_payload(ROWS)
        table = decode_db(payload, "units_tables", registry)
        assert table.header.guid == guid
        assert encode_db(table) == payload

    def test_fallback_version_keeps_declared_header(self, registry, db_payload):
        payload = db_payload(ROWS, version=2)
        table = decode_db(payload, "units_tables", registry)
        assert table.definition.version == 1
        assert table.header.version == 2
        assert encode_db(table) == payload

    def test_missing_version_block_means_version_zero(self, registry):
        payload = b"\x01" + struct.pack("<I", 0)
        with pytest.raises(UnknownSchema) as exc_info:
            decode_db(payload, "units_tables", registry)
        assert exc_info.value.version == 0

    def test_fewer_rows_than_declared(self, registry, db_payload):
        payload = db_payload(ROWS)
        declared_five = payload[:9] + struct.pack("<I", 5) + payload[13:]
        with pytest.raises(MalformedRow) as exc_info:
            decode_db(declared_five, "units_tables", registry)
        assert exc_info.value.row_index == 3
        assert exc_info.value.field_name == "key"

    def test_trailing_bytes(self, registry, db_payload):
        with pytest.raises(MalformedRow) as exc_info:
            decode_db(db_payload(ROWS) + b"\x00", "units_tables", registry)
        assert exc_info.value.row_index == 3
        assert exc_info.value.field_name is None

    def test_incomplete_header(self, registry):
        with pytest.raises(CorruptEntry, match="header is incomplete"):
            decode_db(b"\x01\x00", "units_tables", registry, path="db/units_tables/x")

    def test_explicit_definition(self, units_v1, db_payload):
        table = decode_db_with(db_payload(ROWS, version=7), units_v1)
        assert table.row_count == 3
        assert table.header.version == 7


class TestEncodeDb:
    def test_new_table_round_trip(self, registry, units_v3):
        table = new_db_table(units_v3)
        table.append_row(["unit_x", 5, 2.5, None, False])
        table.append_row(["unit_y", 6, 0.5, "Heavy cavalry", True])

        decoded = decode_db(encode_db(table), "units_tables", registry)
        assert decoded.definition is units_v3
        assert decoded.rows == table.rows

    def test_version_zero_has_no_version_block(self, units_v1):
        definition = units_v1.model_copy(update={"version": 0})
        table = new_db_table(definition)
        assert encode_db(table) == b"\x01" + struct.pack("<I", 0)

    def test_header_marker_is_kept(self, units_v1):
        table = new_db_table(units_v1)
        table.header = DBHeader(has_version_marker=True, version=1, marker=0)
        assert encode_db(table)[8] == 0


class TestTableNameFromPath:
    def test_db_path(self):
        assert table_name_from_path(("db", "units_tables", "data__")) == "units_tables"

    def test_other_paths(self):
        assert table_name_from_path(("text", "db", "x.loc")) is None
        assert table_name_from_path(("db", "units_tables")) is None


class TestCellBytes:
    def test_colour_with_high_byte_round_trips(self):
        payload = banners_payload(struct.pack("<I", 0xFF112233), b"\x01")
        table = decode_db_with(payload, BANNERS)
        assert table.rows == [[0xFF112233, True]]
        assert encode_db(table) == payload

    def test_boolean_byte_other_than_zero_or_one(self):
        payload = banners_payload(struct.pack("<I", 0x112233), b"\x02")
        with pytest.raises(MalformedRow) as exc_info:
            decode_db_with(payload, BANNERS)
        assert exc_info.value.row_index == 0
        assert exc_info.value.field_name == "is_default"
