"""Tests for the localisation codec."""

from __future__ import annotations

import struct

import pytest

from packfile_manager.errors import CorruptEntry, MalformedRow
from packfile_manager.tables.loc import LOC_MAGIC, decode_loc, encode_loc, new_loc_table
from packfile_manager.tables.table import LocHeader, TableKind


class TestDecodeLoc:
    def test_rows(self, loc_payload):
        table = decode_loc(loc_payload([("key_a", "Hello", True), ("key_b", "World", False)]))
        assert table.kind == TableKind.LOC
        assert table.rows == [["key_a", "Hello", True], ["key_b", "World", False]]
        assert table.definition.field_names == ["key", "text", "tooltip"]
        assert table.header == LocHeader(version=1)

    def test_re_encode_is_identical(self, loc_payload):
        payload = loc_payload([("k", "Grüße", True)])
        assert encode_loc(decode_loc(payload)) == payload

    def test_bad_magic(self):
        with pytest.raises(CorruptEntry, match="bad magic"):
            decode_loc(b"NOTALOC" + b"\x00" * 8, path="text/db/x.loc")

    def test_incomplete_header(self):
        with pytest.raises(CorruptEntry, match="incomplete"):
            decode_loc(LOC_MAGIC + b"\x01\x00")

    def test_truncated_row(self, loc_payload):
        payload = loc_payload([("key_a", "Hello", True)])
        with pytest.raises(MalformedRow) as exc_info:
            decode_loc(payload[:-1])
        assert exc_info.value.row_index == 0
        assert exc_info.value.field_name == "tooltip"

    def test_two_field_layout(self):
        payload = LOC_MAGIC + struct.pack("<II", 1, 1)
        for value in ("key_a", "Hello"):
            payload += struct.pack("<H", len(value)) + value.encode("utf-16-le")
        table = decode_loc(payload, with_tooltip=False)
        assert table.rows == [["key_a", "Hello"]]
        assert encode_loc(table) == payload


class TestLocEditing:
    def test_find_key(self, loc_payload):
        table = decode_loc(loc_payload([("key_a", "Hello", True), ("key_b", "World", True)]))
        assert table.find_key("key_b") == 1
        assert table.find_key("key_z") is None

    def test_new_table(self):
        table = new_loc_table()
        assert encode_loc(table) == LOC_MAGIC + struct.pack("<II", 1, 0)
        table.append_row()
        assert table.rows == [["", "", True]]
