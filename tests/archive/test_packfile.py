"""Tests for the PackFile container codec."""

from __future__ import annotations

import struct

import pytest

from packfile_manager.archive.compression import compress
from packfile_manager.archive.formats import (
    SEC_TO_UNIX_EPOCH,
    WINDOWS_TICK,
    PFHFileType,
    PFHFlags,
    PFHVersion,
)
from packfile_manager.archive.models import Archive, Entry, EntryKind
from packfile_manager.archive.packfile import (
    parse_packfile,
    read_packfile,
    serialize_packfile,
    write_packfile,
)
from packfile_manager.errors import TruncatedArchive, UnsupportedFormat


def build_packfile(
    entries: list[tuple[str, bytes]],
    *,
    preamble: bytes = b"PFH5",
    file_type: int = 3,
    flags: int = 0,
    timestamp: int = 1_500_000_000,
    dependencies: tuple[str, ...] = (),
    compressed: tuple[str, ...] = (),
) -> bytes:
    """Build a PackFile by hand for PFH0, PFH4 or PFH5, without timestamps in the index."""
    dep_index = b"".join(name.encode() + b"\x00" for name in dependencies)
    entry_index = b""
    for path, data in entries:
        entry_index += struct.pack("<I", len(data))
        if preamble == b"PFH5":
            entry_index += b"\x01" if path in compressed else b"\x00"
        entry_index += path.encode() + b"\x00"
    header = preamble + struct.pack(
        "<IIIII",
        flags | file_type,
        len(dependencies),
        len(dep_index),
        len(entries),
        len(entry_index),
    )
    if preamble != b"PFH0":
        header += struct.pack("<I", timestamp)
    return header + dep_index + entry_index + b"".join(data for _, data in entries)


class TestParsePackfile:
    def test_entries_in_index_order(self):
        data = build_packfile([("db\\units_tables\\data__", b"abc"), ("text\\db\\a.loc", b"xy")])
        archive = parse_packfile(data)

        assert archive.version == PFHVersion.PFH5
        assert archive.file_type == PFHFileType.MOD
        assert archive.timestamp == 1_500_000_000
        assert [e.path for e in archive.entries] == [
            ("db", "units_tables", "data__"),
            ("text", "db", "a.loc"),
        ]
        assert archive.entries[0].data == b"abc"
        assert archive.entries[0].kind == EntryKind.DB
        assert archive.entries[1].kind == EntryKind.LOC

    def test_dependencies(self):
        data = build_packfile([], dependencies=("data.pack", "models.pack"))
        assert parse_packfile(data).dependencies == ["data.pack", "models.pack"]

    def test_payloads_are_not_copied(self):
        data = build_packfile([("a.txt", b"hello")])
        entry = parse_packfile(data).entries[0]
        assert isinstance(entry.disk_bytes(), memoryview)

    def test_compressed_entry_is_decompressed_lazily(self):
        payload = compress(b"x" * 1000)
        data = build_packfile([("a.bin", payload)], compressed=("a.bin",))
        entry = parse_packfile(data).entries[0]
        assert entry.is_compressed
        assert entry.data == b"x" * 1000
        assert entry.data is entry.data

    def test_pfh0_has_no_timestamp(self):
        data = build_packfile([("a.txt", b"1")], preamble=b"PFH0")
        archive = parse_packfile(data)
        assert archive.version == PFHVersion.PFH0
        assert archive.timestamp == 0
        assert archive.entries[0].data == b"1"

    def test_pfh3_filetime_header(self):
        ticks = (1_400_000_000 + SEC_TO_UNIX_EPOCH) * WINDOWS_TICK
        data = (
            b"PFH3"
            + struct.pack("<IIIIIq", 3, 0, 0, 1, 6, ticks)
            + struct.pack("<I", 1)
            + b"a\x00"
            + b"z"
        )
        archive = parse_packfile(data)
        assert archive.timestamp == 1_400_000_000
        assert serialize_packfile(archive) == data

    def test_index_timestamps(self):
        data = (
            b"PFH4"
            + struct.pack("<IIIIII", 0x40 | 3, 0, 0, 1, 11, 7)
            + struct.pack("<II", 2, 1_234_567)
            + b"ab\x00"
            + b"hi"
        )
        archive = parse_packfile(data)
        assert archive.has_index_timestamps
        assert archive.entries[0].timestamp == 1_234_567
        assert serialize_packfile(archive) == data

    def test_unknown_flag_bits_are_kept(self):
        data = build_packfile([("a", b"1")], flags=0x1000)
        archive = parse_packfile(data)
        assert archive.flags & 0x1000
        assert serialize_packfile(archive) == data

    def test_header_too_short(self):
        with pytest.raises(TruncatedArchive, match="header is incomplete"):
            parse_packfile(b"PFH5\x00\x00")

    def test_unknown_preamble(self):
        with pytest.raises(UnsupportedFormat, match="PFH9"):
            parse_packfile(b"PFH9" + b"\x00" * 24)

    def test_encrypted_archive_is_unsupported(self):
        data = build_packfile([], flags=int(PFHFlags.HAS_ENCRYPTED_INDEX))
        with pytest.raises(UnsupportedFormat, match="encrypted"):
            parse_packfile(data)

    def test_truncated_payload_names_the_entry(self):
        data = build_packfile([("a.txt", b"12345"), ("b.txt", b"67890")])
        with pytest.raises(TruncatedArchive) as exc_info:
            parse_packfile(data[:-2])
        assert exc_info.value.path == "b.txt"

    def test_trailing_bytes_are_a_size_mismatch(self):
        data = build_packfile([("a.txt", b"12345")])
        with pytest.raises(TruncatedArchive, match="entries account for"):
            parse_packfile(data + b"junk")

    def test_truncated_index(self):
        data = build_packfile([("some\\long\\path.txt", b"1")])
        with pytest.raises(TruncatedArchive, match="indexes are incomplete"):
            parse_packfile(data[:30])


class TestSerializePackfile:
    def test_unedited_archive_is_bit_identical(self):
        payload = compress(b"compressed " * 50)
        data = build_packfile(
            [("db\\a_tables\\x", b"\x01\x00\x00\x00\x00"), ("b.bin", payload)],
            dependencies=("parent.pack",),
            compressed=("b.bin",),
        )
        assert serialize_packfile(parse_packfile(data)) == data

    def test_counts_and_sizes_are_recomputed(self):
        archive = parse_packfile(build_packfile([("a.txt", b"old")]))
        archive.entries[0].set_data(b"new and longer")
        archive.entries.append(Entry.from_data(("b.txt",), b"b"))

        reparsed = parse_packfile(serialize_packfile(archive))
        assert [(e.display_path, e.data) for e in reparsed.entries] == [
            ("a.txt", b"new and longer"),
            ("b.txt", b"b"),
        ]

    def test_sort_entries_case_insensitively(self):
        archive = Archive(
            entries=[
                Entry.from_data(("b",), b"2"),
                Entry.from_data(("A",), b"1"),
                Entry.from_data(("c",), b"3"),
            ]
        )
        reparsed = parse_packfile(serialize_packfile(archive, sort_entries=True))
        assert [e.display_path for e in reparsed.entries] == ["A", "b", "c"]
        assert [e.display_path for e in archive.entries] == ["b", "A", "c"]

    def test_edited_compressed_entry_is_recompressed(self):
        archive = Archive(entries=[Entry.from_data(("a.bin",), b"z" * 500, is_compressed=True)])
        data = serialize_packfile(archive)
        entry = parse_packfile(data).entries[0]
        assert entry.is_compressed
        assert len(entry.disk_bytes()) < 500
        assert entry.data == b"z" * 500

    def test_compressed_entry_needs_compression_flag(self):
        archive = Archive(
            version=PFHVersion.PFH4,
            entries=[Entry.from_data(("a.bin",), b"z", is_compressed=True)],
        )
        with pytest.raises(UnsupportedFormat, match="PFH4"):
            serialize_packfile(archive)

    def test_timestamp_override(self):
        archive = Archive(timestamp=5)
        assert parse_packfile(serialize_packfile(archive, timestamp=99)).timestamp == 99
        assert archive.timestamp == 5

    def test_extended_header_is_preserved(self):
        extra = bytes(range(20))
        archive = Archive(flags=PFHFlags.HAS_EXTENDED_HEADER, extended_header=extra)
        data = serialize_packfile(archive)
        assert len(data) == 48
        assert parse_packfile(data).extended_header == extra

    def test_empty_archive_round_trip(self):
        archive = parse_packfile(serialize_packfile(Archive()))
        assert archive.entries == []
        assert archive.version == PFHVersion.PFH5


class TestFilesystemHelpers:
    def test_write_then_read(self, tmp_path):
        target = tmp_path / "mod.pack"
        archive = Archive(entries=[Entry.from_data(("x", "y.txt"), b"hello")])
        size = write_packfile(archive, target)
        assert size == target.stat().st_size
        assert read_packfile(target).entries[0].data == b"hello"
