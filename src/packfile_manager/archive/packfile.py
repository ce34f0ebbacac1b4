"""PackFile container codec.

Layout (all little-endian)::

    header            24-byte prefix + per-version tail (see ``formats``)
    dependency index  null-terminated pack names
    entry index       per entry: u32 size [+ timestamp] [+ u8 compressed] + path\\0
    payloads          entry payloads back to back, in index order

Parsing never copies payloads: each entry keeps a ``memoryview`` slice of the
input buffer until it is edited.
"""

from __future__ import annotations

from pathlib import Path

from packfile_manager.archive.cursor import ByteReader, ByteWriter
from packfile_manager.archive.formats import (
    BASE_HEADER_SIZE,
    FormatProfile,
    PFHFlags,
    TimestampKind,
    from_filetime,
    get_profile,
    join_flag_word,
    split_flag_word,
    to_filetime,
)
from packfile_manager.archive.models import Archive, Entry
from packfile_manager.errors import OutOfBounds, TruncatedArchive, UnsupportedFormat
from packfile_manager.utils.paths import DISK_SEPARATOR, join_entry_path, path_key

_ENCRYPTED = PFHFlags.HAS_ENCRYPTED_INDEX | PFHFlags.HAS_ENCRYPTED_DATA


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def _read_timestamp(reader: ByteReader, kind: TimestampKind) -> int:
    match kind:
        case TimestampKind.NONE:
            return 0
        case TimestampKind.FILETIME:
            return from_filetime(reader.read_i64())
        case TimestampKind.UNIX:
            return reader.read_u32()


def _write_timestamp(writer: ByteWriter, kind: TimestampKind, seconds: int) -> None:
    match kind:
        case TimestampKind.NONE:
            return
        case TimestampKind.FILETIME:
            writer.write_i64(to_filetime(seconds))
        case TimestampKind.UNIX:
            writer.write_u32(seconds)


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


def parse_packfile(data: bytes | bytearray | memoryview) -> Archive:
    """Decode a whole PackFile from *data*.

    Raises:
        UnsupportedFormat: unknown preamble, unknown type or encrypted PackFile.
        TruncatedArchive: header, indexes or payloads shorter than declared,
            or trailing bytes after the last payload.
    """
    view = memoryview(data).cast("B")
    total = len(view)
    if total < BASE_HEADER_SIZE:
        raise TruncatedArchive(f"header is incomplete ({total} bytes)")

    reader = ByteReader(view)
    profile = get_profile(reader.read_bytes(4))
    file_type, flags = split_flag_word(reader.read_u32())
    if flags & _ENCRYPTED:
        raise UnsupportedFormat("encrypted PackFiles cannot be opened")

    dependency_count = reader.read_u32()
    dependency_index_size = reader.read_u32()
    entry_count = reader.read_u32()
    entry_index_size = reader.read_u32()

    header_size = profile.header_size(flags)
    if total < header_size:
        raise TruncatedArchive(f"header is incomplete ({total} of {header_size} bytes)")
    timestamp = _read_timestamp(reader, profile.header_timestamp)
    extended_header = bytes(reader.read_bytes(header_size - reader.tell()))

    index_end = header_size + dependency_index_size + entry_index_size
    if total < index_end:
        raise TruncatedArchive(f"indexes are incomplete ({total} of {index_end} bytes)")

    dependencies = _parse_dependency_index(
        view[header_size : header_size + dependency_index_size], dependency_count
    )
    archive = Archive(
        version=profile.version,
        file_type=file_type,
        flags=flags,
        timestamp=timestamp,
        dependencies=dependencies,
        extended_header=extended_header,
    )

    index = ByteReader(view[header_size + dependency_index_size : index_end])
    data_position = index_end
    for i in range(entry_count):
        size, entry_timestamp, is_compressed, path = _parse_index_record(index, profile, flags, i)
        if data_position + size > total:
            raise TruncatedArchive(
                f"entry declares {size} bytes but only {total - data_position} remain",
                path=join_entry_path(path),
            )
        archive.entries.append(
            Entry.from_disk(
                path,
                view[data_position : data_position + size],
                is_compressed=is_compressed,
                timestamp=entry_timestamp,
            )
        )
        data_position += size

    if data_position != total:
        raise TruncatedArchive(
            f"PackFile is {total} bytes but its entries account for {data_position}"
        )
    return archive


def _parse_dependency_index(view: memoryview, count: int) -> list[str]:
    reader = ByteReader(view)
    try:
        return [reader.read_cstring() for _ in range(count)]
    except (OutOfBounds, UnicodeDecodeError) as exc:
        raise TruncatedArchive(f"dependency index is damaged: {exc}") from exc


def _parse_index_record(
    index: ByteReader,
    profile: FormatProfile,
    flags: PFHFlags,
    position: int,
) -> tuple[int, int, bool, tuple[str, ...]]:
    try:
        size = index.read_u32()
        timestamp = 0
        if flags & PFHFlags.HAS_INDEX_WITH_TIMESTAMPS:
            timestamp = _read_timestamp(index, profile.index_timestamp)
        is_compressed = index.read_bool() if profile.has_compression_flag else False
        raw_path = index.read_cstring()
    except (OutOfBounds, UnicodeDecodeError) as exc:
        raise TruncatedArchive(f"entry index is damaged at record {position}: {exc}") from exc
    segments = tuple(raw_path.split(DISK_SEPARATOR))
    if not raw_path or any(not s for s in segments):
        raise TruncatedArchive(f"entry index record {position} has an invalid path {raw_path!r}")
    return size, timestamp, is_compressed, segments


# ---------------------------------------------------------------------------
# Serialize
# ---------------------------------------------------------------------------


def serialize_packfile(
    archive: Archive,
    *,
    sort_entries: bool = False,
    timestamp: int | None = None,
) -> bytes:
    """Encode *archive* to PackFile bytes.

    Counts and sizes are recomputed from the current payloads.  The index and
    the payload region are written from the same ordered list, optionally
    sorted case-insensitively by path, so they can never disagree.
    """
    profile = get_profile(archive.version)
    if archive.is_encrypted:
        raise UnsupportedFormat("encrypted PackFiles cannot be written")

    entries = list(archive.entries)
    if sort_entries:
        entries.sort(key=lambda e: path_key(e.path))

    dependency_index = ByteWriter()
    for name in archive.dependencies:
        dependency_index.write_cstring(name)

    entry_index = ByteWriter()
    payloads: list[bytes | memoryview] = []
    for entry in entries:
        if entry.is_compressed and not profile.has_compression_flag:
            raise UnsupportedFormat(
                f"{profile.version} PackFiles cannot hold compressed entries "
                f"({entry.display_path})"
            )
        payload = entry.disk_bytes()
        entry_index.write_u32(len(payload))
        if archive.has_index_timestamps:
            _write_timestamp(entry_index, profile.index_timestamp, entry.timestamp)
        if profile.has_compression_flag:
            entry_index.write_bool(entry.is_compressed)
        entry_index.write_cstring(join_entry_path(entry.path, DISK_SEPARATOR))
        payloads.append(payload)

    header = ByteWriter()
    header.write_bytes(profile.preamble)
    header.write_u32(join_flag_word(archive.file_type, archive.flags))
    header.write_u32(len(archive.dependencies))
    header.write_u32(len(dependency_index))
    header.write_u32(len(entries))
    header.write_u32(len(entry_index))
    _write_timestamp(
        header,
        profile.header_timestamp,
        archive.timestamp if timestamp is None else timestamp,
    )
    extended_size = profile.header_size(archive.flags) - len(header)
    if extended_size:
        header.write_bytes(archive.extended_header[:extended_size].ljust(extended_size, b"\x00"))

    return b"".join(
        [header.getvalue(), dependency_index.getvalue(), entry_index.getvalue(), *payloads]
    )


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def read_packfile(file_path: str | Path) -> Archive:
    """Read a ``.pack`` file from disk and parse it."""
    return parse_packfile(Path(file_path).read_bytes())


def write_packfile(archive: Archive, file_path: str | Path, **kwargs: object) -> int:
    """Serialize *archive* to *file_path*.  Returns the number of bytes written."""
    payload = serialize_packfile(archive, **kwargs)  # type: ignore[arg-type]
    Path(file_path).write_bytes(payload)
    return len(payload)
