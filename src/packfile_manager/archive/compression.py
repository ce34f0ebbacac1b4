"""LZMA compression for PackFile entry payloads.

Compressed entries store a u32 with the uncompressed size followed by a
``.lzma`` (LZMA-alone) stream whose 8-byte size field has been removed::

    [u32 uncompressed size][5 bytes LZMA properties][LZMA stream]

Both functions are pure; caching of decompressed payloads lives on the entry.
"""

from __future__ import annotations

import lzma
import struct

from packfile_manager.errors import CorruptEntry

_SIZE_PREFIX = struct.Struct("<I")
_ALONE_SIZE = struct.Struct("<Q")
_PROPS_SIZE = 5
_UNKNOWN_SIZE = 0xFFFF_FFFF_FFFF_FFFF
_HEADER_SIZE = _SIZE_PREFIX.size + _PROPS_SIZE


def compress(data: bytes | bytearray | memoryview) -> bytes:
    """Compress *data* into the entry payload layout."""
    stream = lzma.compress(bytes(data), format=lzma.FORMAT_ALONE, preset=3)
    # Alone header: props (5) + u64 size (8); drop the size and prefix a u32 one.
    return _SIZE_PREFIX.pack(len(data)) + stream[:_PROPS_SIZE] + stream[_PROPS_SIZE + 8 :]


def decompress(data: bytes | bytearray | memoryview, *, path: str | None = None) -> bytes:
    """Decompress an entry payload, raising :class:`CorruptEntry` on failure."""
    if len(data) < _HEADER_SIZE:
        raise CorruptEntry(path, f"compressed payload too short ({len(data)} bytes)")

    view = memoryview(data)
    (expected,) = _SIZE_PREFIX.unpack_from(view, 0)
    props = bytes(view[_SIZE_PREFIX.size : _HEADER_SIZE])

    # Game files are written without an end marker, so the size is declared as
    # unknown and the output is cut at the size from the prefix.
    decompressor = lzma.LZMADecompressor(format=lzma.FORMAT_ALONE)
    try:
        output = decompressor.decompress(props + _ALONE_SIZE.pack(_UNKNOWN_SIZE))
        output += decompressor.decompress(view[_HEADER_SIZE:])
    except lzma.LZMAError as exc:
        raise CorruptEntry(path, f"LZMA stream could not be decoded: {exc}") from exc

    if len(output) < expected:
        raise CorruptEntry(
            path, f"decompressed to {len(output)} bytes, header declares {expected}"
        )
    return output[:expected]


def declared_size(data: bytes | bytearray | memoryview) -> int | None:
    """Uncompressed size from the payload prefix, or ``None`` if it is missing."""
    if len(data) < _SIZE_PREFIX.size:
        return None
    return _SIZE_PREFIX.unpack_from(data, 0)[0]
