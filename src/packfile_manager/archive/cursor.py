"""Sequential, bounds-checked reader and writer over byte buffers.

Both the container codec and the table codecs go through these two classes,
so every short read surfaces as :class:`OutOfBounds` and every value that does
not fit its declared width surfaces as :class:`FieldTooLarge`.
"""

from __future__ import annotations

import struct
from typing import Literal

from packfile_manager.errors import FieldTooLarge, OutOfBounds

Endian = Literal["<", ">"]

_FORMATS = {
    "i8": "b",
    "u8": "B",
    "i16": "h",
    "u16": "H",
    "i32": "i",
    "u32": "I",
    "i64": "q",
    "u64": "Q",
    "f32": "f",
    "f64": "d",
}

_STRUCTS: dict[tuple[str, str], struct.Struct] = {
    (endian, name): struct.Struct(endian + code)
    for endian in ("<", ">")
    for name, code in _FORMATS.items()
}

_INT_RANGES = {
    "i8": (-(2**7), 2**7 - 1),
    "u8": (0, 2**8 - 1),
    "i16": (-(2**15), 2**15 - 1),
    "u16": (0, 2**16 - 1),
    "i32": (-(2**31), 2**31 - 1),
    "u32": (0, 2**32 - 1),
    "i64": (-(2**63), 2**63 - 1),
    "u64": (0, 2**64 - 1),
}


def int_range(kind: str) -> tuple[int, int]:
    """Return the inclusive ``(min, max)`` of an integer kind such as ``"i16"``."""
    return _INT_RANGES[kind]


class ByteReader:
    """Reads typed values from a buffer, advancing a position that starts at 0.

    The buffer is wrapped in a :class:`memoryview`, so :meth:`read_bytes`
    hands out slices without copying the underlying data.
    """

    __slots__ = ("_view", "_pos", "_endian")

    def __init__(self, data: bytes | bytearray | memoryview, *, endian: Endian = "<") -> None:
        self._view = memoryview(data).cast("B")
        self._pos = 0
        self._endian = endian

    def __len__(self) -> int:
        return len(self._view)

    # -- position ----------------------------------------------------------

    def tell(self) -> int:
        return self._pos

    def seek(self, position: int) -> None:
        if position < 0 or position > len(self._view):
            raise OutOfBounds(position, 0, len(self._view) - self._pos)
        self._pos = position

    def skip(self, count: int) -> None:
        self._require(count)
        self._pos += count

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._view)

    def _require(self, count: int) -> None:
        if count < 0 or self._pos + count > len(self._view):
            raise OutOfBounds(self._pos, count, self.remaining)

    # -- scalars -----------------------------------------------------------

    def _unpack(self, name: str) -> int | float:
        st = _STRUCTS[(self._endian, name)]
        self._require(st.size)
        (value,) = st.unpack_from(self._view, self._pos)
        self._pos += st.size
        return value

    def read_bool(self) -> bool:
        return self._unpack("u8") != 0

    def read_i8(self) -> int:
        return int(self._unpack("i8"))

    def read_u8(self) -> int:
        return int(self._unpack("u8"))

    def read_i16(self) -> int:
        return int(self._unpack("i16"))

    def read_u16(self) -> int:
        return int(self._unpack("u16"))

    def read_i32(self) -> int:
        return int(self._unpack("i32"))

    def read_u32(self) -> int:
        return int(self._unpack("u32"))

    def read_i64(self) -> int:
        return int(self._unpack("i64"))

    def read_u64(self) -> int:
        return int(self._unpack("u64"))

    def read_f32(self) -> float:
        return float(self._unpack("f32"))

    def read_f64(self) -> float:
        return float(self._unpack("f64"))

    def read_int(self, kind: str) -> int:
        """Read an integer by kind name (``"i8"`` .. ``"u64"``)."""
        return int(self._unpack(kind))

    # -- raw / strings -----------------------------------------------------

    def peek(self, count: int) -> bytes:
        """Return up to *count* upcoming bytes without advancing."""
        return bytes(self._view[self._pos : self._pos + count])

    def read_bytes(self, count: int) -> memoryview:
        self._require(count)
        chunk = self._view[self._pos : self._pos + count]
        self._pos += count
        return chunk

    def read_fixed_string(self, length: int) -> str:
        """Read a null-padded UTF-8 string occupying exactly *length* bytes."""
        raw = bytes(self.read_bytes(length))
        return raw.rstrip(b"\x00").decode("utf-8")

    def read_string_u8(self) -> str:
        """Read a UTF-8 string prefixed by its byte length as u16."""
        length = self.read_u16()
        return bytes(self.read_bytes(length)).decode("utf-8")

    def read_string_u16(self) -> str:
        """Read a UTF-16LE string prefixed by its character count as u16."""
        length = self.read_u16()
        return bytes(self.read_bytes(length * 2)).decode("utf-16-le")

    def read_cstring(self) -> str:
        """Read a null-terminated UTF-8 string, consuming the terminator."""
        end = self._pos
        view = self._view
        size = len(view)
        while end < size and view[end] != 0:
            end += 1
        if end >= size:
            raise OutOfBounds(self._pos, end - self._pos + 1, self.remaining)
        text = bytes(view[self._pos : end]).decode("utf-8")
        self._pos = end + 1
        return text


class ByteWriter:
    """Writes typed values at a position, appending past the end of the buffer."""

    __slots__ = ("_buf", "_pos", "_endian")

    def __init__(self, *, endian: Endian = "<") -> None:
        self._buf = bytearray()
        self._pos = 0
        self._endian = endian

    def __len__(self) -> int:
        return len(self._buf)

    def tell(self) -> int:
        return self._pos

    def seek(self, position: int) -> None:
        if position < 0 or position > len(self._buf):
            raise OutOfBounds(position, 0, len(self._buf) - self._pos)
        self._pos = position

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def write_bytes(self, data: bytes | bytearray | memoryview) -> None:
        end = self._pos + len(data)
        self._buf[self._pos : end] = data
        self._pos = end

    # -- scalars -----------------------------------------------------------

    def _pack(self, name: str, value: int | float) -> None:
        st = _STRUCTS[(self._endian, name)]
        if name in _INT_RANGES:
            lo, hi = _INT_RANGES[name]
            if not lo <= value <= hi:
                raise FieldTooLarge(name, st.size, (int(value).bit_length() + 7) // 8)
            self.write_bytes(st.pack(value))
            return
        try:
            packed = st.pack(value)
        except OverflowError as exc:
            raise FieldTooLarge(name, st.size, st.size * 2) from exc
        self.write_bytes(packed)

    def write_bool(self, value: bool) -> None:
        self._pack("u8", 1 if value else 0)

    def write_i8(self, value: int) -> None:
        self._pack("i8", value)

    def write_u8(self, value: int) -> None:
        self._pack("u8", value)

    def write_i16(self, value: int) -> None:
        self._pack("i16", value)

    def write_u16(self, value: int) -> None:
        self._pack("u16", value)

    def write_i32(self, value: int) -> None:
        self._pack("i32", value)

    def write_u32(self, value: int) -> None:
        self._pack("u32", value)

    def write_i64(self, value: int) -> None:
        self._pack("i64", value)

    def write_u64(self, value: int) -> None:
        self._pack("u64", value)

    def write_f32(self, value: float) -> None:
        self._pack("f32", value)

    def write_f64(self, value: float) -> None:
        self._pack("f64", value)

    def write_int(self, kind: str, value: int) -> None:
        self._pack(kind, value)

    # -- strings -----------------------------------------------------------

    def write_fixed_string(self, value: str, length: int, *, name: str = "fixed_string") -> None:
        raw = value.encode("utf-8")
        if len(raw) > length:
            raise FieldTooLarge(name, length, len(raw))
        self.write_bytes(raw.ljust(length, b"\x00"))

    def write_string_u8(self, value: str, *, name: str = "string_u8") -> None:
        raw = value.encode("utf-8")
        if len(raw) > 0xFFFF:
            raise FieldTooLarge(name, 0xFFFF, len(raw))
        self.write_u16(len(raw))
        self.write_bytes(raw)

    def write_string_u16(self, value: str, *, name: str = "string_u16") -> None:
        raw = value.encode("utf-16-le")
        chars = len(raw) // 2
        if chars > 0xFFFF:
            raise FieldTooLarge(name, 0xFFFF, chars)
        self.write_u16(chars)
        self.write_bytes(raw)

    def write_cstring(self, value: str) -> None:
        self.write_bytes(value.encode("utf-8"))
        self.write_bytes(b"\x00")
