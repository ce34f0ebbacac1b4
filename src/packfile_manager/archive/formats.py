"""PackFile header variants ("PFH" versions) and their layout profiles.

Every PackFile starts with the same 24-byte prefix::

    preamble[4] | u32 flags+type | u32 dependency count | u32 dependency index size
    | u32 entry count | u32 entry index size

What follows (archive timestamp, extended header) and the shape of each entry
index record depend on the preamble.  Each variant is described by a
:class:`FormatProfile` so the container codec never branches on version names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag, StrEnum

from packfile_manager.errors import UnsupportedFormat

BASE_HEADER_SIZE = 24
FILE_TYPE_MASK = 0xF

WINDOWS_TICK = 10_000_000
SEC_TO_UNIX_EPOCH = 11_644_473_600


class PFHVersion(StrEnum):
    PFH0 = "PFH0"
    PFH2 = "PFH2"
    PFH3 = "PFH3"
    PFH4 = "PFH4"
    PFH5 = "PFH5"


class PFHFileType(IntEnum):
    """Low 4 bits of the flag word: who the PackFile belongs to."""

    BOOT = 0
    RELEASE = 1
    PATCH = 2
    MOD = 3
    MOVIE = 4

    @property
    def is_game_file(self) -> bool:
        return self in (PFHFileType.BOOT, PFHFileType.RELEASE, PFHFileType.PATCH)


class PFHFlags(IntFlag):
    """High bits of the flag word.  Unknown bits are kept as-is."""

    HAS_ENCRYPTED_DATA = 0x10
    HAS_INDEX_WITH_TIMESTAMPS = 0x40
    HAS_ENCRYPTED_INDEX = 0x80
    HAS_EXTENDED_HEADER = 0x100


class TimestampKind(StrEnum):
    NONE = "none"
    FILETIME = "filetime"  # i64, 100ns ticks since 1601
    UNIX = "unix"  # u32, seconds since 1970


@dataclass(frozen=True, slots=True)
class FormatProfile:
    version: PFHVersion
    header_timestamp: TimestampKind
    index_timestamp: TimestampKind
    has_compression_flag: bool
    extended_header_size: int = 0

    @property
    def preamble(self) -> bytes:
        return self.version.value.encode("ascii")

    def header_size(self, flags: PFHFlags) -> int:
        size = BASE_HEADER_SIZE + _TIMESTAMP_WIDTH[self.header_timestamp]
        if self.extended_header_size and flags & PFHFlags.HAS_EXTENDED_HEADER:
            size += self.extended_header_size
        return size


_TIMESTAMP_WIDTH = {
    TimestampKind.NONE: 0,
    TimestampKind.FILETIME: 8,
    TimestampKind.UNIX: 4,
}

PROFILES: dict[PFHVersion, FormatProfile] = {
    PFHVersion.PFH0: FormatProfile(
        PFHVersion.PFH0,
        header_timestamp=TimestampKind.NONE,
        index_timestamp=TimestampKind.NONE,
        has_compression_flag=False,
    ),
    PFHVersion.PFH2: FormatProfile(
        PFHVersion.PFH2,
        header_timestamp=TimestampKind.FILETIME,
        index_timestamp=TimestampKind.FILETIME,
        has_compression_flag=False,
    ),
    PFHVersion.PFH3: FormatProfile(
        PFHVersion.PFH3,
        header_timestamp=TimestampKind.FILETIME,
        index_timestamp=TimestampKind.FILETIME,
        has_compression_flag=False,
    ),
    PFHVersion.PFH4: FormatProfile(
        PFHVersion.PFH4,
        header_timestamp=TimestampKind.UNIX,
        index_timestamp=TimestampKind.UNIX,
        has_compression_flag=False,
    ),
    PFHVersion.PFH5: FormatProfile(
        PFHVersion.PFH5,
        header_timestamp=TimestampKind.UNIX,
        index_timestamp=TimestampKind.UNIX,
        has_compression_flag=True,
        extended_header_size=20,
    ),
}


def get_profile(version: PFHVersion | str | bytes) -> FormatProfile:
    """Resolve a profile from a version or raw preamble bytes."""
    if isinstance(version, (bytes, bytearray, memoryview)):
        try:
            version = bytes(version).decode("ascii")
        except UnicodeDecodeError:
            raise UnsupportedFormat(f"not a PackFile (preamble {bytes(version)!r})") from None
    try:
        return PROFILES[PFHVersion(version)]
    except ValueError:
        raise UnsupportedFormat(f"unknown PackFile version {version!r}") from None


def split_flag_word(word: int) -> tuple[PFHFileType, PFHFlags]:
    raw_type = word & FILE_TYPE_MASK
    try:
        file_type = PFHFileType(raw_type)
    except ValueError:
        raise UnsupportedFormat(f"unknown PackFile type {raw_type}") from None
    return file_type, PFHFlags(word & ~FILE_TYPE_MASK)


def join_flag_word(file_type: PFHFileType, flags: PFHFlags) -> int:
    return (int(flags) & ~FILE_TYPE_MASK) | int(file_type)


def from_filetime(ticks: int) -> int:
    """Windows FILETIME ticks to Unix seconds.  ``0`` means unset and stays ``0``."""
    if ticks == 0:
        return 0
    return ticks // WINDOWS_TICK - SEC_TO_UNIX_EPOCH


def to_filetime(seconds: int) -> int:
    if seconds == 0:
        return 0
    return (seconds + SEC_TO_UNIX_EPOCH) * WINDOWS_TICK
