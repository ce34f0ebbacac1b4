"""In-memory model of an open PackFile."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePosixPath

from packfile_manager.archive.compression import compress, declared_size, decompress
from packfile_manager.archive.formats import PFHFileType, PFHFlags, PFHVersion
from packfile_manager.constants import DB_FOLDER, IMAGE_EXTENSIONS, LOC_EXTENSION, TEXT_EXTENSIONS
from packfile_manager.utils.paths import join_entry_path

logger = logging.getLogger(__name__)


class EntryKind(StrEnum):
    DB = "db"
    LOC = "loc"
    TEXT = "text"
    IMAGE = "image"
    OTHER = "other"


def classify_path(path: tuple[str, ...]) -> EntryKind:
    """Guess what an entry holds from its path alone.

    >>> classify_path(("db", "units_tables", "data__"))
    <EntryKind.DB: 'db'>
    >>> classify_path(("text", "db", "names.loc"))
    <EntryKind.LOC: 'loc'>
    """
    name = path[-1].lower()
    suffix = PurePosixPath(name).suffix
    if len(path) == 3 and path[0].lower() == DB_FOLDER:
        return EntryKind.DB
    if suffix == LOC_EXTENSION:
        return EntryKind.LOC
    if suffix in TEXT_EXTENSIONS:
        return EntryKind.TEXT
    if suffix in IMAGE_EXTENSIONS:
        return EntryKind.IMAGE
    return EntryKind.OTHER


@dataclass(slots=True, eq=False)
class Entry:
    """One named payload inside a PackFile.

    ``_raw`` holds the payload as it is (or will be) stored on disk, which is
    the compressed form when ``is_compressed`` is set.  ``_data`` caches the
    decompressed payload; it is produced on first access and kept for the
    entry's lifetime, so a large entry is decompressed at most once.
    """

    path: tuple[str, ...]
    timestamp: int = 0
    is_compressed: bool = False
    _raw: bytes | memoryview | None = field(default=None, repr=False)
    _data: bytes | None = field(default=None, repr=False)
    _modified: bool = field(default=False, repr=False)

    @classmethod
    def from_disk(
        cls,
        path: tuple[str, ...],
        raw: bytes | memoryview,
        *,
        is_compressed: bool = False,
        timestamp: int = 0,
    ) -> Entry:
        return cls(path=path, timestamp=timestamp, is_compressed=is_compressed, _raw=raw)

    @classmethod
    def from_data(
        cls,
        path: tuple[str, ...],
        data: bytes | bytearray | memoryview,
        *,
        is_compressed: bool = False,
        timestamp: int = 0,
    ) -> Entry:
        return cls(
            path=path,
            timestamp=timestamp,
            is_compressed=is_compressed,
            _data=bytes(data),
            _modified=True,
        )

    @property
    def display_path(self) -> str:
        return join_entry_path(self.path)

    @property
    def kind(self) -> EntryKind:
        return classify_path(self.path)

    @property
    def is_modified(self) -> bool:
        return self._modified

    @property
    def data(self) -> bytes:
        """Decompressed payload, loaded lazily and cached."""
        if self._data is None:
            raw = self._raw if self._raw is not None else b""
            if self.is_compressed:
                logger.debug("Decompressing %s (%d bytes)", self.display_path, len(raw))
                self._data = decompress(raw, path=self.display_path)
            else:
                self._data = bytes(raw)
        return self._data

    @property
    def size(self) -> int:
        """Uncompressed size.  Never decompresses; a compressed payload
        reports the size from its prefix, or its stored size if it has none."""
        if self._data is not None:
            return len(self._data)
        if self._raw is None:
            return 0
        if self.is_compressed:
            size = declared_size(self._raw)
            return len(self._raw) if size is None else size
        return len(self._raw)

    def set_data(self, data: bytes | bytearray | memoryview) -> None:
        """Replace the payload.  The on-disk form is rebuilt on the next save."""
        self._data = bytes(data)
        self._raw = None
        self._modified = True

    def set_compressed(self, is_compressed: bool) -> None:
        if is_compressed == self.is_compressed:
            return
        payload = self.data
        self.is_compressed = is_compressed
        self.set_data(payload)

    def disk_bytes(self) -> bytes | memoryview:
        """Payload exactly as written to the PackFile."""
        if self._raw is None:
            payload = self._data if self._data is not None else b""
            self._raw = compress(payload) if self.is_compressed else payload
        return self._raw

    def mark_saved(self) -> None:
        self._modified = False


@dataclass(slots=True, eq=False)
class Archive:
    version: PFHVersion = PFHVersion.PFH5
    file_type: PFHFileType = PFHFileType.MOD
    flags: PFHFlags = PFHFlags(0)
    timestamp: int = 0
    dependencies: list[str] = field(default_factory=list)
    extended_header: bytes = b""
    entries: list[Entry] = field(default_factory=list)

    @property
    def has_index_timestamps(self) -> bool:
        return bool(self.flags & PFHFlags.HAS_INDEX_WITH_TIMESTAMPS)

    @property
    def is_encrypted(self) -> bool:
        return bool(self.flags & (PFHFlags.HAS_ENCRYPTED_INDEX | PFHFlags.HAS_ENCRYPTED_DATA))
