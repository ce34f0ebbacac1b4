from packfile_manager.archive.formats import PFHFileType, PFHFlags, PFHVersion
from packfile_manager.archive.models import Archive, Entry, EntryKind, classify_path
from packfile_manager.archive.packfile import (
    parse_packfile,
    read_packfile,
    serialize_packfile,
    write_packfile,
)

__all__ = [
    "Archive",
    "Entry",
    "EntryKind",
    "PFHFileType",
    "PFHFlags",
    "PFHVersion",
    "classify_path",
    "parse_packfile",
    "read_packfile",
    "serialize_packfile",
    "write_packfile",
]
