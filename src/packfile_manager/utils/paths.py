"""Entry path conversion utilities.

PackFiles store entry paths with backslash separators (``db\\units_tables\\x``).
Consumers address entries with forward slashes.  Internally a path is a tuple
of segments so both forms convert losslessly.
"""

import re

from packfile_manager.errors import InvalidPath

DISK_SEPARATOR = "\\"
_SEPARATOR_RE = re.compile(r"[\\/]")


def split_entry_path(path: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Split a ``/`` or ``\\`` separated path into segments.

    >>> split_entry_path("db/units_tables/unit_x")
    ('db', 'units_tables', 'unit_x')
    >>> split_entry_path("text\\\\db\\\\names.loc")
    ('text', 'db', 'names.loc')
    """
    if isinstance(path, (tuple, list)):
        segments = tuple(path)
        display = "/".join(segments)
    else:
        display = path
        segments = tuple(_SEPARATOR_RE.split(path.strip("/\\")))
    if not segments or any(not s or s in (".", "..") for s in segments):
        raise InvalidPath(display)
    if any("\x00" in s for s in segments):
        raise InvalidPath(display, "null byte in path")
    return segments


def join_entry_path(segments: tuple[str, ...] | list[str], sep: str = "/") -> str:
    return sep.join(segments)


def path_key(segments: tuple[str, ...]) -> str:
    """Case-insensitive identity of a path, as the game's file system sees it."""
    return "/".join(segments).lower()


def is_under(segments: tuple[str, ...], folder: tuple[str, ...]) -> bool:
    """True when *segments* lives inside *folder* (case-insensitive)."""
    if len(segments) <= len(folder):
        return False
    return all(a.lower() == b.lower() for a, b in zip(segments, folder))
