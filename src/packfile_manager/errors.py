"""Error taxonomy for the PackFile core.

Every error carries the attributes a consumer needs to explain the failure
to the user.  The core raises these and never logs or swallows them; the
HTTP layer turns them into JSON responses in one place.
"""

from __future__ import annotations

from typing import Any


class PackFileError(Exception):
    """Base class for all errors raised by the PackFile core."""

    code = "packfile_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Structured form used by the HTTP layer."""
        data: dict[str, Any] = {"code": self.code, "detail": self.message}
        for key, value in vars(self).items():
            if key == "message" or key.startswith("_"):
                continue
            data[key] = value
        return data


# ---------------------------------------------------------------------------
# Structural errors
# ---------------------------------------------------------------------------


class UnsupportedFormat(PackFileError):
    code = "unsupported_format"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Unsupported PackFile: {reason}")
        self.reason = reason


class TruncatedArchive(PackFileError):
    code = "truncated_archive"

    def __init__(self, reason: str, path: str | None = None) -> None:
        where = f" (at entry {path!r})" if path else ""
        super().__init__(f"Truncated or damaged PackFile{where}: {reason}")
        self.reason = reason
        self.path = path


class CorruptEntry(PackFileError):
    code = "corrupt_entry"

    def __init__(self, path: str | None, reason: str) -> None:
        super().__init__(f"Entry {path or '<unknown>'!r} is corrupted: {reason}")
        self.path = path
        self.reason = reason


class MalformedRow(PackFileError):
    code = "malformed_row"

    def __init__(self, row_index: int, field_name: str | None, reason: str) -> None:
        column = f", field {field_name!r}" if field_name else ""
        super().__init__(f"Cannot decode row {row_index}{column}: {reason}")
        self.row_index = row_index
        self.field_name = field_name
        self.reason = reason


class OutOfBounds(PackFileError):
    code = "out_of_bounds"

    def __init__(self, position: int, requested: int, available: int) -> None:
        super().__init__(
            f"Read of {requested} bytes at position {position} exceeds buffer "
            f"({available} bytes left)"
        )
        self.position = position
        self.requested = requested
        self.available = available


# ---------------------------------------------------------------------------
# Schema errors
# ---------------------------------------------------------------------------


class UnknownSchema(PackFileError):
    code = "unknown_schema"

    def __init__(self, table_name: str, version: int) -> None:
        super().__init__(
            f"No definition for table {table_name!r} at version {version}; "
            "this table type needs a newer schema"
        )
        self.table_name = table_name
        self.version = version


class SchemaLoadError(PackFileError):
    code = "schema_load_error"

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Invalid schema file {source}: {reason}")
        self.source = source
        self.reason = reason


# ---------------------------------------------------------------------------
# Caller-input errors
# ---------------------------------------------------------------------------


class DuplicatePath(PackFileError):
    code = "duplicate_path"

    def __init__(self, path: str) -> None:
        super().__init__(f"An entry already exists at {path!r}")
        self.path = path


class NotFound(PackFileError):
    code = "not_found"

    def __init__(self, path: str) -> None:
        super().__init__(f"No entry at {path!r}")
        self.path = path


class InvalidPath(PackFileError):
    code = "invalid_path"

    def __init__(self, path: str, reason: str = "empty path segment") -> None:
        super().__init__(f"Invalid entry path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class TypeMismatch(PackFileError):
    code = "type_mismatch"

    def __init__(self, field_name: str, expected: str, value: object) -> None:
        super().__init__(
            f"Field {field_name!r} expects {expected}, got {type(value).__name__} {value!r}"
        )
        self.field_name = field_name
        self.expected = expected
        self.value = repr(value)


class FieldTooLarge(PackFileError):
    code = "field_too_large"

    def __init__(self, field_name: str, capacity: int, size: int) -> None:
        super().__init__(f"Value for {field_name!r} needs {size}, capacity is {capacity}")
        self.field_name = field_name
        self.capacity = capacity
        self.size = size


class NonEditableArchive(PackFileError):
    code = "non_editable_archive"

    def __init__(self, file_type: str) -> None:
        super().__init__(
            f"PackFiles of type {file_type} belong to the game and cannot be saved "
            "unless editing of game PackFiles is allowed in the settings"
        )
        self.file_type = file_type


class SiegeAIPatchError(PackFileError):
    code = "siege_ai_patch_error"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Cannot patch SiegeAI: {reason}")
        self.reason = reason
