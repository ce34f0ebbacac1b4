"""Per-kind cell codec: read, write, validate, default and display.

Cells are plain Python values tagged by their column's :class:`FieldKind`.
Every function here dispatches on the kind with one ``match`` so adding a
kind means touching each function once.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from typing import Any

from packfile_manager.archive.cursor import ByteReader, ByteWriter, int_range
from packfile_manager.errors import FieldTooLarge, MalformedRow, OutOfBounds, TypeMismatch
from packfile_manager.tables.schema import FieldDef, FieldKind, SchemaVersion

CellValue = bool | int | float | str | None

_F32 = struct.Struct("<f")


# ---------------------------------------------------------------------------
# Binary
# ---------------------------------------------------------------------------


def _read_flag(reader: ByteReader) -> bool:
    value = reader.read_u8()
    if value > 1:
        raise ValueError(f"boolean byte must be 0 or 1, got {value:#04x}")
    return value == 1


def read_cell(reader: ByteReader, field: FieldDef) -> CellValue:
    match field.kind:
        case FieldKind.BOOLEAN:
            return _read_flag(reader)
        case (
            FieldKind.I8
            | FieldKind.I16
            | FieldKind.I32
            | FieldKind.I64
            | FieldKind.U8
            | FieldKind.U16
            | FieldKind.U32
            | FieldKind.U64
        ):
            return reader.read_int(field.kind.value)
        case FieldKind.F32:
            return reader.read_f32()
        case FieldKind.F64:
            return reader.read_f64()
        case FieldKind.COLOUR_RGB:
            return reader.read_u32()
        case FieldKind.FIXED_STRING:
            return reader.read_fixed_string(field.max_length or 0)
        case FieldKind.STRING_U8:
            return reader.read_string_u8()
        case FieldKind.STRING_U16:
            return reader.read_string_u16()
        case FieldKind.OPTIONAL_STRING_U8:
            return reader.read_string_u8() if _read_flag(reader) else None
        case FieldKind.OPTIONAL_STRING_U16:
            return reader.read_string_u16() if _read_flag(reader) else None
    raise AssertionError(f"unhandled field kind {field.kind}")


def write_cell(writer: ByteWriter, field: FieldDef, value: CellValue) -> None:
    """Write *value* at the field's declared width.  *value* must be validated."""
    match field.kind:
        case FieldKind.BOOLEAN:
            writer.write_bool(bool(value))
        case (
            FieldKind.I8
            | FieldKind.I16
            | FieldKind.I32
            | FieldKind.I64
            | FieldKind.U8
            | FieldKind.U16
            | FieldKind.U32
            | FieldKind.U64
        ):
            writer.write_int(field.kind.value, value)  # type: ignore[arg-type]
        case FieldKind.F32:
            writer.write_f32(value)  # type: ignore[arg-type]
        case FieldKind.F64:
            writer.write_f64(value)  # type: ignore[arg-type]
        case FieldKind.COLOUR_RGB:
            writer.write_u32(value)  # type: ignore[arg-type]
        case FieldKind.FIXED_STRING:
            writer.write_fixed_string(
                value,  # type: ignore[arg-type]
                field.max_length or 0,
                name=field.name,
            )
        case FieldKind.STRING_U8:
            writer.write_string_u8(value, name=field.name)  # type: ignore[arg-type]
        case FieldKind.STRING_U16:
            writer.write_string_u16(value, name=field.name)  # type: ignore[arg-type]
        case FieldKind.OPTIONAL_STRING_U8:
            writer.write_bool(value is not None)
            if value is not None:
                writer.write_string_u8(value, name=field.name)  # type: ignore[arg-type]
        case FieldKind.OPTIONAL_STRING_U16:
            writer.write_bool(value is not None)
            if value is not None:
                writer.write_string_u16(value, name=field.name)  # type: ignore[arg-type]


def read_rows(reader: ByteReader, definition: SchemaVersion, row_count: int) -> list[list[Any]]:
    """Decode *row_count* rows.  Any failure aborts the whole table."""
    rows: list[list[Any]] = []
    for row_index in range(row_count):
        row: list[Any] = []
        for field in definition.fields:
            try:
                row.append(read_cell(reader, field))
            except (OutOfBounds, ValueError) as exc:
                raise MalformedRow(row_index, field.name, str(exc)) from exc
        rows.append(row)
    if not reader.at_end():
        raise MalformedRow(
            row_count, None, f"{reader.remaining} bytes left after the last declared row"
        )
    return rows


def write_rows(
    writer: ByteWriter,
    definition: SchemaVersion,
    rows: Sequence[Sequence[Any]],
) -> None:
    for row in rows:
        for field, value in zip(definition.fields, validate_row(definition, row)):
            write_cell(writer, field, value)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_cell(field: FieldDef, value: Any) -> CellValue:
    """Check *value* against the field and return it in stored form.

    Raises:
        TypeMismatch: wrong Python type, or a number outside the field's range.
        FieldTooLarge: string longer than a fixed-length field allows.
    """
    kind = field.kind
    match kind:
        case FieldKind.BOOLEAN:
            if not isinstance(value, bool):
                raise TypeMismatch(field.name, "bool", value)
            return value
        case (
            FieldKind.I8
            | FieldKind.I16
            | FieldKind.I32
            | FieldKind.I64
            | FieldKind.U8
            | FieldKind.U16
            | FieldKind.U32
            | FieldKind.U64
        ):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeMismatch(field.name, kind.value, value)
            lo, hi = int_range(kind.value)
            if not lo <= value <= hi:
                raise TypeMismatch(field.name, f"{kind.value} in [{lo}, {hi}]", value)
            return value
        case FieldKind.F32:
            number = _as_float(field, value)
            try:
                # Keep the value exactly as it will be stored.
                return _F32.unpack(_F32.pack(number))[0]
            except OverflowError:
                raise TypeMismatch(field.name, "f32 in range", value) from None
        case FieldKind.F64:
            return _as_float(field, value)
        case FieldKind.COLOUR_RGB:
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeMismatch(field.name, "RGB colour as int", value)
            # Stored as a full u32; some tables use the high byte.
            lo, hi = int_range("u32")
            if not lo <= value <= hi:
                raise TypeMismatch(field.name, f"RGB colour in [{lo}, {hi:#X}]", value)
            return value
        case FieldKind.FIXED_STRING:
            if not isinstance(value, str):
                raise TypeMismatch(field.name, "str", value)
            size = len(value.encode("utf-8"))
            capacity = field.max_length or 0
            if size > capacity:
                raise FieldTooLarge(field.name, capacity, size)
            return value
        case FieldKind.STRING_U8 | FieldKind.STRING_U16:
            if not isinstance(value, str):
                raise TypeMismatch(field.name, "str", value)
            return value
        case FieldKind.OPTIONAL_STRING_U8 | FieldKind.OPTIONAL_STRING_U16:
            if value is not None and not isinstance(value, str):
                raise TypeMismatch(field.name, "str or None", value)
            return value
    raise AssertionError(f"unhandled field kind {kind}")


def _as_float(field: FieldDef, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatch(field.name, field.kind.value, value)
    return float(value)


def validate_row(definition: SchemaVersion, row: Sequence[Any]) -> list[CellValue]:
    if len(row) != len(definition.fields):
        raise TypeMismatch(
            "<row>", f"{len(definition.fields)} cells", f"row with {len(row)} cells"
        )
    return [validate_cell(field, value) for field, value in zip(definition.fields, row)]


# ---------------------------------------------------------------------------
# Defaults and display
# ---------------------------------------------------------------------------


def default_cell(field: FieldDef) -> CellValue:
    if field.default is not None:
        return validate_cell(field, field.default)
    match field.kind:
        case FieldKind.BOOLEAN:
            return False
        case FieldKind.F32 | FieldKind.F64:
            return 0.0
        case FieldKind.OPTIONAL_STRING_U8 | FieldKind.OPTIONAL_STRING_U16:
            return None
        case _ if field.kind.is_string:
            return ""
        case _:
            return 0


def format_cell(field: FieldDef, value: CellValue) -> str:
    """Human-readable form of a cell.  Never fed back into storage.

    f32 values print with the fewest digits that still identify the stored
    bits, so ``0.1`` shows as ``0.1`` rather than ``0.10000000149011612``.
    """
    match field.kind:
        case FieldKind.F32:
            return _format_f32(float(value))  # type: ignore[arg-type]
        case FieldKind.F64:
            return repr(float(value))  # type: ignore[arg-type]
        case FieldKind.COLOUR_RGB:
            return f"{int(value):06X}"  # type: ignore[arg-type]
        case FieldKind.BOOLEAN:
            return "true" if value else "false"
        case _ if value is None:
            return ""
        case _:
            return str(value)


def _format_f32(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)
    packed = _F32.pack(value)
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        try:
            if _F32.pack(candidate) == packed:
                return repr(candidate)
        except OverflowError:
            continue
    return repr(value)
