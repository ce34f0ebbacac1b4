"""Versioned field layouts ("definitions") for DB and Loc tables.

A :class:`SchemaVersion` is the wire contract of one table version: its field
order is both the decode order and the re-encode byte order.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator


class FieldKind(StrEnum):
    BOOLEAN = "boolean"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    COLOUR_RGB = "colour_rgb"
    FIXED_STRING = "fixed_string"
    STRING_U8 = "string_u8"
    STRING_U16 = "string_u16"
    OPTIONAL_STRING_U8 = "optional_string_u8"
    OPTIONAL_STRING_U16 = "optional_string_u16"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_KINDS

    @property
    def is_float(self) -> bool:
        return self in (FieldKind.F32, FieldKind.F64)

    @property
    def is_string(self) -> bool:
        return self in _STRING_KINDS


_INTEGER_KINDS = frozenset(
    {
        FieldKind.I8,
        FieldKind.I16,
        FieldKind.I32,
        FieldKind.I64,
        FieldKind.U8,
        FieldKind.U16,
        FieldKind.U32,
        FieldKind.U64,
    }
)

_STRING_KINDS = frozenset(
    {
        FieldKind.FIXED_STRING,
        FieldKind.STRING_U8,
        FieldKind.STRING_U16,
        FieldKind.OPTIONAL_STRING_U8,
        FieldKind.OPTIONAL_STRING_U16,
    }
)


class FieldDef(BaseModel):
    """One column of a table definition."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    kind: FieldKind
    is_key: bool = False
    max_length: int | None = Field(default=None, gt=0)
    default: bool | int | float | str | None = None
    description: str = ""
    enum_values: tuple[str, ...] = ()
    reference: str | None = None  # "other_tables.column"

    @model_validator(mode="after")
    def _check_length(self) -> FieldDef:
        if self.kind == FieldKind.FIXED_STRING and self.max_length is None:
            raise ValueError(f"field {self.name!r}: fixed_string requires max_length")
        if self.kind != FieldKind.FIXED_STRING and self.max_length is not None:
            raise ValueError(f"field {self.name!r}: max_length only applies to fixed_string")
        return self


class SchemaVersion(BaseModel):
    """Ordered field layout of one version of one table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    version: int = Field(ge=0)
    fields: tuple[FieldDef, ...]

    @model_validator(mode="after")
    def _check_fields(self) -> SchemaVersion:
        if not self.fields:
            raise ValueError(f"{self.table_name} v{self.version} has no fields")
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"{self.table_name} v{self.version} repeats field names: {', '.join(duplicates)}"
            )
        return self

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def index_of(self, name: str) -> int | None:
        for i, f in enumerate(self.fields):
            if f.name == name:
                return i
        return None

    @property
    def key_indices(self) -> list[int]:
        return [i for i, f in enumerate(self.fields) if f.is_key]


# ---------------------------------------------------------------------------
# On-disk schema files
# ---------------------------------------------------------------------------


class SchemaFileVersion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int = Field(ge=0)
    fields: list[FieldDef]


class SchemaFile(RootModel[dict[str, list[SchemaFileVersion]]]):
    """A schema file: table name -> list of versioned field lists."""

    def to_versions(self) -> list[SchemaVersion]:
        return [
            SchemaVersion(table_name=table_name, version=v.version, fields=tuple(v.fields))
            for table_name, versions in self.root.items()
            for v in versions
        ]
