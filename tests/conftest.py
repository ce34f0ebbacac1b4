import struct

import pytest
from fastapi.testclient import TestClient

from packfile_manager.main import app
from packfile_manager.services.entry_manager import PackFileManager
from packfile_manager.services.session_store import sessions
from packfile_manager.tables.registry import SchemaRegistry
from packfile_manager.tables.schema import FieldDef, FieldKind, SchemaVersion

_UNITS_V1 = SchemaVersion(
    table_name="units_tables",
    version=1,
    fields=(
        FieldDef(name="key", kind=FieldKind.STRING_U8, is_key=True),
        FieldDef(name="cost", kind=FieldKind.I32),
        FieldDef(name="speed", kind=FieldKind.F32),
    ),
)

_UNITS_V3 = SchemaVersion(
    table_name="units_tables",
    version=3,
    fields=(
        *_UNITS_V1.fields,
        FieldDef(name="description", kind=FieldKind.OPTIONAL_STRING_U16),
        FieldDef(name="is_naval", kind=FieldKind.BOOLEAN),
    ),
)


def _build_db_payload(rows: list[tuple[str, int, float]], *, version: int = 1) -> bytes:
    """Raw ``units_tables`` v1 payload with a version block, built by hand."""
    out = b"\xfc\xfd\xfe\xff" + struct.pack("<I", version) + b"\x01"
    out += struct.pack("<I", len(rows))
    for key, cost, speed in rows:
        raw = key.encode("utf-8")
        out += struct.pack("<H", len(raw)) + raw + struct.pack("<if", cost, speed)
    return out


def _build_loc_payload(rows: list[tuple[str, str, bool]]) -> bytes:
    out = b"\xff\xfeLOC\x00" + struct.pack("<II", 1, len(rows))
    for key, text, tooltip in rows:
        for value in (key, text):
            out += struct.pack("<H", len(value)) + value.encode("utf-16-le")
        out += b"\x01" if tooltip else b"\x00"
    return out


@pytest.fixture
def units_v1():
    return _UNITS_V1


@pytest.fixture
def units_v3():
    return _UNITS_V3


@pytest.fixture
def db_payload():
    return _build_db_payload


@pytest.fixture
def loc_payload():
    return _build_loc_payload


@pytest.fixture
def registry():
    return SchemaRegistry([_UNITS_V1, _UNITS_V3])


@pytest.fixture
def manager():
    return PackFileManager.new("PFH5")


@pytest.fixture
def client(registry, monkeypatch):
    monkeypatch.setattr(
        "packfile_manager.services.entry_manager.default_registry", lambda: registry
    )
    monkeypatch.setattr("packfile_manager.main.default_registry", lambda: registry)
    sessions.clear()
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc
    sessions.clear()
