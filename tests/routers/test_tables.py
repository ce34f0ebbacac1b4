import pytest

BINARY = {"Content-Type": "application/octet-stream"}
DB_PATH = "db/units_tables/data__"
LOC_PATH = "text/db/names.loc"


@pytest.fixture
def pack_id(client, db_payload, loc_payload):
    pack_id = client.post("/api/v1/packs", json={}).json()["id"]
    for path, data in (
        (DB_PATH, db_payload([("unit_a", 10, 0.1), ("unit_b", 20, 2.0)])),
        (LOC_PATH, loc_payload([("key_a", "Hello", True), ("key_b", "World", True)])),
    ):
        client.put(f"/api/v1/packs/{pack_id}/entries/{path}", content=data, headers=BINARY)
    return pack_id


class TestGetTable:
    def test_db_table(self, client, pack_id):
        r = client.get(f"/api/v1/packs/{pack_id}/tables/{DB_PATH}")
        assert r.status_code == 200
        data = r.json()
        assert data["kind"] == "db"
        assert data["table_name"] == "units_tables"
        assert data["version"] == 1
        assert [f["name"] for f in data["fields"]] == ["key", "cost", "speed"]
        assert data["fields"][0]["is_key"] is True
        assert data["row_count"] == 2
        assert data["display_rows"][0] == ["unit_a", "10", "0.1"]

    def test_loc_table(self, client, pack_id):
        data = client.get(f"/api/v1/packs/{pack_id}/tables/{LOC_PATH}").json()
        assert data["rows"] == [["key_a", "Hello", True], ["key_b", "World", True]]

    def test_unknown_schema(self, client, pack_id, db_payload):
        path = "db/mystery_tables/data__"
        client.put(
            f"/api/v1/packs/{pack_id}/entries/{path}", content=db_payload([]), headers=BINARY
        )
        r = client.get(f"/api/v1/packs/{pack_id}/tables/{path}")
        assert r.status_code == 422
        assert r.json()["code"] == "unknown_schema"
        assert r.json()["table_name"] == "mystery_tables"

    def test_malformed_rows(self, client, pack_id, db_payload):
        path = "db/units_tables/broken"
        payload = db_payload([("unit_a", 1, 1.0)]) + b"\x00"
        client.put(f"/api/v1/packs/{pack_id}/entries/{path}", content=payload, headers=BINARY)
        r = client.get(f"/api/v1/packs/{pack_id}/tables/{path}")
        assert r.status_code == 422
        assert r.json()["code"] == "malformed_row"
        assert r.json()["row_index"] == 1


class TestEditTable:
    def test_edit_loc_text(self, client, pack_id):
        r = client.patch(
            f"/api/v1/packs/{pack_id}/tables/{LOC_PATH}",
            json=[{"row": 0, "field": "text", "value": "Hi"}],
        )
        assert r.status_code == 200
        again = client.get(f"/api/v1/packs/{pack_id}/tables/{LOC_PATH}").json()
        assert [row[1] for row in again["rows"]] == ["Hi", "World"]

    def test_edit_by_column_index(self, client, pack_id):
        client.patch(
            f"/api/v1/packs/{pack_id}/tables/{DB_PATH}",
            json=[{"row": 1, "field": 1, "value": 99}, {"row": 1, "field": "speed", "value": 3}],
        )
        row = client.get(f"/api/v1/packs/{pack_id}/tables/{DB_PATH}").json()["rows"][1]
        assert row == ["unit_b", 99, 3.0]

    def test_bad_edit_changes_nothing(self, client, pack_id):
        before = client.get(f"/api/v1/packs/{pack_id}/entries/{DB_PATH}").content
        r = client.patch(
            f"/api/v1/packs/{pack_id}/tables/{DB_PATH}",
            json=[
                {"row": 0, "field": "cost", "value": 1},
                {"row": 1, "field": "cost", "value": "x"},
            ],
        )
        assert r.status_code == 400
        assert r.json()["code"] == "type_mismatch"
        assert r.json()["field_name"] == "cost"
        assert client.get(f"/api/v1/packs/{pack_id}/entries/{DB_PATH}").content == before

    def test_unknown_row(self, client, pack_id):
        r = client.patch(
            f"/api/v1/packs/{pack_id}/tables/{DB_PATH}",
            json=[{"row": 7, "field": "cost", "value": 1}],
        )
        assert r.status_code == 404
