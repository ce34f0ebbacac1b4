"""Tests for the SiegeAI map patch."""

from __future__ import annotations

import pytest

from packfile_manager.errors import SiegeAIPatchError
from packfile_manager.services.siege_ai import patch_siege_ai

MAP = "terrain/tiles/battle/_assembly_kit/castle"
SIEGE_MAP = b"header AIH_SIEGE_AREA_NODE ... AIH_FORT_PERIMETER ... AIH_FORT_PERIMETER end"
FIELD_MAP = b"header AIH_FORT_PERIMETER end"


class TestPatchSiegeAI:
    def test_patches_siege_maps_and_deletes_catchments(self, manager):
        manager.add(f"{MAP}/bmd_data.bin", SIEGE_MAP)
        manager.add(f"{MAP}/catchment_01.bin", b"x")
        manager.add(f"{MAP}/Catchment_02.BIN", b"y")
        manager.add("terrain/other/catchment_03.bin", b"z")
        manager.save()

        result = patch_siege_ai(manager)

        assert result.patched == [f"{MAP}/bmd_data.bin"]
        assert sorted(result.deleted) == [f"{MAP}/Catchment_02.BIN", f"{MAP}/catchment_01.bin"]
        data = manager.extract(f"{MAP}/bmd_data.bin")
        assert b"AIH_FORT_PERIMETER" not in data
        assert data.count(b"AIH_DEFENSIVE_HILL") == 2
        assert len(data) == len(SIEGE_MAP)
        assert "terrain/other/catchment_03.bin" in manager
        assert manager.is_dirty

    def test_maps_without_siege_nodes_are_untouched(self, manager):
        manager.add(f"{MAP}/bmd_data.bin", FIELD_MAP)
        manager.add(f"{MAP}/catchment_01.bin", b"x")

        result = patch_siege_ai(manager)

        assert result.patched == []
        assert result.deleted == [f"{MAP}/catchment_01.bin"]
        assert manager.extract(f"{MAP}/bmd_data.bin") == FIELD_MAP

    def test_empty_packfile(self, manager):
        with pytest.raises(SiegeAIPatchError, match="empty"):
            patch_siege_ai(manager)

    def test_nothing_to_patch(self, manager):
        manager.add("db/units_tables/data__", b"\x01\x00\x00\x00\x00")
        manager.add(f"{MAP}/bmd_data.bin", FIELD_MAP)
        manager.save()
        with pytest.raises(SiegeAIPatchError, match="could be patched or deleted"):
            patch_siege_ai(manager)
        assert not manager.is_dirty
