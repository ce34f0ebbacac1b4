from __future__ import annotations

import pytest

from packfile_manager.errors import InvalidPath
from packfile_manager.utils.paths import is_under, join_entry_path, path_key, split_entry_path


class TestSplitEntryPath:
    def test_both_separators(self):
        assert split_entry_path("db/units_tables/x") == ("db", "units_tables", "x")
        assert split_entry_path("db\\units_tables\\x") == ("db", "units_tables", "x")

    def test_tuple_passes_through(self):
        assert split_entry_path(("a", "b")) == ("a", "b")

    def test_leading_and_trailing_separators_are_ignored(self):
        assert split_entry_path("/a/b/") == ("a", "b")

    @pytest.mark.parametrize("path", ["", "a//b", "a/../b", "./a", ("a", "")])
    def test_invalid(self, path):
        with pytest.raises(InvalidPath):
            split_entry_path(path)

    def test_null_byte(self):
        with pytest.raises(InvalidPath, match="null byte"):
            split_entry_path("a/b\x00c")


class TestPathHelpers:
    def test_join(self):
        assert join_entry_path(("a", "b")) == "a/b"
        assert join_entry_path(("a", "b"), "\\") == "a\\b"

    def test_path_key_ignores_case(self):
        assert path_key(("DB", "Units")) == path_key(("db", "units"))

    def test_is_under(self):
        assert is_under(("Terrain", "tiles", "x.bin"), ("terrain", "TILES"))
        assert not is_under(("terrain",), ("terrain",))
        assert not is_under(("other", "x"), ("terrain",))
