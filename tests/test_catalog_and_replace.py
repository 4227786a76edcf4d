"""Tests for listing, searching and replace-on-put."""

import io
from unittest.mock import patch

import pytest

from gridstore.exceptions import InvalidQueryError, StoreUnavailableError
from gridstore.services.catalog import prefix_filter, substring_filter


def _store(grid, name, content=b"data", chunk_size=None):
    return grid.objects.store_file(io.BytesIO(content), name, chunk_size=chunk_size)


def _names(rows):
    return [metadata.filename for metadata in rows]


class TestObjectCatalog:
    """Test ObjectCatalog list and search."""

    def test_list_all_once_regardless_of_chunk_size(self, grid):
        for name, chunk_size in [("a", 1), ("b", 3), ("c", None), ("d", 100)]:
            _store(grid, name, b"0123456789", chunk_size)

        rows = list(grid.catalog.list_prefix(""))

        assert sorted(_names(rows)) == ["a", "b", "c", "d"]
        assert len({m.file_id for m in rows}) == 4
        assert all(m.length == 10 for m in rows)

    def test_list_none_prefix_lists_all(self, grid):
        _store(grid, "x")

        assert _names(grid.catalog.list_prefix(None)) == ["x"]

    def test_list_prefix_anchors_at_start(self, grid):
        for name in ["logs/a.txt", "logs/b.txt", "old/logs/c.txt"]:
            _store(grid, name)

        assert _names(grid.catalog.list_prefix("logs/")) == ["logs/a.txt", "logs/b.txt"]

    def test_list_prefix_treats_metacharacters_literally(self, grid):
        for name in ["a.b*c", "aXbbbc", "a.b*cd", "ab"]:
            _store(grid, name)

        assert _names(grid.catalog.list_prefix("a.b*c")) == ["a.b*c", "a.b*cd"]

    def test_search_matches_substring(self, grid):
        for name in ["report-2023.pdf", "summary.pdf", "old-report.txt"]:
            _store(grid, name)

        assert _names(grid.catalog.search_substring("report")) == ["report-2023.pdf", "old-report.txt"]

    def test_search_accepts_pattern_syntax(self, grid):
        for name in ["a.b*c", "aXbbbc", "abc", "zzz"]:
            _store(grid, name)

        # As a pattern, "a.b*c" is 'a', any character, any number of 'b', 'c'.
        assert _names(grid.catalog.search_substring("a.b*c")) == ["aXbbbc", "abc"]
        assert _names(grid.catalog.search_substring("^z+$")) == ["zzz"]

    def test_search_invalid_pattern(self, grid):
        with pytest.raises(InvalidQueryError):
            list(grid.catalog.search_substring("("))

    def test_search_requires_pattern(self, grid):
        with pytest.raises(ValueError):
            grid.catalog.search_substring("")

    def test_filters(self):
        assert prefix_filter("") == {}
        assert prefix_filter("a.b") == {"filename": {"$regex": r"^a\.b"}}
        assert substring_filter("a.b") == {"filename": {"$regex": "a.b"}}


class TestReplaceCoordinator:
    """Test store-then-delete replacement."""

    def test_replace_leaves_single_newest_object(self, grid, document_store):
        old = _store(grid, "x", b"first version", chunk_size=4)

        result = grid.replacer.store_and_replace(io.BytesIO(b"second"), "x", chunk_size=4)

        matches = list(grid.catalog.list_prefix("x"))
        assert [m.file_id for m in matches] == [result.stored.file_id]
        assert [m.file_id for m in result.removed] == [old.file_id]
        assert b"".join(grid.objects.read_file(grid.objects.find_file("x"))) == b"second"
        assert document_store.count("fs.chunks", {"files_id": old.file_id}) == 0

    def test_replace_removes_every_older_duplicate(self, grid):
        for content in [b"1", b"2", b"3"]:
            _store(grid, "many", content)

        result = grid.replacer.store_and_replace(io.BytesIO(b"4"), "many")

        assert len(result.removed) == 3
        assert _names(grid.catalog.list_prefix("")) == ["many"]

    def test_replace_without_existing_object(self, grid):
        result = grid.replacer.store_and_replace(io.BytesIO(b"only"), "fresh", content_type="text/plain")

        assert result.removed == []
        assert result.stored.content_type == "text/plain"

    def test_replace_leaves_other_names_alone(self, grid):
        other = _store(grid, "x.bak")

        grid.replacer.store_and_replace(io.BytesIO(b"new"), "x")

        assert grid.objects.find_file("x.bak").file_id == other.file_id

    def test_failure_after_store_leaves_both_objects(self, grid):
        old = _store(grid, "y", b"old")

        with patch.object(grid.objects, "remove_by_id", side_effect=StoreUnavailableError("store went away")):
            with pytest.raises(StoreUnavailableError):
                grid.replacer.store_and_replace(io.BytesIO(b"new"), "y")

        survivors = {m.file_id for m in grid.catalog.list_prefix("y")}
        assert old.file_id in survivors
        assert len(survivors) == 2
