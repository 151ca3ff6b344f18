"""Tests for tag canonicalization and tag-set diff"""
from taskboard.domain.tag import diff_tags, normalize_tag, normalize_tags


class TestNormalize:
    def test_lower_and_strip(self):
        assert normalize_tag("  Work ") == "work"

    def test_dedupe_keeps_first_occurrence(self):
        assert normalize_tags(["B", "a", "b", "A", "c"]) == ["b", "a", "c"]

    def test_drops_empty(self):
        assert normalize_tags(["", "  ", "x"]) == ["x"]

    def test_none(self):
        assert normalize_tags(None) == []


class TestDiffTags:
    def test_add_and_remove(self):
        to_add, to_remove = diff_tags(["work", "home"], ["Home", "urgent"])
        assert to_add == ["urgent"]
        assert to_remove == ["work"]

    def test_no_changes(self):
        assert diff_tags(["a", "b"], ["B", "A"]) == ([], [])

    def test_clear_all(self):
        assert diff_tags(["a", "b"], []) == ([], ["a", "b"])

    def test_from_empty(self):
        assert diff_tags([], ["x", "y"]) == (["x", "y"], [])
