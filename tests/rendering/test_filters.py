"""
Tests for built-in filters, called directly and through templates.
"""

import pytest

from prompteng.rendering import filters


class TestCoreFilters:
    """Tests for the core filter vocabulary."""

    @pytest.mark.parametrize("value", [None, ""])
    def test_default_substitutes(self, value):
        assert filters.default(value, "fallback") == "fallback"

    @pytest.mark.parametrize("value", ["v", 0, False, []])
    def test_default_keeps_other_values(self, value):
        assert filters.default(value, "fallback") == value

    def test_join(self):
        assert filters.join(["a", "b"]) == "a, b"
        assert filters.join(["a", 1, True], "/") == "a/1/true"
        assert filters.join("text", "/") == "text"
        assert filters.join(None) == ""

    def test_uniq_keeps_first_occurrence(self):
        assert filters.uniq(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
        assert filters.uniq([{"k": 1}, {"k": 1}]) == [{"k": 1}]
        assert filters.uniq("abc") == "abc"

    def test_uniq_distinguishes_bool_from_int(self):
        assert filters.uniq([1, True, 1]) == [1, True]

    @pytest.mark.parametrize(
        "value,expected",
        [([1, 2, 3], 3), ("four", 4), ({"a": 1, "b": 2}, 2), (None, 0), (12, 0)],
    )
    def test_length(self, value, expected):
        assert filters.length(value) == expected

    def test_case_folding(self):
        assert filters.lower("MiXed") == "mixed"
        assert filters.upper("MiXed") == "MIXED"
        assert filters.upper(None) == ""
        assert filters.upper(True) == "TRUE"

    def test_compact(self):
        assert filters.compact(["a", "", None, 0, [], "b", False]) == ["a", "b"]
        assert filters.compact("text") == "text"

    def test_sort_returns_copy(self):
        original = [3, 1, 2]
        assert filters.sort(original) == [1, 2, 3]
        assert original == [3, 1, 2]

    def test_sort_mixed_types_by_text(self):
        assert filters.sort([2, "10", "a"]) == ["10", 2, "a"]

    def test_sort_passthrough(self):
        assert filters.sort("cba") == "cba"


class TestExtraFilters:
    """Tests for the additional string and sequence filters."""

    def test_first_last(self):
        assert filters.first([1, 2]) == 1
        assert filters.last("abc") == "c"
        assert filters.first([]) is None
        assert filters.last(5) is None

    def test_string_edits(self):
        assert filters.strip("  x  ") == "x"
        assert filters.capitalize("hello WORLD") == "Hello world"
        assert filters.append("a", "b") == "ab"
        assert filters.prepend("a", "b") == "ba"
        assert filters.replace("a-b-c", "-", "+") == "a+b+c"
        assert filters.replace("abc", "") == "abc"

    def test_split(self):
        assert filters.split("a,b,c", ",") == ["a", "b", "c"]
        assert filters.split("abc", "") == ["a", "b", "c"]
        assert filters.split("", ",") == []

    def test_truncate(self):
        assert filters.truncate("short", 10) == "short"
        assert filters.truncate("abcdefghij", 6) == "abc..."
        assert filters.truncate("abcdef", "x") == "abcdef"

    def test_reverse(self):
        assert filters.reverse([1, 2, 3]) == [3, 2, 1]
        assert filters.reverse("abc") == "abc"

    def test_map(self):
        people = [{"name": "ann"}, {"name": "bob"}, {}]
        assert filters.map_property(people, "name") == ["ann", "bob", None]


class TestFiltersInTemplates:
    """Tests for filter chains written in template markup."""

    def test_join_then_upper(self, render):
        assert render('{{ names | join: "; " | upper }}', {"names": ["alice", "bob"]}) == "ALICE; BOB"

    @pytest.mark.parametrize("variables", [{}, {"x": ""}, {"x": None}])
    def test_default_when_unset_or_empty(self, render, variables):
        assert render("{{ x | default: 'fallback' }}", variables) == "fallback"

    def test_default_when_set(self, render):
        assert render("{{ x | default: 'fallback' }}", {"x": "v"}) == "v"

    def test_uniq_sort_join(self, render):
        assert render("{{ tags | uniq | sort | join }}", {"tags": ["b", "a", "b"]}) == "a, b"

    def test_length_and_size(self, render):
        assert render("{{ items | length }}/{{ items | size }}/{{ items.size }}", {"items": [1, 2]}) == "2/2/2"

    def test_compact_on_non_sequence_is_total(self, render):
        assert render("{{ x | compact | sort | uniq | join }}", {"x": 5}) == "5"

    def test_map_join(self, render):
        variables = {"people": [{"name": "ann"}, {"name": "bob"}]}
        assert render("{{ people | map: 'name' | join: ' & ' }}", variables) == "ann & bob"
