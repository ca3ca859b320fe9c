# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for tubefilter.paths: path lookups and rich-text flattening."""

from __future__ import annotations

import pytest

from tubefilter.paths import flatten_text, get_by_path, get_flattened_by_path, split_path

TREE = {
    "a": {"b": [{"c": 1}, {"c": 2, "d": "x"}]},
    "runs": [
        {"text": "no link"},
        {"text": "linked", "navigationEndpoint": {"browseEndpoint": {"browseId": "UC1"}}},
    ],
    "nothing": None,
    "zero": 0,
    "empty": "",
}


class TestSplitPath:
    def test_dotted(self):
        assert split_path("a.b.c") == ["a", "b", "c"]

    def test_brackets(self):
        assert split_path("a.b[2].c") == ["a", "b", 2, "c"]

    def test_negative_index(self):
        assert split_path("a[-1]") == ["a", -1]

    def test_sequence_passthrough(self):
        assert split_path(["a", 0, "b"]) == ["a", 0, "b"]

    def test_empty(self):
        assert split_path("") == []


class TestGetByPath:
    def test_nested(self):
        assert get_by_path(TREE, "a.b[1].d") == "x"

    def test_sequence_path(self):
        assert get_by_path(TREE, ["a", "b", 0, "c"]) == 1

    def test_numeric_dotted_segment_indexes_list(self):
        assert get_by_path(TREE, "a.b.1.c") == 2

    def test_negative_index(self):
        assert get_by_path(TREE, "a.b[-1].c") == 2

    def test_index_out_of_range(self):
        assert get_by_path(TREE, "a.b[5].c", "dflt") == "dflt"
        assert get_by_path(TREE, "a.b[-3].c", "dflt") == "dflt"

    def test_list_search_first_hit(self):
        assert get_by_path(TREE, "a.b.c") == 1
        assert get_by_path(TREE, "a.b.d") == "x"

    def test_list_search_skips_misses(self):
        assert get_by_path(TREE, "runs.navigationEndpoint.browseEndpoint.browseId") == "UC1"

    def test_missing_key(self):
        assert get_by_path(TREE, "a.zzz") is None
        assert get_by_path(TREE, "a.zzz", default=7) == 7

    def test_through_scalar(self):
        assert get_by_path(TREE, "zero.deeper", "dflt") == "dflt"

    def test_none_value_is_missing(self):
        assert get_by_path(TREE, "nothing", "dflt") == "dflt"

    def test_falsy_values_returned(self):
        assert get_by_path(TREE, "zero", "dflt") == 0
        assert get_by_path(TREE, "empty", "dflt") == ""

    @pytest.mark.parametrize("root", [None, 5, "text", [], {}])
    def test_odd_roots(self, root):
        assert get_by_path(root, "a.b", "dflt") == "dflt"

    def test_empty_path(self):
        assert get_by_path(TREE, "", "dflt") == "dflt"
        assert get_by_path(TREE, None, "dflt") == "dflt"


class TestFlattenText:
    def test_simple_text(self):
        assert flatten_text({"simpleText": "hello"}) == "hello"

    def test_simple_text_wins_over_runs(self):
        assert flatten_text({"simpleText": "a", "runs": [{"text": "b"}]}) == "a"

    def test_runs_joined_with_space(self):
        assert flatten_text({"runs": [{"text": "Hello"}, {"text": "world"}]}) == "Hello world"

    def test_runs_skip_textless(self):
        assert flatten_text({"runs": [{"text": "a"}, {"emoji": {}}, {"text": "b"}]}) == "a b"

    def test_empty_runs(self):
        assert flatten_text({"runs": []}) == ""

    @pytest.mark.parametrize("value", ["plain", 5, None, [1, 2], {"other": 1}])
    def test_passthrough(self, value):
        assert flatten_text(value) == value


class TestGetFlattenedByPath:
    def test_first_candidate_that_resolves(self):
        obj = {"longBylineText": {"runs": [{"text": "Chan"}]}}
        assert get_flattened_by_path(obj, ("shortBylineText", "longBylineText")) == "Chan"

    def test_single_path(self):
        assert get_flattened_by_path({"title": {"simpleText": "T"}}, "title") == "T"

    def test_none_paths(self):
        assert get_flattened_by_path({"title": "T"}, None, "dflt") == "dflt"

    def test_no_candidate(self):
        assert get_flattened_by_path({}, ("a", "b"), "dflt") == "dflt"
