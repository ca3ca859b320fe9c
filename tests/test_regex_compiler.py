# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for tubefilter.regex_compiler: raw entries to (pattern, flags)."""

from __future__ import annotations

import logging
import re

import pytest

from tubefilter.errors import RuleCompileError
from tubefilter.regex_compiler import (
    UNCHANGED,
    FilterSpec,
    compile_entries,
    compile_entry,
    escape_keyword,
    to_flags,
    to_pattern,
)


def _matches(entry: str, category: str, text: str) -> bool:
    return to_pattern(compile_entry(entry, category)).search(text) is not None


class TestCompileEntries:
    @pytest.mark.parametrize("value", [None, "abc", 42, {"a": 1}, ("x",)])
    def test_non_list_is_unchanged(self, value):
        assert compile_entries(value, "title") is UNCHANGED

    def test_clear_signal(self):
        assert compile_entries([""], "title") == []

    def test_empty_list(self):
        assert compile_entries([], "title") == []

    def test_dedup_keeps_first_seen_order(self):
        specs = compile_entries(["dup", "dup", "x"], "videoId")
        assert specs == [FilterSpec("^dup$", ""), FilterSpec("^x$", "")]

    def test_comments_and_blanks_skipped(self):
        specs = compile_entries(["// a note", "", "   ", "keep"], "videoId")
        assert specs == [FilterSpec("^keep$", "")]

    def test_whitespace_only_entry_is_blank_not_empty_match(self):
        assert compile_entries(["   "], "videoId") == []

    def test_entries_are_trimmed(self):
        assert compile_entries(["  abc  "], "channelId") == [FilterSpec("^abc$", "")]

    def test_trimmed_duplicates_collapse(self):
        assert len(compile_entries(["abc", " abc"], "videoId")) == 1

    def test_non_string_entries_skipped(self):
        assert compile_entries([1, None, "x"], "videoId") == [FilterSpec("^x$", "")]

    def test_bad_entry_dropped_rest_kept(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tubefilter.regex_compiler"):
            specs = compile_entries(["/(unclosed/", "fine"], "title")
        assert len(specs) == 1
        assert specs[0].flags == "i"
        assert "Dropping title filter" in caplog.text

    def test_unknown_flag_dropped(self):
        assert compile_entries(["/foo/q"], "title") == []


class TestCompileEntry:
    def test_identifier_is_exact(self):
        assert compile_entry("abc123", "videoId") == FilterSpec("^abc123$", "")
        assert _matches("abc123", "videoId", "abc123")
        assert not _matches("abc123", "videoId", "abc123x")
        assert not _matches("abc123", "videoId", "xabc123")

    def test_identifier_ignores_slash_syntax(self):
        assert compile_entry("/abc/", "channelId") == FilterSpec("^/abc/$", "")

    def test_raw_regex_passthrough(self):
        assert compile_entry("/foo|bar/i", "title") == FilterSpec("foo|bar", "i")

    def test_raw_regex_without_flags_is_case_sensitive(self):
        assert not _matches("/foo/", "title", "Foo bar")
        assert _matches("/foo/i", "title", "Foo bar")

    def test_keyword_is_case_insensitive(self):
        spec = compile_entry("block", "title")
        assert spec.flags == "i"
        assert _matches("block", "title", "BLOCK")

    @pytest.mark.parametrize(
        "text",
        ["block", "please block this", "Block party", "the block", "(block)", "#block!", "a-block-b", "x_block_y"],
    )
    def test_keyword_boundaries_match(self, text):
        assert _matches("block", "title", text)

    @pytest.mark.parametrize("text", ["blockchain", "unblock", "blocks", "block2"])
    def test_keyword_inside_word_does_not_match(self, text):
        assert not _matches("block", "title", text)

    def test_keyword_metacharacters_escaped(self):
        assert _matches("c++", "title", "learn c++ today")
        assert not _matches("c++", "title", "learn cc today")
        assert _matches("a.b", "channelName", "a.b")
        assert not _matches("a.b", "channelName", "axb")

    def test_multi_word_keyword(self):
        assert _matches("full movie", "title", "Watch: Full Movie (2024)")

    def test_error_carries_category_and_entry(self):
        with pytest.raises(RuleCompileError) as exc_info:
            compile_entry("/[a-/", "description")
        assert exc_info.value.category == "description"
        assert exc_info.value.entry == "/[a-/"


class TestFlags:
    def test_known_flags(self):
        assert to_flags("i") == re.IGNORECASE
        assert to_flags("im") == re.IGNORECASE | re.MULTILINE
        assert to_flags("gu") == 0

    def test_unknown_flag_raises(self):
        with pytest.raises(RuleCompileError, match="unsupported regex flag"):
            to_flags("x")

    def test_to_pattern_accepts_lists(self):
        assert to_pattern(["abc", "i"]).search("xABCx")

    def test_to_pattern_invalid(self):
        with pytest.raises(RuleCompileError):
            to_pattern(FilterSpec("(", ""))


class TestEscapeKeyword:
    def test_escapes(self):
        assert escape_keyword("a.b") == r"a\.b"
        assert escape_keyword("(x)") == r"\(x\)"
        assert escape_keyword("$5") == r"\$5"

    def test_plain_text_unchanged(self):
        assert escape_keyword("hello world") == "hello world"

    def test_unchanged_repr(self):
        assert repr(UNCHANGED) == "UNCHANGED"
