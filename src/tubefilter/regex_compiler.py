# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Raw filter entries → canonical (pattern, flags) pairs.

The compiled form is plain strings so it can be cached, serialised and
shipped to whatever process runs the filter. ``re.Pattern`` objects are
only built on the filtering side (see ``to_pattern``).

Entry forms:
  - identifier categories (videoId, channelId): exact match ``^value$``
  - ``/pattern/flags``: user regex, passed through verbatim
  - anything else: literal keyword, escaped and wrapped in word-ish
    boundaries, case-insensitive
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable
from typing import NamedTuple

from tubefilter.errors import RuleCompileError

logger = logging.getLogger(__name__)

ID_CATEGORIES = frozenset({"videoId", "channelId"})
KEYWORD_CATEGORIES = frozenset({"title", "channelName", "comment", "description"})
TEXT_CATEGORIES: tuple[str, ...] = ("title", "channelName", "channelId", "videoId", "comment", "description")

COMMENT_PREFIX = "//"

# Punctuation + whitespace run that counts as a keyword boundary.
BOUNDARY = "[ \n\r\t!@#$%^&*()_\\-=+\\[\\]\\\\\\|;:'\",\\.\\/<>\\?`~:]+"

_RAW_REGEX_RE = re.compile(r"^/(.*)/(.*)$")
_KEYWORD_META_RE = re.compile(r"[\\^$*+?.()|\[\]{}]")

# Flag letters accepted in ``/pattern/flags``. None = accepted, no effect.
_FLAG_MAP: dict[str, int | None] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": None,  # str patterns are unicode already
    "g": None,  # matching is always a single search
    "y": None,
    "d": None,
}


class FilterSpec(NamedTuple):
    """One compiled rule: regex source plus flag letters."""

    pattern: str
    flags: str = ""


class _Unchanged(enum.Enum):
    UNCHANGED = "unchanged"

    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED = _Unchanged.UNCHANGED
"""Returned when the input is not a list: the caller keeps its old filters."""


def to_flags(flags: str) -> int:
    """Translate flag letters to ``re`` flags. Unknown letters raise RuleCompileError."""
    value = 0
    for letter in flags:
        if letter not in _FLAG_MAP:
            raise RuleCompileError(f"unsupported regex flag {letter!r}", entry=flags)
        mapped = _FLAG_MAP[letter]
        if mapped is not None:
            value |= mapped
    return value


def to_pattern(spec: FilterSpec | tuple[str, str] | list[str]) -> re.Pattern[str]:
    """Build the matcher for a compiled spec.

    Raises:
        RuleCompileError: invalid regex source or flags.
    """
    pattern, flags = spec[0], spec[1] if len(spec) > 1 else ""
    try:
        return re.compile(pattern, to_flags(flags))
    except (re.error, OverflowError) as exc:
        raise RuleCompileError(f"invalid regex /{pattern}/{flags}: {exc}", entry=pattern) from exc


def escape_keyword(value: str) -> str:
    """Escape regex metacharacters the same way for every keyword."""
    return _KEYWORD_META_RE.sub(r"\\\g<0>", value)


def _clean_entries(entries: Iterable[object]) -> list[str]:
    """Trim, drop blanks/comments, dedupe keeping first-seen order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for raw in entries:
        if not isinstance(raw, str):
            continue
        value = raw.strip()
        if not value or value.startswith(COMMENT_PREFIX):
            continue
        if value in seen:
            continue
        seen.add(value)
        cleaned.append(value)
    return cleaned


def compile_entry(value: str, category: str) -> FilterSpec:
    """Compile a single cleaned entry for ``category``.

    Raises:
        RuleCompileError: the resulting spec would not compile.
    """
    if category in ID_CATEGORIES:
        spec = FilterSpec(f"^{value}$", "")
    else:
        raw = _RAW_REGEX_RE.match(value)
        if raw is not None:
            spec = FilterSpec(raw.group(1), raw.group(2))
        else:
            spec = FilterSpec(f"(^|{BOUNDARY})({escape_keyword(value)})({BOUNDARY}|$)", "i")

    try:
        to_pattern(spec)
    except RuleCompileError as exc:
        raise RuleCompileError(str(exc), category=category, entry=value) from exc
    return spec


def compile_entries(entries: object, category: str) -> list[FilterSpec] | _Unchanged:
    """Compile the raw entry list of one category.

    Returns ``UNCHANGED`` for non-list input and ``[]`` for the explicit
    clear-all signal ``[""]``. A bad entry is logged and dropped; the rest
    of the category still compiles.
    """
    if not isinstance(entries, list):
        return UNCHANGED
    if entries == [""]:
        return []

    specs: list[FilterSpec] = []
    for value in _clean_entries(entries):
        try:
            specs.append(compile_entry(value, category))
        except RuleCompileError as exc:
            logger.warning("Dropping %s filter %r: %s", category, value, exc)
    return specs
