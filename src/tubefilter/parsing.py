# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Duration and view-count text → numbers.

Only the English ``1.2M views`` form is understood; other locales yield
None so they never trigger a filter.
"""

from __future__ import annotations

import math
import re
from typing import Any

SHORTS_DURATION = -2  # overlay text of short-form items
UNPARSEABLE_DURATION = -1  # more than H:MM:SS
SHORTS_TOKEN = "SHORTS"

_MAX_DURATION_PARTS = 3
_DURATION_PART_RE = re.compile(r"\d+")

_VIEW_COUNT_RE = re.compile(r"(\d+(?:,\d+)*(?:\.\d+)?)([KMB])?\s+views?")
_VIEW_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}


def parse_duration(text: Any) -> int | float:
    """``H:MM:SS`` / ``MM:SS`` / ``SS`` → seconds.

    Returns SHORTS_DURATION for the shorts overlay, UNPARSEABLE_DURATION
    for too many components and NaN for anything else.
    """
    if isinstance(text, bool):
        return math.nan
    if isinstance(text, int):
        return text
    if isinstance(text, float):
        return int(text) if text.is_integer() else math.nan
    if not isinstance(text, str):
        return math.nan

    text = text.strip()
    if text == SHORTS_TOKEN:
        return SHORTS_DURATION

    parts = text.split(":")
    if len(parts) > _MAX_DURATION_PARTS:
        return UNPARSEABLE_DURATION
    if not all(_DURATION_PART_RE.fullmatch(p) for p in parts):
        return math.nan

    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def is_known_duration(value: int | float) -> bool:
    """True for a real length in seconds (not NaN, not a sentinel)."""
    return not (isinstance(value, float) and math.isnan(value)) and value >= 0


def parse_view_count(text: Any) -> int | None:
    """``1,234 views`` / ``5.2K views`` / ``1 view`` → int, else None."""
    if not isinstance(text, str):
        return None
    m = _VIEW_COUNT_RE.fullmatch(text.strip())
    if m is None:
        return None
    number, suffix = m.groups()
    value = float(number.replace(",", ""))
    if suffix:
        value *= _VIEW_MULTIPLIERS[suffix]
    return math.floor(value + 0.5)
