# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Recursive object filter over JSON-shaped payloads (in-place).

Algorithm, per dict node:
  1. For every rule-table key on the node, extract a CandidateRecord and
     run the checks, first hit wins:
       text filters → duration range → watched % → category toggle → predicate
  2. Matched keys are deleted from the node.
  3. Remaining children are walked depth-first.
  4. A list element that lost a key and is now hollow (or was left empty)
     is deleted.
  5. A PRUNABLE_CONTAINERS value that lost content and is now hollow is
     deleted too, and the loss propagates upward.

Containers untouched in this pass are never pruned, so a second pass with
the same config changes nothing.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from tubefilter.config import CompiledConfig, DurationMode
from tubefilter.errors import PredicateLoadError, RuleCompileError
from tubefilter.parsing import SHORTS_DURATION, is_known_duration, parse_duration, parse_view_count
from tubefilter.paths import get_by_path, get_flattened_by_path
from tubefilter.predicate import Predicate, invoke_predicate, load_predicate
from tubefilter.regex_compiler import to_pattern
from tubefilter.rules import (
    CATEGORY_FIELDS,
    MAIN_RULES,
    PRUNABLE_CONTAINERS,
    SHORTS,
    TOGGLE_CHANNEL_IDS,
    TOGGLE_CHANNEL_NAMES,
    FilterRule,
)

logger = logging.getLogger(__name__)

_BADGE_STYLE_PATH = "metadataBadgeRenderer.style"
_BADGE_STYLES: dict[str, str] = {
    "BADGE_STYLE_TYPE_VERIFIED": "verified",
    "BADGE_STYLE_TYPE_VERIFIED_ARTIST": "artist",
    "BADGE_STYLE_TYPE_LIVE_NOW": "live",
    "BADGE_STYLE_TYPE_MEMBERS_ONLY": "members",
}

REASON_PRUNED = "pruned"
REASON_DURATION = "vidLength"
REASON_PERCENT_WATCHED = "percentWatched"
REASON_PREDICATE = "javascript"


class _Change(IntEnum):
    NONE = 0
    NESTED = 1  # something below was removed
    DIRECT = 2  # this node lost one of its own keys


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    """Normalised view of one content item, as seen by checks and predicates."""

    node_type: str
    video_id: str | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    title: str | None = None
    comment: str | None = None
    description: str | None = None
    duration: int | float = math.nan
    view_count: int | None = None
    percent_watched: float | None = None
    badges: tuple[str, ...] = ()
    published: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class FilterResult:
    """Outcome of one traversal. ``document`` is the caller's object, mutated."""

    document: Any
    nothing_to_filter: bool = False
    total_nodes: int = 0
    removed: int = 0
    pruned: int = 0
    removal_reasons: dict[str, int] = field(default_factory=dict)

    def record(self, reason: str) -> None:
        if reason == REASON_PRUNED:
            self.pruned += 1
        else:
            self.removed += 1
        self.removal_reasons[reason] = self.removal_reasons.get(reason, 0) + 1


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _badge_names(badges: Any) -> tuple[str, ...]:
    if not isinstance(badges, list):
        return ()
    names = []
    for badge in badges:
        style = get_by_path(badge, _BADGE_STYLE_PATH)
        if isinstance(style, str) and style in _BADGE_STYLES:
            names.append(_BADGE_STYLES[style])
    return tuple(names)


def _is_hollow(node: Any) -> bool:
    """Only scalars (tracking params and the like) and empty containers left."""
    values = node.values() if isinstance(node, dict) else node
    return all(not v for v in values if isinstance(v, (dict, list)))


def build_record(node_type: str, rule: FilterRule, obj: Mapping[str, Any]) -> CandidateRecord:
    """Extract every field ``rule`` names from the node value ``obj``."""
    duration_text = get_flattened_by_path(obj, rule.duration)
    return CandidateRecord(
        node_type=node_type,
        video_id=_as_text(get_flattened_by_path(obj, rule.video_id)),
        channel_id=_as_text(get_flattened_by_path(obj, rule.channel_id)),
        channel_name=_as_text(get_flattened_by_path(obj, rule.channel_name)),
        title=_as_text(get_flattened_by_path(obj, rule.title)),
        comment=_as_text(get_flattened_by_path(obj, rule.comment)),
        description=_as_text(get_flattened_by_path(obj, rule.description)),
        duration=math.nan if duration_text is None else parse_duration(duration_text),
        view_count=parse_view_count(get_flattened_by_path(obj, rule.view_count)),
        percent_watched=_as_number(get_flattened_by_path(obj, rule.percent_watched)),
        badges=_badge_names(get_flattened_by_path(obj, rule.badges)),
        published=_as_text(get_flattened_by_path(obj, rule.published)),
    )


def _compile_matchers(config: CompiledConfig) -> dict[str, tuple[re.Pattern[str], ...]]:
    """Turn transport specs into patterns, adding toggle-implied exact filters."""
    matchers: dict[str, list[re.Pattern[str]]] = {}
    for category, specs in config.filters.items():
        if category not in CATEGORY_FIELDS:
            continue
        patterns = matchers.setdefault(category, [])
        for spec in specs:
            try:
                patterns.append(to_pattern(spec))
            except RuleCompileError as exc:
                logger.warning("Skipping %s filter %r: %s", category, spec.pattern, exc)

    for toggle in sorted(config.enabled_toggles):
        for value in TOGGLE_CHANNEL_IDS.get(toggle, ()):
            matchers.setdefault("channelId", []).append(re.compile(f"^{re.escape(value)}$"))
        for value in TOGGLE_CHANNEL_NAMES.get(toggle, ()):
            matchers.setdefault("channelName", []).append(re.compile(f"^{re.escape(value)}$"))

    return {category: tuple(patterns) for category, patterns in matchers.items() if patterns}


class ObjectFilter:
    """Filter bound to one CompiledConfig and one rule table.

    Holds no per-document state, so one instance can filter many documents
    in turn. Reconfigure by building a new instance.

    Args:
        config: Compiled settings.
        rules: Node-type → FilterRule table (default: MAIN_RULES).
        predicate: Custom predicate; overrides ``config.javascript``. Only
            consulted when ``config.enable_javascript`` is set.

    Example::

        result = ObjectFilter(compile_all(raw)).filter(payload)
        print(result.removed, result.removal_reasons)
    """

    def __init__(
        self,
        config: CompiledConfig,
        rules: Mapping[str, FilterRule] = MAIN_RULES,
        *,
        predicate: Predicate | None = None,
    ) -> None:
        self._config = config
        self._rules = rules
        self._matchers = _compile_matchers(config)
        self._toggles = config.enabled_toggles
        self._predicate = self._resolve_predicate(config, predicate)

    @staticmethod
    def _resolve_predicate(config: CompiledConfig, predicate: Predicate | None) -> Predicate | None:
        if not config.enable_javascript:
            return None
        if predicate is not None:
            return predicate
        if not config.javascript:
            return None
        try:
            return load_predicate(config.javascript)
        except PredicateLoadError as exc:
            logger.warning("Custom predicate disabled: %s", exc)
            return None

    @property
    def config(self) -> CompiledConfig:
        return self._config

    @property
    def is_data_empty(self) -> bool:
        """True when no check could ever remove anything."""
        cfg = self._config
        return (
            not self._matchers
            and not cfg.has_duration_range
            and cfg.percent_watched_hide is None
            and not self._toggles
            and self._predicate is None
        )

    def filter(self, document: Any) -> FilterResult:
        """Filter ``document`` in place and report what was removed."""
        result = FilterResult(document=document, nothing_to_filter=self.is_data_empty)
        if document is None or result.nothing_to_filter:
            return result

        self._walk(document, result)

        logger.debug(
            "Object filter: %d removed, %d pruned over %d nodes (%s)",
            result.removed,
            result.pruned,
            result.total_nodes,
            result.removal_reasons,
        )
        return result

    # ---- traversal ----

    def _walk(self, node: Any, result: FilterResult) -> _Change:
        if isinstance(node, dict):
            return self._walk_dict(node, result)
        if isinstance(node, list):
            return self._walk_list(node, result)
        return _Change.NONE

    def _walk_dict(self, node: dict, result: FilterResult) -> _Change:
        result.total_nodes += 1
        change = _Change.DIRECT if self._remove_matches(node, result) else _Change.NONE

        for key in list(node):
            child = node[key]
            if not isinstance(child, (dict, list)):
                continue
            if not self._walk(child, result):
                continue
            if key in PRUNABLE_CONTAINERS and _is_hollow(child):
                del node[key]
                result.record(REASON_PRUNED)
                change = _Change.DIRECT
            else:
                change = max(change, _Change.NESTED)
        return change

    def _walk_list(self, node: list, result: FilterResult) -> _Change:
        change = _Change.NONE
        # Reverse so deletions never shift elements still to be visited.
        for i in range(len(node) - 1, -1, -1):
            child = node[i]
            if not isinstance(child, (dict, list)):
                continue
            child_change = self._walk(child, result)
            if not child_change:
                continue
            change = _Change.NESTED
            if not child or (child_change is _Change.DIRECT and _is_hollow(child)):
                del node[i]
        return change

    def _remove_matches(self, node: dict, result: FilterResult) -> bool:
        removed = False
        for node_type, rule in self._rules.items():
            obj = node.get(node_type)
            if not isinstance(obj, dict):
                continue
            reason = self.match(node_type, rule, obj)
            if reason is not None:
                del node[node_type]
                result.record(reason)
                removed = True
        return removed

    # ---- checks ----

    def match(self, node_type: str, rule: FilterRule, obj: Mapping[str, Any]) -> str | None:
        """Return the removal reason for one node value, or None to keep it."""
        record = build_record(node_type, rule, obj)

        for category, patterns in self._matchers.items():
            value = getattr(record, CATEGORY_FIELDS[category])
            if value is not None and any(p.search(value) for p in patterns):
                return category

        if self._duration_hit(record.duration):
            return REASON_DURATION

        threshold = self._config.percent_watched_hide
        if threshold is not None and record.percent_watched is not None and record.percent_watched >= threshold:
            return REASON_PERCENT_WATCHED

        hit = rule.categories & self._toggles
        if hit:
            return f"category:{min(hit)}"
        if SHORTS in self._toggles and record.duration == SHORTS_DURATION:
            return f"category:{SHORTS}"

        if self._predicate is not None:
            outcome = invoke_predicate(self._predicate, record, node_type)
            if not outcome.ok:
                logger.warning("Custom predicate failed on %s, keeping item: %s", node_type, outcome.error)
            elif outcome.matched:
                return REASON_PREDICATE

        return None

    def _duration_hit(self, seconds: int | float) -> bool:
        cfg = self._config
        if not cfg.has_duration_range or not is_known_duration(seconds):
            return False
        low, high = cfg.vid_length
        if cfg.vid_length_mode is DurationMode.BLOCK:
            return (low is None or seconds >= low) and (high is None or seconds <= high)
        return (low is not None and seconds < low) or (high is not None and seconds > high)


def filter_document(
    document: Any,
    config: CompiledConfig,
    rules: Mapping[str, FilterRule] = MAIN_RULES,
    *,
    predicate: Predicate | None = None,
) -> FilterResult:
    """One-shot convenience: build an ObjectFilter and run it once."""
    return ObjectFilter(config, rules, predicate=predicate).filter(document)
