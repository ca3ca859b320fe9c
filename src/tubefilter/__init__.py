# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""tubefilter: rule-driven removal of unwanted items from video-site JSON payloads.

Settings (block lists, duration range, watched threshold, category toggles)
compile once into a CompiledConfig; an ObjectFilter then walks a parsed
response in place and deletes every item a rule matches, pruning the
wrappers it leaves empty.
"""

from __future__ import annotations

from tubefilter.config import CompiledConfig, DurationMode, RawConfig, compile_all, load_raw_config
from tubefilter.engine import CandidateRecord, FilterResult, ObjectFilter, filter_document
from tubefilter.errors import ConfigError, PredicateLoadError, RuleCompileError, TubeFilterError
from tubefilter.regex_compiler import UNCHANGED, FilterSpec, compile_entries
from tubefilter.rules import FilterRule, get_rule_table

__all__ = [
    "UNCHANGED",
    "CandidateRecord",
    "CompiledConfig",
    "ConfigError",
    "DurationMode",
    "FilterResult",
    "FilterRule",
    "FilterSpec",
    "ObjectFilter",
    "PredicateLoadError",
    "RawConfig",
    "RuleCompileError",
    "TubeFilterError",
    "compile_all",
    "compile_entries",
    "filter_document",
    "get_rule_table",
    "load_raw_config",
]
