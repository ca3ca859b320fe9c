# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""tubefilter exception hierarchy.

All tubefilter-specific errors inherit from TubeFilterError, allowing callers
to catch the base class for any failure or specific subclasses for targeted
handling.
"""

from __future__ import annotations


class TubeFilterError(Exception):
    """Base exception for all tubefilter errors."""


class ConfigError(TubeFilterError):
    """Raw configuration could not be read or failed validation."""


class RuleCompileError(TubeFilterError):
    """A single filter entry could not be turned into a working pattern."""

    def __init__(self, message: str, *, category: str = "", entry: str = "") -> None:
        super().__init__(message)
        self.category = category
        self.entry = entry


class PredicateLoadError(TubeFilterError):
    """Custom predicate reference could not be resolved to a callable."""

    def __init__(self, message: str, *, source: str = "") -> None:
        super().__init__(message)
        self.source = source
