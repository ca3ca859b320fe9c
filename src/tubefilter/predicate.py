# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Custom predicate hook: loading and fail-open invocation.

A predicate is any callable ``(record, node_type) -> bool``. Settings
refer to one as ``"package.module:function"``; it is resolved once when
the filter is built. Errors inside the predicate never escape: they come
back as a PredicateOutcome with ``error`` set, and the engine keeps the
item.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tubefilter.errors import PredicateLoadError

if TYPE_CHECKING:
    from tubefilter.engine import CandidateRecord

Predicate = Callable[["CandidateRecord", str], Any]


@dataclass(frozen=True, slots=True)
class PredicateOutcome:
    """Result of one predicate call."""

    matched: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_predicate(source: str) -> Predicate:
    """Resolve ``"module:attr"`` (or ``"module.attr"``) to a callable.

    Raises:
        PredicateLoadError: bad reference, import failure, or not callable.
    """
    source = source.strip()
    if ":" in source:
        module_name, _, attr_path = source.partition(":")
    else:
        module_name, _, attr_path = source.rpartition(".")
    if not module_name or not attr_path:
        raise PredicateLoadError(f"predicate reference {source!r} is not 'module:callable'", source=source)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise PredicateLoadError(f"cannot import {module_name!r}: {exc}", source=source) from exc

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as exc:
            raise PredicateLoadError(f"{module_name!r} has no attribute {attr_path!r}", source=source) from exc

    if not callable(target):
        raise PredicateLoadError(f"{source!r} is not callable", source=source)
    return target


def invoke_predicate(predicate: Predicate, record: CandidateRecord, node_type: str) -> PredicateOutcome:
    """Call the predicate; any exception becomes a non-match with ``error`` set."""
    try:
        return PredicateOutcome(matched=bool(predicate(record, node_type)))
    except Exception as exc:
        return PredicateOutcome(matched=False, error=f"{type(exc).__name__}: {exc}")
