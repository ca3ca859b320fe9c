# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Path lookups into untyped JSON trees, and rich-text flattening.

Path syntax: ``a.b[2].c`` or a pre-split sequence ``["a", "b", 2, "c"]``.

A named segment that lands on a list searches the list: the remaining
path is tried against each element in order and the first element that
resolves wins. So ``runs.navigationEndpoint.browseEndpoint.browseId``
finds the first run that carries a browse endpoint.

Lookups never raise; any miss returns the caller's default.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()

_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(-?\d+)\]")
_INDEX_RE = re.compile(r"-?\d+")

DIRECT_TEXT_KEY = "simpleText"
RUNS_KEY = "runs"
RUN_TEXT_KEY = "text"

PathSpec = str | Sequence[str]


def split_path(path: str | Sequence[str | int]) -> list[str | int]:
    """Split a dotted/bracketed path into segments.

    Bracket segments become ints (negative ones included); dotted
    segments stay strings even when numeric.
    """
    if isinstance(path, str):
        segments: list[str | int] = []
        for m in _SEGMENT_RE.finditer(path):
            name, index = m.groups()
            segments.append(int(index) if index is not None else name)
        return segments
    return list(path)


def _as_index(segment: str | int) -> int | None:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment
    if isinstance(segment, str) and _INDEX_RE.fullmatch(segment):
        return int(segment)
    return None


def _resolve(node: Any, segments: Sequence[str | int], pos: int) -> Any:
    while pos < len(segments):
        if node is None:
            return _MISSING
        segment = segments[pos]

        if isinstance(node, list):
            index = _as_index(segment)
            if index is None:
                for item in node:
                    found = _resolve(item, segments, pos)
                    if found is not _MISSING:
                        return found
                return _MISSING
            if not -len(node) <= index < len(node):
                return _MISSING
            node = node[index]
        elif isinstance(node, Mapping):
            key = segment if isinstance(segment, str) else str(segment)
            if key not in node:
                return _MISSING
            node = node[key]
        else:
            return _MISSING
        pos += 1

    return _MISSING if node is None else node


def get_by_path(root: Any, path: str | Sequence[str | int] | None, default: Any = None) -> Any:
    """Return the value at ``path`` inside ``root``, or ``default``."""
    if root is None or not path:
        return default
    segments = split_path(path)
    if not segments:
        return default
    found = _resolve(root, segments, 0)
    return default if found is _MISSING else found


def flatten_text(value: Any) -> Any:
    """``{"simpleText": s}`` → s, ``{"runs": [...]}`` → joined run text.

    Anything else is returned unchanged.
    """
    if not isinstance(value, Mapping):
        return value
    if DIRECT_TEXT_KEY in value:
        return value[DIRECT_TEXT_KEY]
    runs = value.get(RUNS_KEY)
    if isinstance(runs, list):
        return " ".join(
            run[RUN_TEXT_KEY] for run in runs if isinstance(run, Mapping) and isinstance(run.get(RUN_TEXT_KEY), str)
        )
    return value


def get_flattened_by_path(root: Any, paths: PathSpec | None, default: Any = None) -> Any:
    """First candidate path that resolves, run through ``flatten_text``."""
    if paths is None:
        return default
    candidates = (paths,) if isinstance(paths, str) else paths
    for path in candidates:
        found = get_by_path(root, path, _MISSING)
        if found is not _MISSING:
            return flatten_text(found)
    return default
