# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Raw settings → CompiledConfig.

The raw shape is the one settings UIs persist::

    filterData:
      videoId: [...]          # one list per text category
      channelName: [...]
      vidLength: [60, null]   # seconds, null = unbounded
      percentWatchedHide: 90
      javascript: "pkg.module:predicate"
    options:
      shorts: true
      vidLength_type: allow   # or block
      enable_javascript: false

CompiledConfig is the transport form: frozen, tuple-valued, and
round-trips through JSON via ``to_dict`` / ``from_dict``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tubefilter.errors import ConfigError
from tubefilter.regex_compiler import TEXT_CATEGORIES, UNCHANGED, FilterSpec, compile_entries

logger = logging.getLogger(__name__)

TOGGLES: tuple[str, ...] = ("shorts", "movies", "mixes", "trending")


class DurationMode(StrEnum):
    """How the vidLength range is applied."""

    ALLOW = "allow"  # keep items inside the range, remove the rest
    BLOCK = "block"  # remove items inside the range


def _as_bound(value: Any) -> float | None:
    """Duration bound / threshold: numbers only, NaN and junk mean unset."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


# ---------------------------------------------------------------------------
# Raw (persisted) shape
# ---------------------------------------------------------------------------


class RawFilterData(BaseModel):
    """``filterData`` block. Text categories stay loosely typed on purpose:
    a non-list value means "leave this category alone", not an error."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    video_id: Any = Field(None, alias="videoId")
    channel_id: Any = Field(None, alias="channelId")
    channel_name: Any = Field(None, alias="channelName")
    title: Any = None
    comment: Any = None
    description: Any = None
    vid_length: tuple[float | None, float | None] = Field((None, None), alias="vidLength")
    percent_watched_hide: float | None = Field(None, alias="percentWatchedHide")
    javascript: str = ""

    @field_validator("vid_length", mode="before")
    @classmethod
    def _coerce_vid_length(cls, value: Any) -> tuple[float | None, float | None]:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            return (None, None)
        return (_as_bound(value[0]), _as_bound(value[1]))

    @field_validator("percent_watched_hide", mode="before")
    @classmethod
    def _coerce_threshold(cls, value: Any) -> float | None:
        return _as_bound(value)

    @field_validator("javascript", mode="before")
    @classmethod
    def _coerce_javascript(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    def category(self, name: str) -> tuple[bool, Any]:
        """(present, raw value) for a text category by its persisted name."""
        attr = _CATEGORY_FIELDS[name]
        return attr in self.model_fields_set, getattr(self, attr)


_CATEGORY_FIELDS: dict[str, str] = {
    "videoId": "video_id",
    "channelId": "channel_id",
    "channelName": "channel_name",
    "title": "title",
    "comment": "comment",
    "description": "description",
}


class RawOptions(BaseModel):
    """``options`` block: category toggles and mode switches."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    shorts: bool = False
    movies: bool = False
    mixes: bool = False
    trending: bool = False
    enable_javascript: bool = False
    vid_length_type: DurationMode = Field(DurationMode.ALLOW, alias="vidLength_type")
    percent_watched_hide: float | None = None

    @field_validator("vid_length_type", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> DurationMode:
        return DurationMode.BLOCK if value == DurationMode.BLOCK.value else DurationMode.ALLOW

    @field_validator("percent_watched_hide", mode="before")
    @classmethod
    def _coerce_threshold(cls, value: Any) -> float | None:
        return _as_bound(value)


class RawConfig(BaseModel):
    """Top-level persisted settings document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    filter_data: RawFilterData = Field(default_factory=RawFilterData, alias="filterData")
    options: RawOptions = Field(default_factory=RawOptions)


def parse_raw_config(data: Mapping[str, Any] | RawConfig) -> RawConfig:
    """Validate a raw settings mapping.

    Raises:
        ConfigError: the mapping does not fit the raw settings shape.
    """
    if isinstance(data, RawConfig):
        return data
    if not isinstance(data, Mapping):
        raise ConfigError(f"raw config must be a mapping, got {type(data).__name__}")
    try:
        return RawConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"invalid raw config: {exc}") from exc


def load_raw_config(path: str | Path) -> RawConfig:
    """Read a YAML or JSON settings file.

    Raises:
        ConfigError: unreadable file, parse error, or invalid shape.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {p}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config {p}: {exc}") from exc
    if data is None:
        data = {}
    return parse_raw_config(data)


# ---------------------------------------------------------------------------
# Compiled (transport) shape
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompiledConfig:
    """Everything one traversal needs. Never mutated; swap the whole object."""

    filters: Mapping[str, tuple[FilterSpec, ...]] = field(default_factory=dict)
    vid_length: tuple[float | None, float | None] = (None, None)
    vid_length_mode: DurationMode = DurationMode.ALLOW
    percent_watched_hide: float | None = None
    shorts: bool = False
    movies: bool = False
    mixes: bool = False
    trending: bool = False
    javascript: str = ""
    enable_javascript: bool = False

    def __post_init__(self) -> None:
        frozen = {
            name: tuple(FilterSpec(*spec) for spec in specs) for name, specs in self.filters.items()
        }
        object.__setattr__(self, "filters", MappingProxyType(frozen))
        object.__setattr__(self, "vid_length", (_as_bound(self.vid_length[0]), _as_bound(self.vid_length[1])))
        object.__setattr__(self, "vid_length_mode", DurationMode(self.vid_length_mode))
        object.__setattr__(self, "percent_watched_hide", _as_bound(self.percent_watched_hide))

    @property
    def has_duration_range(self) -> bool:
        return self.vid_length[0] is not None or self.vid_length[1] is not None

    @property
    def enabled_toggles(self) -> frozenset[str]:
        return frozenset(name for name in TOGGLES if getattr(self, name))

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe transport form (same layout as the raw settings)."""
        filter_data: dict[str, Any] = {
            name: [[spec.pattern, spec.flags] for spec in specs] for name, specs in self.filters.items()
        }
        filter_data["vidLength"] = list(self.vid_length)
        filter_data["percentWatchedHide"] = self.percent_watched_hide
        filter_data["javascript"] = self.javascript
        options: dict[str, Any] = {name: getattr(self, name) for name in TOGGLES}
        options["vidLength_type"] = self.vid_length_mode.value
        options["enable_javascript"] = self.enable_javascript
        return {"filterData": filter_data, "options": options}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompiledConfig:
        """Rebuild from ``to_dict`` output.

        Raises:
            ConfigError: the transport payload is malformed.
        """
        filter_data = data.get("filterData") or {}
        options = data.get("options") or {}
        if not isinstance(filter_data, Mapping) or not isinstance(options, Mapping):
            raise ConfigError("compiled config needs mapping 'filterData' and 'options'")

        filters: dict[str, tuple[FilterSpec, ...]] = {}
        for name in TEXT_CATEGORIES:
            if name not in filter_data:
                continue
            specs = filter_data[name]
            if not isinstance(specs, list):
                raise ConfigError(f"compiled category {name!r} must be a list of [pattern, flags]")
            try:
                filters[name] = tuple(FilterSpec(str(s[0]), str(s[1]) if len(s) > 1 else "") for s in specs)
            except (TypeError, IndexError) as exc:
                raise ConfigError(f"compiled category {name!r} has a malformed entry") from exc

        vid_length = filter_data.get("vidLength")
        if not isinstance(vid_length, (list, tuple)) or len(vid_length) != 2:
            vid_length = (None, None)
        mode = DurationMode.BLOCK if options.get("vidLength_type") == "block" else DurationMode.ALLOW
        threshold = filter_data.get("percentWatchedHide")
        if threshold is None:
            threshold = options.get("percent_watched_hide")
        javascript = filter_data.get("javascript")
        return cls(
            filters=filters,
            vid_length=tuple(vid_length),
            vid_length_mode=mode,
            percent_watched_hide=threshold,
            javascript=javascript if isinstance(javascript, str) else "",
            enable_javascript=bool(options.get("enable_javascript", False)),
            **{name: bool(options.get(name, False)) for name in TOGGLES},
        )


def compile_all(raw: Mapping[str, Any] | RawConfig) -> CompiledConfig:
    """Compile raw settings into a CompiledConfig.

    Only categories present in ``filterData`` appear in the result; a
    category whose raw value is not a list is left out as well.

    Raises:
        ConfigError: the raw mapping does not fit the settings shape.
    """
    cfg = parse_raw_config(raw)
    fd, opts = cfg.filter_data, cfg.options

    filters: dict[str, tuple[FilterSpec, ...]] = {}
    for name in TEXT_CATEGORIES:
        present, value = fd.category(name)
        if not present:
            continue
        compiled = compile_entries(value, name)
        if compiled is UNCHANGED:
            logger.debug("Category %s is not a list, left unchanged", name)
            continue
        filters[name] = tuple(compiled)

    threshold = fd.percent_watched_hide
    if threshold is None:
        threshold = opts.percent_watched_hide

    return CompiledConfig(
        filters=filters,
        vid_length=fd.vid_length,
        vid_length_mode=opts.vid_length_type,
        percent_watched_hide=threshold,
        shorts=opts.shorts,
        movies=opts.movies,
        mixes=opts.mixes,
        trending=opts.trending,
        javascript=fd.javascript,
        enable_javascript=opts.enable_javascript,
    )
