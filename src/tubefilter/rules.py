# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Declarative rule tables: node-type key → where to find each field.

A node "is of type T" when it is a dict holding key T; the value under T
is what gets inspected. Each field is a path (or tuple of candidate paths,
first hit wins) relative to that value. Supporting a new renderer means
adding one entry here, nothing else.

Tables:
  main      browse/search/home listings
  guide     sidebar + pivot navigation entries
  comments  comment threads and live chat
  player    player response metadata
  merged    main ∪ comments (watch-page next payloads)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from tubefilter.paths import PathSpec

# Categories a node type can belong to (mirrors the option toggles).
SHORTS = "shorts"
MOVIES = "movies"
MIXES = "mixes"
TRENDING = "trending"


@dataclass(frozen=True, slots=True)
class FilterRule:
    """Field extraction spec for one node type."""

    video_id: PathSpec | None = None
    channel_id: PathSpec | None = None
    channel_name: PathSpec | None = None
    title: PathSpec | None = None
    comment: PathSpec | None = None
    description: PathSpec | None = None
    duration: PathSpec | None = None
    view_count: PathSpec | None = None
    percent_watched: PathSpec | None = None
    badges: PathSpec | None = None
    published: PathSpec | None = None
    categories: frozenset[str] = field(default_factory=frozenset)


# Compiled-config category name → FilterRule/CandidateRecord field.
CATEGORY_FIELDS: dict[str, str] = {
    "videoId": "video_id",
    "channelId": "channel_id",
    "channelName": "channel_name",
    "title": "title",
    "comment": "comment",
    "description": "description",
}


def _byline_channel_id(*owners: str) -> tuple[str, ...]:
    return tuple(f"{owner}.runs.navigationEndpoint.browseEndpoint.browseId" for owner in owners)


_BYLINES = ("shortBylineText", "longBylineText", "ownerText")

_VIDEO = FilterRule(
    video_id="videoId",
    channel_id=_byline_channel_id(*_BYLINES),
    channel_name=_BYLINES,
    title="title",
    description=("descriptionSnippet", "detailedMetadataSnippets.snippetText"),
    duration=("thumbnailOverlays.thumbnailOverlayTimeStatusRenderer.text", "lengthText"),
    view_count=("viewCountText", "shortViewCountText"),
    percent_watched="thumbnailOverlays.thumbnailOverlayResumePlaybackRenderer.percentDurationWatched",
    badges="badges",
    published="publishedTimeText",
)

_CHANNEL = FilterRule(
    channel_id="channelId",
    channel_name="title",
    description="descriptionSnippet",
    badges="ownerBadges",
)

_PLAYLIST = FilterRule(
    channel_id=_byline_channel_id(*_BYLINES),
    channel_name=_BYLINES,
    title="title",
)

_MIX = FilterRule(
    channel_id=_byline_channel_id(*_BYLINES),
    channel_name=_BYLINES,
    title="title",
    categories=frozenset({MIXES}),
)

_MOVIE = replace(_VIDEO, categories=frozenset({MOVIES}))

_POST = FilterRule(
    channel_id="authorEndpoint.browseEndpoint.browseId",
    channel_name="authorText",
    description="contentText",
    published="publishedTimeText",
)

_LOCKUP_META = "metadata.lockupMetadataViewModel"

MAIN_RULES: Mapping[str, FilterRule] = MappingProxyType(
    {
        "videoRenderer": _VIDEO,
        "gridVideoRenderer": _VIDEO,
        "compactVideoRenderer": _VIDEO,
        "playlistVideoRenderer": _VIDEO,
        "endScreenVideoRenderer": _VIDEO,
        "videoWithContextRenderer": replace(_VIDEO, title="headline"),
        "channelVideoPlayerRenderer": FilterRule(
            video_id="videoId",
            title="title",
            description="description",
            view_count="viewCountText",
        ),
        "watchCardCompactVideoRenderer": FilterRule(
            video_id="navigationEndpoint.watchEndpoint.videoId",
            channel_id="subtitles.runs.navigationEndpoint.browseEndpoint.browseId",
            channel_name="subtitles",
            title="title",
            duration="lengthText",
        ),
        "lockupViewModel": FilterRule(
            video_id="contentId",
            channel_id=(
                f"{_LOCKUP_META}.image.decoratedAvatarViewModel.rendererContext"
                ".commandContext.onTap.innertubeCommand.browseEndpoint.browseId"
            ),
            channel_name=f"{_LOCKUP_META}.metadata.contentMetadataViewModel.metadataRows.metadataParts.text.content",
            title=f"{_LOCKUP_META}.title.content",
            duration="contentImage.thumbnailViewModel.overlays.thumbnailOverlayBadgeViewModel"
            ".thumbnailBadges.thumbnailBadgeViewModel.text",
        ),
        "channelRenderer": _CHANNEL,
        "gridChannelRenderer": _CHANNEL,
        "playlistRenderer": _PLAYLIST,
        "gridPlaylistRenderer": _PLAYLIST,
        "compactPlaylistRenderer": _PLAYLIST,
        "endScreenPlaylistRenderer": _PLAYLIST,
        "radioRenderer": _MIX,
        "compactRadioRenderer": _MIX,
        "gridRadioRenderer": _MIX,
        "movieRenderer": _MOVIE,
        "compactMovieRenderer": _MOVIE,
        "gridMovieRenderer": _MOVIE,
        "reelItemRenderer": FilterRule(
            video_id="videoId",
            title="headline",
            duration="thumbnailOverlays.thumbnailOverlayTimeStatusRenderer.text",
            view_count="viewCountText",
            categories=frozenset({SHORTS}),
        ),
        "shortsLockupViewModel": FilterRule(
            video_id="onTap.innertubeCommand.reelWatchEndpoint.videoId",
            title="overlayMetadata.primaryText.content",
            view_count="overlayMetadata.secondaryText.content",
            categories=frozenset({SHORTS}),
        ),
        "reelShelfRenderer": FilterRule(title="title", categories=frozenset({SHORTS})),
        "postRenderer": _POST,
        "backstagePostRenderer": _POST,
        "shelfRenderer": FilterRule(
            channel_id="endpoint.browseEndpoint.browseId",
            title="title",
        ),
    }
)

GUIDE_RULES: Mapping[str, FilterRule] = MappingProxyType(
    {
        # Subscriptions carry a browseId; the shorts entry only has its icon.
        "guideEntryRenderer": FilterRule(
            channel_id=("navigationEndpoint.browseEndpoint.browseId", "icon.iconType"),
            channel_name=("formattedTitle", "title"),
        ),
        "pivotBarItemRenderer": FilterRule(
            channel_id=("pivotIdentifier", "navigationEndpoint.browseEndpoint.browseId"),
            channel_name="title",
        ),
    }
)

COMMENT_RULES: Mapping[str, FilterRule] = MappingProxyType(
    {
        "commentRenderer": FilterRule(
            channel_id="authorEndpoint.browseEndpoint.browseId",
            channel_name="authorText",
            comment="contentText",
            published="publishedTimeText",
        ),
        "commentEntityPayload": FilterRule(
            channel_id="author.channelId",
            channel_name="author.displayName",
            comment="properties.content.content",
            published="properties.publishedTime",
        ),
        "liveChatTextMessageRenderer": FilterRule(
            channel_id="authorExternalChannelId",
            channel_name="authorName",
            comment="message",
        ),
        "liveChatPaidMessageRenderer": FilterRule(
            channel_id="authorExternalChannelId",
            channel_name="authorName",
            comment="message",
        ),
    }
)

PLAYER_RULES: Mapping[str, FilterRule] = MappingProxyType(
    {
        "videoDetails": FilterRule(
            video_id="videoId",
            channel_id="channelId",
            channel_name="author",
            title="title",
            description="shortDescription",
            duration="lengthSeconds",
            view_count="viewCount",
        ),
        "args": FilterRule(
            video_id="video_id",
            channel_id="ucid",
            channel_name="author",
            title="title",
            duration="length_seconds",
        ),
    }
)

MERGED_RULES: Mapping[str, FilterRule] = MappingProxyType({**MAIN_RULES, **COMMENT_RULES})

RULE_TABLES: Mapping[str, Mapping[str, FilterRule]] = MappingProxyType(
    {
        "main": MAIN_RULES,
        "guide": GUIDE_RULES,
        "comments": COMMENT_RULES,
        "player": PLAYER_RULES,
        "merged": MERGED_RULES,
    }
)

# Wrapper keys whose value may be dropped once everything inside it was
# filtered away, so no empty shelf/slot is left behind.
PRUNABLE_CONTAINERS = frozenset(
    {
        "richItemRenderer",
        "richSectionRenderer",
        "richShelfRenderer",
        "content",
        "horizontalListRenderer",
        "verticalListRenderer",
        "shelfRenderer",
        "gridRenderer",
        "expandedShelfContentsRenderer",
        "itemSectionRenderer",
        "reelShelfRenderer",
        "commentThreadRenderer",
        "comment",
        "payload",
    }
)

# Navigation entries hidden by a toggle, matched as extra exact filters.
TOGGLE_CHANNEL_IDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        TRENDING: ("FEtrending", "FEexplore", "FEtrending_landing"),
        SHORTS: ("TAB_SHORTS", "TAB_SHORTS_CAIRO", "FEshorts"),
    }
)

# Auto-generated mixes are authored by this pseudo channel.
TOGGLE_CHANNEL_NAMES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        MIXES: ("YouTube",),
    }
)


def get_rule_table(name: str) -> Mapping[str, FilterRule]:
    """Look up a named table.

    Raises:
        KeyError: unknown table name (message lists the valid ones).
    """
    try:
        return RULE_TABLES[name]
    except KeyError:
        raise KeyError(f"unknown rule table {name!r}; choose from {', '.join(RULE_TABLES)}") from None
