# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test fixtures for tubefilter."""

from __future__ import annotations

import logging

import pytest
import structlog


@pytest.fixture()
def reset_logging():
    """Restore root logger handlers/level and structlog defaults after a test."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()


@pytest.fixture()
def clean_env(monkeypatch):
    """Drop TUBEFILTER_* variables so env-driven defaults are predictable."""
    monkeypatch.delenv("TUBEFILTER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("TUBEFILTER_LOG_JSON", raising=False)
    return monkeypatch
