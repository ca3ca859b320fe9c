# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for tubefilter.logging_config: structlog + stdlib bridge."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from tubefilter.logging_config import configure, configure_from_env

pytestmark = pytest.mark.usefixtures("reset_logging", "clean_env")


class TestRenderers:
    def test_console_goes_to_stderr(self, capsys):
        configure(json_output=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

        logging.getLogger("tubefilter.test").warning("dropped 3 rules")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "dropped 3 rules" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_json_lines(self, capsys):
        configure(json_output=True)
        logging.getLogger("tubefilter.engine").info("filtered")
        parsed = json.loads(capsys.readouterr().err.strip())
        assert parsed["event"] == "filtered"
        assert parsed["logger"] == "tubefilter.engine"
        assert parsed["level"] == "info"
        assert "timestamp" in parsed

    def test_percent_args_rendered(self, capsys):
        configure(json_output=True)
        logging.getLogger("tubefilter.engine").info("removed %d items", 4)
        parsed = json.loads(capsys.readouterr().err.strip())
        assert parsed["event"] == "removed 4 items"


class TestLevels:
    def test_default_info(self):
        configure()
        assert logging.getLogger().level == logging.INFO

    def test_custom_level(self):
        configure(level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_level_falls_back_to_info(self):
        configure(level="NONEXISTENT")
        assert logging.getLogger().level == logging.INFO

    def test_no_handler_stacking(self):
        configure(json_output=False)
        configure(json_output=True)
        configure(json_output=False)
        assert len(logging.getLogger().handlers) == 1


class TestConfigureFromEnv:
    def test_defaults_without_env(self, capsys):
        configure_from_env()
        assert logging.getLogger().level == logging.INFO
        logging.getLogger("x").info("plain")
        assert not capsys.readouterr().err.strip().startswith("{")

    def test_env_level(self, clean_env):
        clean_env.setenv("TUBEFILTER_LOG_LEVEL", "WARNING")
        configure_from_env()
        assert logging.getLogger().level == logging.WARNING

    def test_env_json(self, clean_env, capsys):
        clean_env.setenv("TUBEFILTER_LOG_JSON", "true")
        configure_from_env()
        logging.getLogger("x").info("as json")
        assert json.loads(capsys.readouterr().err.strip())["event"] == "as json"

    def test_explicit_arguments_win(self, clean_env):
        clean_env.setenv("TUBEFILTER_LOG_LEVEL", "ERROR")
        configure_from_env(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.parametrize("value", ["0", "false", "", "nope"])
    def test_falsy_json_flag(self, clean_env, capsys, value):
        clean_env.setenv("TUBEFILTER_LOG_JSON", value)
        configure_from_env()
        logging.getLogger("x").info("not json")
        assert not capsys.readouterr().err.strip().startswith("{")
