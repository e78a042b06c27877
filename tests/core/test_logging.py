# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest

from tagstash.core.logging import configure_logging, get_logger


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "bind")

    def test_json_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdout carries YAML streams, so logs must never land there."""
        configure_logging(json_output=True)
        get_logger("test").info("document_stashed", identifier="v1.ConfigMap.foo", stashed=1)

        captured = capsys.readouterr()
        assert captured.out == ""
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "document_stashed"
        assert data["identifier"] == "v1.ConfigMap.foo"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable text in console mode."""
        configure_logging(json_output=False)
        get_logger("test").warning("restoration_unresolved", path="data.x")

        captured = capsys.readouterr()
        assert "restoration_unresolved" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_stdlib_loggers_share_the_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        logging.getLogger("some.library").warning("plain stdlib message")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "plain stdlib message"

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="INFO")
        get_logger("test").debug("hidden")
        assert "hidden" not in capsys.readouterr().err

        configure_logging(json_output=True, level="DEBUG")
        get_logger("test").debug("shown")
        assert "shown" in capsys.readouterr().err
