"""Tests for structured logging setup."""

from __future__ import annotations

import io
from collections.abc import Iterator

import pytest
import structlog

from omega_engine.core.config import Settings
from omega_engine.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    drop_empty_fields,
    get_logger,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore the default structlog configuration after each test."""
    yield
    structlog.reset_defaults()


class TestLogging:
    """Tests for configure_logging and get_logger."""

    def test_console_logging(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that console output carries the event and app tag."""
        configure_logging(level="DEBUG")
        get_logger("tests").info("Session started", seed=7)

        out = capsys.readouterr().out
        assert "Session started" in out
        assert "seed=7" in out
        assert "omega_engine" in out

    def test_json_logging_with_context(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that bound context reaches JSON output."""
        configure_logging(level="INFO", json_format=True)
        bind_context(slot="alpha")
        try:
            get_logger("tests").info("Saved slot")
        finally:
            clear_context()

        out = capsys.readouterr().out
        assert '"slot": "alpha"' in out
        assert '"event": "Saved slot"' in out

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="WARNING")
        get_logger("tests").info("quiet")

        assert "quiet" not in capsys.readouterr().out

    def test_none_fields_dropped(self) -> None:
        event = drop_empty_fields(None, "debug", {"event": "Step", "interaction": None, "minutes": 0})

        assert event == {"event": "Step", "minutes": 0}

    def test_stream_target(self) -> None:
        """Test entries go to the given stream instead of standard output."""
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)

        get_logger("tests").info("Turn advanced", turn=3, interaction=None)

        line = stream.getvalue()
        assert '"turn": 3' in line
        assert "interaction" not in line
        assert '"app": "omega_engine"' in line

    def test_from_settings(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        stream = io.StringIO()

        configure_from_settings(Settings(log_level="WARNING", json_logs=True), stream=stream)
        logger = get_logger("tests")
        logger.info("hidden")
        logger.warning("shown")

        assert '"event": "shown"' in stream.getvalue()
        assert "hidden" not in stream.getvalue()
