"""Tests for the exception hierarchy."""

from __future__ import annotations

from omega_engine.core.exceptions import (
    ConfigurationError,
    GameEngineError,
    InvalidGameStateError,
    OmegaEngineError,
    ReplayFixtureError,
    SaveDecodeError,
    SaveError,
    SaveModeMismatchError,
    UnsupportedSaveVersionError,
)


class TestOmegaEngineError:
    """Tests for the base OmegaEngineError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = OmegaEngineError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = OmegaEngineError("Test error", details={"key": "value", "count": 42})
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        exc = OmegaEngineError("Test", details={"x": 1})
        assert "OmegaEngineError" in repr(exc)


class TestContextualErrors:
    """Tests for exceptions that fold keyword context into details."""

    def test_configuration_error_key(self) -> None:
        exc = ConfigurationError("bad value", config_key="game.map_width")
        assert exc.details["config_key"] == "game.map_width"

    def test_invalid_state_carries_invariant_and_turn(self) -> None:
        """Test InvalidGameStateError context and inheritance."""
        exc = InvalidGameStateError("pack overflow", invariant="inventory_capacity", turn=7)

        assert exc.details == {"invariant": "inventory_capacity", "turn": 7}
        assert isinstance(exc, GameEngineError)
        assert isinstance(exc, OmegaEngineError)

    def test_fixture_error_names_fixture(self) -> None:
        exc = ReplayFixtureError("broken", fixture="quit.json")
        assert exc.details["fixture"] == "quit.json"


class TestSaveErrors:
    """Tests for persistence exceptions."""

    def test_decode_error_field(self) -> None:
        exc = SaveDecodeError("payload is not an object", field="payload")
        assert exc.details["field"] == "payload"
        assert isinstance(exc, SaveError)

    def test_unsupported_version(self) -> None:
        """Test the version is kept on the exception."""
        exc = UnsupportedSaveVersionError(9)

        assert exc.version == 9
        assert "9" in exc.message
        assert isinstance(exc, SaveError)

    def test_mode_mismatch(self) -> None:
        exc = SaveModeMismatchError("classic", "arcade")

        assert exc.expected == "classic"
        assert exc.found == "arcade"
        assert exc.details["field"] == "metadata.mode"
