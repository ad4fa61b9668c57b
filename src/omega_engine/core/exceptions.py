"""Exception hierarchy for the omega turn engine.

The turn reducer itself never raises: every malformed or unsupported
command degrades to an explanatory event. The exceptions below belong to
the boundaries around it (settings, session construction, save decoding,
fixture loading), where a descriptive failure is expected before a
WorldState ever reaches ``step``.

Example:
    >>> from omega_engine.core.exceptions import SaveDecodeError
    >>> raise SaveDecodeError("payload is not an object", field="payload")
"""

from __future__ import annotations

from typing import Any


class OmegaEngineError(Exception):
    """Base exception for all omega engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(OmegaEngineError):
    """Raised when settings are missing or invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Human-readable error description.
            config_key: The settings key that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(OmegaEngineError):
    """Base exception for session-level engine errors.

    Raised by the session wrapper and bootstrap helpers, never by ``step``.
    """

    def __init__(
        self,
        message: str,
        *,
        turn: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize engine error with clock context.

        Args:
            message: Human-readable error description.
            turn: Clock turn at which the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if turn is not None:
            combined_details["turn"] = turn
        super().__init__(message, details=combined_details)


class InvalidGameStateError(GameEngineError):
    """Raised when a WorldState handed to the engine breaks its invariants."""

    def __init__(
        self,
        message: str,
        *,
        invariant: str | None = None,
        turn: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error.

        Args:
            message: Human-readable error description.
            invariant: Short name of the violated invariant.
            turn: Clock turn at which the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if invariant:
            combined_details["invariant"] = invariant
        super().__init__(message, turn=turn, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class SaveError(OmegaEngineError):
    """Base exception for save encoding, decoding and slot storage."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize save error.

        Args:
            message: Human-readable error description.
            field: Envelope field that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field:
            combined_details["field"] = field
        super().__init__(message, details=combined_details)


class SaveDecodeError(SaveError):
    """Raised when save JSON cannot be parsed into a WorldState."""


class UnsupportedSaveVersionError(SaveError):
    """Raised when a save envelope carries an unknown schema version."""

    def __init__(self, version: int) -> None:
        """Initialize with the offending version.

        Args:
            version: The schema version found in the envelope.
        """
        self.version = version
        super().__init__(f"unsupported save schema version: {version}", field="version")


class SaveModeMismatchError(SaveError):
    """Raised when a save was written for a different game mode."""

    def __init__(self, expected: str, found: str) -> None:
        """Initialize with both modes.

        Args:
            expected: Mode the caller asked for.
            found: Mode of the saved state.
        """
        self.expected = expected
        self.found = found
        super().__init__(
            "save mode mismatch",
            field="metadata.mode",
            details={"expected": expected, "found": found},
        )


# =============================================================================
# Replay Exceptions
# =============================================================================


class ReplayFixtureError(OmegaEngineError):
    """Raised when a replay fixture cannot be loaded or is malformed."""

    def __init__(
        self,
        message: str,
        *,
        fixture: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize fixture error.

        Args:
            message: Human-readable error description.
            fixture: Path or name of the fixture.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if fixture:
            combined_details["fixture"] = fixture
        super().__init__(message, details=combined_details)


__all__ = [
    "OmegaEngineError",
    "ConfigurationError",
    "GameEngineError",
    "InvalidGameStateError",
    "SaveError",
    "SaveDecodeError",
    "UnsupportedSaveVersionError",
    "SaveModeMismatchError",
    "ReplayFixtureError",
]
