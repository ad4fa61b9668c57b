"""Core infrastructure: configuration, logging, exceptions, constants."""

from omega_engine.core.config import Settings, clear_settings_cache, get_settings
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
from omega_engine.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Exceptions
    "OmegaEngineError",
    "ConfigurationError",
    "GameEngineError",
    "InvalidGameStateError",
    "SaveError",
    "SaveDecodeError",
    "UnsupportedSaveVersionError",
    "SaveModeMismatchError",
    "ReplayFixtureError",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
