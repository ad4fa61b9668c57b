"""Configuration management for the omega turn engine.

Settings are loaded with pydantic-settings from environment variables and
an optional ``.env`` file. They feed session bootstrap, logging and
storage only; the turn reducer never reads them, so a replay of the same
seed and commands is unaffected by the environment.

Example:
    >>> from omega_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.game.starting_gold
    250

Environment Variables:
    OMEGA_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    OMEGA_ENGINE_JSON_LOGS: Emit JSON log lines
    OMEGA_ENGINE_GAME_DEFAULT_SEED: Seed used when a session is created without one
    OMEGA_ENGINE_STORAGE_SAVE_DATABASE_PATH: SQLite file for save slots
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from omega_engine.core.exceptions import ConfigurationError


class GameSettings(BaseSettings):
    """Defaults applied when a fresh session is bootstrapped.

    Attributes:
        default_seed: RNG seed used when none is supplied.
        map_width: Width of the default open map.
        map_height: Height of the default open map.
        starting_gold: Gold carried by a new character.
        inventory_capacity: Pack slots of a new character.
        auto_pickup: Initial value of the pickup option.
        interactive_sites: Open service menus when stepping onto a site.
        player_name: Name given to a new character.
    """

    model_config = SettingsConfigDict(
        env_prefix="OMEGA_ENGINE_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_seed: int = Field(default=0x0DEC0DE, ge=0, description="Default RNG seed")
    map_width: int = Field(default=64, ge=3, le=512, description="Default map width")
    map_height: int = Field(default=16, ge=3, le=512, description="Default map height")
    starting_gold: int = Field(default=250, ge=0, description="Starting gold")
    inventory_capacity: int = Field(default=12, ge=1, le=52, description="Pack slots")
    auto_pickup: bool = Field(default=False, description="Pick up items when stepping on them")
    interactive_sites: bool = Field(default=True, description="Open site menus on entry")
    player_name: str = Field(default="Adventurer", min_length=1, description="Character name")


class StorageSettings(BaseSettings):
    """File locations for saves and replay fixtures.

    Attributes:
        save_database_path: SQLite file holding named save slots.
        fixture_path: Directory scanned for replay fixtures.
    """

    model_config = SettingsConfigDict(
        env_prefix="OMEGA_ENGINE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    save_database_path: Path = Field(
        default=Path("data/omega_saves.db"),
        description="Path to SQLite save database",
    )
    fixture_path: Path = Field(
        default=Path("fixtures/replay"),
        description="Directory of replay fixtures",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
        game: Session bootstrap defaults.
        storage: File storage settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="OMEGA_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="omega-engine", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Emit JSON log lines")

    game: GameSettings = Field(default_factory=GameSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @model_validator(mode="after")
    def validate_debug_logging(self) -> "Settings":
        """Force debug-level logging when debug mode is on.

        Returns:
            Self with the adjusted log level.
        """
        if self.debug and self.log_level != "DEBUG":
            self.log_level = "DEBUG"
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "GameSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
