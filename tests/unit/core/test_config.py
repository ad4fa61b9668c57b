"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from omega_engine.core.config import (
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)


class TestGameSettings:
    """Tests for GameSettings defaults and validation."""

    def test_default_values(self) -> None:
        """Test the bootstrap defaults of a new session."""
        settings = GameSettings()

        assert settings.starting_gold == 250
        assert settings.inventory_capacity == 12
        assert settings.auto_pickup is False
        assert settings.interactive_sites is True

    def test_capacity_bounds(self) -> None:
        """Test that a pack must have at least one slot."""
        with pytest.raises(ValueError):
            GameSettings(inventory_capacity=0)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nested prefix environment overrides."""
        monkeypatch.setenv("OMEGA_ENGINE_GAME_MAP_WIDTH", "20")

        assert GameSettings().map_width == 20


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_paths(self) -> None:
        """Test default storage locations."""
        settings = StorageSettings()

        assert settings.save_database_path == Path("data/omega_saves.db")
        assert settings.fixture_path == Path("fixtures/replay")

    def test_custom_paths(self, tmp_path: Path) -> None:
        """Test custom storage paths."""
        settings = StorageSettings(save_database_path=tmp_path / "slots.db")

        assert settings.save_database_path == tmp_path / "slots.db"


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "omega-engine"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_debug_forces_debug_logging(self, mock_env_vars: dict[str, str], tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that debug mode lowers the log level."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    def test_nested_game_settings_from_env(
        self,
        mock_env_vars: dict[str, str],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that game settings pick up their own prefix."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.game.default_seed == 99
        assert settings.game.starting_gold == 500


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_settings_instance(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that get_settings returns a Settings instance."""
        monkeypatch.chdir(tmp_path)

        assert isinstance(get_settings(), Settings)

    def test_caching(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings are cached until the cache is cleared."""
        monkeypatch.chdir(tmp_path)

        first = get_settings()
        assert get_settings() is first

        clear_settings_cache()
        assert get_settings() is not first
