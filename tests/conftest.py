"""Pytest configuration and shared fixtures.

This module provides common fixtures for the omega engine test suite:
small open maps, a scripted random stream and temporary storage paths.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from omega_engine.models.entities import MapBounds, Position, Stats, TileSiteCell
from omega_engine.models.world import WorldState


if TYPE_CHECKING:
    from collections.abc import Generator


class ScriptedRng:
    """Random source that replays a fixed list of values.

    Each draw pops the next value and clamps it into the requested range;
    once the script runs out every draw returns ``low``.

    Attributes:
        values: Values still to be drawn.
        calls: Every (low, high) range requested so far.
    """

    def __init__(self, *values: int) -> None:
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def range_inclusive(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        if high <= low:
            return low
        if not self.values:
            return low
        return max(low, min(high, self.values.pop(0)))


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from omega_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up environment overrides for settings tests.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "OMEGA_ENGINE_DEBUG": "true",
        "OMEGA_ENGINE_GAME_DEFAULT_SEED": "99",
        "OMEGA_ENGINE_GAME_STARTING_GOLD": "500",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# World Fixtures
# =============================================================================


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRng]:
    """Factory for scripted random streams.

    Returns:
        Callable taking the values to replay.
    """
    return ScriptedRng


@pytest.fixture
def open_world() -> WorldState:
    """A 9x9 open map with the player at (4, 4) and no occupants."""
    return WorldState.new(MapBounds(width=9, height=9))


@pytest.fixture
def site_world() -> Callable[[int], WorldState]:
    """Factory for a 9x9 map whose tile east of the player carries an aux code.

    Returns:
        Callable taking the aux code of tile (5, 4).
    """

    def build(aux: int) -> WorldState:
        state = WorldState.new(MapBounds(width=9, height=9))
        grid = [TileSiteCell() for _ in range(81)]
        grid[4 * 9 + 5] = TileSiteCell(glyph="S", site_id=1, aux=aux)
        state.site_grid = grid
        return state

    return build


@pytest.fixture
def goblin_stats() -> Stats:
    """Stats of a weak hostile monster."""
    return Stats(hp=5, max_hp=5, attack_min=1, attack_max=3, defense=0)


@pytest.fixture
def east_of_player() -> Position:
    return Position(x=5, y=4)


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def save_db_path(tmp_path: Path) -> Path:
    """Path to a fresh save database in a temporary directory."""
    return tmp_path / "saves" / "omega_saves.db"
