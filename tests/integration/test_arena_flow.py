"""A full arena match: enter, win, unlock the gate and walk out."""

from __future__ import annotations

import pytest

from omega_engine.core.constants import (
    SITE_AUX_EXIT_ARENA,
    SITE_AUX_SERVICE_ARENA,
    TILE_FLAG_PORTCULLIS,
)
from omega_engine.engine.router import step
from omega_engine.models.commands import Legacy, Move, Pickup
from omega_engine.models.entities import MapBounds, Position, TileSiteCell
from omega_engine.models.enums import LegacyEnvironment, LegacyStatusFlag
from omega_engine.models.world import SiteMapDefinition, WorldState


@pytest.fixture
def arena_city(site_world) -> WorldState:
    state = site_world(SITE_AUX_SERVICE_ARENA)
    grid = [TileSiteCell() for _ in range(21)]
    grid[7] = TileSiteCell(glyph="<", aux=SITE_AUX_EXIT_ARENA)
    grid[8] = TileSiteCell(glyph="=", flags=TILE_FLAG_PORTCULLIS)
    state.site_maps = [
        SiteMapDefinition(
            map_id=1,
            environment=LegacyEnvironment.ARENA,
            bounds=MapBounds(width=7, height=3),
            rows=["#######", ".......", "#######"],
            site_grid=grid,
            spawn=Position(x=2, y=1),
        )
    ]
    return state


def test_arena_match(arena_city: WorldState, scripted_rng) -> None:
    state = arena_city

    step(state, Move(direction="east"), scripted_rng())
    fight = step(state, Legacy(token="1"), scripted_rng())

    assert state.environment is LegacyEnvironment.ARENA
    reported = {event.field: event.value for event in fight.events if event.kind == "progression_updated"}
    assert reported["environment"] == "arena"
    assert reported["player.position"] == f"{state.player.position.x},{state.player.position.y}"
    assert reported["arena.challenger"] == "goblin gladiator"
    assert reported["arena.portcullis"] == "closed"
    assert reported["legacy_status_flags"] == state.legacy_status_flags
    assert state.has_status_flag(LegacyStatusFlag.IN_ARENA)
    assert state.progression.arena_match_active
    [challenger] = state.monsters
    assert challenger.name == "goblin gladiator"
    assert challenger.is_arena_challenger

    challenger.position = Position(x=3, y=1)
    challenger.stats.hp = 1
    win = step(state, Move(direction="east"), scripted_rng(20, 2))

    assert "monster_defeated" in win.event_kinds()
    assert state.progression.arena_rank == 1
    assert not state.progression.arena_match_active
    assert state.gold == 300

    blocked = step(state, Move(direction="west"), scripted_rng())
    assert blocked.event_kinds() == ["move_blocked"]
    assert state.log[-1] == "The portcullis is closed."

    step(state, Move(direction="east"), scripted_rng())
    step(state, Pickup(), scripted_rng())
    assert [item.name for item in state.player.inventory] == ["portcullis key"]

    for token in ("a", "i", "a"):
        step(state, Legacy(token=token), scripted_rng())
    assert "The portcullis rises." in state.log
    assert state.player.inventory == []

    for _ in range(3):
        step(state, Move(direction="west"), scripted_rng())

    assert state.environment is LegacyEnvironment.CITY
    assert state.player.position == Position(x=5, y=4)
    assert not state.has_status_flag(LegacyStatusFlag.IN_ARENA)
    assert state.log[-1] == "You leave the arena."
