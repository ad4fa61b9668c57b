"""Switching the player between the city, the countryside and site maps.

The city is the home map. Entering the arena or the countryside stashes
the city's grids and occupants on the WorldState, and returning restores
them with the player back where they left.
"""

from __future__ import annotations

from omega_engine.models.entities import MapBounds, Position
from omega_engine.models.enums import LegacyEnvironment, WorldMode
from omega_engine.models.world import SiteMapDefinition, WorldState


CITY_GATE_GLYPH = "O"
"""Countryside glyph marking the city's gate."""


def in_city(state: WorldState) -> bool:
    return (
        state.world_mode is WorldMode.DUNGEON_CITY
        and state.environment is LegacyEnvironment.CITY
    )


def stash_city(state: WorldState) -> None:
    """Move the current city map and its occupants into the city_* fields."""
    state.city_bounds = state.bounds
    state.city_map_rows = state.map_rows
    state.city_site_grid = state.site_grid
    state.city_monsters = state.monsters
    state.city_ground_items = state.ground_items
    state.city_traps = state.traps
    state.return_position = state.player.position
    state.map_rows = []
    state.site_grid = []
    state.monsters = []
    state.ground_items = []
    state.traps = []


def restore_city(state: WorldState) -> None:
    """Return to the stashed city map; anything left on the old map is lost."""
    state.bounds = state.city_bounds or state.bounds
    state.map_rows = state.city_map_rows
    state.site_grid = state.city_site_grid
    state.monsters = state.city_monsters
    state.ground_items = state.city_ground_items
    state.traps = state.city_traps
    state.player.position = state.return_position or state.bounds.center()
    state.city_bounds = None
    state.city_map_rows = []
    state.city_site_grid = []
    state.city_monsters = []
    state.city_ground_items = []
    state.city_traps = []
    state.return_position = None
    state.world_mode = WorldMode.DUNGEON_CITY
    state.environment = LegacyEnvironment.CITY


def find_site_map(state: WorldState, environment: LegacyEnvironment) -> SiteMapDefinition | None:
    for site_map in state.site_maps:
        if site_map.environment is environment:
            return site_map
    return None


def enter_site_map(state: WorldState, site_map: SiteMapDefinition) -> None:
    """Load a site map as the current map, stashing the city first."""
    if in_city(state):
        stash_city(state)
    state.bounds = site_map.bounds
    state.map_rows = list(site_map.rows)
    state.site_grid = [cell.model_copy() for cell in site_map.site_grid]
    state.environment = site_map.environment
    state.player.position = site_map.spawn


def country_gate_position(rows: list[str]) -> Position | None:
    for y, row in enumerate(rows):
        x = row.find(CITY_GATE_GLYPH)
        if x >= 0:
            return Position(x=x, y=y)
    return None


def enter_countryside(state: WorldState) -> bool:
    """Switch to the overland map; False when no countryside is loaded."""
    rows = state.country_map_rows
    if not rows or not in_city(state):
        return False
    stash_city(state)
    state.bounds = MapBounds(width=max(len(row) for row in rows), height=len(rows))
    state.map_rows = list(rows)
    state.world_mode = WorldMode.COUNTRYSIDE
    state.environment = LegacyEnvironment.COUNTRYSIDE
    state.player.position = country_gate_position(rows) or state.bounds.center()
    return True


__all__ = [
    "CITY_GATE_GLYPH",
    "in_city",
    "stash_city",
    "restore_city",
    "find_site_map",
    "enter_site_map",
    "country_gate_position",
    "enter_countryside",
]
