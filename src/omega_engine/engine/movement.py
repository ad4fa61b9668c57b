"""Movement, traversal and the small world actions around it.

A move into a monster is an attack with the attack's cost and no change
of position. A move into a wall, a closed gate or off the map emits
``MoveBlocked`` and takes no time. A successful move springs traps,
handles auto-pickup, leaves the arena through its exit tile and, when
``options.interactive_sites`` is on, opens the service menu of the tile
entered.
"""

from __future__ import annotations

from omega_engine.core.constants import (
    ACTION_MINUTES,
    BLOCKING_GLYPHS,
    CLOSED_DOOR_GLYPH,
    COUNTRY_DEFAULT_MINUTES,
    COUNTRY_TERRAIN_MINUTES,
    OPEN_DOOR_GLYPH,
    REST_MAX_MINUTES,
    REST_MINUTES_PER_HP,
    SITE_AUX_CITY_GATE,
    SITE_AUX_EXIT_COUNTRYSIDE,
    TILE_FLAG_BLOCK_MOVE,
    TILE_FLAG_NO_TUNNEL,
    TILE_FLAG_PORTCULLIS,
    TUNNEL_MINUTES,
    WALL_GLYPH,
)
from omega_engine.core.logging import get_logger
from omega_engine.engine import combat, inventory, sites
from omega_engine.engine.context import TurnContext
from omega_engine.engine.maps import CITY_GATE_GLYPH, enter_countryside, in_city, restore_city
from omega_engine.engine.progression import resolve_player_defeat
from omega_engine.engine.prompts import RawInput, cancel_prompt, close_prompt, open_prompt
from omega_engine.models.entities import Position, Trap
from omega_engine.models.enums import Direction, LegacyStatusFlag, MonsterBehavior, TrapKind, WorldMode
from omega_engine.models.events import DialogueAdvanced, Moved, MoveBlocked, Waited
from omega_engine.models.interactions import TalkDirectionInteraction, TalkMode
from omega_engine.models.world import WorldState


logger = get_logger(__name__)


# =============================================================================
# Moving
# =============================================================================


def blocked_reason(state: WorldState, target: Position) -> str | None:
    """Why a tile cannot be entered, or None when it can."""
    if not state.bounds.contains(target):
        return "out_of_bounds"
    if state.glyph_at(target) == CLOSED_DOOR_GLYPH:
        return "door"
    if state.glyph_at(target) in BLOCKING_GLYPHS:
        return "wall"
    cell = state.site_cell_at(target)
    if cell is not None and cell.flags & TILE_FLAG_BLOCK_MOVE:
        return "portcullis" if cell.flags & TILE_FLAG_PORTCULLIS else "blocked"
    return None


BLOCKED_MESSAGES = {
    "portcullis": "The portcullis is closed.",
    "door": "The door is closed.",
}


def move_cost(state: WorldState, target: Position) -> int:
    if state.world_mode is WorldMode.COUNTRYSIDE:
        return COUNTRY_TERRAIN_MINUTES.get(state.glyph_at(target), COUNTRY_DEFAULT_MINUTES)
    return ACTION_MINUTES


def handle_move(ctx: TurnContext, direction: Direction) -> None:
    """Step one tile, or attack whatever stands there."""
    state = ctx.state
    origin = state.player.position
    target = origin.offset(direction)

    monster = state.monster_at(target)
    if monster is not None:
        ctx.set_minutes(ACTION_MINUTES)
        combat.attack_monster(ctx, monster)
        return

    reason = blocked_reason(state, target)
    if reason is not None:
        ctx.log(BLOCKED_MESSAGES.get(reason, "You can't go that way."))
        ctx.emit(MoveBlocked(target=target, reason=reason))
        ctx.set_minutes(0)
        return

    state.player.position = target
    ctx.set_minutes(move_cost(state, target))
    ctx.emit(Moved(from_position=origin, to_position=target))
    _after_step(ctx, direction)


def _after_step(ctx: TurnContext, direction: Direction) -> None:
    state = ctx.state
    position = state.player.position
    for trap in state.traps:
        if trap.armed and trap.position == position:
            spring_trap(ctx, trap)
            if not state.player.stats.is_alive:
                return
            break

    if sites.on_arena_exit(ctx):
        return
    if state.options.pickup:
        inventory.auto_pickup(ctx)
    here = state.items_at(position)
    if here:
        names = ", ".join(ground.item.name for ground in here)
        ctx.log(f"You see here: {names}.")
    sites.discover_site(ctx)
    if state.options.interactive_sites:
        sites.open_site(ctx, direction.value)


def handle_attack(ctx: TurnContext, direction: Direction) -> None:
    ctx.set_minutes(ACTION_MINUTES)
    combat.player_attack(ctx, direction)


def handle_wait(ctx: TurnContext) -> None:
    ctx.set_minutes(ACTION_MINUTES)
    ctx.emit(Waited())


# =============================================================================
# Traps
# =============================================================================


def spring_trap(ctx: TurnContext, trap: Trap) -> None:
    state = ctx.state
    trap.known = True
    stats = state.player.stats
    if trap.kind is TrapKind.TELEPORT:
        inventory.teleport_player(ctx)
        return
    lost = stats.apply_damage(trap.damage)
    ctx.log(f"You trigger a {trap.kind.value} trap! (-{lost} hp)")
    ctx.progressed("player.hp", stats.hp)
    if trap.kind is TrapKind.POISON and stats.is_alive:
        state.add_status_effect("poisoned", turns=5, magnitude=1)
        state.set_status_flag(LegacyStatusFlag.POISONED)
    if not stats.is_alive:
        resolve_player_defeat(ctx, f"a {trap.kind.value} trap")


def search(ctx: TurnContext, token: str) -> None:
    state = ctx.state
    found = 0
    for trap in state.traps:
        if not trap.known and trap.position.manhattan(state.player.position) <= 1:
            trap.known = True
            found += 1
    ctx.log(f"You find {found} trap{'s' if found != 1 else ''}." if found else "You find nothing.")
    ctx.handled(token, f"search found {found}")


# =============================================================================
# Resting
# =============================================================================


def hostile_nearby(state: WorldState, radius: int = 3) -> bool:
    return any(
        m.behavior is not MonsterBehavior.PASSIVE
        and not m.ai_paused
        and m.position.manhattan(state.player.position) <= radius
        for m in state.monsters
    )


def rest(ctx: TurnContext, token: str) -> None:
    """Rest until healed, up to REST_MAX_MINUTES."""
    state = ctx.state
    stats = state.player.stats
    if hostile_nearby(state):
        ctx.log("You cannot rest with enemies nearby.")
        ctx.set_minutes(0)
        ctx.handled(token, "rest interrupted")
        return
    missing = stats.max_hp - stats.hp
    if missing <= 0:
        ctx.log("You rest a moment.")
        ctx.set_minutes(ACTION_MINUTES)
        ctx.handled(token, "rest")
        return
    minutes = min(REST_MAX_MINUTES, missing * REST_MINUTES_PER_HP)
    healed = stats.heal(minutes // REST_MINUTES_PER_HP)
    spellbook = state.spellbook
    spellbook.mana = min(spellbook.max_mana, spellbook.mana + minutes // 60)
    ctx.set_minutes(minutes)
    ctx.log(f"You rest for {minutes} minutes and recover {healed} hp.")
    ctx.progressed("player.hp", stats.hp)
    ctx.handled(token, f"rest {minutes} minutes")


# =============================================================================
# Travel
# =============================================================================


def descend(ctx: TurnContext, token: str) -> None:
    """``>``: open the site underfoot, or enter the city from its gate."""
    state = ctx.state
    if state.world_mode is WorldMode.COUNTRYSIDE:
        cell = state.site_cell_at(state.player.position)
        at_gate = state.glyph_at(state.player.position) == CITY_GATE_GLYPH or (
            cell is not None and cell.aux == SITE_AUX_CITY_GATE
        )
        if not at_gate:
            ctx.log("There is nothing to enter here.")
            ctx.handled(token, "no entrance")
            return
        restore_city(state)
        ctx.set_minutes(ACTION_MINUTES)
        ctx.log("You enter the city.")
        ctx.progressed("world_mode", state.world_mode.value)
        ctx.handled(token, "entered city")
        return
    if not sites.open_site(ctx, token):
        ctx.log("There is nothing to enter here.")
        ctx.handled(token, "no site here")


def ascend(ctx: TurnContext, token: str) -> None:
    """``<``: leave the city for the countryside from an exit tile."""
    state = ctx.state
    cell = state.site_cell_at(state.player.position)
    on_exit = cell is not None and cell.aux == SITE_AUX_EXIT_COUNTRYSIDE
    if not in_city(state) or not on_exit:
        ctx.log("You can't leave from here.")
        ctx.handled(token, "no exit here")
        return
    if not enter_countryside(state):
        ctx.log("The countryside is not charted.")
        ctx.handled(token, "countryside unavailable", fully_modeled=False)
        return
    ctx.set_minutes(ACTION_MINUTES)
    ctx.log("You leave the city.")
    ctx.progressed("world_mode", state.world_mode.value)
    ctx.handled(token, "entered countryside")


# =============================================================================
# Talk And Tunnel
# =============================================================================


TALK_PROMPTS = {
    TalkMode.TALK: "Talk in which direction?",
    TalkMode.TUNNEL: "Tunnel in which direction?",
    TalkMode.OPEN_DOOR: "Open in which direction?",
    TalkMode.CLOSE_DOOR: "Close in which direction?",
}


def open_talk_direction(ctx: TurnContext, token: str, mode: TalkMode) -> None:
    open_prompt(
        ctx,
        TalkDirectionInteraction(mode=mode),
        token=token,
        label="Direction",
        text=TALK_PROMPTS[mode],
    )


def talk_prompt_text(state: WorldState, interaction: TalkDirectionInteraction) -> str:
    return TALK_PROMPTS[interaction.mode]


def handle_talk_direction_input(ctx: TurnContext, interaction: TalkDirectionInteraction, raw: RawInput) -> None:
    direction = raw.as_direction
    if direction is None:
        cancel_prompt(ctx, raw.label, "Never mind.")
        return
    close_prompt(ctx)
    if interaction.mode is TalkMode.TALK:
        _talk(ctx, direction, raw.label)
    elif interaction.mode is TalkMode.TUNNEL:
        _tunnel(ctx, direction, raw.label)
    else:
        _work_door(ctx, direction, raw.label, opening=interaction.mode is TalkMode.OPEN_DOOR)


def _talk(ctx: TurnContext, direction: Direction, token: str) -> None:
    target = ctx.state.player.position.offset(direction)
    monster = ctx.state.monster_at(target)
    if monster is None:
        ctx.log("There is nobody there.")
        ctx.handled(token, "talk: nobody there")
        return
    ctx.set_minutes(ACTION_MINUTES)
    if monster.dialogue:
        line = monster.dialogue
    elif monster.behavior is MonsterBehavior.PASSIVE or monster.ai_paused:
        line = "..."
    else:
        line = "Grrr!"
    ctx.log(f"{monster.name}: {line}")
    ctx.emit(DialogueAdvanced(speaker=monster.name, line=line))
    ctx.handled(token, f"talk to {monster.name}")


def _tunnel(ctx: TurnContext, direction: Direction, token: str) -> None:
    state = ctx.state
    target = state.player.position.offset(direction)
    diggable = (
        state.bounds.contains(target)
        and state.glyph_at(target) == WALL_GLYPH
        and not state.tile_has_flag(target, TILE_FLAG_NO_TUNNEL)
        and not state.tile_has_flag(target, TILE_FLAG_PORTCULLIS)
    )
    if not diggable:
        ctx.log("You can't tunnel there.")
        ctx.handled(token, "tunnel: not diggable")
        return
    state.set_glyph(target, ".")
    ctx.set_minutes(TUNNEL_MINUTES)
    ctx.log("You dig through the wall.")
    ctx.handled(token, "tunnel")
    logger.debug("Tunnel dug", x=target.x, y=target.y)


def _work_door(ctx: TurnContext, direction: Direction, token: str, *, opening: bool) -> None:
    state = ctx.state
    target = state.player.position.offset(direction)
    wanted = CLOSED_DOOR_GLYPH if opening else OPEN_DOOR_GLYPH
    verb = "open" if opening else "close"
    if not state.bounds.contains(target) or state.glyph_at(target) != wanted:
        ctx.log(f"There is no door to {verb} there.")
        ctx.handled(token, f"{verb} door: none")
        return
    if not opening and (state.monster_at(target) is not None or state.items_at(target)):
        ctx.log("Something is in the way.")
        ctx.handled(token, "close door: obstructed")
        return
    state.set_glyph(target, OPEN_DOOR_GLYPH if opening else CLOSED_DOOR_GLYPH)
    ctx.set_minutes(ACTION_MINUTES)
    ctx.log(f"You {verb} the door.")
    ctx.progressed(f"door.{target.x},{target.y}", "open" if opening else "closed")
    ctx.handled(token, f"{verb} door")


# =============================================================================
# Looking
# =============================================================================


TERRAIN_NAMES = {
    WALL_GLYPH: "solid rock",
    CLOSED_DOOR_GLYPH: "a closed door",
    OPEN_DOOR_GLYPH: "an open door",
    CITY_GATE_GLYPH: "the city gate",
    ".": "open floor",
}


def describe_glyph(glyph: str) -> str:
    return TERRAIN_NAMES.get(glyph, f"unfamiliar ground ({glyph})")


def examine(ctx: TurnContext, token: str) -> None:
    """``x``: describe the tile underfoot without spending time."""
    state = ctx.state
    position = state.player.position
    found = sites.site_at(state, position)
    if found is not None:
        ctx.log(f"You stand at the {sites.service_title_for(found[1], found[2])}.")
    else:
        ctx.log(f"You stand on {describe_glyph(state.glyph_at(position))}.")
    here = state.items_at(position)
    if here:
        ctx.log(f"You see here: {', '.join(ground.item.name for ground in here)}.")
    for trap in state.traps:
        if trap.known and trap.position == position:
            ctx.log(f"There is a {trap.kind.value} trap here.")
    ctx.handled(token, "examine")


def identify_glyphs(ctx: TurnContext, token: str) -> None:
    """``/``: name each kind of terrain around the player."""
    state = ctx.state
    origin = state.player.position
    seen: list[str] = []
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            target = Position(x=origin.x + dx, y=origin.y + dy)
            if state.bounds.contains(target) and state.glyph_at(target) not in seen:
                seen.append(state.glyph_at(target))
    for glyph in seen:
        ctx.log(f"{glyph} : {describe_glyph(glyph)}")
    ctx.handled(token, f"identified {len(seen)} glyphs")


__all__ = [
    "blocked_reason",
    "move_cost",
    "handle_move",
    "handle_attack",
    "handle_wait",
    "spring_trap",
    "search",
    "hostile_nearby",
    "rest",
    "descend",
    "ascend",
    "TALK_PROMPTS",
    "open_talk_direction",
    "talk_prompt_text",
    "handle_talk_direction_input",
    "describe_glyph",
    "examine",
    "identify_glyphs",
]
