"""Spellcasting and ranged targeting.

``m`` opens a text prompt beginning ``Cast Spell:``. The spell name (or
the letter of a known spell) is typed into the buffer and committed with
``<enter>``. Self spells take effect at once; bolt spells switch the
prompt to a targeting cursor that starts on the nearest visible monster.

Firing a missile (``f`` then a pack letter) uses the same cursor. Bolts
and missiles travel a straight line from the player and stop at the
first monster, wall or closed portcullis.
"""

from __future__ import annotations

from omega_engine.core.constants import (
    ACTION_MINUTES,
    BLOCKING_GLYPHS,
    SPELL_RANGE,
    TILE_FLAG_BLOCK_MOVE,
    TILE_FLAG_BLOCK_SIGHT,
    TILE_FLAG_PORTCULLIS,
    TO_HIT_TARGET,
)
from omega_engine.core.logging import get_logger
from omega_engine.engine.combat import damage_monster, provoke
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    YES_TOKENS,
    RawInput,
    cancel_prompt,
    close_prompt,
    letter_slot,
    open_prompt,
    prompt_line,
    slot_letter,
)
from omega_engine.engine.rng import roll_d20
from omega_engine.models.entities import Item, Monster, Position
from omega_engine.models.enums import Direction, SpellTargeting
from omega_engine.models.events import Attacked
from omega_engine.models.interactions import (
    SpellInteraction,
    SpellStage,
    TargetingInteraction,
    TargetOrigin,
)
from omega_engine.models.world import Spell, WorldState


logger = get_logger(__name__)

SPELL_PROMPT_PREFIX = "Cast Spell:"
MAX_BUFFER_LENGTH = 40
FIRE_TOKENS = frozenset({ENTER, ".", "t", "f"})


# =============================================================================
# Line Of Fire
# =============================================================================


def line_between(start: Position, end: Position) -> list[Position]:
    """Tiles from start (exclusive) to end (inclusive) along a Bresenham line."""
    points: list[Position] = []
    x, y = start.x, start.y
    dx = abs(end.x - x)
    dy = -abs(end.y - y)
    sx = 1 if end.x > x else -1
    sy = 1 if end.y > y else -1
    error = dx + dy
    while (x, y) != (end.x, end.y):
        doubled = 2 * error
        if doubled >= dy:
            error += dy
            x += sx
        if doubled <= dx:
            error += dx
            y += sy
        points.append(Position(x=x, y=y))
    return points


def blocks_sight(state: WorldState, position: Position) -> bool:
    if not state.bounds.contains(position):
        return True
    if state.glyph_at(position) in BLOCKING_GLYPHS:
        return True
    cell = state.site_cell_at(position)
    if cell is None:
        return False
    closed_gate = cell.flags & TILE_FLAG_PORTCULLIS and cell.flags & TILE_FLAG_BLOCK_MOVE
    return bool(cell.flags & TILE_FLAG_BLOCK_SIGHT or closed_gate)


def trace_path(state: WorldState, target: Position) -> tuple[list[Position], Monster | None]:
    """Follow the line to target; return tiles crossed and the monster struck, if any."""
    crossed: list[Position] = []
    for position in line_between(state.player.position, target):
        if blocks_sight(state, position):
            break
        crossed.append(position)
        monster = state.monster_at(position)
        if monster is not None:
            return crossed, monster
    return crossed, None


def nearest_target(state: WorldState) -> Position:
    """Nearest monster in range with a clear line, else the player's own tile."""
    origin = state.player.position
    candidates = sorted(
        (m for m in state.monsters if m.stats.is_alive and origin.chebyshev(m.position) <= SPELL_RANGE),
        key=lambda m: (origin.manhattan(m.position), m.id),
    )
    for monster in candidates:
        _, struck = trace_path(state, monster.position)
        if struck is monster:
            return monster.position
    return origin


# =============================================================================
# Spell Prompt
# =============================================================================


def open_spell_prompt(ctx: TurnContext, token: str) -> None:
    if not ctx.state.spellbook.known_spells():
        ctx.log("You don't know any spells.")
        ctx.handled(token, "no spells known")
        return
    interaction = SpellInteraction(stage=SpellStage.CHOOSE_SPELL)
    open_prompt(ctx, interaction, token=token, label="Spell", text=spell_prompt_text(ctx.state, interaction))


def spell_prompt_text(state: WorldState, interaction: SpellInteraction) -> str:
    spellbook = state.spellbook
    if interaction.stage is SpellStage.CONFIRM:
        spell = spellbook.get(interaction.spell_id)
        name = spell.name if spell else "?"
        cost = spell.cost if spell else 0
        return f"Cast {name} for {cost} of your last {spellbook.mana} mana? [y/n]"
    listing = " ".join(
        f"{slot_letter(i)}) {spell.name} ({spell.cost})" for i, spell in enumerate(spellbook.known_spells())
    )
    return f"{SPELL_PROMPT_PREFIX} {interaction.buffer}_ | mana {spellbook.mana}/{spellbook.max_mana} | {listing}"


def _resolve_spell_text(state: WorldState, text: str) -> Spell | None:
    known = state.spellbook.known_spells()
    slot = letter_slot(text.strip())
    if slot is not None and slot < len(known):
        return known[slot]
    return state.spellbook.find(text)


def handle_spell_input(ctx: TurnContext, interaction: SpellInteraction, raw: RawInput) -> None:
    state = ctx.state
    if raw.token == ESCAPE:
        cancel_prompt(ctx, raw.label, "Spell canceled.")
        return

    if interaction.stage is SpellStage.CONFIRM:
        spell = state.spellbook.get(interaction.spell_id)
        if raw.token not in YES_TOKENS or spell is None:
            cancel_prompt(ctx, raw.label, "Spell canceled.")
            return
        close_prompt(ctx)
        _cast_self_spell(ctx, spell, raw.label)
        return

    if raw.direction is not None:
        ctx.handled(raw.label, "spell prompt expects text")
        return
    if raw.token == BACKSPACE:
        interaction.buffer = interaction.buffer[:-1]
        ctx.handled(raw.label, "spell buffer edit")
        return
    if raw.token != ENTER:
        interaction.buffer = (interaction.buffer + raw.token)[:MAX_BUFFER_LENGTH]
        ctx.handled(raw.label, "spell buffer edit")
        return

    spell = _resolve_spell_text(state, interaction.buffer)
    if spell is None:
        cancel_prompt(ctx, raw.label, "You don't know that spell.")
        return
    if state.spellbook.mana < spell.cost:
        cancel_prompt(ctx, raw.label, f"You lack the power to cast {spell.name}.")
        return

    if spell.targeting is SpellTargeting.BOLT:
        targeting = TargetingInteraction(
            origin=TargetOrigin.SPELL,
            cursor=nearest_target(state),
            spell_id=spell.id,
        )
        open_prompt(ctx, targeting, token=raw.label, label="Targeting", text=targeting_prompt_text(state, targeting))
        return
    if state.options.confirm and spell.cost == state.spellbook.mana:
        interaction.stage = SpellStage.CONFIRM
        interaction.spell_id = spell.id
        text = spell_prompt_text(state, interaction)
        ctx.log(prompt_line("Spell", text))
        ctx.handled(raw.label, text)
        return
    close_prompt(ctx)
    _cast_self_spell(ctx, spell, raw.label)


def _spend_mana(ctx: TurnContext, spell: Spell) -> None:
    spellbook = ctx.state.spellbook
    spellbook.mana = max(0, spellbook.mana - spell.cost)
    ctx.progressed("spellbook.mana", spellbook.mana)


def _cast_self_spell(ctx: TurnContext, spell: Spell, token: str) -> None:
    state = ctx.state
    ctx.set_minutes(ACTION_MINUTES)
    _spend_mana(ctx, spell)
    power = ctx.rng.range_inclusive(spell.power_min, spell.power_max)
    if spell.id == "healing":
        healed = state.player.stats.heal(power)
        ctx.log(f"You cast {spell.name} and recover {healed} hp.")
        ctx.progressed("player.hp", state.player.stats.hp)
    elif spell.id == "blink":
        _blink(ctx, power)
    else:
        ctx.log(f"You cast {spell.name}.")
    ctx.handled(token, f"cast {spell.name}")
    logger.debug("Spell cast", spell=spell.id, power=power)


def _blink(ctx: TurnContext, distance: int) -> None:
    state = ctx.state
    directions = (Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST)
    direction = directions[ctx.rng.range_inclusive(0, len(directions) - 1)]
    position = state.player.position
    for _ in range(distance):
        step = position.offset(direction)
        if not state.is_walkable(step) or state.monster_at(step) is not None:
            break
        position = step
    origin = state.player.position
    state.player.position = position
    ctx.log("You blink." if position != origin else "You blink in place.")


# =============================================================================
# Targeting
# =============================================================================


def begin_fire_targeting(ctx: TurnContext, item: Item, token: str) -> None:
    targeting = TargetingInteraction(
        origin=TargetOrigin.FIRE,
        cursor=nearest_target(ctx.state),
        item_id=item.id,
    )
    open_prompt(ctx, targeting, token=token, label="Targeting", text=targeting_prompt_text(ctx.state, targeting))


def targeting_prompt_text(state: WorldState, interaction: TargetingInteraction) -> str:
    cursor = interaction.cursor
    monster = state.monster_at(cursor)
    what = monster.name if monster is not None else "nothing"
    return f"Target ({cursor.x}, {cursor.y}): {what} | move cursor, <enter> fire, <esc> cancel"


def handle_targeting_input(ctx: TurnContext, interaction: TargetingInteraction, raw: RawInput) -> None:
    state = ctx.state
    if raw.token == ESCAPE:
        cancel_prompt(ctx, raw.label, "Targeting canceled.")
        return

    direction = raw.as_direction
    if direction is not None:
        moved = interaction.cursor.offset(direction)
        if state.bounds.contains(moved) and state.player.position.chebyshev(moved) <= SPELL_RANGE:
            interaction.cursor = moved
        ctx.handled(raw.label, f"cursor ({interaction.cursor.x}, {interaction.cursor.y})")
        return

    if raw.token not in FIRE_TOKENS:
        ctx.handled(raw.label, "targeting: invalid input")
        return
    if interaction.cursor == state.player.position:
        ctx.log("Choose a target first.")
        ctx.handled(raw.label, "targeting: no target")
        return

    close_prompt(ctx)
    ctx.set_minutes(ACTION_MINUTES)
    if interaction.origin is TargetOrigin.SPELL:
        _cast_bolt(ctx, interaction, raw.label)
    else:
        _fire_missile(ctx, interaction, raw.label)


def _cast_bolt(ctx: TurnContext, interaction: TargetingInteraction, token: str) -> None:
    state = ctx.state
    spell = state.spellbook.get(interaction.spell_id)
    if spell is None or state.spellbook.mana < spell.cost:
        ctx.log("The spell fizzles.")
        ctx.set_minutes(0)
        ctx.handled(token, "spell fizzled")
        return
    _spend_mana(ctx, spell)
    crossed, monster = trace_path(state, interaction.cursor)
    if monster is None:
        reached = crossed[-1] if crossed else state.player.position
        blocked = reached != interaction.cursor
        ctx.log(f"The {spell.name} {'is blocked' if blocked else 'hits nothing'}.")
        ctx.handled(token, f"cast {spell.name}: no target")
        return
    if spell.id == "sleep":
        monster.ai_paused = True
        ctx.log(f"{monster.name} falls asleep.")
        ctx.progressed(f"monster.{monster.id}.asleep", 1)
    else:
        provoke(monster)
        damage = ctx.rng.range_inclusive(spell.power_min, spell.power_max)
        damage_monster(ctx, monster, damage, f"Your {spell.name} hits {monster.name} for {damage} damage.")
    ctx.handled(token, f"cast {spell.name}")


def _fire_missile(ctx: TurnContext, interaction: TargetingInteraction, token: str) -> None:
    state = ctx.state
    item = state.player.find_item(interaction.item_id)
    if item is None:
        ctx.log("You no longer have that.")
        ctx.set_minutes(0)
        ctx.handled(token, "fire: item missing")
        return
    state.player.remove_item(item.id)
    crossed, monster = trace_path(state, interaction.cursor)
    landing = crossed[-1] if crossed else state.player.position
    if monster is not None:
        provoke(monster)
        natural = roll_d20(ctx.rng)
        hit = natural == 20 or (natural != 1 and natural + item.hit_bonus >= TO_HIT_TARGET + monster.stats.defense)
        if hit:
            rolled = ctx.rng.range_inclusive(1, 2 + item.attack_bonus)
            damage = max(1, rolled - monster.stats.defense)
            damage_monster(ctx, monster, damage, f"The {item.name} hits {monster.name} for {damage} damage.")
        else:
            ctx.log(f"The {item.name} misses {monster.name}.")
            ctx.emit(Attacked(monster_id=monster.id, damage=0, remaining_hp=monster.stats.hp, hit=False))
    else:
        ctx.log(f"The {item.name} flies and lands.")
    state.place_item(item, landing)
    ctx.handled(token, f"fire {item.name}")


__all__ = [
    "SPELL_PROMPT_PREFIX",
    "line_between",
    "blocks_sight",
    "trace_path",
    "nearest_target",
    "open_spell_prompt",
    "spell_prompt_text",
    "handle_spell_input",
    "begin_fire_targeting",
    "targeting_prompt_text",
    "handle_targeting_input",
]
