"""Monster turns.

After any player action that costs time, each living monster that is not
AI-paused acts once, in list order. Behavior tags decide what it does:

- hostile: attack when adjacent, otherwise approach within sight range,
  otherwise wander.
- cowardly: as hostile while above half HP, then flee.
- stationary: attack when adjacent, never move.
- passive: wander and never attack until provoked.

Random draws happen only for wandering and damage rolls, always in this
order, so the stream stays reproducible.
"""

from __future__ import annotations

from omega_engine.core.constants import MONSTER_SIGHT_RANGE
from omega_engine.core.logging import get_logger
from omega_engine.engine.combat import BLOCK_BONUS_EFFECT, RIPOSTE_EFFECT, damage_monster
from omega_engine.engine.context import TurnContext
from omega_engine.engine.progression import resolve_player_defeat
from omega_engine.models.entities import Monster, Position
from omega_engine.models.enums import Direction, MonsterBehavior, SessionStatus
from omega_engine.models.events import MonsterAttacked, MonsterMoved


logger = get_logger(__name__)

WANDER_DIRECTIONS = (Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST)


def run_monster_turns(ctx: TurnContext) -> None:
    """Give every eligible monster one action."""
    state = ctx.state
    for monster in list(state.monsters):
        if state.status is not SessionStatus.IN_PROGRESS:
            return
        if monster.ai_paused or not monster.stats.is_alive:
            continue
        _act(ctx, monster)


def _act(ctx: TurnContext, monster: Monster) -> None:
    player_position = ctx.state.player.position
    distance = monster.position.manhattan(player_position)
    adjacent = distance == 1
    behavior = monster.behavior

    if behavior is MonsterBehavior.STATIONARY:
        if adjacent:
            monster_attack(ctx, monster)
        return
    if behavior is MonsterBehavior.PASSIVE:
        _wander(ctx, monster)
        return
    if behavior is MonsterBehavior.COWARDLY and monster.stats.hp * 2 <= monster.stats.max_hp:
        _flee(ctx, monster)
        return
    if adjacent:
        monster_attack(ctx, monster)
    elif distance <= MONSTER_SIGHT_RANGE:
        _approach(ctx, monster)
    else:
        _wander(ctx, monster)


# =============================================================================
# Movement
# =============================================================================


def _can_enter(ctx: TurnContext, position: Position) -> bool:
    state = ctx.state
    return (
        state.is_walkable(position)
        and position != state.player.position
        and state.monster_at(position) is None
    )


def _step_to(ctx: TurnContext, monster: Monster, target: Position) -> None:
    origin = monster.position
    monster.position = target
    ctx.emit(MonsterMoved(monster_id=monster.id, from_position=origin, to_position=target))


def _approach(ctx: TurnContext, monster: Monster) -> None:
    """Greedy step toward the player along the longer axis first."""
    player = ctx.state.player.position
    dx = player.x - monster.position.x
    dy = player.y - monster.position.y
    horizontal = Direction.EAST if dx > 0 else Direction.WEST
    vertical = Direction.SOUTH if dy > 0 else Direction.NORTH
    candidates: list[Direction] = []
    if abs(dx) >= abs(dy):
        candidates = [horizontal] + ([vertical] if dy else [])
    else:
        candidates = [vertical] + ([horizontal] if dx else [])
    for direction in candidates:
        target = monster.position.offset(direction)
        if _can_enter(ctx, target):
            _step_to(ctx, monster, target)
            return


def _flee(ctx: TurnContext, monster: Monster) -> None:
    player = ctx.state.player.position
    current = monster.position.manhattan(player)
    for direction in WANDER_DIRECTIONS:
        target = monster.position.offset(direction)
        if target.manhattan(player) > current and _can_enter(ctx, target):
            _step_to(ctx, monster, target)
            return


def _wander(ctx: TurnContext, monster: Monster) -> None:
    # Four directions plus "stay put"
    roll = ctx.rng.range_inclusive(0, len(WANDER_DIRECTIONS))
    if roll == len(WANDER_DIRECTIONS):
        return
    target = monster.position.offset(WANDER_DIRECTIONS[roll])
    if _can_enter(ctx, target):
        _step_to(ctx, monster, target)


# =============================================================================
# Attacks
# =============================================================================


def monster_attack(ctx: TurnContext, monster: Monster) -> None:
    """Hit the player; armor, shield and any block bonus soak damage."""
    state = ctx.state
    player = state.player
    block = state.status_effect(BLOCK_BONUS_EFFECT)
    soak = player.stats.defense + player.armor_bonus() + (block.magnitude if block else 0)
    rolled = ctx.rng.range_inclusive(monster.stats.attack_min, monster.stats.attack_max)
    damage = max(0, rolled - soak)
    player.stats.apply_damage(damage)

    if damage:
        ctx.log(f"{monster.name} hits you for {damage} damage.")
    else:
        ctx.log(f"{monster.name} fails to hurt you.")
    ctx.emit(MonsterAttacked(monster_id=monster.id, damage=damage, remaining_hp=player.stats.hp))
    logger.debug("Monster attack", monster=monster.name, rolled=rolled, damage=damage)

    if not player.stats.is_alive:
        resolve_player_defeat(ctx, monster.name)
        return

    if state.remove_status_effect(RIPOSTE_EFFECT):
        damage_monster(ctx, monster, 1, f"You riposte {monster.name} for 1 damage.")


__all__ = ["WANDER_DIRECTIONS", "run_monster_turns", "monster_attack"]
