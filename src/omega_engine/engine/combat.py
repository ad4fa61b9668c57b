"""Player-side combat resolution.

An attack draws a d20 to-hit roll against the target's defense, then a
damage roll from the player's attack range plus weapon and maneuver
bonuses. A miss against a monster still reports ``Attacked`` with zero
damage, so an attack into an occupied tile always yields ``Attacked`` or
``MonsterDefeated``. Swinging at an empty tile yields ``AttackMissed``.

The combat sequence is a short list of (maneuver, line) steps cycled by
successive attacks; ``F`` switches between preset sequences.
"""

from __future__ import annotations

from omega_engine.core.constants import TO_HIT_TARGET
from omega_engine.core.logging import get_logger
from omega_engine.engine import sites
from omega_engine.engine.context import TurnContext
from omega_engine.engine.progression import advance_main_quest, raise_legal_heat, shift_alignment
from omega_engine.engine.rng import roll_d20
from omega_engine.models.entities import Item, Monster
from omega_engine.models.enums import (
    CombatLine,
    CombatManeuver,
    Direction,
    Faction,
    ItemFamily,
    LegacyQuestState,
    MonsterBehavior,
)
from omega_engine.models.events import AttackMissed, Attacked, MonsterDefeated
from omega_engine.models.world import CombatStep, WorldState


logger = get_logger(__name__)


# =============================================================================
# Combat Styles
# =============================================================================


COMBAT_STYLES: dict[str, tuple[CombatStep, ...]] = {
    "balanced": (CombatStep(maneuver=CombatManeuver.ATTACK, line=CombatLine.CENTER),),
    "aggressive": (
        CombatStep(maneuver=CombatManeuver.LUNGE, line=CombatLine.HIGH),
        CombatStep(maneuver=CombatManeuver.ATTACK, line=CombatLine.CENTER),
    ),
    "defensive": (
        CombatStep(maneuver=CombatManeuver.BLOCK, line=CombatLine.CENTER),
        CombatStep(maneuver=CombatManeuver.RIPOSTE, line=CombatLine.LOW),
    ),
}

BLOCK_BONUS_EFFECT = "block_bonus"
RIPOSTE_EFFECT = "riposte_ready"


def current_style(state: WorldState) -> str | None:
    sequence = [(step.maneuver, step.line) for step in state.combat_sequence]
    for name, steps in COMBAT_STYLES.items():
        if sequence == [(step.maneuver, step.line) for step in steps]:
            return name
    return None


def cycle_combat_style(ctx: TurnContext, token: str) -> None:
    """Switch the combat sequence to the next preset style."""
    names = list(COMBAT_STYLES)
    style = current_style(ctx.state)
    next_name = names[(names.index(style) + 1) % len(names)] if style in names else names[0]
    ctx.state.combat_sequence = [step.model_copy() for step in COMBAT_STYLES[next_name]]
    ctx.state.combat_cursor = 0
    summary = ", ".join(f"{step.maneuver.value} {step.line.value}" for step in COMBAT_STYLES[next_name])
    ctx.log(f"Combat style: {next_name} ({summary}).")
    ctx.handled(token, f"combat style {next_name}")


def _next_combat_step(state: WorldState) -> CombatStep:
    if not state.combat_sequence:
        return CombatStep()
    index = state.combat_cursor % len(state.combat_sequence)
    state.combat_cursor = (index + 1) % len(state.combat_sequence)
    return state.combat_sequence[index]


# =============================================================================
# Attacks
# =============================================================================


def player_attack(ctx: TurnContext, direction: Direction) -> None:
    """Attack the tile next to the player in a direction."""
    target = ctx.state.player.position.offset(direction)
    monster = ctx.state.monster_at(target)
    if monster is None:
        ctx.log("You swing at empty space.")
        ctx.emit(AttackMissed(target=target))
        return
    attack_monster(ctx, monster)


def attack_monster(ctx: TurnContext, monster: Monster) -> None:
    """Resolve one melee attack against a monster."""
    state = ctx.state
    player = state.player
    step = _next_combat_step(state)
    weapon = player.weapon

    if step.maneuver is CombatManeuver.BLOCK:
        state.add_status_effect(BLOCK_BONUS_EFFECT, turns=1, magnitude=2)
    elif step.maneuver is CombatManeuver.RIPOSTE:
        state.add_status_effect(BLOCK_BONUS_EFFECT, turns=1, magnitude=1)
        state.add_status_effect(RIPOSTE_EFFECT, turns=1)

    sleeping = monster.ai_paused
    provoke(monster)

    natural = roll_d20(ctx.rng)
    hit_bonus = weapon.hit_bonus if weapon is not None else 0
    if step.line is not CombatLine.CENTER:
        hit_bonus += 1
    hit = sleeping or natural == 20 or (
        natural != 1 and natural + hit_bonus >= TO_HIT_TARGET + monster.stats.defense
    )
    logger.debug("Attack roll", monster=monster.name, natural=natural, bonus=hit_bonus, hit=hit)

    if not hit:
        ctx.log(f"You miss {monster.name}.")
        ctx.emit(Attacked(monster_id=monster.id, damage=0, remaining_hp=monster.stats.hp, hit=False))
        return

    rolled = ctx.rng.range_inclusive(player.stats.attack_min, player.stats.attack_max)
    bonus = weapon.attack_bonus if weapon is not None else 0
    if step.maneuver is CombatManeuver.LUNGE:
        bonus += 2
    damage = max(1, rolled + bonus - monster.stats.defense)
    damage_monster(ctx, monster, damage, f"You hit {monster.name} for {damage} damage.")


def provoke(monster: Monster) -> None:
    """Wake a sleeping monster and turn a passive one hostile."""
    monster.ai_paused = False
    if monster.behavior is MonsterBehavior.PASSIVE:
        monster.behavior = MonsterBehavior.HOSTILE


def damage_monster(ctx: TurnContext, monster: Monster, damage: int, message: str) -> None:
    """Apply damage from any player source and handle death."""
    monster.stats.apply_damage(damage)
    ctx.log(message)
    ctx.emit(Attacked(monster_id=monster.id, damage=damage, remaining_hp=monster.stats.hp))
    if monster.faction is Faction.LAW:
        shift_alignment(ctx, -1)
        raise_legal_heat(ctx, 1)
    elif monster.faction is Faction.CHAOS:
        shift_alignment(ctx, 1)
    if not monster.stats.is_alive:
        defeat_monster(ctx, monster)


def defeat_monster(ctx: TurnContext, monster: Monster) -> None:
    """Remove a dead monster, drop its loot and run death consequences."""
    state = ctx.state
    state.monsters = [other for other in state.monsters if other.id != monster.id]
    for item in monster.drops:
        state.place_item(item, monster.position)
    if monster.leaves_corpse:
        corpse = Item(
            id=state.allocate_item_id(),
            name=f"{monster.name} corpse",
            family=ItemFamily.CORPSE,
            weight=monster.stats.weight,
        )
        state.place_item(corpse, monster.position)
    state.monsters_defeated += 1
    ctx.log(f"{monster.name} is defeated.")
    ctx.emit(MonsterDefeated(monster_id=monster.id, name=monster.name))

    if monster.carries_artifact and state.progression.quest_state is LegacyQuestState.ACTIVE:
        advance_main_quest(
            ctx,
            LegacyQuestState.ARTIFACT_RECOVERED,
            "You recover the artifact. Report to the castle.",
        )
    if monster.is_arena_challenger:
        sites.finish_arena_match(ctx, monster)
    logger.debug("Monster defeated", monster=monster.name, total=state.monsters_defeated)


__all__ = [
    "COMBAT_STYLES",
    "BLOCK_BONUS_EFFECT",
    "RIPOSTE_EFFECT",
    "current_style",
    "cycle_combat_style",
    "player_attack",
    "attack_monster",
    "provoke",
    "damage_monster",
    "defeat_monster",
]
