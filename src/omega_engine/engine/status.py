"""Timed status effects, ticked once per turn that costs time."""

from __future__ import annotations

from omega_engine.engine.context import TurnContext
from omega_engine.engine.progression import resolve_player_defeat
from omega_engine.models.enums import LegacyStatusFlag
from omega_engine.models.events import StatusExpired, StatusTick


EFFECT_FLAGS: dict[str, LegacyStatusFlag] = {
    "poisoned": LegacyStatusFlag.POISONED,
    "blessed": LegacyStatusFlag.BLESSED,
    "hasted": LegacyStatusFlag.HASTED,
    "slowed": LegacyStatusFlag.SLOWED,
}


def tick_status_effects(ctx: TurnContext) -> None:
    """Advance every effect by one turn, applying poison and expiring the spent ones."""
    state = ctx.state
    for effect in list(state.status_effects):
        hp_change = 0
        if effect.name == "poisoned":
            hp_change = -state.player.stats.apply_damage(effect.magnitude)
            if hp_change:
                ctx.log("You feel the poison in your veins.")
        effect.turns_remaining = max(0, effect.turns_remaining - 1)
        ctx.emit(StatusTick(effect=effect.name, turns_remaining=effect.turns_remaining, hp_change=hp_change))

        if not state.player.stats.is_alive:
            resolve_player_defeat(ctx, effect.name)
            return

        if effect.turns_remaining == 0:
            state.remove_status_effect(effect.name)
            flag = EFFECT_FLAGS.get(effect.name)
            if flag is not None:
                state.set_status_flag(flag, False)
            ctx.emit(StatusExpired(effect=effect.name))


__all__ = ["EFFECT_FLAGS", "tick_status_effects"]
