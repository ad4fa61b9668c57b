"""The turn reducer: ``step(state, command, rng) -> Outcome``.

One call consumes one command. A finished session ignores it; a pending
interaction receives it as raw input; otherwise it is dispatched to
movement, inventory or the legacy token table. If the resulting action
took time, monsters act, status effects tick and the clock advances, in
that order. Zero-minute actions leave the clock and the monsters alone.

Example:
    >>> from omega_engine.engine.router import step
    >>> from omega_engine.engine.rng import DeterministicRng
    >>> from omega_engine.models.commands import Wait
    >>> from omega_engine.models.world import WorldState
    >>> state = WorldState.new()
    >>> outcome = step(state, Wait(), DeterministicRng.seeded(7))
    >>> outcome.turn, outcome.minutes
    (1, 5)
"""

from __future__ import annotations

from omega_engine.core.logging import get_logger
from omega_engine.engine import inventory, legacy, movement, wizard  # noqa: F401  (legacy fills the token table)
from omega_engine.engine.context import TurnContext
from omega_engine.engine.interactions import handle_interaction_input
from omega_engine.engine.monsters import run_monster_turns
from omega_engine.engine.prompts import raw_input_from_command
from omega_engine.engine.registry import get_legacy_command
from omega_engine.engine.rng import RandomSource
from omega_engine.engine.status import tick_status_effects
from omega_engine.models.commands import Attack, Command, Drop, Legacy, Move, Pickup, Wait
from omega_engine.models.enums import SessionStatus
from omega_engine.models.events import CommandIgnoredTerminal, Outcome, TurnAdvanced
from omega_engine.models.world import WorldState


logger = get_logger(__name__)


# =============================================================================
# Dispatch
# =============================================================================


def dispatch_legacy(ctx: TurnContext, token: str) -> None:
    """Run a legacy token through the token table."""
    definition = get_legacy_command(token)
    if definition is None:
        ctx.log(f"Unknown command: {token}")
        ctx.handled(token, f"unsupported legacy command: {token}", fully_modeled=False)
        return
    if definition.wizard_only and not ctx.state.wizard.enabled:
        wizard.refuse_wizard_command(ctx, token)
        return
    ctx.minutes = definition.minutes or 0
    definition.handler(ctx, token)


def dispatch_command(ctx: TurnContext, command: Command) -> None:
    if isinstance(command, Move):
        movement.handle_move(ctx, command.direction)
    elif isinstance(command, Attack):
        movement.handle_attack(ctx, command.direction)
    elif isinstance(command, Wait):
        movement.handle_wait(ctx)
    elif isinstance(command, Pickup):
        inventory.pickup(ctx)
    elif isinstance(command, Drop):
        inventory.drop(ctx, command.slot)
    elif isinstance(command, Legacy):
        dispatch_legacy(ctx, command.token)


def advance_time(ctx: TurnContext) -> None:
    """Let the world react to an action that took ``ctx.minutes``."""
    state = ctx.state
    if state.status is SessionStatus.IN_PROGRESS:
        run_monster_turns(ctx)
    if state.status is SessionStatus.IN_PROGRESS:
        tick_status_effects(ctx)
    state.clock.turn += 1
    state.clock.minutes += ctx.minutes
    ctx.emit(TurnAdvanced(turn=state.clock.turn, minutes=state.clock.minutes))


# =============================================================================
# Step
# =============================================================================


def step(state: WorldState, command: Command, rng: RandomSource) -> Outcome:
    """Apply one command to the world.

    Args:
        state: World state, mutated in place.
        command: The player's command.
        rng: Deterministic random stream, consumed in a fixed order.

    Returns:
        The Outcome describing every effect of the command.
    """
    ctx = TurnContext(state=state, rng=rng)

    if state.status.is_terminal:
        ctx.emit(CommandIgnoredTerminal(status=state.status))
        return Outcome(turn=state.clock.turn, minutes=0, status=state.status, events=ctx.events)

    interaction = state.interaction
    try:
        if interaction is not None:
            handle_interaction_input(ctx, interaction, raw_input_from_command(command))
        else:
            dispatch_command(ctx, command)
    except Exception as exc:
        logger.exception("Command failed", command=command.model_dump(mode="json"), turn=state.clock.turn)
        ctx.set_minutes(0)
        ctx.handled(getattr(command, "token", command.kind), f"command failed: {exc}", fully_modeled=False)

    if ctx.minutes > 0:
        advance_time(ctx)

    logger.debug(
        "Step",
        command=command.kind,
        interaction=interaction.kind if interaction is not None else None,
        minutes=ctx.minutes,
        turn=state.clock.turn,
        events=len(ctx.events),
    )
    return Outcome(turn=state.clock.turn, minutes=ctx.minutes, status=state.status, events=ctx.events)


__all__ = [
    "dispatch_legacy",
    "dispatch_command",
    "advance_time",
    "step",
]
