"""Per-step working context shared by every handler.

A ``TurnContext`` bundles the world state, the RNG stream and the event
list being built for one ``step`` call, together with the minute cost
the handlers have settled on. Handlers never return values to the
router; they mutate state and report through the context.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from omega_engine.engine.rng import RandomSource
from omega_engine.models.events import (
    EconomyUpdated,
    EventBase,
    LegacyHandled,
    ProgressionUpdated,
)
from omega_engine.models.world import WorldState


@dataclass
class TurnContext:
    """Mutable accumulator for one ``step`` call.

    Attributes:
        state: The world state being mutated.
        rng: The deterministic random stream.
        events: Events emitted so far, in order.
        minutes: Minutes the current action costs.
    """

    state: WorldState
    rng: RandomSource
    events: list[EventBase] = field(default_factory=list)
    minutes: int = 0

    def emit(self, event: EventBase) -> None:
        self.events.append(event)

    def log(self, line: str) -> None:
        self.state.log_line(line)

    def set_minutes(self, minutes: int) -> None:
        self.minutes = max(0, minutes)

    def handled(self, token: str, note: str, *, fully_modeled: bool = True) -> None:
        """Emit a LegacyHandled event for a consumed token."""
        self.emit(LegacyHandled(token=token, note=note, fully_modeled=fully_modeled))

    def economy(
        self,
        source: str,
        *,
        gold: int = 0,
        bank: int = 0,
        food: int = 0,
    ) -> None:
        """Apply gold/bank/food deltas and emit an EconomyUpdated event.

        Balances never go negative; the event reports the deltas actually
        applied.
        """
        state = self.state
        gold_applied = max(gold, -state.gold)
        bank_applied = max(bank, -state.bank_gold)
        food_applied = max(food, -state.food)
        state.gold += gold_applied
        state.bank_gold += bank_applied
        state.food += food_applied
        self.emit(
            EconomyUpdated(
                source=source,
                gold_delta=gold_applied,
                bank_delta=bank_applied,
                food_delta=food_applied,
                gold=state.gold,
                bank_gold=state.bank_gold,
            )
        )

    def progressed(self, field_name: str, value: int | str) -> None:
        self.emit(ProgressionUpdated(field=field_name, value=value))


__all__ = ["TurnContext"]
