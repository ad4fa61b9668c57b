"""Events and the per-step Outcome.

Events are the only channel through which the core reports what
happened; frontends and tooling never diff state. Each event is a frozen
pydantic model whose ``kind`` is its stable snake_case name, which is
also what replay fixtures compare against. Rendering events to text is
left to frontends.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from omega_engine.models.entities import Position
from omega_engine.models.enums import EndingKind, SessionStatus


class EventBase(BaseModel):
    """Base class for event variants."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Movement And Combat
# =============================================================================


class Waited(EventBase):
    kind: Literal["waited"] = "waited"


class Moved(EventBase):
    kind: Literal["moved"] = "moved"
    from_position: Position
    to_position: Position


class MoveBlocked(EventBase):
    kind: Literal["move_blocked"] = "move_blocked"
    target: Position
    reason: str = "blocked"


class AttackMissed(EventBase):
    """Attack into a tile with nobody in it."""

    kind: Literal["attack_missed"] = "attack_missed"
    target: Position


class Attacked(EventBase):
    """Player attack against a monster; ``hit`` is False on a whiff."""

    kind: Literal["attacked"] = "attacked"
    monster_id: int
    damage: int
    remaining_hp: int
    hit: bool = True


class MonsterMoved(EventBase):
    kind: Literal["monster_moved"] = "monster_moved"
    monster_id: int
    from_position: Position
    to_position: Position


class MonsterAttacked(EventBase):
    kind: Literal["monster_attacked"] = "monster_attacked"
    monster_id: int
    damage: int
    remaining_hp: int


class MonsterDefeated(EventBase):
    kind: Literal["monster_defeated"] = "monster_defeated"
    monster_id: int
    name: str


class PlayerDefeated(EventBase):
    kind: Literal["player_defeated"] = "player_defeated"
    cause: str


# =============================================================================
# Session
# =============================================================================


class VictoryAchieved(EventBase):
    kind: Literal["victory_achieved"] = "victory_achieved"
    ending: EndingKind


class CommandIgnoredTerminal(EventBase):
    kind: Literal["command_ignored_terminal"] = "command_ignored_terminal"
    status: SessionStatus


class TurnAdvanced(EventBase):
    kind: Literal["turn_advanced"] = "turn_advanced"
    turn: int
    minutes: int


# =============================================================================
# Inventory
# =============================================================================


class PickedUp(EventBase):
    kind: Literal["picked_up"] = "picked_up"
    item_id: int
    name: str


class Dropped(EventBase):
    kind: Literal["dropped"] = "dropped"
    item_id: int
    name: str


class InventoryFull(EventBase):
    kind: Literal["inventory_full"] = "inventory_full"
    capacity: int


class NoItemToPickUp(EventBase):
    kind: Literal["no_item_to_pick_up"] = "no_item_to_pick_up"


class InvalidDropSlot(EventBase):
    kind: Literal["invalid_drop_slot"] = "invalid_drop_slot"
    slot: int


# =============================================================================
# Legacy Vocabulary And Prompts
# =============================================================================


class LegacyHandled(EventBase):
    """A legacy token was consumed; ``fully_modeled`` is False when unsupported."""

    kind: Literal["legacy_handled"] = "legacy_handled"
    token: str
    note: str
    fully_modeled: bool = True


class ConfirmationRequired(EventBase):
    kind: Literal["confirmation_required"] = "confirmation_required"
    token: str
    prompt: str


# =============================================================================
# Economy And Progression
# =============================================================================


class EconomyUpdated(EventBase):
    kind: Literal["economy_updated"] = "economy_updated"
    source: str
    gold_delta: int = 0
    bank_delta: int = 0
    food_delta: int = 0
    gold: int
    bank_gold: int


class DialogueAdvanced(EventBase):
    kind: Literal["dialogue_advanced"] = "dialogue_advanced"
    speaker: str
    line: str


class QuestAdvanced(EventBase):
    kind: Literal["quest_advanced"] = "quest_advanced"
    quest: str
    state: str
    steps_completed: int


class ProgressionUpdated(EventBase):
    kind: Literal["progression_updated"] = "progression_updated"
    field: str
    value: int | str


class EndingResolved(EventBase):
    kind: Literal["ending_resolved"] = "ending_resolved"
    ending: EndingKind
    score: int
    high_score_eligible: bool


class StatusTick(EventBase):
    kind: Literal["status_tick"] = "status_tick"
    effect: str
    turns_remaining: int
    hp_change: int = 0


class StatusExpired(EventBase):
    kind: Literal["status_expired"] = "status_expired"
    effect: str


Event = Annotated[
    Union[
        Waited,
        Moved,
        MoveBlocked,
        AttackMissed,
        Attacked,
        MonsterMoved,
        MonsterAttacked,
        MonsterDefeated,
        PlayerDefeated,
        VictoryAchieved,
        CommandIgnoredTerminal,
        TurnAdvanced,
        PickedUp,
        Dropped,
        InventoryFull,
        NoItemToPickUp,
        InvalidDropSlot,
        LegacyHandled,
        ConfirmationRequired,
        EconomyUpdated,
        DialogueAdvanced,
        QuestAdvanced,
        ProgressionUpdated,
        EndingResolved,
        StatusTick,
        StatusExpired,
    ],
    Field(discriminator="kind"),
]


def event_kind(event: EventBase) -> str:
    """Get the stable snake_case name of an event."""
    return event.kind  # type: ignore[attr-defined]


class Outcome(BaseModel):
    """Result of one ``step`` call.

    Attributes:
        turn: Clock turn after the call.
        minutes: Minutes that elapsed during the call.
        status: Session status after the call.
        events: Ordered events produced by the call.
    """

    model_config = ConfigDict(frozen=True)

    turn: int
    minutes: int
    status: SessionStatus
    events: list[Event] = Field(default_factory=list)

    def event_kinds(self) -> list[str]:
        return [event_kind(event) for event in self.events]

    def has_event(self, kind: str) -> bool:
        return any(event_kind(event) == kind for event in self.events)


__all__ = [
    "EventBase",
    "Event",
    "Outcome",
    "event_kind",
    "Waited",
    "Moved",
    "MoveBlocked",
    "AttackMissed",
    "Attacked",
    "MonsterMoved",
    "MonsterAttacked",
    "MonsterDefeated",
    "PlayerDefeated",
    "VictoryAchieved",
    "CommandIgnoredTerminal",
    "TurnAdvanced",
    "PickedUp",
    "Dropped",
    "InventoryFull",
    "NoItemToPickUp",
    "InvalidDropSlot",
    "LegacyHandled",
    "ConfirmationRequired",
    "EconomyUpdated",
    "DialogueAdvanced",
    "QuestAdvanced",
    "ProgressionUpdated",
    "EndingResolved",
    "StatusTick",
    "StatusExpired",
]
