"""Data models for the omega turn engine.

This package provides the pydantic models for world state, entities,
commands, events and the pending-interaction sum type.

Example:
    >>> from omega_engine.models import WorldState, MapBounds, Move, Direction
    >>> state = WorldState.new(MapBounds(width=7, height=7))
    >>> command = Move(direction=Direction.EAST)
"""

from omega_engine.models.catalog import ContentCatalog, ItemTemplate, default_catalog
from omega_engine.models.commands import (
    Attack,
    Command,
    Drop,
    Legacy,
    Move,
    Pickup,
    Wait,
    parse_command,
)
from omega_engine.models.entities import (
    Equipment,
    GroundItem,
    Item,
    MapBounds,
    Monster,
    Player,
    Position,
    Stats,
    TileSiteCell,
    Trap,
)
from omega_engine.models.enums import (
    Alignment,
    CombatLine,
    CombatManeuver,
    Direction,
    EndingKind,
    Faction,
    GameMode,
    ItemFamily,
    LegacyEnvironment,
    LegacyQuestState,
    LegacyStatusFlag,
    ModalInputProfile,
    MonsterBehavior,
    SessionStatus,
    TrapKind,
    VictoryTrigger,
    WorldMode,
)
from omega_engine.models.events import Event, Outcome, event_kind
from omega_engine.models.interactions import (
    INTERACTION_PRECEDENCE,
    ActiveInteraction,
    InteractionKind,
    ServiceKind,
)
from omega_engine.models.world import (
    Clock,
    GameOptions,
    Progression,
    SiteMapDefinition,
    Spell,
    Spellbook,
    StatusEffect,
    WizardState,
    WorldState,
)


__all__ = [
    # World
    "WorldState",
    "Clock",
    "GameOptions",
    "WizardState",
    "Progression",
    "Spell",
    "Spellbook",
    "StatusEffect",
    "SiteMapDefinition",
    # Entities
    "Position",
    "MapBounds",
    "Stats",
    "Item",
    "Equipment",
    "Player",
    "Monster",
    "GroundItem",
    "Trap",
    "TileSiteCell",
    # Catalog
    "ContentCatalog",
    "ItemTemplate",
    "default_catalog",
    # Commands
    "Command",
    "Move",
    "Attack",
    "Wait",
    "Pickup",
    "Drop",
    "Legacy",
    "parse_command",
    # Events
    "Event",
    "Outcome",
    "event_kind",
    # Interactions
    "ActiveInteraction",
    "InteractionKind",
    "INTERACTION_PRECEDENCE",
    "ServiceKind",
    # Enums
    "Direction",
    "SessionStatus",
    "GameMode",
    "WorldMode",
    "LegacyEnvironment",
    "Faction",
    "MonsterBehavior",
    "ItemFamily",
    "TrapKind",
    "Alignment",
    "LegacyQuestState",
    "EndingKind",
    "VictoryTrigger",
    "CombatManeuver",
    "CombatLine",
    "ModalInputProfile",
    "LegacyStatusFlag",
]
