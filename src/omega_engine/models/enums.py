"""Enumeration types for the omega turn engine.

These enums are the closed vocabularies shared by world state, commands,
events and the save format. String enums serialize to their lowercase
values so saves and fixtures stay readable.
"""

from __future__ import annotations

from enum import IntFlag, StrEnum


class Direction(StrEnum):
    """The eight compass movement directions."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    NORTHEAST = "northeast"
    NORTHWEST = "northwest"
    SOUTHEAST = "southeast"
    SOUTHWEST = "southwest"

    @property
    def delta(self) -> tuple[int, int]:
        """Get the (dx, dy) step for this direction.

        Returns:
            Offset tuple; north decreases y.
        """
        return _DIRECTION_DELTAS[self]


_DIRECTION_DELTAS = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
    Direction.NORTHEAST: (1, -1),
    Direction.NORTHWEST: (-1, -1),
    Direction.SOUTHEAST: (1, 1),
    Direction.SOUTHWEST: (-1, 1),
}


class SessionStatus(StrEnum):
    """Lifecycle of a play session. Won and Lost are terminal."""

    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


class GameMode(StrEnum):
    """Rule set a session is played under; saves are only loaded into the same mode."""

    CLASSIC = "classic"
    MODERN = "modern"


class WorldMode(StrEnum):
    """Which overall map the player is on."""

    DUNGEON_CITY = "dungeon_city"
    COUNTRYSIDE = "countryside"


class LegacyEnvironment(StrEnum):
    """Environment of the current map."""

    CITY = "city"
    COUNTRYSIDE = "countryside"
    ARENA = "arena"
    DUNGEON = "dungeon"


class Faction(StrEnum):
    """Allegiance of a monster, used for alignment bookkeeping."""

    NEUTRAL = "neutral"
    LAW = "law"
    CHAOS = "chaos"
    WILD = "wild"


class MonsterBehavior(StrEnum):
    """AI behavior tag."""

    HOSTILE = "hostile"
    """Approaches and attacks the player."""

    PASSIVE = "passive"
    """Ignores the player until attacked."""

    STATIONARY = "stationary"
    """Never moves; attacks when adjacent."""

    COWARDLY = "cowardly"
    """Fights while healthy, flees when at half HP or below."""


class ItemFamily(StrEnum):
    """Broad item categories used by prompts and services."""

    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    POTION = "potion"
    SCROLL = "scroll"
    FOOD = "food"
    RING = "ring"
    STICK = "stick"
    MISSILE = "missile"
    ARTIFACT = "artifact"
    THING = "thing"
    CASH = "cash"
    CORPSE = "corpse"


class TrapKind(StrEnum):
    """Kinds of floor traps."""

    DART = "dart"
    PIT = "pit"
    POISON = "poison"
    TELEPORT = "teleport"


class Alignment(StrEnum):
    """Player alignment derived from law_chaos_score."""

    LAWFUL = "lawful"
    NEUTRAL = "neutral"
    CHAOTIC = "chaotic"


class LegacyQuestState(StrEnum):
    """Progress of the main quest line."""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ARTIFACT_RECOVERED = "artifact_recovered"
    COMPLETED = "completed"
    FAILED = "failed"


class EndingKind(StrEnum):
    """Classification of a won session."""

    VICTORY = "victory"
    TOTAL_WINNER = "total_winner"


class VictoryTrigger(StrEnum):
    """What caused the session to end in a win."""

    QUIT_CONFIRMED = "quit_confirmed"


class CombatManeuver(StrEnum):
    """Per-step maneuver of the combat sequence."""

    ATTACK = "attack"
    LUNGE = "lunge"
    BLOCK = "block"
    RIPOSTE = "riposte"


class CombatLine(StrEnum):
    """Height at which a combat step is aimed."""

    HIGH = "high"
    CENTER = "center"
    LOW = "low"


class SpellTargeting(StrEnum):
    """Whether a spell needs a target."""

    SELF = "self"
    BOLT = "bolt"


class ModalInputProfile(StrEnum):
    """How a frontend should interpret the next raw keystroke."""

    NONE = "none"
    PROMPT = "prompt"
    TEXT_ENTRY = "text_entry"
    DIRECTION_ENTRY = "direction_entry"


class LegacyStatusFlag(IntFlag):
    """Historical status bits. Unknown higher bits are preserved as-is."""

    CHEATED = 1 << 0
    HASTED = 1 << 1
    SLOWED = 1 << 2
    POISONED = 1 << 3
    BLESSED = 1 << 4
    IN_ARENA = 1 << 5
    DEAF = 1 << 6
    MOUNTED = 1 << 7


__all__ = [
    "Direction",
    "SessionStatus",
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
    "SpellTargeting",
    "ModalInputProfile",
    "LegacyStatusFlag",
]
