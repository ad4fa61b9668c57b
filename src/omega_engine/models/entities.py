"""Entity models: positions, stats, items, the player, monsters, traps.

Entities are mutable pydantic models owned by WorldState. HP is clamped
to ``[0, max_hp]`` on construction and by every mutator, so no handler
can leave an out-of-range value behind.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from omega_engine.models.enums import (
    Direction,
    Faction,
    ItemFamily,
    MonsterBehavior,
    TrapKind,
)


class EntityModel(BaseModel):
    """Base class for mutable entity data."""

    model_config = ConfigDict(
        frozen=False,
        extra="ignore",
    )


# =============================================================================
# Geometry
# =============================================================================


class Position(BaseModel):
    """A tile coordinate. Immutable so it can be shared between events."""

    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0

    def offset(self, direction: Direction, distance: int = 1) -> Position:
        dx, dy = direction.delta
        return Position(x=self.x + dx * distance, y=self.y + dy * distance)

    def manhattan(self, other: Position) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def chebyshev(self, other: Position) -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))


class MapBounds(BaseModel):
    """Dimensions of the current map."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=64, ge=1)
    height: int = Field(default=16, ge=1)

    def contains(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def center(self) -> Position:
        return Position(x=self.width // 2, y=self.height // 2)


# =============================================================================
# Stats
# =============================================================================


class Stats(EntityModel):
    """Combat statistics shared by the player and monsters."""

    hp: int = 20
    max_hp: int = Field(default=20, ge=1)
    attack_min: int = Field(default=1, ge=0)
    attack_max: int = Field(default=4, ge=0)
    defense: int = 0
    weight: int = Field(default=60, ge=0)

    @model_validator(mode="after")
    def clamp_hp(self) -> Self:
        """Clamp hp into range and keep attack_max >= attack_min."""
        self.hp = max(0, min(self.hp, self.max_hp))
        if self.attack_max < self.attack_min:
            self.attack_max = self.attack_min
        return self

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def apply_damage(self, amount: int) -> int:
        """Apply damage and return the HP actually lost."""
        if amount <= 0:
            return 0
        before = self.hp
        self.hp = max(0, self.hp - amount)
        return before - self.hp

    def heal(self, amount: int) -> int:
        """Restore HP up to max_hp and return the amount restored."""
        if amount <= 0:
            return 0
        before = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        return self.hp - before

    def set_hp(self, value: int) -> None:
        self.hp = max(0, min(value, self.max_hp))

    def set_max_hp(self, value: int) -> None:
        self.max_hp = max(1, value)
        self.hp = min(self.hp, self.max_hp)


# =============================================================================
# Items
# =============================================================================


class Item(EntityModel):
    """A carried or dropped object.

    Attributes:
        id: Unique item id within a WorldState.
        name: Display and catalog name.
        family: Broad category used by item prompts.
        usef: Use-effect tag triggered by activation/quaff/read/eat.
        value: Base price in gold.
        weight: Encumbrance and thrown damage basis.
        attack_bonus: Added to damage when wielded or thrown.
        hit_bonus: Added to to-hit rolls when wielded.
        defense_bonus: Added to defense when worn.
        charges: Remaining uses for sticks; -1 means unlimited.
        known: Whether the item has been identified.
    """

    id: int = 0
    name: str = "thing"
    family: ItemFamily = ItemFamily.THING
    usef: str = ""
    value: int = Field(default=0, ge=0)
    weight: int = Field(default=10, ge=0)
    attack_bonus: int = 0
    hit_bonus: int = 0
    defense_bonus: int = 0
    charges: int = -1
    known: bool = True


class Equipment(EntityModel):
    """Ids of pack items currently wielded or worn."""

    weapon: int | None = None
    armor: int | None = None
    shield: int | None = None

    def slot_of(self, item_id: int) -> str | None:
        for slot in ("weapon", "armor", "shield"):
            if getattr(self, slot) == item_id:
                return slot
        return None

    def release(self, item_id: int) -> None:
        """Unequip an item from whatever slot holds it."""
        slot = self.slot_of(item_id)
        if slot is not None:
            setattr(self, slot, None)


class Player(EntityModel):
    """The player character."""

    name: str = "Adventurer"
    position: Position = Field(default_factory=Position)
    stats: Stats = Field(
        default_factory=lambda: Stats(hp=20, max_hp=20, attack_min=1, attack_max=4, defense=1)
    )
    inventory: list[Item] = Field(default_factory=list)
    inventory_capacity: int = Field(default=12, ge=1)
    equipment: Equipment = Field(default_factory=Equipment)

    @property
    def pack_full(self) -> bool:
        return len(self.inventory) >= self.inventory_capacity

    def find_item(self, item_id: int | None) -> Item | None:
        if item_id is None:
            return None
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None

    def remove_item(self, item_id: int) -> Item | None:
        """Remove an item from the pack, unequipping it first."""
        for index, item in enumerate(self.inventory):
            if item.id == item_id:
                self.equipment.release(item_id)
                return self.inventory.pop(index)
        return None

    @property
    def weapon(self) -> Item | None:
        return self.find_item(self.equipment.weapon)

    def armor_bonus(self) -> int:
        total = 0
        for item_id in (self.equipment.armor, self.equipment.shield):
            item = self.find_item(item_id)
            if item is not None:
                total += item.defense_bonus
        return total


# =============================================================================
# World Occupants
# =============================================================================


class Monster(EntityModel):
    """A hostile or neutral creature on the map."""

    id: int
    name: str
    position: Position
    stats: Stats = Field(default_factory=Stats)
    faction: Faction = Faction.WILD
    behavior: MonsterBehavior = MonsterBehavior.HOSTILE
    ai_paused: bool = False
    is_arena_challenger: bool = False
    carries_artifact: bool = False
    leaves_corpse: bool = False
    dialogue: str = ""
    drops: list[Item] = Field(default_factory=list)


class GroundItem(EntityModel):
    """An item lying on a map tile."""

    position: Position
    item: Item


class Trap(EntityModel):
    """A floor trap that fires when the player steps on it while armed."""

    id: int
    position: Position
    kind: TrapKind = TrapKind.DART
    damage: int = Field(default=3, ge=0)
    armed: bool = True
    known: bool = False


class TileSiteCell(EntityModel):
    """Site metadata of one map tile (row-major in WorldState grids)."""

    glyph: str = "."
    site_id: int = 0
    aux: int = 0
    flags: int = 0


__all__ = [
    "EntityModel",
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
]
