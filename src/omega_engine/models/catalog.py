"""Content catalog: item templates looked up by shops and wishes.

The catalog travels inside WorldState so the engine never consults
global content. Bootstrap code may replace it wholesale; the default
catalog covers the items the built-in services sell or hand out.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omega_engine.core.constants import (
    USEF_CURE,
    USEF_FOOD,
    USEF_HEAL,
    USEF_RAISE_PORTCULLIS,
    USEF_RESTORE_MANA,
    USEF_TELEPORT,
)
from omega_engine.models.entities import Item
from omega_engine.models.enums import ItemFamily


class ItemTemplate(BaseModel):
    """Blueprint for creating an Item."""

    model_config = ConfigDict(frozen=True)

    name: str
    family: ItemFamily = ItemFamily.THING
    usef: str = ""
    value: int = 0
    weight: int = 10
    attack_bonus: int = 0
    hit_bonus: int = 0
    defense_bonus: int = 0
    charges: int = -1

    def instantiate(self, item_id: int) -> Item:
        """Create an Item with the given id from this template."""
        return Item(
            id=item_id,
            name=self.name,
            family=self.family,
            usef=self.usef,
            value=self.value,
            weight=self.weight,
            attack_bonus=self.attack_bonus,
            hit_bonus=self.hit_bonus,
            defense_bonus=self.defense_bonus,
            charges=self.charges,
        )


class ContentCatalog(BaseModel):
    """Item templates available to the running session."""

    items: list[ItemTemplate] = Field(default_factory=list)

    def find(self, name: str) -> ItemTemplate | None:
        """Find a template by case-insensitive name, ignoring outer spaces."""
        wanted = " ".join(name.lower().split())
        if not wanted:
            return None
        for template in self.items:
            if template.name.lower() == wanted:
                return template
        return None


DEFAULT_ITEM_TEMPLATES: tuple[ItemTemplate, ...] = (
    ItemTemplate(name="food ration", family=ItemFamily.FOOD, usef=USEF_FOOD, value=10, weight=20),
    ItemTemplate(name="healing potion", family=ItemFamily.POTION, usef=USEF_HEAL, value=40, weight=5),
    ItemTemplate(name="mana potion", family=ItemFamily.POTION, usef=USEF_RESTORE_MANA, value=60, weight=5),
    ItemTemplate(name="antidote", family=ItemFamily.POTION, usef=USEF_CURE, value=25, weight=5),
    ItemTemplate(name="scroll of teleport", family=ItemFamily.SCROLL, usef=USEF_TELEPORT, value=80, weight=2),
    ItemTemplate(name="dagger", family=ItemFamily.WEAPON, value=30, weight=15, attack_bonus=1, hit_bonus=1),
    ItemTemplate(name="short sword", family=ItemFamily.WEAPON, value=120, weight=40, attack_bonus=2, hit_bonus=1),
    ItemTemplate(name="long sword", family=ItemFamily.WEAPON, value=300, weight=70, attack_bonus=4),
    ItemTemplate(name="leather armor", family=ItemFamily.ARMOR, value=90, weight=100, defense_bonus=1),
    ItemTemplate(name="chain mail", family=ItemFamily.ARMOR, value=350, weight=250, defense_bonus=3),
    ItemTemplate(name="small shield", family=ItemFamily.SHIELD, value=60, weight=60, defense_bonus=1),
    ItemTemplate(name="arrow", family=ItemFamily.MISSILE, value=2, weight=3, attack_bonus=2),
    ItemTemplate(name="throwing knife", family=ItemFamily.MISSILE, value=8, weight=8, attack_bonus=3),
    ItemTemplate(
        name="portcullis key",
        family=ItemFamily.THING,
        usef=USEF_RAISE_PORTCULLIS,
        value=0,
        weight=1,
    ),
    ItemTemplate(name="staff of healing", family=ItemFamily.STICK, usef=USEF_HEAL, value=250, weight=80, charges=5),
    ItemTemplate(name="wand of blinking", family=ItemFamily.STICK, usef=USEF_TELEPORT, value=180, weight=10, charges=3),
    ItemTemplate(name="orb of mastery", family=ItemFamily.ARTIFACT, value=5000, weight=30),
)


def default_catalog() -> ContentCatalog:
    """Build the built-in catalog."""
    return ContentCatalog(items=list(DEFAULT_ITEM_TEMPLATES))


__all__ = [
    "ItemTemplate",
    "ContentCatalog",
    "DEFAULT_ITEM_TEMPLATES",
    "default_catalog",
]
