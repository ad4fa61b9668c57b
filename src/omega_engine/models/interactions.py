"""Pending interaction: the single sum type behind every multi-step prompt.

WorldState holds at most one ``ActiveInteraction`` in its ``interaction``
field, so two prompts can never be pending at once. Each variant carries
exactly what is needed to resume the prompt on the next ``step`` call: a
text buffer, a cursor, a menu context.

``INTERACTION_PRECEDENCE`` preserves the historical priority order among
prompts. It decides which prompt survives when a legacy save that stored
each prompt in its own field is collapsed into the single field.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from omega_engine.models.entities import Position


class InteractionKind(StrEnum):
    """Discriminator values of the interaction variants."""

    WIZARD = "wizard"
    SPELL = "spell"
    QUIT = "quit"
    TALK_DIRECTION = "talk_direction"
    ACTIVATION = "activation"
    TARGETING = "targeting"
    INVENTORY = "inventory"
    ITEM_PROMPT = "item_prompt"
    SITE = "site"


INTERACTION_PRECEDENCE: tuple[InteractionKind, ...] = (
    InteractionKind.WIZARD,
    InteractionKind.SPELL,
    InteractionKind.QUIT,
    InteractionKind.TALK_DIRECTION,
    InteractionKind.ACTIVATION,
    InteractionKind.TARGETING,
    InteractionKind.INVENTORY,
    InteractionKind.ITEM_PROMPT,
    InteractionKind.SITE,
)


# =============================================================================
# Sub-step Enums
# =============================================================================


class WizardStage(StrEnum):
    CONFIRM_ENABLE = "confirm_enable"
    WISH_TEXT = "wish_text"
    STAT_SELECT = "stat_select"
    STAT_VALUE = "stat_value"
    STATUS_FLAGS = "status_flags"


class SpellStage(StrEnum):
    CHOOSE_SPELL = "choose_spell"
    CONFIRM = "confirm"


class TargetOrigin(StrEnum):
    SPELL = "spell"
    FIRE = "fire"


class TalkMode(StrEnum):
    TALK = "talk"
    TUNNEL = "tunnel"
    OPEN_DOOR = "open_door"
    CLOSE_DOOR = "close_door"


class ActivationStage(StrEnum):
    CHOOSE_KIND = "choose_kind"
    CHOOSE_ITEM = "choose_item"


class ItemPromptContext(StrEnum):
    DROP = "drop"
    QUAFF = "quaff"
    EAT = "eat"
    READ = "read"
    WIELD = "wield"
    WEAR = "wear"
    FIRE = "fire"
    ZAP = "zap"


class ItemFilter(StrEnum):
    ANY = "any"
    POTION = "potion"
    FOOD = "food"
    SCROLL = "scroll"
    WEAPON = "weapon"
    WEARABLE = "wearable"
    MISSILE = "missile"
    STICK = "stick"
    USABLE = "usable"
    ARTIFACT = "artifact"


class ServiceKind(StrEnum):
    """Site services reachable through a tile's aux code."""

    SHOP = "shop"
    ARMORER = "armorer"
    BANK = "bank"
    TEMPLE = "temple"
    MERC_GUILD = "merc_guild"
    THIEVES_GUILD = "thieves_guild"
    COLLEGE = "college"
    SORCERORS = "sorcerors"
    CASTLE = "castle"
    PALACE = "palace"
    ORDER = "order"
    CHARITY = "charity"
    MONASTERY = "monastery"
    ARENA = "arena"
    ALTAR = "altar"
    HEALER = "healer"
    TAVERN = "tavern"
    COMMANDANT = "commandant"
    GYM = "gym"
    CASINO = "casino"


# =============================================================================
# Variants
# =============================================================================


class InteractionBase(BaseModel):
    """Base class for interaction variants."""

    model_config = ConfigDict(frozen=False, extra="forbid")


class WizardInteraction(InteractionBase):
    """Wizard-mode prompt: enable confirmation, wish text, editors."""

    kind: Literal["wizard"] = "wizard"
    stage: WizardStage
    buffer: str = ""
    stat_field: str | None = None
    blessing: int = 0


class SpellInteraction(InteractionBase):
    """Spell selection by typed name or letter, then confirmation."""

    kind: Literal["spell"] = "spell"
    stage: SpellStage = SpellStage.CHOOSE_SPELL
    buffer: str = ""
    spell_id: str | None = None


class TargetingInteraction(InteractionBase):
    """Cursor-based target selection for bolts and thrown items."""

    kind: Literal["targeting"] = "targeting"
    origin: TargetOrigin
    cursor: Position
    spell_id: str | None = None
    item_id: int | None = None


class QuitInteraction(InteractionBase):
    kind: Literal["quit"] = "quit"


class TalkDirectionInteraction(InteractionBase):
    """Waiting for a direction to talk, tunnel or work a door toward."""

    kind: Literal["talk_direction"] = "talk_direction"
    mode: TalkMode = TalkMode.TALK


class ActivationInteraction(InteractionBase):
    kind: Literal["activation"] = "activation"
    stage: ActivationStage = ActivationStage.CHOOSE_KIND
    artifacts_only: bool = False


class InventoryInteraction(InteractionBase):
    kind: Literal["inventory"] = "inventory"
    cursor: int = 0


class ItemPromptInteraction(InteractionBase):
    """Pick a pack item by letter for a given purpose."""

    kind: Literal["item_prompt"] = "item_prompt"
    context: ItemPromptContext
    filter: ItemFilter = ItemFilter.ANY
    prompt: str = ""


class SiteInteraction(InteractionBase):
    """An open service menu for the site the player stands on."""

    kind: Literal["site"] = "site"
    service: ServiceKind
    site_id: int = 0
    deity_id: int | None = None


ActiveInteraction = Annotated[
    Union[
        WizardInteraction,
        SpellInteraction,
        TargetingInteraction,
        QuitInteraction,
        TalkDirectionInteraction,
        ActivationInteraction,
        InventoryInteraction,
        ItemPromptInteraction,
        SiteInteraction,
    ],
    Field(discriminator="kind"),
]


__all__ = [
    "InteractionKind",
    "INTERACTION_PRECEDENCE",
    "WizardStage",
    "SpellStage",
    "TargetOrigin",
    "TalkMode",
    "ActivationStage",
    "ItemPromptContext",
    "ItemFilter",
    "ServiceKind",
    "InteractionBase",
    "WizardInteraction",
    "SpellInteraction",
    "TargetingInteraction",
    "QuitInteraction",
    "TalkDirectionInteraction",
    "ActivationInteraction",
    "InventoryInteraction",
    "ItemPromptInteraction",
    "SiteInteraction",
    "ActiveInteraction",
]
