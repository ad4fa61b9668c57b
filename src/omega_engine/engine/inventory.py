"""Pack handling: pickup, drop, the inventory modal, item prompts, activation.

Item prompts (``d q e r w W f z``) ask for a pack letter filtered by what
the prompt is for; anything but a matching letter cancels. The inventory
and activation prompts are menus: invalid input keeps them open.

Example:
    >>> ctx = TurnContext(state=state, rng=rng)
    >>> pickup(ctx)
    >>> ctx.events[-1].kind
    'picked_up'
"""

from __future__ import annotations

from omega_engine.core.constants import (
    ACTION_MINUTES,
    USEF_CURE,
    USEF_FOOD,
    USEF_HEAL,
    USEF_RAISE_PORTCULLIS,
    USEF_RESTORE_MANA,
    USEF_TELEPORT,
)
from omega_engine.core.logging import get_logger
from omega_engine.engine import magic, sites
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import (
    ENTER,
    ESCAPE,
    MENU_CLOSE_TOKENS,
    RawInput,
    cancel_prompt,
    close_prompt,
    letter_slot,
    open_prompt,
    prompt_line,
    slot_letter,
)
from omega_engine.models.entities import Item, Position
from omega_engine.models.enums import Direction, ItemFamily, LegacyStatusFlag
from omega_engine.models.events import (
    Dropped,
    InvalidDropSlot,
    InventoryFull,
    NoItemToPickUp,
    PickedUp,
)
from omega_engine.models.interactions import (
    ActivationInteraction,
    ActivationStage,
    InventoryInteraction,
    ItemFilter,
    ItemPromptContext,
    ItemPromptInteraction,
)
from omega_engine.models.world import WorldState


logger = get_logger(__name__)


# =============================================================================
# Pickup And Drop
# =============================================================================


def pickup(ctx: TurnContext) -> None:
    """Pick up the top item on the player's tile."""
    state = ctx.state
    here = state.items_at(state.player.position)
    if not here:
        ctx.log("There is nothing here to pick up.")
        ctx.emit(NoItemToPickUp())
        ctx.set_minutes(0)
        return
    ground = here[-1]
    if ground.item.family is ItemFamily.CASH:
        state.ground_items.remove(ground)
        ctx.log(f"You pick up {ground.item.value} gold.")
        ctx.emit(PickedUp(item_id=ground.item.id, name=ground.item.name))
        ctx.economy("pickup", gold=ground.item.value)
        ctx.set_minutes(ACTION_MINUTES)
        return
    if not state.add_item_to_pack(ground.item):
        ctx.log("Your pack is full.")
        ctx.emit(InventoryFull(capacity=state.player.inventory_capacity))
        ctx.set_minutes(0)
        return
    state.ground_items.remove(ground)
    ctx.log(f"You pick up the {ground.item.name}.")
    ctx.emit(PickedUp(item_id=ground.item.id, name=ground.item.name))
    ctx.set_minutes(ACTION_MINUTES)


def auto_pickup(ctx: TurnContext) -> None:
    """Gather everything on the player's tile while the pack has room."""
    state = ctx.state
    for ground in list(reversed(state.items_at(state.player.position))):
        if ground.item.family is ItemFamily.CASH:
            state.ground_items.remove(ground)
            ctx.emit(PickedUp(item_id=ground.item.id, name=ground.item.name))
            ctx.economy("pickup", gold=ground.item.value)
        elif state.add_item_to_pack(ground.item):
            state.ground_items.remove(ground)
            ctx.log(f"You pick up the {ground.item.name}.")
            ctx.emit(PickedUp(item_id=ground.item.id, name=ground.item.name))
        else:
            ctx.emit(InventoryFull(capacity=state.player.inventory_capacity))
            return


def drop(ctx: TurnContext, slot: int) -> None:
    """Drop the pack item at a zero-based slot onto the player's tile."""
    state = ctx.state
    if not 0 <= slot < len(state.player.inventory):
        ctx.log("You have no such item.")
        ctx.emit(InvalidDropSlot(slot=slot))
        ctx.set_minutes(0)
        return
    item = state.player.inventory[slot]
    state.player.remove_item(item.id)
    state.place_item(item, state.player.position)
    ctx.log(f"You drop the {item.name}.")
    ctx.emit(Dropped(item_id=item.id, name=item.name))
    ctx.set_minutes(ACTION_MINUTES)


# =============================================================================
# Use Effects
# =============================================================================


CONSUMED_FAMILIES = frozenset({ItemFamily.POTION, ItemFamily.SCROLL, ItemFamily.FOOD})


def teleport_player(ctx: TurnContext) -> None:
    state = ctx.state
    for _ in range(20):
        candidate = Position(
            x=ctx.rng.range_inclusive(0, state.bounds.width - 1),
            y=ctx.rng.range_inclusive(0, state.bounds.height - 1),
        )
        if state.is_walkable(candidate) and state.monster_at(candidate) is None:
            state.player.position = candidate
            ctx.log("You blink out and reappear elsewhere.")
            return
    ctx.log("You feel briefly disoriented.")


def apply_use_effect(ctx: TurnContext, item: Item) -> bool:
    """Run an item's use effect. Returns False when nothing happened."""
    state = ctx.state
    stats = state.player.stats
    usef = item.usef
    if usef == USEF_HEAL:
        healed = stats.heal(ctx.rng.range_inclusive(4, 10))
        ctx.log(f"You feel better. (+{healed} hp)")
        ctx.progressed("player.hp", stats.hp)
    elif usef == USEF_FOOD:
        ctx.log("That hits the spot.")
        ctx.economy("meal", food=4)
    elif usef == USEF_RESTORE_MANA:
        state.spellbook.mana = state.spellbook.max_mana
        ctx.log("Power surges through you.")
        ctx.progressed("spellbook.mana", state.spellbook.mana)
    elif usef == USEF_CURE:
        state.remove_status_effect("poisoned")
        state.set_status_flag(LegacyStatusFlag.POISONED, False)
        ctx.log("You feel cleansed.")
    elif usef == USEF_TELEPORT:
        teleport_player(ctx)
    elif usef == USEF_RAISE_PORTCULLIS:
        if not sites.use_portcullis_key(ctx):
            ctx.log("Nothing happens.")
            return False
    else:
        ctx.log("Nothing happens.")
        return False
    return True


def use_pack_item(ctx: TurnContext, item: Item) -> None:
    """Use an item from the pack, consuming it when its effect is one-shot."""
    if item.charges == 0:
        ctx.log("Nothing happens.")
        ctx.set_minutes(0)
        return
    if not apply_use_effect(ctx, item):
        return
    if item.family in CONSUMED_FAMILIES or item.usef == USEF_RAISE_PORTCULLIS:
        ctx.state.player.remove_item(item.id)
    elif item.charges > 0:
        item.charges -= 1
        ctx.progressed(f"item.{item.id}.charges", item.charges)
    logger.debug("Item used", item=item.name, usef=item.usef)


# =============================================================================
# Item Prompts
# =============================================================================


PROMPT_FILTERS: dict[ItemPromptContext, ItemFilter] = {
    ItemPromptContext.DROP: ItemFilter.ANY,
    ItemPromptContext.QUAFF: ItemFilter.POTION,
    ItemPromptContext.EAT: ItemFilter.FOOD,
    ItemPromptContext.READ: ItemFilter.SCROLL,
    ItemPromptContext.WIELD: ItemFilter.WEAPON,
    ItemPromptContext.WEAR: ItemFilter.WEARABLE,
    ItemPromptContext.FIRE: ItemFilter.MISSILE,
    ItemPromptContext.ZAP: ItemFilter.STICK,
}

CONSUMING_CONTEXTS = frozenset(
    {ItemPromptContext.QUAFF, ItemPromptContext.EAT, ItemPromptContext.READ, ItemPromptContext.ZAP}
)

PROMPT_VERBS: dict[ItemPromptContext, str] = {
    ItemPromptContext.DROP: "Drop",
    ItemPromptContext.QUAFF: "Quaff",
    ItemPromptContext.EAT: "Eat",
    ItemPromptContext.READ: "Read",
    ItemPromptContext.WIELD: "Wield",
    ItemPromptContext.WEAR: "Wear",
    ItemPromptContext.FIRE: "Fire",
    ItemPromptContext.ZAP: "Zap",
}


def item_matches(item: Item, item_filter: ItemFilter) -> bool:
    family = item.family
    if item_filter is ItemFilter.ANY:
        return True
    if item_filter is ItemFilter.POTION:
        return family is ItemFamily.POTION
    if item_filter is ItemFilter.FOOD:
        return family in (ItemFamily.FOOD, ItemFamily.CORPSE)
    if item_filter is ItemFilter.SCROLL:
        return family is ItemFamily.SCROLL
    if item_filter is ItemFilter.WEAPON:
        return family is ItemFamily.WEAPON
    if item_filter is ItemFilter.WEARABLE:
        return family in (ItemFamily.ARMOR, ItemFamily.SHIELD)
    if item_filter is ItemFilter.MISSILE:
        return family in (ItemFamily.MISSILE, ItemFamily.WEAPON)
    if item_filter is ItemFilter.STICK:
        return family is ItemFamily.STICK
    if item_filter is ItemFilter.USABLE:
        return bool(item.usef)
    return family is ItemFamily.ARTIFACT


def matching_slots(state: WorldState, item_filter: ItemFilter) -> list[int]:
    return [i for i, item in enumerate(state.player.inventory) if item_matches(item, item_filter)]


def open_item_prompt(ctx: TurnContext, token: str, context: ItemPromptContext) -> None:
    verb = PROMPT_VERBS[context]
    item_filter = PROMPT_FILTERS[context]
    slots = matching_slots(ctx.state, item_filter)
    if not slots:
        ctx.log(f"You have nothing to {verb.lower()}.")
        ctx.handled(token, f"{verb.lower()}: nothing suitable")
        return
    letters = "".join(slot_letter(slot) for slot in slots)
    interaction = ItemPromptInteraction(
        context=context,
        filter=item_filter,
        prompt=f"{verb} which item? [{letters}]",
    )
    open_prompt(ctx, interaction, token=token, label=verb, text=interaction.prompt)


def item_prompt_text(state: WorldState, interaction: ItemPromptInteraction) -> str:
    return interaction.prompt


def handle_item_prompt_input(ctx: TurnContext, interaction: ItemPromptInteraction, raw: RawInput) -> None:
    state = ctx.state
    slot = letter_slot(raw.token) if raw.direction is None else None
    if slot is None or slot >= len(state.player.inventory):
        cancel_prompt(ctx, raw.label, "Never mind.")
        return
    item = state.player.inventory[slot]
    if not item_matches(item, interaction.filter):
        cancel_prompt(ctx, raw.label, f"You can't {interaction.context.value} that.")
        return

    close_prompt(ctx)
    context = interaction.context
    if context is ItemPromptContext.FIRE:
        magic.begin_fire_targeting(ctx, item, raw.label)
        return
    ctx.set_minutes(ACTION_MINUTES)
    if context is ItemPromptContext.DROP:
        drop(ctx, slot)
    elif context in CONSUMING_CONTEXTS:
        if item.family is ItemFamily.CORPSE:
            state.player.remove_item(item.id)
            ctx.log(f"You eat the {item.name}. Yuck.")
            ctx.economy("meal", food=2)
        else:
            use_pack_item(ctx, item)
    elif context is ItemPromptContext.WIELD:
        wield(ctx, item)
    elif context is ItemPromptContext.WEAR:
        wear(ctx, item)
    ctx.handled(raw.label, f"{context.value} {item.name}")


def wield(ctx: TurnContext, item: Item) -> None:
    equipment = ctx.state.player.equipment
    if equipment.weapon == item.id:
        equipment.weapon = None
        ctx.log(f"You put away the {item.name}.")
        return
    equipment.weapon = item.id
    ctx.log(f"You are now wielding the {item.name}.")


def wear(ctx: TurnContext, item: Item) -> None:
    equipment = ctx.state.player.equipment
    slot = "shield" if item.family is ItemFamily.SHIELD else "armor"
    if getattr(equipment, slot) == item.id:
        setattr(equipment, slot, None)
        ctx.log(f"You take off the {item.name}.")
        return
    setattr(equipment, slot, item.id)
    ctx.log(f"You put on the {item.name}.")


# =============================================================================
# Inventory Modal
# =============================================================================


def open_inventory(ctx: TurnContext, token: str) -> None:
    if not ctx.state.player.inventory:
        ctx.log("You are carrying nothing.")
        ctx.handled(token, "inventory empty")
        return
    interaction = InventoryInteraction(cursor=0)
    open_prompt(
        ctx,
        interaction,
        token=token,
        label="Inventory",
        text=inventory_prompt_text(ctx.state, interaction),
    )


def inventory_prompt_text(state: WorldState, interaction: InventoryInteraction) -> str:
    player = state.player
    entries = []
    for index, item in enumerate(player.inventory):
        marker = ">" if index == interaction.cursor else " "
        worn = "*" if player.equipment.slot_of(item.id) else ""
        entries.append(f"{marker}{slot_letter(index)}) {item.name}{worn}")
    return (
        f"Inventory ({len(player.inventory)}/{player.inventory_capacity}): "
        + " ".join(entries)
        + " | j/k move, d drop, u use, <esc> close"
    )


def handle_inventory_input(ctx: TurnContext, interaction: InventoryInteraction, raw: RawInput) -> None:
    state = ctx.state
    inventory = state.player.inventory
    if raw.token in MENU_CLOSE_TOKENS:
        cancel_prompt(ctx, raw.label, "You close your pack.")
        return
    if not inventory:
        cancel_prompt(ctx, raw.label, "Your pack is empty.")
        return

    direction = raw.as_direction
    if direction in (Direction.NORTH, Direction.SOUTH):
        step = -1 if direction is Direction.NORTH else 1
        interaction.cursor = (interaction.cursor + step) % len(inventory)
        ctx.handled(raw.label, f"inventory cursor {slot_letter(interaction.cursor)}")
        return

    cursor = min(interaction.cursor, len(inventory) - 1)
    if raw.token == "d":
        drop(ctx, cursor)
        if inventory:
            interaction.cursor = min(cursor, len(inventory) - 1)
        else:
            close_prompt(ctx)
        ctx.handled(raw.label, "inventory drop")
        return
    if raw.token in ("u", ENTER):
        item = inventory[cursor]
        close_prompt(ctx)
        ctx.set_minutes(ACTION_MINUTES)
        use_pack_item(ctx, item)
        ctx.handled(raw.label, f"use {item.name}")
        return
    ctx.log("Invalid inventory command.")
    ctx.handled(raw.label, "inventory: invalid input")


# =============================================================================
# Activation
# =============================================================================


ACTIVATION_KIND_PROMPT = "Activate: [i] item, [a] artifact"


def open_activation(ctx: TurnContext, token: str, *, artifacts_only: bool = False) -> None:
    stage = ActivationStage.CHOOSE_ITEM if artifacts_only else ActivationStage.CHOOSE_KIND
    interaction = ActivationInteraction(stage=stage, artifacts_only=artifacts_only)
    open_prompt(
        ctx,
        interaction,
        token=token,
        label="Activation",
        text=activation_prompt_text(ctx.state, interaction),
    )


def _activation_candidates(state: WorldState, interaction: ActivationInteraction) -> list[int]:
    if interaction.artifacts_only:
        return matching_slots(state, ItemFilter.ARTIFACT)
    return matching_slots(state, ItemFilter.USABLE)


def activation_prompt_text(state: WorldState, interaction: ActivationInteraction) -> str:
    if interaction.stage is ActivationStage.CHOOSE_KIND:
        return ACTIVATION_KIND_PROMPT
    letters = "".join(slot_letter(i) for i in _activation_candidates(state, interaction))
    noun = "artifact" if interaction.artifacts_only else "item"
    return f"Activate which {noun}? [{letters or '-'}]"


def handle_activation_input(ctx: TurnContext, interaction: ActivationInteraction, raw: RawInput) -> None:
    state = ctx.state
    if raw.token == ESCAPE:
        cancel_prompt(ctx, raw.label, "Never mind.")
        return

    if interaction.stage is ActivationStage.CHOOSE_KIND:
        if raw.token not in ("i", "a"):
            ctx.log("Choose [i] item or [a] artifact.")
            ctx.handled(raw.label, "activation: invalid kind")
            return
        interaction.stage = ActivationStage.CHOOSE_ITEM
        interaction.artifacts_only = raw.token == "a"
        text = activation_prompt_text(state, interaction)
        ctx.log(prompt_line("Activation", text))
        ctx.handled(raw.label, text)
        return

    slot = letter_slot(raw.token)
    if slot is None or slot not in _activation_candidates(state, interaction):
        ctx.log("You can't activate that.")
        ctx.handled(raw.label, "activation: invalid item")
        return
    item = state.player.inventory[slot]
    close_prompt(ctx)
    ctx.set_minutes(ACTION_MINUTES)
    use_pack_item(ctx, item)
    ctx.handled(raw.label, f"activate {item.name}")


__all__ = [
    "pickup",
    "auto_pickup",
    "drop",
    "teleport_player",
    "apply_use_effect",
    "use_pack_item",
    "item_matches",
    "matching_slots",
    "open_item_prompt",
    "item_prompt_text",
    "handle_item_prompt_input",
    "wield",
    "wear",
    "open_inventory",
    "inventory_prompt_text",
    "handle_inventory_input",
    "open_activation",
    "activation_prompt_text",
    "handle_activation_input",
]
