"""The legacy token table.

Every keyboard token the engine understands outside a prompt is declared
here with ``@legacy_command``. Importing this module populates the
registry the router dispatches through; ``?`` lists the same table, so
help text always matches what is implemented.

Declared minutes are what the router charges before the handler runs.
Handlers lower the cost to zero when an action fails, and tokens
declared with ``minutes=None`` settle their cost themselves.
"""

from __future__ import annotations

from omega_engine.core.constants import ACTION_MINUTES
from omega_engine.engine import combat, inventory, magic, movement, progression, sites, wizard
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import DIRECTION_TOKENS
from omega_engine.engine.registry import (
    TokenCategory,
    get_all_legacy_commands,
    get_commands_by_category,
    legacy_command,
)
from omega_engine.models.interactions import ItemPromptContext, TalkMode


# =============================================================================
# Movement
# =============================================================================


@legacy_command(
    "h", "j", "k", "l", "y", "u", "b", "n",
    description="Move in one of the eight directions",
    category=TokenCategory.MOVEMENT,
    minutes=None,
)
def move_token(ctx: TurnContext, token: str) -> None:
    direction = DIRECTION_TOKENS[token]
    movement.handle_move(ctx, direction)
    ctx.handled(token, f"move {direction.value}")


@legacy_command(".", description="Wait a moment", category=TokenCategory.MOVEMENT, minutes=ACTION_MINUTES)
def wait_token(ctx: TurnContext, token: str) -> None:
    movement.handle_wait(ctx)
    ctx.handled(token, "wait")


@legacy_command("R", description="Rest until healed", category=TokenCategory.MOVEMENT, minutes=None)
def rest_token(ctx: TurnContext, token: str) -> None:
    movement.rest(ctx, token)


@legacy_command("s", description="Search adjacent tiles", category=TokenCategory.MOVEMENT, minutes=ACTION_MINUTES)
def search_token(ctx: TurnContext, token: str) -> None:
    movement.search(ctx, token)


@legacy_command(">", description="Enter the site underfoot", category=TokenCategory.MOVEMENT, minutes=None)
def descend_token(ctx: TurnContext, token: str) -> None:
    movement.descend(ctx, token)


@legacy_command("<", description="Leave the city for the countryside", category=TokenCategory.MOVEMENT, minutes=None)
def ascend_token(ctx: TurnContext, token: str) -> None:
    movement.ascend(ctx, token)


@legacy_command("o", description="Open a door", category=TokenCategory.MOVEMENT)
def open_door_token(ctx: TurnContext, token: str) -> None:
    movement.open_talk_direction(ctx, token, TalkMode.OPEN_DOOR)


@legacy_command("c", description="Close a door", category=TokenCategory.MOVEMENT)
def close_door_token(ctx: TurnContext, token: str) -> None:
    movement.open_talk_direction(ctx, token, TalkMode.CLOSE_DOOR)


@legacy_command("x", description="Examine the tile underfoot", category=TokenCategory.MISC)
def examine_token(ctx: TurnContext, token: str) -> None:
    movement.examine(ctx, token)


@legacy_command("/", description="Identify the terrain around you", category=TokenCategory.MISC)
def identify_token(ctx: TurnContext, token: str) -> None:
    movement.identify_glyphs(ctx, token)


# =============================================================================
# Combat
# =============================================================================


@legacy_command("F", description="Cycle combat style", category=TokenCategory.COMBAT)
def combat_style_token(ctx: TurnContext, token: str) -> None:
    combat.cycle_combat_style(ctx, token)


@legacy_command("t", description="Talk to someone", category=TokenCategory.COMBAT)
def talk_token(ctx: TurnContext, token: str) -> None:
    movement.open_talk_direction(ctx, token, TalkMode.TALK)


@legacy_command("T", description="Tunnel through a wall", category=TokenCategory.COMBAT)
def tunnel_token(ctx: TurnContext, token: str) -> None:
    movement.open_talk_direction(ctx, token, TalkMode.TUNNEL)


@legacy_command("f", description="Fire a missile", category=TokenCategory.COMBAT)
def fire_token(ctx: TurnContext, token: str) -> None:
    inventory.open_item_prompt(ctx, token, ItemPromptContext.FIRE)


# =============================================================================
# Inventory
# =============================================================================


@legacy_command("g", ",", description="Pick up an item", category=TokenCategory.INVENTORY, minutes=None)
def pickup_token(ctx: TurnContext, token: str) -> None:
    inventory.pickup(ctx)
    ctx.handled(token, "pickup")


@legacy_command("@", description="Toggle automatic pickup", category=TokenCategory.INVENTORY)
def toggle_pickup_token(ctx: TurnContext, token: str) -> None:
    options = ctx.state.options
    options.pickup = not options.pickup
    ctx.log(f"Automatic pickup is {'on' if options.pickup else 'off'}.")
    ctx.handled(token, f"pickup option {'on' if options.pickup else 'off'}")


@legacy_command("i", description="Show the pack", category=TokenCategory.INVENTORY)
def inventory_token(ctx: TurnContext, token: str) -> None:
    inventory.open_inventory(ctx, token)


_ITEM_PROMPT_TOKENS = {
    "d": ItemPromptContext.DROP,
    "q": ItemPromptContext.QUAFF,
    "e": ItemPromptContext.EAT,
    "r": ItemPromptContext.READ,
    "w": ItemPromptContext.WIELD,
    "W": ItemPromptContext.WEAR,
}


@legacy_command("d", "q", "e", "r", "w", "W", description="Drop, quaff, eat, read, wield or wear", category=TokenCategory.INVENTORY)
def item_prompt_token(ctx: TurnContext, token: str) -> None:
    inventory.open_item_prompt(ctx, token, _ITEM_PROMPT_TOKENS[token])


@legacy_command("a", description="Activate an item", category=TokenCategory.INVENTORY)
def activation_token(ctx: TurnContext, token: str) -> None:
    inventory.open_activation(ctx, token)


@legacy_command("A", description="Activate an artifact", category=TokenCategory.INVENTORY)
def artifact_activation_token(ctx: TurnContext, token: str) -> None:
    inventory.open_activation(ctx, token, artifacts_only=True)


@legacy_command("z", description="Zap a stick", category=TokenCategory.INVENTORY)
def zap_token(ctx: TurnContext, token: str) -> None:
    inventory.open_item_prompt(ctx, token, ItemPromptContext.ZAP)


# =============================================================================
# Magic
# =============================================================================


@legacy_command("m", description="Cast a spell", category=TokenCategory.MAGIC)
def spell_token(ctx: TurnContext, token: str) -> None:
    magic.open_spell_prompt(ctx, token)


@legacy_command("p", description="Pray to your patron", category=TokenCategory.MAGIC)
def pray_token(ctx: TurnContext, token: str) -> None:
    sites.field_prayer(ctx, token)


# =============================================================================
# Session
# =============================================================================


@legacy_command("Q", description="Quit and retire", category=TokenCategory.SESSION)
def quit_token(ctx: TurnContext, token: str) -> None:
    progression.open_quit_prompt(ctx, token)


@legacy_command("?", description="List commands", category=TokenCategory.SESSION)
def help_token(ctx: TurnContext, token: str) -> None:
    for category in TokenCategory:
        definitions = get_commands_by_category(category)
        if category is TokenCategory.WIZARD and not ctx.state.wizard.enabled:
            definitions = [d for d in definitions if not d.wizard_only]
        if definitions:
            tokens = " ".join(d.token for d in definitions)
            ctx.log(f"{category.value.capitalize()}: {tokens}")
    ctx.handled(token, f"help listed {len(get_all_legacy_commands())} commands")


@legacy_command("C", description="Show character summary", category=TokenCategory.SESSION)
def character_token(ctx: TurnContext, token: str) -> None:
    state = ctx.state
    stats = state.player.stats
    spellbook = state.spellbook
    ctx.log(
        f"{state.player.name}: hp {stats.hp}/{stats.max_hp}, attack {stats.attack_min}-{stats.attack_max}, "
        f"defense {stats.defense}, mana {spellbook.mana}/{spellbook.max_mana}"
    )
    ctx.log(
        f"Gold {state.gold}, bank {state.bank_gold}, food {state.food}, "
        f"alignment {state.progression.alignment.value}"
    )
    ctx.handled(token, "character summary")


# =============================================================================
# Wizard
# =============================================================================


@legacy_command("^g", description="Enter wizard mode", category=TokenCategory.WIZARD)
def wizard_token(ctx: TurnContext, token: str) -> None:
    wizard.open_wizard_confirm(ctx, token)


@legacy_command("^x", description="Make a wish", category=TokenCategory.WIZARD, wizard_only=True)
def wish_token(ctx: TurnContext, token: str) -> None:
    wizard.open_wish(ctx, token)


@legacy_command("^w", description="Reveal the map", category=TokenCategory.WIZARD, wizard_only=True)
def reveal_token(ctx: TurnContext, token: str) -> None:
    wizard.reveal_map(ctx, token)


@legacy_command("^k", "^f", description="Edit status flags", category=TokenCategory.WIZARD, wizard_only=True)
def status_editor_token(ctx: TurnContext, token: str) -> None:
    wizard.open_status_editor(ctx, token)


@legacy_command("#", description="Edit a stat", category=TokenCategory.WIZARD, wizard_only=True)
def stat_editor_token(ctx: TurnContext, token: str) -> None:
    wizard.open_stat_editor(ctx, token)


__all__ = [
    "move_token",
    "wait_token",
    "rest_token",
    "search_token",
    "descend_token",
    "ascend_token",
    "open_door_token",
    "close_door_token",
    "examine_token",
    "identify_token",
    "combat_style_token",
    "talk_token",
    "tunnel_token",
    "fire_token",
    "pickup_token",
    "toggle_pickup_token",
    "inventory_token",
    "item_prompt_token",
    "activation_token",
    "artifact_activation_token",
    "zap_token",
    "spell_token",
    "pray_token",
    "quit_token",
    "help_token",
    "character_token",
    "wizard_token",
    "wish_token",
    "reveal_token",
    "status_editor_token",
    "stat_editor_token",
]
