"""Dispatch for the pending interaction.

While ``state.interaction`` is set, every command is routed here as raw
input instead of to the token table. Each interaction kind has exactly
one input handler, one prompt-text renderer and one help hint, looked up
by its ``kind`` discriminator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from omega_engine.engine import inventory, magic, movement, progression, sites, wizard
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import RawInput
from omega_engine.models.enums import ModalInputProfile
from omega_engine.models.interactions import (
    ActiveInteraction,
    InteractionKind,
    SpellStage,
    WizardStage,
)
from omega_engine.models.world import WorldState


InputHandler = Callable[[TurnContext, Any, RawInput], None]
TextRenderer = Callable[[WorldState, Any], str]


@dataclass(frozen=True)
class InteractionRoute:
    """Handlers for one interaction kind.

    Attributes:
        handle: Consumes one raw input.
        text: Renders the current prompt text.
        hint: One-line help for the prompt.
        mode: Default input mode for the kind.
    """

    handle: InputHandler
    text: TextRenderer
    hint: str
    mode: ModalInputProfile = ModalInputProfile.PROMPT


_ROUTES: dict[InteractionKind, InteractionRoute] = {
    InteractionKind.WIZARD: InteractionRoute(
        handle=wizard.handle_wizard_input,
        text=wizard.wizard_prompt_text,
        hint="Type, then <enter> to apply; <backspace> edits and <esc> cancels.",
        mode=ModalInputProfile.TEXT_ENTRY,
    ),
    InteractionKind.SPELL: InteractionRoute(
        handle=magic.handle_spell_input,
        text=magic.spell_prompt_text,
        hint="Type a spell name or letter, then <enter>; <esc> cancels.",
        mode=ModalInputProfile.TEXT_ENTRY,
    ),
    InteractionKind.QUIT: InteractionRoute(
        handle=progression.handle_quit_input,
        text=progression.quit_prompt_text,
        hint="Press y to retire; any other key cancels.",
    ),
    InteractionKind.TALK_DIRECTION: InteractionRoute(
        handle=movement.handle_talk_direction_input,
        text=movement.talk_prompt_text,
        hint="Choose a direction with h/j/k/l; anything else cancels.",
        mode=ModalInputProfile.DIRECTION_ENTRY,
    ),
    InteractionKind.ACTIVATION: InteractionRoute(
        handle=inventory.handle_activation_input,
        text=inventory.activation_prompt_text,
        hint="Choose a bracketed option; <esc> cancels.",
    ),
    InteractionKind.TARGETING: InteractionRoute(
        handle=magic.handle_targeting_input,
        text=magic.targeting_prompt_text,
        hint="Move the cursor with directions; <enter>, ., t or f fires and <esc> cancels.",
        mode=ModalInputProfile.DIRECTION_ENTRY,
    ),
    InteractionKind.INVENTORY: InteractionRoute(
        handle=inventory.handle_inventory_input,
        text=inventory.inventory_prompt_text,
        hint="j/k move, u or <enter> uses, d drops; q, x or <esc> closes.",
    ),
    InteractionKind.ITEM_PROMPT: InteractionRoute(
        handle=inventory.handle_item_prompt_input,
        text=inventory.item_prompt_text,
        hint="Press the letter of an item; anything else cancels.",
    ),
    InteractionKind.SITE: InteractionRoute(
        handle=sites.handle_site_input,
        text=sites.site_prompt_text,
        hint="",
    ),
}


def route_for(interaction: ActiveInteraction) -> InteractionRoute:
    return _ROUTES[InteractionKind(interaction.kind)]


def handle_interaction_input(ctx: TurnContext, interaction: ActiveInteraction, raw: RawInput) -> None:
    """Feed one raw input to the pending interaction."""
    route_for(interaction).handle(ctx, interaction, raw)


def interaction_prompt_text(state: WorldState, interaction: ActiveInteraction) -> str:
    return route_for(interaction).text(state, interaction)


def interaction_help_hint(state: WorldState, interaction: ActiveInteraction) -> str:
    kind = InteractionKind(interaction.kind)
    if kind is InteractionKind.SITE:
        return sites.site_help_hint(state, interaction)
    if kind is InteractionKind.WIZARD and interaction.stage is WizardStage.CONFIRM_ENABLE:
        return "Press y to enter wizard mode; any other key declines."
    if kind is InteractionKind.SPELL and interaction.stage is SpellStage.CONFIRM:
        return "Press y to cast; any other key cancels."
    return route_for(interaction).hint


def interaction_input_mode(interaction: ActiveInteraction) -> ModalInputProfile:
    """Input mode for a pending interaction, refined by its sub-step."""
    kind = InteractionKind(interaction.kind)
    if kind is InteractionKind.WIZARD and interaction.stage is WizardStage.CONFIRM_ENABLE:
        return ModalInputProfile.PROMPT
    if kind is InteractionKind.SPELL and interaction.stage is SpellStage.CONFIRM:
        return ModalInputProfile.PROMPT
    return route_for(interaction).mode


__all__ = [
    "ModalInputProfile",
    "InteractionRoute",
    "route_for",
    "handle_interaction_input",
    "interaction_prompt_text",
    "interaction_help_hint",
    "interaction_input_mode",
]
