"""Wizard (debug) mode.

``^g`` asks for confirmation; accepting enables wizard mode for the rest
of the session, marks it CHEATED and removes it from high-score
eligibility. Nothing else about gameplay changes.

Wizard-only tokens:

- ``^x`` wish: type text, ``<enter>`` commits. ``wealth`` grants gold,
  any other text is looked up in the content catalog.
- ``^w`` reveal the whole map.
- ``^k`` / ``^f`` status flag editor: ``s`` or ``c`` picks set/clear,
  digits name the bit, ``<enter>`` applies.
- ``#`` stat editor: a letter (or space for the first field) picks the
  stat, digits give the value, ``<enter>`` applies.
"""

from __future__ import annotations

from omega_engine.core.constants import ACTION_MINUTES, WISH_WEALTH_GOLD
from omega_engine.core.logging import get_logger
from omega_engine.engine.context import TurnContext
from omega_engine.engine.prompts import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    WISH_TEXT_PREFIX,
    YES_TOKENS,
    RawInput,
    cancel_prompt,
    close_prompt,
    open_prompt,
    prompt_line,
    slot_letter,
)
from omega_engine.models.entities import Position
from omega_engine.models.enums import LegacyStatusFlag
from omega_engine.models.events import ConfirmationRequired, PickedUp
from omega_engine.models.interactions import WizardInteraction, WizardStage
from omega_engine.models.world import WorldState


logger = get_logger(__name__)

WIZARD_CONFIRM_PROMPT = "Enter wizard mode? You will not be eligible for the high score list. [y/n]"
WISH_PROMPT = "What do you wish for?"
MAX_BUFFER_LENGTH = 40
MAX_FLAG_BIT = 63

STAT_FIELDS: tuple[str, ...] = ("max_hp", "hp", "attack_min", "attack_max", "defense", "gold", "mana")


# =============================================================================
# Enabling
# =============================================================================


def open_wizard_confirm(ctx: TurnContext, token: str) -> None:
    if ctx.state.wizard.enabled:
        ctx.log("You are already in wizard mode.")
        ctx.handled(token, "wizard mode already enabled")
        return
    open_prompt(
        ctx,
        WizardInteraction(stage=WizardStage.CONFIRM_ENABLE),
        token=token,
        label="Wizard",
        text=WIZARD_CONFIRM_PROMPT,
    )
    ctx.emit(ConfirmationRequired(token=token, prompt=WIZARD_CONFIRM_PROMPT))


def enable_wizard_mode(ctx: TurnContext) -> None:
    state = ctx.state
    state.wizard.enabled = True
    state.wizard.scoring_allowed = False
    state.progression.high_score_eligible = False
    state.set_status_flag(LegacyStatusFlag.CHEATED)
    ctx.log("You are now in wizard mode.")
    ctx.progressed("wizard.enabled", 1)
    ctx.progressed("high_score_eligible", 0)
    logger.info("Wizard mode enabled", turn=state.clock.turn)


def refuse_wizard_command(ctx: TurnContext, token: str) -> None:
    ctx.log("You need to be in wizard mode to do that.")
    ctx.handled(token, "wizard mode required")


# =============================================================================
# Openers
# =============================================================================


def open_wish(ctx: TurnContext, token: str) -> None:
    blessing = 1 if ctx.state.has_status_flag(LegacyStatusFlag.BLESSED) else 0
    interaction = WizardInteraction(stage=WizardStage.WISH_TEXT, blessing=blessing)
    open_prompt(ctx, interaction, token=token, label="Wish", text=WISH_PROMPT)


def reveal_map(ctx: TurnContext, token: str) -> None:
    state = ctx.state
    state.known_sites = [
        Position(x=x, y=y) for y in range(state.bounds.height) for x in range(state.bounds.width)
    ]
    state.map_revealed = True
    ctx.log("The map is revealed to you.")
    ctx.progressed("known_sites", len(state.known_sites))
    ctx.handled(token, "map revealed")


def open_status_editor(ctx: TurnContext, token: str) -> None:
    interaction = WizardInteraction(stage=WizardStage.STATUS_FLAGS)
    open_prompt(ctx, interaction, token=token, label="Status", text=wizard_prompt_text(ctx.state, interaction))


def open_stat_editor(ctx: TurnContext, token: str) -> None:
    interaction = WizardInteraction(stage=WizardStage.STAT_SELECT)
    open_prompt(ctx, interaction, token=token, label="Stat", text=wizard_prompt_text(ctx.state, interaction))


# =============================================================================
# Prompt Text
# =============================================================================


def stat_value(state: WorldState, field: str) -> int:
    if field == "gold":
        return state.gold
    if field == "mana":
        return state.spellbook.mana
    return getattr(state.player.stats, field)


def wizard_prompt_text(state: WorldState, interaction: WizardInteraction) -> str:
    stage = interaction.stage
    if stage is WizardStage.CONFIRM_ENABLE:
        return WIZARD_CONFIRM_PROMPT
    if stage is WizardStage.WISH_TEXT:
        return f"{WISH_TEXT_PREFIX} {interaction.buffer}_"
    if stage is WizardStage.STAT_SELECT:
        fields = " ".join(f"[{slot_letter(i)}] {name}" for i, name in enumerate(STAT_FIELDS))
        return f"Edit which stat? {fields}"
    if stage is WizardStage.STAT_VALUE:
        field = interaction.stat_field or STAT_FIELDS[0]
        return f"New {field} (now {stat_value(state, field)}): {interaction.buffer}_"
    mode = interaction.stat_field or "toggle"
    return (
        f"Status flags {state.legacy_status_flags:#x}: [s]et/[c]lear, bit number, <enter> "
        f"| {mode} {interaction.buffer}_"
    )


# =============================================================================
# Input
# =============================================================================


ASCII_DIGITS = "0123456789"


def _is_digits(token: str) -> bool:
    return bool(token) and all(c in ASCII_DIGITS for c in token)


def _edit_buffer(interaction: WizardInteraction, token: str, *, digits_only: bool) -> bool:
    """Apply a typing token to the buffer; False when the token is not text input."""
    if token == BACKSPACE:
        interaction.buffer = interaction.buffer[:-1]
        return True
    if digits_only and not _is_digits(token):
        return False
    interaction.buffer = (interaction.buffer + token)[:MAX_BUFFER_LENGTH]
    return True


def handle_wizard_input(ctx: TurnContext, interaction: WizardInteraction, raw: RawInput) -> None:
    stage = interaction.stage
    if stage is WizardStage.CONFIRM_ENABLE:
        if raw.token in YES_TOKENS:
            close_prompt(ctx)
            enable_wizard_mode(ctx)
            ctx.handled(raw.label, "wizard mode enabled")
        else:
            cancel_prompt(ctx, raw.label, "Wizard mode declined.")
        return

    if raw.token == ESCAPE:
        cancel_prompt(ctx, raw.label, "Never mind.")
        return
    if raw.direction is not None:
        ctx.handled(raw.label, "wizard prompt expects text")
        return

    if stage is WizardStage.WISH_TEXT:
        if raw.token == ENTER:
            _commit_wish(ctx, interaction, raw.label)
        else:
            _edit_buffer(interaction, raw.token, digits_only=False)
            ctx.handled(raw.label, "wish buffer edit")
        return

    if stage is WizardStage.STAT_SELECT:
        _select_stat(ctx, interaction, raw)
        return

    if stage is WizardStage.STAT_VALUE:
        if raw.token == ENTER:
            _commit_stat(ctx, interaction, raw.label)
        else:
            _edit_buffer(interaction, raw.token, digits_only=True)
            ctx.handled(raw.label, "stat buffer edit")
        return

    if raw.token == ENTER:
        _commit_status_flag(ctx, interaction, raw.label)
    elif raw.token in ("s", "c"):
        interaction.stat_field = "set" if raw.token == "s" else "clear"
        ctx.handled(raw.label, f"status editor mode {interaction.stat_field}")
    else:
        _edit_buffer(interaction, raw.token, digits_only=True)
        ctx.handled(raw.label, "status buffer edit")


def _select_stat(ctx: TurnContext, interaction: WizardInteraction, raw: RawInput) -> None:
    if raw.token == " ":
        index = 0
    elif len(raw.token) == 1 and "a" <= raw.token < slot_letter(len(STAT_FIELDS)):
        index = ord(raw.token) - ord("a")
    else:
        ctx.log("No such stat.")
        ctx.handled(raw.label, "stat editor: invalid field")
        return
    interaction.stage = WizardStage.STAT_VALUE
    interaction.stat_field = STAT_FIELDS[index]
    interaction.buffer = ""
    text = wizard_prompt_text(ctx.state, interaction)
    ctx.log(prompt_line("Stat", text))
    ctx.handled(raw.label, text)


def _commit_stat(ctx: TurnContext, interaction: WizardInteraction, token: str) -> None:
    if not _is_digits(interaction.buffer):
        cancel_prompt(ctx, token, "Stat unchanged.")
        return
    state = ctx.state
    field = interaction.stat_field or STAT_FIELDS[0]
    value = int(interaction.buffer)
    stats = state.player.stats
    if field == "max_hp":
        stats.set_max_hp(value)
    elif field == "hp":
        stats.set_hp(value)
    elif field == "gold":
        state.gold = value
    elif field == "mana":
        state.spellbook.max_mana = max(state.spellbook.max_mana, value)
        state.spellbook.mana = value
    else:
        setattr(stats, field, value)
        if stats.attack_max < stats.attack_min:
            stats.attack_max = stats.attack_min
    close_prompt(ctx)
    ctx.log(f"{field} set to {stat_value(state, field)}.")
    ctx.progressed(field, stat_value(state, field))
    ctx.handled(token, f"stat {field} edited")


def _commit_status_flag(ctx: TurnContext, interaction: WizardInteraction, token: str) -> None:
    buffer = interaction.buffer
    if not _is_digits(buffer) or int(buffer) > MAX_FLAG_BIT:
        cancel_prompt(ctx, token, "Status flags unchanged.")
        return
    state = ctx.state
    bit = 1 << int(interaction.buffer)
    mode = interaction.stat_field
    if mode == "set" or (mode is None and not state.legacy_status_flags & bit):
        state.legacy_status_flags |= bit
    else:
        state.legacy_status_flags &= ~bit
    # CHEATED is sticky for the rest of the session
    state.legacy_status_flags |= int(LegacyStatusFlag.CHEATED)
    close_prompt(ctx)
    ctx.log(f"Status flags now {state.legacy_status_flags:#x}.")
    ctx.progressed("legacy_status_flags", state.legacy_status_flags)
    ctx.handled(token, "status flags edited")


def _commit_wish(ctx: TurnContext, interaction: WizardInteraction, token: str) -> None:
    state = ctx.state
    text = " ".join(interaction.buffer.lower().split())
    if not text:
        cancel_prompt(ctx, token, "You wish for nothing.")
        return
    close_prompt(ctx)
    ctx.set_minutes(ACTION_MINUTES)
    ctx.log(f"You wish for {text}.")

    if text == "wealth":
        ctx.economy("wish", gold=WISH_WEALTH_GOLD)
        ctx.log("You are showered with gold.")
        ctx.handled(token, "wish: wealth")
        return

    template = state.catalog.find(text)
    if template is None:
        ctx.log("Your wish is not granted.")
        ctx.handled(token, f"wish: unknown item {text}")
        return
    item = template.instantiate(state.allocate_item_id())
    if interaction.blessing > 0:
        item.attack_bonus += interaction.blessing if item.attack_bonus else 0
        item.defense_bonus += interaction.blessing if item.defense_bonus else 0
    if state.add_item_to_pack(item):
        ctx.log(f"A {item.name} appears in your pack.")
        ctx.emit(PickedUp(item_id=item.id, name=item.name))
    else:
        state.place_item(item, state.player.position)
        ctx.log(f"A {item.name} appears at your feet.")
    ctx.handled(token, f"wish: {item.name}")


__all__ = [
    "WIZARD_CONFIRM_PROMPT",
    "WISH_PROMPT",
    "STAT_FIELDS",
    "open_wizard_confirm",
    "enable_wizard_mode",
    "refuse_wizard_command",
    "open_wish",
    "reveal_map",
    "open_status_editor",
    "open_stat_editor",
    "stat_value",
    "wizard_prompt_text",
    "handle_wizard_input",
]
