"""Read-only views for frontends.

Nothing here mutates state or draws from the RNG. Frontends use these to
show the pending prompt, pick a key-reading mode and render the message
log without the lines that merely announce prompts.

Example:
    >>> from omega_engine.engine.queries import active_prompt, renderable_timeline_lines
    >>> active_prompt(state) is None
    True
    >>> renderable_timeline_lines(state, limit=5)
    ['You pick up the dagger.']
"""

from __future__ import annotations

from collections.abc import Iterable

from omega_engine.engine.interactions import interaction_help_hint, interaction_input_mode, interaction_prompt_text
from omega_engine.engine.prompts import is_prompt_line
from omega_engine.models.enums import ModalInputProfile
from omega_engine.models.interactions import InteractionKind
from omega_engine.models.world import WorldState


def interaction_kind(state: WorldState) -> InteractionKind | None:
    if state.interaction is None:
        return None
    return InteractionKind(state.interaction.kind)


def active_prompt(state: WorldState) -> str | None:
    """Text of the pending prompt, or None when no prompt is open."""
    if state.interaction is None:
        return None
    return interaction_prompt_text(state, state.interaction)


def active_help_hint(state: WorldState) -> str | None:
    if state.interaction is None:
        return None
    return interaction_help_hint(state, state.interaction)


def modal_input_profile(state: WorldState) -> ModalInputProfile:
    """How the frontend should read the next key."""
    if state.interaction is None:
        return ModalInputProfile.NONE
    return interaction_input_mode(state.interaction)


def sanitize_prompt_noise(lines: Iterable[str]) -> list[str]:
    """Drop log lines that only describe an open prompt."""
    return [line for line in lines if not is_prompt_line(line)]


def renderable_timeline_lines(state: WorldState, limit: int | None = None) -> list[str]:
    """The message log without prompt noise, newest last.

    Args:
        state: World state to read.
        limit: Keep only this many most recent lines.

    Returns:
        Log lines suitable for a scrolling timeline.
    """
    lines = sanitize_prompt_noise(state.log)
    if limit is not None:
        lines = lines[-limit:] if limit > 0 else []
    return lines


__all__ = [
    "ModalInputProfile",
    "interaction_kind",
    "active_prompt",
    "active_help_hint",
    "modal_input_profile",
    "sanitize_prompt_noise",
    "renderable_timeline_lines",
]
