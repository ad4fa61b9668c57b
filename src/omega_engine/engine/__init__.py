"""Turn engine for the omega roguelike core.

This package holds the deterministic reducer and everything it
dispatches to: movement, combat and monster turns, inventory, spells,
site services, progression, the wizard subsystem and the modal prompts.

Submodules:
    rng: Deterministic random stream
    router: ``step(state, command, rng) -> Outcome``
    legacy: The legacy token table
    interactions: Pending-interaction dispatch
    queries: Read-only frontend views
    session: Session wrapper with history and callbacks

Example:
    >>> from omega_engine.engine import GameSession, Move
    >>> session = GameSession.new(seed=1)
    >>> session.apply(Move(direction="north")).turn
    1
"""

from __future__ import annotations

# =============================================================================
# Randomness
# =============================================================================
from omega_engine.engine.rng import DeterministicRng, RandomSource, chance, choose, roll_d20

# =============================================================================
# Reducer
# =============================================================================
from omega_engine.engine.context import TurnContext
from omega_engine.engine.registry import (
    LegacyCommandDefinition,
    TokenCategory,
    get_all_legacy_commands,
    get_commands_by_category,
    get_legacy_command,
    legacy_command,
)
from omega_engine.engine.router import step

# =============================================================================
# Frontend Views
# =============================================================================
from omega_engine.engine.queries import (
    ModalInputProfile,
    active_help_hint,
    active_prompt,
    interaction_kind,
    modal_input_profile,
    renderable_timeline_lines,
    sanitize_prompt_noise,
)

# =============================================================================
# Session
# =============================================================================
from omega_engine.engine.session import GameSession, new_world, validate_state
from omega_engine.models.commands import Attack, Drop, Legacy, Move, Pickup, Wait


__all__ = [
    # Randomness
    "DeterministicRng",
    "RandomSource",
    "chance",
    "choose",
    "roll_d20",
    # Reducer
    "TurnContext",
    "LegacyCommandDefinition",
    "TokenCategory",
    "get_all_legacy_commands",
    "get_commands_by_category",
    "get_legacy_command",
    "legacy_command",
    "step",
    # Frontend views
    "ModalInputProfile",
    "active_help_hint",
    "active_prompt",
    "interaction_kind",
    "modal_input_profile",
    "renderable_timeline_lines",
    "sanitize_prompt_noise",
    # Session
    "GameSession",
    "new_world",
    "validate_state",
    # Commands
    "Attack",
    "Drop",
    "Legacy",
    "Move",
    "Pickup",
    "Wait",
]
