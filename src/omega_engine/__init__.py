"""omega_engine - deterministic turn core for the omega roguelike.

The engine is a reducer: one command in, one Outcome out, with all
randomness drawn from an explicit stream so the same seed and commands
always reproduce the same world.

ARCHITECTURE:
- ``step`` owns every state change; frontends only send commands
- Pending prompts are a single interaction slot on the world state
- Saves are versioned JSON envelopes; fixtures replay whole sessions

Example:
    >>> from omega_engine import GameSession, Legacy, Move
    >>>
    >>> session = GameSession.new(seed=11)
    >>> session.apply(Move(direction="north"))
    >>> session.apply(Legacy(token="Q"))
    >>> session.prompt
    'Quit the game? [y/n]'

Modules:
    core: Configuration, logging, exceptions and constants.
    models: Pydantic schemas for world state, commands and events.
    engine: The reducer and every subsystem it dispatches to.
    storage: Save codec and the SQLite save-slot store.
    replay: Fixture format and regression runner.
"""

from __future__ import annotations

# Core
from omega_engine.core.config import Settings, get_settings
from omega_engine.core.exceptions import OmegaEngineError
from omega_engine.core.logging import configure_logging, get_logger

# Models
from omega_engine.models import (
    Attack,
    Command,
    Direction,
    Drop,
    Legacy,
    MapBounds,
    Move,
    Outcome,
    Pickup,
    Position,
    Wait,
    WorldState,
)

# Engine
from omega_engine.engine import DeterministicRng, GameSession, step

# Storage
from omega_engine.storage import decode_json, decode_state_json, encode_json


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "OmegaEngineError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Attack",
    "Command",
    "Direction",
    "Drop",
    "Legacy",
    "MapBounds",
    "Move",
    "Outcome",
    "Pickup",
    "Position",
    "Wait",
    "WorldState",
    # Engine
    "DeterministicRng",
    "GameSession",
    "step",
    # Storage
    "encode_json",
    "decode_json",
    "decode_state_json",
]
