"""Session wrapper around the turn reducer.

``GameSession`` owns one WorldState and its RNG stream, feeds commands
to ``step``, keeps the outcome history and notifies observers after
every command. Frontends and tooling talk to a session; the reducer
itself stays a plain function.

Example:
    >>> from omega_engine.engine.session import GameSession
    >>> from omega_engine.models.commands import Move
    >>> session = GameSession.new(seed=7)
    >>> outcome = session.apply(Move(direction="east"))
    >>> outcome.has_event("moved")
    True
"""

from __future__ import annotations

from typing import Any, Callable

from omega_engine.core.config import Settings, get_settings
from omega_engine.core.exceptions import InvalidGameStateError
from omega_engine.core.logging import get_logger
from omega_engine.engine import queries
from omega_engine.engine.rng import DeterministicRng, RandomSource
from omega_engine.engine.router import step
from omega_engine.models.commands import Command, parse_command
from omega_engine.models.entities import MapBounds
from omega_engine.models.events import Outcome
from omega_engine.models.world import WorldState


logger = get_logger(__name__)

OutcomeCallback = Callable[[Outcome], None]


def validate_state(state: WorldState) -> None:
    """Check the invariants a state must hold before it reaches ``step``.

    Raises:
        InvalidGameStateError: If the state breaks one of them.
    """
    player = state.player
    if len(player.inventory) > player.inventory_capacity:
        raise InvalidGameStateError(
            "pack holds more items than its capacity",
            invariant="inventory_capacity",
            turn=state.clock.turn,
            details={"items": len(player.inventory), "capacity": player.inventory_capacity},
        )
    if not state.bounds.contains(player.position):
        raise InvalidGameStateError(
            "player is outside the map",
            invariant="player_in_bounds",
            turn=state.clock.turn,
        )
    if state.map_rows and len(state.map_rows) != state.bounds.height:
        raise InvalidGameStateError(
            "map rows do not match the map height",
            invariant="map_rows",
            turn=state.clock.turn,
            details={"rows": len(state.map_rows), "height": state.bounds.height},
        )


def new_world(settings: Settings | None = None) -> WorldState:
    """Bootstrap a fresh world from the game settings."""
    game = (settings or get_settings()).game
    state = WorldState.new(MapBounds(width=game.map_width, height=game.map_height))
    state.gold = game.starting_gold
    state.player.name = game.player_name
    state.player.inventory_capacity = game.inventory_capacity
    state.options.pickup = game.auto_pickup
    state.options.interactive_sites = game.interactive_sites
    return state


class GameSession:
    """One play session: a world, its RNG stream and what happened so far.

    Attributes:
        state: The world state; replaced wholesale by ``restart`` and ``load``.
        rng: The random stream handed to every ``step`` call.
        seed: Seed the stream was created from, when known.
    """

    def __init__(
        self,
        state: WorldState,
        rng: RandomSource,
        *,
        seed: int | None = None,
    ) -> None:
        """Wrap an existing world.

        Args:
            state: World state to drive; validated first.
            rng: Random stream for ``step``.
            seed: Seed of ``rng`` for bookkeeping.

        Raises:
            InvalidGameStateError: If the state breaks an invariant.
        """
        validate_state(state)
        self.state = state
        self.rng = rng
        self.seed = seed
        self._history: list[Outcome] = []
        self._command_log: list[dict[str, Any]] = []
        self._callbacks: list[OutcomeCallback] = []

        logger.info("Session started", seed=seed, turn=state.clock.turn)

    @classmethod
    def new(
        cls,
        settings: Settings | None = None,
        *,
        seed: int | None = None,
        state: WorldState | None = None,
    ) -> GameSession:
        """Start a session from settings, or around a prepared world.

        Args:
            settings: Bootstrap defaults; the cached settings when omitted.
            seed: RNG seed; ``game.default_seed`` when omitted.
            state: Prepared world; a fresh one from settings when omitted.

        Returns:
            The new session.
        """
        settings = settings or get_settings()
        if seed is None:
            seed = settings.game.default_seed
        return cls(state or new_world(settings), DeterministicRng.seeded(seed), seed=seed)

    # -------------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------------

    @property
    def history(self) -> list[Outcome]:
        return self._history.copy()

    @property
    def command_log(self) -> list[dict[str, Any]]:
        """Commands applied so far with their turn and cost."""
        return self._command_log.copy()

    @property
    def is_finished(self) -> bool:
        return self.state.status.is_terminal

    @property
    def prompt(self) -> str | None:
        return queries.active_prompt(self.state)

    def timeline(self, limit: int | None = None) -> list[str]:
        return queries.renderable_timeline_lines(self.state, limit)

    def add_outcome_callback(self, callback: OutcomeCallback) -> None:
        """Add a callback invoked with every Outcome.

        Args:
            callback: Function to call with the Outcome.
        """
        self._callbacks.append(callback)

    def _invoke_callbacks(self, outcome: Outcome) -> None:
        for callback in self._callbacks:
            try:
                callback(outcome)
            except Exception:
                logger.exception("Outcome callback failed")

    # -------------------------------------------------------------------------
    # Driving
    # -------------------------------------------------------------------------

    def apply(self, command: Command | dict[str, Any]) -> Outcome:
        """Apply one command.

        Args:
            command: A Command, or a mapping with a ``kind`` key.

        Returns:
            The Outcome of the command.
        """
        if isinstance(command, dict):
            command = parse_command(command)
        outcome = step(self.state, command, self.rng)
        self._history.append(outcome)
        self._command_log.append(
            {
                "turn": outcome.turn,
                "command": command.model_dump(mode="json"),
                "minutes": outcome.minutes,
                "events": outcome.event_kinds(),
            }
        )
        self._invoke_callbacks(outcome)
        return outcome

    def apply_all(self, commands: list[Command | dict[str, Any]]) -> list[Outcome]:
        return [self.apply(command) for command in commands]

    def load(self, state: WorldState) -> None:
        """Replace the world, e.g. with a decoded save.

        Raises:
            InvalidGameStateError: If the state breaks an invariant.
        """
        validate_state(state)
        self.state = state
        self._history.clear()
        self._command_log.clear()
        logger.info("Session loaded", turn=state.clock.turn, minutes=state.clock.minutes)

    def restart(self, settings: Settings | None = None) -> None:
        """Start over with a fresh world and a reseeded stream."""
        self.state = new_world(settings)
        if self.seed is not None:
            self.rng = DeterministicRng.seeded(self.seed)
        self._history.clear()
        self._command_log.clear()
        logger.info("Session restarted", seed=self.seed)


__all__ = [
    "OutcomeCallback",
    "validate_state",
    "new_world",
    "GameSession",
]
