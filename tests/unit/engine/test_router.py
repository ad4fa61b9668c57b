"""Tests for the turn reducer."""

from __future__ import annotations

import pytest

from omega_engine.engine import movement
from omega_engine.engine.router import step
from omega_engine.models.commands import Legacy, Move, Wait
from omega_engine.models.entities import Position, Stats
from omega_engine.models.enums import Direction, SessionStatus
from omega_engine.models.events import LegacyHandled
from omega_engine.models.world import WorldState


class TestTimeAccounting:
    """Tests for clock advancement."""

    def test_wait_advances_clock(self, open_world: WorldState, scripted_rng) -> None:
        """Test a wait costs one action and one turn."""
        outcome = step(open_world, Wait(), scripted_rng())

        assert outcome.turn == 1
        assert outcome.minutes == 5
        assert outcome.event_kinds() == ["waited", "turn_advanced"]
        assert open_world.clock.minutes == 5

    def test_blocked_move_is_free(self, open_world: WorldState, scripted_rng) -> None:
        """Test walking off the map takes no time."""
        open_world.player.position = Position(x=0, y=0)

        outcome = step(open_world, Move(direction=Direction.NORTH), scripted_rng())

        assert outcome.minutes == 0
        assert outcome.event_kinds() == ["move_blocked"]
        assert open_world.clock.turn == 0
        assert open_world.player.position == Position(x=0, y=0)

    def test_clock_is_monotonic(self, open_world: WorldState, scripted_rng) -> None:
        rng = scripted_rng()
        seen = []
        for command in (Wait(), Legacy(token="Q"), Legacy(token="n"), Move(direction=Direction.EAST)):
            step(open_world, command, rng)
            seen.append((open_world.clock.turn, open_world.clock.minutes))

        assert seen == sorted(seen)
        assert seen[-1] == (2, 10)


class TestTerminalSessions:
    """Tests for commands after the session has ended."""

    @pytest.mark.parametrize("status", [SessionStatus.WON, SessionStatus.LOST])
    def test_commands_ignored(self, open_world: WorldState, scripted_rng, status: SessionStatus) -> None:
        open_world.status = status

        outcome = step(open_world, Move(direction=Direction.EAST), scripted_rng())

        assert outcome.event_kinds() == ["command_ignored_terminal"]
        assert outcome.minutes == 0
        assert open_world.player.position == Position(x=4, y=4)


class TestLegacyDispatch:
    """Tests for legacy token routing."""

    def test_unknown_token(self, open_world: WorldState, scripted_rng) -> None:
        """Test an unknown token is reported as not modeled."""
        outcome = step(open_world, Legacy(token="Z"), scripted_rng())

        event = outcome.events[0]
        assert isinstance(event, LegacyHandled)
        assert event.fully_modeled is False
        assert outcome.minutes == 0
        assert open_world.log[-1] == "Unknown command: Z"

    def test_wizard_only_token_refused(self, open_world: WorldState, scripted_rng) -> None:
        outcome = step(open_world, Legacy(token="^x"), scripted_rng())

        assert open_world.interaction is None
        assert outcome.minutes == 0
        assert open_world.log[-1] == "You need to be in wizard mode to do that."

    def test_handler_failure_is_contained(
        self,
        open_world: WorldState,
        scripted_rng,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a crashing handler degrades to an event instead of raising."""

        def boom(ctx) -> None:
            raise RuntimeError("kaboom")

        monkeypatch.setattr(movement, "handle_wait", boom)

        outcome = step(open_world, Wait(), scripted_rng())

        assert outcome.minutes == 0
        assert outcome.events[-1].note == "command failed: kaboom"
        assert open_world.clock.turn == 0


class TestPendingInteraction:
    """Tests for routing commands into an open prompt."""

    def test_move_goes_to_prompt(self, open_world: WorldState, scripted_rng) -> None:
        """Test a move while the quit prompt is open cancels it instead of moving."""
        rng = scripted_rng()
        step(open_world, Legacy(token="Q"), rng)

        outcome = step(open_world, Move(direction=Direction.NORTH), rng)

        assert open_world.interaction is None
        assert open_world.player.position == Position(x=4, y=4)
        assert open_world.log[-1] == "Quit canceled."
        assert outcome.minutes == 0


class TestWorldReaction:
    """Tests for monster turns and status ticks after timed actions."""

    def test_monster_approaches_after_wait(self, open_world: WorldState, scripted_rng) -> None:
        monster = open_world.spawn_monster("rat", Position(x=4, y=1), Stats(hp=3, max_hp=3))

        outcome = step(open_world, Wait(), scripted_rng())

        assert monster.position == Position(x=4, y=2)
        assert "monster_moved" in outcome.event_kinds()

    def test_monsters_idle_on_free_action(self, open_world: WorldState, scripted_rng) -> None:
        monster = open_world.spawn_monster("rat", Position(x=4, y=1))

        step(open_world, Legacy(token="C"), scripted_rng())

        assert monster.position == Position(x=4, y=1)

    def test_poison_ticks_and_expires(self, open_world: WorldState, scripted_rng) -> None:
        """Test poison deals damage each turn then wears off."""
        open_world.add_status_effect("poisoned", turns=2, magnitude=1)
        rng = scripted_rng()

        first = step(open_world, Wait(), rng)
        second = step(open_world, Wait(), rng)

        assert open_world.player.stats.hp == 18
        assert "status_tick" in first.event_kinds()
        assert "status_expired" in second.event_kinds()
        assert open_world.status_effect("poisoned") is None
