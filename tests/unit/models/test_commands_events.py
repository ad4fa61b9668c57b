"""Tests for commands, events and outcomes."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from omega_engine.models.commands import Drop, Legacy, Move, Wait, parse_command
from omega_engine.models.entities import Position
from omega_engine.models.enums import Direction, SessionStatus
from omega_engine.models.events import Moved, Outcome, Waited, event_kind


class TestParseCommand:
    """Tests for command parsing."""

    def test_parse_move(self) -> None:
        command = parse_command({"kind": "move", "direction": "west"})

        assert isinstance(command, Move)
        assert command.direction is Direction.WEST

    def test_parse_legacy(self) -> None:
        assert parse_command({"kind": "legacy", "token": "^g"}) == Legacy(token="^g")

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_command({"kind": "teleport"})

    def test_extra_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_command({"kind": "wait", "minutes": 3})

    def test_commands_are_frozen(self) -> None:
        command = Drop(slot=1)
        with pytest.raises(ValidationError):
            command.slot = 2  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        """Test that a dumped command parses back to an equal command."""
        command = Move(direction=Direction.SOUTH)

        assert parse_command(command.model_dump(mode="json")) == command


class TestOutcome:
    """Tests for Outcome helpers."""

    def test_event_kinds(self) -> None:
        outcome = Outcome(
            turn=1,
            minutes=5,
            status=SessionStatus.IN_PROGRESS,
            events=[
                Moved(from_position=Position(x=0, y=0), to_position=Position(x=1, y=0)),
                Waited(),
            ],
        )

        assert outcome.event_kinds() == ["moved", "waited"]
        assert outcome.has_event("waited")
        assert not outcome.has_event("attacked")

    def test_event_kind(self) -> None:
        assert event_kind(Waited()) == "waited"

    def test_outcome_validates_from_json(self) -> None:
        """Test events are rebuilt from their kind discriminator."""
        outcome = Outcome.model_validate(
            {"turn": 2, "minutes": 0, "status": "won", "events": [{"kind": "waited"}]}
        )

        assert isinstance(outcome.events[0], Waited)
        assert outcome.status.is_terminal
