"""Player commands accepted by the turn reducer.

A command is one of six frozen variants discriminated by ``kind``. The
large historical keyboard vocabulary travels through ``Legacy(token)``,
where a token is a single character, a control chord such as ``"^g"``,
a named key such as ``"<enter>"``, or free text typed into a prompt.

Example:
    >>> from omega_engine.models.commands import Move, Legacy, parse_command
    >>> Move(direction="east")
    Move(kind='move', direction=<Direction.EAST: 'east'>)
    >>> parse_command({"kind": "legacy", "token": "Q"})
    Legacy(kind='legacy', token='Q')
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from omega_engine.models.enums import Direction


class CommandBase(BaseModel):
    """Base class for command variants."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Move(CommandBase):
    """Step one tile; bumps into monsters become attacks."""

    kind: Literal["move"] = "move"
    direction: Direction


class Attack(CommandBase):
    """Attack the adjacent tile in a direction."""

    kind: Literal["attack"] = "attack"
    direction: Direction


class Wait(CommandBase):
    """Pass time in place."""

    kind: Literal["wait"] = "wait"


class Pickup(CommandBase):
    """Pick up the top item on the player's tile."""

    kind: Literal["pickup"] = "pickup"


class Drop(CommandBase):
    """Drop the pack item at a zero-based slot."""

    kind: Literal["drop"] = "drop"
    slot: int


class Legacy(CommandBase):
    """A raw token from the historical command vocabulary."""

    kind: Literal["legacy"] = "legacy"
    token: str


Command = Annotated[
    Union[Move, Attack, Wait, Pickup, Drop, Legacy],
    Field(discriminator="kind"),
]

COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(data: Any) -> Command:
    """Validate a plain mapping into a Command variant.

    Args:
        data: Mapping with a ``kind`` key, or a Command instance.

    Returns:
        The validated command.
    """
    return COMMAND_ADAPTER.validate_python(data)


__all__ = [
    "Command",
    "CommandBase",
    "Move",
    "Attack",
    "Wait",
    "Pickup",
    "Drop",
    "Legacy",
    "COMMAND_ADAPTER",
    "parse_command",
]
