"""Shared plumbing for modal prompts.

While a prompt is pending, every command reaches it as a ``RawInput``:
movement becomes a direction, other commands become their token. The
helpers here open, close and cancel prompts consistently, and tag the
log lines that only describe an active prompt so the timeline view can
drop them.
"""

from __future__ import annotations

from dataclasses import dataclass

from omega_engine.engine.context import TurnContext
from omega_engine.models.commands import Attack, Command, Drop, Legacy, Move, Pickup, Wait
from omega_engine.models.enums import Direction
from omega_engine.models.interactions import ActiveInteraction


PROMPT_MARKER = "prompt active"
"""Substring carried by every log line that merely describes an open prompt."""

WISH_TEXT_PREFIX = "Wish text:"

DIRECTION_TOKENS: dict[str, Direction] = {
    "h": Direction.WEST,
    "j": Direction.SOUTH,
    "k": Direction.NORTH,
    "l": Direction.EAST,
    "y": Direction.NORTHWEST,
    "u": Direction.NORTHEAST,
    "b": Direction.SOUTHWEST,
    "n": Direction.SOUTHEAST,
    "4": Direction.WEST,
    "2": Direction.SOUTH,
    "8": Direction.NORTH,
    "6": Direction.EAST,
    "7": Direction.NORTHWEST,
    "9": Direction.NORTHEAST,
    "1": Direction.SOUTHWEST,
    "3": Direction.SOUTHEAST,
}

ESCAPE = "<esc>"
ENTER = "<enter>"
BACKSPACE = "<backspace>"
MENU_CLOSE_TOKENS = frozenset({ESCAPE, "q", "x"})
YES_TOKENS = frozenset({"y", "Y"})
NO_TOKENS = frozenset({"n", "N", ESCAPE})


@dataclass(frozen=True)
class RawInput:
    """A command reinterpreted as prompt input.

    Attributes:
        token: Text of the input; movement commands carry an empty token.
        direction: Direction for movement commands.
    """

    token: str
    direction: Direction | None = None

    @property
    def as_direction(self) -> Direction | None:
        if self.direction is not None:
            return self.direction
        return DIRECTION_TOKENS.get(self.token)

    @property
    def label(self) -> str:
        return self.direction.value if self.direction is not None else self.token


def raw_input_from_command(command: Command) -> RawInput:
    """Translate a command into prompt input."""
    if isinstance(command, (Move, Attack)):
        return RawInput(token="", direction=command.direction)
    if isinstance(command, Wait):
        return RawInput(token=".")
    if isinstance(command, Pickup):
        return RawInput(token="g")
    if isinstance(command, Drop):
        return RawInput(token=str(command.slot + 1))
    if isinstance(command, Legacy):
        return RawInput(token=command.token)
    return RawInput(token="")


def slot_letter(index: int) -> str:
    return chr(ord("a") + index)


def letter_slot(token: str) -> int | None:
    """Map ``a``..``z`` to a zero-based slot."""
    if len(token) == 1 and "a" <= token <= "z":
        return ord(token) - ord("a")
    return None


def prompt_line(label: str, text: str) -> str:
    return f"{label} {PROMPT_MARKER}: {text}"


def is_prompt_line(line: str) -> bool:
    return PROMPT_MARKER in line or line.startswith(WISH_TEXT_PREFIX)


def open_prompt(
    ctx: TurnContext,
    interaction: ActiveInteraction,
    *,
    token: str,
    label: str,
    text: str,
) -> None:
    """Install a pending interaction and announce it.

    Args:
        ctx: Current turn context.
        interaction: The prompt to install; replaces any current one.
        token: The token that opened the prompt.
        label: Short prompt name for the log line.
        text: Prompt text shown to the player.
    """
    ctx.state.interaction = interaction
    ctx.log(prompt_line(label, text))
    ctx.handled(token, text)


def close_prompt(ctx: TurnContext) -> None:
    ctx.state.interaction = None


def cancel_prompt(ctx: TurnContext, token: str, message: str) -> None:
    """Close the pending prompt with a single log line and no other change."""
    close_prompt(ctx)
    ctx.log(message)
    ctx.handled(token, message)
    ctx.set_minutes(0)


__all__ = [
    "PROMPT_MARKER",
    "WISH_TEXT_PREFIX",
    "DIRECTION_TOKENS",
    "ESCAPE",
    "ENTER",
    "BACKSPACE",
    "MENU_CLOSE_TOKENS",
    "YES_TOKENS",
    "NO_TOKENS",
    "RawInput",
    "raw_input_from_command",
    "slot_letter",
    "letter_slot",
    "prompt_line",
    "is_prompt_line",
    "open_prompt",
    "close_prompt",
    "cancel_prompt",
]
