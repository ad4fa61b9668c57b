"""Registry for the legacy token vocabulary.

Each legacy command is a plain function decorated with
``@legacy_command``, which records the tokens it answers to, its
category and its declared minute cost in one authoritative table. The
router looks tokens up here; help listings and documentation read the
same table, so documented and implemented tokens cannot drift apart.

Example:
    >>> @legacy_command("s", description="Search adjacent tiles", category=TokenCategory.MISC, minutes=5)
    ... def search(ctx, token):
    ...     ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, TypeVar

from omega_engine.engine.context import TurnContext


LegacyHandler = Callable[[TurnContext, str], None]
F = TypeVar("F", bound=LegacyHandler)


class TokenCategory(StrEnum):
    """Groups of the legacy vocabulary."""

    MOVEMENT = "movement"
    COMBAT = "combat"
    INVENTORY = "inventory"
    MAGIC = "magic"
    ECONOMY = "economy"
    SESSION = "session"
    WIZARD = "wizard"
    MISC = "misc"


@dataclass(frozen=True)
class LegacyCommandDefinition:
    """Definition of one legacy token.

    Attributes:
        token: The token string.
        description: Short help text.
        category: Vocabulary group.
        handler: Function invoked with (ctx, token).
        minutes: Declared cost; handlers may lower it on failure or set a
            variable cost, and ``None`` marks an always-variable cost.
        wizard_only: Requires wizard mode to be enabled.
    """

    token: str
    description: str
    category: TokenCategory
    handler: LegacyHandler
    minutes: int | None = 0
    wizard_only: bool = False


_legacy_registry: dict[str, LegacyCommandDefinition] = {}


def legacy_command(
    *tokens: str,
    description: str,
    category: TokenCategory,
    minutes: int | None = 0,
    wizard_only: bool = False,
) -> Callable[[F], F]:
    """Decorator registering a function under one or more tokens.

    Args:
        *tokens: Tokens the function answers to.
        description: Short help text.
        category: Vocabulary group.
        minutes: Declared minute cost.
        wizard_only: Requires wizard mode.

    Returns:
        The undecorated function.
    """

    def decorator(func: F) -> F:
        for token in tokens:
            _legacy_registry[token] = LegacyCommandDefinition(
                token=token,
                description=description,
                category=category,
                handler=func,
                minutes=minutes,
                wizard_only=wizard_only,
            )
        return func

    return decorator


def get_legacy_command(token: str) -> LegacyCommandDefinition | None:
    """Get a legacy command definition by token."""
    return _legacy_registry.get(token)


def get_all_legacy_commands() -> list[LegacyCommandDefinition]:
    return sorted(_legacy_registry.values(), key=lambda definition: definition.token)


def get_commands_by_category(category: TokenCategory) -> list[LegacyCommandDefinition]:
    return [d for d in get_all_legacy_commands() if d.category == category]


__all__ = [
    "LegacyHandler",
    "TokenCategory",
    "LegacyCommandDefinition",
    "legacy_command",
    "get_legacy_command",
    "get_all_legacy_commands",
    "get_commands_by_category",
]
