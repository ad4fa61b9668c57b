"""Tests for the legacy token table."""

from __future__ import annotations

import pytest

from omega_engine.engine import legacy  # noqa: F401
from omega_engine.engine.registry import (
    TokenCategory,
    get_all_legacy_commands,
    get_commands_by_category,
    get_legacy_command,
)
from omega_engine.engine.router import step
from omega_engine.models.commands import Legacy
from omega_engine.models.world import WorldState


class TestTable:
    """Tests for registry lookups."""

    def test_lookup(self) -> None:
        definition = get_legacy_command("Q")

        assert definition is not None
        assert definition.category is TokenCategory.SESSION
        assert definition.minutes == 0
        assert not definition.wizard_only

    def test_unknown(self) -> None:
        assert get_legacy_command("Z") is None

    @pytest.mark.parametrize(
        ("token", "category"),
        [
            ("z", TokenCategory.INVENTORY),
            ("p", TokenCategory.MAGIC),
            ("x", TokenCategory.MISC),
            ("/", TokenCategory.MISC),
            ("o", TokenCategory.MOVEMENT),
            ("c", TokenCategory.MOVEMENT),
            ("y", TokenCategory.MOVEMENT),
            ("u", TokenCategory.MOVEMENT),
            ("b", TokenCategory.MOVEMENT),
            ("n", TokenCategory.MOVEMENT),
        ],
    )
    def test_classic_tokens(self, token: str, category: TokenCategory) -> None:
        definition = get_legacy_command(token)

        assert definition is not None
        assert definition.category is category
        assert not definition.wizard_only

    def test_wizard_only_tokens(self) -> None:
        wizard_only = {d.token for d in get_all_legacy_commands() if d.wizard_only}

        assert wizard_only == {"^x", "^w", "^k", "^f", "#"}

    def test_sorted_listing(self) -> None:
        tokens = [d.token for d in get_all_legacy_commands()]

        assert tokens == sorted(tokens)

    def test_by_category(self) -> None:
        tokens = {d.token for d in get_commands_by_category(TokenCategory.INVENTORY)}

        assert {"g", ",", "i", "d", "q", "a"} <= tokens

    def test_every_category_used(self) -> None:
        used = {d.category for d in get_all_legacy_commands()}

        assert {TokenCategory.MOVEMENT, TokenCategory.WIZARD, TokenCategory.SESSION} <= used


class TestHelp:
    """Tests for the help listing."""

    def test_help_hides_wizard_tokens(self, open_world: WorldState, scripted_rng) -> None:
        outcome = step(open_world, Legacy(token="?"), scripted_rng())

        assert "Wizard: ^g" in open_world.log
        assert outcome.minutes == 0

    def test_help_shows_wizard_tokens_in_wizard_mode(self, open_world: WorldState, scripted_rng) -> None:
        open_world.wizard.enabled = True

        step(open_world, Legacy(token="?"), scripted_rng())

        assert "Wizard: # ^f ^g ^k ^w ^x" in open_world.log

    def test_character_summary(self, open_world: WorldState, scripted_rng) -> None:
        step(open_world, Legacy(token="C"), scripted_rng())

        assert open_world.log[-2] == "Adventurer: hp 20/20, attack 1-4, defense 1, mana 10/10"
        assert open_world.log[-1] == "Gold 250, bank 0, food 0, alignment neutral"

    def test_toggle_pickup(self, open_world: WorldState, scripted_rng) -> None:
        step(open_world, Legacy(token="@"), scripted_rng())

        assert open_world.options.pickup is True
