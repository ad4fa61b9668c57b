"""Tests for site service menus."""

from __future__ import annotations

from omega_engine.core.constants import (
    SITE_AUX_SERVICE_BANK,
    SITE_AUX_SERVICE_GYM,
    SITE_AUX_SERVICE_HEALER,
    SITE_AUX_SERVICE_MERC_GUILD,
    SITE_AUX_SERVICE_MONASTERY,
    SITE_AUX_SERVICE_SHOP,
    SITE_AUX_SERVICE_TAVERN,
    SITE_AUX_SERVICE_TEMPLE,
    SITE_AUX_SERVICE_THIEVES_GUILD,
)
from omega_engine.engine.queries import active_help_hint, active_prompt
from omega_engine.engine.router import step
from omega_engine.engine.sites import service_for_aux
from omega_engine.models.commands import Legacy, Move
from omega_engine.models.enums import Direction, LegacyQuestState, LegacyStatusFlag
from omega_engine.models.interactions import InteractionKind, ServiceKind
from omega_engine.models.world import WorldState


def enter_site(state: WorldState, rng):
    return step(state, Move(direction=Direction.EAST), rng)


def press(state: WorldState, rng, *tokens: str):
    outcome = None
    for token in tokens:
        outcome = step(state, Legacy(token=token), rng)
    return outcome


def progressed(outcome) -> dict[str, int | str]:
    return {event.field: event.value for event in outcome.events if event.kind == "progression_updated"}


class TestServiceLookup:
    """Tests for resolving aux codes."""

    def test_service_aux(self) -> None:
        assert service_for_aux(SITE_AUX_SERVICE_BANK) == (ServiceKind.BANK, None)

    def test_altar_aux(self) -> None:
        assert service_for_aux(41) == (ServiceKind.ALTAR, 1)
        assert service_for_aux(45) == (ServiceKind.ALTAR, 5)

    def test_unknown_aux(self) -> None:
        assert service_for_aux(0) is None
        assert service_for_aux(46) is None


class TestMenus:
    """Tests for opening and navigating service menus."""

    def test_entering_opens_menu(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)

        outcome = enter_site(state, scripted_rng())

        assert outcome.minutes == 5
        assert state.interaction.kind == InteractionKind.SITE
        assert active_prompt(state) == (
            "Bank: [1/d] deposit 100 [2/w] withdraw 100 [3/a] deposit all [4/x] leave | balance=0 gold=250"
        )
        assert active_help_hint(state).startswith("Press a digit")
        assert state.player.position in state.known_sites

    def test_descend_opens_menu(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        state.options.interactive_sites = False
        rng = scripted_rng()

        enter_site(state, rng)
        assert state.interaction is None

        press(state, rng, ">")
        assert state.interaction.kind == InteractionKind.SITE

    def test_descend_without_site(self, open_world: WorldState, scripted_rng) -> None:
        press(open_world, scripted_rng(), ">")

        assert open_world.log[-1] == "There is nothing to enter here."

    def test_invalid_input_keeps_menu(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "z")

        assert state.interaction is not None
        assert outcome.minutes == 0
        assert state.log[-1] == "Invalid option. Choose a bracketed option."

    def test_leave(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        rng = scripted_rng()
        enter_site(state, rng)

        press(state, rng, "<esc>")

        assert state.interaction is None
        assert state.log[-1] == "You leave the Bank."

    def test_cancel_after_descend_changes_nothing(self, site_world, scripted_rng) -> None:
        """Test opening a known site with > and escaping leaves the state as it was."""
        state = site_world(SITE_AUX_SERVICE_BANK)
        state.options.interactive_sites = False
        rng = scripted_rng()
        enter_site(state, rng)
        before = state.model_dump(exclude={"log"})

        press(state, rng, ">")
        assert state.interaction is not None
        outcome = press(state, rng, "<esc>")

        assert state.model_dump(exclude={"log"}) == before
        assert outcome.minutes == 0
        assert "progression_updated" not in outcome.event_kinds()

    def test_site_discovered_once(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        state.options.interactive_sites = False
        rng = scripted_rng()

        outcome = enter_site(state, rng)

        assert state.known_sites == [state.player.position]
        assert progressed(outcome) == {"known_sites": 1}

        press(state, rng, ">", "<esc>")
        step(state, Move(direction=Direction.WEST), rng)
        again = enter_site(state, rng)

        assert state.known_sites == [state.player.position]
        assert "known_sites" not in progressed(again)


class TestBank:
    """Tests for the bank."""

    def test_deposit_and_withdraw(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "1")

        assert state.gold == 150
        assert state.bank_gold == 100
        assert state.interaction is None
        assert outcome.minutes == 5
        assert "economy_updated" in outcome.event_kinds()

        press(state, rng, ">", "w")
        assert state.gold == 250
        assert state.bank_gold == 0

    def test_deposit_all(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_BANK)
        rng = scripted_rng()
        enter_site(state, rng)

        press(state, rng, "a")

        assert state.gold == 0
        assert state.bank_gold == 250


class TestShopAndTavern:
    """Tests for buying goods and services."""

    def test_buy_potion(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_SHOP)
        rng = scripted_rng()
        enter_site(state, rng)

        press(state, rng, "2")

        assert state.gold == 210
        assert [item.name for item in state.player.inventory] == ["healing potion"]

    def test_cannot_afford(self, site_world, scripted_rng) -> None:
        """Test a refused purchase takes no time."""
        state = site_world(SITE_AUX_SERVICE_SHOP)
        state.gold = 5
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "2")

        assert outcome.minutes == 0
        assert state.clock.turn == 1
        assert state.player.inventory == []
        assert state.log[-1] == "You cannot afford that."

    def test_sell(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_SHOP)
        dagger = state.catalog.find("dagger").instantiate(state.allocate_item_id())
        state.add_item_to_pack(dagger)
        rng = scripted_rng()
        enter_site(state, rng)

        press(state, rng, "s")

        assert state.player.inventory == []
        assert state.gold == 265

    def test_tavern_room(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_TAVERN)
        state.player.stats.hp = 5
        state.spellbook.mana = 0
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "3")

        assert outcome.minutes == 480
        assert state.player.stats.hp == 20
        assert state.spellbook.mana == 10
        assert state.gold == 235


class TestGuildsAndTemples:
    """Tests for progression-bearing services."""

    def test_merc_enlist(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_MERC_GUILD)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "1")

        assert state.progression.guild_rank == 1
        assert state.progression.quest_state is LegacyQuestState.ACTIVE
        assert "quest_advanced" in outcome.event_kinds()
        assert "dialogue_advanced" in outcome.event_kinds()

    def test_altar_pledge(self, site_world, scripted_rng) -> None:
        state = site_world(41)
        rng = scripted_rng()
        enter_site(state, rng)

        assert active_prompt(state).startswith("Altar of Odin: [1/p] pray")

        press(state, rng, "1")

        assert state.progression.patron_deity == 1
        assert state.progression.deity_favor == 1

    def test_temple_tithe(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_TEMPLE)
        rng = scripted_rng()
        enter_site(state, rng)

        press(state, rng, "1")

        assert state.gold == 235
        assert state.progression.deity_favor == 2

    def test_monastery_retreat(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_MONASTERY)
        state.add_status_effect("poisoned", turns=10)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "r")

        assert outcome.minutes == 60
        assert state.status_effects == []


class TestServiceEvents:
    """Tests that every state change a service makes is reported as an event."""

    def test_tavern_room(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_TAVERN)
        state.player.stats.hp = 5
        state.spellbook.mana = 0
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "3")

        fields = progressed(outcome)
        assert fields["player.hp"] == 20
        assert fields["spellbook.mana"] == 10
        assert "economy_updated" in outcome.event_kinds()

    def test_temple_pray(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_TEMPLE)
        state.progression.deity_favor = 2
        state.player.stats.hp = 5
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "p")

        assert state.player.stats.hp == 20
        assert progressed(outcome) == {"deity_favor": 1, "player.hp": 20}

    def test_temple_blessing(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_TEMPLE)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "b")

        fields = progressed(outcome)
        assert fields["status_effects"] == 1
        assert fields["legacy_status_flags"] == state.legacy_status_flags
        assert fields["deity_favor"] == 4

    def test_merc_promotion(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_MERC_GUILD)
        state.progression.guild_rank = 1
        state.monsters_defeated = 3
        attack_min = state.player.stats.attack_min
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "p")

        fields = progressed(outcome)
        assert fields["player.attack_min"] == attack_min + 1
        assert fields["player.attack_max"] == state.player.stats.attack_max
        assert fields["guild_rank"] == 2

    def test_thieves_heist(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_THIEVES_GUILD)
        state.progression.track("thieves").rank = 1
        enter_site(state, scripted_rng())

        outcome = press(state, scripted_rng(30), "h")

        fields = progressed(outcome)
        assert fields["quests.thieves.xp"] == 1
        assert fields["legal_heat"] == state.legal_heat
        assert state.gold == 280

    def test_gym_train(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_GYM)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "t")

        assert progressed(outcome) == {"player.max_hp": 22, "player.hp": 22}

    def test_healer_cure(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_HEALER)
        state.add_status_effect("poisoned", turns=10)
        state.set_status_flag(LegacyStatusFlag.POISONED)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "c")

        assert progressed(outcome) == {"status_effects": 0, "legacy_status_flags": 0}
        assert not state.has_status_flag(LegacyStatusFlag.POISONED)

    def test_shop_sell(self, site_world, scripted_rng) -> None:
        state = site_world(SITE_AUX_SERVICE_SHOP)
        dagger = state.catalog.find("dagger").instantiate(state.allocate_item_id())
        state.add_item_to_pack(dagger)
        rng = scripted_rng()
        enter_site(state, rng)

        outcome = press(state, rng, "s")

        assert progressed(outcome) == {"player.inventory": 0}


class TestFieldPrayer:
    """Tests for praying to the patron away from an altar."""

    def test_no_patron(self, open_world: WorldState, scripted_rng) -> None:
        outcome = press(open_world, scripted_rng(), "p")

        assert outcome.minutes == 0
        assert open_world.log[-1] == "You have no patron to pray to."

    def test_answered_prayer(self, open_world: WorldState, scripted_rng) -> None:
        open_world.progression.patron_deity = 1
        open_world.progression.deity_favor = 3
        open_world.player.stats.hp = 4
        open_world.add_status_effect("poisoned", turns=10)
        open_world.set_status_flag(LegacyStatusFlag.POISONED)

        outcome = press(open_world, scripted_rng(), "p")

        assert outcome.minutes == 5
        assert open_world.player.stats.hp == open_world.player.stats.max_hp
        assert open_world.progression.deity_favor == 2
        assert open_world.status_effect("poisoned") is None
        assert not open_world.has_status_flag(LegacyStatusFlag.POISONED)
        assert open_world.log[-1] == "Odin answers your prayer."
        assert progressed(outcome)["deity_favor"] == 2

    def test_unanswered_when_unhurt(self, open_world: WorldState, scripted_rng) -> None:
        open_world.progression.patron_deity = 1
        open_world.progression.deity_favor = 3

        outcome = press(open_world, scripted_rng(), "p")

        assert outcome.minutes == 5
        assert open_world.progression.deity_favor == 3
        assert open_world.log[-1] == "You feel a distant presence."
