"""Tests for pickup, drop and the pack prompts."""

from __future__ import annotations

from omega_engine.engine.router import step
from omega_engine.models.commands import Drop, Legacy, Pickup
from omega_engine.models.entities import Item
from omega_engine.models.interactions import ActivationStage, InteractionKind
from omega_engine.models.world import WorldState


def give(state: WorldState, name: str) -> Item:
    item = state.catalog.find(name).instantiate(state.allocate_item_id())
    assert state.add_item_to_pack(item)
    return item


def press(state: WorldState, rng, *tokens: str):
    outcome = None
    for token in tokens:
        outcome = step(state, Legacy(token=token), rng)
    return outcome


class TestPickupAndDrop:
    """Tests for the pickup and drop commands."""

    def test_pickup_nothing(self, open_world: WorldState, scripted_rng) -> None:
        outcome = step(open_world, Pickup(), scripted_rng())

        assert outcome.event_kinds() == ["no_item_to_pick_up"]
        assert outcome.minutes == 0

    def test_pickup_item(self, open_world: WorldState, scripted_rng) -> None:
        open_world.place_item("dagger", open_world.player.position)

        outcome = step(open_world, Pickup(), scripted_rng())

        assert outcome.event_kinds()[0] == "picked_up"
        assert outcome.minutes == 5
        assert open_world.ground_items == []

    def test_pickup_full_pack(self, open_world: WorldState, scripted_rng) -> None:
        """Test a full pack refuses the item without taking time."""
        open_world.player.inventory_capacity = 1
        give(open_world, "dagger")
        open_world.place_item("arrow", open_world.player.position)

        outcome = step(open_world, Pickup(), scripted_rng())

        assert outcome.event_kinds() == ["inventory_full"]
        assert outcome.minutes == 0
        assert len(open_world.ground_items) == 1

    def test_drop(self, open_world: WorldState, scripted_rng) -> None:
        dagger = give(open_world, "dagger")

        outcome = step(open_world, Drop(slot=0), scripted_rng())

        assert outcome.event_kinds()[0] == "dropped"
        assert open_world.player.inventory == []
        assert open_world.items_at(open_world.player.position)[0].item.id == dagger.id

    def test_drop_invalid_slot(self, open_world: WorldState, scripted_rng) -> None:
        outcome = step(open_world, Drop(slot=3), scripted_rng())

        assert outcome.event_kinds() == ["invalid_drop_slot"]
        assert outcome.minutes == 0

    def test_drop_unequips(self, open_world: WorldState, scripted_rng) -> None:
        dagger = give(open_world, "dagger")
        open_world.player.equipment.weapon = dagger.id

        step(open_world, Drop(slot=0), scripted_rng())

        assert open_world.player.equipment.weapon is None


class TestItemPrompts:
    """Tests for the letter-selecting item prompts."""

    def test_quaff_heals(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "healing potion")
        open_world.player.stats.hp = 10
        rng = scripted_rng(6)

        opened = press(open_world, rng, "q")
        assert open_world.log[-1] == "Quaff prompt active: Quaff which item? [a]"
        assert opened.minutes == 0

        outcome = press(open_world, rng, "a")

        assert open_world.player.stats.hp == 16
        assert open_world.player.inventory == []
        assert outcome.minutes == 5

    def test_mismatched_letter_cancels(self, open_world: WorldState, scripted_rng) -> None:
        """Test choosing an item the prompt cannot use closes the prompt."""
        give(open_world, "dagger")
        give(open_world, "healing potion")

        outcome = press(open_world, scripted_rng(), "q", "a")

        assert open_world.interaction is None
        assert open_world.log[-1] == "You can't quaff that."
        assert outcome.minutes == 0
        assert len(open_world.player.inventory) == 2

    def test_nothing_suitable(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "dagger")

        press(open_world, scripted_rng(), "r")

        assert open_world.interaction is None
        assert open_world.log[-1] == "You have nothing to read."

    def test_wield_and_wear(self, open_world: WorldState, scripted_rng) -> None:
        dagger = give(open_world, "dagger")
        armor = give(open_world, "leather armor")
        rng = scripted_rng()

        press(open_world, rng, "w", "a")
        press(open_world, rng, "W", "b")

        equipment = open_world.player.equipment
        assert equipment.weapon == dagger.id
        assert equipment.armor == armor.id
        assert open_world.player.armor_bonus() == 1


class TestInventoryMenu:
    """Tests for the pack menu."""

    def test_invalid_input_keeps_menu_open(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "dagger")
        rng = scripted_rng()

        press(open_world, rng, "i", "z")

        assert open_world.interaction is not None
        assert open_world.interaction.kind == InteractionKind.INVENTORY
        assert open_world.log[-1] == "Invalid inventory command."

        press(open_world, rng, "<esc>")
        assert open_world.interaction is None
        assert open_world.log[-1] == "You close your pack."

    def test_cursor_and_use(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "dagger")
        give(open_world, "healing potion")
        open_world.player.stats.hp = 5
        rng = scripted_rng(10)

        press(open_world, rng, "i", "j")
        assert open_world.interaction.cursor == 1

        outcome = press(open_world, rng, "u")

        assert open_world.interaction is None
        assert open_world.player.stats.hp == 15
        assert outcome.minutes == 5

    def test_empty_pack(self, open_world: WorldState, scripted_rng) -> None:
        press(open_world, scripted_rng(), "i")

        assert open_world.interaction is None
        assert open_world.log[-1] == "You are carrying nothing."


class TestActivation:
    """Tests for the activation prompt."""

    def test_activate_item(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "healing potion")
        open_world.player.stats.hp = 10
        rng = scripted_rng(6)

        press(open_world, rng, "a")
        assert open_world.interaction.stage is ActivationStage.CHOOSE_KIND

        press(open_world, rng, "i")
        assert open_world.interaction.stage is ActivationStage.CHOOSE_ITEM

        outcome = press(open_world, rng, "a")

        assert open_world.interaction is None
        assert open_world.player.stats.hp == 16
        assert outcome.minutes == 5

    def test_invalid_kind_keeps_prompt(self, open_world: WorldState, scripted_rng) -> None:
        press(open_world, scripted_rng(), "a", "z")

        assert open_world.interaction is not None
        assert open_world.log[-1] == "Choose [i] item or [a] artifact."

    def test_escape_cancels(self, open_world: WorldState, scripted_rng) -> None:
        press(open_world, scripted_rng(), "A", "<esc>")

        assert open_world.interaction is None
        assert open_world.log[-1] == "Never mind."


class TestCharges:
    """Tests for charged items such as staves and wands."""

    def test_zap_uses_a_charge(self, open_world: WorldState, scripted_rng) -> None:
        staff = give(open_world, "staff of healing")
        open_world.player.stats.hp = 10
        rng = scripted_rng(6)

        opened = press(open_world, rng, "z")
        assert open_world.log[-1] == "Zap prompt active: Zap which item? [a]"
        assert opened.minutes == 0

        outcome = press(open_world, rng, "a")

        assert open_world.player.stats.hp == 16
        assert staff.charges == 4
        assert open_world.player.inventory == [staff]
        assert outcome.minutes == 5
        assert any(
            event.kind == "progression_updated" and event.field == f"item.{staff.id}.charges" and event.value == 4
            for event in outcome.events
        )

    def test_zap_only_offers_sticks(self, open_world: WorldState, scripted_rng) -> None:
        give(open_world, "healing potion")

        press(open_world, scripted_rng(), "z")

        assert open_world.interaction is None
        assert open_world.log[-1] == "You have nothing to zap."

    def test_empty_stick_does_nothing(self, open_world: WorldState, scripted_rng) -> None:
        """Test an item with no charges left refuses to work and takes no time."""
        staff = give(open_world, "staff of healing")
        staff.charges = 0
        open_world.player.stats.hp = 10
        turn = open_world.clock.turn
        rng = scripted_rng(6)

        outcome = press(open_world, rng, "a", "i", "a")

        assert open_world.player.stats.hp == 10
        assert open_world.log[-1] == "Nothing happens."
        assert outcome.minutes == 0
        assert staff.charges == 0
        assert open_world.clock.turn == turn

    def test_empty_stick_zapped(self, open_world: WorldState, scripted_rng) -> None:
        staff = give(open_world, "wand of blinking")
        staff.charges = 0
        start = open_world.player.position

        outcome = press(open_world, scripted_rng(), "z", "a")

        assert open_world.player.position == start
        assert open_world.log[-1] == "Nothing happens."
        assert outcome.minutes == 0
