"""Tests for entity models."""

from __future__ import annotations

from omega_engine.models.entities import Equipment, Item, MapBounds, Player, Position, Stats
from omega_engine.models.enums import Direction


class TestPosition:
    """Tests for Position geometry."""

    def test_offset_north_decreases_y(self) -> None:
        assert Position(x=3, y=3).offset(Direction.NORTH) == Position(x=3, y=2)

    def test_offset_distance(self) -> None:
        assert Position(x=0, y=0).offset(Direction.EAST, 3) == Position(x=3, y=0)

    def test_distances(self) -> None:
        a = Position(x=1, y=1)
        b = Position(x=4, y=3)

        assert a.manhattan(b) == 5
        assert a.chebyshev(b) == 3


class TestMapBounds:
    """Tests for MapBounds."""

    def test_contains(self) -> None:
        bounds = MapBounds(width=5, height=4)

        assert bounds.contains(Position(x=4, y=3))
        assert not bounds.contains(Position(x=5, y=0))
        assert not bounds.contains(Position(x=0, y=-1))

    def test_center(self) -> None:
        assert MapBounds(width=9, height=9).center() == Position(x=4, y=4)


class TestStats:
    """Tests for Stats clamping and mutators."""

    def test_hp_clamped_on_construction(self) -> None:
        """Test that out-of-range HP is clamped."""
        assert Stats(hp=50, max_hp=20).hp == 20
        assert Stats(hp=-3, max_hp=20).hp == 0

    def test_attack_range_repaired(self) -> None:
        stats = Stats(attack_min=5, attack_max=2)
        assert stats.attack_max == 5

    def test_apply_damage_reports_loss(self) -> None:
        """Test damage never takes HP below zero."""
        stats = Stats(hp=4, max_hp=10)

        assert stats.apply_damage(10) == 4
        assert stats.hp == 0
        assert not stats.is_alive

    def test_heal_caps_at_max(self) -> None:
        stats = Stats(hp=8, max_hp=10)

        assert stats.heal(5) == 2
        assert stats.hp == 10

    def test_set_max_hp_lowers_hp(self) -> None:
        stats = Stats(hp=10, max_hp=10)
        stats.set_max_hp(6)

        assert stats.max_hp == 6
        assert stats.hp == 6


class TestPlayer:
    """Tests for Player pack handling."""

    def test_pack_full(self) -> None:
        player = Player(inventory_capacity=1, inventory=[Item(id=1, name="rock")])
        assert player.pack_full

    def test_remove_item_unequips(self) -> None:
        """Test removing a wielded item clears the weapon slot."""
        sword = Item(id=3, name="sword", attack_bonus=2)
        player = Player(inventory=[sword], equipment=Equipment(weapon=3))

        assert player.weapon is sword
        assert player.remove_item(3) is sword
        assert player.equipment.weapon is None
        assert player.inventory == []

    def test_armor_bonus(self) -> None:
        armor = Item(id=1, name="mail", defense_bonus=3)
        shield = Item(id=2, name="buckler", defense_bonus=1)
        player = Player(inventory=[armor, shield], equipment=Equipment(armor=1, shield=2))

        assert player.armor_bonus() == 4
