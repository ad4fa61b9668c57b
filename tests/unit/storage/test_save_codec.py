"""Tests for the save envelope codec."""

from __future__ import annotations

import json

import pytest

from omega_engine.core.exceptions import SaveDecodeError, SaveModeMismatchError, UnsupportedSaveVersionError
from omega_engine.models.entities import Position
from omega_engine.models.enums import GameMode, SessionStatus, WorldMode
from omega_engine.models.interactions import QuitInteraction, SpellInteraction
from omega_engine.models.world import WorldState
from omega_engine.storage.save_codec import (
    SAVE_SCHEMA,
    SAVE_VERSION,
    collapse_pending_fields,
    decode_json,
    decode_state_json,
    encode_json,
    migrate_state_data,
)


@pytest.fixture
def played_world(open_world: WorldState) -> WorldState:
    open_world.clock.turn = 12
    open_world.clock.minutes = 60
    open_world.gold = 777
    open_world.spawn_monster("rat", Position(x=1, y=1))
    open_world.place_item("dagger", Position(x=2, y=2))
    open_world.interaction = SpellInteraction(buffer="mag")
    open_world.log = ["Hello."]
    return open_world


class TestEncode:
    """Tests for encode_json."""

    def test_envelope_shape(self, played_world: WorldState) -> None:
        document = json.loads(encode_json(played_world, note="before the arena"))

        assert document["version"] == SAVE_VERSION
        assert set(document["payload"]) == {"state"}
        assert document["metadata"] == {
            "schema": SAVE_SCHEMA,
            "saved_turn": 12,
            "saved_minutes": 60,
            "mode": "classic",
            "schema_mode_version": 1,
            "note": "before the arena",
        }

    def test_round_trip(self, played_world: WorldState) -> None:
        """Test every field survives encode then decode."""
        restored = decode_state_json(encode_json(played_world))

        assert restored == played_world
        assert restored.interaction.buffer == "mag"


class TestDecode:
    """Tests for decode_json and its migrations."""

    def test_version_zero_game_state(self, played_world: WorldState) -> None:
        raw = json.dumps(
            {
                "version": 0,
                "payload": {"game_state": played_world.model_dump(mode="json")},
                "metadata": {"mode": "  "},
            }
        )

        envelope = decode_json(raw)

        assert envelope.version == SAVE_VERSION
        assert envelope.metadata.mode == "classic"
        assert envelope.metadata.saved_turn == 12
        assert envelope.payload["state"]["gold"] == 777

    def test_missing_metadata(self, played_world: WorldState) -> None:
        raw = json.dumps({"version": 1, "payload": {"state": played_world.model_dump(mode="json")}})

        envelope = decode_json(raw)

        assert envelope.metadata.schema_name == "omega-save-unknown"
        assert envelope.metadata.saved_minutes == 60

    def test_bare_legacy_state(self, played_world: WorldState) -> None:
        envelope = decode_json(json.dumps(played_world.model_dump(mode="json")))

        assert envelope.metadata.schema_name == "omega-save-legacy"
        assert envelope.metadata.created_by == "legacy-import"
        assert envelope.metadata.note == "Imported from legacy save envelope/schema"
        assert envelope.metadata.saved_turn == 12

    def test_invalid_json(self) -> None:
        with pytest.raises(SaveDecodeError, match="invalid save JSON"):
            decode_json("{not json")

    def test_not_an_object(self) -> None:
        with pytest.raises(SaveDecodeError, match="JSON object"):
            decode_json("[1, 2]")

    @pytest.mark.parametrize("version", [None, "1", True])
    def test_bad_version(self, version: object) -> None:
        raw = json.dumps({"version": version, "payload": {}})

        with pytest.raises(SaveDecodeError) as exc_info:
            decode_json(raw)

        assert exc_info.value.details["field"] == "version"

    def test_unsupported_version(self) -> None:
        with pytest.raises(UnsupportedSaveVersionError) as exc_info:
            decode_json(json.dumps({"version": 7, "payload": {}}))

        assert exc_info.value.version == 7

    def test_payload_not_object(self) -> None:
        with pytest.raises(SaveDecodeError, match="payload must be a JSON object"):
            decode_json(json.dumps({"version": 1, "payload": []}))

    def test_schema_violation(self) -> None:
        raw = json.dumps({"version": 1, "payload": {"state": {"gold": -5}}})

        with pytest.raises(SaveDecodeError, match="world schema"):
            decode_json(raw)

    def test_mode_mismatch(self, played_world: WorldState) -> None:
        raw = encode_json(played_world)

        with pytest.raises(SaveModeMismatchError) as exc_info:
            decode_state_json(raw, expected_mode=GameMode.MODERN)

        assert exc_info.value.expected == "modern"
        assert exc_info.value.found == "classic"

    def test_mode_match(self, played_world: WorldState) -> None:
        played_world.mode = GameMode.MODERN
        raw = encode_json(played_world)

        assert json.loads(raw)["metadata"]["mode"] == "modern"
        assert decode_state_json(raw, expected_mode="modern").mode is GameMode.MODERN

    def test_mode_taken_from_metadata_when_state_lacks_it(self, played_world: WorldState) -> None:
        """Test a state saved before the mode lived on it adopts the envelope mode."""
        state_data = played_world.model_dump(mode="json")
        del state_data["mode"]
        raw = json.dumps({"version": 1, "payload": {"state": state_data}, "metadata": {"mode": "modern"}})

        state = decode_state_json(raw, expected_mode=GameMode.MODERN)

        assert state.mode is GameMode.MODERN
        assert state.gold == 777


class TestMigrations:
    """Tests for legacy field migrations."""

    def test_pending_fields_collapse_by_precedence(self) -> None:
        """Test the higher-precedence prompt wins and the rest are dropped."""
        data = collapse_pending_fields(
            {
                "pending_site_interaction": {"service": "bank"},
                "pending_quit_interaction": {},
                "pending_spell_interaction": {"buffer": "heal"},
            }
        )

        assert data == {"interaction": {"buffer": "heal", "kind": "spell"}}

    def test_existing_interaction_kept(self) -> None:
        data = collapse_pending_fields({"interaction": {"kind": "quit"}, "pending_site_interaction": {"service": "bank"}})

        assert data == {"interaction": {"kind": "quit"}}

    def test_camel_case_enums(self) -> None:
        data = migrate_state_data({"status": "InProgress", "world_mode": "DungeonCity", "environment": "city"})

        assert data["status"] == "in_progress"
        assert data["world_mode"] == "dungeon_city"
        assert data["environment"] == "city"

    def test_legacy_state_decodes_to_single_prompt(self) -> None:
        legacy = {
            "status": "InProgress",
            "world_mode": "Countryside",
            "pending_quit_interaction": {},
            "pending_item_prompt": {"context": "quaff"},
        }

        state = decode_state_json(json.dumps(legacy))

        assert state.status is SessionStatus.IN_PROGRESS
        assert state.world_mode is WorldMode.COUNTRYSIDE
        assert isinstance(state.interaction, QuitInteraction)

    def test_version_zero_payload_is_state(self, played_world: WorldState) -> None:
        raw = json.dumps(
            {
                "version": 0,
                "payload": played_world.model_dump(mode="json"),
                "metadata": {"schema": "omega-save-legacy", "saved_turn": 1, "saved_minutes": 6},
            }
        )

        envelope = decode_json(raw)

        assert envelope.metadata.schema_name == "omega-save-legacy"
        assert envelope.metadata.saved_turn == 12
        assert envelope.metadata.saved_minutes == 60
