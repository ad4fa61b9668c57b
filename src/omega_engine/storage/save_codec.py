"""Save envelope encoding, decoding and migration.

A save is a versioned JSON envelope around the complete WorldState::

    {
        "version": 1,
        "payload": {"state": {...}},
        "metadata": {"schema": "omega-save", "saved_turn": 12, "saved_minutes": 60,
                     "mode": "classic", "schema_mode_version": 1}
    }

``decode_json`` also accepts version 0 envelopes and bare state JSON
from older tools. Older states stored each pending prompt in its own
``pending_*`` field; those are folded into the single ``interaction``
field, keeping the highest-precedence prompt.

Example:
    >>> raw = encode_json(state, note="before the arena")
    >>> decode_state_json(raw).gold == state.gold
    True
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from omega_engine.core.exceptions import SaveDecodeError, SaveModeMismatchError, UnsupportedSaveVersionError
from omega_engine.core.logging import get_logger
from omega_engine.models.enums import GameMode
from omega_engine.models.interactions import INTERACTION_PRECEDENCE, InteractionKind
from omega_engine.models.world import WorldState


logger = get_logger(__name__)

SAVE_VERSION = 1
SAVE_MODE_VERSION = 1
SAVE_SCHEMA = "omega-save"
DEFAULT_MODE = GameMode.CLASSIC.value

LEGACY_PENDING_FIELDS: dict[InteractionKind, str] = {
    InteractionKind.WIZARD: "pending_wizard_interaction",
    InteractionKind.SPELL: "pending_spell_interaction",
    InteractionKind.QUIT: "pending_quit_interaction",
    InteractionKind.TALK_DIRECTION: "pending_talk_direction",
    InteractionKind.ACTIVATION: "pending_activation_interaction",
    InteractionKind.TARGETING: "pending_targeting_interaction",
    InteractionKind.INVENTORY: "pending_inventory_interaction",
    InteractionKind.ITEM_PROMPT: "pending_item_prompt",
    InteractionKind.SITE: "pending_site_interaction",
}

# Older tools wrote enum values in CamelCase ("InProgress")
_LEGACY_ENUM_FIELDS = ("status", "world_mode", "environment", "mode")
_GAME_MODES = frozenset(mode.value for mode in GameMode)
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


# =============================================================================
# Envelope Models
# =============================================================================


class SaveMetadata(BaseModel):
    """Descriptive header of a save.

    Attributes:
        schema_name: Schema tag, ``omega-save`` for current saves.
        saved_turn: Clock turn at save time.
        saved_minutes: Clock minutes at save time.
        mode: Game mode of the saved state, copied from ``WorldState.mode``.
        schema_mode_version: Version of the mode policy.
        created_by: Tool that produced the save, when not the engine.
        note: Free-form note.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_name: str = Field(default=SAVE_SCHEMA, alias="schema")
    saved_turn: int = 0
    saved_minutes: int = 0
    mode: str = DEFAULT_MODE
    schema_mode_version: int = SAVE_MODE_VERSION
    created_by: str | None = None
    note: str | None = None

    @classmethod
    def from_state(cls, state: WorldState, *, note: str | None = None) -> SaveMetadata:
        return cls(
            schema_name=SAVE_SCHEMA,
            saved_turn=state.clock.turn,
            saved_minutes=state.clock.minutes,
            mode=state.mode.value,
            note=note,
        )


class SaveEnvelope(BaseModel):
    """A decoded, migrated save."""

    version: int = SAVE_VERSION
    payload: dict[str, Any]
    metadata: SaveMetadata = Field(default_factory=SaveMetadata)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


# =============================================================================
# Encoding
# =============================================================================


def encode_json(state: WorldState, *, note: str | None = None) -> str:
    """Encode a world state as a current-version save envelope.

    Args:
        state: World state to save.
        note: Optional free-form note.

    Returns:
        Pretty-printed JSON text.
    """
    envelope = SaveEnvelope(
        version=SAVE_VERSION,
        payload={"state": state.model_dump(mode="json")},
        metadata=SaveMetadata.from_state(state, note=note),
    )
    return envelope.to_json()


# =============================================================================
# Decoding
# =============================================================================


def _parse_document(raw: str) -> dict[str, Any]:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SaveDecodeError(f"invalid save JSON: {exc.msg}", details={"line": exc.lineno}) from exc
    if not isinstance(document, dict):
        raise SaveDecodeError("save document must be a JSON object")
    return document


def _legacy_import_metadata(state: WorldState) -> SaveMetadata:
    return SaveMetadata(
        schema_name="omega-save-legacy",
        saved_turn=state.clock.turn,
        saved_minutes=state.clock.minutes,
        mode=state.mode.value,
        created_by="legacy-import",
        note="Imported from legacy save envelope/schema",
    )


def _snake(value: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", value).lower()


def collapse_pending_fields(state_data: dict[str, Any]) -> dict[str, Any]:
    """Fold legacy per-prompt ``pending_*`` fields into ``interaction``.

    The first non-empty field in precedence order wins; the others are
    dropped. A state that already carries ``interaction`` keeps it.
    """
    data = dict(state_data)
    chosen: dict[str, Any] | None = None
    for kind in INTERACTION_PRECEDENCE:
        value = data.pop(LEGACY_PENDING_FIELDS[kind], None)
        if value is None or chosen is not None:
            if value is not None:
                logger.debug("Dropping shadowed legacy prompt", kind=kind.value)
            continue
        chosen = {**value, "kind": kind.value} if isinstance(value, dict) else {"kind": kind.value}
    if chosen is not None and data.get("interaction") is None:
        data["interaction"] = chosen
    return data


def migrate_state_data(state_data: dict[str, Any]) -> dict[str, Any]:
    """Bring an older state document up to the current field layout."""
    data = collapse_pending_fields(state_data)
    for name in _LEGACY_ENUM_FIELDS:
        value = data.get(name)
        if isinstance(value, str) and any(ch.isupper() for ch in value):
            data[name] = _snake(value)
    return data


def _validate_state(state_data: Any, *, fallback_mode: str | None = None) -> WorldState:
    if not isinstance(state_data, dict):
        raise SaveDecodeError("save payload does not hold a state object", field="payload")
    data = migrate_state_data(state_data)
    # States written before the mode moved onto the state take it from the metadata
    if "mode" not in data and fallback_mode in _GAME_MODES:
        data["mode"] = fallback_mode
    try:
        return WorldState.model_validate(data)
    except ValidationError as exc:
        raise SaveDecodeError(
            "save state does not match the world schema",
            field="payload.state",
            details={"errors": exc.error_count()},
        ) from exc


def _state_from_payload(payload: dict[str, Any], version: int, fallback_mode: str) -> WorldState:
    if "state" in payload:
        return _validate_state(payload["state"], fallback_mode=fallback_mode)
    if version == 0 and "game_state" in payload:
        return _validate_state(payload["game_state"], fallback_mode=fallback_mode)
    return _validate_state(payload, fallback_mode=fallback_mode)


def decode_json(raw: str) -> SaveEnvelope:
    """Decode and migrate a save to the current envelope version.

    Accepts current envelopes, version 0 envelopes and bare state JSON.

    Args:
        raw: JSON text.

    Returns:
        A version 1 envelope whose payload holds the migrated state.

    Raises:
        SaveDecodeError: If the text is not a readable save.
        UnsupportedSaveVersionError: If the envelope version is unknown.
    """
    document = _parse_document(raw)

    if "payload" not in document:
        state = _validate_state(document)
        metadata = _legacy_import_metadata(state)
        logger.info("Imported legacy state JSON", turn=state.clock.turn)
        return SaveEnvelope(payload={"state": state.model_dump(mode="json")}, metadata=metadata)

    version = document.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise SaveDecodeError("save envelope has payload but invalid/missing numeric version", field="version")
    if version not in (0, SAVE_VERSION):
        raise UnsupportedSaveVersionError(version)
    payload = document["payload"]
    if not isinstance(payload, dict):
        raise SaveDecodeError("save payload must be a JSON object", field="payload")

    raw_metadata = document.get("metadata")
    if raw_metadata is None:
        metadata = SaveMetadata(schema_name="omega-save-unknown", note="Envelope had no metadata")
    else:
        try:
            metadata = SaveMetadata.model_validate(raw_metadata)
        except ValidationError as exc:
            raise SaveDecodeError("save metadata is malformed", field="metadata") from exc

    state = _state_from_payload(payload, version, metadata.mode.strip())
    metadata = metadata.model_copy(
        update={
            "schema_name": metadata.schema_name or SAVE_SCHEMA,
            "saved_turn": state.clock.turn,
            "saved_minutes": state.clock.minutes,
            "mode": state.mode.value,
            "schema_mode_version": metadata.schema_mode_version or SAVE_MODE_VERSION,
        }
    )
    if version != SAVE_VERSION:
        logger.info("Migrated save envelope", from_version=version, to_version=SAVE_VERSION)
    return SaveEnvelope(version=SAVE_VERSION, payload={"state": state.model_dump(mode="json")}, metadata=metadata)


def decode_state_json(raw: str, *, expected_mode: GameMode | str | None = None) -> WorldState:
    """Decode a save straight to a WorldState.

    Args:
        raw: JSON text.
        expected_mode: Reject states played under any other mode.

    Returns:
        The decoded world state.

    Raises:
        SaveDecodeError: If the text is not a readable save.
        UnsupportedSaveVersionError: If the envelope version is unknown.
        SaveModeMismatchError: If ``expected_mode`` differs from the save's.
    """
    envelope = decode_json(raw)
    state = WorldState.model_validate(envelope.payload["state"])
    if expected_mode is not None and state.mode.value != str(expected_mode):
        raise SaveModeMismatchError(str(expected_mode), state.mode.value)
    return state


__all__ = [
    "SAVE_VERSION",
    "SAVE_SCHEMA",
    "DEFAULT_MODE",
    "LEGACY_PENDING_FIELDS",
    "SaveMetadata",
    "SaveEnvelope",
    "encode_json",
    "collapse_pending_fields",
    "migrate_state_data",
    "decode_json",
    "decode_state_json",
]
