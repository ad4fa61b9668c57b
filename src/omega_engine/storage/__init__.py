"""Persistence for omega sessions.

Provides:
- The versioned save envelope codec with migrations from older formats
- SQLite-backed named save slots
"""

from omega_engine.storage.save_codec import (
    SAVE_VERSION,
    SaveEnvelope,
    SaveMetadata,
    decode_json,
    decode_state_json,
    encode_json,
)
from omega_engine.storage.slots import SaveSlotRecord, SaveSlotStore, get_save_store


__all__ = [
    "SAVE_VERSION",
    "SaveEnvelope",
    "SaveMetadata",
    "decode_json",
    "decode_state_json",
    "encode_json",
    "SaveSlotRecord",
    "SaveSlotStore",
    "get_save_store",
]
