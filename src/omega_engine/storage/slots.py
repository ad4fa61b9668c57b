"""SQLite-backed named save slots.

Each slot holds one encoded save envelope plus a little metadata for
listing screens. The store never interprets the save beyond what
``save_codec`` reports, so older envelopes stay loadable through the
codec's migrations.

Storage location: ``settings.storage.save_database_path``
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator

from omega_engine.core.config import get_settings
from omega_engine.core.exceptions import SaveError
from omega_engine.core.logging import get_logger
from omega_engine.models.enums import GameMode
from omega_engine.models.world import WorldState
from omega_engine.storage.save_codec import decode_json, decode_state_json, encode_json


logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class SaveSlotRecord:
    """Record of one stored save.

    Attributes:
        name: Slot name chosen by the player.
        mode: Game mode of the saved state.
        saved_turn: Clock turn at save time.
        saved_minutes: Clock minutes at save time.
        status: Session status at save time.
        note: Optional note.
        save_json: The encoded save envelope.
        created_at: When the slot was first written.
        updated_at: When the slot was last written.
    """

    name: str
    mode: str
    saved_turn: int
    saved_minutes: int
    status: str
    note: str
    save_json: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> SaveSlotRecord:
        """Create from database row."""
        return cls(
            name=row[0],
            mode=row[1],
            saved_turn=row[2],
            saved_minutes=row[3],
            status=row[4],
            note=row[5],
            save_json=row[6],
            created_at=datetime.fromisoformat(row[7]),
            updated_at=datetime.fromisoformat(row[8]),
        )

    def load_state(self, *, expected_mode: GameMode | str | None = None) -> WorldState:
        return decode_state_json(self.save_json, expected_mode=expected_mode)


# =============================================================================
# Store
# =============================================================================


_SLOT_COLUMNS = "name, mode, saved_turn, saved_minutes, status, note, save_json, created_at, updated_at"


class SaveSlotStore:
    """SQLite store of named save slots."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to the database file; ``:memory:`` is not
                supported because every call opens a new connection.
                Defaults to the configured save database path.
        """
        if db_path is None:
            self.db_path = get_settings().storage.save_database_path
        else:
            self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info("Save store initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with commit/rollback and cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS save_slots (
                    name TEXT PRIMARY KEY,
                    mode TEXT NOT NULL,
                    saved_turn INTEGER NOT NULL,
                    saved_minutes INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    note TEXT DEFAULT '',
                    save_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_save_slots_updated
                ON save_slots(updated_at DESC)
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Slot Operations
    # =========================================================================

    def save(
        self,
        name: str,
        state: WorldState,
        *,
        note: str = "",
    ) -> SaveSlotRecord:
        """Write a state into a slot, replacing what the slot held.

        Args:
            name: Slot name.
            state: World state to save.
            note: Optional note.

        Returns:
            The stored slot record.
        """
        if not name.strip():
            raise SaveError("slot name must not be empty", field="name")
        now = datetime.now()
        save_json = encode_json(state, note=note or None)

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT created_at FROM save_slots WHERE name = ?", (name,))
            row = cursor.fetchone()
            created_at = datetime.fromisoformat(row[0]) if row else now
            cursor.execute(
                f"INSERT OR REPLACE INTO save_slots ({_SLOT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    name,
                    state.mode.value,
                    state.clock.turn,
                    state.clock.minutes,
                    state.status.value,
                    note,
                    save_json,
                    created_at.isoformat(),
                    now.isoformat(),
                ),
            )

        logger.info("Saved slot", slot=name, turn=state.clock.turn)
        return SaveSlotRecord(
            name=name,
            mode=state.mode.value,
            saved_turn=state.clock.turn,
            saved_minutes=state.clock.minutes,
            status=state.status.value,
            note=note,
            save_json=save_json,
            created_at=created_at,
            updated_at=now,
        )

    def import_raw(self, name: str, raw: str, *, note: str = "") -> SaveSlotRecord:
        """Store save JSON from another tool after migrating it."""
        envelope = decode_json(raw)
        state = WorldState.model_validate(envelope.payload["state"])
        return self.save(name, state, note=note or (envelope.metadata.note or ""))

    def get(self, name: str) -> SaveSlotRecord | None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_SLOT_COLUMNS} FROM save_slots WHERE name = ?", (name,))
            row = cursor.fetchone()
            return SaveSlotRecord.from_row(tuple(row)) if row else None

    def load(self, name: str, *, expected_mode: GameMode | str | None = None) -> WorldState:
        """Decode the state stored in a slot.

        Raises:
            SaveError: If the slot does not exist.
            SaveDecodeError: If the stored save cannot be decoded.
            SaveModeMismatchError: If ``expected_mode`` differs from the save's.
        """
        record = self.get(name)
        if record is None:
            raise SaveError(f"no save in slot {name!r}", field="name")
        return record.load_state(expected_mode=expected_mode)

    def list_slots(self) -> list[SaveSlotRecord]:
        """All slots, most recently written first."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_SLOT_COLUMNS} FROM save_slots ORDER BY updated_at DESC")
            return [SaveSlotRecord.from_row(tuple(row)) for row in cursor.fetchall()]

    def delete(self, name: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM save_slots WHERE name = ?", (name,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted slot", slot=name)
        return deleted

    def count(self) -> int:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM save_slots")
            return cursor.fetchone()[0]


# =============================================================================
# Singleton Instance
# =============================================================================


_store_instance: SaveSlotStore | None = None


def get_save_store() -> SaveSlotStore:
    """Get the global save store at the configured path."""
    global _store_instance

    if _store_instance is None:
        _store_instance = SaveSlotStore()

    return _store_instance


__all__ = [
    "SaveSlotRecord",
    "SaveSlotStore",
    "get_save_store",
]
