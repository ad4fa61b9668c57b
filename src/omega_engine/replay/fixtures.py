"""Replay fixture format.

A fixture pins a seed, a starting world, an ordered command list and the
expectations the final world must meet. Fixtures are JSON files; the
command list uses either the engine's own ``{"kind": ...}`` form or the
older externally tagged form (``"wait"``, ``{"move": {"direction": "north"}}``).

Example:
    >>> fixture = load_fixture(Path("fixtures/replay/quit_victory.json"))
    >>> fixture.family
    'endings'
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from omega_engine.core.exceptions import ReplayFixtureError
from omega_engine.models.commands import Command
from omega_engine.models.entities import MapBounds, Position, Stats
from omega_engine.models.enums import (
    Alignment,
    EndingKind,
    LegacyEnvironment,
    LegacyQuestState,
    SessionStatus,
    WorldMode,
)


REPLAY_CONTRACT_VERSION = 1
DEFAULT_SOURCE = "legacy_handcrafted"
DEFAULT_FAMILY = "unclassified"


def normalize_command(data: Any) -> Any:
    """Turn an externally tagged command into the ``kind`` form."""
    if isinstance(data, str):
        return {"kind": data.lower()}
    if isinstance(data, dict) and "kind" not in data and len(data) == 1:
        tag, fields = next(iter(data.items()))
        body = dict(fields) if isinstance(fields, dict) else {}
        if isinstance(body.get("direction"), str):
            body["direction"] = body["direction"].lower()
        return {"kind": tag.lower(), **body}
    return data


# =============================================================================
# Fixture Models
# =============================================================================


class FixtureModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ReplayMonsterSpec(FixtureModel):
    name: str
    position: Position
    stats: Stats = Field(default_factory=Stats)


class ReplayItemSpec(FixtureModel):
    name: str
    position: Position


class ReplayInitialState(FixtureModel):
    """Starting world of a fixture.

    Optional fields keep the fresh-world default when absent. ``site_aux_grid``
    and ``site_flags_grid`` are row-major per-tile aux codes and flag bits.
    """

    bounds: MapBounds
    player_position: Position
    player_stats: Stats | None = None
    inventory_capacity: int | None = Field(default=None, ge=1)
    monsters: list[ReplayMonsterSpec] = Field(default_factory=list)
    ground_items: list[ReplayItemSpec] = Field(default_factory=list)
    world_mode: WorldMode | None = None
    environment: LegacyEnvironment | None = None
    map_rows: list[str] | None = None
    site_aux_grid: list[int] | None = None
    site_flags_grid: list[int] | None = None
    gold: int | None = Field(default=None, ge=0)
    bank_gold: int | None = Field(default=None, ge=0)
    food: int | None = Field(default=None, ge=0)


class ReplayExpected(FixtureModel):
    """Expectations on the final world; optional fields are checked only when set."""

    turn: int
    minutes: int
    player_position: Position
    player_hp: int
    monsters_alive: int
    inventory_count: int
    ground_item_count: int
    required_event_kinds: list[str] = Field(default_factory=list)
    status: SessionStatus | None = None
    world_mode: WorldMode | None = None
    guild_rank: int | None = None
    priest_rank: int | None = None
    alignment: Alignment | None = None
    quest_state: LegacyQuestState | None = None
    total_winner_unlocked: bool | None = None
    gold: int | None = None
    bank_gold: int | None = None
    food: int | None = None
    known_site_count: int | None = None
    ending: EndingKind | None = None
    high_score_eligible: bool | None = None


class ReplayFixture(FixtureModel):
    """One replay scenario.

    Attributes:
        contract_version: Fixture format version; newer than supported fails.
        active: Inactive fixtures run but are reported separately.
        source: Where the scenario came from.
        name: Scenario name.
        family: Grouping used by the summary.
        tags: Free-form tags; normalized to a sorted unique list.
        seed: RNG seed.
        initial: Starting world.
        commands: Commands applied in order.
        expected: Expectations on the final world.
    """

    contract_version: int = REPLAY_CONTRACT_VERSION
    active: bool = True
    source: str = DEFAULT_SOURCE
    name: str
    family: str = DEFAULT_FAMILY
    tags: list[str] = Field(default_factory=list)
    seed: int = Field(ge=0)
    initial: ReplayInitialState
    commands: list[Command] = Field(default_factory=list)
    expected: ReplayExpected

    @field_validator("commands", mode="before")
    @classmethod
    def normalize_commands(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [normalize_command(item) for item in value]
        return value

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str]) -> list[str]:
        return sorted({tag for tag in value if tag.strip()})

    @field_validator("family", "source")
    @classmethod
    def default_blank(cls, value: str, info: ValidationInfo) -> str:
        if value.strip():
            return value
        return DEFAULT_FAMILY if info.field_name == "family" else DEFAULT_SOURCE

    @property
    def schema_supported(self) -> bool:
        return self.contract_version <= REPLAY_CONTRACT_VERSION

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


# =============================================================================
# Loading
# =============================================================================


def load_fixture(path: Path) -> ReplayFixture:
    """Read and validate one fixture file.

    Raises:
        ReplayFixtureError: If the file is unreadable or not a valid fixture.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ReplayFixtureError(f"failed to read fixture: {exc}", fixture=str(path)) from exc
    try:
        return ReplayFixture.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ReplayFixtureError(f"invalid fixture json: {exc.msg}", fixture=str(path)) from exc
    except ValidationError as exc:
        raise ReplayFixtureError(
            "fixture does not match the replay format",
            fixture=str(path),
            details={"errors": exc.error_count()},
        ) from exc


def collect_fixtures(directory: Path) -> list[tuple[Path, ReplayFixture]]:
    """Load every ``*.json`` fixture under a directory, sorted by path."""
    directory = Path(directory)
    if not directory.is_dir():
        raise ReplayFixtureError("fixture directory does not exist", fixture=str(directory))
    return [(path, load_fixture(path)) for path in sorted(directory.rglob("*.json"))]


__all__ = [
    "REPLAY_CONTRACT_VERSION",
    "normalize_command",
    "ReplayMonsterSpec",
    "ReplayItemSpec",
    "ReplayInitialState",
    "ReplayExpected",
    "ReplayFixture",
    "load_fixture",
    "collect_fixtures",
]
