"""Replay runner and regression summary.

``run_fixture`` builds the fixture's starting world, applies its
commands with a stream seeded from the fixture, and compares the final
world with the expectations. ``run_fixture_directory`` runs a whole
directory and rolls the results up by tag and by family.

Example:
    >>> summary = run_fixture_directory(Path("fixtures/replay"))
    >>> summary.failed
    0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from omega_engine.core.logging import get_logger
from omega_engine.engine.rng import DeterministicRng
from omega_engine.engine.router import step
from omega_engine.models.entities import TileSiteCell
from omega_engine.models.events import event_kind
from omega_engine.models.world import WorldState
from omega_engine.replay.fixtures import REPLAY_CONTRACT_VERSION, ReplayFixture, collect_fixtures


logger = get_logger(__name__)

CRITICAL_PATH_TAG = "critical_path"


# =============================================================================
# Results
# =============================================================================


@dataclass
class ReplayResult:
    """Result of running one fixture.

    Attributes:
        name: Fixture name.
        family: Fixture family.
        tags: Fixture tags.
        source: Fixture source.
        active: Whether the fixture counts toward the active denominator.
        schema_mismatch: The fixture's contract version is not supported.
        passed: Every check held.
        checks: One line per failed check.
        final_turn: Clock turn after the last command.
        final_minutes: Clock minutes after the last command.
        event_kinds: Every event kind seen, in order.
        final_state: The final world, absent on schema mismatch.
    """

    name: str
    family: str
    tags: list[str]
    source: str
    active: bool
    schema_mismatch: bool = False
    passed: bool = True
    checks: list[str] = field(default_factory=list)
    final_turn: int = 0
    final_minutes: int = 0
    event_kinds: list[str] = field(default_factory=list)
    final_state: WorldState | None = None

    def fail(self, check: str) -> None:
        self.passed = False
        self.checks.append(check)


@dataclass
class Rollup:
    key: str
    total: int = 0
    passed: int = 0

    @property
    def failed(self) -> int:
        return self.total - self.passed


@dataclass
class ReplaySummary:
    """Rollup of a fixture directory run."""

    results: list[ReplayResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def active_total(self) -> int:
        return sum(1 for result in self.results if result.active)

    @property
    def active_passed(self) -> int:
        return sum(1 for result in self.results if result.active and result.passed)

    @property
    def schema_mismatch_total(self) -> int:
        return sum(1 for result in self.results if result.schema_mismatch)

    @property
    def pass_rate(self) -> float:
        return self.passed / self.total if self.total else 0.0

    def critical_path(self) -> Rollup:
        return self._rollup(CRITICAL_PATH_TAG, lambda result: CRITICAL_PATH_TAG in result.tags)

    def tag_rollups(self) -> list[Rollup]:
        keys = sorted({tag for result in self.results for tag in result.tags})
        return [self._rollup(key, lambda result, key=key: key in result.tags) for key in keys]

    def family_rollups(self) -> list[Rollup]:
        keys = sorted({result.family for result in self.results})
        return [self._rollup(key, lambda result, key=key: result.family == key) for key in keys]

    def _rollup(self, key: str, matches: Any) -> Rollup:
        rollup = Rollup(key=key)
        for result in self.results:
            if matches(result):
                rollup.total += 1
                rollup.passed += int(result.passed)
        return rollup

    def to_markdown(self) -> str:
        """Render the summary as a Markdown report."""
        lines = [
            "# Replay Regression Summary",
            "",
            f"- Total scenarios: {self.total}",
            f"- Passed: {self.passed}",
            f"- Failed: {self.failed}",
            f"- Active: total={self.active_total}, passed={self.active_passed}",
            f"- Schema mismatches: {self.schema_mismatch_total}",
            f"- Pass rate: {self.pass_rate:.2%}",
            "",
            "## Families",
            "",
            "| Family | Total | Passed | Failed |",
            "|---|---|---|---|",
        ]
        lines.extend(f"| {r.key} | {r.total} | {r.passed} | {r.failed} |" for r in self.family_rollups())
        lines.extend(["", "## Tags", "", "| Tag | Total | Passed | Failed |", "|---|---|---|---|"])
        lines.extend(f"| {r.key} | {r.total} | {r.passed} | {r.failed} |" for r in self.tag_rollups())
        failures = [result for result in self.results if not result.passed]
        if failures:
            lines.extend(["", "## Failures", ""])
            for result in failures:
                lines.append(f"- {result.name}: {'; '.join(result.checks)}")
        return "\n".join(lines) + "\n"


# =============================================================================
# Running
# =============================================================================


def build_initial_state(fixture: ReplayFixture) -> WorldState:
    """Construct the starting world a fixture describes."""
    initial = fixture.initial
    state = WorldState.new(initial.bounds)
    state.player.position = initial.player_position
    if initial.player_stats is not None:
        state.player.stats = initial.player_stats.model_copy()
    if initial.inventory_capacity is not None:
        state.player.inventory_capacity = initial.inventory_capacity
    if initial.world_mode is not None:
        state.world_mode = initial.world_mode
    if initial.environment is not None:
        state.environment = initial.environment
    if initial.map_rows is not None:
        state.map_rows = list(initial.map_rows)
        state.city_map_rows = list(initial.map_rows)
        state.country_map_rows = list(initial.map_rows)
    if initial.site_aux_grid is not None:
        flags = initial.site_flags_grid or []
        grid = [
            TileSiteCell(aux=aux, flags=flags[index] if index < len(flags) else 0)
            for index, aux in enumerate(initial.site_aux_grid)
        ]
        state.site_grid = grid
        state.city_site_grid = [cell.model_copy() for cell in grid]
    if initial.gold is not None:
        state.gold = initial.gold
    if initial.bank_gold is not None:
        state.bank_gold = initial.bank_gold
    if initial.food is not None:
        state.food = initial.food

    for monster in initial.monsters:
        state.spawn_monster(monster.name, monster.position, monster.stats.model_copy())
    for item in initial.ground_items:
        state.place_item(item.name, item.position)
    return state


def _check(result: ReplayResult, name: str, expected: Any, actual: Any) -> None:
    if expected is not None and expected != actual:
        result.fail(f"{name} mismatch: expected {expected}, got {actual}")


def run_fixture(fixture: ReplayFixture) -> ReplayResult:
    """Run one fixture and check its expectations."""
    result = ReplayResult(
        name=fixture.name,
        family=fixture.family,
        tags=list(fixture.tags),
        source=fixture.source,
        active=fixture.active,
    )
    if not fixture.schema_supported:
        result.schema_mismatch = True
        result.fail(
            f"schema mismatch: contract_version={fixture.contract_version} "
            f"supported_max={REPLAY_CONTRACT_VERSION}"
        )
        return result

    state = build_initial_state(fixture)
    rng = DeterministicRng.seeded(fixture.seed)
    for command in fixture.commands:
        outcome = step(state, command, rng)
        result.event_kinds.extend(event_kind(event) for event in outcome.events)

    expected = fixture.expected
    player = state.player
    progression = state.progression
    _check(result, "turn", expected.turn, state.clock.turn)
    _check(result, "minutes", expected.minutes, state.clock.minutes)
    _check(
        result,
        "player_position",
        (expected.player_position.x, expected.player_position.y),
        (player.position.x, player.position.y),
    )
    _check(result, "player_hp", expected.player_hp, player.stats.hp)
    _check(result, "monsters_alive", expected.monsters_alive, len(state.monsters))
    _check(result, "inventory_count", expected.inventory_count, len(player.inventory))
    _check(result, "ground_item_count", expected.ground_item_count, len(state.ground_items))
    _check(result, "status", expected.status, state.status)
    _check(result, "world_mode", expected.world_mode, state.world_mode)
    _check(result, "guild_rank", expected.guild_rank, progression.guild_rank)
    _check(result, "priest_rank", expected.priest_rank, progression.priest_rank)
    _check(result, "alignment", expected.alignment, progression.alignment)
    _check(result, "quest_state", expected.quest_state, progression.quest_state)
    _check(result, "total_winner_unlocked", expected.total_winner_unlocked, progression.total_winner_unlocked)
    _check(result, "gold", expected.gold, state.gold)
    _check(result, "bank_gold", expected.bank_gold, state.bank_gold)
    _check(result, "food", expected.food, state.food)
    _check(result, "known_site_count", expected.known_site_count, len(state.known_sites))
    _check(result, "ending", expected.ending, progression.ending)
    _check(result, "high_score_eligible", expected.high_score_eligible, progression.high_score_eligible)
    for kind in expected.required_event_kinds:
        if kind not in result.event_kinds:
            result.fail(f"missing event kind: {kind}")

    result.final_turn = state.clock.turn
    result.final_minutes = state.clock.minutes
    result.final_state = state
    logger.debug("Fixture replayed", fixture=fixture.name, passed=result.passed, checks=len(result.checks))
    return result


def run_fixture_directory(directory: Path) -> ReplaySummary:
    """Run every fixture under a directory.

    Raises:
        ReplayFixtureError: If the directory or any fixture cannot be loaded.
    """
    summary = ReplaySummary(results=[run_fixture(fixture) for _, fixture in collect_fixtures(directory)])
    logger.info("Replay run finished", total=summary.total, passed=summary.passed, failed=summary.failed)
    return summary


__all__ = [
    "CRITICAL_PATH_TAG",
    "ReplayResult",
    "Rollup",
    "ReplaySummary",
    "build_initial_state",
    "run_fixture",
    "run_fixture_directory",
]
