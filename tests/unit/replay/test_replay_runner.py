"""Tests for the replay runner and its summary."""

from __future__ import annotations

import json
from pathlib import Path

from omega_engine.replay.fixtures import ReplayFixture
from omega_engine.replay.runner import (
    ReplayResult,
    ReplaySummary,
    build_initial_state,
    run_fixture,
    run_fixture_directory,
)


def walk_fixture(**overrides: object) -> ReplayFixture:
    data = {
        "name": "walk",
        "family": "movement",
        "tags": ["critical_path"],
        "seed": 5,
        "initial": {"bounds": {"width": 7, "height": 7}, "player_position": {"x": 3, "y": 3}},
        "commands": ["Wait", {"Move": {"direction": "North"}}],
        "expected": {
            "turn": 2,
            "minutes": 10,
            "player_position": {"x": 3, "y": 2},
            "player_hp": 20,
            "monsters_alive": 0,
            "inventory_count": 0,
            "ground_item_count": 0,
            "required_event_kinds": ["waited", "moved"],
        },
    }
    data.update(overrides)
    return ReplayFixture.model_validate(data)


class TestBuildInitialState:
    """Tests for build_initial_state."""

    def test_fields_applied(self) -> None:
        fixture = walk_fixture(
            initial={
                "bounds": {"width": 3, "height": 2},
                "player_position": {"x": 0, "y": 0},
                "map_rows": ["...", ".#."],
                "site_aux_grid": [0, 3, 0, 0, 0, 0],
                "site_flags_grid": [0, 1],
                "monsters": [{"name": "rat", "position": {"x": 2, "y": 1}}],
                "ground_items": [{"name": "dagger", "position": {"x": 0, "y": 1}}],
                "gold": 10,
                "food": 2,
                "inventory_capacity": 4,
            }
        )

        state = build_initial_state(fixture)

        assert state.map_rows == ["...", ".#."]
        assert [cell.aux for cell in state.site_grid] == [0, 3, 0, 0, 0, 0]
        assert [cell.flags for cell in state.site_grid] == [0, 1, 0, 0, 0, 0]
        assert [monster.name for monster in state.monsters] == ["rat"]
        assert len(state.ground_items) == 1
        assert state.gold == 10
        assert state.food == 2
        assert state.bank_gold == 0
        assert state.player.inventory_capacity == 4


class TestRunFixture:
    """Tests for run_fixture."""

    def test_passes(self) -> None:
        result = run_fixture(walk_fixture())

        assert result.passed, result.checks
        assert result.final_turn == 2
        assert result.final_minutes == 10
        assert result.event_kinds == ["waited", "turn_advanced", "moved", "turn_advanced"]

    def test_mismatch_reported(self) -> None:
        fixture = walk_fixture()
        fixture.expected.turn = 9
        fixture.expected.required_event_kinds.append("picked_up")

        result = run_fixture(fixture)

        assert not result.passed
        assert result.checks == [
            "turn mismatch: expected 9, got 2",
            "missing event kind: picked_up",
        ]

    def test_schema_mismatch_skips_run(self) -> None:
        result = run_fixture(walk_fixture(contract_version=3))

        assert result.schema_mismatch
        assert not result.passed
        assert result.final_state is None
        assert result.checks == ["schema mismatch: contract_version=3 supported_max=1"]

    def test_deterministic(self) -> None:
        """Test two runs with a wandering monster end in the same world."""
        fixture = walk_fixture(
            initial={
                "bounds": {"width": 30, "height": 5},
                "player_position": {"x": 0, "y": 0},
                "monsters": [{"name": "rat", "position": {"x": 25, "y": 3}}],
            },
            commands=["Wait"] * 6,
        )

        first = run_fixture(fixture)
        second = run_fixture(fixture)

        assert first.final_state == second.final_state
        assert first.event_kinds == second.event_kinds


class TestReplaySummary:
    """Tests for ReplaySummary rollups."""

    def summary(self) -> ReplaySummary:
        return ReplaySummary(
            results=[
                ReplayResult(name="a", family="movement", tags=["critical_path"], source="s", active=True),
                ReplayResult(name="b", family="movement", tags=["shop"], source="s", active=False),
                ReplayResult(
                    name="c",
                    family="economy",
                    tags=["critical_path", "shop"],
                    source="s",
                    active=True,
                    passed=False,
                    checks=["gold mismatch: expected 1, got 2"],
                ),
            ]
        )

    def test_counts(self) -> None:
        summary = self.summary()

        assert (summary.total, summary.passed, summary.failed) == (3, 2, 1)
        assert (summary.active_total, summary.active_passed) == (2, 1)
        assert summary.schema_mismatch_total == 0

    def test_rollups(self) -> None:
        summary = self.summary()

        critical = summary.critical_path()
        assert (critical.total, critical.passed, critical.failed) == (2, 1, 1)
        assert [(r.key, r.total, r.passed) for r in summary.family_rollups()] == [
            ("economy", 1, 0),
            ("movement", 2, 2),
        ]
        assert [r.key for r in summary.tag_rollups()] == ["critical_path", "shop"]

    def test_empty_pass_rate(self) -> None:
        assert ReplaySummary().pass_rate == 0.0

    def test_markdown(self) -> None:
        report = self.summary().to_markdown()

        assert report.startswith("# Replay Regression Summary\n")
        assert "- Pass rate: 66.67%" in report
        assert "| movement | 2 | 2 | 0 |" in report
        assert "| shop | 2 | 1 | 1 |" in report
        assert "- c: gold mismatch: expected 1, got 2" in report


class TestRunDirectory:
    """Tests for run_fixture_directory."""

    def test_directory(self, tmp_path: Path) -> None:
        fixture = walk_fixture()
        (tmp_path / "walk.json").write_text(json.dumps(fixture.model_dump(mode="json")), encoding="utf-8")

        summary = run_fixture_directory(tmp_path)

        assert summary.total == 1
        assert summary.failed == 0
