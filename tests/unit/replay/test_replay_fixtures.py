"""Tests for the replay fixture format."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from omega_engine.core.exceptions import ReplayFixtureError
from omega_engine.models.commands import Legacy, Move, Wait
from omega_engine.models.enums import Direction
from omega_engine.replay.fixtures import (
    ReplayFixture,
    collect_fixtures,
    load_fixture,
    normalize_command,
)


def fixture_data(**overrides: object) -> dict:
    data = {
        "name": "sample",
        "seed": 3,
        "initial": {"bounds": {"width": 5, "height": 5}, "player_position": {"x": 2, "y": 2}},
        "expected": {
            "turn": 0,
            "minutes": 0,
            "player_position": {"x": 2, "y": 2},
            "player_hp": 20,
            "monsters_alive": 0,
            "inventory_count": 0,
            "ground_item_count": 0,
        },
    }
    data.update(overrides)
    return data


class TestNormalizeCommand:
    """Tests for normalize_command."""

    def test_bare_tag(self) -> None:
        assert normalize_command("Wait") == {"kind": "wait"}

    def test_tagged_with_fields(self) -> None:
        assert normalize_command({"Move": {"direction": "North"}}) == {"kind": "move", "direction": "north"}

    def test_legacy_token_case_kept(self) -> None:
        assert normalize_command({"Legacy": {"token": "Q"}}) == {"kind": "legacy", "token": "Q"}

    def test_kind_form_untouched(self) -> None:
        command = {"kind": "drop", "slot": 0}

        assert normalize_command(command) is command


class TestReplayFixture:
    """Tests for ReplayFixture validation."""

    def test_defaults(self) -> None:
        fixture = ReplayFixture.model_validate(fixture_data())

        assert fixture.contract_version == 1
        assert fixture.active
        assert fixture.source == "legacy_handcrafted"
        assert fixture.family == "unclassified"
        assert fixture.schema_supported

    def test_mixed_command_forms(self) -> None:
        fixture = ReplayFixture.model_validate(
            fixture_data(commands=["Wait", {"Move": {"direction": "East"}}, {"kind": "legacy", "token": "Q"}])
        )

        assert fixture.commands == [Wait(), Move(direction=Direction.EAST), Legacy(token="Q")]

    def test_tags_sorted_and_unique(self) -> None:
        fixture = ReplayFixture.model_validate(fixture_data(tags=["shop", "critical_path", "shop", " "]))

        assert fixture.tags == ["critical_path", "shop"]
        assert fixture.has_tag("shop")

    def test_blank_family_and_source(self) -> None:
        fixture = ReplayFixture.model_validate(fixture_data(family="  ", source=""))

        assert fixture.family == "unclassified"
        assert fixture.source == "legacy_handcrafted"

    def test_newer_contract_unsupported(self) -> None:
        fixture = ReplayFixture.model_validate(fixture_data(contract_version=2))

        assert not fixture.schema_supported


class TestLoading:
    """Tests for load_fixture and collect_fixtures."""

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "sample.json"
        path.write_text(json.dumps(fixture_data()), encoding="utf-8")

        assert load_fixture(path).name == "sample"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReplayFixtureError, match="failed to read fixture"):
            load_fixture(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(ReplayFixtureError, match="invalid fixture json"):
            load_fixture(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(fixture_data(seed=-1)), encoding="utf-8")

        with pytest.raises(ReplayFixtureError) as exc_info:
            load_fixture(path)

        assert exc_info.value.details["fixture"] == str(path)

    def test_collect_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "nested").mkdir()
        (tmp_path / "b.json").write_text(json.dumps(fixture_data(name="b")), encoding="utf-8")
        (tmp_path / "nested" / "a.json").write_text(json.dumps(fixture_data(name="a")), encoding="utf-8")

        names = [fixture.name for _, fixture in collect_fixtures(tmp_path)]

        assert names == ["b", "a"]

    def test_collect_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ReplayFixtureError):
            collect_fixtures(tmp_path / "nope")
