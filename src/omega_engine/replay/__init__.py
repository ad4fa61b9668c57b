"""Fixture replay for regression testing.

A fixture is (seed, starting world, commands, expectations). Replaying
it through ``step`` must reproduce the same final world and event kinds
on every run.
"""

from omega_engine.replay.fixtures import (
    REPLAY_CONTRACT_VERSION,
    ReplayExpected,
    ReplayFixture,
    ReplayInitialState,
    collect_fixtures,
    load_fixture,
)
from omega_engine.replay.runner import (
    ReplayResult,
    ReplaySummary,
    Rollup,
    build_initial_state,
    run_fixture,
    run_fixture_directory,
)


__all__ = [
    "REPLAY_CONTRACT_VERSION",
    "ReplayExpected",
    "ReplayFixture",
    "ReplayInitialState",
    "collect_fixtures",
    "load_fixture",
    "ReplayResult",
    "ReplaySummary",
    "Rollup",
    "build_initial_state",
    "run_fixture",
    "run_fixture_directory",
]
