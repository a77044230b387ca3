"""Wire settings, local state and the TestRail client into a reporter."""

from __future__ import annotations

from pathlib import Path

import httpx

from railsync.config import ReporterSettings
from railsync.reporter import TestRailReporter
from railsync.state.markers import FailureMarkerStore
from railsync.state.run_cache import RunIdCache, TimestampPin
from railsync.state.store import FileStore
from railsync.testrail.client import TestRailClient
from railsync.testrail.sync import TestRailSync

FAILED_TESTS_DIR = "failed_tests"
RUNS_DIR = "runs"


def get_failure_markers(state_dir: Path) -> FailureMarkerStore:
    return FailureMarkerStore(FileStore(Path(state_dir) / FAILED_TESTS_DIR))


def get_timestamp_pin(state_dir: Path) -> TimestampPin:
    return TimestampPin(FileStore(state_dir))


def get_run_cache(state_dir: Path, cycle: str) -> RunIdCache:
    return RunIdCache(FileStore(Path(state_dir) / RUNS_DIR), cycle=cycle)


def create_client(
    settings: ReporterSettings, http_client: httpx.Client | None = None
) -> TestRailClient:
    """
    Get a TestRail client for the configured project.

    Args:
        settings: Reporter settings.
        http_client: Optional pre-built httpx client (custom transport, proxies).

    Returns:
        TestRailClient bound to the configured domain and credentials.
    """
    return TestRailClient(
        domain=settings.domain,
        username=settings.username,
        password=settings.password,
        project_id=settings.project_id,
        suite_id=settings.suite_id,
        assigned_to_id=settings.assigned_to_id,
        http_client=http_client,
    )


def create_reporter(
    settings: ReporterSettings, http_client: httpx.Client | None = None
) -> TestRailReporter:
    """
    Get a reporter backed by file state under ``settings.state_dir``.

    The cycle timestamp is pinned here, so the first reporter of a cycle
    decides which cached run ids every later process reuses.
    """
    cycle = get_timestamp_pin(settings.state_dir).get_or_pin(settings.timestamp)
    sync = TestRailSync(
        client=create_client(settings, http_client),
        run_cache=get_run_cache(settings.state_dir, cycle),
    )
    return TestRailReporter(
        publisher=sync,
        markers=get_failure_markers(settings.state_dir),
        suite_id=settings.suite_id,
        run_name=settings.run_name,
        suppression=settings.suppression,
    )


def clear_state(state_dir: Path, everything: bool = False) -> None:
    """Start a new attempt cycle by dropping failure markers.

    With ``everything``, also forget the pinned timestamp and cached run ids
    so the next publish opens fresh runs.
    """
    get_failure_markers(state_dir).clear_all()
    if everything:
        get_timestamp_pin(state_dir).clear()
        RunIdCache(FileStore(Path(state_dir) / RUNS_DIR)).clear()
