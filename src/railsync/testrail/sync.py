"""Publish aggregated results to TestRail runs.

Each (browser, suite) pair maps to one TestRail run per attempt cycle. The run
is created on the first publish and its id is cached locally so later
processes in the same cycle append to it.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from railsync.core.exceptions import RemoteError, SuiteNotFoundError
from railsync.core.models import ResultRecord, RunDescriptor
from railsync.logging import get_logger
from railsync.state.run_cache import RunIdCache
from railsync.testrail.client import TestRailClient

logger = get_logger(__name__)

DEFAULT_RUN_NAME = "railsync test rail reporter"
UNKNOWN_SUITE_NAME = "unknown suite"


def format_timestamp(executed_at: datetime | str) -> str:
    if isinstance(executed_at, datetime):
        return executed_at.strftime("%Y-%m-%d %H:%M:%S")
    return str(executed_at)


def build_description(name: str, descriptor: RunDescriptor) -> str:
    return (
        f"{name}\n"
        "Execution summary:\n"
        f"Passes: {descriptor.passed}\n"
        f"Fails: {descriptor.failed}\n"
        f"Pending: {descriptor.pending}\n"
        f"Total: {descriptor.total}\n"
    )


def group_by_browser(results: list[ResultRecord]) -> dict[str, list[ResultRecord]]:
    """Split records per browser label, keeping first-appearance order."""
    groups: dict[str, list[ResultRecord]] = {}
    for record in results:
        groups.setdefault(record.browser_name, []).append(record)
    return groups


class TestRailSync:
    """Resolve runs and push result batches for one suite at a time."""

    __test__ = False

    def __init__(self, client: TestRailClient, run_cache: RunIdCache):
        self.client = client
        self.run_cache = run_cache

    def close(self) -> None:
        self.client.close()

    def lookup_suite_display_name(self, suite_id: str) -> str:
        """Return the suite's name from the project's suite list.

        Raises:
            SuiteNotFoundError: If the project has no suite with this id.
        """
        for suite in self.client.get_suites():
            if str(suite.get("id")) == str(suite_id):
                return suite.get("name") or UNKNOWN_SUITE_NAME
        raise SuiteNotFoundError(suite_id)

    def resolve_or_create_run(
        self, browser_name: str, suite_id: str, name: str, description: str
    ) -> int:
        """Return the cached run id for (browser, suite), creating the run if needed.

        Raises:
            RemoteError: If neither the cache nor TestRail yields a run id.
        """
        run_id = self.run_cache.get(browser_name, suite_id)
        if run_id is not None:
            return run_id

        run = self.client.add_run(suite_id, name, description)
        created_id = run.get("id") if isinstance(run, dict) else None
        if created_id is not None:
            self.run_cache.set(browser_name, suite_id, int(created_id))
            logger.info("Created TestRail run", run_id=created_id, browser=browser_name)

        run_id = self.run_cache.get(browser_name, suite_id)
        if run_id is None:
            raise RemoteError(f"Couldn't get run id for {browser_name}, suite {suite_id}")
        return run_id

    def publish(
        self,
        executed_at: datetime | str,
        run_name: str | None,
        descriptor: RunDescriptor,
        suite_id: str,
        results: list[ResultRecord],
        callback: Callable[[Any], None] | None = None,
    ) -> dict[str, int]:
        """Publish one suite's results, one run and one batch per browser.

        Returns:
            Mapping of browser label to the run id that received its results.
        """
        if not results:
            raise ValueError("Cannot publish an empty result list")

        run_name = run_name or DEFAULT_RUN_NAME
        suite_name = self.lookup_suite_display_name(suite_id)
        timestamp = format_timestamp(executed_at)

        run_ids: dict[str, int] = {}
        for browser_name, records in group_by_browser(results).items():
            name = f"{run_name} on {browser_name}, {suite_name}: automated test run {timestamp}"
            description = build_description(name, descriptor)
            run_id = self.resolve_or_create_run(browser_name, suite_id, name, description)

            logger.info(f"Publishing results to {self.client.run_url(run_id)}")
            body = self.client.add_results_for_cases(
                run_id, [record.to_payload() for record in records]
            )
            if callback:
                callback(body)
            run_ids[browser_name] = run_id
        return run_ids
