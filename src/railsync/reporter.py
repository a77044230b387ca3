"""Aggregate test outcomes per TestRail suite and publish them at run end.

The reporter owns all run state (counters and per-suite buckets). One
instance is built per run and handed its collaborators explicitly: a failure
marker store for stale-pass suppression and a publisher for the remote side.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from railsync import events
from railsync.core.models import ResultRecord, RunDescriptor, Status, TestEvent
from railsync.core.titles import (
    extract_browser_name,
    extract_case_ids,
    extract_suite_id,
    suite_number,
)
from railsync.logging import get_logger
from railsync.state.markers import FailureMarkerStore

logger = get_logger(__name__)

NO_RESULTS_WARNING = (
    "No testcases were matched. Ensure that your tests are declared correctly "
    "and match Cxxx"
)


class SuppressionPolicy(Enum):
    """How failure markers suppress later passes within a cycle."""

    # Drop the whole pass event when any of its case ids is marked.
    ANY_MARKED = "any"
    # Drop only the marked case ids; report the rest.
    PER_CASE = "case"


class Publisher(Protocol):
    """Remote side of the reporter, see ``railsync.testrail.sync.TestRailSync``."""

    def publish(
        self,
        executed_at: datetime,
        run_name: str | None,
        descriptor: RunDescriptor,
        suite_id: str,
        results: list[ResultRecord],
    ) -> Any: ...


class TestRailReporter:
    """Event-driven aggregator of pass/fail/skip results.

    Passes are prepended to their suite bucket and failures and skips are
    appended, so within one batch a failure is submitted after any pass for
    the same case.
    """

    __test__ = False

    def __init__(
        self,
        publisher: Publisher,
        markers: FailureMarkerStore,
        suite_id: str | None = None,
        run_name: str | None = None,
        suppression: SuppressionPolicy = SuppressionPolicy.ANY_MARKED,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.publisher = publisher
        self.markers = markers
        self.suite_id = suite_id
        self.run_name = run_name
        self.suppression = suppression
        self._clock = clock

        self.passed = 0
        self.failed = 0
        self.pending = 0
        self.results: dict[str, list[ResultRecord]] = {}

    def attach(self, source: events.EventSource) -> TestRailReporter:
        """Register the lifecycle handlers on ``source``."""
        source.on(events.PASS, self.on_test_pass)
        source.on(events.FAIL, self.on_test_fail)
        source.on(events.SKIP, self.on_test_skip)
        source.on(events.RUN_END, self.on_run_end)
        return self

    def _resolve_suite(self, event: TestEvent) -> str | None:
        return extract_suite_id(event.full_title) or self.suite_id

    def _records(
        self, event: TestEvent, case_ids: list[int], status: Status, comment: str
    ) -> list[ResultRecord]:
        if not case_ids:
            return []
        browser_name = extract_browser_name(event.full_title)
        return [
            ResultRecord(
                case_id=case_id,
                status=status,
                comment=comment,
                browser_name=browser_name,
            )
            for case_id in case_ids
        ]

    def _reportable_passes(self, case_ids: list[int]) -> list[int] | None:
        """Return the case ids a pass may report, or None to drop the event."""
        if self.suppression is SuppressionPolicy.ANY_MARKED:
            return None if self.markers.any_marked(case_ids) else case_ids

        remaining = [case_id for case_id in case_ids if not self.markers.is_marked(case_id)]
        if case_ids and not remaining:
            return None
        return remaining

    def on_test_pass(self, event: TestEvent) -> None:
        case_ids = self._reportable_passes(extract_case_ids(event.title))
        if case_ids is None:
            logger.debug("Suppressed pass for previously failed case", title=event.title)
            return

        self.passed += 1
        suite_id = self._resolve_suite(event)
        if not suite_id:
            return

        records = self._records(event, case_ids, Status.PASSED, event.title)
        if records:
            bucket = self.results.setdefault(suite_id, [])
            bucket[:0] = records

    def on_test_fail(self, event: TestEvent) -> None:
        case_ids = extract_case_ids(event.title)
        for case_id in case_ids:
            self.markers.mark(case_id)

        self.failed += 1
        suite_id = self._resolve_suite(event)
        if not suite_id:
            return

        message = event.error.message if event.error else ""
        stack = event.error.stack if event.error else ""
        comment = f"{event.title}\n{message}\n{stack}"
        records = self._records(event, case_ids, Status.FAILED, comment)
        if records:
            self.results.setdefault(suite_id, []).extend(records)

    def on_test_skip(self, event: TestEvent) -> None:
        self.pending += 1
        suite_id = self._resolve_suite(event)
        if not suite_id:
            return

        case_ids = extract_case_ids(event.title)
        records = self._records(event, case_ids, Status.RETEST, event.title)
        if records:
            self.results.setdefault(suite_id, []).extend(records)

    def descriptor(self) -> RunDescriptor:
        return RunDescriptor(passed=self.passed, failed=self.failed, pending=self.pending)

    def summary(self) -> dict[str, int]:
        return self.descriptor().summary()

    def on_run_end(self, *_: Any) -> None:
        """Publish every populated suite bucket, one suite at a time.

        Remote errors propagate and abort the remaining suites.
        """
        if not self.results:
            logger.warning(NO_RESULTS_WARNING, **self.summary())
            return

        executed_at = self._clock()
        descriptor = self.descriptor()
        for suite_id, records in self.results.items():
            self.publisher.publish(
                executed_at,
                self.run_name,
                descriptor,
                suite_number(suite_id),
                list(records),
            )

    def close(self) -> None:
        """Release the publisher's connection, when it holds one."""
        close = getattr(self.publisher, "close", None)
        if callable(close):
            close()
