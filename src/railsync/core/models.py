"""Data model shared by the aggregator and the TestRail sync layer.

Events come from the host test runner and are read-only. Result records are
what ends up in a TestRail ``add_results_for_cases`` batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Status(IntEnum):
    """TestRail's built-in result statuses.

    Only PASSED, FAILED and RETEST are ever reported; the rest are listed so
    ids coming back from the API can be read.
    """

    PASSED = 1
    BLOCKED = 2
    UNTESTED = 3
    RETEST = 4
    FAILED = 5


@dataclass(frozen=True)
class ErrorInfo:
    """Error attached to a failing test."""

    message: str
    stack: str = ""


@dataclass(frozen=True)
class TestEvent:
    """A single test outcome as seen by the reporter.

    ``title`` is the test's own name and carries the case ids; ``full_title``
    includes the enclosing suites plus the ``<-browser->`` decoration.
    """

    __test__ = False

    title: str
    full_title: str
    error: ErrorInfo | None = None


@dataclass(frozen=True)
class ResultRecord:
    """One result for one TestRail case."""

    case_id: int
    status: Status
    comment: str
    browser_name: str

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the shape expected by ``add_results_for_cases``."""
        return {
            "case_id": self.case_id,
            "status_id": int(self.status),
            "comment": self.comment,
        }


@dataclass(frozen=True)
class RunDescriptor:
    """Run-wide counters embedded in every run description."""

    passed: int
    failed: int
    pending: int

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.pending

    def summary(self) -> dict[str, int]:
        """Get summary statistics for the run."""
        return {
            "passed": self.passed,
            "failed": self.failed,
            "pending": self.pending,
            "total": self.total,
        }
