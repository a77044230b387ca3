"""railsync - push test results to TestRail from any test runner."""

__version__ = "0.3.0"

from railsync.core.models import (
    ErrorInfo,
    ResultRecord,
    RunDescriptor,
    Status,
    TestEvent,
)
from railsync.reporter import SuppressionPolicy, TestRailReporter

__all__ = [
    "ErrorInfo",
    "ResultRecord",
    "RunDescriptor",
    "Status",
    "SuppressionPolicy",
    "TestEvent",
    "TestRailReporter",
]
