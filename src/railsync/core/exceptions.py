"""Shared exceptions for the railsync package."""

from __future__ import annotations


class RailsyncError(Exception):
    """Base class for all railsync errors."""


class ConfigurationError(RailsyncError):
    """Raised when a required reporter option is missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        names = ", ".join(missing)
        super().__init__(
            f"Missing {names} value. Set TESTRAIL_{missing[0].upper()} "
            "or pass it to the reporter options."
        )


class ParseError(RailsyncError):
    """Raised when a test title lacks a token required for reporting."""


class RemoteError(RailsyncError):
    """Raised when TestRail rejects a request or a run id cannot be resolved."""


class TestRailAPIError(RemoteError):
    """Exception raised for TestRail API errors."""

    __test__ = False

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.status_code:
            return f"TestRail API Error ({self.status_code}): {self.message}"
        return f"TestRail API Error: {self.message}"


class SuiteNotFoundError(RemoteError):
    """Raised when a suite id does not exist in the project."""

    def __init__(self, suite_id: str):
        self.suite_id = suite_id
        super().__init__(f"Suite {suite_id} not found in project")
