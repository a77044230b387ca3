"""TestRail API v2 client.

Implements only the endpoints the reporter and its CLI need:
- add_run / add_results_for_cases / get_suites for publishing
- get_sections / add_section / add_case for case management

TestRail reports most failures as a JSON body with an ``error`` field, often
with a 400 status. Such bodies are handed to the ``on_error`` callback when one
is configured and raised as ``TestRailAPIError`` otherwise.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from railsync.core.exceptions import TestRailAPIError
from railsync.core.titles import suite_number
from railsync.logging import get_logger

logger = get_logger(__name__)

ErrorCallback = Callable[[str], None]


class TestRailClient:
    """Synchronous client for the TestRail REST API.

    Usage:
        client = TestRailClient("example.testrail.io", "user", "key", project_id=1)
        run = client.add_run(suite_id="3", name="Nightly", description="...")
        client.add_results_for_cases(run["id"], [{"case_id": 1, "status_id": 1}])
    """

    __test__ = False

    def __init__(
        self,
        domain: str,
        username: str,
        password: str,
        project_id: int | str,
        suite_id: str | None = None,
        assigned_to_id: int | None = None,
        on_error: ErrorCallback | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        if not domain:
            raise ValueError("TestRail domain is required")
        self.domain = domain
        self.project_id = project_id
        self.suite_id = suite_number(suite_id) if suite_id else None
        self.assigned_to_id = assigned_to_id
        self.on_error = on_error
        self.base = f"https://{domain}/index.php"
        self._auth = httpx.BasicAuth(username, password)
        self._http = http_client or httpx.Client(timeout=timeout)
        self._headers = {"Content-Type": "application/json"}

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> TestRailClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _url(self, endpoint: str) -> str:
        return f"{self.base}?/api/v2/{endpoint}"

    def run_url(self, run_id: int) -> str:
        return f"{self.base}?/runs/view/{run_id}"

    def _request(self, method: str, endpoint: str, body: dict[str, Any] | None = None) -> Any:
        """Make an authenticated request to the TestRail API.

        Args:
            method: HTTP method (GET or POST)
            endpoint: API endpoint, e.g. ``get_suites/1``
            body: JSON body for POST requests

        Returns:
            Decoded JSON response

        Raises:
            TestRailAPIError: On transport errors, on error bodies when no
                ``on_error`` callback is configured, and on non-JSON error
                responses
        """
        try:
            response = self._http.request(
                method,
                self._url(endpoint),
                json=body,
                auth=self._auth,
                headers=self._headers,
            )
        except httpx.RequestError as e:
            raise TestRailAPIError(f"Request failed: {e}") from e

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            message = str(data["error"])
            logger.error("TestRail request failed", endpoint=endpoint, error=message)
            if self.on_error:
                self.on_error(message)
                return data
            status_code = response.status_code if response.status_code >= 400 else None
            raise TestRailAPIError(message, status_code=status_code)

        if response.status_code >= 400:
            raise TestRailAPIError(
                f"Request failed: {response.text}",
                status_code=response.status_code,
            )

        return data

    def _get(self, endpoint: str) -> Any:
        return self._request("GET", endpoint)

    def _post(self, endpoint: str, body: dict[str, Any]) -> Any:
        return self._request("POST", endpoint, body)

    def _suite(self, suite_id: str | None) -> str | None:
        """Numeric suite id for the API; ``"S3"`` and ``"TS3"`` become ``"3"``."""
        return suite_number(suite_id) if suite_id else self.suite_id

    @staticmethod
    def _unwrap(data: Any, key: str) -> list[dict[str, Any]]:
        """Return the item list from a plain or paginated (TestRail 6.7+) response."""
        if isinstance(data, dict):
            return list(data.get(key, []))
        return list(data or [])

    def add_run(self, suite_id: str | None, name: str, description: str) -> dict[str, Any]:
        """Create a run including every case of the suite."""
        return self._post(
            f"add_run/{self.project_id}",
            {
                "suite_id": self._suite(suite_id),
                "name": name,
                "description": description,
                "assignedto_id": self.assigned_to_id,
                "include_all": True,
            },
        )

    def add_results_for_cases(self, run_id: int, results: list[dict[str, Any]]) -> Any:
        return self._post(f"add_results_for_cases/{run_id}", {"results": results})

    def get_suites(self) -> list[dict[str, Any]]:
        return self._unwrap(self._get(f"get_suites/{self.project_id}"), "suites")

    def get_sections(self, suite_id: str | None = None) -> list[dict[str, Any]]:
        suite = self._suite(suite_id)
        return self._unwrap(
            self._get(f"get_sections/{self.project_id}&suite_id={suite}"), "sections"
        )

    def add_section(
        self, name: str, suite_id: str | None = None, parent_id: int | None = None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"suite_id": self._suite(suite_id), "name": name}
        if parent_id:
            body["parent_id"] = parent_id
        return self._post(f"add_section/{self.project_id}", body)

    def add_case(self, section_id: int, title: str) -> dict[str, Any]:
        return self._post(f"add_case/{section_id}", {"title": title})
