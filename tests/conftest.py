"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import structlog

from railsync.reporter import TestRailReporter
from railsync.state.markers import FailureMarkerStore
from railsync.state.run_cache import RunIdCache
from railsync.state.store import MemoryStore
from railsync.testrail.client import TestRailClient
from tests.factories import RecordingPublisher

TESTRAIL_ENV = {
    "TESTRAIL_DOMAIN": "example.testrail.io",
    "TESTRAIL_USERNAME": "qa@example.com",
    "TESTRAIL_PASSWORD": "api-key",
    "TESTRAIL_PROJECT_ID": "7",
    "TESTRAIL_TIMESTAMP": "1700000000",
}


@pytest.fixture
def testrail_env(monkeypatch, tmp_path) -> dict[str, str]:
    """Complete TESTRAIL_* environment with state kept under tmp_path."""
    env = {**TESTRAIL_ENV, "TESTRAIL_STATE_DIR": str(tmp_path / "state")}
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture
def clean_env(monkeypatch, tmp_path) -> None:
    """Remove TESTRAIL_* variables and any .env file from the test's view."""
    for key in [*TESTRAIL_ENV, "TESTRAIL_STATE_DIR", "TESTRAIL_SUITE_ID"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def markers() -> FailureMarkerStore:
    return FailureMarkerStore(MemoryStore())


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def reporter(publisher, markers) -> TestRailReporter:
    return TestRailReporter(publisher=publisher, markers=markers)


@pytest.fixture
def run_cache() -> RunIdCache:
    return RunIdCache(MemoryStore(), cycle="1700000000")


class FakeTestRail:
    """Records requests and answers them from a route table.

    Routes map ``"METHOD endpoint-prefix"`` to a JSON-able body or a
    callable receiving the request.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = routes or {}
        self.requests: list[httpx.Request] = []

    def calls(self, prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if self.endpoint(r).startswith(prefix)]

    @staticmethod
    def endpoint(request: httpx.Request) -> str:
        return request.url.query.decode().removeprefix("/api/v2/")

    @staticmethod
    def body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = self.endpoint(request)
        for route, answer in self.routes.items():
            method, prefix = route.split(" ", 1)
            if request.method == method and endpoint.startswith(prefix):
                if callable(answer):
                    answer = answer(request)
                if isinstance(answer, httpx.Response):
                    return answer
                return httpx.Response(200, json=answer)
        return httpx.Response(404, json={"error": f"Unknown endpoint {endpoint}"})


@pytest.fixture
def fake_testrail() -> FakeTestRail:
    return FakeTestRail(
        {
            "GET get_suites": [{"id": 10, "name": "Checkout"}, {"id": 11, "name": None}],
            "GET get_sections": [],
            "POST add_section": {"id": 1},
            "POST add_run": {"id": 501},
            "POST add_results_for_cases": [{"id": 1}],
        }
    )


@pytest.fixture
def make_client(fake_testrail) -> Callable[..., TestRailClient]:
    def _make(**kwargs: Any) -> TestRailClient:
        http_client = httpx.Client(transport=httpx.MockTransport(fake_testrail))
        return TestRailClient(
            domain="example.testrail.io",
            username="qa@example.com",
            password="api-key",
            project_id=7,
            http_client=http_client,
            **kwargs,
        )

    return _make


@pytest.fixture
def reset_structlog():
    """Undo configure_logging calls so later tests log to the live stdout."""
    yield
    structlog.reset_defaults()
