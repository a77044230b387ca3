"""pytest adapter: report a pytest session to TestRail.

Enable with ``pytest -p railsync.pytest_plugin --testrail``. Case ids come from
the test docstring's first line or from ``@pytest.mark.testrail("C12", ...)``;
the suite comes from the node names, ``suite=`` on the marker, or
``--testrail-suite-id``.
"""

from __future__ import annotations

import pytest

from railsync import events
from railsync.config import load_settings
from railsync.core.models import ErrorInfo, TestEvent
from railsync.dependencies import create_reporter
from railsync.logging import configure_logging
from railsync.reporter import TestRailReporter

PLUGIN_NAME = "railsync-reporter"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("railsync", "TestRail reporting")
    group.addoption(
        "--testrail",
        action="store_true",
        default=False,
        help="Publish results to TestRail at the end of the session",
    )
    group.addoption("--testrail-suite-id", default=None, help="Fallback suite id, e.g. S3")
    group.addoption("--testrail-run-name", default=None, help="Prefix for created run names")
    group.addoption(
        "--testrail-browser",
        default=None,
        help="Browser label for every result (default: the 'browser' parameter)",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "testrail(*case_ids, suite=None): TestRail case ids and suite for this test",
    )
    if not config.getoption("--testrail"):
        return

    settings = load_settings(
        suite_id=config.getoption("--testrail-suite-id"),
        run_name=config.getoption("--testrail-run-name"),
    )
    configure_logging(log_level=settings.log_level, json_format=settings.log_json)
    plugin = TestRailPlugin(create_reporter(settings), browser=config.getoption("--testrail-browser"))
    config.pluginmanager.register(plugin, PLUGIN_NAME)


def _normalize_case_id(value: object) -> str:
    return f"C{int(str(value).upper().lstrip('TC'))}"


def case_title(item: pytest.Item) -> str:
    """Title carrying the case ids: docstring first line (or name) plus marker ids."""
    doc = getattr(getattr(item, "obj", None), "__doc__", None)
    title = doc.strip().splitlines()[0] if doc and doc.strip() else item.name
    marker = item.get_closest_marker("testrail")
    if marker and marker.args:
        title = " ".join([title, *(_normalize_case_id(arg) for arg in marker.args)])
    return title


def full_title(item: pytest.Item, title: str, browser: str | None = None) -> str:
    """Node chain plus title, decorated with the suite token and ``<-browser->``.

    An explicit ``suite=`` on the marker leads the title, so it wins over any
    suite token in the node names or the docstring.
    """
    parts: list[str] = []
    marker = item.get_closest_marker("testrail")
    if marker and marker.kwargs.get("suite"):
        parts.append(str(marker.kwargs["suite"]))

    parts.extend(node.name for node in item.listchain()[1:-1])
    parts.append(title)

    callspec = getattr(item, "callspec", None)
    browser = browser or (callspec.params.get("browser") if callspec else None)
    if browser:
        parts.append(f"<-{browser}->")
    return " ".join(parts)


class TestRailPlugin:
    """Translate pytest reports into reporter events."""

    __test__ = False

    def __init__(self, reporter: TestRailReporter, browser: str | None = None):
        self.reporter = reporter
        self.browser = browser
        self.bus = events.EventBus()
        reporter.attach(self.bus)

    @pytest.hookimpl(wrapper=True)
    def pytest_runtest_makereport(self, item: pytest.Item, call: pytest.CallInfo):
        report = yield
        title = case_title(item)
        report.testrail_title = title
        report.testrail_full_title = full_title(item, title, self.browser)
        report.testrail_error = call.excinfo.exconly() if call.excinfo else ""
        return report

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        title = getattr(report, "testrail_title", None)
        if title is None:
            return
        event = TestEvent(
            title=title,
            full_title=report.testrail_full_title,
            error=ErrorInfo(message=report.testrail_error, stack=report.longreprtext)
            if report.failed
            else None,
        )

        if report.when == "call" or (report.when == "setup" and not report.passed):
            if report.passed:
                self.bus.emit(events.PASS, event)
            elif report.failed:
                self.bus.emit(events.FAIL, event)
            else:
                self.bus.emit(events.SKIP, event)

    def pytest_sessionfinish(self, session: pytest.Session) -> None:
        try:
            self.bus.emit(events.RUN_END, session)
        finally:
            self.reporter.close()
