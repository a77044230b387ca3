"""Tests for the Typer CLI."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from railsync.cli.app import app
from railsync.core.exceptions import TestRailAPIError
from railsync.dependencies import get_failure_markers

runner = CliRunner()


class TestHelpCommands:
    def test_main_help(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("clear", "suites", "sections", "add-section", "add-case"):
            assert command in result.output


class TestClear:
    def test_clear_removes_markers(self, tmp_path) -> None:
        markers = get_failure_markers(tmp_path)
        markers.mark(5)

        result = runner.invoke(app, ["clear", "--state-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Cleared failed test markers" in result.output
        assert not markers.is_marked(5)

    def test_clear_all_removes_timestamp(self, tmp_path) -> None:
        (tmp_path / "timestamp").write_text("1700000000")

        result = runner.invoke(app, ["clear", "--all", "--state-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert not (tmp_path / "timestamp").exists()

    def test_clear_reads_state_dir_from_env(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("TESTRAIL_STATE_DIR", str(tmp_path))
        get_failure_markers(tmp_path).mark(5)

        result = runner.invoke(app, ["clear"])

        assert result.exit_code == 0
        assert not get_failure_markers(tmp_path).is_marked(5)


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.__enter__.return_value = client
    with patch("railsync.cli.app.create_client", return_value=client):
        yield client


@pytest.mark.usefixtures("testrail_env")
class TestRemoteCommands:
    def test_suites_lists_ids_and_names(self, mock_client) -> None:
        mock_client.get_suites.return_value = [{"id": 10, "name": "Checkout"}]

        result = runner.invoke(app, ["suites"])

        assert result.exit_code == 0
        assert "S10\tCheckout" in result.output
        mock_client.__exit__.assert_called_once()

    def test_sections_passes_suite(self, mock_client) -> None:
        mock_client.get_sections.return_value = [{"id": 3, "name": "Login"}]

        result = runner.invoke(app, ["sections", "--suite-id", "10"])

        assert result.exit_code == 0
        mock_client.get_sections.assert_called_once_with("10")
        assert "3\tLogin" in result.output

    def test_add_section_prints_id(self, mock_client) -> None:
        mock_client.add_section.return_value = {"id": 9}

        result = runner.invoke(app, ["add-section", "Login", "-s", "10", "--parent-id", "2"])

        assert result.exit_code == 0
        mock_client.add_section.assert_called_once_with("Login", suite_id="10", parent_id=2)
        assert result.output.strip() == "9"

    def test_add_case_prints_titled_case(self, mock_client) -> None:
        mock_client.add_case.return_value = {"id": 77}

        result = runner.invoke(app, ["add-case", "9", "Login works"])

        assert result.exit_code == 0
        assert "C77 Login works" in result.output

    def test_remote_error_exits_1(self, mock_client) -> None:
        mock_client.get_suites.side_effect = TestRailAPIError("No access", 403)

        result = runner.invoke(app, ["suites"])

        assert result.exit_code == 1
        mock_client.__exit__.assert_called_once()


@pytest.mark.usefixtures("clean_env")
def test_missing_configuration_exits_2() -> None:
    result = runner.invoke(app, ["suites"])

    assert result.exit_code == 2


@pytest.mark.usefixtures("testrail_env")
def test_sections_strips_suite_marker(fake_testrail, make_client) -> None:
    fake_testrail.routes["GET get_sections"] = [{"id": 3, "name": "Login"}]
    client = make_client()

    with patch("railsync.cli.app.create_client", return_value=client):
        result = runner.invoke(app, ["sections", "-s", "S10"])

    assert result.exit_code == 0
    assert fake_testrail.endpoint(fake_testrail.requests[0]) == "get_sections/7&suite_id=10"
    assert client._http.is_closed
