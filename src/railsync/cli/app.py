"""Typer CLI for managing reporter state and TestRail cases."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from railsync.config import ReporterSettings, get_default_state_dir, load_settings
from railsync.core.exceptions import ConfigurationError, RemoteError
from railsync.dependencies import clear_state, create_client
from railsync.testrail.client import TestRailClient

app = typer.Typer(
    name="railsync",
    help="Report test results to TestRail",
    no_args_is_help=True,
)

StateDirOption = Annotated[
    Path | None,
    typer.Option(
        "--state-dir",
        help="Directory holding failure markers and cached run ids",
        envvar="TESTRAIL_STATE_DIR",
    ),
]


def _settings() -> ReporterSettings:
    try:
        return load_settings()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e


def _client() -> TestRailClient:
    return create_client(_settings())


def _fail(error: RemoteError) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


@app.command()
def clear(
    state_dir: StateDirOption = None,
    everything: Annotated[
        bool,
        typer.Option(
            "--all",
            help="Also forget the pinned cycle timestamp and cached run ids",
        ),
    ] = False,
) -> None:
    """Start a new attempt cycle by clearing failed-test markers."""
    clear_state(state_dir or get_default_state_dir(), everything=everything)
    typer.echo("Cleared reporter state" if everything else "Cleared failed test markers")


@app.command()
def suites() -> None:
    """List the project's suites."""
    try:
        with _client() as client:
            for suite in client.get_suites():
                typer.echo(f"S{suite.get('id')}\t{suite.get('name', '')}")
    except RemoteError as e:
        raise _fail(e) from e


@app.command()
def sections(
    suite_id: Annotated[
        str | None,
        typer.Option("-s", "--suite-id", help="Suite id (defaults to TESTRAIL_SUITE_ID)"),
    ] = None,
) -> None:
    """List the sections of a suite."""
    try:
        with _client() as client:
            for section in client.get_sections(suite_id):
                typer.echo(f"{section.get('id')}\t{section.get('name', '')}")
    except RemoteError as e:
        raise _fail(e) from e


@app.command("add-section")
def add_section(
    name: Annotated[str, typer.Argument(help="Section name")],
    suite_id: Annotated[
        str | None,
        typer.Option("-s", "--suite-id", help="Suite id (defaults to TESTRAIL_SUITE_ID)"),
    ] = None,
    parent_id: Annotated[
        int | None,
        typer.Option("--parent-id", help="Parent section id"),
    ] = None,
) -> None:
    """Create a section and print its id."""
    try:
        with _client() as client:
            section = client.add_section(name, suite_id=suite_id, parent_id=parent_id)
    except RemoteError as e:
        raise _fail(e) from e
    typer.echo(str(section.get("id")))


@app.command("add-case")
def add_case(
    section_id: Annotated[int, typer.Argument(help="Section to add the case to")],
    title: Annotated[str, typer.Argument(help="Case title")],
) -> None:
    """Create a case and print the title to use in the test name."""
    try:
        with _client() as client:
            case = client.add_case(section_id, title)
    except RemoteError as e:
        raise _fail(e) from e
    typer.echo(f"C{case.get('id')} {title}")
