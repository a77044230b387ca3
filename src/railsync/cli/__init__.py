"""CLI package for railsync."""

from railsync.cli.app import app


def main() -> None:
    """Main entry point for the CLI."""
    app(prog_name="railsync")


__all__ = ["app", "main"]
