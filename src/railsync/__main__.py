"""Allow running railsync as a module: python -m railsync."""

from railsync.cli import main

if __name__ == "__main__":
    main()
