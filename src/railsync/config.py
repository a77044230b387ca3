"""Reporter settings loaded from keyword options and TESTRAIL_* environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from railsync.core.exceptions import ConfigurationError
from railsync.reporter import SuppressionPolicy


def get_default_state_dir() -> Path:
    """Get the default state directory (XDG-compliant).

    Returns:
        Path to ~/.cache/railsync
    """
    return Path.home() / ".cache" / "railsync"


class ReporterSettings(BaseSettings):
    """Settings for one reporter instance."""

    model_config = SettingsConfigDict(
        env_prefix="TESTRAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # TestRail connection
    domain: str
    username: str
    password: str
    project_id: int

    # Attempt cycle; only the first value written is ever used
    timestamp: str

    # Optional
    suite_id: str | None = None
    assigned_to_id: int | None = None
    run_name: str | None = None

    # Local state
    state_dir: Path = Field(default_factory=get_default_state_dir)
    suppression: SuppressionPolicy = SuppressionPolicy.ANY_MARKED

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(**options: Any) -> ReporterSettings:
    """
    Build settings from explicit options, falling back to the environment.

    Options set to None are treated as absent.

    Raises:
        ConfigurationError: If any required option is missing, naming each one.
    """
    values = {key: value for key, value in options.items() if value is not None}
    try:
        # pydantic-settings fills required fields from env vars at runtime
        return ReporterSettings(**values)  # type: ignore[call-arg]
    except ValidationError as e:
        missing = [str(err["loc"][0]) for err in e.errors() if err["type"] == "missing"]
        if missing:
            raise ConfigurationError(missing) from e
        raise
