"""Logger configuration and opt-out management."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# PostHog configuration
DEFAULT_HOST = "https://us.i.posthog.com"  # US region


class LoggerConfig(BaseModel):
    """Event logger configuration.

    Holds the three values the embedding application sets before logging
    (project token, shared container identifier, default properties) plus
    delivery settings for the vendor SDK.
    """

    ENV_PREFIX: ClassVar[str] = "EVENTLOG_"

    model_config = ConfigDict(extra="forbid")

    project_token: Optional[str] = Field(
        default=None,
        description="Vendor project key. Empty or None disables delivery",
    )
    shared_container_identifier: Optional[str] = Field(
        default=None,
        description="Grouping key shared by related processes for persisted state",
    )
    default_properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Properties merged into every event (call-site values win)",
    )
    host: str = Field(
        default=DEFAULT_HOST,
        description="Vendor ingestion host",
    )
    enabled: bool = Field(
        default=True,
        description="Enable event delivery (DO_NOT_TRACK and EVENTLOG_DISABLED always win)",
    )
    debug: bool = Field(
        default=False,
        description="Turn on vendor SDK debug logging",
    )
    include_system_properties: bool = Field(
        default=False,
        description="Attach os, python and library versions to every event",
    )

    @field_validator("enabled", "debug", "include_system_properties", mode="before")
    @classmethod
    def validate_bool(cls, v: Any) -> bool:
        """
        Convert various string representations to boolean.

        Truthy values: "true", "1", "yes", "on" (case-insensitive)
        Falsy values: "false", "0", "no", "off", or any other string
        """
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("default_properties", mode="before")
    @classmethod
    def validate_default_properties(cls, v: Any) -> dict[str, Any]:
        """Treat None as an empty mapping and always keep a private copy."""
        if v is None:
            return {}
        return dict(v)

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """Build a config from EVENTLOG_* environment variables.

        Returns:
            LoggerConfig with any values found in the environment
        """
        values: dict[str, Any] = {}

        token = os.getenv(f"{cls.ENV_PREFIX}PROJECT_TOKEN")
        if token is not None:
            values["project_token"] = token

        container = os.getenv(f"{cls.ENV_PREFIX}SHARED_CONTAINER")
        if container is not None:
            values["shared_container_identifier"] = container

        host = os.getenv(f"{cls.ENV_PREFIX}HOST")
        if host:
            values["host"] = host

        debug = os.getenv(f"{cls.ENV_PREFIX}DEBUG")
        if debug is not None:
            values["debug"] = debug

        raw_properties = os.getenv(f"{cls.ENV_PREFIX}DEFAULT_PROPERTIES")
        if raw_properties:
            try:
                properties = json.loads(raw_properties)
            except json.JSONDecodeError as e:
                logger.debug(f"Ignoring malformed {cls.ENV_PREFIX}DEFAULT_PROPERTIES: {e}")
            else:
                if isinstance(properties, dict):
                    values["default_properties"] = properties
                else:
                    logger.debug(f"{cls.ENV_PREFIX}DEFAULT_PROPERTIES is not a JSON object")

        return cls(**values)


def get_config_dir() -> Path:
    """Get the directory for event logger state.

    Returns:
        Path to ~/.eventlog directory
    """
    config_dir = Path.home() / ".eventlog"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_path() -> Path:
    """Get the path to the persistent settings file.

    Returns:
        Path to settings.json
    """
    return get_config_dir() / "settings.json"


def _read_settings() -> dict:
    settings_path = get_settings_path()
    if not settings_path.exists():
        return {}
    try:
        settings = json.loads(settings_path.read_text())
    except json.JSONDecodeError:
        return {}
    return settings if isinstance(settings, dict) else {}


def is_ci_environment() -> bool:
    """Check if running in a CI/CD environment.

    Returns:
        True if running in CI
    """
    ci_env_vars = [
        "CI",
        "CONTINUOUS_INTEGRATION",
        "BUILD_NUMBER",
        "GITHUB_ACTIONS",
        "GITLAB_CI",
        "CIRCLECI",
        "TRAVIS",
        "JENKINS_HOME",
    ]
    return any(os.getenv(var) for var in ci_env_vars)


def is_tracking_enabled() -> bool:
    """Check if event delivery is allowed on this machine.

    Tracking is disabled if:
    1. DO_NOT_TRACK environment variable is set
    2. EVENTLOG_DISABLED environment variable is set
    3. User has explicitly disabled via settings file

    Returns:
        True if events should be delivered
    """
    if os.getenv("DO_NOT_TRACK"):
        return False

    if os.getenv("EVENTLOG_DISABLED"):
        return False

    # A malformed settings file reads as empty, so it counts as enabled
    return bool(_read_settings().get("enabled", True))


def set_tracking_enabled(enabled: bool) -> None:
    """Enable or disable tracking persistently.

    Args:
        enabled: Whether to enable tracking
    """
    settings = _read_settings()
    settings["enabled"] = enabled
    get_settings_path().write_text(json.dumps(settings, indent=2))


def get_status(config: Optional[LoggerConfig] = None) -> dict:
    """Get current tracking status and configuration.

    Args:
        config: Logger configuration to report on (defaults to the environment)

    Returns:
        Dictionary with tracking status information
    """
    from eventlog.identity import get_distinct_id

    if config is None:
        config = LoggerConfig.from_env()

    enabled = is_tracking_enabled() and config.enabled
    settings_path = get_settings_path()

    disabled_reason: Optional[str] = None
    if not enabled:
        if os.getenv("DO_NOT_TRACK"):
            disabled_reason = "DO_NOT_TRACK environment variable"
        elif os.getenv("EVENTLOG_DISABLED"):
            disabled_reason = "EVENTLOG_DISABLED environment variable"
        elif not config.enabled:
            disabled_reason = "Logger configuration"
        else:
            disabled_reason = f"User settings ({settings_path})"

    return {
        "enabled": enabled,
        "disabled_reason": disabled_reason,
        "settings_path": str(settings_path),
        "project_token_set": bool(config.project_token),
        "shared_container_identifier": config.shared_container_identifier,
        "distinct_id": get_distinct_id(config.shared_container_identifier) if enabled else None,
        "is_ci": is_ci_environment(),
    }
