"""Tests for logger configuration and opt-out management."""

import json

import pytest
from pydantic import ValidationError

from eventlog.config import (
    DEFAULT_HOST,
    LoggerConfig,
    get_settings_path,
    get_status,
    is_ci_environment,
    is_tracking_enabled,
    set_tracking_enabled,
)


class TestLoggerConfig:
    """Test the LoggerConfig model."""

    def test_defaults(self):
        config = LoggerConfig()
        assert config.project_token is None
        assert config.shared_container_identifier is None
        assert config.default_properties == {}
        assert config.host == DEFAULT_HOST
        assert config.enabled is True
        assert config.include_system_properties is False

    def test_empty_values_accepted(self):
        config = LoggerConfig(project_token="", shared_container_identifier="", default_properties=None)
        assert config.project_token == ""
        assert config.shared_container_identifier == ""
        assert config.default_properties == {}

    def test_bool_coercion_from_strings(self):
        assert LoggerConfig(enabled="false").enabled is False
        assert LoggerConfig(enabled="YES").enabled is True
        assert LoggerConfig(debug="1").debug is True
        assert LoggerConfig(debug="off").debug is False

    def test_default_properties_are_copied(self):
        source = {"plan": "pro"}
        config = LoggerConfig(default_properties=source)
        source["plan"] = "free"
        assert config.default_properties == {"plan": "pro"}

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("EVENTLOG_PROJECT_TOKEN", "abc")
        monkeypatch.setenv("EVENTLOG_SHARED_CONTAINER", "group.example")
        monkeypatch.setenv("EVENTLOG_HOST", "https://eu.i.posthog.com")
        monkeypatch.setenv("EVENTLOG_DEBUG", "true")
        monkeypatch.setenv("EVENTLOG_DEFAULT_PROPERTIES", '{"app": "reader", "build": 42}')

        config = LoggerConfig.from_env()
        assert config.project_token == "abc"
        assert config.shared_container_identifier == "group.example"
        assert config.host == "https://eu.i.posthog.com"
        assert config.debug is True
        assert config.default_properties == {"app": "reader", "build": 42}

    def test_from_env_ignores_malformed_properties(self, monkeypatch):
        monkeypatch.setenv("EVENTLOG_DEFAULT_PROPERTIES", "not json")
        assert LoggerConfig.from_env().default_properties == {}

        monkeypatch.setenv("EVENTLOG_DEFAULT_PROPERTIES", "[1, 2]")
        assert LoggerConfig.from_env().default_properties == {}

    def test_from_env_empty(self):
        assert LoggerConfig.from_env() == LoggerConfig()


class TestTrackingOptOut:
    """Test persistent opt-out and environment overrides."""

    def test_enabled_by_default(self):
        assert is_tracking_enabled() is True

    def test_disabled_by_do_not_track(self, monkeypatch):
        monkeypatch.setenv("DO_NOT_TRACK", "1")
        assert is_tracking_enabled() is False

    def test_disabled_by_eventlog_env(self, monkeypatch):
        monkeypatch.setenv("EVENTLOG_DISABLED", "1")
        assert is_tracking_enabled() is False

    def test_set_tracking_enabled(self):
        set_tracking_enabled(False)
        assert is_tracking_enabled() is False

        set_tracking_enabled(True)
        assert is_tracking_enabled() is True

    def test_set_tracking_preserves_other_keys(self):
        settings_path = get_settings_path()
        settings_path.write_text(json.dumps({"note": "keep me"}))

        set_tracking_enabled(False)

        assert json.loads(settings_path.read_text()) == {"note": "keep me", "enabled": False}

    def test_settings_file_malformed(self):
        get_settings_path().write_text("not valid json")
        assert is_tracking_enabled() is True

    def test_settings_path_under_home(self, isolated_home):
        assert get_settings_path() == isolated_home / ".eventlog" / "settings.json"


class TestStatus:
    """Test status reporting."""

    def test_status_enabled(self):
        status = get_status(LoggerConfig(project_token="abc", shared_container_identifier="grp"))
        assert status["enabled"] is True
        assert status["disabled_reason"] is None
        assert status["project_token_set"] is True
        assert status["shared_container_identifier"] == "grp"
        assert len(status["distinct_id"]) == 36
        assert status["is_ci"] is False

    def test_status_disabled_by_do_not_track(self, monkeypatch):
        monkeypatch.setenv("DO_NOT_TRACK", "1")

        status = get_status(LoggerConfig())
        assert status["enabled"] is False
        assert status["disabled_reason"] == "DO_NOT_TRACK environment variable"
        assert status["distinct_id"] is None

    def test_status_disabled_by_settings(self):
        set_tracking_enabled(False)

        status = get_status(LoggerConfig())
        assert status["enabled"] is False
        assert status["disabled_reason"].startswith("User settings")

    def test_status_disabled_by_config(self):
        status = get_status(LoggerConfig(enabled=False))
        assert status["disabled_reason"] == "Logger configuration"

    def test_status_without_token(self):
        assert get_status(LoggerConfig())["project_token_set"] is False


def test_is_ci_environment(monkeypatch):
    """Test CI environment detection."""
    assert is_ci_environment() is False

    for ci_var in ["CI", "GITHUB_ACTIONS", "GITLAB_CI", "CIRCLECI"]:
        monkeypatch.setenv(ci_var, "true")
        assert is_ci_environment() is True
        monkeypatch.delenv(ci_var)


def test_unknown_field_rejected():
    """Test that a misspelled field is an error rather than silently dropped."""
    with pytest.raises(ValidationError):
        LoggerConfig(project_tokn="abc")
