"""
Root pytest configuration for eventlog.

Provides fixtures for CLI testing, an isolated home directory and a
recording transport.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from eventlog import client as client_module
from eventlog.client import EventLogger
from eventlog.config import LoggerConfig
from eventlog.testing import RecordingTransport

_ENV_VARS = [
    "DO_NOT_TRACK",
    "EVENTLOG_DISABLED",
    "EVENTLOG_PROJECT_TOKEN",
    "EVENTLOG_SHARED_CONTAINER",
    "EVENTLOG_HOST",
    "EVENTLOG_DEBUG",
    "EVENTLOG_DEFAULT_PROPERTIES",
    "CI",
    "CONTINUOUS_INTEGRATION",
    "BUILD_NUMBER",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "CIRCLECI",
    "TRAVIS",
    "JENKINS_HOME",
]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch) -> Path:
    """Point the home directory at a temp dir and clear related env vars."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(client_module, "_default_logger", None)
    return tmp_path


@pytest.fixture
def recording_transport() -> RecordingTransport:
    """Create a transport that records events in memory."""
    return RecordingTransport()


@pytest.fixture
def event_logger(recording_transport: RecordingTransport) -> EventLogger:
    """Create an EventLogger wired to the recording transport."""
    return EventLogger(LoggerConfig(project_token="test-token"), transport=recording_transport)


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing."""
    return CliRunner()


def invoke_cli(runner: CliRunner, cmd, args: list[str], **kwargs):
    """
    Helper to invoke CLI command.

    Args:
        runner: Click test runner
        cmd: Click command or group
        args: Command arguments
        **kwargs: Additional arguments to runner.invoke()

    Returns:
        Click Result object
    """
    return runner.invoke(cmd, args, catch_exceptions=False, **kwargs)


def assert_cli_success(result, msg: str = None):
    """Assert CLI command succeeded (exit code 0)."""
    if result.exit_code != 0:
        error_msg = f"CLI failed (exit code {result.exit_code})"
        if msg:
            error_msg = f"{msg}: {error_msg}"
        if result.output:
            error_msg += f"\nOutput: {result.output}"
        raise AssertionError(error_msg)


def assert_cli_failure(result, expected_code: int = None, msg: str = None):
    """Assert CLI command failed."""
    if result.exit_code == 0:
        error_msg = "CLI succeeded but expected failure"
        if msg:
            error_msg = f"{msg}: {error_msg}"
        raise AssertionError(error_msg)

    if expected_code is not None and result.exit_code != expected_code:
        raise AssertionError(f"Expected exit code {expected_code}, got {result.exit_code}")


def assert_output_contains(result, text: str):
    """Assert CLI output contains text."""
    if text not in result.output:
        raise AssertionError(f"Expected output to contain '{text}'\nGot: {result.output}")
