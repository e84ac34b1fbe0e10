"""eventlog command-line interface.

Commands:
- log: Log a single event
- identity: Show the distinct identifier
- status/enable/disable: Manage the persistent opt-out
"""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from eventlog.client import EventLogger
from eventlog.config import LoggerConfig

console = Console()


def _parse_property(value: str) -> tuple[str, object]:
    if "=" not in value:
        raise click.BadParameter(f"Expected KEY=VALUE, got '{value}'", param_hint="--property")

    key, raw = value.split("=", 1)
    if not key:
        raise click.BadParameter(f"Empty key in '{value}'", param_hint="--property")

    try:
        return key, json.loads(raw)
    except json.JSONDecodeError:
        return key, raw


def _build_config(token: str | None, container: str | None) -> LoggerConfig:
    config = LoggerConfig.from_env()
    if token is not None:
        config.project_token = token
    if container is not None:
        config.shared_container_identifier = container
    return config


@click.group()
@click.version_option(package_name="eventlog")
def main():
    """Log analytics events from the command line."""
    pass


@main.command("log")
@click.argument("name")
@click.option(
    "--property",
    "-p",
    "properties",
    multiple=True,
    help="Event property as KEY=VALUE (VALUE parsed as JSON when possible)",
)
@click.option("--token", envvar="EVENTLOG_PROJECT_TOKEN", help="Project token")
@click.option("--container", help="Shared container identifier")
def log_command(name: str, properties: tuple[str, ...], token: str | None, container: str | None):
    """
    Log one event and wait for it to be handed off.

    Example:
        eventlog log document_opened -p source=cli -p pages=3
    """
    event_properties = dict(_parse_property(p) for p in properties)

    event_logger = EventLogger(_build_config(token, container))
    if not event_logger.is_enabled():
        console.print("[yellow]Tracking is disabled, event not sent[/yellow]")
        return

    if not event_logger.project_token:
        console.print("[yellow]No project token set, event will not be delivered[/yellow]")

    event_logger.log_event(name, event_properties)
    event_logger.flush()
    console.print(f"[dim]Logged event: {name}[/dim]")


@main.command()
@click.option("--container", help="Shared container identifier")
def identity(container: str | None):
    """
    Show the distinct identifier events are attributed to.

    Example:
        eventlog identity --container group.com.example.app
    """
    event_logger = EventLogger(_build_config(None, container))
    click.echo(event_logger.distinct_identifier())


@main.command()
def enable():
    """
    Enable analytics event delivery on this machine.

    Example:
        eventlog enable
    """
    from eventlog.config import is_tracking_enabled, set_tracking_enabled

    if is_tracking_enabled():
        console.print("[yellow]Tracking is already enabled[/yellow]")
        return

    set_tracking_enabled(True)
    console.print("[green]Tracking enabled[/green]")


@main.command()
def disable():
    """
    Disable analytics event delivery on this machine.

    You can also disable tracking by:
    - Setting DO_NOT_TRACK environment variable
    - Setting EVENTLOG_DISABLED environment variable

    Example:
        eventlog disable
    """
    from eventlog.config import is_tracking_enabled, set_tracking_enabled

    if not is_tracking_enabled():
        console.print("[yellow]Tracking is already disabled[/yellow]")
        return

    set_tracking_enabled(False)
    console.print("[green]Tracking disabled[/green]")
    console.print()
    console.print("[dim]You can re-enable anytime with 'eventlog enable'[/dim]")


@main.command("status")
def status_command():
    """
    Show current tracking status and configuration.

    Example:
        eventlog status
    """
    from eventlog.config import get_status

    status_info = get_status()

    if status_info["enabled"]:
        status_text = "[bold green]Enabled[/bold green]"
    else:
        status_text = "[bold red]Disabled[/bold red]"

    console.print()
    console.print(
        Panel(
            f"Tracking is {status_text}",
            title="Tracking Status",
            border_style="green" if status_info["enabled"] else "red",
        )
    )

    console.print()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Status", "Enabled" if status_info["enabled"] else "Disabled")

    if status_info["disabled_reason"]:
        table.add_row("Disabled by", status_info["disabled_reason"])

    table.add_row("Settings file", status_info["settings_path"])
    table.add_row("Project token", "Set" if status_info["project_token_set"] else "Not set")
    table.add_row("Shared container", status_info["shared_container_identifier"] or "-")

    if status_info["distinct_id"]:
        table.add_row("Distinct ID", status_info["distinct_id"])

    table.add_row("CI environment", "Yes" if status_info["is_ci"] else "No")

    console.print(table)
