"""
Configuration management CLI commands.

Manages folio settings stored in .folio/config.yaml (or the global
~/.config/folio/config.yaml when no .folio/ directory is found).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from folio.core import config as core_config

console = Console()


def get_config_path() -> Path:
    """Get path to the config file that commands read and write."""
    return core_config.get_config_path()


def load_config() -> dict[str, Any]:
    """Load configuration from file."""
    return core_config.load_yaml_config(get_config_path())


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file (YAML format)."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(yaml.dump(config, default_flow_style=False, sort_keys=False))


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key."""
    current: Any = load_config()
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def set_config_value(key: str, value: Any) -> None:
    """Set a configuration value by dotted key."""
    config = load_config()
    parts = key.split(".")

    # Navigate to the parent dict
    current = config
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
    save_config(config)


# Configuration schema with defaults and descriptions
CONFIG_SCHEMA: dict[str, dict[str, Any]] = {
    "api.base_url": {
        "default": core_config.DEFAULT_API_URL,
        "type": str,
        "description": "Content API root URL",
    },
    "api.token": {
        "default": None,
        "type": str,
        "description": "Operator session token (bearer)",
        "secret": True,
    },
    "api.timeout": {
        "default": core_config.DEFAULT_TIMEOUT,
        "type": float,
        "description": "Request timeout in seconds",
    },
    "messages.poll_interval": {
        "default": core_config.DEFAULT_POLL_INTERVAL,
        "type": float,
        "description": "Seconds between unread-count polls",
    },
    "analytics.feed_limit": {
        "default": core_config.DEFAULT_FEED_LIMIT,
        "type": int,
        "description": "Activity feed length in analytics views",
    },
    "analytics.dashboard_feed_limit": {
        "default": core_config.DEFAULT_DASHBOARD_FEED_LIMIT,
        "type": int,
        "description": "Activity feed length on the dashboard",
    },
    "analytics.default_range": {
        "default": core_config.DEFAULT_RANGE,
        "type": str,
        "description": "Default time window (7d, 30d, 90d, 1y)",
        "choices": ["7d", "30d", "90d", "1y"],
    },
}


def _display(key: str, value: Any) -> str:
    if value is not None and CONFIG_SCHEMA[key].get("secret"):
        return "********"
    return str(value)


def _unknown_key(key: str) -> None:
    console.print(f"[red]Unknown setting: {key}[/red]")
    console.print("\nAvailable settings:")
    for k in CONFIG_SCHEMA:
        console.print(f"  - {k}")


@click.group()
def config():
    """Manage folio configuration.

    Settings are stored in .folio/config.yaml.
    """
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Show all settings including defaults")
def show_cmd(show_all: bool):
    """Show current configuration.

    Without --all, only shows settings that differ from defaults.
    """
    config = load_config()
    config_path = get_config_path()

    if not config and not show_all:
        console.print("[dim]No custom configuration set. Using defaults.[/dim]")
        console.print(f"[dim]Config file: {config_path}[/dim]")
        console.print("\n[dim]Use 'folio config show --all' to see all settings.[/dim]")
        return

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")
    table.add_column("Description", style="dim")

    for key, schema in CONFIG_SCHEMA.items():
        current = get_config_value(key)
        default = schema["default"]
        is_custom = current is not None and current != default

        if show_all or is_custom:
            display_value = _display(key, current) if current is not None else f"[dim]{default}[/dim]"
            table.add_row(key, display_value, str(default), schema["description"])

    console.print(table)
    console.print(f"\n[dim]Config file: {config_path}[/dim]")


@config.command(name="get")
@click.argument("key")
def get_cmd(key: str):
    """Get a configuration value.

    Examples:
        folio config get api.base_url
        folio config get messages.poll_interval
    """
    if key not in CONFIG_SCHEMA:
        _unknown_key(key)
        return

    value = get_config_value(key)
    default = CONFIG_SCHEMA[key]["default"]

    if value is None:
        console.print(f"{key} = {default} [dim](default)[/dim]")
    else:
        console.print(f"{key} = {_display(key, value)}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_cmd(key: str, value: str):
    """Set a configuration value.

    Examples:
        folio config set api.base_url https://example.com/api
        folio config set analytics.default_range 90d
    """
    if key not in CONFIG_SCHEMA:
        _unknown_key(key)
        return

    schema = CONFIG_SCHEMA[key]

    # Convert to appropriate type
    typed_value: int | float | str
    try:
        if schema["type"] is int:
            typed_value = int(value)
        elif schema["type"] is float:
            typed_value = float(value)
        else:
            typed_value = value
    except ValueError:
        console.print(f"[red]Invalid value type. Expected {schema['type'].__name__}[/red]")
        return

    choices = schema.get("choices")
    if choices and typed_value not in choices:
        console.print(f"[red]Invalid value. Choose one of: {', '.join(choices)}[/red]")
        return

    set_config_value(key, typed_value)
    console.print(f"[green]Set {key} = {_display(key, typed_value)}[/green]")


@config.command(name="reset")
@click.argument("key", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Reset all settings to defaults")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
def reset_cmd(key: str | None, reset_all: bool, force: bool):
    """Reset configuration to defaults.

    Examples:
        folio config reset api.timeout     # Reset single setting
        folio config reset --all           # Reset all settings
    """
    if not key and not reset_all:
        console.print("[red]Specify a key or use --all to reset all settings[/red]")
        return

    if reset_all:
        if not force and not click.confirm("Reset all settings to defaults?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

        config_path = get_config_path()
        if config_path.exists():
            config_path.unlink()
        console.print("[green]All settings reset to defaults[/green]")
        return

    if key not in CONFIG_SCHEMA:
        console.print(f"[red]Unknown setting: {key}[/red]")
        return

    config = load_config()
    parts = key.split(".")

    current = config
    for part in parts[:-1]:
        if isinstance(current.get(part), dict):
            current = current[part]
        else:
            console.print(f"[dim]{key} is already at default[/dim]")
            return

    if parts[-1] in current:
        del current[parts[-1]]
        save_config(config)
        console.print(f"[green]Reset {key} to default ({CONFIG_SCHEMA[key]['default']})[/green]")
    else:
        console.print(f"[dim]{key} is already at default[/dim]")


@config.command(name="path")
def path_cmd():
    """Show path to config file."""
    console.print(str(get_config_path()))
