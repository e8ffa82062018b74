"""Configuration CLI commands."""

import json
import sys
from pathlib import Path

import click

from gitgud_tools.config.manager import DIFFICULTIES, SETTINGS, ConfigManager
from gitgud_tools.state.store import FileStateStore


@click.command("config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--reset", "reset_defaults", is_flag=True, help="Restore default settings")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def config(key: str | None, value: str | None, reset_defaults: bool, output_json: bool, data_dir: str | None) -> None:
    """Show or change GitGud settings.

    Examples:

        # Show current settings
        gitgud-tools config

        # Assign a task every 15 requests
        gitgud-tools config frequency 15

        # Harder exercises
        gitgud-tools config difficulty hard

        # Pause GitGud
        gitgud-tools config enabled false
    """
    store = FileStateStore(Path(data_dir) if data_dir else None)
    manager = ConfigManager(store)

    if reset_defaults:
        current = manager.reset()
        click.echo(json.dumps(current.to_dict(), indent=2) if output_json else "Settings restored to defaults")
        return

    if key is None:
        current = manager.get()
        if output_json:
            click.echo(json.dumps(current.to_dict(), indent=2))
            return
        for name, schema in SETTINGS.items():
            val = getattr(current, name)
            shown = str(val).lower() if isinstance(val, bool) else str(val)
            click.echo(f"  {name.ljust(14)} {shown.ljust(12)} ({schema['description']})")
        click.echo("")
        click.echo("Usage: gitgud-tools config <setting> <value>")
        click.echo(f"Valid difficulty: {', '.join(DIFFICULTIES)}")
        click.echo(f"Data location: {store.data_dir}")
        return

    if value is None:
        click.echo("Error: please also specify a value", err=True)
        click.echo(f"Example: gitgud-tools config {key} 10", err=True)
        sys.exit(1)

    result = manager.set(key, value)
    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        if result.valid_keys:
            click.echo(f"Valid settings: {', '.join(result.valid_keys)}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps({"key": result.key, "value": result.value}, indent=2))
    else:
        click.echo(result.message)
