"""Reset CLI command."""

from pathlib import Path

import click

from gitgud_tools.state.reset import reset_all, reset_counter, reset_stats
from gitgud_tools.state.store import FileStateStore


@click.command("reset")
@click.argument("scope", type=click.Choice(["counter", "stats", "all"]))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation when resetting everything")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def reset(scope: str, yes: bool, data_dir: str | None) -> None:
    """Reset GitGud state.

    SCOPE is one of:

        counter  request counter and pending task

        stats    statistics and today's skips (achievements are kept)

        all      everything, including achievements, streak and history
    """
    store = FileStateStore(Path(data_dir) if data_dir else None)

    if scope == "counter":
        reset_counter(store)
        click.echo("Counter reset to 0")
    elif scope == "stats":
        reset_stats(store)
        click.echo("Statistics reset")
    else:
        if not yes:
            click.confirm("This wipes achievements, streak and history. Continue?", abort=True)
        reset_all(store)
        click.echo("Full reset done")
