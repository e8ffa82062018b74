"""Statistics and achievement CLI commands."""

import json
from pathlib import Path
from typing import Any

import click

from gitgud_tools.progress.summary import summarize
from gitgud_tools.progress.tracker import ProgressTracker
from gitgud_tools.state.store import FileStateStore, read_stats, read_streak


def _format_table(data: list[dict[str, Any]], columns: list[str] | None = None) -> str:
    """Format rows as a plain-text table.

    Args:
        data: List of dicts to format.
        columns: Column order. If None, uses keys from first row.

    Returns:
        Formatted table string.
    """
    if not data:
        return "(no results)"

    if columns is None:
        columns = list(data[0].keys())

    def cell(row: dict[str, Any], col: str) -> str:
        val = str(row.get(col, ""))
        # Keep rows on one line
        if len(val) > 60:
            val = val[:57] + "..."
        return val

    widths = {col: len(col) for col in columns}
    for row in data:
        for col in columns:
            widths[col] = max(widths[col], len(cell(row, col)))

    header = " | ".join(col.ljust(widths[col]) for col in columns)
    separator = "-+-".join("-" * widths[col] for col in columns)
    rows = [" | ".join(cell(row, col).ljust(widths[col]) for col in columns) for row in data]

    return "\n".join([header, separator, *rows])


@click.command("stats")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def stats(output_json: bool, data_dir: str | None) -> None:
    """Show activity, streak, task stats, achievements and recent history."""
    summary = summarize(FileStateStore(Path(data_dir) if data_dir else None))

    if output_json:
        click.echo(json.dumps(summary, indent=2))
        return

    click.echo("ACTIVITY")
    click.echo(f"  Total requests:      {summary['requests']}")
    click.echo(f"  Next task in:        {summary['next_task_in']} requests")
    click.echo(f"  Task frequency:      every {summary['frequency']} requests")
    click.echo("STREAK")
    click.echo(f"  Current streak:      {summary['current_streak']} days")
    click.echo(f"  Personal best:       {summary['best_streak']} days")
    click.echo("TASKS")
    click.echo(f"  Completed:           {summary['completed']}")
    click.echo(f"  Skipped:             {summary['skipped']}")
    click.echo(f"  Completion rate:     {summary['completion_rate']}%")
    click.echo("CONFIG")
    click.echo(f"  Difficulty:          {summary['difficulty']}")
    click.echo(f"  Skips today:         {summary['remaining_skips']}/{summary['max_skips']}")
    if summary["pending_task"]:
        click.echo(f"PENDING TASK\n  {summary['pending_task']}")

    click.echo("")
    click.echo("ACHIEVEMENTS")
    if summary["achievements"]:
        for achievement in summary["achievements"]:
            click.echo(f"  {achievement['label']}")
    else:
        click.echo("  No achievements yet... keep going!")

    click.echo("")
    click.echo(f"LAST {len(summary['history']) or 5} TASKS")
    rows = [
        {
            "event": entry.get("event", "assigned"),
            "category": entry.get("category", "?"),
            "date": str(entry.get("timestamp", "?"))[:10],
        }
        for entry in summary["history"]
    ]
    click.echo(_format_table(rows, ["event", "category", "date"]) if rows else "  No tasks yet...")


@click.command("achievements")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def achievements(output_json: bool, data_dir: str | None) -> None:
    """List every achievement with its unlock status and progress."""
    store = FileStateStore(Path(data_dir) if data_dir else None)
    results = ProgressTracker(store).all_achievements(read_stats(store), read_streak(store))

    if output_json:
        click.echo(json.dumps(results, indent=2, ensure_ascii=False))
    else:
        rows = [{**r, "unlocked": "yes" if r["unlocked"] else "no"} for r in results]
        click.echo(_format_table(rows, ["emoji", "name", "unlocked", "progress"]))
