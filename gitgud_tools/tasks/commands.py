"""Task CLI commands: prompt processing and completion."""

import json
import sys
from pathlib import Path

import click

from gitgud_tools.state.store import FileStateStore
from gitgud_tools.tasks.completion import complete_task
from gitgud_tools.tasks.engine import TaskEngine


@click.command("process")
@click.option("--prompt", help="Prompt text (default: read hook JSON from stdin)")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def process(prompt: str | None, data_dir: str | None) -> None:
    """Run one prompt through the task engine and print the action as JSON.

    Examples:

        # Hook-style input
        echo '{"prompt": "write a function to add two numbers"}' | gitgud-tools process

        # Direct input
        gitgud-tools process --prompt "fix the login bug"
    """
    if prompt is None:
        try:
            input_data = json.load(sys.stdin)
        except json.JSONDecodeError as e:
            click.echo(f"Error: Invalid JSON input: {e}", err=True)
            sys.exit(1)
        prompt = input_data.get("prompt", "") if isinstance(input_data, dict) else ""

    engine = TaskEngine(FileStateStore(Path(data_dir) if data_dir else None))
    action = engine.process_prompt(prompt or "")
    click.echo(json.dumps(action.to_dict(), indent=2))


@click.command("complete")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--data-dir", help="GitGud data directory (default: ~/.gitgud)")
def complete(output_json: bool, data_dir: str | None) -> None:
    """Mark the pending task as completed."""
    result = complete_task(FileStateStore(Path(data_dir) if data_dir else None))

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.completed or result.streak is None:
        click.echo(result.message)
        return

    click.echo(result.message)
    if result.new_achievements:
        click.echo("New achievement unlocked!")
        for achievement in result.new_achievements:
            click.echo(f"   {achievement.label}")
    click.echo(f"Streak: {result.streak.current} days")
    if result.streak.is_new_record:
        click.echo("   New personal record!")
    else:
        click.echo(f"   Record: {result.streak.best} days")
    if result.stats:
        click.echo(f"Completed: {result.stats.completed}  Skipped: {result.stats.skipped}")
