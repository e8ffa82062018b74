"""Main CLI entry point for gitgud-tools."""

import click

from gitgud_tools.config import commands as config_commands
from gitgud_tools.progress import commands as progress_commands
from gitgud_tools.state import commands as state_commands
from gitgud_tools.tasks import commands as tasks_commands


@click.group()
@click.version_option()
def cli() -> None:
    """GitGud: practice coding by hand between AI-assisted requests."""
    pass


cli.add_command(tasks_commands.process, name="process")
cli.add_command(tasks_commands.complete, name="complete")
cli.add_command(config_commands.config, name="config")
cli.add_command(state_commands.reset, name="reset")
cli.add_command(progress_commands.stats, name="stats")
cli.add_command(progress_commands.achievements, name="achievements")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
