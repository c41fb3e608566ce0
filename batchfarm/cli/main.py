"""Main CLI entry point for batchfarm."""

import click
from rich.console import Console

from batchfarm import __version__
from batchfarm.config import get_settings
from batchfarm.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="batchfarm")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """batchfarm - batch scheduling for 3D print farms.

    Groups compatible print jobs into batches and schedules them
    across a fleet of printers.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# Import and register commands
from batchfarm.cli.schedule_cmd import schedule

cli.add_command(schedule)


@cli.command()
def status() -> None:
    """Show configuration."""
    settings = get_settings()

    console.print("[bold]batchfarm Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Placement Policy: {settings.placement_policy.value}")
    console.print(
        f"  Default Build Volume: {settings.default_build_x}x"
        f"{settings.default_build_y}x{settings.default_build_z} mm"
    )
    console.print(f"  Log Level: {settings.log_level}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
