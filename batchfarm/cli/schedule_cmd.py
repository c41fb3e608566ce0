"""Scheduling CLI commands for batchfarm."""

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from batchfarm.errors import ConfigError, SchedulingError
from batchfarm.farm.farm import Farm
from batchfarm.farm.loader import load_farm, load_jobs
from batchfarm.utils import format_duration

console = Console()


@click.command()
@click.argument("farm_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("jobs_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--policy", "-p", default=None,
              type=click.Choice(["first", "least_loaded", "earliest_available", "round_robin"]),
              help="Override the placement policy for new batches")
def schedule(farm_file: str, jobs_file: str, policy: str) -> None:
    """Admit jobs from JOBS_FILE into the farm defined in FARM_FILE.

    Example: batchfarm schedule farm.json jobs.json --policy round_robin
    """
    try:
        farm = load_farm(farm_file)
        jobs = load_jobs(jobs_file)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    if policy:
        farm = Farm(farm.machines, placement=policy)

    rejected = []
    for job in jobs:
        try:
            farm.add_job(job)
        except SchedulingError as e:
            rejected.append((job, str(e)))

    _print_schedule(farm)

    summary = farm.get_summary()
    console.print(f"\n[dim]Machines: {summary['machines']} | "
                  f"Batches: {summary['batches']} | "
                  f"Jobs: {summary['jobs']} | "
                  f"Rejected: {len(rejected)} | "
                  f"Placement: {summary['placement']}[/dim]")

    if rejected:
        console.print("\n[red]Rejected jobs:[/red]")
        for job, reason in rejected:
            console.print(f"  {escape(job.name or job.job_id)}: {escape(reason)}")
        raise SystemExit(2)


def _print_schedule(farm: Farm) -> None:
    table = Table(title="Farm Schedule")
    table.add_column("Machine", style="cyan")
    table.add_column("#", style="dim")
    table.add_column("Family")
    table.add_column("Jobs")
    table.add_column("Occupied")
    table.add_column("Duration")
    table.add_column("Start")
    table.add_column("Completion")

    for machine in farm.machines:
        for i, batch in enumerate(machine.schedule):
            table.add_row(
                machine.name,
                str(i),
                batch.family.name if batch.family else "-",
                ", ".join(job.name or job.job_id for job in batch.items) or "-",
                f"{batch.occupied} / {batch.capacity}",
                format_duration(batch.print_duration),
                batch.start_time.strftime("%Y-%m-%d %H:%M"),
                batch.est_completion_time().strftime("%Y-%m-%d %H:%M"),
            )

    console.print(table)
