"""
rtry info - Display retry configuration.

Shows the topology names, the attempt ceiling and the delay window each
attempt gets from the default backoff.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from rtry.cli.common import load_cli_config, redact_url
from rtry.config.loader import TOPOLOGY_KEYS
from rtry.core.options import DEFAULT_MAX_ATTEMPTS
from rtry.core.policy import backoff_bounds

app = typer.Typer(name="info", help="Display retry configuration", invoke_without_command=True)

console = Console()


@app.callback()
def info(
    ctx: typer.Context,
    config_path: Path = typer.Option(Path.cwd(), "--config", "-c", help="Config file or directory containing rtry.yaml"),
    env: str | None = typer.Option(None, help="Environment"),
) -> None:
    """
    Display the configured topology and retry schedule.
    """
    if ctx.invoked_subcommand is None:
        config = load_cli_config(config_path, env)

        console.print(f"\n[bold blue]Broker[/bold blue] {redact_url(config.broker_url)}\n")

        topo_table = Table(title="Topology", show_header=True)
        topo_table.add_column("Setting", style="cyan")
        topo_table.add_column("Value", style="green")
        for key in TOPOLOGY_KEYS:
            topo_table.add_row(key, str(config.topology.get(key, "")))
        console.print(topo_table)
        console.print()

        max_attempts = config.retry_options().max_attempts or DEFAULT_MAX_ATTEMPTS
        schedule = Table(title=f"Retry schedule (max {max_attempts} attempts)", show_header=True)
        schedule.add_column("Attempt", style="cyan", justify="right")
        schedule.add_column("Min delay (s)", style="green", justify="right")
        schedule.add_column("Max delay (s)", style="yellow", justify="right")
        for attempt in range(1, max_attempts + 1):
            low, high = backoff_bounds(attempt)
            schedule.add_row(str(attempt), str(low), str(high))
        console.print(schedule)
