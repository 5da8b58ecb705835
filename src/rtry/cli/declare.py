"""
rtry declare - Declare the retry topology.

Declares the main exchange, main queue and retry queue so producers can
publish before any worker has started.
"""

import asyncio
from pathlib import Path

import aio_pika
import typer

from rtry.cli.common import load_cli_config, redact_url
from rtry.config.loader import Config
from rtry.core.topology import TopologyInitializer
from rtry.exceptions import TopologyError
from rtry.utils.logging import get_logger

logger = get_logger("rtry.cli.declare")

app = typer.Typer(name="declare", help="Declare the retry exchange and queues", invoke_without_command=True)


async def declare_topology(config: Config) -> None:
    retry_config = config.retry_config()
    connection = await aio_pika.connect_robust(config.broker_url)
    async with connection:
        channel = await connection.channel()
        await TopologyInitializer(channel).declare(retry_config)


@app.callback()
def declare(
    ctx: typer.Context,
    config_path: Path = typer.Option(Path.cwd(), "--config", "-c", help="Config file or directory containing rtry.yaml"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Declare the retry topology on the broker.
    """
    if ctx.invoked_subcommand is None:
        config = load_cli_config(config_path, env, verbose)
        logger.info(f"Declaring retry topology on {redact_url(config.broker_url)}")

        try:
            asyncio.run(declare_topology(config))
        except TopologyError as e:
            typer.echo(f"Error: topology declaration failed at step '{e.step}': {e}", err=True)
            raise typer.Exit(1) from None

        topology = config.topology
        typer.echo(
            f"Declared exchange '{topology['main_exchange']}' with queues "
            f"'{topology['main_queue']}' and '{topology['retry_queue']}'"
        )
