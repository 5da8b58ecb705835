"""
rtry worker - Consume the main queue with delayed retries.

Runs HANDLER (``module:function``) on each message. Messages whose handler
raises are rescheduled through the retry queue.
"""

import asyncio
import importlib
import sys
from pathlib import Path

import aio_pika
import typer

from rtry.cli.common import load_cli_config, redact_url
from rtry.client import Retry
from rtry.config.loader import Config
from rtry.core.options import RetryOptions
from rtry.exceptions import ConfigurationError, RtryError
from rtry.utils.logging import get_logger
from rtry.worker import Handler, WorkerStats, run_worker

logger = get_logger("rtry.cli.worker")


def load_handler(spec: str, search_path: Path | None = None) -> Handler:
    """
    Import ``module:function`` and return the function.

    ``search_path`` (default: current directory) is put on ``sys.path`` first,
    so handler modules next to ``rtry.yaml`` import without installing them.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Handler must look like 'module:function', got '{spec}'")

    project_dir = str(Path(search_path or Path.cwd()).resolve())
    if project_dir not in sys.path:
        sys.path.insert(0, project_dir)
        importlib.invalidate_caches()

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import handler module '{module_name}': {e}") from e

    handler = getattr(module, attr, None)
    if not callable(handler):
        raise ConfigurationError(f"Handler '{spec}' is not a callable")
    return handler


async def run(config: Config, handler: Handler, options: RetryOptions, limit: int | None) -> WorkerStats:
    retry_config = config.retry_config()
    connection = await aio_pika.connect_robust(config.broker_url)
    async with connection:
        channel = await connection.channel()
        await channel.set_qos(prefetch_count=config.prefetch_count)
        rty = await Retry.from_config(channel, retry_config)
        return await run_worker(rty, handler, options, limit=limit)


def worker(
    handler: str = typer.Argument(..., help="Message handler as 'module:function'"),
    config_path: Path = typer.Option(Path.cwd(), "--config", "-c", help="Config file or directory containing rtry.yaml"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    delay: int | None = typer.Option(None, "--delay", help="Fixed retry delay in seconds (overrides backoff)"),
    limit: int | None = typer.Option(None, "--limit", help="Stop after this many messages"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Consume messages and retry failures with a delay.
    """
    config = load_cli_config(config_path, env, verbose)

    try:
        project_dir = config_path if config_path.is_dir() else config_path.parent
        handler_fn = load_handler(handler, project_dir)
        options = RetryOptions(delay_in_seconds=delay)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    logger.info(f"Connecting to {redact_url(config.broker_url)}")
    try:
        stats = asyncio.run(run(config, handler_fn, options, limit))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        raise typer.Exit(0) from None
    except RtryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(
        f"Processed {stats.processed}, retried {stats.retried}, "
        f"dropped {stats.dropped}, requeued {stats.requeued}"
    )
