"""
Shared helpers for CLI commands.
"""

from pathlib import Path

import typer

from rtry.config.loader import Config, load_config
from rtry.exceptions import ConfigurationError
from rtry.utils.logging import setup_logging_from_config


def load_cli_config(config_path: Path, env: str | None, verbose: bool = False) -> Config:
    """Load and validate config, set up logging, exit 1 on config errors."""
    try:
        config = load_config(config_path, env=env)
        config.validate()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    project_dir = config_path if config_path.is_dir() else config_path.parent
    data = dict(config.data)
    if verbose:
        data["logging"] = {**(data.get("logging") or {}), "level": "DEBUG"}
    setup_logging_from_config(data, project_dir=project_dir)
    return config


def redact_url(url: str) -> str:
    """Drop credentials from an AMQP URL for display."""
    return url.split("@")[-1]
