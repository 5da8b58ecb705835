"""
Main CLI entry point.
"""

import typer

from rtry import __version__
from rtry.cli import declare, info, worker


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"rtry version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="rtry",
    help="rtry - Delayed retries for RabbitMQ consumers using dead-lettering and message TTLs",
    add_completion=True,
)

# Register subcommands
app.add_typer(declare.app, name="declare")
app.command(name="worker", help="Consume messages and retry failures with a delay")(worker.worker)
app.add_typer(info.app, name="info")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        help="Show version and exit.",
    ),
):
    """
    rtry - Delayed retries for RabbitMQ consumers.

    Run 'rtry <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        if not version:
            typer.echo(ctx.get_help())
            raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
