#!/usr/bin/env python3
"""
algostep CLI - Algorithm step-through playback

Main entrypoint for the algostep command-line tool.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from algostep.logging_config import setup_logging
from algostep.metrics import start_metrics_server
from cli.commands import play, run, script

# Initialize Typer app
app = typer.Typer(
    name="algostep",
    help="Event-sourced algorithm step-through and playback",
    add_completion=False,
)

# Console for rich output
console = Console()

app.command(name="list")(run.list_command)
app.command(name="run")(run.run_command)
app.command(name="play")(play.play_command)
app.command(name="exec")(script.exec_command)


@app.callback()
def setup(
    log_level: str = typer.Option("WARNING", "--log-level", envvar="ALGOSTEP_LOG_LEVEL", help="Log level"),
    log_format: str = typer.Option("json", "--log-format", envvar="ALGOSTEP_LOG_FORMAT", help="json or text"),
    metrics_port: Optional[int] = typer.Option(
        None, "--metrics-port", envvar="ALGOSTEP_METRICS_PORT", help="Serve Prometheus metrics on this port"
    ),
):
    """Configure logging and metrics before any command runs."""
    setup_logging(level=log_level, fmt=log_format)
    start_metrics_server(enabled=metrics_port is not None, port=metrics_port or 0)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from algostep import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]algostep CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
