"""
Command line entry point.

  task-graph server --description "..." --tables-file tables.sql
  task-graph client --url ws://localhost:8080
"""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv

from task_graph.bridge.client import run_client
from task_graph.bridge.server import run_server
from task_graph.configuration import AgentConfiguration
from task_graph.exceptions import ConfigurationError
from task_graph.logging_config import setup_logging
from task_graph.schemas import ModelTier

load_dotenv()

app = typer.Typer(
    name="task-graph",
    help="Plan-and-solve agent graph with a WebSocket tool bridge.",
    no_args_is_help=True,
)


@app.command()
def server(
    description: str = typer.Option(
        ..., "--description", "-d", help="Company and user description given to the agents"
    ),
    tables_file: Path = typer.Option(
        ..., "--tables-file", "-t", exists=True, dir_okay=False,
        help="File describing the client's tables and their structure",
    ),
    host: str | None = typer.Option(None, "--host", help="Bind address (default: TASK_GRAPH_HOST or localhost)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: TASK_GRAPH_PORT or 8080)"),
    planner_tier: ModelTier = typer.Option(ModelTier.FAST, "--planner-tier", help="Model tier for the planner"),
    solver_tier: ModelTier = typer.Option(ModelTier.STRONG, "--solver-tier", help="Model tier for the solver"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Run the task server."""
    setup_logging(verbose)

    config = AgentConfiguration(planner_tier=planner_tier, solver_tier=solver_tier)
    if host:
        config.server_host = host
    if port:
        config.server_port = port

    try:
        run_server([description, tables_file.read_text(encoding="utf-8")], config)
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def client(
    url: str | None = typer.Option(None, "--url", "-u", help="Server URL (default: TASK_GRAPH_URL or ws://localhost:8080)"),
    reconnect_delay: float | None = typer.Option(
        None, "--reconnect-delay", help="Seconds to wait before reconnecting (default: RECONNECT_DELAY or 5)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Connect to the task server and answer its tool requests."""
    setup_logging(verbose)
    config = AgentConfiguration()
    if reconnect_delay is not None:
        config.reconnect_delay = reconnect_delay
    run_client(url or config.server_url, reconnect_delay=config.reconnect_delay)


if __name__ == "__main__":
    app()
