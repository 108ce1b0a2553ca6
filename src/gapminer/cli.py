"""CLI for GapMiner.

Provides command-line access to the response validators, the circuit
breaker configuration, and the HTTP API server.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from .cli_circuits import circuits
from .cli_validate import validate
from .settings import resolve_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: $GAPMINER_CONFIG or nearest gapminer.toml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """GapMiner - LLM response validation and service circuit breakers."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        ctx.obj = resolve_settings(config_path)
    except (FileNotFoundError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# Register subcommand groups from separate modules
cli.add_command(circuits)
cli.add_command(validate)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8420, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="info",
    help="Server log level",
)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool, log_level: str) -> None:
    """Run the GapMiner HTTP API."""
    from .api.serve import run_server

    config_path = ctx.parent.params.get("config_path") if ctx.parent else None
    logger.info("Starting GapMiner API on %s:%d", host, port)
    run_server(
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        config_path=str(config_path) if config_path is not None else None,
    )


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
