"""
Mock server command.
"""

import asyncio
import logging
from typing import Any

import click

from surimi.config.app import SurimiConfig, apply_cli_overrides, load_config
from surimi.errors import BindError
from surimi.servers.websocket import MockServer, MockServerConfig

from .utils import setup_logging

logger = logging.getLogger(__name__)


async def run_server(config: MockServerConfig) -> None:
    """
    Start a mock server and serve until cancelled.

    Args:
        config: Server configuration

    Raises:
        BindError: If the listening socket cannot be bound
    """
    server = MockServer(config)
    await server.start()
    click.echo(f"Mock server listening on {server.url} ({len(config.frames)} scripted responses)")
    await server.serve_forever()


@click.command()
@click.option("--host", default=None, help="Host to bind (default: localhost)")
@click.option(
    "--port",
    type=click.IntRange(0, 65535),
    default=None,
    help="Port to bind, 0 for an OS-assigned port (default: 0)",
)
@click.option(
    "--responses",
    "responses_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML or JSON file with the list of responses to replay",
)
@click.option(
    "--exhaustion",
    type=click.Choice(["sentinel", "silent"]),
    default=None,
    help="Behavior once responses run out",
)
@click.option(
    "--idle-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Close connections idle for this many seconds",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug output",
)
@click.pass_context
def serve(
    ctx: click.Context,
    host: str | None,
    port: int | None,
    responses_file: str | None,
    exhaustion: str | None,
    idle_timeout: float | None,
    verbose: bool,
) -> None:
    """Run a mock WebSocket server until interrupted."""
    try:
        base = load_config(ctx.obj.get("config_file"))
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    cli_overrides: dict[str, Any] = {
        f"server.{key}": value
        for key, value in {
            "host": host,
            "port": port,
            "responses_file": responses_file,
            "exhaustion": exhaustion,
            "idle_timeout": idle_timeout,
        }.items()
        if value is not None
    }

    try:
        settings = SurimiConfig(**apply_cli_overrides(base.model_dump(), cli_overrides))
        server_config = settings.to_server_config()
    except ValueError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        raise SystemExit(1) from e

    setup_logging(verbose=verbose, level=settings.logging.level)

    try:
        asyncio.run(run_server(server_config))
    except BindError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        click.echo("Mock server stopped")
