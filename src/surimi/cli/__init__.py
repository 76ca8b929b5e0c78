"""
Surimi CLI entry point.
"""

import click

from .init import init
from .serve import serve


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to custom configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None) -> None:
    """Surimi - scripted mock WebSocket server for tests."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config


cli.add_command(serve)
cli.add_command(init)
