"""
Configuration file initialization command.
"""

from pathlib import Path

import click

from surimi.config.app import DEFAULT_CONFIG_FILE, generate_default_config


@click.command()
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite an existing configuration file",
)
def init(path: str | None, force: bool) -> None:
    """Write a default configuration file."""
    config_file = path or DEFAULT_CONFIG_FILE
    config_path = Path(config_file).expanduser()

    if config_path.exists() and not force:
        click.echo(
            f"Config file already exists: {config_path} (use --force to overwrite)", err=True
        )
        raise SystemExit(1)

    generate_default_config(config_file)
    click.echo(f"Wrote default configuration to {config_path}")
