"""Entry-point for ``dockomatic-cli check``."""

from __future__ import annotations

import click

from dockomatic.helper import check_docker, engine_from_settings


@click.command(name="check")
@click.pass_obj
def cli(ctx_obj) -> None:
    """Exit non-zero unless the container runtime answers."""
    settings = ctx_obj["settings"]
    if not check_docker(engine_from_settings(settings)):
        raise click.ClickException(
            f"{settings.executable} is not available. Please ensure it is installed and running."
        )
    click.echo(f"{settings.executable}: available")
