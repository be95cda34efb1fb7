"""Entry-point for ``dockomatic-cli rmi``."""

from __future__ import annotations

import click

from dockomatic.errors import DockomaticError
from dockomatic.helper import engine_from_settings


@click.command(name="rmi")
@click.argument("image")
@click.pass_obj
def cli(ctx_obj, image: str) -> None:
    """Force-remove IMAGE from the local image store."""
    engine = engine_from_settings(ctx_obj["settings"])
    try:
        engine.remove_image(image)
    except DockomaticError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Removed {image}")
