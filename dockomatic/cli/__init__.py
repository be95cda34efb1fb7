"""Expose the project-wide Click group for the ``dockomatic-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires common global flags (settings file, verbosity, log mirror);
* sets up logging via :pyfunc:`dockomatic.utils.logging.setup_logging`;
* loads the helper settings once and stashes them in the Click context;
* registers every sub-command located in sibling modules.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict

import click

from dockomatic import __version__
from dockomatic.config import load_settings
from dockomatic.errors import ConfigurationError
from dockomatic.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""
        self._lazy[name] = target

    def list_commands(self, ctx):
        return sorted(set(super().list_commands(ctx)) | set(self._lazy))

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        module = importlib.import_module(module_name)
        cmd = getattr(module, attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
dockomatic-cli – run containerised imaging tools on local data.

""",
)
@click.version_option(__version__)
@click.option(
    "-c",
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Helper settings YAML (default: $DOCKOMATIC_CONFIG or packaged defaults).",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug", is_flag=True, help="DEBUG console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *dockomatic-cli*."""
    setup_logging(verbose=verbose, debug=debug, extra_text_log=save_logfile)
    try:
        settings = load_settings(config)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = {
        "settings": settings,
        "verbose": verbose,
        "debug": debug,
    }


main.set_lazy_command("check", "dockomatic.cli.check:cli")
main.set_lazy_command("run", "dockomatic.cli.run:cli")
main.set_lazy_command("rmi", "dockomatic.cli.rmi:cli")
main.set_lazy_command("totalsegmentator", "dockomatic.cli.totalsegmentator:cli")

cli = main
__all__: list[str] = ["main"]
