"""Entry-point for ``dockomatic-cli run``.

Runs an arbitrary image against local files::

    dockomatic-cli run sparse_pca \\
        --input=--imzml=/data/sample.imzML \\
        --output-later=--csv=pca_data.csv \\
        --output=--image=pca_data.nrrd
"""

from __future__ import annotations

from pathlib import Path

import click
import structlog

from dockomatic.errors import DockomaticError
from dockomatic.helper import DockerHelper
from dockomatic.io import DefaultCodec

from ._common import load_input, report, split_folder, split_pairs

log = structlog.get_logger()


@click.command(name="run")
@click.argument("image")
@click.option("--input", "inputs", multiple=True, callback=split_pairs, metavar="ARG=PATH",
              help="Host file passed to the container under ARG.")
@click.option("--output", "outputs", multiple=True, callback=split_pairs, metavar="ARG=PATH",
              help="Output file (relative to the working directory) loaded after the run.")
@click.option("--output-later", "later_outputs", multiple=True, callback=split_pairs,
              metavar="ARG=PATH", help="Output announced to the container but not loaded.")
@click.option("--output-flag", "flag_outputs", multiple=True, callback=split_pairs,
              metavar="ARG=PATH", help="Flag-only output: ARG is passed alone, PATH is loaded.")
@click.option("--output-dir", "dir_outputs", multiple=True, metavar="ARG=DIR:FILE[,FILE...]",
              callback=split_pairs, help="Output directory and the files expected in it.")
@click.option("--load", "wd_files", multiple=True, metavar="NAME",
              help="Load NAME from the working directory when present.")
@click.option("--run-arg", "run_args", multiple=True, help="Extra 'docker run' token.")
@click.option("--app-arg", "app_args", multiple=True, help="Extra entrypoint token.")
@click.option("--gpus/--no-gpus", default=None, help="Request GPUs (--gpus).")
@click.option("--rm/--no-rm", "auto_rm", default=None, help="Remove the container afterwards.")
@click.option("--rmi", is_flag=True, help="Remove the image after the results were loaded.")
@click.option("--keep-workdir", is_flag=True, help="Keep the working directory for inspection.")
@click.pass_obj
def cli(
    ctx_obj,
    image: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]],
    later_outputs: list[tuple[str, str]],
    flag_outputs: list[tuple[str, str]],
    dir_outputs: list[tuple[str, str]],
    wd_files: tuple[str, ...],
    run_args: tuple[str, ...],
    app_args: tuple[str, ...],
    gpus: bool | None,
    auto_rm: bool | None,
    rmi: bool,
    keep_workdir: bool,
) -> None:
    """Run IMAGE with local inputs and load what it produces."""
    settings = ctx_obj["settings"]
    if keep_workdir:
        settings = settings.model_copy(update={"keep_working_directory": True})
    codec = DefaultCodec()

    try:
        with DockerHelper(image, codec=codec, settings=settings) as helper:
            for token in run_args:
                helper.add_run_argument(token)
            for token in app_args:
                helper.add_application_argument(token)
            for arg, path in inputs:
                item, name, ext = load_input(codec, Path(path).expanduser())
                helper.add_auto_save_data(item, arg, name, ext)
            for arg, rel in outputs:
                helper.add_auto_load_output(arg, rel)
            for arg, rel in later_outputs:
                helper.add_load_later_output(arg, rel)
            for arg, rel in flag_outputs:
                helper.add_auto_load_output(arg, rel, flag_only=True)
            for arg, spec in dir_outputs:
                folder, files = split_folder(spec)
                helper.add_auto_load_output_folder(arg, folder, files)
            for name in wd_files:
                helper.add_auto_load_file_from_working_directory(name)
            if gpus is not None:
                helper.enable_gpus(gpus)
            if auto_rm is not None:
                helper.enable_auto_remove_container(auto_rm)
            if rmi:
                helper.enable_auto_remove_image(True)

            results = helper.get_results()
            report(results, helper.missing_outputs)
            if keep_workdir:
                click.echo(f"Working directory: {helper.working_directory}")
    except DockomaticError as exc:
        log.error("run.failed", image=image, error=str(exc))
        raise click.ClickException(str(exc)) from exc
