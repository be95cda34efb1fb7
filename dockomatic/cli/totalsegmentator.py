"""Entry-point for ``dockomatic-cli totalsegmentator``."""

from __future__ import annotations

from pathlib import Path

import click

from dockomatic.errors import DockomaticError
from dockomatic.helper import DockerHelper
from dockomatic.io import DefaultCodec
from dockomatic.tools import TotalSegmentatorConfig, TotalSegmentatorTool

from ._common import load_input, report


@click.command(name="totalsegmentator")
@click.argument("input_path", metavar="INPUT", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--image", default=TotalSegmentatorConfig.image)
@click.option("--device", default="device=0", help="Value for 'docker run --gpus'; empty disables GPUs.")
@click.option("--multilabel", is_flag=True, help="Write a single multi-label volume.")
@click.option("--fast", is_flag=True, help="Use the lower resolution model.")
@click.option("--roi-subset", help="Space separated structure names to segment.")
@click.option("--statistics", is_flag=True)
@click.option("--radiomics", is_flag=True)
@click.option("--preview", is_flag=True)
@click.option("--keep-workdir", is_flag=True, help="Keep the working directory for inspection.")
@click.pass_obj
def cli(
    ctx_obj,
    input_path: Path,
    image: str,
    device: str,
    multilabel: bool,
    fast: bool,
    roi_subset: str | None,
    statistics: bool,
    radiomics: bool,
    preview: bool,
    keep_workdir: bool,
) -> None:
    """Segment INPUT (a CT volume) with TotalSegmentator."""
    settings = ctx_obj["settings"]
    if keep_workdir or statistics or radiomics:
        # statistics are written but not loaded; keep them reachable
        settings = settings.model_copy(update={"keep_working_directory": True})
    codec = DefaultCodec()
    volume, _, _ = load_input(codec, input_path.expanduser())

    cfg = TotalSegmentatorConfig(
        image=image,
        device=device or None,
        multilabel=multilabel,
        fast=fast,
        roi_subset=roi_subset,
        statistics=statistics,
        radiomics=radiomics,
        preview=preview,
    )
    tool = TotalSegmentatorTool(cfg, volume)
    try:
        with DockerHelper(cfg.image, codec=codec, settings=settings) as helper:
            tool.configure(helper)
            results = tool.collect(helper.get_results())
            report(results, helper.missing_outputs)
            if settings.keep_working_directory:
                click.echo(f"Working directory: {helper.working_directory}")
    except DockomaticError as exc:
        raise click.ClickException(str(exc)) from exc
