"""Option parsing and reporting helpers shared by the sub-commands."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import click

from dockomatic.data import NAME, DataItem, input_location
from dockomatic.errors import MissingOutput
from dockomatic.io import DataCodec

_MULTI_EXTENSIONS = (".nii.gz", ".img.gz", ".tar.gz")


def split_pair(value: str, option: str) -> tuple[str, str]:
    """Split ``ARG=VALUE`` on the first ``=``.

    Raises:
        click.BadParameter: If either side is empty.
    """
    arg, sep, rest = value.partition("=")
    if not sep or not arg or not rest:
        raise click.BadParameter(f"expected ARG=VALUE, got {value!r}", param_hint=option)
    return arg, rest


def split_pairs(
    ctx: click.Context, param: click.Parameter, values: Sequence[str]
) -> list[tuple[str, str]]:
    """Click callback turning repeated ``ARG=VALUE`` options into tuples."""
    return [split_pair(v, "--" + param.name.replace("_", "-")) for v in values]


def split_folder(value: str) -> tuple[str, list[str]]:
    """Split ``DIR:FILE[,FILE…]`` into the directory and its member names."""
    folder, sep, names = value.partition(":")
    files = [n.strip() for n in names.split(",") if n.strip()] if sep else []
    if not folder or not files:
        raise click.BadParameter(
            f"expected DIR:FILE[,FILE...], got {value!r}", param_hint="--output-dir"
        )
    return folder, files


def file_extension(path: Path) -> str:
    """Return the extension of *path*, recognising multi-dot extensions."""
    name = path.name.lower()
    for ext in _MULTI_EXTENSIONS:
        if name.endswith(ext):
            return path.name[-len(ext):]
    return path.suffix


def load_input(codec: DataCodec, path: Path) -> tuple[DataItem, str, str]:
    """Read *path* and return the first item with a usable name/extension.

    The item keeps its provenance so the helper mounts the file's folder
    instead of copying it.
    """
    path = path.expanduser().resolve()
    if not path.is_file():
        raise click.BadParameter(f"{path} does not exist", param_hint="--input")
    ext = file_extension(path)
    if not ext:
        raise click.BadParameter(f"{path} has no file extension", param_hint="--input")
    items = codec.load(path)
    if not items:
        raise click.ClickException(f"Nothing could be read from {path}")
    stem = path.name[: -len(ext)].replace(".", "_") or "input"
    return items[0], stem, ext


def report(items: Iterable[DataItem], missing: Iterable[MissingOutput]) -> None:
    """Print the loaded artifacts and the outputs that were not produced."""
    items = list(items)
    click.echo(f"Loaded {len(items)} item(s):")
    for item in items:
        click.echo(f"  {item.properties.get(NAME) or input_location(item) or '<in-memory>'}")
    for miss in missing:
        click.echo(f"Missing output for {miss.argument}: {miss.path}", err=True)
