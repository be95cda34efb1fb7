"""Place registered inputs where the container can read them.

Inputs are either exported into the shared working directory or, when the
item already lives on disk in the requested format, its parent directory is
bind-mounted read-only so no copy is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePath, PureWindowsPath
from typing import Iterable

import structlog

from .data import input_location
from .entries import SaveEntry
from .io import DataCodec
from .paths import container_path, has_extension, mount_spec, strip_extension
from .workdir import DirectoryProvider, mint_mount_name

log = structlog.get_logger()


@dataclass
class StagingResult:
    """Read-only mounts and application arguments produced by staging."""

    mounts: list[str] = field(default_factory=list)
    arguments: list[str] = field(default_factory=list)


def _host_path(location: str) -> PurePath:
    """Interpret *location* with the separator style it was written in.

    Local paths are made absolute; docker reads a bare relative name in a
    ``-v`` spec as a named volume.
    """
    if "\\" in location and "/" not in location:
        return PureWindowsPath(location)
    return Path(location).expanduser().resolve()


def _stage_set(entry: SaveEntry, working_dir: Path, mount: str, codec: DataCodec) -> str:
    (working_dir / entry.folder).mkdir(parents=True, exist_ok=True)
    entry.host_paths = []
    for index, item in enumerate(entry.items):
        target = working_dir / entry.file_name(index)
        target.parent.mkdir(parents=True, exist_ok=True)
        if entry.auto_save:
            codec.save(item, target)
        entry.host_paths.append(target)
    log.info(
        "staging.set",
        argument=entry.argument,
        folder=entry.folder,
        count=len(entry.items),
        saved=entry.auto_save,
    )
    return container_path(mount, entry.folder)


def _stage_export(entry: SaveEntry, working_dir: Path, mount: str, codec: DataCodec) -> str:
    target = working_dir / entry.file_name()
    target.parent.mkdir(parents=True, exist_ok=True)
    if entry.auto_save:
        codec.save(entry.items[0], target)
    entry.host_paths = [target]
    log.info("staging.export", argument=entry.argument, path=str(target), saved=entry.auto_save)
    return container_path(mount, entry.file_name())


def _stage_mount(
    entry: SaveEntry, origin: str, directories: DirectoryProvider, mounts: list[str]
) -> str:
    source = _host_path(origin)
    if entry.mount_name is None:
        entry.mount_name = mint_mount_name(directories)
    entry.mount_source = Path(str(source.parent))
    mounts += ["-v", mount_spec(source.parent, "/" + entry.mount_name, read_only=True)]
    entry.host_paths = [Path(str(source))]
    if isinstance(source, Path) and not source.exists():
        log.warning("staging.origin_missing", argument=entry.argument, path=origin)
    fname = strip_extension(source.name, entry.extension) + entry.extension
    log.info(
        "staging.mount",
        argument=entry.argument,
        source=str(source.parent),
        mount=entry.mount_name,
    )
    return container_path(entry.mount_name, fname)


def stage_entries(
    entries: Iterable[SaveEntry],
    working_dir: Path,
    mount: str,
    codec: DataCodec,
    directories: DirectoryProvider,
) -> StagingResult:
    """Stage every entry in registration order.

    Args:
        entries: Registered :class:`SaveEntry` objects.
        working_dir: Session working directory on the host.
        mount: Mount point name of *working_dir* inside the container.
        codec: Writer used for exported items.
        directories: Provider used to mint unique read-only mount names.

    Returns:
        The read-only mount arguments (``-v`` pairs) and the
        ``argument value`` pairs for the application.

    Staging is repeatable: an entry keeps its minted mount name, and an
    exported file is overwritten at the same location.
    """
    result = StagingResult()
    for entry in entries:
        if entry.is_set:
            value = _stage_set(entry, working_dir, mount, codec)
        else:
            origin = input_location(entry.items[0])
            if origin and has_extension(origin, entry.extension):
                value = _stage_mount(entry, origin, directories, result.mounts)
            else:
                value = _stage_export(entry, working_dir, mount, codec)
        entry.container_value = value
        result.arguments += [entry.argument, value]
    return result
