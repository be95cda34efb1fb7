"""Assemble the ``docker run`` and entrypoint argument vectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable, Sequence

import structlog

from .entries import LoadEntry
from .paths import container_path, mount_spec
from .staging import StagingResult

log = structlog.get_logger()


@dataclass
class RunArguments:
    """Container-runtime arguments and application arguments, in order."""

    runtime: list[str] = field(default_factory=list)
    application: list[str] = field(default_factory=list)


def output_arguments(entries: Iterable[LoadEntry], working_dir: Path, mount: str) -> list[str]:
    """Return the application arguments announcing every output.

    Host directories are created for directory outputs that carry a path
    value so the container can write into them.
    """
    args: list[str] = []
    for entry in entries:
        args.append(entry.argument)
        if entry.flag_only:
            continue
        args.append(container_path(mount, entry.path))
        if entry.is_directory:
            if "." in PurePosixPath(entry.path).name:
                log.warning("arguments.directory_dot", argument=entry.argument, path=entry.path)
            (working_dir / entry.path).mkdir(parents=True, exist_ok=True)
    return args


def assemble(
    working_dir: Path,
    mount: str,
    staging: StagingResult,
    outputs: Iterable[LoadEntry],
    *,
    run_args: Sequence[str] = (),
    application_args: Sequence[str] = (),
) -> RunArguments:
    """Combine mounts, user extras, inputs and outputs in their fixed order.

    Order of the runtime vector: working directory mount, read-only mounts,
    user run arguments.  Order of the application vector: user application
    arguments, staged inputs, outputs.
    """
    ra = RunArguments()
    ra.runtime += ["-v", mount_spec(working_dir, "/" + mount)]
    ra.runtime += staging.mounts
    ra.runtime += list(run_args)

    ra.application += list(application_args)
    ra.application += staging.arguments
    ra.application += output_arguments(outputs, working_dir, mount)
    return ra
