"""Translate host paths into the container's path namespace.

The working directory's base name is re-used as the mount point inside the
container, so ``/tmp/dkr_ab12cd`` on the host becomes ``/dkr_ab12cd`` in the
container.  Container paths are always POSIX style regardless of the host
operating system.
"""

from __future__ import annotations

import re
from pathlib import PurePath

from .errors import ConfigurationError

_SEPARATORS = re.compile(r"[\\/]+")


def mount_name(host_dir: str | PurePath) -> str:
    """Return the final component of *host_dir* for use as a mount point.

    Both ``/`` and ``\\`` are treated as separators so Windows paths passed
    around as strings resolve the same way as POSIX ones.

    Raises:
        ConfigurationError: If *host_dir* has no usable final component.
    """
    parts = [p for p in _SEPARATORS.split(str(host_dir)) if p]
    if not parts or parts[-1].endswith(":"):
        raise ConfigurationError(f"Cannot derive a mount name from {host_dir!r}")
    return parts[-1]


def container_path(mount: str, *parts: str | PurePath) -> str:
    """Join *parts* below ``/<mount>`` using forward slashes only."""
    segments = [mount.strip("/\\")]
    for part in parts:
        segments.extend(p for p in _SEPARATORS.split(str(part)) if p and p != ".")
    return "/" + "/".join(segments)


def mount_spec(host: str | PurePath, container: str, *, read_only: bool = False) -> str:
    """Return a ``-v`` value of the form ``<host>:<container>[:ro]``."""
    spec = f"{host}:{container}"
    return f"{spec}:ro" if read_only else spec


def has_extension(filename: str | PurePath, extension: str) -> bool:
    """Return ``True`` when the base name of *filename* ends with *extension*.

    The comparison is case-sensitive and supports multi-dot extensions such
    as ``.nii.gz``.
    """
    name = PurePath(str(filename)).name
    return bool(extension) and name.endswith(extension) and len(name) > len(extension)


def strip_extension(filename: str | PurePath, extension: str) -> str:
    """Return the base name of *filename* without *extension*."""
    name = PurePath(str(filename)).name
    if has_extension(name, extension):
        return name[: -len(extension)]
    return name


def is_within(relative: str | PurePath) -> bool:
    """Return ``True`` if *relative* stays inside the directory it is joined to."""
    rel = PurePath(str(relative).replace("\\", "/"))
    if rel.is_absolute():
        return False
    return ".." not in rel.parts
