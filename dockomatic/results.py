"""Load the artifacts a container left in the working directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import structlog

from .data import DataItem
from .entries import LoadEntry
from .errors import MissingOutput
from .io import DataCodec

log = structlog.get_logger()


@dataclass
class LoadedResults:
    """Items loaded after a run plus the outputs that were not produced."""

    items: list[DataItem] = field(default_factory=list)
    missing: list[MissingOutput] = field(default_factory=list)


def load_results(
    working_dir: Path,
    entries: Iterable[LoadEntry],
    codec: DataCodec,
    *,
    working_dir_files: Iterable[str] = (),
) -> LoadedResults:
    """Load every auto-load artifact that exists.

    Args:
        working_dir: Session working directory on the host.
        entries: Registered outputs, in registration order.
        codec: Reader used for each artifact.
        working_dir_files: Optional file names loaded straight from the
            working directory when present.

    Returns:
        :class:`LoadedResults` with items in load order.  Absent optional
        files and directory members are skipped silently; an absent single
        file output is logged and recorded as missing.
    """
    res = LoadedResults()

    for name in working_dir_files:
        path = working_dir / name
        if path.exists():
            res.items.extend(codec.load(path))
            log.info("results.loaded", source="working_directory", path=str(path))

    for entry in entries:
        if not entry.auto_load:
            continue
        base = working_dir / entry.path
        if entry.is_directory:
            for fname in entry.expected_files:
                path = base / fname
                if path.exists():
                    res.items.extend(codec.load(path))
                    log.info("results.loaded", source="directory", path=str(path), argument=entry.argument)
            continue
        if base.exists():
            res.items.extend(codec.load(base))
            log.info("results.loaded", source="file", path=str(base), argument=entry.argument)
        else:
            log.warning("results.missing", path=str(base), argument=entry.argument)
            res.missing.append(MissingOutput(entry.argument, base))

    return res
