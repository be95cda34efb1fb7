"""Provisioning of uniquely named host directories.

Each orchestration session owns one working directory.  Read-only mounts
additionally need mount-point names that never collide with another
session; those are harvested by allocating a directory and removing it
straight away.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

log = logging.getLogger(__name__)


class DirectoryProvider(ABC):
    """Allocate and release uniquely named directories."""

    @abstractmethod
    def allocate(self) -> Path:
        """Create a new, empty, uniquely named directory and return it."""
        raise NotImplementedError

    def release(self, path: Path) -> bool:
        """Recursively remove *path*.

        Returns:
            *True* when the directory was removed, *False* when it did not
            exist or could not be deleted.
        """
        if not path.exists():
            return False
        try:
            shutil.rmtree(path)
            log.debug("Deleted directory %s", path)
            return True
        except OSError as exc:  # pragma: no cover - log+return keeps behavior
            log.error("Could not delete %s: %s", path, exc)
            return False


class TempDirectoryProvider(DirectoryProvider):
    """Allocate directories below the system (or a given) temp root."""

    def __init__(self, prefix: str = "dkr_", root: Path | None = None) -> None:
        if "/" in prefix or "\\" in prefix:
            raise ValueError(f"prefix must be a single path component: {prefix!r}")
        self.prefix = prefix
        self.root = root

    def allocate(self) -> Path:
        if self.root is not None:
            self.root.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
        return path.resolve()


def mint_mount_name(provider: DirectoryProvider) -> str:
    """Return a unique directory name without keeping the directory."""
    phantom = provider.allocate()
    provider.release(phantom)
    return phantom.name
