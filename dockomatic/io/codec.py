"""Readers and writers used to move :class:`DataItem` objects through files.

The helper never inspects payloads itself.  It asks a :class:`DataCodec` to
persist an item at a path (format chosen by the path's extension) and to
load whatever a container produced.  A single file may expand into several
items, so :meth:`DataCodec.load` always returns a list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np
import structlog

from ..data import DataItem

log = structlog.get_logger()

#: Extensions handled by :class:`NibabelCodec`.
NIBABEL_EXTENSIONS = (
    ".nii.gz",
    ".nii",
    ".img.gz",
    ".img",
    ".hdr",
    ".mgz",
    ".mgh",
)


def _matches(path: Path, extensions: tuple[str, ...]) -> bool:
    """Return ``True`` when *path* ends with one of *extensions*."""
    name = path.name.lower()
    return any(name.endswith(ext) for ext in extensions)


class DataCodec(ABC):
    """Abstract reader/writer collaborator."""

    @abstractmethod
    def load(self, path: Path) -> list[DataItem]:
        """Read *path* and return the contained items."""
        raise NotImplementedError

    @abstractmethod
    def save(self, item: DataItem, path: Path) -> None:
        """Persist *item* at *path*."""
        raise NotImplementedError


class NibabelCodec(DataCodec):
    """Read and write neuroimaging volumes through :mod:`nibabel`."""

    def load(self, path: Path) -> list[DataItem]:
        import nibabel as nib

        img = nib.load(str(path))
        log.debug("codec.nibabel.load", path=str(path), shape=img.shape)
        return [DataItem.from_file(img, path)]

    def save(self, item: DataItem, path: Path) -> None:
        import nibabel as nib

        img = item.payload
        if isinstance(img, np.ndarray):
            # Bare arrays get an identity affine.
            img = nib.Nifti1Image(img, np.eye(4))
        if not hasattr(img, "to_filename"):
            raise TypeError(
                f"Cannot write {type(item.payload).__name__} to {path.name} with nibabel"
            )
        nib.save(img, str(path))
        log.debug("codec.nibabel.save", path=str(path))


class RawCodec(DataCodec):
    """Pass file contents through unchanged as :class:`bytes`."""

    def load(self, path: Path) -> list[DataItem]:
        return [DataItem.from_file(path.read_bytes(), path)]

    def save(self, item: DataItem, path: Path) -> None:
        payload = item.payload
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        elif isinstance(payload, (bytes, bytearray, memoryview)):
            path.write_bytes(bytes(payload))
        else:
            raise TypeError(
                f"Cannot write {type(payload).__name__} to {path.name} as raw bytes"
            )


class DefaultCodec(DataCodec):
    """Dispatch to :class:`NibabelCodec` or :class:`RawCodec` by extension."""

    def __init__(self) -> None:
        self.volumes = NibabelCodec()
        self.raw = RawCodec()

    def _pick(self, path: Path) -> DataCodec:
        return self.volumes if _matches(path, NIBABEL_EXTENSIONS) else self.raw

    def load(self, path: Path) -> list[DataItem]:
        return self._pick(path).load(path)

    def save(self, item: DataItem, path: Path) -> None:
        self._pick(path).save(item, path)
