"""Registration records for container inputs and outputs.

A :class:`SaveEntry` describes data handed *to* the container, a
:class:`LoadEntry` an artifact expected *from* it.  Both validate on
construction so misconfigured registrations fail before anything runs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Sequence

from .data import DataItem
from .errors import ConfigurationError
from .paths import is_within

# ``{}`` or ``{:03d}`` – a single positional substitution for the item index.
_INDEX_TOKEN = re.compile(r"\{(?::[^{}]*)?\}")
_ANY_BRACE = re.compile(r"[{}]")


def _normalise(rel: str) -> str:
    """Return *rel* with forward slashes and without leading ``./``."""
    return str(PurePosixPath(rel.replace("\\", "/")))


@dataclass(eq=False)
class SaveEntry:
    """Data item(s) bound to an application argument.

    Attributes:
        argument: Application flag receiving the container-side path.
        name: File name without extension (single file) or a folder
            qualified pattern with one index token, e.g. ``"slices/s_{:03d}"``.
        extension: Dot-prefixed target extension (``".nii.gz"``).
        items: Data handles; exactly one for single files.
        auto_save: Write during staging.  When *False* only the path is
            reserved and the caller is responsible for writing the file.
        is_set: Multi-file mode (directory of enumerated files).
    """

    argument: str
    name: str
    extension: str
    items: list[DataItem]
    auto_save: bool = True
    is_set: bool = False

    # Filled in by the staging step.
    host_paths: list[Path] = field(default_factory=list, init=False)
    container_value: str | None = field(default=None, init=False)
    mount_name: str | None = field(default=None, init=False)
    mount_source: Path | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not self.argument:
            raise ConfigurationError("Target argument must not be empty")
        if not self.extension or "." not in self.extension:
            raise ConfigurationError(
                f"Extension {self.extension!r} for {self.argument} must contain a dot"
            )
        if not self.extension.startswith("."):
            self.extension = "." + self.extension
        if not self.name:
            raise ConfigurationError(f"Name for {self.argument} must not be empty")
        self.name = _normalise(self.name)
        if not is_within(self.name):
            raise ConfigurationError(
                f"Name {self.name!r} for {self.argument} must stay inside the working directory"
            )
        self.items = list(self.items)
        if self.is_set:
            self._validate_set()
        else:
            self._validate_single()

    def _validate_single(self) -> None:
        if "." in PurePosixPath(self.name).name:
            raise ConfigurationError(
                f"Name {self.name!r} for {self.argument} must not contain a dot; "
                "pass the extension separately"
            )
        if _ANY_BRACE.search(self.name):
            raise ConfigurationError(
                f"Single file {self.argument} cannot use the enumeration pattern {self.name!r}"
            )
        if len(self.items) != 1:
            raise ConfigurationError(
                f"Single file {self.argument} expects exactly one data item, got {len(self.items)}"
            )

    def _validate_set(self) -> None:
        if "/" not in self.name:
            raise ConfigurationError(
                f"Data set {self.argument} needs a folder qualified name, e.g. 'folder/{self.name}'"
            )
        tokens = _INDEX_TOKEN.findall(self.name)
        stray = _ANY_BRACE.findall(_INDEX_TOKEN.sub("", self.name))
        if len(tokens) != 1 or stray:
            raise ConfigurationError(
                f"Data set {self.argument} name {self.name!r} needs exactly one index token such as '{{}}'"
            )
        try:
            self.name.format(0)
        except (ValueError, IndexError) as exc:
            raise ConfigurationError(
                f"Data set {self.argument} name {self.name!r} cannot be enumerated: {exc}"
            ) from exc
        if _INDEX_TOKEN.search(self.folder):
            raise ConfigurationError(
                f"Data set {self.argument} folder {self.folder!r} cannot contain the index token"
            )
        if not self.items:
            raise ConfigurationError(f"Data set {self.argument} contains no data items")

    @property
    def folder(self) -> str:
        """Top-level folder of a data set (name up to the first separator)."""
        return self.name.split("/", 1)[0]

    def file_name(self, index: int = 0) -> str:
        """Return the relative file name (with extension) for item *index*."""
        stem = self.name.format(index) if self.is_set else self.name
        return stem + self.extension

    @property
    def host_path(self) -> Path | None:
        """First resolved host path, available after staging."""
        return self.host_paths[0] if self.host_paths else None


@dataclass(eq=False)
class LoadEntry:
    """An artifact the container is expected to produce.

    Attributes:
        argument: Application flag announcing the output.
        path: File or directory relative to the working directory.
        auto_load: Load the artifact once the container finished.
        flag_only: Pass only *argument* without the path value.
        is_directory: *path* names a directory.
        expected_files: Member file names loaded from a directory output.
    """

    argument: str
    path: str
    auto_load: bool = False
    flag_only: bool = False
    is_directory: bool = False
    expected_files: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.argument:
            raise ConfigurationError("Target argument must not be empty")
        if not self.path:
            raise ConfigurationError(f"Output path for {self.argument} must not be empty")
        self.path = _normalise(self.path)
        if not is_within(self.path):
            raise ConfigurationError(
                f"Output {self.path!r} for {self.argument} must stay inside the working directory"
            )
        self.expected_files = list(self.expected_files)
        if self.expected_files and not self.is_directory:
            raise ConfigurationError(
                f"Expected file names only apply to directory outputs ({self.argument})"
            )
        for fname in self.expected_files:
            if not fname or not is_within(fname):
                raise ConfigurationError(
                    f"Expected file {fname!r} for {self.argument} must be relative"
                )


def make_set_entry(
    argument: str,
    items: Sequence[DataItem],
    name_pattern: str,
    extension: str,
    *,
    auto_save: bool,
) -> SaveEntry:
    """Build a multi-file :class:`SaveEntry`."""
    return SaveEntry(argument, name_pattern, extension, list(items), auto_save, is_set=True)
