"""Run a containerised tool on in-memory data and collect what it produces.

Typical use::

    with DockerHelper("wasserth/totalsegmentator:2.0.0") as helper:
        helper.add_auto_save_data(image, "-i", "input_image", ".nii.gz")
        helper.add_auto_load_output("-o", "results.nii")
        results = helper.get_results()

A helper owns a freshly allocated working directory that is mounted
read-write into the container under its own base name.  Registration calls
only record what should happen; :meth:`DockerHelper.get_results` performs
the health check, stages the inputs, runs the image and loads the outputs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import structlog

from .arguments import RunArguments, assemble
from .config import HelperSettings, load_settings
from .data import DataItem
from .engines import ContainerEngine, DockerEngine
from .entries import LoadEntry, SaveEntry, make_set_entry
from .errors import (
    ConfigurationError,
    ContainerExecutionFailed,
    MissingOutput,
    RuntimeUnavailable,
)
from .io import DataCodec, DefaultCodec
from .paths import mount_name
from .results import load_results
from .staging import stage_entries
from .workdir import DirectoryProvider, TempDirectoryProvider

log = structlog.get_logger()

AUTOLOAD = True
AUTOSAVE = True
DIRECTORY = True
FLAG_ONLY = True


def engine_from_settings(settings: HelperSettings) -> DockerEngine:
    """Return a :class:`DockerEngine` configured from *settings*."""
    return DockerEngine(
        settings.executable,
        timeout=settings.timeout,
        probe_timeout=settings.probe_timeout,
        platform=settings.platform,
    )


def check_docker(engine: ContainerEngine | None = None) -> bool:
    """Return ``True`` when the container runtime is reachable."""
    engine = engine or engine_from_settings(load_settings())
    ok = engine.available()
    if not ok:
        log.info("docker.not_installed")
    return ok


class DockerHelper:
    """One orchestration session: register, run once, collect results."""

    def __init__(
        self,
        image: str,
        *,
        engine: ContainerEngine | None = None,
        codec: DataCodec | None = None,
        directories: DirectoryProvider | None = None,
        settings: HelperSettings | None = None,
    ) -> None:
        """Allocate the working directory and apply *settings*.

        Args:
            image: Container reference such as ``my/image:tag``.
            engine: Container engine; defaults to :class:`DockerEngine`.
            codec: Reader/writer for staged and produced files.
            directories: Provider of the working directory and of unique
                read-only mount names.
            settings: Helper defaults; loaded via :func:`load_settings` when
                omitted.
        """
        if not image:
            raise ConfigurationError("An image reference is required")
        self.settings = settings or load_settings()
        self.image = image
        self.engine = engine or engine_from_settings(self.settings)
        self.codec = codec or DefaultCodec()
        self.directories = directories or TempDirectoryProvider(
            self.settings.temp_prefix, self.settings.temp_root
        )

        self.auto_remove_container = self.settings.auto_remove_container
        self.auto_remove_image = self.settings.auto_remove_image
        self.gpus: str | None = self.settings.gpu_spec if self.settings.gpus else None
        self.keep_working_directory = self.settings.keep_working_directory

        self._save: dict[str, SaveEntry] = {}
        self._load: dict[str, LoadEntry] = {}
        self._run_args: list[str] = []
        self._app_args: list[str] = []
        self._working_dir_files: list[str] = []

        self.output_data: list[DataItem] = []
        self.missing_outputs: list[MissingOutput] = []
        self.arguments: RunArguments | None = None

        self._working_dir = self.directories.allocate()
        self.container_mount = mount_name(self._working_dir)
        self._closed = False
        log.debug("helper.created", image=image, working_directory=str(self._working_dir))

    # ------------------------------------------------------------------ #
    # Scoped resource                                                    #
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "DockerHelper":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the working directory unless it should be kept."""
        if self._closed:
            return
        self._closed = True
        if self.keep_working_directory:
            log.info("helper.kept_working_directory", path=str(self._working_dir))
            return
        self.directories.release(self._working_dir)

    @property
    def working_directory(self) -> Path:
        return self._working_dir

    # ------------------------------------------------------------------ #
    # Registration                                                       #
    # ------------------------------------------------------------------ #
    def _claim(self, argument: str) -> None:
        if argument in self._save or argument in self._load:
            raise ConfigurationError(
                f"Overriding the already registered argument {argument!r} is not allowed"
            )

    def _add_save(self, entry: SaveEntry) -> SaveEntry:
        self._claim(entry.argument)
        self._save[entry.argument] = entry
        return entry

    def _add_load(self, entry: LoadEntry) -> LoadEntry:
        self._claim(entry.argument)
        self._load[entry.argument] = entry
        return entry

    def add_auto_save_data(
        self, item: DataItem, argument: str, name: str, extension: str
    ) -> SaveEntry:
        """Write *item* as ``<name><extension>`` before the run."""
        return self._add_save(SaveEntry(argument, name, extension, [item], AUTOSAVE))

    def add_save_later_data(
        self, item: DataItem, argument: str, name: str, extension: str
    ) -> SaveEntry:
        """Reserve ``<name><extension>`` for *item*; the caller writes it."""
        return self._add_save(SaveEntry(argument, name, extension, [item], not AUTOSAVE))

    def add_auto_save_data_set(
        self, items: Sequence[DataItem], argument: str, name_pattern: str, extension: str
    ) -> SaveEntry:
        """Write each of *items* to ``name_pattern.format(index)``.

        The argument receives the folder (first component of
        *name_pattern*), so the container must treat it as a directory.
        """
        return self._add_save(
            make_set_entry(argument, items, name_pattern, extension, auto_save=AUTOSAVE)
        )

    def add_save_later_data_set(
        self, items: Sequence[DataItem], argument: str, name_pattern: str, extension: str
    ) -> SaveEntry:
        """Reserve enumerated paths for *items*; the caller writes them."""
        return self._add_save(
            make_set_entry(argument, items, name_pattern, extension, auto_save=not AUTOSAVE)
        )

    def add_auto_load_output(
        self, argument: str, path: str, flag_only: bool = False
    ) -> LoadEntry:
        """Expect *path* after the run and load it into :attr:`output_data`."""
        return self._add_load(LoadEntry(argument, path, AUTOLOAD, flag_only))

    def add_load_later_output(
        self, argument: str, path: str, flag_only: bool = False
    ) -> LoadEntry:
        """Announce *path* to the container without loading it."""
        return self._add_load(LoadEntry(argument, path, not AUTOLOAD, flag_only))

    def add_auto_load_output_folder(
        self, argument: str, directory: str, expected_filenames: Sequence[str]
    ) -> LoadEntry:
        """Expect *directory* and load each of *expected_filenames* found in it."""
        return self._add_load(
            LoadEntry(
                argument,
                directory,
                AUTOLOAD,
                not FLAG_ONLY,
                DIRECTORY,
                list(expected_filenames),
            )
        )

    def add_auto_load_file_from_working_directory(self, filename: str) -> None:
        """Load *filename* from the working directory if the container wrote it."""
        self._working_dir_files.append(filename)

    def add_application_argument(self, argument: str, value: str | None = None) -> None:
        """Append an entrypoint argument (and optional value)."""
        self._app_args.append(argument)
        if value:
            self._app_args.append(value)

    def add_run_argument(self, argument: str, value: str | None = None) -> None:
        """Append a ``docker run`` argument (and optional value)."""
        self._run_args.append(argument)
        if value:
            self._run_args.append(value)

    def enable_auto_remove_image(self, value: bool) -> None:
        self.auto_remove_image = value

    def enable_auto_remove_container(self, value: bool) -> None:
        self.auto_remove_container = value

    def enable_gpus(self, value: bool, spec: str | None = None) -> None:
        """Request GPUs (``--gpus <spec>``) for the container."""
        self.gpus = (spec or self.settings.gpu_spec) if value else None

    # ------------------------------------------------------------------ #
    # Lookups                                                            #
    # ------------------------------------------------------------------ #
    def get_file_path(self, path: str | Path) -> Path:
        """Return *path* resolved against the working directory."""
        return self._working_dir / path

    def get_save_paths(self, argument: str) -> list[Path]:
        """Return the host paths reserved for the input bound to *argument*.

        Before staging the paths inside the working directory are predicted;
        afterwards the resolved paths (including read-only sources) are
        returned.
        """
        try:
            entry = self._save[argument]
        except KeyError:
            raise ConfigurationError(f"No input registered for {argument!r}") from None
        if entry.host_paths:
            return list(entry.host_paths)
        count = len(entry.items) if entry.is_set else 1
        return [self._working_dir / entry.file_name(i) for i in range(count)]

    def get_save_path(self, argument: str) -> Path:
        """Return the (first) host path of the input bound to *argument*."""
        return self.get_save_paths(argument)[0]

    def get_load_path(self, argument: str) -> Path:
        """Return the host path of the output bound to *argument*."""
        try:
            entry = self._load[argument]
        except KeyError:
            raise ConfigurationError(f"No output registered for {argument!r}") from None
        return self._working_dir / entry.path

    # ------------------------------------------------------------------ #
    # Orchestration                                                      #
    # ------------------------------------------------------------------ #
    def build_arguments(self) -> RunArguments:
        """Stage inputs and assemble the argument vectors.

        Calling this repeatedly on an unchanged session yields identical
        vectors.
        """
        staging = stage_entries(
            self._save.values(),
            self._working_dir,
            self.container_mount,
            self.codec,
            self.directories,
        )
        self.arguments = assemble(
            self._working_dir,
            self.container_mount,
            staging,
            self._load.values(),
            run_args=self._run_args,
            application_args=self._app_args,
        )
        return self.arguments

    def get_results(self) -> list[DataItem]:
        """Run the image and return the loaded outputs.

        Raises:
            RuntimeUnavailable: If the runtime probe fails; nothing has been
                staged at that point.
            ContainerExecutionFailed: If the container exits non-zero.
        """
        if self._closed:
            raise ConfigurationError("This helper has already been closed")
        if not self.engine.available():
            raise RuntimeUnavailable("No Docker instance found!")

        args = self.build_arguments()
        self.engine.run(
            self.image,
            args.runtime,
            args.application,
            auto_remove=self.auto_remove_container,
            gpus=self.gpus,
        )

        loaded = load_results(
            self._working_dir,
            self._load.values(),
            self.codec,
            working_dir_files=self._working_dir_files,
        )
        self.output_data.extend(loaded.items)
        self.missing_outputs.extend(loaded.missing)
        log.info(
            "helper.results",
            image=self.image,
            loaded=len(self.output_data),
            missing=len(self.missing_outputs),
        )

        if self.auto_remove_image:
            self._remove_image()
        return list(self.output_data)

    def _remove_image(self) -> None:
        try:
            self.engine.remove_image(self.image)
        except (ContainerExecutionFailed, RuntimeUnavailable) as exc:
            log.warning("helper.remove_image_failed", image=self.image, error=str(exc))
