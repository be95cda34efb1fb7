"""Exceptions raised by the container orchestration helper.

Registration problems surface immediately as :class:`ConfigurationError`.
Runtime problems (engine missing, container exiting non-zero) abort the
whole session.  Outputs that a container did not produce are *not*
exceptions: they are recorded as :class:`MissingOutput` entries and logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class DockomaticError(RuntimeError):
    """Base class for every error raised by :mod:`dockomatic`."""

    pass


class ConfigurationError(DockomaticError, ValueError):
    """Raised when an input/output registration or setting is invalid."""

    pass


class RuntimeUnavailable(DockomaticError):
    """Raised when the container engine cannot be reached."""

    pass


class ContainerExecutionFailed(DockomaticError):
    """Raised when a container engine sub-command exits with a non-zero code.

    Attributes:
        subcommand: Engine sub-command that failed (``run``, ``rmi`` …).
        returncode: Exit status reported by the engine, ``None`` when the
            process had to be killed.
    """

    def __init__(self, subcommand: str, returncode: int | None, message: str | None = None):
        self.subcommand = subcommand
        self.returncode = returncode
        super().__init__(
            message or f"docker {subcommand} failed with exit code [{returncode}]"
        )


class ContainerTimeout(ContainerExecutionFailed):
    """Raised when a container engine call exceeds the configured timeout."""

    def __init__(self, subcommand: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            subcommand,
            None,
            f"docker {subcommand} did not finish within {timeout:g}s",
        )


@dataclass(frozen=True)
class MissingOutput:
    """An expected artifact that was absent after the container finished."""

    argument: str
    path: Path
