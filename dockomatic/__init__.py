"""
dockomatic package initialisation.

Exposes the version string and the objects most callers need::

    from dockomatic import DataItem, DockerHelper
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("dockomatic")
except PackageNotFoundError:
    # Source tree without an installed distribution.
    __version__ = "0.0.0"

from .data import INPUT_LOCATION, DataItem  # noqa: E402
from .errors import (  # noqa: E402
    ConfigurationError,
    ContainerExecutionFailed,
    ContainerTimeout,
    DockomaticError,
    MissingOutput,
    RuntimeUnavailable,
)
from .helper import DockerHelper, check_docker  # noqa: E402

__all__: list[str] = [
    "__version__",
    "DataItem",
    "INPUT_LOCATION",
    "DockerHelper",
    "check_docker",
    "DockomaticError",
    "ConfigurationError",
    "RuntimeUnavailable",
    "ContainerExecutionFailed",
    "ContainerTimeout",
    "MissingOutput",
]
