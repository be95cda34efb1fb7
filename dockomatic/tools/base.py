"""Base class for prebuilt container task recipes."""

from __future__ import annotations

from dockomatic.data import DataItem
from dockomatic.helper import DockerHelper


class Tool:
    """Base class for wrappers around containerised utilities.

    Subclasses set :attr:`image` (usually from their config object) and
    register their inputs and outputs in :meth:`configure`.
    """

    image: str

    def configure(self, helper: DockerHelper) -> None:
        """Register arguments, inputs and outputs on *helper*."""
        raise NotImplementedError

    def collect(self, results: list[DataItem]) -> list[DataItem]:
        """Post-process the loaded *results*; the default keeps them as-is."""
        return results

    def execute(self, **helper_kwargs) -> list[DataItem]:
        """Open a :class:`DockerHelper`, configure it and return its results.

        Keyword arguments are forwarded to :class:`DockerHelper` (engine,
        codec, settings …).
        """
        with DockerHelper(self.image, **helper_kwargs) as helper:
            self.configure(helper)
            return self.collect(helper.get_results())
