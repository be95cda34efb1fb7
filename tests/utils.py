"""Test helpers for dockomatic modules."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from dockomatic.data import INPUT_LOCATION, DataItem
from dockomatic.engines import ContainerEngine
from dockomatic.errors import ContainerExecutionFailed
from dockomatic.io import DataCodec


class RecordingCodec(DataCodec):
    """Codec writing placeholder bytes and remembering every call."""

    def __init__(self) -> None:
        self.saved: list[tuple[DataItem, Path]] = []
        self.loaded: list[Path] = []

    def save(self, item: DataItem, path: Path) -> None:
        self.saved.append((item, path))
        payload = item.payload if isinstance(item.payload, bytes) else b"saved"
        path.write_bytes(payload)

    def load(self, path: Path) -> list[DataItem]:
        self.loaded.append(path)
        return [DataItem(path.read_bytes(), {INPUT_LOCATION: str(path)})]


class FakeEngine(ContainerEngine):
    """Engine that records calls and writes files into the mounted workdir.

    Args:
        available: Result of the health probe.
        returncode: Exit code reported for ``run``; non-zero raises.
        writes: Files (relative to the working directory) created on ``run``.
        rmi_returncode: Exit code reported for ``rmi``.
    """

    def __init__(
        self,
        *,
        available: bool = True,
        returncode: int = 0,
        writes: dict[str, bytes] | None = None,
        rmi_returncode: int = 0,
    ) -> None:
        self._available = available
        self.returncode = returncode
        self.writes = writes or {}
        self.rmi_returncode = rmi_returncode
        self.probes = 0
        self.calls: list[tuple[str, list[str]]] = []

    def available(self) -> bool:
        self.probes += 1
        return self._available

    def execute(self, subcommand: str, args: Sequence[str]) -> int:
        self.calls.append((subcommand, list(args)))
        if subcommand == "rmi":
            if self.rmi_returncode:
                raise ContainerExecutionFailed("rmi", self.rmi_returncode)
            return 0
        if self.returncode:
            raise ContainerExecutionFailed(subcommand, self.returncode)
        workdir = Path(args[args.index("-v") + 1].rsplit(":", 1)[0])
        for rel, content in self.writes.items():
            target = workdir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return 0

    @property
    def run_calls(self) -> list[list[str]]:
        return [args for sub, args in self.calls if sub == "run"]
