from __future__ import annotations

"""Container engines used to launch images."""

from abc import ABC, abstractmethod
from typing import Sequence


class ContainerEngine(ABC):
    """Abstract container engine.

    Concrete implementations talk to a container runtime CLI (Docker,
    Podman …).  The interface is intentionally small so the orchestration
    helper can be exercised with a stub engine in tests.
    """

    @abstractmethod
    def available(self) -> bool:
        """Return ``True`` when the runtime answers a trivial query."""
        raise NotImplementedError

    @abstractmethod
    def execute(self, subcommand: str, args: Sequence[str]) -> int:
        """Run ``<runtime> <subcommand> <args…>`` and wait for it.

        Returns:
            ``0`` on success.

        Raises:
            ContainerExecutionFailed: If the process exits non-zero.
        """
        raise NotImplementedError

    def run(
        self,
        image: str,
        runtime_args: Sequence[str],
        application_args: Sequence[str],
        *,
        auto_remove: bool = False,
        gpus: str | None = None,
    ) -> int:
        """Run *image* with the given runtime and application arguments.

        Args:
            image: Container reference such as ``my/image:tag``.
            runtime_args: Arguments placed before the image (mounts, extras).
            application_args: Arguments forwarded to the image entrypoint.
            auto_remove: Add ``--rm`` unless already present.
            gpus: Value for ``--gpus`` unless already present.

        Returns:
            ``0`` on success.
        """
        return self.execute("run", self.build_run_args(
            image, runtime_args, application_args, auto_remove=auto_remove, gpus=gpus
        ))

    def build_run_args(
        self,
        image: str,
        runtime_args: Sequence[str],
        application_args: Sequence[str],
        *,
        auto_remove: bool = False,
        gpus: str | None = None,
    ) -> list[str]:
        """Return the argument vector following the ``run`` sub-command."""
        args = list(runtime_args)
        if auto_remove and "--rm" not in args:
            args.append("--rm")
        if gpus and not _has_option(args, "--gpus"):
            args += ["--gpus", gpus]
        args.append(image)
        args.extend(application_args)
        return args

    def remove_image(self, image: str, args: Sequence[str] = ()) -> int:
        """Force-remove *image* (``rmi -f``)."""
        rmi = list(args)
        if "-f" not in rmi and "--force" not in rmi:
            rmi.insert(0, "-f")
        rmi.append(image)
        return self.execute("rmi", rmi)


def _has_option(args: Sequence[str], option: str) -> bool:
    """Return ``True`` if *option* appears as ``opt`` or ``opt=value``."""
    return any(a == option or a.startswith(option + "=") for a in args)


def _option_value(args: Sequence[str], option: str) -> str | None:
    """Return the value given for *option* (``opt value`` or ``opt=value``)."""
    for i, arg in enumerate(args):
        if arg == option and i + 1 < len(args):
            return args[i + 1]
        if arg.startswith(option + "="):
            return arg.split("=", 1)[1]
    return None
