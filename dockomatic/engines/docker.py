"""Docker execution engine."""

from __future__ import annotations

import subprocess
import uuid
from typing import Sequence

import structlog

from ..errors import ContainerExecutionFailed, ContainerTimeout, RuntimeUnavailable
from .base import ContainerEngine, _has_option, _option_value

log = structlog.get_logger()


class DockerEngine(ContainerEngine):
    """Run images through the ``docker`` command line client."""

    def __init__(
        self,
        executable: str = "docker",
        *,
        timeout: float | None = None,
        probe_timeout: float = 30.0,
        platform: str | None = None,
    ) -> None:
        """Configure the engine.

        Args:
            executable: Client binary; any Docker compatible CLI (``podman``)
                works.
            timeout: Seconds after which ``run``/``rmi`` are killed.  ``None``
                waits indefinitely.
            probe_timeout: Seconds granted to the availability probe.
            platform: Optional ``docker --platform`` value to request a
                specific architecture.
        """
        self.executable = executable
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.platform = platform

    def available(self) -> bool:
        """Return ``True`` when ``docker ps`` exits with status 0.

        Output is discarded; a missing binary or a hanging daemon count as
        unavailable.
        """
        try:
            proc = subprocess.run(
                [self.executable, "ps"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.probe_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            log.info("docker.unavailable", executable=self.executable, error=str(exc))
            return False
        if proc.returncode != 0:
            log.info("docker.unavailable", executable=self.executable, returncode=proc.returncode)
            return False
        return True

    def run(
        self,
        image: str,
        runtime_args: Sequence[str],
        application_args: Sequence[str],
        *,
        auto_remove: bool = False,
        gpus: str | None = None,
    ) -> int:
        """Run *image*; a timed-out container is force-removed.

        Killing the ``docker`` client leaves an attached container running,
        so runs under a timeout get a ``--name`` (unless one was passed) that
        ``docker rm -f`` can target.
        """
        runtime = list(runtime_args)
        name = _option_value(runtime, "--name")
        if name is None and self.timeout is not None:
            name = f"dockomatic_{uuid.uuid4().hex[:12]}"
            runtime += ["--name", name]
        try:
            return super().run(
                image, runtime, application_args, auto_remove=auto_remove, gpus=gpus
            )
        except ContainerTimeout:
            if name:
                self._force_remove(name)
            raise

    def _force_remove(self, container: str) -> None:
        cmd = [self.executable, "rm", "-f", container]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.probe_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            log.error("docker.kill_failed", container=container, error=str(exc))
            return
        if proc.returncode != 0:
            log.error("docker.kill_failed", container=container, returncode=proc.returncode)
        else:
            log.warning("docker.killed", container=container)

    def build_run_args(
        self,
        image: str,
        runtime_args: Sequence[str],
        application_args: Sequence[str],
        *,
        auto_remove: bool = False,
        gpus: str | None = None,
    ) -> list[str]:
        runtime = list(runtime_args)
        if self.platform and not _has_option(runtime, "--platform"):
            runtime += ["--platform", self.platform]
        return super().build_run_args(
            image, runtime, application_args, auto_remove=auto_remove, gpus=gpus
        )

    def execute(self, subcommand: str, args: Sequence[str]) -> int:
        """Run ``docker <subcommand> <args…>`` synchronously.

        Returns:
            ``0`` on success.

        Raises:
            RuntimeUnavailable: If the client binary cannot be started.
            ContainerTimeout: If the call exceeds :attr:`timeout`; the child
                process is killed.
            ContainerExecutionFailed: If Docker exits with a non-zero status.
        """
        cmd: list[str] = [self.executable, subcommand, *args]
        log.info(f"docker.{subcommand}", args=list(args))
        try:
            subprocess.run(cmd, check=True, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise RuntimeUnavailable(f"{self.executable} executable not found") from exc
        except subprocess.TimeoutExpired as exc:
            log.error("docker.timeout", subcommand=subcommand, timeout=self.timeout)
            raise ContainerTimeout(subcommand, exc.timeout) from exc
        except subprocess.CalledProcessError as exc:
            log.error("docker.failed", subcommand=subcommand, returncode=exc.returncode)
            raise ContainerExecutionFailed(subcommand, exc.returncode) from exc
        return 0
