import subprocess

import pytest

from dockomatic.engines.docker import DockerEngine
from dockomatic.errors import ContainerExecutionFailed, ContainerTimeout, RuntimeUnavailable


def _recorder(monkeypatch, returncode=0):
    called = []

    def fake_run(cmd, **kwargs):
        called.append({"cmd": cmd, **kwargs})
        if kwargs.get("check") and returncode:
            raise subprocess.CalledProcessError(returncode, cmd)

        class Dummy:
            pass

        Dummy.returncode = returncode
        return Dummy()

    monkeypatch.setattr(subprocess, "run", fake_run)
    return called


def test_docker_engine_builds_run_command(monkeypatch):
    """Verify docker engine builds the run command in order."""
    called = _recorder(monkeypatch)
    eng = DockerEngine()
    eng.run(
        "img:1",
        ["-v", "/host:/w"],
        ["--input", "/w/default.nrrd"],
        auto_remove=True,
        gpus="all",
    )
    cmd = called[0]["cmd"]
    assert cmd == [
        "docker", "run", "-v", "/host:/w", "--rm", "--gpus", "all",
        "img:1", "--input", "/w/default.nrrd",
    ]
    assert called[0]["check"] is True
    assert called[0]["timeout"] is None


def test_user_supplied_rm_and_gpus_are_not_duplicated(monkeypatch):
    """Verify --rm and --gpus are only added when absent."""
    called = _recorder(monkeypatch)
    DockerEngine().run("img", ["--rm", "--gpus=device=0"], [], auto_remove=True, gpus="all")
    cmd = called[0]["cmd"]
    assert cmd.count("--rm") == 1
    assert "all" not in cmd
    assert cmd == ["docker", "run", "--rm", "--gpus=device=0", "img"]


def test_platform_and_executable(monkeypatch):
    """Verify the configured executable and platform are used."""
    called = _recorder(monkeypatch)
    DockerEngine("podman", platform="linux/amd64").run("img", [], ["a"])
    assert called[0]["cmd"] == ["podman", "run", "--platform", "linux/amd64", "img", "a"]
    assert called[0]["timeout"] is None


def test_nonzero_exit_raises(monkeypatch):
    """Verify a failing run raises with the exit code and subcommand."""
    _recorder(monkeypatch, returncode=3)
    with pytest.raises(ContainerExecutionFailed) as info:
        DockerEngine().run("img", [], [])
    assert info.value.returncode == 3
    assert info.value.subcommand == "run"


def _timing_out(monkeypatch):
    called = []

    def fake_run(cmd, **kwargs):
        called.append({"cmd": cmd, **kwargs})
        if cmd[1] == "run":
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        class Dummy:
            returncode = 0

        return Dummy()

    monkeypatch.setattr(subprocess, "run", fake_run)
    return called


def test_timeout_removes_container(monkeypatch):
    """Verify a timed-out run force-removes its named container and raises."""
    called = _timing_out(monkeypatch)
    with pytest.raises(ContainerTimeout) as info:
        DockerEngine(timeout=1.5).run("img", ["-v", "/host:/w"], ["a"])
    assert info.value.timeout == 1.5
    assert isinstance(info.value, ContainerExecutionFailed)

    run = called[0]["cmd"]
    assert called[0]["timeout"] == 1.5
    name = run[run.index("--name") + 1]
    assert name.startswith("dockomatic_")
    assert run.index("--name") < run.index("img")
    assert called[1]["cmd"] == ["docker", "rm", "-f", name]
    assert called[1]["timeout"] == 30.0
    assert len(called) == 2


def test_timeout_uses_given_container_name(monkeypatch):
    """Verify a caller supplied --name is reused for the forced removal."""
    called = _timing_out(monkeypatch)
    with pytest.raises(ContainerTimeout):
        DockerEngine(timeout=2).run("img", ["--name=seg_job"], [])
    assert called[0]["cmd"].count("--name") == 0
    assert called[1]["cmd"] == ["docker", "rm", "-f", "seg_job"]


def test_runs_without_timeout_are_not_named(monkeypatch):
    """Verify no container name is added when no timeout is configured."""
    called = _recorder(monkeypatch)
    DockerEngine().run("img", [], [])
    assert "--name" not in called[0]["cmd"]


def test_missing_binary_raises_unavailable(monkeypatch):
    """Verify a missing executable surfaces as RuntimeUnavailable."""

    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(RuntimeUnavailable):
        DockerEngine().execute("run", ["img"])
    assert DockerEngine().available() is False


def test_available_checks_exit_code(monkeypatch):
    """Verify the probe runs 'docker ps' and only inspects the exit code."""
    called = _recorder(monkeypatch, returncode=0)
    assert DockerEngine().available() is True
    assert called[0]["cmd"] == ["docker", "ps"]
    assert called[0]["stdout"] is subprocess.DEVNULL

    _recorder(monkeypatch, returncode=1)
    assert DockerEngine().available() is False


def test_remove_image_forces(monkeypatch):
    """Verify rmi is forced."""
    called = _recorder(monkeypatch)
    DockerEngine().remove_image("img:1")
    assert called[0]["cmd"] == ["docker", "rmi", "-f", "img:1"]
