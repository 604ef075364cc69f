from __future__ import annotations

import sys
from pathlib import Path

import pytest

from buildplan.model import BuildStep


class Recorder:
    """Builds steps that log `<name> <cwd>` to a file, then exit with a given code."""

    def __init__(self, log: Path):
        self.log = log

    def step(self, name: str, code: int = 0, *, cwd: str = ".", enabled: bool = True, **kwargs) -> BuildStep:
        script = (
            "import os, sys\n"
            f"with open({str(self.log)!r}, 'a') as fh:\n"
            f"    fh.write({name!r} + ' ' + os.getcwd() + '\\n')\n"
            f"sys.exit({code})\n"
        )
        return BuildStep(
            name=name,
            command=sys.executable,
            args=("-c", script),
            cwd=cwd,
            enabled=enabled,
            **kwargs,
        )

    def calls(self) -> list[tuple[str, str]]:
        if not self.log.exists():
            return []
        out = []
        for line in self.log.read_text().splitlines():
            name, cwd = line.split(" ", 1)
            out.append((name, cwd))
        return out

    def names(self) -> list[str]:
        return [name for name, _ in self.calls()]


@pytest.fixture
def recorder(tmp_path: Path) -> Recorder:
    return Recorder(tmp_path / "calls.log")


@pytest.fixture
def no_spawn(monkeypatch):
    """Fail the test if anything tries to start a process."""
    import buildplan.runner as runner_mod

    def _boom(*args, **kwargs):
        raise AssertionError(f"unexpected process spawn: {args!r}")

    monkeypatch.setattr(runner_mod.subprocess, "Popen", _boom)


class InterruptedProcess:
    """Stands in for Popen: the first wait() behaves like Ctrl-C."""

    def __init__(self, argv, **kwargs):
        self.argv = argv
        self.waits = 0
        self.terminated = False
        self.killed = False

    def wait(self, timeout=None):
        self.waits += 1
        if self.waits == 1:
            raise KeyboardInterrupt
        return -15

    def terminate(self):
        self.terminated = True

    def kill(self):
        self.killed = True


@pytest.fixture
def interrupted_popen(monkeypatch) -> list[InterruptedProcess]:
    """Every spawn returns an InterruptedProcess; the list collects them."""
    import buildplan.runner as runner_mod

    spawned: list[InterruptedProcess] = []

    def _popen(argv, **kwargs):
        proc = InterruptedProcess(argv, **kwargs)
        spawned.append(proc)
        return proc

    monkeypatch.setattr(runner_mod.subprocess, "Popen", _popen)
    return spawned
