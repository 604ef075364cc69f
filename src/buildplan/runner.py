# runner.py
from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .model import BuildPlan, BuildStep, RunResult
from .ui.console import Console, get_console

# Seconds a child gets to exit after SIGTERM before it is killed.
TERMINATE_GRACE = 5.0


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass(eq=False)
class StepError(Exception):
    """
    A step aborted the run. `index` is 1-based among enabled steps.

    `exit_code` is what the whole process should exit with.
    """
    index: int
    step: str

    @property
    def exit_code(self) -> int:
        return 1


@dataclass(eq=False)
class DirectoryNotFound(StepError):
    path: str

    def __str__(self) -> str:
        return f"step {self.index} '{self.step}': working directory not found: {self.path}"


@dataclass(eq=False)
class StepFailed(StepError):
    cmd: str
    returncode: int

    @property
    def exit_code(self) -> int:
        # killed by signal N -> -N from Popen, 128+N in shell terms
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode

    def __str__(self) -> str:
        if self.returncode < 0:
            try:
                sig = signal.Signals(-self.returncode).name
            except ValueError:
                sig = str(-self.returncode)
            return f"step {self.index} '{self.step}' killed by {sig}: {self.cmd}"
        return f"step {self.index} '{self.step}' failed (exit={self.returncode}): {self.cmd}"


@dataclass(eq=False)
class LaunchFailed(StepError):
    cmd: str
    reason: str
    code: int = 1

    @property
    def exit_code(self) -> int:
        return self.code

    def __str__(self) -> str:
        return f"step {self.index} '{self.step}' could not be started: {self.reason} ({self.cmd})"


@dataclass(eq=False)
class TimedOut(StepError):
    cmd: str
    timeout: float

    @property
    def exit_code(self) -> int:
        return 124

    def __str__(self) -> str:
        return f"step {self.index} '{self.step}' timed out after {self.timeout:g}s: {self.cmd}"


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def resolve_cwd(step: BuildStep, project_root: Path) -> Path:
    """Step directories are relative to the fixed project root, never to each other."""
    return (project_root / step.cwd).resolve()


def _stop(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _run_step(index: int, step: BuildStep, project_root: Path) -> None:
    cwd = resolve_cwd(step, project_root)
    if not cwd.is_dir():
        raise DirectoryNotFound(index=index, step=step.name, path=str(cwd))

    env = os.environ.copy()
    env.update(step.env)

    try:
        # stdin/stdout/stderr inherited: output streams live
        proc = subprocess.Popen(step.argv, cwd=str(cwd), env=env)
    except FileNotFoundError as e:
        raise LaunchFailed(index=index, step=step.name, cmd=step.command_line,
                           reason=f"command not found: {step.command}", code=127) from e
    except PermissionError as e:
        raise LaunchFailed(index=index, step=step.name, cmd=step.command_line,
                           reason=f"permission denied: {step.command}", code=126) from e
    except OSError as e:
        raise LaunchFailed(index=index, step=step.name, cmd=step.command_line,
                           reason=str(e)) from e

    try:
        returncode = proc.wait(timeout=step.timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
        raise TimedOut(index=index, step=step.name, cmd=step.command_line, timeout=step.timeout)
    except BaseException:
        # Ctrl-C and friends: take the child down with us, skip the rest
        _stop(proc)
        raise

    if returncode != 0:
        raise StepFailed(index=index, step=step.name, cmd=step.command_line, returncode=returncode)


def _print_dry_run(plan: BuildPlan, project_root: Path, console: Console) -> None:
    console.print_info("DRY RUN (nothing will be executed)")
    index = 0
    for s in plan:
        cwd = str(resolve_cwd(s, project_root))
        if s.enabled:
            index += 1
            console.print_dry_run(index, s, cwd)
        else:
            console.print_dry_run(None, s, cwd)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_plan(
    plan: BuildPlan,
    *,
    project_root: str | Path = ".",
    dry_run: bool = False,
    console: Optional[Console] = None,
) -> RunResult:
    """
    Run the plan's enabled steps in order, stopping at the first failure.

    Disabled steps are skipped without being launched. Step errors are
    reported on the console and returned in the result; only
    KeyboardInterrupt (after the active child is stopped) propagates.
    """
    console = console or get_console()
    root = Path(project_root).resolve()

    if dry_run:
        _print_dry_run(plan, root, console)
        return RunResult(ok=True)

    executed: List[str] = []
    index = 0

    for s in plan:
        if not s.enabled:
            console.print_step_skipped(s)
            continue

        index += 1
        console.print_step(index, s, str(resolve_cwd(s, root)))
        try:
            _run_step(index, s, root)
        except StepError as e:
            if not isinstance(e, (DirectoryNotFound, LaunchFailed)):
                executed.append(s.name)
            console.print_failure(index, s.name, str(e), exit_code=e.exit_code)
            return RunResult(
                ok=False,
                exit_code=e.exit_code,
                failed_step=index,
                step_name=s.name,
                error=e,
                executed=tuple(executed),
            )
        executed.append(s.name)
        console.print_success(s.name)

    console.print_debug(f"{index} step(s) completed")
    return RunResult(ok=True, executed=tuple(executed))
