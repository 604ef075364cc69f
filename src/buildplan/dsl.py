# src/buildplan/dsl.py
from __future__ import annotations

import shlex
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from .model import BuildPlan, BuildStep


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def step(
    name: str,
    command: str,
    *args: str,
    cwd: str = ".",
    enabled: bool = True,
    timeout: float | None = None,
    env: Optional[Dict[str, str]] = None,
) -> BuildStep:
    """Create a step: step("deploy", "node", "deploy.ts", cwd="scripts")."""
    return BuildStep(
        name=name,
        command=command,
        args=tuple(args),
        cwd=cwd,
        enabled=enabled,
        timeout=timeout,
        env={k: str(v) for k, v in (env or {}).items()},
    )


def cmd(name: str, command_line: str, **kwargs) -> BuildStep:
    """
    Create a step from a single command string, split shell-style.

    No shell is involved at run time; quoting only affects splitting.
    """
    parts = shlex.split(command_line)
    if not parts:
        raise ValueError(f"cmd({name!r}) needs a non-empty command line")
    return step(name, parts[0], *parts[1:], **kwargs)


def disabled(s: BuildStep) -> BuildStep:
    """Return a copy of `s` that the runner will skip."""
    return replace(s, enabled=False)


# ---------------------------------------------------------------------
# Plan helper (single-file story)
# ---------------------------------------------------------------------

def plan(*steps: BuildStep, name: str | None = None) -> BuildPlan:
    """
    Plan definition helper. A plan file can write:

        from buildplan import plan, step

        PLAN = plan(
            step("create-astro", "node", "create_astro.ts", cwd="new_scripts"),
        )
    """
    return BuildPlan(steps=tuple(steps), name=name)


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class PlanBuilder:
    def __init__(self, name: str | None = None):
        self.name = name
        self._steps: List[BuildStep] = []
        self._cwd: str = "."
        self._env: Dict[str, str] = {}

    def in_dir(self, cwd: str):
        """Default working directory for steps added after this call."""
        self._cwd = cwd
        return self

    def with_env(self, **env):
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def define_step(
        self,
        name: str,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
        enabled: bool = True,
        timeout: float | None = None,
    ):
        self._steps.append(
            BuildStep(
                name=name,
                command=command,
                args=tuple(args),
                cwd=cwd if cwd is not None else self._cwd,
                enabled=enabled,
                timeout=timeout,
                env=dict(self._env),
            )
        )
        return self

    def build(self) -> BuildPlan:
        return BuildPlan(steps=tuple(self._steps), name=self.name)


def build(name: str | None = None) -> PlanBuilder:
    """Convenience: build('deploy').in_dir('scripts').define_step(...).build()"""
    return PlanBuilder(name)
