# model.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import StepError


class PlanError(ValueError):
    """A plan (or plan file) is malformed or a step selection is invalid."""


@dataclass(frozen=True)
class BuildStep:
    """A single external command run inside its own working directory."""
    name: str
    command: str
    args: Tuple[str, ...] = ()
    cwd: str = "."
    enabled: bool = True
    timeout: float | None = None
    env: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # lists are accepted, stored as tuples
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))
        object.__setattr__(self, "cwd", str(self.cwd))
        if self.timeout is not None and self.timeout <= 0:
            raise PlanError(f"Step '{self.name}' timeout must be positive, got {self.timeout}")

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class BuildPlan:
    """
    Ordered, immutable list of steps for one run.

    Insertion order is execution order. Disabled steps stay in the plan
    so they show up in dry runs and listings, but never execute.
    """
    steps: Tuple[BuildStep, ...] = ()
    name: Optional[str] = None

    def __post_init__(self) -> None:
        steps = tuple(self.steps)
        seen: set[str] = set()
        for s in steps:
            if not isinstance(s, BuildStep):
                raise PlanError(f"Plan entries must be BuildStep, got: {type(s).__name__}")
            if not s.name:
                raise PlanError("Step name must not be empty")
            if not s.command:
                raise PlanError(f"Step '{s.name}' has no command")
            if s.name in seen:
                raise PlanError(f"Duplicate step name: {s.name}")
            seen.add(s.name)
        object.__setattr__(self, "steps", steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def enabled_steps(self) -> list[BuildStep]:
        return [s for s in self.steps if s.enabled]

    def get(self, name: str) -> BuildStep:
        for s in self.steps:
            if s.name == name:
                return s
        known = ", ".join(s.name for s in self.steps) or "<none>"
        raise PlanError(f"Unknown step '{name}'. Known steps: {known}")

    def only(self, name: str) -> "BuildPlan":
        """Return a plan holding just the named step."""
        s = self.get(name)
        if not s.enabled:
            raise PlanError(f"Step '{name}' is disabled; enable it in the plan to run it")
        return BuildPlan(steps=(s,), name=self.name)

    def with_default_timeout(self, seconds: float | None) -> "BuildPlan":
        if seconds is None:
            return self
        steps = tuple(s if s.timeout is not None else replace(s, timeout=seconds) for s in self.steps)
        return BuildPlan(steps=steps, name=self.name)


@dataclass(frozen=True)
class RunResult:
    """Outcome of one run. `failed_step` is 1-based among enabled steps."""
    ok: bool
    exit_code: int = 0
    failed_step: Optional[int] = None
    step_name: Optional[str] = None
    error: Optional["StepError"] = None
    executed: Tuple[str, ...] = ()
