from .dsl import step, cmd, disabled, plan, PlanBuilder, build
from .runner import run_plan, StepError, DirectoryNotFound, StepFailed, LaunchFailed, TimedOut
from .model import BuildPlan, BuildStep, RunResult, PlanError

__all__ = [
    "step", "cmd", "disabled", "plan", "PlanBuilder", "build",
    "run_plan", "StepError", "DirectoryNotFound", "StepFailed", "LaunchFailed", "TimedOut",
    "BuildPlan", "BuildStep", "RunResult", "PlanError",
]
