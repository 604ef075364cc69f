# loader.py
from __future__ import annotations

import runpy
from pathlib import Path, PurePath
from typing import List

from .dsl import plan as plan_helper
from .model import BuildPlan, BuildStep, PlanError

TRUE_WORDS = {"true", "yes", "on", "1"}
FALSE_WORDS = {"false", "no", "off", "0"}


# ----------------------------------------------------------------------
# Python plan files
# ----------------------------------------------------------------------

def load_python_plan(path: Path) -> BuildPlan:
    """
    Load a plan from a python file.

    The file must define either:
      - plan() -> BuildPlan | List[BuildStep]
      - PLAN = BuildPlan | [BuildStep, ...]
    """
    module_name = f"buildplan_file_{path.stem}"
    globals_dict = runpy.run_path(str(path), run_name=module_name)

    defined = None
    if "PLAN" in globals_dict:
        defined = globals_dict["PLAN"]
    elif callable(globals_dict.get("plan")) and globals_dict["plan"] is not plan_helper:
        # the imported helper itself is not a plan definition
        defined = globals_dict["plan"]()

    if isinstance(defined, BuildPlan):
        return defined
    if isinstance(defined, (list, tuple)) and all(isinstance(s, BuildStep) for s in defined):
        return BuildPlan(steps=tuple(defined), name=path.stem)

    raise PlanError(
        f"{path.name} must define PLAN or plan() returning a BuildPlan or a list of BuildStep"
    )


# ----------------------------------------------------------------------
# Tab-separated plan files
# ----------------------------------------------------------------------

def parse_enabled(value: str) -> bool:
    v = value.strip().lower()
    if v in TRUE_WORDS:
        return True
    if v in FALSE_WORDS:
        return False
    raise ValueError(f"expected true/false, got {value!r}")


def _derive_name(command: str, args: List[str]) -> str:
    # `node --loader ts-node/esm create_astro.ts` -> create_astro
    if args:
        return PurePath(args[-1]).stem or args[-1]
    return PurePath(command).name


def parse_plan_text(text: str, *, source: str = "<plan>") -> BuildPlan:
    """
    Parse `directory<TAB>command<TAB>args...<TAB>enabled` lines.

    Blank lines and lines starting with '#' are ignored.
    """
    steps: List[BuildStep] = []
    used: dict[str, int] = {}
    emitted: set[str] = set()

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        fields = line.split("\t")
        if len(fields) < 3:
            raise PlanError(
                f"{source}:{lineno}: expected directory<TAB>command<TAB>[args...<TAB>]enabled, "
                f"got {len(fields)} field(s)"
            )

        cwd, command, *args, enabled_field = fields
        if not cwd.strip() or not command.strip():
            raise PlanError(f"{source}:{lineno}: directory and command must not be empty")
        try:
            enabled = parse_enabled(enabled_field)
        except ValueError as e:
            raise PlanError(f"{source}:{lineno}: bad enabled flag: {e}") from e

        base = _derive_name(command.strip(), args) or PurePath(command.strip()).name
        if not base:
            raise PlanError(f"{source}:{lineno}: cannot derive a step name from {command.strip()!r}")
        used[base] = used.get(base, 0) + 1
        name = base if used[base] == 1 else f"{base}-{used[base]}"
        while name in emitted:
            used[base] += 1
            name = f"{base}-{used[base]}"
        emitted.add(name)

        steps.append(
            BuildStep(
                name=name,
                command=command.strip(),
                args=tuple(args),
                cwd=cwd.strip(),
                enabled=enabled,
            )
        )

    return BuildPlan(steps=tuple(steps), name=PurePath(source).stem)


def load_text_plan(path: Path) -> BuildPlan:
    return parse_plan_text(path.read_text(encoding="utf-8"), source=str(path))


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------

def load_plan(path: str | Path) -> BuildPlan:
    """Load a `.py` plan file, or a tab-separated one for any other suffix."""
    plan_path = Path(path).expanduser().resolve()
    if not plan_path.exists():
        raise FileNotFoundError(f"Plan file not found: {plan_path}")

    if plan_path.suffix == ".py":
        return load_python_plan(plan_path)
    return load_text_plan(plan_path)
