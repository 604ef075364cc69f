# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from buildplan.loader import load_plan
from buildplan.model import PlanError
from buildplan.runner import run_plan
from buildplan.ui.console import Console, set_console, get_console

DEFAULT_PLAN_FILES = ("build_plan.py", "build_plan.tsv")


def find_plan_files() -> list[Path]:
    """
    Find all plan files in the current directory.

    Returns:
        List of Path objects for plan files, defaults first
    """
    current_dir = Path(".")
    defaults = [current_dir / name for name in DEFAULT_PLAN_FILES if (current_dir / name).exists()]

    others = []
    for pattern in ("*_plan.py", "*_plan.tsv"):
        for path in sorted(current_dir.glob(pattern)):
            if path not in defaults:
                others.append(path)

    return defaults + others


def discover_plan(plan_arg: str | None) -> Path:
    """
    Discover plan file from argument or default.

    Raises:
        SystemExit: If no plan can be found or the choice is ambiguous
    """
    console = get_console()

    if plan_arg:
        plan_path = Path(plan_arg)
        if not plan_path.exists() and plan_path.suffix == "":
            plan_path = Path(str(plan_path) + ".py")
        if not plan_path.exists():
            console.print_error(
                "Plan file not found",
                f"Could not find plan file: {plan_arg}",
                suggestion="Create a plan file or specify a different path:\n  run-build-plan --plan my_plan.py",
            )
            sys.exit(1)
        return plan_path

    plan_files = find_plan_files()

    if len(plan_files) == 0:
        console.print_error(
            "No plan file found",
            "Could not find any plan files.",
            details=[
                "Looked for:",
                *(f"  {name}" for name in DEFAULT_PLAN_FILES),
                "  *_plan.py",
                "  *_plan.tsv",
            ],
            suggestion="Create build_plan.py or specify a plan explicitly:\n  run-build-plan --plan my_plan.tsv",
        )
        sys.exit(1)

    if len(plan_files) > 1:
        file_list = "\n".join(f"  {f}" for f in plan_files)
        console.print_error(
            "Multiple plan files found",
            "Found multiple plan files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a plan explicitly:\n  run-build-plan --plan {plan_files[0]}",
        )
        sys.exit(1)

    return plan_files[0]


@click.command(name="run-build-plan")
@click.option(
    "--plan",
    "plan_file",
    default=None,
    help="Plan file, .py or tab-separated (defaults to build_plan.py / build_plan.tsv if present)",
)
@click.option(
    "--root",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Project root that step directories are resolved against",
)
@click.option("--dry-run", is_flag=True, default=False, help="Print the steps without running them")
@click.option("--only", default=None, metavar="STEP", help="Run a single named step")
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help="Default per-step timeout in seconds",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
def run(plan_file, root, dry_run, only, timeout, debug):
    """Run the build plan's enabled steps in order, stopping at the first failure."""
    console = Console(debug=debug)
    set_console(console)

    plan_path = discover_plan(plan_file)

    try:
        plan = load_plan(plan_path)
        if only:
            plan = plan.only(only)
        plan = plan.with_default_timeout(timeout)
    except PlanError as e:
        console.print_error("Invalid build plan", str(e))
        sys.exit(2)
    except Exception as e:
        console.print_error("Failed to load plan", f"Could not load plan from {plan_path}")
        console.print_exception(e)
        sys.exit(1)

    try:
        console.print_run_started(
            plan=plan.name or plan_path.name,
            root=str(Path(root).resolve()),
            step_count=len(plan),
            enabled_count=len(plan.enabled_steps()),
        )

        result = run_plan(plan, project_root=root, dry_run=dry_run, console=console)

        if not dry_run:
            console.print_results(result)

        if not result.ok:
            sys.exit(result.exit_code or 1)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)


def main() -> None:
    run()


if __name__ == "__main__":
    main()
