"""Console output formatting utilities for buildplan."""

from __future__ import annotations

import sys
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model import BuildStep, RunResult


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_run_started(
        self,
        plan: str,
        root: str,
        step_count: int,
        enabled_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Plan: {plan}")
        print(f"Project root: {root}")
        print(f"Steps: {enabled_count} enabled / {step_count} total")
        print()

    def print_step(self, index: int, step: "BuildStep", cwd: str) -> None:
        """Print step start message."""
        print(f"\nSTEP {index}: {step.name}")
        print(f"Directory: {cwd}")
        print(f"Command: {step.command_line}", flush=True)

    def print_step_skipped(self, step: "BuildStep") -> None:
        print(f"\nSKIPPED: {step.name} (disabled)")

    def print_success(self, name: str) -> None:
        """Print success message."""
        print(f"STATUS: success ({name})")

    def print_dry_run(self, index: int | None, step: "BuildStep", cwd: str) -> None:
        """Print one plan line without running it."""
        if index is None:
            print(f"  -  {step.name} (disabled): {step.command_line}  [{cwd}]")
        else:
            print(f"  {index}. {step.name}: {step.command_line}  [{cwd}]")

    def print_failure(
        self,
        index: int,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
    ) -> None:
        """
        Print failure message to stderr.

        Args:
            index: 1-based position of the step among enabled steps
            name: Step name
            reason: Failure reason/error message
            exit_code: Optional exit code
        """
        print(f"STEP FAILED: {index} ({name})", file=sys.stderr)
        if exit_code is not None:
            print(f"Exit code: {exit_code}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)
        else:
            error_line = reason.split('\n')[0] if reason else "Unknown error"
            print(f"Error: {error_line}", file=sys.stderr)

    def print_results(self, result: "RunResult") -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name in result.executed:
            status = "FAILED" if (not result.ok and name == result.step_name) else "SUCCESS"
            print(f"  {name}: {status}")
        if result.ok:
            print("Build plan completed successfully")
        else:
            print(f"Build plan aborted at step {result.failed_step} ({result.step_name})")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
