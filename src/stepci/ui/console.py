"""Console output formatting utilities for stepci."""

from __future__ import annotations

import sys
from typing import Mapping, Optional, Sequence

from ..model import Failed, NotTriggered, RunResult, Step, Trigger


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        pipeline: str,
        trigger: str,
        step_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Pipeline: {pipeline}")
        print(f"Trigger: {trigger}")
        print(f"Steps: {step_count}")
        print()

    def print_not_triggered(self, pipeline: str, trigger: str) -> None:
        print(f"\nNOT TRIGGERED: {pipeline} does not run on {trigger}")

    def print_step(self, name: str) -> None:
        """Print step start message."""
        print(f"\nSTEP: {name}", flush=True)

    def print_success(self, name: str) -> None:
        print("STATUS: success", flush=True)

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Step name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        print(f"STEP FAILED: {name}")
        if exit_code is not None:
            print(f"Exit code: {exit_code}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # Show first line of error for non-debug mode
            error_line = reason.split('\n')[0] if reason else "Unknown error"
            print(f"Error: {error_line}")
        sys.stdout.flush()

    def print_result(self, result: RunResult) -> None:
        """Print final result summary."""
        print("\n" + "=" * 40)
        print("RESULT")
        print("=" * 40)
        if isinstance(result, Failed):
            print(f"  FAILED at step '{result.step_name}' (exit={result.exit_code})")
        elif isinstance(result, NotTriggered):
            print("  NOT TRIGGERED")
        else:
            print(f"  SUCCESS ({len(result.steps_run)} steps)")

    def print_plan(
        self,
        pipeline: str,
        triggers: Sequence[Trigger],
        env: Mapping[str, str],
        steps: Sequence[Step],
    ) -> None:
        """Print the declared pipeline without running it."""
        self.print_header(f"PIPELINE: {pipeline}")
        print("Triggers:")
        for t in triggers:
            print(f"  {t.event}: {', '.join(t.branches)}")
        if env:
            print("Env:")
            for k, v in env.items():
                print(f"  {k}={v}")
        print("Steps:")
        for idx, step in enumerate(steps, start=1):
            if step.kind == "checkout":
                detail = "checkout (submodules)" if step.submodules else "checkout"
            else:
                detail = step.run
            print(f"  {idx}. {step.name}: {detail}")
            for k, v in step.env.items():
                print(f"       {k}={v}")

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

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
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
