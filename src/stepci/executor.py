# executor.py
from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Protocol

from .errors import CIError, TOOL_HINTS


class CommandExecutor(Protocol):
    """Runs one opaque step command and reports its exit code."""

    def run(self, command: str, env: Mapping[str, str], workdir: Path) -> int:
        ...


class SubprocessExecutor:
    """
    Run step commands through the shell.

    Output is streamed straight to the terminal (no capture) so verbose
    build output and full backtraces reach the CI log unabridged.
    """

    def run(self, command: str, env: Mapping[str, str], workdir: Path) -> int:
        full_env = os.environ.copy()
        full_env.update(env)

        proc = subprocess.run(
            command,
            shell=True,
            cwd=str(workdir),
            env=full_env,
        )
        return proc.returncode


def check_tool_available(tool: str) -> None:
    """Raise a CIError with an install hint if `tool` is not on PATH."""
    if shutil.which(tool) is None:
        hint = TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")
        raise CIError(
            kind="tool_unavailable",
            step=None,
            message=f"{tool} is not available",
            details={"hint": hint, "tool": tool},
        )
