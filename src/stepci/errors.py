# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class CIError(Exception):
    """
    Structured CI error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class StepFailure(Exception):
    """A declared step exited nonzero."""
    step: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


@dataclass
class CheckoutFailure(Exception):
    """Preparing the workspace (clone, ref checkout, submodules) failed."""
    step: str
    reason: str
    exit_code: int = 1

    def __str__(self) -> str:
        return f"checkout '{self.step}' failed (exit={self.exit_code}): {self.reason}"


TOOL_HINTS = {
    "git": "Install Git or fix PATH.",
    "cargo": "Install the Rust toolchain (https://rustup.rs) or fix PATH.",
}
