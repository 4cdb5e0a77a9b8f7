# step_workflows/cargo.py
from __future__ import annotations

import shlex
from typing import Dict

from ..model import Step


# Full, unabridged panic backtraces for the failing test binary.
BACKTRACE_ENV = {"RUST_BACKTRACE": "full"}
COLOR_ENV = {"CARGO_TERM_COLOR": "always"}


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def cargo_build(
    name: str = "build",
    *,
    verbose: bool = True,
    args: str = "",
    cwd: str | None = None,
    env: Dict[str, str] | None = None,
) -> Step:
    """Typed `cargo build` step."""
    return Step(
        name=name,
        kind="cargo",
        cwd=cwd,
        env=dict(env or {}),
        verbose=verbose,
        data={"subcommand": "build", "args": args},
    )


def cargo_test(
    name: str = "test",
    *,
    verbose: bool = True,
    include_ignored: bool = True,
    full_backtrace: bool = True,
    args: str = "",
    cwd: str | None = None,
    env: Dict[str, str] | None = None,
) -> Step:
    """
    Typed `cargo test` step.

    With `full_backtrace`, RUST_BACKTRACE=full is added to this step's
    own env only; explicit `env` entries still win.
    """
    step_env: Dict[str, str] = dict(BACKTRACE_ENV) if full_backtrace else {}
    step_env.update(env or {})
    return Step(
        name=name,
        kind="cargo",
        cwd=cwd,
        env=step_env,
        verbose=verbose,
        include_ignored=include_ignored,
        data={"subcommand": "test", "args": args},
    )


# ---------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------

def compile_cargo(step: Step) -> Step:
    """
    Turn a typed cargo step into a runnable shell step.
    Runner never sees kind='cargo' steps after compilation.

    Flags after `--` go to the test harness, so `--include-ignored` has
    to come last.
    """
    data = step.data or {}
    subcommand = data.get("subcommand")
    if subcommand not in ("build", "test"):
        raise ValueError(f"[{step.name}] unknown cargo subcommand: {subcommand!r}")

    parts = ["cargo", subcommand]
    if step.verbose:
        parts.append("--verbose")
    args = (data.get("args") or "").strip()
    harness_args: list[str] = []
    if args:
        extra = shlex.split(args)
        if "--" in extra:
            idx = extra.index("--")
            parts.extend(extra[:idx])
            harness_args.extend(extra[idx + 1:])
        else:
            parts.extend(extra)

    if subcommand == "test" and step.include_ignored and "--include-ignored" not in harness_args:
        harness_args.append("--include-ignored")
    if harness_args:
        parts.append("--")
        parts.extend(harness_args)

    return Step(
        name=step.name,
        run=" ".join(shlex.quote(p) for p in parts),
        cwd=step.cwd,
        env=dict(step.env),
        kind="run",
        verbose=step.verbose,
        include_ignored=step.include_ignored,
    )
