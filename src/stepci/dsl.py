# src/stepci/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .model import PipelineConfig, Step, Trigger


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(
    name: str,
    cmd: str,
    *,
    cwd: str | None = None,
    env: Optional[Dict[str, str]] = None,
) -> Step:
    """
    Create a shell step.

    The command is opaque, so verbosity flags belong in `cmd` itself;
    typed steps (step_workflows) carry `verbose` / `include_ignored`.
    """
    # force values to str for env compatibility
    return Step(
        name=name,
        run=cmd,
        cwd=cwd,
        env={k: str(v) for k, v in (env or {}).items()},
    )


def checkout(name: str = "checkout", *, submodules: bool = False) -> Step:
    """Fetch the repository into the run's workspace."""
    return Step(name=name, kind="checkout", submodules=submodules)


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

def on_push(*branches: str) -> Trigger:
    if not branches:
        raise ValueError("on_push() needs at least one branch")
    return Trigger(event="push", branches=tuple(branches))


def on_pull_request(*branches: str) -> Trigger:
    """Pull requests whose *target* branch is one of `branches`."""
    if not branches:
        raise ValueError("on_pull_request() needs at least one branch")
    return Trigger(event="pull_request", branches=tuple(branches))


# ---------------------------------------------------------------------
# Pipeline helper (single-file story)
# ---------------------------------------------------------------------

def pipeline(
    name: str,
    *steps: Step,
    on: Iterable[Trigger],
    env: Optional[Dict[str, str]] = None,
    cwd: str | None = None,  # default cwd applied to steps missing cwd
) -> PipelineConfig:
    """
    Pipeline definition helper.

    Users can write:
        from stepci import pipeline, checkout, sh, on_push

        PIPELINE = pipeline(
            "ci",
            checkout(submodules=True),
            sh("build", "make"),
            on=[on_push("main")],
        )
    """
    steps_final: List[Step] = list(steps)
    if not steps_final:
        raise ValueError(f"pipeline({name!r}) must have at least one step")

    names = [s.name for s in steps_final]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ValueError(f"Duplicate step names found: {dupes}")

    triggers = tuple(on)
    if not triggers:
        raise ValueError(f"pipeline({name!r}) must declare at least one trigger")

    if cwd is not None:
        steps_final = [s if s.cwd is not None else replace(s, cwd=cwd) for s in steps_final]

    return PipelineConfig(
        name=name,
        triggers=triggers,
        steps=tuple(steps_final),
        env={k: str(v) for k, v in (env or {}).items()},
    )
