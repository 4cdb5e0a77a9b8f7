# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


# ---------------------------------------------------------------------
# Trigger events
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class PushToBranch:
    """A push landed on `branch`."""
    branch: str

    @property
    def event(self) -> str:
        return "push"


@dataclass(frozen=True)
class PullRequestToBranch:
    """A pull request was opened/updated with `branch` as its target."""
    branch: str

    @property
    def event(self) -> str:
        return "pull_request"


@dataclass(frozen=True)
class HostEvent:
    """
    Any other event the host reports (schedule, tag push, workflow_dispatch...).

    No `Trigger` pattern matches it, so a run on it is always NotTriggered.
    """
    name: str
    ref: str = ""

    @property
    def event(self) -> str:
        return self.name

    @property
    def branch(self) -> str:
        return self.ref


TriggerEvent = Union[PushToBranch, PullRequestToBranch, HostEvent]


@dataclass(frozen=True)
class Trigger:
    """A configured trigger pattern: event kind + allowed branch names."""
    event: str  # "push" | "pull_request"
    branches: Tuple[str, ...]

    def matches(self, trigger: TriggerEvent) -> bool:
        if isinstance(trigger, HostEvent):
            return False
        return trigger.event == self.event and trigger.branch in self.branches


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Step:
    """
    A single named unit of work inside a pipeline.

    kind:
      - "run"       shell command in `run`
      - "checkout"  fetch the repository into the workspace
      - anything else is a typed step compiled by step_workflows
    """
    name: str
    run: str = ""
    cwd: str | None = None
    # dict fields stay out of the hash so steps and configs remain hashable
    env: Dict[str, str] = field(default_factory=dict, hash=False)
    kind: str = "run"
    submodules: bool = False       # checkout: also fetch nested sub-repositories
    verbose: bool = False          # typed steps: maximal diagnostic output
    include_ignored: bool = False  # test steps: run normally-ignored cases
    data: Optional[Dict[str, Any]] = field(default=None, hash=False)


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable pipeline declaration handed to the runner at construction.

    `env` is the pipeline-wide EnvironmentSet; each step may extend or
    shadow it through `Step.env`.
    """
    name: str
    triggers: Tuple[Trigger, ...]
    steps: Tuple[Step, ...]
    env: Dict[str, str] = field(default_factory=dict, hash=False)

    def is_triggered_by(self, trigger: TriggerEvent) -> bool:
        return any(t.matches(trigger) for t in self.triggers)


# ---------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    steps_run: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True

    @property
    def exit_code(self) -> int:
        return 0

    @property
    def status(self) -> str:
        return "success"


@dataclass(frozen=True)
class NotTriggered:
    """The event did not match any trigger; nothing ran. Not a failure."""
    trigger: TriggerEvent

    @property
    def ok(self) -> bool:
        return True

    @property
    def exit_code(self) -> int:
        return 0

    @property
    def status(self) -> str:
        return "not triggered"


@dataclass(frozen=True)
class Failed:
    step_name: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return False

    @property
    def status(self) -> str:
        return "failed"


@dataclass(frozen=True)
class CheckoutFailed(Failed):
    """Workspace preparation failed; no later step ran."""
    reason: str = ""


RunResult = Union[Success, NotTriggered, Failed]
