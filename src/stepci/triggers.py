# triggers.py
from __future__ import annotations

import os
from typing import Mapping, Optional

from .model import HostEvent, PullRequestToBranch, PushToBranch, TriggerEvent


EVENT_KINDS = ("push", "pull_request")


def make_trigger(event: str, branch: str) -> TriggerEvent:
    """Build a TriggerEvent from an event kind and a branch name."""
    if event == "push":
        return PushToBranch(branch=branch)
    if event == "pull_request":
        return PullRequestToBranch(branch=branch)
    raise ValueError(f"Unknown event kind: {event!r} (expected one of {EVENT_KINDS})")


def _strip_ref(ref: str) -> str:
    # refs/heads/main -> main
    prefix = "refs/heads/"
    return ref[len(prefix):] if ref.startswith(prefix) else ref


def trigger_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[TriggerEvent]:
    """
    Read the trigger event from the hosting CI environment.

    Understands the GitHub Actions variables:
      GITHUB_EVENT_NAME   push | pull_request
      GITHUB_REF          pushed ref (push events)
      GITHUB_BASE_REF     target branch (pull_request events)

    Any other event, and a push of a non-branch ref such as a tag, comes
    back as a HostEvent, which no trigger matches.

    Returns None only when GITHUB_EVENT_NAME is unset.
    """
    env = os.environ if environ is None else environ
    event = env.get("GITHUB_EVENT_NAME", "")
    ref = env.get("GITHUB_REF", "")
    if not event:
        return None

    if event == "push":
        if not ref.startswith("refs/heads/"):
            return HostEvent(name="push", ref=ref)
        return PushToBranch(branch=_strip_ref(ref))

    if event == "pull_request":
        base = env.get("GITHUB_BASE_REF", "")
        if not base:
            return HostEvent(name="pull_request", ref=ref)
        return PullRequestToBranch(branch=_strip_ref(base))

    return HostEvent(name=event, ref=ref)


def describe(trigger: TriggerEvent) -> str:
    if isinstance(trigger, HostEvent):
        return f"{trigger.name} {trigger.ref}".strip()
    if isinstance(trigger, PullRequestToBranch):
        return f"pull_request -> {trigger.branch}"
    return f"push to {trigger.branch}"
