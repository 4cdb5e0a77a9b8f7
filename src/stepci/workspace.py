# workspace.py
from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .errors import CIError, CheckoutFailure
from .executor import check_tool_available
from .git_facts.git import clone
from .model import Step


DEFAULT_WORKSPACE_ROOT = os.environ.get("STEPCI_WORKSPACE_ROOT", ".stepci/workspaces")


class Fetcher(Protocol):
    """Seeds an empty workspace with repository content."""

    def fetch(self, step: Step, workspace: Path) -> None:
        """Raise CheckoutFailure if the content cannot be fetched."""
        ...


class GitFetcher:
    """
    Fetch `repo_url` at `ref` into the workspace with the git CLI.

    `repo_url` may be anything `git clone` accepts, including a local
    repository path.
    """

    def __init__(self, repo_url: str, ref: Optional[str] = None):
        self.repo_url = repo_url
        self.ref = ref

    def fetch(self, step: Step, workspace: Path) -> None:
        try:
            check_tool_available("git")
        except CIError as e:
            raise CheckoutFailure(step=step.name, reason=str(e), exit_code=127) from e

        # mkdtemp leaves the workspace empty, which git clone accepts
        proc = clone(self.repo_url, workspace, ref=self.ref, submodules=step.submodules)
        if proc.returncode != 0:
            raise CheckoutFailure(
                step=step.name,
                reason=(proc.stderr or "").strip() or f"git exited {proc.returncode}",
                exit_code=proc.returncode,
            )


@contextmanager
def isolated_workspace(
    root: str | Path = DEFAULT_WORKSPACE_ROOT,
    *,
    keep: bool = False,
) -> Iterator[Path]:
    """
    Create a fresh directory owned by exactly one run.

    Removed on exit unless `keep` is set (useful for inspecting a failed
    build locally).
    """
    root_p = Path(root).expanduser()
    try:
        root_p.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix="run-", dir=str(root_p))).resolve()
    except OSError as e:
        raise CheckoutFailure(step="checkout", reason=f"cannot create workspace under {root_p}: {e}") from e
    try:
        yield path
    finally:
        if not keep:
            shutil.rmtree(path, ignore_errors=True)
