# git.py
# Small, focused wrapper around the Git CLI.
# This module centralizes all Git interactions so the rest of the codebase
# never needs to call subprocess("git ...") directly.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this file.

    Args:
        args: List of git arguments (e.g. ["rev-parse", "HEAD"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: git exited nonzero
        FileNotFoundError: git is not installed
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        text=True,
        stderr=subprocess.PIPE,
    )
    return out.strip()


def head_sha(cwd: Optional[str | Path] = None) -> str:
    """Return the full SHA hash of the current HEAD commit."""
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def get_current_ref(cwd: Optional[str | Path] = None) -> str:
    """
    Return the current branch name, or the HEAD SHA when detached.

    `git rev-parse --abbrev-ref HEAD` prints the literal "HEAD" on a
    detached checkout, which is useless as a ref to check out elsewhere.
    """
    ref = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)
    if ref == "HEAD":
        return head_sha(cwd=cwd)
    return ref


def clone(
    repo_url: str,
    dest: str | Path,
    *,
    ref: Optional[str] = None,
    submodules: bool = False,
) -> subprocess.CompletedProcess:
    """
    Clone `repo_url` into `dest` and check out `ref`.

    With `submodules=True`, nested sub-repositories are initialized and
    fetched recursively after the ref checkout, so they match the
    commit the superproject records at that ref.

    Unlike `_git`, this does not raise on failure: it returns the first
    failing CompletedProcess (or the last successful one) so the caller
    can surface git's exit code and stderr.
    """
    commands: List[List[str]] = [["git", "clone", "--quiet", repo_url, str(dest)]]
    if ref:
        commands.append(["git", "-C", str(dest), "checkout", "--quiet", ref])
    if submodules:
        commands.append(
            ["git", "-C", str(dest), "submodule", "update", "--init", "--recursive"]
        )

    proc: subprocess.CompletedProcess | None = None
    for cmd in commands:
        proc = subprocess.run(cmd, check=False, capture_output=True, text=True)
        if proc.returncode != 0:
            return proc
    assert proc is not None
    return proc
