"""Tests for workspace preparation and the git-backed fetcher."""
import shutil
import subprocess

import pytest

from stepci.dsl import checkout
from stepci.errors import CheckoutFailure
from stepci.git_facts import git
from stepci.workspace import GitFetcher, isolated_workspace

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(*args, cwd):
    subprocess.run(
        ["git", "-c", "user.email=ci@example.com", "-c", "user.name=ci", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def source_repo(tmp_path):
    repo = tmp_path / "source"
    repo.mkdir()
    _git("init", "--quiet", cwd=repo)
    (repo / "Cargo.toml").write_text('[package]\nname = "demo"\n')
    _git("add", ".", cwd=repo)
    _git("commit", "--quiet", "-m", "init", cwd=repo)
    return repo


class TestIsolatedWorkspace:
    def test_fresh_dir_removed_after(self, tmp_path):
        with isolated_workspace(tmp_path / "ws") as first:
            assert first.is_dir()
            assert list(first.iterdir()) == []
            with isolated_workspace(tmp_path / "ws") as second:
                assert second != first
        assert not first.exists()
        assert not second.exists()

    def test_keep(self, tmp_path):
        with isolated_workspace(tmp_path / "ws", keep=True) as ws:
            (ws / "artifact").write_text("x")
        assert (ws / "artifact").exists()


class TestCloneCommands:
    @pytest.fixture
    def recorded(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(git.subprocess, "run", fake_run)
        return calls

    def test_plain_clone(self, recorded, tmp_path):
        git.clone("https://example.com/r.git", tmp_path)
        assert recorded == [["git", "clone", "--quiet", "https://example.com/r.git", str(tmp_path)]]

    def test_ref_then_submodules(self, recorded, tmp_path):
        git.clone("url", tmp_path, ref="abc123", submodules=True)
        assert recorded[1] == ["git", "-C", str(tmp_path), "checkout", "--quiet", "abc123"]
        assert recorded[2] == ["git", "-C", str(tmp_path), "submodule", "update", "--init", "--recursive"]

    def test_stops_at_first_failure(self, monkeypatch, tmp_path):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 128, stdout="", stderr="fatal: nope")

        monkeypatch.setattr(git.subprocess, "run", fake_run)
        proc = git.clone("url", tmp_path, ref="main", submodules=True)
        assert proc.returncode == 128
        assert len(calls) == 1


@needs_git
class TestGitFetcher:
    def test_fetches_repository(self, source_repo, tmp_path):
        with isolated_workspace(tmp_path / "ws") as ws:
            GitFetcher(str(source_repo)).fetch(checkout(submodules=True), ws)
            assert (ws / "Cargo.toml").read_text().startswith("[package]")

    def test_missing_repository(self, tmp_path):
        with isolated_workspace(tmp_path / "ws") as ws:
            with pytest.raises(CheckoutFailure) as exc:
                GitFetcher(str(tmp_path / "does-not-exist")).fetch(checkout(), ws)
        assert exc.value.step == "checkout"
        assert exc.value.exit_code != 0

    def test_missing_ref(self, source_repo, tmp_path):
        with isolated_workspace(tmp_path / "ws") as ws:
            with pytest.raises(CheckoutFailure) as exc:
                GitFetcher(str(source_repo), ref="no-such-branch").fetch(checkout(), ws)
        assert exc.value.exit_code != 0


def test_git_not_installed(monkeypatch, tmp_path):
    monkeypatch.setattr("stepci.executor.shutil.which", lambda tool: None)
    with pytest.raises(CheckoutFailure) as exc:
        GitFetcher("url").fetch(checkout(), tmp_path)
    assert exc.value.exit_code == 127
    assert "git is not available" in exc.value.reason


def test_unwritable_workspace_root(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    with pytest.raises(CheckoutFailure) as exc:
        with isolated_workspace(blocker / "ws"):
            pass
    assert exc.value.step == "checkout"
    assert "cannot create workspace" in exc.value.reason
    assert exc.value.exit_code == 1
