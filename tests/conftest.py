from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import pytest

from stepci.errors import CheckoutFailure
from stepci.ui.console import Console, set_console


class ScriptedExecutor:
    """Returns scripted exit codes per command; unlisted commands exit 0."""

    def __init__(self, codes=None):
        self.codes = dict(codes or {})
        self.calls = []

    def run(self, command, env, workdir):
        self.calls.append((command, dict(env), workdir))
        return self.codes.get(command, 0)

    @property
    def commands(self):
        return [c for c, _env, _wd in self.calls]


class FakeFetcher:
    def __init__(self, fail_with: int | None = None):
        self.fail_with = fail_with
        self.calls = []

    def fetch(self, step, workspace):
        self.calls.append((step.name, step.submodules, workspace))
        if self.fail_with is not None:
            raise CheckoutFailure(step=step.name, reason="fatal: repository not found", exit_code=self.fail_with)


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(debug=False))
    yield


@pytest.fixture
def executor():
    return ScriptedExecutor()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def workspace_factory(tmp_path):
    created = []

    @contextmanager
    def factory():
        ws = tmp_path / f"ws{len(created)}"
        ws.mkdir()
        created.append(ws)
        yield ws

    factory.created = created
    return factory


@pytest.fixture
def failing_fetcher():
    return FakeFetcher(fail_with=128)
