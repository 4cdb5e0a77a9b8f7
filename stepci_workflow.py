# stepci_workflow.py
# Rust pipeline: checkout (with submodules), verbose build, verbose tests
# including ignored ones, full backtraces on test failures.
from __future__ import annotations

from stepci.dsl import pipeline, checkout, on_push, on_pull_request
from stepci.step_workflows.cargo import COLOR_ENV, cargo_build, cargo_test


def workflow():
    return pipeline(
        "Rust",
        checkout(submodules=True),
        cargo_build("build"),
        cargo_test("test", include_ignored=True, full_backtrace=True),
        on=[on_push("main"), on_pull_request("main")],
        env=COLOR_ENV,
    )
