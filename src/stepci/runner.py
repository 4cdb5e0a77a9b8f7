# runner.py
from __future__ import annotations

import runpy
from contextlib import AbstractContextManager
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .errors import CheckoutFailure, StepFailure
from .executor import CommandExecutor, SubprocessExecutor
from .model import (
    CheckoutFailed,
    Failed,
    NotTriggered,
    PipelineConfig,
    RunResult,
    Step,
    Success,
    TriggerEvent,
)
from .step_workflows.cargo import compile_cargo
from .triggers import describe
from .ui.console import get_console
from .workspace import DEFAULT_WORKSPACE_ROOT, Fetcher, isolated_workspace

# push / pull_request ---> trigger match ---> workspace ---> steps in order ---> RunResult


WorkspaceFactory = Callable[[], AbstractContextManager]

# kind -> compiler returning a plain "run" step
STEP_COMPILERS: Dict[str, Callable[[Step], Step]] = {
    "cargo": compile_cargo,
}


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> PipelineConfig:
    """
    Load a pipeline from a python file path.

    The file must define either:
      - workflow() -> PipelineConfig
      - PIPELINE = PipelineConfig(...)
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"stepci_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    config = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        config = globals_dict["workflow"]()
    elif "PIPELINE" in globals_dict:
        config = globals_dict["PIPELINE"]

    if not isinstance(config, PipelineConfig):
        raise TypeError(
            "Workflow must return/define a PipelineConfig. "
            "Define workflow() -> PipelineConfig or PIPELINE = pipeline(...)."
        )
    return config


# ----------------------------------------------------------------------
# Step preparation
# ----------------------------------------------------------------------

def compile_steps(steps: Sequence[Step]) -> List[Step]:
    """Lower typed steps to "run" steps; checkout and run steps pass through."""
    out: List[Step] = []
    for step in steps:
        if step.kind in ("run", "checkout"):
            out.append(step)
            continue
        compiler = STEP_COMPILERS.get(step.kind)
        if compiler is None:
            raise ValueError(f"[{step.name}] unknown step kind: {step.kind!r}")
        out.append(compiler(step))
    return out


def merge_env(pipeline_env: Mapping[str, str], step_env: Mapping[str, str]) -> Dict[str, str]:
    """Step-local entries shadow pipeline-wide ones; neither input is mutated."""
    merged = dict(pipeline_env)
    merged.update(step_env)
    return merged


# ----------------------------------------------------------------------
# Runner
# ----------------------------------------------------------------------

class PipelineRunner:
    """
    Execute one pipeline run: trigger check, fresh workspace, then every
    step in declared order, stopping at the first failure.

    No retries and no timeouts: a failing step ends the run.
    """

    def __init__(
        self,
        config: PipelineConfig,
        fetcher: Fetcher,
        executor: Optional[CommandExecutor] = None,
        *,
        workspace_root: str | Path = DEFAULT_WORKSPACE_ROOT,
        keep_workspace: bool = False,
        workspace_factory: Optional[WorkspaceFactory] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.executor = executor or SubprocessExecutor()
        self.workspace_factory = workspace_factory or partial(
            isolated_workspace, workspace_root, keep=keep_workspace
        )

    def execute(
        self,
        trigger: TriggerEvent,
        steps: Optional[Sequence[Step]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> RunResult:
        console = get_console()
        steps = self.config.steps if steps is None else steps
        env = self.config.env if env is None else env

        if not self.config.is_triggered_by(trigger):
            console.print_not_triggered(self.config.name, describe(trigger))
            return NotTriggered(trigger=trigger)

        compiled = compile_steps(steps)
        console.print_run_started(
            pipeline=self.config.name,
            trigger=describe(trigger),
            step_count=len(compiled),
        )

        ran: List[str] = []
        try:
            with self.workspace_factory() as workspace:
                console.print_debug(f"workspace: {workspace}")
                for step in compiled:
                    console.print_step(step.name)
                    if step.kind == "checkout":
                        self.fetcher.fetch(step, Path(workspace))
                    else:
                        self._run_step(step, Path(workspace), env)
                    ran.append(step.name)
                    console.print_success(step.name)
        except CheckoutFailure as e:
            # workspace errors surface under the pipeline's own checkout step
            step_name = e.step
            if step_name not in {s.name for s in compiled}:
                step_name = next((s.name for s in compiled if s.kind == "checkout"), e.step)
            console.print_failure(step_name, e.reason, exit_code=e.exit_code)
            return CheckoutFailed(step_name=step_name, exit_code=e.exit_code or 1, reason=e.reason)
        except StepFailure as e:
            console.print_failure(e.step, str(e), exit_code=e.exit_code)
            return Failed(step_name=e.step, exit_code=e.exit_code)

        return Success(steps_run=tuple(ran))

    def _run_step(self, step: Step, workspace: Path, pipeline_env: Mapping[str, str]) -> None:
        cwd = (workspace / (step.cwd or ".")).resolve()
        if not cwd.is_dir():
            raise StepFailure(step=step.name, cmd=f"(cwd not found: {step.cwd})", exit_code=1)

        step_env = merge_env(pipeline_env, step.env)
        get_console().print_debug(f"$ {step.run}")
        code = self.executor.run(step.run, step_env, cwd)
        if code != 0:
            raise StepFailure(step=step.name, cmd=step.run, exit_code=code)
