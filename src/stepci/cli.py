# cli.py
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import click

from stepci.errors import CIError
from stepci.executor import check_tool_available
from stepci.git_facts.git import get_current_ref
from stepci.runner import STEP_COMPILERS, PipelineRunner, compile_steps, load_workflow
from stepci.triggers import EVENT_KINDS, make_trigger, trigger_from_env
from stepci.ui.console import Console, get_console, set_console
from stepci.workspace import DEFAULT_WORKSPACE_ROOT, GitFetcher


DEFAULT_WORKFLOW = "stepci_workflow.py"


def find_workflow_files() -> list[Path]:
    """
    Find all workflow files in the current directory.

    Returns:
        List of Path objects for workflow files
    """
    workflow_files = []
    current_dir = Path(".")

    default_workflow = current_dir / DEFAULT_WORKFLOW
    if default_workflow.exists():
        # the default wins outright
        return [default_workflow]

    for path in current_dir.glob("*_workflow.py"):
        workflow_files.append(path)

    return sorted(workflow_files)


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix != ".py":
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  stepci run --workflow my_workflow.py",
            )
            sys.exit(1)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=[
                "Looked for:",
                f"  {DEFAULT_WORKFLOW}",
                "  *_workflow.py",
            ],
            suggestion=f"Create a workflow file:\n  {DEFAULT_WORKFLOW}\n\nOr specify a workflow explicitly:\n  stepci run --workflow my_workflow.py",
        )
        sys.exit(1)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a workflow explicitly:\n  stepci run --workflow {workflow_files[0]}",
        )
        sys.exit(1)

    return workflow_files[0]


def host_exit_code(code: int) -> int:
    """Map a step's return code onto a process exit status (signals -> 128+N)."""
    if code < 0:
        return 128 + (-code)
    return code


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """stepci: sequential, fail-fast CI pipeline runner."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {DEFAULT_WORKFLOW} if present)",
)
@click.option("--event", type=click.Choice(EVENT_KINDS), default="push", show_default=True, help="Trigger event kind")
@click.option("--branch", default=None, help="Pushed branch, or PR target branch (defaults to the current branch)")
@click.option("--from-env", is_flag=True, default=False, help="Read the trigger from GITHUB_EVENT_NAME / GITHUB_REF / GITHUB_BASE_REF")
@click.option("--repo", default=".", show_default=True, help="Repository to check out (URL or local path)")
@click.option("--ref", default=None, help="Git ref to check out (defaults to the repository's default HEAD)")
@click.option("--workspace-root", default=DEFAULT_WORKSPACE_ROOT, show_default=True, help="Where per-run workspaces are created")
@click.option("--keep-workspace", is_flag=True, default=False, help="Do not delete the workspace after the run")
@click.pass_context
def run(ctx, workflow, event, branch, from_env, repo, ref, workspace_root, keep_workspace):
    """Run a stepci pipeline."""
    console = get_console()

    workflow_path = discover_workflow(workflow)

    try:
        config = load_workflow(workflow_path)

        if from_env:
            trigger = trigger_from_env()
            if trigger is None:
                console.print_error(
                    "No trigger in environment",
                    "GITHUB_EVENT_NAME is not set.",
                    suggestion="Pass the trigger explicitly:\n  stepci run --event push --branch main",
                )
                sys.exit(1)
        else:
            if branch is None:
                branch = get_current_ref()
                console.print_debug(f"Using current branch: {branch}")
            trigger = make_trigger(event, branch)

        runner = PipelineRunner(
            config,
            GitFetcher(repo, ref=ref),
            workspace_root=workspace_root,
            keep_workspace=keep_workspace,
        )
        result = runner.execute(trigger)
        console.print_result(result)
        sys.exit(host_exit_code(result.exit_code))

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except subprocess.CalledProcessError as e:
        console.print_error(
            "Could not determine git branch",
            "Could not get current git branch.",
            details=[(e.stderr or "").strip()] if e.stderr else None,
            suggestion="Please specify --branch explicitly:\n  stepci run --branch main",
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {DEFAULT_WORKFLOW} if present)",
)
@click.pass_context
def plan(ctx, workflow):
    """Show triggers, environment and compiled steps without running them."""
    console = get_console()

    workflow_path = discover_workflow(workflow)

    try:
        config = load_workflow(workflow_path)
        console.print_plan(
            pipeline=config.name,
            triggers=config.triggers,
            env=config.env,
            steps=compile_steps(config.steps),
        )
        for kind in sorted({s.kind for s in config.steps if s.kind in STEP_COMPILERS}):
            try:
                check_tool_available(kind)
            except CIError as e:
                console.print_info(f"\nWarning: {e.message}. {e.details['hint']}")
    except Exception as e:
        console.print_error(
            "Failed to load workflow",
            f"Could not load workflow from {workflow_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
