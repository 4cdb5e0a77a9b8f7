from .dsl import sh, checkout, on_push, on_pull_request, pipeline
from .step_workflows.cargo import cargo_build, cargo_test
from .runner import PipelineRunner, load_workflow
from .model import PipelineConfig, Step, PushToBranch, PullRequestToBranch, HostEvent, Success, Failed, CheckoutFailed, NotTriggered

__all__ = [
    "sh", "checkout", "on_push", "on_pull_request", "pipeline",
    "cargo_build", "cargo_test",
    "PipelineRunner", "load_workflow",
    "PipelineConfig", "Step", "PushToBranch", "PullRequestToBranch", "HostEvent",
    "Success", "Failed", "CheckoutFailed", "NotTriggered",
]
