"""Tests for trigger construction and matching."""
import pytest

from stepci.dsl import on_pull_request, on_push
from stepci.model import HostEvent, PullRequestToBranch, PushToBranch
from stepci.triggers import describe, make_trigger, trigger_from_env


class TestMatching:
    def test_push_matches_listed_branch(self):
        assert on_push("main").matches(PushToBranch("main"))
        assert not on_push("main").matches(PushToBranch("develop"))

    def test_event_kind_must_match(self):
        assert not on_push("main").matches(PullRequestToBranch("main"))
        assert not on_pull_request("main").matches(PushToBranch("main"))

    def test_host_event_never_matches(self):
        assert not on_push("main").matches(HostEvent("push", "refs/tags/v1.0"))
        assert not on_push("main").matches(HostEvent("schedule", "refs/heads/main"))

    def test_several_branches(self):
        trigger = on_pull_request("main", "release")
        assert trigger.matches(PullRequestToBranch("release"))

    def test_no_branches_rejected(self):
        with pytest.raises(ValueError):
            on_push()


class TestMakeTrigger:
    def test_kinds(self):
        assert make_trigger("push", "main") == PushToBranch("main")
        assert make_trigger("pull_request", "main") == PullRequestToBranch("main")

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown event kind"):
            make_trigger("schedule", "main")


class TestFromEnv:
    def test_push(self):
        env = {"GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/heads/main"}
        assert trigger_from_env(env) == PushToBranch("main")

    def test_push_nested_branch_name(self):
        env = {"GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/heads/feature/x"}
        assert trigger_from_env(env) == PushToBranch("feature/x")

    def test_tag_push_is_not_a_branch(self):
        env = {"GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/tags/v1.0"}
        assert trigger_from_env(env) == HostEvent("push", "refs/tags/v1.0")

    def test_pull_request_uses_base_ref(self):
        env = {
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_REF": "refs/pull/7/merge",
            "GITHUB_BASE_REF": "main",
        }
        assert trigger_from_env(env) == PullRequestToBranch("main")

    def test_pull_request_without_base_ref(self):
        env = {"GITHUB_EVENT_NAME": "pull_request", "GITHUB_REF": "refs/pull/7/merge"}
        assert trigger_from_env(env) == HostEvent("pull_request", "refs/pull/7/merge")

    def test_other_event(self):
        env = {"GITHUB_EVENT_NAME": "schedule", "GITHUB_REF": "refs/heads/main"}
        assert trigger_from_env(env) == HostEvent("schedule", "refs/heads/main")

    def test_no_event(self):
        assert trigger_from_env({}) is None
        assert trigger_from_env({"GITHUB_EVENT_NAME": ""}) is None

    def test_reads_process_env(self, monkeypatch):
        monkeypatch.setenv("GITHUB_EVENT_NAME", "push")
        monkeypatch.setenv("GITHUB_REF", "refs/heads/main")
        assert trigger_from_env() == PushToBranch("main")


def test_describe():
    assert describe(PushToBranch("main")) == "push to main"
    assert describe(PullRequestToBranch("main")) == "pull_request -> main"
    assert describe(HostEvent("push", "refs/tags/v1.0")) == "push refs/tags/v1.0"
    assert describe(HostEvent("schedule")) == "schedule"
