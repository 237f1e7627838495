"""Tests for the git publisher."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from showcase.git.publisher import Publisher, PushFailure


def _recording_runner(calls, *, status=" M repos/demo/index.html\n", origin="", fail_on=None):
    def runner(args, cwd, env=None, capture_output=False, timeout=None):
        args = list(args)
        calls.append((args, Path(cwd), capture_output))
        if fail_on and args[:2] == fail_on:
            raise subprocess.CalledProcessError(1, args, stderr="error: failed to push some refs\n")
        if args == ["git", "status", "--porcelain"]:
            return status
        if args == ["git", "remote", "get-url", "origin"]:
            return origin
        return ""

    return runner


def test_publisher_adds_commits_and_pushes(tmp_path: Path) -> None:
    calls = []
    publisher = Publisher(runner=_recording_runner(calls))

    pushed = publisher.commit_and_push(tmp_path, [tmp_path / "repos"], message="Generate pages for demo")

    assert pushed is True
    assert [call[0] for call in calls] == [
        ["git", "add", "repos"],
        ["git", "status", "--porcelain"],
        ["git", "commit", "-m", "Generate pages for demo"],
        ["git", "push"],
    ]
    assert all(call[1] == tmp_path for call in calls)


def test_publisher_skips_commit_without_changes(tmp_path: Path) -> None:
    calls = []
    publisher = Publisher(runner=_recording_runner(calls, status=""))

    pushed = publisher.commit_and_push(tmp_path, [tmp_path / "repos"], message="msg")

    assert pushed is False
    assert ["git", "push"] not in [call[0] for call in calls]


def test_push_failure_is_wrapped(tmp_path: Path) -> None:
    calls = []
    publisher = Publisher(runner=_recording_runner(calls, fail_on=["git", "push"]))

    with pytest.raises(PushFailure, match="failed to push"):
        publisher.commit_and_push(tmp_path, [tmp_path / "repos"], message="msg")


@pytest.mark.parametrize(
    "origin",
    [
        "git@github.com:octocat/showcase.git\n",
        "https://github.com/octocat/showcase.git\n",
    ],
)
def test_remote_owner_parses_github_remotes(tmp_path: Path, origin: str) -> None:
    publisher = Publisher(runner=_recording_runner([], origin=origin))

    assert publisher.remote_owner(tmp_path, environ={}) == "octocat"


def test_remote_owner_falls_back_to_environment(tmp_path: Path) -> None:
    def runner(args, cwd, env=None, capture_output=False, timeout=None):
        raise subprocess.CalledProcessError(2, list(args), stderr="error: No such remote 'origin'\n")

    publisher = Publisher(runner=runner)

    assert publisher.remote_owner(tmp_path, environ={"GITHUB_USERNAME": "me"}) == "me"
    assert publisher.remote_owner(tmp_path, environ={}) is None
