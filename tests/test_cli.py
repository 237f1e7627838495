"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from showcase import cli
from showcase.cli import _build_parser


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate", "octocat/alpha"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "octocat/alpha", "-v"])
    assert args.verbose is True


def test_generate_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "a/b", "c/d", "--no-push", "--no-clone", "--iterations", "4"]
    )
    assert args.repos == ["a/b", "c/d"]
    assert args.no_push is True
    assert args.no_clone is True
    assert args.iterations == 4


def test_generate_requires_repos() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate"])


def test_iterations_must_be_positive() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "a/b", "--iterations", "0"])


def test_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 3000


class _RecordingOrchestrator:
    instances: list["_RecordingOrchestrator"] = []
    result: list = []

    def __init__(self, settings) -> None:
        self.settings = settings
        self.calls = []
        _RecordingOrchestrator.instances.append(self)

    def run(self, tokens, options=None, *, reporter=None):
        self.calls.append((list(tokens), options))
        return list(self.result)


@pytest.fixture
def recording_orchestrator(monkeypatch):
    _RecordingOrchestrator.instances = []
    _RecordingOrchestrator.result = []
    monkeypatch.setattr(cli, "Orchestrator", _RecordingOrchestrator)
    return _RecordingOrchestrator


def test_main_builds_options_from_flags(tmp_path: Path, recording_orchestrator, monkeypatch) -> None:
    monkeypatch.delenv("NO_PUSH", raising=False)
    recording_orchestrator.result = ["entry"]

    cli.main(
        ["generate", "octocat/alpha", "--no-push", "--no-clone", "--iterations", "2", "--root", str(tmp_path)]
    )

    tokens, options = recording_orchestrator.instances[0].calls[0]
    assert tokens == ["octocat/alpha"]
    assert options.iterations == 2
    assert options.skip_push is True
    assert options.skip_refresh is True


def test_main_exits_non_zero_when_nothing_generated(tmp_path: Path, recording_orchestrator) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "octocat/alpha", "--root", str(tmp_path)])

    assert excinfo.value.code == 1
