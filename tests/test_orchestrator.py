"""Tests for batch orchestration."""

from __future__ import annotations

import json
from contextlib import contextmanager
from http.client import IncompleteRead
from pathlib import Path

import pytest

from showcase.config import ConfigError, GenerationOptions, LLMConfig, Settings
from showcase.git.checkout import CloneFailure
from showcase.git.publisher import PushFailure
from showcase.llm.client import Completion, ModelCallFailure
from showcase.orchestrator import Orchestrator, validate_batch
from showcase.prompting.builder import external_badge
from showcase.reporting import RecordingReporter
from showcase.stores.manifest import ManifestStore


class _FakeCheckouts:
    def __init__(self, root: Path, *, failing=()) -> None:
        self.root = root
        self.failing = set(failing)
        self.calls = []

    def acquire(self, reference, *, skip_refresh=False, reporter=None):
        self.calls.append((reference.full_name, skip_refresh))
        if reference.full_name in self.failing:
            raise CloneFailure(f"Clone failed for {reference.full_name}: not found")
        target = self.root / f"{reference.owner}-{reference.name}"
        target.mkdir(parents=True, exist_ok=True)
        (target / "README.md").write_text(f"# {reference.name}\n", encoding="utf-8")
        return target

    @contextmanager
    def checked_out(self, reference, *, skip_refresh=False, reporter=None):
        yield self.acquire(reference, skip_refresh=skip_refresh, reporter=reporter)


class _FakePublisher:
    def __init__(self, owner="octocat", *, push_error=None) -> None:
        self.owner = owner
        self.push_error = push_error
        self.pushes = []

    def remote_owner(self, repo_path, *, environ=None):
        return self.owner

    def commit_and_push(self, repo_path, files, *, message):
        self.pushes.append((Path(repo_path), list(files), message))
        if self.push_error:
            raise self.push_error
        return True


class _FakeClient:
    def __init__(self, *, failing_repos=(), error=None) -> None:
        self.failing_repos = set(failing_repos)
        self.error = error or ModelCallFailure("HTTP 500: upstream error")
        self.calls = 0

    def complete(self, api_key, conversation, *, reporter=None):
        self.calls += 1
        prompt = conversation[-1].content
        for name in self.failing_repos:
            if name in prompt:
                raise self.error
        return Completion(document="<!DOCTYPE html><html><body><h1>Page</h1></body></html>", tokens_per_second=10)


def _settings(root: Path, *, api_key="test-key") -> Settings:
    return Settings(root=root, llm=LLMConfig(api_key=api_key))


def _orchestrator(tmp_path: Path, **overrides) -> Orchestrator:
    settings = overrides.pop("settings", None) or _settings(tmp_path)
    collaborators = dict(
        checkouts=_FakeCheckouts(tmp_path / "tmp" / "repos"),
        publisher=_FakePublisher(),
        client=_FakeClient(),
    )
    collaborators.update(overrides)
    return Orchestrator(settings, **collaborators)


def _manifest(tmp_path: Path) -> dict:
    return json.loads((tmp_path / "repos" / "manifest.json").read_text(encoding="utf-8"))


def test_validate_batch_limits() -> None:
    assert validate_batch([" a/b ", ""]) == ["a/b"]
    with pytest.raises(ValueError, match="No repos provided"):
        validate_batch([])
    with pytest.raises(ValueError, match="Maximum 5 repos per generation"):
        validate_batch([f"o/r{index}" for index in range(6)])


def test_run_generates_pages_and_manifest(tmp_path: Path) -> None:
    publisher = _FakePublisher()
    orchestrator = _orchestrator(tmp_path, publisher=publisher)

    entries = orchestrator.run(
        ["octocat/alpha", "someone/beta"],
        GenerationOptions(iterations=2),
        reporter=RecordingReporter(),
    )

    assert [entry.full_name for entry in entries] == ["octocat/alpha", "someone/beta"]
    assert entries[0].is_external is False
    assert entries[1].is_external is True
    assert entries[0].path == "repos/alpha/index.html"
    assert entries[0].url == "repos/alpha/"
    assert (tmp_path / "repos" / "alpha" / "index.html").exists()
    beta_html = (tmp_path / "repos" / "beta" / "index.html").read_text(encoding="utf-8")
    assert external_badge("someone") in beta_html
    assert orchestrator.client.calls == 4

    generated = _manifest(tmp_path)["generated"]
    assert [item["fullName"] for item in generated] == ["octocat/alpha", "someone/beta"]
    assert publisher.pushes == [
        (tmp_path, [tmp_path / "repos"], "Generate pages for alpha, beta"),
    ]


def test_failed_clone_is_skipped(tmp_path: Path) -> None:
    checkouts = _FakeCheckouts(tmp_path / "tmp" / "repos", failing={"octocat/beta"})
    reporter = RecordingReporter()
    orchestrator = _orchestrator(tmp_path, checkouts=checkouts)

    entries = orchestrator.run(
        ["octocat/alpha", "octocat/beta", "octocat/gamma"],
        GenerationOptions(iterations=1, skip_push=True),
        reporter=reporter,
    )

    assert [entry.repo for entry in entries] == ["alpha", "gamma"]
    assert len(_manifest(tmp_path)["generated"]) == 2
    assert any("Clone failed for octocat/beta" in line for line in reporter.warnings)


def test_invalid_reference_and_model_failure_are_skipped(tmp_path: Path) -> None:
    reporter = RecordingReporter()
    orchestrator = _orchestrator(tmp_path, client=_FakeClient(failing_repos={"octocat/broken"}))

    entries = orchestrator.run(
        ["not-a-ref", "octocat/broken", "octocat/fine"],
        GenerationOptions(iterations=1, skip_push=True),
        reporter=reporter,
    )

    assert [entry.repo for entry in entries] == ["fine"]
    assert any("Invalid format" in line for line in reporter.warnings)
    assert any("HTTP 500: upstream error" in line for line in reporter.warnings)


def test_nothing_generated_leaves_manifest_untouched(tmp_path: Path) -> None:
    checkouts = _FakeCheckouts(tmp_path / "tmp" / "repos", failing={"octocat/alpha"})
    publisher = _FakePublisher()
    orchestrator = _orchestrator(tmp_path, checkouts=checkouts, publisher=publisher)

    entries = orchestrator.run(["octocat/alpha"], reporter=RecordingReporter())

    assert entries == []
    assert not (tmp_path / "repos" / "manifest.json").exists()
    assert publisher.pushes == []


def test_regeneration_replaces_manifest_entry(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)
    options = GenerationOptions(iterations=1, skip_push=True)

    first = orchestrator.run(["octocat/alpha"], options, reporter=RecordingReporter())
    second = orchestrator.run(["octocat/alpha"], options, reporter=RecordingReporter())

    generated = _manifest(tmp_path)["generated"]
    assert len(generated) == 1
    assert generated[0]["generatedAt"] == second[0].generated_at
    assert second[0].generated_at >= first[0].generated_at


def test_skip_push_does_not_publish(tmp_path: Path) -> None:
    publisher = _FakePublisher()
    reporter = RecordingReporter()
    orchestrator = _orchestrator(tmp_path, publisher=publisher)

    orchestrator.run(["octocat/alpha"], GenerationOptions(iterations=1, skip_push=True), reporter=reporter)

    assert publisher.pushes == []
    assert ("info", "⏭  Skipping git commit (--no-push).") in reporter.lines


def test_push_failure_is_only_a_warning(tmp_path: Path) -> None:
    publisher = _FakePublisher(push_error=PushFailure("git push failed: rejected"))
    reporter = RecordingReporter()
    orchestrator = _orchestrator(tmp_path, publisher=publisher)

    entries = orchestrator.run(["octocat/alpha"], GenerationOptions(iterations=1), reporter=reporter)

    assert len(entries) == 1
    assert (tmp_path / "repos" / "manifest.json").exists()
    assert any("git push failed: rejected" in line for line in reporter.warnings)


def test_unknown_home_owner_treats_everything_as_internal(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, publisher=_FakePublisher(owner=None))

    entries = orchestrator.run(
        ["someone/alpha"], GenerationOptions(iterations=1, skip_push=True), reporter=RecordingReporter()
    )

    assert entries[0].is_external is False


def test_owner_comparison_is_case_insensitive(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path, publisher=_FakePublisher(owner="OctoCat"))

    entries = orchestrator.run(
        ["octocat/alpha"], GenerationOptions(iterations=1, skip_push=True), reporter=RecordingReporter()
    )

    assert entries[0].is_external is False


def test_missing_api_key_fails_before_work(tmp_path: Path) -> None:
    checkouts = _FakeCheckouts(tmp_path / "tmp" / "repos")
    orchestrator = _orchestrator(tmp_path, settings=_settings(tmp_path, api_key=None), checkouts=checkouts)

    with pytest.raises(ConfigError):
        orchestrator.run(["octocat/alpha"], reporter=RecordingReporter())
    assert checkouts.calls == []


def test_over_limit_batch_is_rejected_before_work(tmp_path: Path) -> None:
    checkouts = _FakeCheckouts(tmp_path / "tmp" / "repos")
    orchestrator = _orchestrator(tmp_path, checkouts=checkouts)

    with pytest.raises(ValueError):
        orchestrator.run([f"octocat/r{index}" for index in range(6)], reporter=RecordingReporter())
    assert checkouts.calls == []


def test_unexpected_client_error_skips_only_that_repository(tmp_path: Path) -> None:
    reporter = RecordingReporter()
    client = _FakeClient(failing_repos={"octocat/beta"}, error=IncompleteRead(b"partial"))
    orchestrator = _orchestrator(tmp_path, client=client)

    entries = orchestrator.run(
        ["octocat/alpha", "octocat/beta", "octocat/gamma"],
        GenerationOptions(iterations=1, skip_push=True),
        reporter=reporter,
    )

    assert [entry.repo for entry in entries] == ["alpha", "gamma"]
    generated = _manifest(tmp_path)["generated"]
    assert [item["fullName"] for item in generated] == ["octocat/alpha", "octocat/gamma"]
    assert any("octocat/beta: unexpected error" in line for line in reporter.warnings)


def test_manifest_is_written_once_per_batch(tmp_path: Path, monkeypatch) -> None:
    persisted = []
    original = ManifestStore.persist

    def counting_persist(self) -> None:
        persisted.append(len(self))
        original(self)

    monkeypatch.setattr(ManifestStore, "persist", counting_persist)
    checkouts = _FakeCheckouts(tmp_path / "tmp" / "repos", failing={"octocat/beta"})
    orchestrator = _orchestrator(tmp_path, checkouts=checkouts)

    entries = orchestrator.run(
        ["octocat/alpha", "octocat/beta", "octocat/gamma"],
        GenerationOptions(iterations=1, skip_push=True),
        reporter=RecordingReporter(),
    )

    assert len(entries) == 2
    assert persisted == [2]
