"""Tests for the multi-round refinement loop."""

from __future__ import annotations

import pytest

from showcase.llm.client import Completion, ModelCallFailure
from showcase.models import AnalysisContext, Classification, RepositoryReference
from showcase.prompting.builder import external_badge
from showcase.refinement import RefinementLoop
from showcase.reporting import RecordingReporter


class _ScriptedClient:
    def __init__(self, documents, *, fail_on=None):
        self.documents = list(documents)
        self.fail_on = fail_on
        self.conversations = []

    def complete(self, api_key, conversation, *, reporter=None):
        self.conversations.append(conversation)
        if self.fail_on == len(self.conversations):
            raise ModelCallFailure("boom")
        return Completion(document=self.documents.pop(0), tokens_per_second=42)


def _context(owner: str = "octocat") -> AnalysisContext:
    return AnalysisContext(
        reference=RepositoryReference(owner, "demo"),
        classification=Classification.CLI,
        structure="└── main.go\n",
    )


def test_loop_makes_exactly_n_calls_and_keeps_last_document() -> None:
    client = _ScriptedClient(["<html>1</html>", "<html>2</html>", "<html>3</html>"])
    reporter = RecordingReporter()

    document = RefinementLoop(client, "key").run(
        _context(), "template", is_external=False, iterations=3, reporter=reporter
    )

    assert document.html == "<html>3</html>"
    assert len(client.conversations) == 3
    assert "<html>1</html>" in client.conversations[1][1].content
    assert "<html>2</html>" in client.conversations[2][1].content
    assert ("info", "      42 tok/s") in reporter.lines


def test_single_iteration_skips_refinement() -> None:
    client = _ScriptedClient(["<html>only</html>"])

    document = RefinementLoop(client, "key").run(
        _context(), "template", is_external=False, iterations=1, reporter=RecordingReporter()
    )

    assert document.html == "<html>only</html>"
    assert len(client.conversations) == 1


def test_external_documents_always_carry_badge() -> None:
    client = _ScriptedClient(["<body>first</body>", "<body>second</body>"])

    document = RefinementLoop(client, "key").run(
        _context("stranger"), "template", is_external=True, iterations=2, reporter=RecordingReporter()
    )

    assert external_badge("stranger") in document.html
    assert external_badge("stranger") in client.conversations[1][1].content


def test_failure_in_any_round_aborts() -> None:
    client = _ScriptedClient(["<html>1</html>", "<html>2</html>"], fail_on=2)

    with pytest.raises(ModelCallFailure):
        RefinementLoop(client, "key").run(
            _context(), "template", is_external=False, iterations=3, reporter=RecordingReporter()
        )
    assert len(client.conversations) == 2


def test_iterations_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RefinementLoop(_ScriptedClient([]), "key").run(
            _context(), "template", is_external=False, iterations=0
        )
