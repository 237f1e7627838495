"""Multi-round generate-then-refine loop for a single repository."""

from __future__ import annotations

from typing import Protocol, Sequence

from .llm.client import Completion
from .logging import get_logger
from .models import AnalysisContext, GeneratedDocument
from .prompting.builder import PromptBuilder, PromptMessage, ensure_external_badge
from .reporting import LoggingReporter, Reporter


class CompletionClient(Protocol):
    def complete(
        self,
        api_key: str,
        conversation: Sequence[PromptMessage],
        *,
        reporter: Reporter | None = None,
    ) -> Completion:
        ...


class RefinementLoop:
    """Produces one document through an initial call and ``N - 1`` refinements.

    Every round fully regenerates the page from the previous round's output;
    there is no per-round retry beyond the client's own policy, so a
    ``ModelCallFailure`` in any round aborts the whole loop.
    """

    def __init__(
        self,
        client: CompletionClient,
        api_key: str,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("refinement")

    def run(
        self,
        context: AnalysisContext,
        template: str,
        *,
        is_external: bool,
        iterations: int,
        reporter: Reporter | None = None,
    ) -> GeneratedDocument:
        if iterations < 1:
            raise ValueError("iterations must be at least 1")
        reporter = reporter or LoggingReporter(self.logger)
        owner = context.reference.owner

        reporter.info(f"    Iteration  1/{iterations}: Generating initial HTML…")
        messages = self.prompt_builder.initial_messages(context, template, is_external=is_external)
        completion = self.client.complete(self.api_key, messages, reporter=reporter)
        reporter.info(f"      {completion.tokens_per_second} tok/s")
        html = completion.document
        if is_external:
            html = ensure_external_badge(html, owner)

        for iteration in range(2, iterations + 1):
            label = self.prompt_builder.refinement_label(iteration)
            reporter.info(f"    Iteration {iteration:>2}/{iterations}: {label}")
            messages = self.prompt_builder.refinement_messages(
                context,
                html,
                iteration=iteration,
                total=iterations,
                is_external=is_external,
            )
            completion = self.client.complete(self.api_key, messages, reporter=reporter)
            reporter.info(f"      {completion.tokens_per_second} tok/s")
            html = completion.document
            if is_external:
                html = ensure_external_badge(html, owner)

        return GeneratedDocument(html=html)


__all__ = ["CompletionClient", "RefinementLoop"]
