"""Batch orchestration: checkout, analyse, generate, persist, publish."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .analyzers.classifier import RepoClassifier
from .analyzers.context import ContextBuilder
from .config import MAX_REPOS, ConfigError, GenerationOptions, Settings
from .git.checkout import CheckoutManager, CloneFailure
from .git.publisher import Publisher, PushFailure
from .llm.client import ModelCallFailure, ModelClient
from .logging import get_logger
from .models import (
    GeneratedDocument,
    InvalidReference,
    ManifestEntry,
    RepositoryReference,
    utc_timestamp,
)
from .prompting.builder import PromptBuilder
from .prompting.catalog import template_for
from .refinement import CompletionClient, RefinementLoop
from .reporting import LoggingReporter, Reporter
from .stores.manifest import ManifestStore, PersistenceFailure

_RULE = "─" * 60


def validate_batch(tokens: Sequence[str], *, limit: int = MAX_REPOS) -> List[str]:
    """Reject empty or over-limit batches before any work starts."""
    cleaned = [token.strip() for token in tokens if isinstance(token, str) and token.strip()]
    if not cleaned:
        raise ValueError("No repos provided")
    if len(cleaned) > limit:
        raise ValueError(f"Maximum {limit} repos per generation (got {len(cleaned)})")
    return cleaned


class Orchestrator:
    """Coordinates page generation for a batch of repositories.

    Repositories are processed strictly one after another. Per-repository
    failures are reported and skipped; only a failure to persist output
    propagates out of :meth:`run`.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        classifier: RepoClassifier | None = None,
        context_builder: ContextBuilder | None = None,
        checkouts: CheckoutManager | None = None,
        publisher: Publisher | None = None,
        client: CompletionClient | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.settings = settings
        self.classifier = classifier or RepoClassifier()
        self.context_builder = context_builder or ContextBuilder()
        self.checkouts = checkouts or CheckoutManager(settings.checkout_path)
        self.publisher = publisher or Publisher()
        self.client = client or self._default_client(settings)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        tokens: Iterable[str],
        options: GenerationOptions | None = None,
        *,
        reporter: Reporter | None = None,
    ) -> List[ManifestEntry]:
        """Generate pages for ``tokens`` and return the successful entries."""
        options = options or self.settings.generation
        reporter = reporter or LoggingReporter()
        batch = validate_batch(list(tokens))

        api_key = self.settings.llm.api_key
        if not api_key:
            raise ConfigError("CEREBRAS_API_KEY not set (add it to .env or the environment)")

        home_owner = self.publisher.remote_owner(self.settings.root)
        manifest = ManifestStore(self.settings.manifest_path)
        loop = RefinementLoop(self.client, api_key, self.prompt_builder)

        generated: List[ManifestEntry] = []
        for token in batch:
            try:
                entry = self._generate_one(token, loop, options, home_owner, reporter)
            except PersistenceFailure:
                raise
            except Exception as exc:  # one repository never aborts the batch
                self._log_exception(f"Generation failed for {token}", exc)
                reporter.warning(f"  ✗  {token}: unexpected error: {exc}")
                continue
            if entry is None:
                continue
            manifest.upsert(entry)
            generated.append(entry)

        if not generated:
            reporter.warning("❌ No pages were generated successfully.")
            return []

        manifest.persist()
        reporter.info(
            f"📋 Updated {self._display_path(manifest.path)} ({len(manifest)} total entries)"
        )
        self._publish(generated, options, reporter)
        return generated

    # ------------------------------------------------------------------
    # Per-repository pipeline

    def _generate_one(
        self,
        token: str,
        loop: RefinementLoop,
        options: GenerationOptions,
        home_owner: Optional[str],
        reporter: Reporter,
    ) -> Optional[ManifestEntry]:
        try:
            reference = RepositoryReference.parse(token)
        except InvalidReference as exc:
            reporter.warning(f"✗ {exc}")
            return None

        is_external = bool(home_owner) and reference.owner.lower() != str(home_owner).lower()
        reporter.info(_RULE)
        reporter.info(f"📦 {reference.full_name}{'  (external)' if is_external else ''}")
        reporter.info(_RULE)

        try:
            # The checkout stays locked until its context has been extracted.
            with self.checkouts.checked_out(
                reference, skip_refresh=options.skip_refresh, reporter=reporter
            ) as checkout:
                reporter.info("  🔍 Analysing repository…")
                classification = self.classifier.classify(checkout)
                context = self.context_builder.build(checkout, reference, classification)
        except CloneFailure as exc:
            reporter.warning(f"  ✗  {exc}")
            reporter.warning("     (Is the repo public? Is the name correct?)")
            return None
        except OSError as exc:
            self._log_exception(f"Analysis failed for {reference.full_name}", exc)
            reporter.warning(f"  ✗  Analysis failed: {exc}")
            return None
        reporter.info(f"  🏷  Detected type: {classification.value}")

        reporter.info(f"  ✨ Generating visual page ({options.iterations} iterations)…")
        try:
            document = loop.run(
                context,
                template_for(classification),
                is_external=is_external,
                iterations=options.iterations,
                reporter=reporter,
            )
        except ModelCallFailure as exc:
            reporter.warning(f"  ✗  Generation failed: {exc}")
            return None

        relative = self._write_document(reference, document)
        reporter.info(f"  ✅ Written: {relative}  ({document.size_bytes / 1024:.1f} KB)")

        return ManifestEntry(
            owner=reference.owner,
            repo=reference.name,
            full_name=reference.full_name,
            path=relative,
            url=relative.rsplit("/", 1)[0] + "/",
            is_external=is_external,
            type=classification.value,
            generated_at=utc_timestamp(),
        )

    def _write_document(self, reference: RepositoryReference, document: GeneratedDocument) -> str:
        target = self.settings.output_path / reference.name / "index.html"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document.html, encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(f"Unable to write {target}: {exc}") from exc
        return self._display_path(target)

    def _publish(
        self,
        generated: Sequence[ManifestEntry],
        options: GenerationOptions,
        reporter: Reporter,
    ) -> None:
        if options.skip_push:
            reporter.info("⏭  Skipping git commit (--no-push).")
            return

        names = ", ".join(entry.repo for entry in generated)
        message = f"Generate pages for {names}"
        output = self._display_path(self.settings.output_path)
        reporter.info("🚀 Committing and pushing…")
        try:
            pushed = self.publisher.commit_and_push(
                self.settings.root, [self.settings.output_path], message=message
            )
        except PushFailure as exc:
            reporter.warning(f"⚠️  {exc}. Run manually:")
            reporter.warning(f'   git add {output}/ && git commit -m "{message}" && git push')
            return
        if not pushed:
            reporter.info("Nothing to commit; pages already up to date.")
            return
        reporter.info("✅ Pushed!")
        for entry in generated:
            reporter.info(f"   → {entry.url}")

    # ------------------------------------------------------------------
    # Helpers

    def _display_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.settings.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)

    @staticmethod
    def _default_client(settings: Settings) -> ModelClient:
        llm = settings.llm
        return ModelClient(
            base_url=llm.base_url,
            model=llm.model,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
            request_timeout=llm.request_timeout,
        )


__all__ = ["Orchestrator", "validate_batch"]
