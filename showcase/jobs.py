"""Background execution of generation batches tracked in the job store."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Sequence

from .config import GenerationOptions
from .logging import get_logger
from .models import JobStatus, LogKind
from .orchestrator import Orchestrator, validate_batch
from .reporting import CallbackReporter
from .stores.jobs import JobStore


class JobRunner:
    """Starts one detached worker thread per submitted batch.

    ``submit`` returns as soon as the job exists; the worker owns every
    mutation of its job and always drives it to a terminal status. Jobs run to
    completion whether or not anyone polls them.
    """

    def __init__(
        self,
        store: JobStore,
        orchestrator_factory: Callable[[], Orchestrator],
        *,
        default_options: GenerationOptions | None = None,
    ) -> None:
        self.store = store
        self._orchestrator_factory = orchestrator_factory
        self.default_options = default_options or GenerationOptions(skip_push=True)
        self._threads: Dict[str, threading.Thread] = {}
        self._threads_lock = threading.Lock()
        self.logger = get_logger("jobs")

    def submit(self, tokens: Sequence[str], options: GenerationOptions | None = None) -> str:
        batch = validate_batch(tokens)
        job_id = self.store.create()
        self.store.append(job_id, LogKind.STDOUT, "Starting generation...")

        thread = threading.Thread(
            target=self._execute,
            args=(job_id, batch, options or self.default_options),
            name=f"showcase-job-{job_id[:8]}",
            daemon=True,
        )
        with self._threads_lock:
            self._threads[job_id] = thread
        thread.start()
        self.logger.info("Job %s started for %s", job_id, ", ".join(batch))
        return job_id

    def wait(self, job_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the worker for ``job_id`` exits; True when it has."""
        with self._threads_lock:
            thread = self._threads.get(job_id)
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _execute(self, job_id: str, batch: Sequence[str], options: GenerationOptions) -> None:
        reporter = CallbackReporter(
            lambda message: self.store.append(job_id, LogKind.STDOUT, message),
            lambda message: self.store.append(job_id, LogKind.STDERR, message),
        )
        try:
            try:
                orchestrator = self._orchestrator_factory()
                generated = orchestrator.run(batch, options, reporter=reporter)
            except Exception as exc:  # worker must always reach a terminal status
                self._log_exception(f"Job {job_id} failed", exc)
                self.store.append(job_id, LogKind.ERROR, f"Generation failed: {exc}")
                self.store.finish(job_id, JobStatus.ERROR)
                return

            if generated:
                self.store.append(
                    job_id,
                    LogKind.SUCCESS,
                    f"Generation completed successfully! ({len(generated)} page(s))",
                )
                self.store.finish(job_id, JobStatus.SUCCESS)
            else:
                self.store.append(job_id, LogKind.ERROR, "Generation failed: no pages were generated")
                self.store.finish(job_id, JobStatus.ERROR)
            self.logger.info("Job %s finished: %d page(s)", job_id, len(generated))
        finally:
            with self._threads_lock:
                self._threads.pop(job_id, None)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["JobRunner"]
