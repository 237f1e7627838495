"""In-memory registry of background generation jobs.

Job state is process-local and not durable. Each job is mutated only by the
worker that owns it and read by any number of pollers; a single lock guards
the registry.
"""

from __future__ import annotations

import threading
import time
import uuid
from typing import Callable, Dict, List

from ..models import Job, JobLog, JobSnapshot, JobStatus, LogKind, utc_timestamp

DEFAULT_RETENTION_SECONDS = 30 * 60


class JobNotFound(KeyError):
    """Raised for unknown or evicted job identifiers."""


class JobStateError(RuntimeError):
    """Raised when a job is mutated after reaching a terminal status."""


class JobStore:
    """Thread-safe create/append/finish/snapshot operations over jobs."""

    def __init__(
        self,
        *,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        with self._lock:
            self._evict_expired_locked()
            job_id = self._id_factory()
            while job_id in self._jobs:
                job_id = self._id_factory()
            self._jobs[job_id] = Job(id=job_id)
            return job_id

    def append(self, job_id: str, kind: LogKind, message: str) -> None:
        with self._lock:
            job = self._require(job_id)
            if job.is_terminal:
                raise JobStateError(f"Job {job_id} already finished with status {job.status.value}")
            job.logs.append(JobLog(kind=kind, message=message, timestamp=utc_timestamp()))

    def finish(self, job_id: str, status: JobStatus) -> None:
        if status is JobStatus.RUNNING:
            raise ValueError("A job can only finish as success or error")
        with self._lock:
            job = self._require(job_id)
            if job.is_terminal:
                raise JobStateError(f"Job {job_id} already finished with status {job.status.value}")
            job.status = status
            job.finished_at = utc_timestamp()
            job.finished_monotonic = self._clock()

    def snapshot(self, job_id: str, since: int = 0) -> JobSnapshot:
        """Return logs after the first ``since`` lines plus the current status."""
        with self._lock:
            self._evict_expired_locked()
            job = self._require(job_id)
            total = len(job.logs)
            cursor = min(max(since, 0), total)
            return JobSnapshot(
                id=job.id,
                status=job.status,
                logs=list(job.logs[cursor:]),
                total_logs=total,
                started_at=job.started_at,
                finished_at=job.finished_at,
            )

    def status(self, job_id: str) -> JobStatus:
        with self._lock:
            self._evict_expired_locked()
            return self._require(job_id).status

    def evict_expired(self) -> List[str]:
        with self._lock:
            return self._evict_expired_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    # ------------------------------------------------------------------
    # Internal helpers

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def _evict_expired_locked(self) -> List[str]:
        now = self._clock()
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.finished_monotonic is not None
            and now - job.finished_monotonic >= self.retention_seconds
        ]
        for job_id in expired:
            del self._jobs[job_id]
        return expired


__all__ = ["DEFAULT_RETENTION_SECONDS", "JobNotFound", "JobStateError", "JobStore"]
