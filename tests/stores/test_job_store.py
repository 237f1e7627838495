"""Tests for the in-memory job store."""

from __future__ import annotations

import pytest

from showcase.models import JobStatus, LogKind
from showcase.stores.jobs import JobNotFound, JobStateError, JobStore


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_new_job_is_running_with_no_logs() -> None:
    store = JobStore()
    job_id = store.create()

    snapshot = store.snapshot(job_id)

    assert snapshot.status is JobStatus.RUNNING
    assert snapshot.logs == []
    assert snapshot.total_logs == 0
    assert snapshot.finished_at is None
    assert snapshot.started_at.endswith("Z")


def test_job_ids_are_unique() -> None:
    ids = iter(["dup", "dup", "fresh"])
    store = JobStore(id_factory=lambda: next(ids))

    first = store.create()
    second = store.create()

    assert (first, second) == ("dup", "fresh")


def test_snapshot_returns_logs_after_cursor() -> None:
    store = JobStore()
    job_id = store.create()
    for message in ("one", "two", "three"):
        store.append(job_id, LogKind.STDOUT, message)

    snapshot = store.snapshot(job_id, since=1)

    assert [log.message for log in snapshot.logs] == ["two", "three"]
    assert snapshot.total_logs == 3


def test_cursor_beyond_end_returns_nothing() -> None:
    store = JobStore()
    job_id = store.create()
    store.append(job_id, LogKind.STDOUT, "only")

    assert store.snapshot(job_id, since=10).logs == []
    assert len(store.snapshot(job_id, since=-5).logs) == 1


def test_finish_sets_terminal_status_once() -> None:
    store = JobStore()
    job_id = store.create()
    store.append(job_id, LogKind.SUCCESS, "done")
    store.finish(job_id, JobStatus.SUCCESS)

    snapshot = store.snapshot(job_id)
    assert snapshot.status is JobStatus.SUCCESS
    assert snapshot.finished_at is not None

    with pytest.raises(JobStateError):
        store.finish(job_id, JobStatus.ERROR)
    with pytest.raises(JobStateError):
        store.append(job_id, LogKind.STDOUT, "late")


def test_finish_rejects_running_status() -> None:
    store = JobStore()
    job_id = store.create()

    with pytest.raises(ValueError):
        store.finish(job_id, JobStatus.RUNNING)


def test_unknown_job_raises_not_found() -> None:
    store = JobStore()

    with pytest.raises(JobNotFound):
        store.snapshot("missing")
    with pytest.raises(JobNotFound):
        store.append("missing", LogKind.STDOUT, "x")


def test_finished_jobs_are_evicted_after_retention() -> None:
    clock = _Clock()
    store = JobStore(retention_seconds=60, clock=clock)
    finished = store.create()
    running = store.create()
    store.finish(finished, JobStatus.ERROR)

    clock.now = 59
    assert store.snapshot(finished).status is JobStatus.ERROR

    clock.now = 61
    with pytest.raises(JobNotFound):
        store.snapshot(finished)
    assert running in store
    assert len(store) == 1
