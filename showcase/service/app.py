"""FastAPI application exposing asynchronous page generation jobs."""

from __future__ import annotations

from typing import Any, List, Optional

import uvicorn
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import Settings, load_settings
from ..jobs import JobRunner
from ..logging import get_logger
from ..models import JobSnapshot
from ..orchestrator import Orchestrator
from ..stores.jobs import JobNotFound, JobStore
from ..stores.manifest import PersistenceFailure, read_manifest_payload

logger = get_logger("service")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateRequest(BaseModel):
    repos: List[str] = Field(default_factory=list)


class GenerateResponse(_CamelModel):
    job_id: str = Field(alias="jobId")


class LogLine(BaseModel):
    type: str
    message: str
    timestamp: str


class JobStatusResponse(_CamelModel):
    job_id: str = Field(alias="jobId")
    status: str
    logs: List[LogLine]
    total_logs: int = Field(alias="totalLogs")
    started_at: str = Field(alias="startedAt")
    finished_at: Optional[str] = Field(default=None, alias="finishedAt")

    @classmethod
    def from_snapshot(cls, snapshot: JobSnapshot) -> "JobStatusResponse":
        return cls(
            job_id=snapshot.id,
            status=snapshot.status.value,
            logs=[LogLine(**log.to_dict()) for log in snapshot.logs],
            total_logs=snapshot.total_logs,
            started_at=snapshot.started_at,
            finished_at=snapshot.finished_at,
        )


class HealthResponse(BaseModel):
    status: str


def build_job_runner(settings: Settings) -> JobRunner:
    store = JobStore(retention_seconds=settings.job_retention_seconds)
    return JobRunner(store, lambda: Orchestrator(settings))


def _parse_cursor(value: Optional[str]) -> int:
    try:
        return max(int(value), 0) if value is not None else 0
    except ValueError:
        return 0


def create_app(
    runner: JobRunner | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing generation jobs."""
    settings = settings or load_settings()
    job_runner = runner or build_job_runner(settings)

    app = FastAPI(title="Showcase Service", version="1.0.0")
    app.state.job_runner = job_runner

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/api/generate", response_model=GenerateResponse, status_code=202)
    async def submit_generation(payload: GenerateRequest) -> GenerateResponse:
        # submit() only validates and spawns the worker; it never blocks on generation.
        job_id = job_runner.submit(payload.repos)
        logger.info("Queued job %s for %d repo(s)", job_id, len(payload.repos))
        return GenerateResponse(job_id=job_id)

    @app.get("/api/generate/{job_id}", response_model=JobStatusResponse)
    async def job_status(job_id: str, since: Optional[str] = Query(default=None)) -> JobStatusResponse:
        snapshot = job_runner.store.snapshot(job_id, since=_parse_cursor(since))
        return JobStatusResponse.from_snapshot(snapshot)

    @app.get("/api/manifest")
    async def manifest() -> Any:
        payload = read_manifest_payload(settings.manifest_path)
        if payload is None:
            return JSONResponse(status_code=404, content={"detail": "Manifest not found"})
        return payload

    @app.exception_handler(JobNotFound)
    async def job_not_found_handler(_: Any, exc: JobNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "Job not found"})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(PersistenceFailure)
    async def persistence_handler(_: Any, exc: PersistenceFailure) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 3000, settings: Settings | None = None
) -> None:  # pragma: no cover - integration path
    app = create_app(settings=settings)
    uvicorn.run(app, host=host, port=port)
