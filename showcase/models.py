"""Core data models shared across showcase components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Dict, List, Optional


class InvalidReference(ValueError):
    """Raised when a repository token is not of the form ``owner/name``."""


class Classification(str, Enum):
    """Project category assigned to a repository; drives template selection."""

    ML = "ml"
    API = "api"
    CLI = "cli"
    FRONTEND = "frontend"
    LIBRARY = "library"
    INFRA = "infra"
    MONOREPO = "monorepo"
    GENERIC = "generic"


class JobStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class LogKind(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    SUCCESS = "success"
    ERROR = "error"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class RepositoryReference:
    """A GitHub repository identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, token: str) -> "RepositoryReference":
        parts = token.strip().split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidReference(f'Invalid format: "{token}" (expected owner/repo)')
        return cls(owner=parts[0], name=parts[1])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def clone_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}.git"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class SourceExcerpt:
    """Truncated contents of a representative source file."""

    name: str
    content: str


@dataclass
class AnalysisContext:
    """Bounded digest of a checkout used to ground the model call."""

    reference: RepositoryReference
    classification: Classification
    structure: str = ""
    readme: Optional[str] = None
    manifest_file: Optional[str] = None
    manifest_excerpt: Optional[str] = None
    source_files: List[SourceExcerpt] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedDocument:
    """Final HTML produced for one repository."""

    html: str

    @property
    def size_bytes(self) -> int:
        return len(self.html.encode("utf-8"))


@dataclass
class ManifestEntry:
    """Registry record describing one generated page."""

    owner: str
    repo: str
    full_name: str
    path: str
    url: str
    is_external: bool
    type: str
    generated_at: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "owner": self.owner,
            "repo": self.repo,
            "fullName": self.full_name,
            "path": self.path,
            "url": self.url,
            "isExternal": self.is_external,
            "type": self.type,
            "generatedAt": self.generated_at,
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional["ManifestEntry"]:
        if not isinstance(payload, dict):
            return None
        full_name = payload.get("fullName")
        owner = payload.get("owner")
        repo = payload.get("repo")
        if not all(isinstance(value, str) and value for value in (full_name, owner, repo)):
            return None
        return cls(
            owner=owner,  # type: ignore[arg-type]
            repo=repo,  # type: ignore[arg-type]
            full_name=full_name,  # type: ignore[arg-type]
            path=str(payload.get("path") or f"repos/{repo}/index.html"),
            url=str(payload.get("url") or f"repos/{repo}/"),
            is_external=bool(payload.get("isExternal", False)),
            type=str(payload.get("type") or Classification.GENERIC.value),
            generated_at=str(payload.get("generatedAt") or ""),
        )


@dataclass(frozen=True)
class JobLog:
    """Single line emitted by a background generation job."""

    kind: LogKind
    message: str
    timestamp: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.kind.value, "message": self.message, "timestamp": self.timestamp}


@dataclass
class Job:
    """In-memory record of one generation batch."""

    id: str
    status: JobStatus = JobStatus.RUNNING
    logs: List[JobLog] = field(default_factory=list)
    started_at: str = field(default_factory=utc_timestamp)
    finished_at: Optional[str] = None
    # Monotonic completion time used for retention; not part of the public view.
    finished_monotonic: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not JobStatus.RUNNING


@dataclass(frozen=True)
class JobSnapshot:
    """Incremental view of a job returned to polling clients."""

    id: str
    status: JobStatus
    logs: List[JobLog]
    total_logs: int
    started_at: str
    finished_at: Optional[str]


__all__ = [
    "AnalysisContext",
    "Classification",
    "GeneratedDocument",
    "InvalidReference",
    "Job",
    "JobLog",
    "JobSnapshot",
    "JobStatus",
    "LogKind",
    "ManifestEntry",
    "RepositoryReference",
    "SourceExcerpt",
    "utc_timestamp",
]
