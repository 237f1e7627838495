"""Manifest and job stores."""

from .jobs import JobNotFound, JobStateError, JobStore
from .manifest import ManifestStore, PersistenceFailure

__all__ = ["JobNotFound", "JobStateError", "JobStore", "ManifestStore", "PersistenceFailure"]
