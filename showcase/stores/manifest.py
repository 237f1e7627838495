"""Persistent registry of generated showcase pages."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..models import ManifestEntry

# Serialises read-merge-write cycles of every store in this process.
_PERSIST_LOCK = threading.Lock()


class PersistenceFailure(RuntimeError):
    """Raised when a generated document or the manifest cannot be written."""


class ManifestStore:
    """Stores manifest entries keyed by repository full name.

    Entries keep their original order; an upsert for an existing full name
    replaces the entry in place, so at most one entry exists per repository.
    ``persist`` re-reads the file and applies only this store's own changes,
    so overlapping batches never erase each other's entries.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._entries: Dict[str, ManifestEntry] = _read_entries(self._path)
        # full name -> new entry, or None for a removal, since the last persist.
        self._changes: Dict[str, Optional[ManifestEntry]] = {}

    @property
    def path(self) -> Path:
        return self._path

    def entries(self) -> Mapping[str, ManifestEntry]:
        return dict(self._entries)

    def get(self, full_name: str) -> ManifestEntry | None:
        return self._entries.get(full_name)

    def upsert(self, entry: ManifestEntry) -> None:
        # dict assignment keeps the original insertion slot for existing keys.
        self._entries[entry.full_name] = entry
        self._changes[entry.full_name] = entry

    def remove(self, full_name: str) -> bool:
        if self._entries.pop(full_name, None) is None:
            return False
        self._changes[full_name] = None
        return True

    def to_payload(self) -> Dict[str, List[Dict[str, object]]]:
        return {"generated": [entry.to_dict() for entry in self._entries.values()]}

    def persist(self) -> None:
        if not self._changes:
            return
        with _PERSIST_LOCK:
            merged = _read_entries(self._path)
            for full_name, entry in self._changes.items():
                if entry is None:
                    merged.pop(full_name, None)
                else:
                    merged[full_name] = entry
            self._entries = merged
            self._write()
        self._changes.clear()

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _write(self) -> None:
        staging = self._path.with_name(f".{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(
                json.dumps(self.to_payload(), indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            os.replace(staging, self._path)
        except OSError as exc:
            raise PersistenceFailure(f"Unable to write {self._path}: {exc}") from exc


def _read_entries(path: Path) -> Dict[str, ManifestEntry]:
    """Load entries from ``path``; a missing or corrupt file reads as empty."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    generated = data.get("generated")
    if not isinstance(generated, list):
        return {}
    entries: Dict[str, ManifestEntry] = {}
    for raw in generated:
        entry = ManifestEntry.from_dict(raw)
        if entry is not None:
            entries[entry.full_name] = entry
    return entries


def read_manifest_payload(path: Path) -> Dict[str, object] | None:
    """Return the raw manifest JSON or None when it does not exist."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceFailure(f"Unable to read {path}: {exc}") from exc
    return data if isinstance(data, dict) else None


__all__ = ["ManifestStore", "PersistenceFailure", "read_manifest_payload"]
