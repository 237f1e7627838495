"""Shared filesystem helpers for analyzer implementations.

Every helper here degrades to an empty result on I/O errors; checkouts are
untrusted input and a missing or unreadable file is never fatal.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

# Directories never descended into while searching a checkout.
_SEARCH_SKIP_DIRS = {"node_modules", ".git"}

MANIFEST_CANDIDATES: tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "Cargo.toml",
    "pyproject.toml",
    "go.mod",
    "setup.py",
    "Gemfile",
)


def read_excerpt(path: Path, max_chars: int) -> Optional[str]:
    """Return the first ``max_chars`` characters of ``path`` or None.

    Empty files are treated the same as missing ones.
    """
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            content = handle.read(max_chars)
    except (OSError, ValueError):
        return None
    return content or None


def first_excerpt(
    root: Path, candidates: Iterable[str], max_chars: int
) -> tuple[Optional[str], Optional[str]]:
    """Return ``(name, excerpt)`` for the first candidate file with content."""
    for name in candidates:
        content = read_excerpt(root / name, max_chars)
        if content:
            return name, content
    return None, None


def has_file(root: Path, name: str) -> bool:
    try:
        return (root / name).exists()
    except OSError:
        return False


def has_populated_dir(root: Path, name: str) -> bool:
    """Return True when ``root/name`` is a directory with at least one entry."""
    try:
        with os.scandir(root / name) as entries:
            return any(True for _ in entries)
    except OSError:
        return False


def find_file(
    root: Path,
    predicate: Callable[[str, bool], bool],
    *,
    max_depth: int = 2,
    _depth: int = 0,
) -> bool:
    """Depth-limited search for an entry matching ``predicate(name, is_dir)``.

    Hidden entries are ignored. ``max_depth`` counts directory levels below
    ``root``, so ``max_depth=2`` inspects three levels in total.
    """
    if _depth > max_depth:
        return False
    try:
        with os.scandir(root) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError:
        return False

    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        if predicate(entry.name, is_dir):
            return True
        if is_dir and entry.name not in _SEARCH_SKIP_DIRS:
            if find_file(Path(entry.path), predicate, max_depth=max_depth, _depth=_depth + 1):
                return True
    return False


def load_manifest_texts(root: Path, max_chars: int = 4000) -> Dict[str, str]:
    """Return the leading text of each known dependency manifest present."""
    texts: Dict[str, str] = {}
    for name in MANIFEST_CANDIDATES:
        content = read_excerpt(root / name, max_chars)
        if content:
            texts[name] = content
    return texts


def load_package_json(root: Path, max_chars: int = 2000) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    content = read_excerpt(root / "package.json", max_chars)
    if not content:
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return {}
    if isinstance(data, dict):
        return data
    return {}


__all__ = [
    "MANIFEST_CANDIDATES",
    "find_file",
    "first_excerpt",
    "has_file",
    "has_populated_dir",
    "load_manifest_texts",
    "load_package_json",
    "read_excerpt",
]
