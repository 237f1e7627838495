"""Bounded analysis context extraction for a single checkout."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Sequence

from ..models import AnalysisContext, Classification, RepositoryReference, SourceExcerpt
from .utils import first_excerpt, read_excerpt

TREE_MAX_DEPTH = 2
TREE_MAX_ENTRIES = 40
README_MAX_CHARS = 4000
MANIFEST_MAX_CHARS = 2500
SOURCE_MAX_CHARS = 1500
MAX_SOURCE_FILES = 2

_TREE_EXCLUDED_DIRS = {
    "node_modules",
    "__pycache__",
    ".git",
    "dist",
    "build",
    ".next",
    ".nuxt",
    "target",
    "venv",
    ".venv",
    ".mypy_cache",
    "coverage",
}

README_CANDIDATES: tuple[str, ...] = ("README.md", "README.rst", "README.txt", "README")

MANIFEST_CANDIDATES: tuple[str, ...] = (
    "package.json",
    "Cargo.toml",
    "pyproject.toml",
    "requirements.txt",
    "go.mod",
    "setup.py",
    "Gemfile",
    "composer.json",
)

SOURCE_CANDIDATES: Dict[Classification, tuple[str, ...]] = {
    Classification.ML: ("train.py", "model.py", "src/train.py", "src/model.py", "main.py"),
    Classification.API: ("main.py", "app.py", "server.js", "app.js", "src/main.py", "src/app.ts"),
    Classification.CLI: ("src/main.rs", "src/main.py", "bin/cli.js", "cmd/root.go", "main.go", "cli.py"),
    Classification.FRONTEND: (
        "src/App.tsx",
        "src/App.jsx",
        "src/app.tsx",
        "src/main.tsx",
        "pages/index.tsx",
        "src/routes/+page.svelte",
    ),
    Classification.LIBRARY: ("src/index.ts", "src/index.js", "src/lib.rs", "src/lib.ts", "lib/index.js", "index.ts"),
    Classification.INFRA: ("Dockerfile", "docker-compose.yml", "main.tf", ".github/workflows/deploy.yml"),
    Classification.MONOREPO: ("package.json", "turbo.json", "lerna.json"),
    Classification.GENERIC: ("main.py", "main.js", "main.go", "main.rs", "index.js", "index.ts", "app.py"),
}


def render_tree(
    root: Path,
    *,
    max_depth: int = TREE_MAX_DEPTH,
    max_entries: int = TREE_MAX_ENTRIES,
) -> str:
    """Render a ``tree``-style listing bounded in depth and breadth."""
    lines: List[str] = []
    _render_level(root, lines, prefix="", depth=0, max_depth=max_depth, max_entries=max_entries)
    return "".join(lines)


def _render_level(
    directory: Path,
    lines: List[str],
    *,
    prefix: str,
    depth: int,
    max_depth: int,
    max_entries: int,
) -> None:
    if depth >= max_depth:
        return
    try:
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError:
        return

    visible = [
        entry
        for entry in entries
        if not entry.name.startswith(".") and entry.name not in _TREE_EXCLUDED_DIRS
    ][:max_entries]

    for index, entry in enumerate(visible):
        is_last = index == len(visible) - 1
        connector = "└── " if is_last else "├── "
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        lines.append(f"{prefix}{connector}{entry.name}{'/' if is_dir else ''}\n")
        if is_dir and depth < max_depth - 1:
            _render_level(
                Path(entry.path),
                lines,
                prefix=prefix + ("    " if is_last else "│   "),
                depth=depth + 1,
                max_depth=max_depth,
                max_entries=max_entries,
            )


class ContextBuilder:
    """Extracts the bounded digest used to ground generation for a checkout."""

    def __init__(self, source_candidates: Dict[Classification, Sequence[str]] | None = None) -> None:
        self.source_candidates = source_candidates or SOURCE_CANDIDATES

    def build(
        self,
        root: Path | str,
        reference: RepositoryReference,
        classification: Classification,
    ) -> AnalysisContext:
        root_path = Path(root)
        _, readme = first_excerpt(root_path, README_CANDIDATES, README_MAX_CHARS)
        manifest_file, manifest_excerpt = first_excerpt(
            root_path, MANIFEST_CANDIDATES, MANIFEST_MAX_CHARS
        )
        return AnalysisContext(
            reference=reference,
            classification=classification,
            structure=render_tree(root_path),
            readme=readme,
            manifest_file=manifest_file,
            manifest_excerpt=manifest_excerpt,
            source_files=self._source_excerpts(root_path, classification),
        )

    def _source_excerpts(self, root: Path, classification: Classification) -> List[SourceExcerpt]:
        candidates = self.source_candidates.get(
            classification, self.source_candidates[Classification.GENERIC]
        )
        excerpts: List[SourceExcerpt] = []
        for name in candidates:
            content = read_excerpt(root / name, SOURCE_MAX_CHARS)
            if content:
                excerpts.append(SourceExcerpt(name=name, content=content))
                if len(excerpts) >= MAX_SOURCE_FILES:
                    break
        return excerpts


__all__ = ["ContextBuilder", "render_tree", "README_CANDIDATES", "SOURCE_CANDIDATES"]
