"""Heuristic repository classifier.

Classification is an ordered chain of ``(label, predicate)`` rules evaluated
first-match-wins. Ordering is significant: a checkout holding both a notebook
and a Dockerfile is ``ml``, never ``infra``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from ..logging import get_logger
from ..models import Classification
from .utils import (
    find_file,
    has_file,
    has_populated_dir,
    load_manifest_texts,
    load_package_json,
    read_excerpt,
)

_ML_LIBRARIES = re.compile(
    r"\b(?:pandas|numpy|scikit.learn|torch|tensorflow|keras|xgboost|lightgbm)\b",
    re.IGNORECASE,
)
_FRONTEND_FRAMEWORKS = re.compile(
    r"[\"'](?:react|vue|svelte|next|nuxt|angular|solid-js)[\"']",
    re.IGNORECASE,
)
_SERVER_FRAMEWORKS = re.compile(
    r"\b(?:fastapi|flask|express|fastify|django|gin|actix-web|fiber|hono)\b",
    re.IGNORECASE,
)
_CLI_LIBRARIES = re.compile(
    r"\b(?:commander|yargs|clap|argparse|click|cobra|oclif)\b",
    re.IGNORECASE,
)

_WORKSPACE_FILES = ("lerna.json", "turbo.json", "pnpm-workspace.yaml")
_CONTAINER_FILES = ("Dockerfile", "docker-compose.yml", "docker-compose.yaml")
_LIBRARY_FIELDS = ("main", "exports", "module", "types")


class CheckoutProbe:
    """Read-only view over a checkout that memoises manifest reads."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._manifests: Optional[Dict[str, str]] = None

    @property
    def manifests(self) -> Dict[str, str]:
        if self._manifests is None:
            self._manifests = load_manifest_texts(self.root)
        return self._manifests

    def manifest_mentions(self, pattern: re.Pattern[str]) -> bool:
        return any(pattern.search(text) for text in self.manifests.values())

    def has(self, name: str) -> bool:
        return has_file(self.root, name)

    def has_populated_dir(self, name: str) -> bool:
        return has_populated_dir(self.root, name)

    def has_file_with_suffix(self, suffix: str, *, max_depth: int = 2) -> bool:
        return find_file(
            self.root,
            lambda name, is_dir: not is_dir and name.endswith(suffix),
            max_depth=max_depth,
        )


@dataclass(frozen=True)
class ClassificationRule:
    """A single predicate in the priority chain."""

    label: Classification
    description: str
    predicate: Callable[[CheckoutProbe], bool]

    def matches(self, probe: CheckoutProbe) -> bool:
        try:
            return bool(self.predicate(probe))
        except (OSError, ValueError, UnicodeError):
            return False


def _is_ml(probe: CheckoutProbe) -> bool:
    return probe.has_file_with_suffix(".ipynb") or probe.manifest_mentions(_ML_LIBRARIES)


def _is_monorepo(probe: CheckoutProbe) -> bool:
    if any(probe.has(name) for name in _WORKSPACE_FILES):
        return True
    return probe.has_populated_dir("packages") or probe.has_populated_dir("apps")


def _is_infra(probe: CheckoutProbe) -> bool:
    if probe.has_file_with_suffix(".tf"):
        return True
    return any(probe.has(name) for name in _CONTAINER_FILES)


def _is_frontend(probe: CheckoutProbe) -> bool:
    return probe.manifest_mentions(_FRONTEND_FRAMEWORKS)


def _is_api(probe: CheckoutProbe) -> bool:
    return probe.manifest_mentions(_SERVER_FRAMEWORKS)


def _is_cli(probe: CheckoutProbe) -> bool:
    return probe.has_populated_dir("bin") or probe.manifest_mentions(_CLI_LIBRARIES)


def _is_library(probe: CheckoutProbe) -> bool:
    package = load_package_json(probe.root, max_chars=4000)
    if any(package.get(key) for key in _LIBRARY_FIELDS):
        return True
    cargo = read_excerpt(probe.root / "Cargo.toml", 2000)
    return bool(cargo and "[lib]" in cargo)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(Classification.ML, "notebook or numerical library", _is_ml),
    ClassificationRule(Classification.MONOREPO, "workspace manifest or packages/apps", _is_monorepo),
    ClassificationRule(Classification.INFRA, "terraform or container descriptors", _is_infra),
    ClassificationRule(Classification.FRONTEND, "front-end framework dependency", _is_frontend),
    ClassificationRule(Classification.API, "server framework dependency", _is_api),
    ClassificationRule(Classification.CLI, "bin/ directory or argument parser", _is_cli),
    ClassificationRule(Classification.LIBRARY, "library entry point", _is_library),
)


class RepoClassifier:
    """Assigns exactly one :class:`Classification` to a checkout."""

    def __init__(self, rules: Sequence[ClassificationRule] | None = None) -> None:
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self.logger = get_logger("classifier")

    def classify(self, root: Path | str) -> Classification:
        probe = CheckoutProbe(Path(root))
        for rule in self.rules:
            if rule.matches(probe):
                self.logger.debug("%s matched rule '%s'", root, rule.description)
                return rule.label
        return Classification.GENERIC


__all__ = ["CheckoutProbe", "ClassificationRule", "DEFAULT_RULES", "RepoClassifier"]
