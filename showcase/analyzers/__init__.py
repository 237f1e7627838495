"""Checkout analysis: classification and context extraction."""

from .classifier import ClassificationRule, DEFAULT_RULES, RepoClassifier
from .context import ContextBuilder, render_tree

__all__ = [
    "ClassificationRule",
    "ContextBuilder",
    "DEFAULT_RULES",
    "RepoClassifier",
    "render_tree",
]
