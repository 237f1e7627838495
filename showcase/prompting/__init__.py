"""Prompt construction and the visual template catalog."""

from .builder import PromptBuilder, PromptMessage, ensure_external_badge, external_badge
from .catalog import TEMPLATES, template_for

__all__ = [
    "PromptBuilder",
    "PromptMessage",
    "TEMPLATES",
    "ensure_external_badge",
    "external_badge",
    "template_for",
]
