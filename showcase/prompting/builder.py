"""Builds conversations for the initial generation and refinement rounds."""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import unescape
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader

from ..models import AnalysisContext
from .constants import (
    BACK_LINK_HREF,
    DEFAULT_REFINEMENT_LABEL,
    DESIGN_CSS,
    README_PROMPT_CHARS,
    REFINEMENT_DIRECTIVES,
    REFINEMENT_LABELS,
    REFINEMENT_PREFIX_CHARS,
)

_BODY_OPEN = re.compile(r"<body\b[^>]*>", re.IGNORECASE)


@dataclass(frozen=True)
class PromptMessage:
    """Represents a single chat message for the model endpoint."""

    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def external_badge(owner: str) -> str:
    """Return the marker text every page for an external repository must carry."""
    return f"External — {owner}"


def ensure_external_badge(html: str, owner: str) -> str:
    """Insert the external badge into ``html`` when the model dropped it."""
    badge = external_badge(owner)
    # Models sometimes spell the dash as &mdash; or &#8212;.
    if badge in html or badge in unescape(html):
        return html
    element = (
        '<div class="external-badge" style="display:inline-block;margin:12px 24px;'
        "padding:4px 12px;border-radius:999px;background:var(--warning-color,#ff9500);"
        f'color:#fff;font-weight:600">⚠️ {badge}</div>'
    )
    match = _BODY_OPEN.search(html)
    if match is None:
        return f"{element}\n{html}"
    return f"{html[: match.end()]}\n{element}{html[match.end():]}"


class PromptBuilder:
    """Renders system, initial and refinement prompts from Jinja templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def system_prompt(self) -> str:
        return self._env.get_template("system.j2").render(
            design_css=DESIGN_CSS,
            back_link=BACK_LINK_HREF,
        )

    def render_context(self, context: AnalysisContext, *, is_external: bool) -> str:
        """Render the repository digest embedded in the initial prompt."""
        reference = context.reference
        sections: List[str] = [f"## Repository: {reference.full_name}"]
        if is_external:
            sections.append(
                f'⚠️  EXTERNAL REPOSITORY: You MUST display an "{external_badge(reference.owner)}" '
                "badge prominently at the top of the page (below the repo title). "
                "Style it with an orange/warning color."
            )
        sections.append(f"## Detected Project Type: {context.classification.value}")
        sections.append("## Directory Structure\n```\n" + (context.structure or "(empty)") + "```")

        if context.readme:
            sections.append("## README (truncated)\n" + context.readme[:README_PROMPT_CHARS])
        else:
            sections.append("## README\n(No README found)")

        if context.manifest_excerpt:
            sections.append(
                f"## {context.manifest_file}\n```\n{context.manifest_excerpt}\n```"
            )

        for source in context.source_files:
            sections.append(f"## {source.name} (key source file)\n```\n{source.content}\n```")

        return "\n\n".join(sections)

    def initial_messages(
        self,
        context: AnalysisContext,
        template: str,
        *,
        is_external: bool,
    ) -> List[PromptMessage]:
        user_prompt = self._env.get_template("initial.j2").render(
            context_text=self.render_context(context, is_external=is_external),
            type=context.classification.value,
            template=template,
            full_name=context.reference.full_name,
            back_link=BACK_LINK_HREF,
            is_external=is_external,
            badge=external_badge(context.reference.owner),
        )
        return [
            PromptMessage(role="system", content=self.system_prompt()),
            PromptMessage(role="user", content=user_prompt),
        ]

    def refinement_messages(
        self,
        context: AnalysisContext,
        previous: str,
        *,
        iteration: int,
        total: int,
        is_external: bool,
    ) -> List[PromptMessage]:
        type_name = context.classification.value
        user_prompt = self._env.get_template("refine.j2").render(
            full_name=context.reference.full_name,
            type=type_name,
            previous=previous[:REFINEMENT_PREFIX_CHARS],
            iteration=iteration,
            total=total,
            directives=[directive.format(type=type_name) for directive in REFINEMENT_DIRECTIVES],
            is_external=is_external,
            badge=external_badge(context.reference.owner),
        )
        return [
            PromptMessage(role="system", content=self.system_prompt()),
            PromptMessage(role="user", content=user_prompt),
        ]

    @staticmethod
    def refinement_label(iteration: int) -> str:
        index = iteration - 2
        if 0 <= index < len(REFINEMENT_LABELS):
            return REFINEMENT_LABELS[index]
        return DEFAULT_REFINEMENT_LABEL


__all__ = ["PromptBuilder", "PromptMessage", "ensure_external_badge", "external_badge"]
