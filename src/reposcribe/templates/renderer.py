"""Template rendering for prompts and summary exports.

Renders the summary prompt and stored summaries using Jinja2 templates.
All output is deterministic: the same input always produces the same text,
so identical repository content yields identical prompts.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from reposcribe.llm.prompts import tech_stack_context
from reposcribe.models.analysis import PersistedSummary, SummaryField

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = "summary_prompt.md.j2"
SUMMARY_TEMPLATE = "summary.md.j2"

# Notion rich_text content is limited to 2000 characters per text object
NOTION_TEXT_LIMIT = 2000


def format_datetime(dt: datetime | str | None) -> str:
    """Format datetime for display in exported summaries.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return "N/A"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt)
        except ValueError:
            return dt

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


class SummaryRenderer:
    """Renders prompts and summaries from package templates.

    Usage:
        renderer = SummaryRenderer()
        prompt = renderer.render_prompt(context)
        markdown = renderer.render_markdown(summary)
        blocks = renderer.to_notion_blocks(summary)
    """

    def __init__(self) -> None:
        self._env = Environment(
            loader=PackageLoader("reposcribe", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["format_datetime"] = format_datetime

    def _render(self, template_name: str, context: dict[str, Any]) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateError as e:
            logger.error("Failed to load template %s: %s", template_name, e)
            raise ValueError(f"Template not found: {template_name}") from e

        try:
            return template.render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

    def render_prompt(self, context: dict[str, Any]) -> str:
        """Render the summary prompt.

        Args:
            context: Prompt context built by SummaryComposer

        Returns:
            Prompt text
        """
        prompt = self._render(PROMPT_TEMPLATE, context)
        logger.debug("Rendered summary prompt (%d characters)", len(prompt))
        return prompt

    def render_markdown(self, summary: PersistedSummary) -> str:
        """Export a stored summary as a Markdown document.

        Args:
            summary: Stored summary

        Returns:
            Markdown text
        """
        context = {
            "repository_id": summary.repository_id,
            "branch_name": summary.branch_name,
            "updated_at": summary.updated_at,
            "draft": summary.draft,
            "tech_stack": tech_stack_context(summary.draft.tech_stack),
            "metrics": summary.draft.performance_metrics,
        }
        markdown = self._render(SUMMARY_TEMPLATE, context)
        logger.info(
            "Rendered summary for %s@%s (%d characters)",
            summary.repository_id,
            summary.branch_name,
            len(markdown),
        )
        return markdown

    def to_notion_blocks(self, summary: PersistedSummary) -> list[dict[str, Any]]:
        """Export a stored summary as Notion blocks.

        Each section becomes a ``heading_1`` block followed by a
        ``paragraph`` block; empty sections are skipped.

        Args:
            summary: Stored summary

        Returns:
            List of Notion block objects
        """
        draft = summary.draft
        stack = tech_stack_context(draft.tech_stack)
        tech_lines = [f"{category}: {', '.join(names)}" for category, names in stack["categories"]]
        if stack["uncategorized"]:
            tech_lines.append(f"Other: {', '.join(stack['uncategorized'])}")
        if not tech_lines and draft.tech_stack.other:
            tech_lines.append(draft.tech_stack.other)

        sections = [
            (SummaryField.PROJECT_INTRO.title, draft.project_intro),
            (SummaryField.TECH_STACK.title, "\n".join(tech_lines)),
            (SummaryField.ARCHITECTURE.title, draft.architecture_notes),
            (SummaryField.REFACTORING.title, draft.refactoring_history),
            (SummaryField.COLLABORATION.title, draft.collaboration_flow),
            (
                SummaryField.RESUME_BULLETS.title,
                "\n".join(f"• {b.title}: {b.content}" for b in draft.resume_bullets),
            ),
        ]

        blocks: list[dict[str, Any]] = []
        for title, text in sections:
            if not text.strip():
                continue
            blocks.append(_notion_block("heading_1", title))
            blocks.append(_notion_block("paragraph", text.strip()))
        return blocks


def _notion_block(block_type: str, content: str) -> dict[str, Any]:
    chunks = [
        content[i : i + NOTION_TEXT_LIMIT] for i in range(0, len(content), NOTION_TEXT_LIMIT)
    ] or [""]
    return {
        "object": "block",
        "type": block_type,
        block_type: {
            "rich_text": [{"type": "text", "text": {"content": chunk}} for chunk in chunks],
        },
    }
