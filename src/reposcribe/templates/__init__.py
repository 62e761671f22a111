"""Reposcribe template rendering.

Jinja2-based rendering of the summary prompt and summary exports
(Markdown and Notion blocks). Output is deterministic for identical input.
"""

from reposcribe.templates.renderer import SummaryRenderer, format_datetime

__all__ = ["SummaryRenderer", "format_datetime"]
