"""Prompt content for repository summary generation.

The summary prompt itself is a Jinja2 template (``summary_prompt.md.j2``);
this module holds the system prompt, the response heading contract and the
helpers that turn analysis results into deterministic template context.
"""

from typing import Any

from reposcribe.models.analysis import (
    TECH_CATEGORIES,
    LanguageStats,
    ProjectStructureProfile,
    SummaryField,
    TechStackProfile,
)
from reposcribe.models.repository import Commit, PullRequest

SYSTEM_PROMPT = (
    "You are a senior software engineer who writes concise, factual technical "
    "summaries of code repositories for developer portfolios and resumes. "
    "Base every statement on the repository data you are given."
)

# Common rules appended to the user prompt
COMMON_RULES = """
WRITING RULES - YOU MUST FOLLOW THESE:

1. Mention ONLY technologies listed under "Detected Tech Stack". Do not add
   frameworks, databases or services that are not listed there.
2. State facts definitively. Do not use hedging such as "appears to",
   "seems to", "likely" or "probably".
3. Use specific names, counts and values from the data provided.
4. If the data does not support a section, write one short sentence saying
   what the data does show instead of guessing.
"""

# Heading contract for the response; SectionExtractor recognizes these
RESPONSE_HEADINGS: tuple[tuple[SummaryField, str], ...] = (
    (SummaryField.PROJECT_INTRO, "What the project is and which problem it solves (2-3 sentences)."),
    (SummaryField.TECH_STACK, "The detected technologies grouped by category."),
    (SummaryField.ARCHITECTURE, "How the code is organized and how its parts interact."),
    (SummaryField.REFACTORING, "Notable refactorings and improvements visible in commits and PRs."),
    (SummaryField.COLLABORATION, "How work was reviewed and merged, based on pull requests."),
    (
        SummaryField.RESUME_BULLETS,
        'Three to five achievements, each under its own "Achievement N:" line '
        "followed by one or two sentences with concrete impact.",
    ),
)

DEFAULT_README_CHARS = 4000
DEFAULT_FILE_EXCERPT_CHARS = 1500
DEFAULT_SOURCE_FILE_LIMIT = 30
DEFAULT_SOURCE_EXCERPT_CHARS = 600
DEFAULT_PR_BODY_CHARS = 300


def truncate(text: str, limit: int) -> str:
    """Truncate text to limit characters, marking the cut."""
    text = text.strip()
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "\n...(truncated)"


def format_commit_lines(commits: list[Commit], limit: int) -> list[str]:
    """Return commit subject lines, newest first, capped at limit."""
    return [commit.subject for commit in commits[:limit] if commit.subject]


def format_pull_request_lines(
    pull_requests: list[PullRequest],
    limit: int,
    body_chars: int = DEFAULT_PR_BODY_CHARS,
) -> list[str]:
    """Return ``PR #n: title - body`` lines capped at limit."""
    lines = []
    for pr in pull_requests[:limit]:
        body = " ".join(pr.body.split())
        if len(body) > body_chars:
            body = body[:body_chars].rstrip() + "..."
        lines.append(f"PR #{pr.number}: {pr.title} - {body}" if body else f"PR #{pr.number}: {pr.title}")
    return lines


def tech_stack_context(profile: TechStackProfile) -> dict[str, Any]:
    """Template context for the detected tech stack."""
    categorized = set().union(*(getattr(profile, c) for c in TECH_CATEGORIES))
    return {
        "categories": [
            (category.capitalize(), sorted(getattr(profile, category)))
            for category in TECH_CATEGORIES
            if getattr(profile, category)
        ],
        "uncategorized": sorted(profile.detected - categorized),
        "is_empty": profile.is_empty,
    }


def structure_context(profile: ProjectStructureProfile) -> dict[str, Any]:
    """Template context for the project structure."""
    return {
        "project_type": profile.project_type.value,
        "top_level_folders": profile.top_level_folders[:15],
        "file_type_counts": profile.file_type_counts,
    }


def language_context(stats: LanguageStats) -> list[dict[str, Any]]:
    """Template context for language statistics (top 10)."""
    return [
        {"language": name, "count": share.count, "percentage": share.percentage}
        for name, share in stats.top(10)
    ]


def heading_contract() -> list[dict[str, Any]]:
    """Numbered response headings with their instructions."""
    return [
        {"number": index, "title": field.title, "instruction": instruction}
        for index, (field, instruction) in enumerate(RESPONSE_HEADINGS, start=1)
    ]
