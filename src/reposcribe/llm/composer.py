"""Summary prompt assembly and completion.

Builds a single deterministic prompt from the deterministic analysis
results plus README/commit/PR excerpts, submits it to the completion
service once, and returns the raw response text. Parsing the response is
the section extractor's job.
"""

import logging
from dataclasses import dataclass, field

from reposcribe.errors import SummaryGenerationError
from reposcribe.llm.client import LLMClient, LLMError
from reposcribe.llm.prompts import (
    COMMON_RULES,
    DEFAULT_FILE_EXCERPT_CHARS,
    DEFAULT_README_CHARS,
    DEFAULT_SOURCE_EXCERPT_CHARS,
    DEFAULT_SOURCE_FILE_LIMIT,
    SYSTEM_PROMPT,
    format_commit_lines,
    format_pull_request_lines,
    heading_contract,
    language_context,
    structure_context,
    tech_stack_context,
    truncate,
)
from reposcribe.models.analysis import LanguageStats, ProjectStructureProfile, TechStackProfile
from reposcribe.models.repository import Commit, PullRequest, RepositoryRef
from reposcribe.templates.renderer import SummaryRenderer

logger = logging.getLogger(__name__)

MAX_PROMPT_COMMITS = 20
MAX_PROMPT_PULL_REQUESTS = 10


@dataclass
class ComposerInputs:
    """Everything the summary prompt is built from.

    Attributes:
        ref: Analyzed repository branch
        readme: README text
        commits: Recent commits, newest first
        pull_requests: Recent pull requests
        tech_stack: Deterministically detected technologies
        structure: Project structure profile
        languages: Branch language statistics
        important_files: Path to content of important config files
        source_files: Path to content of other analyzable source files
    """

    ref: RepositoryRef
    readme: str = ""
    commits: list[Commit] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    tech_stack: TechStackProfile = field(default_factory=TechStackProfile)
    structure: ProjectStructureProfile = field(default_factory=ProjectStructureProfile)
    languages: LanguageStats = field(default_factory=LanguageStats)
    important_files: dict[str, str] = field(default_factory=dict)
    source_files: dict[str, str] = field(default_factory=dict)


class SummaryComposer:
    """Assembles the summary prompt and invokes the completion service."""

    def __init__(
        self,
        client: LLMClient,
        max_tokens: int | None = None,
        commit_limit: int = MAX_PROMPT_COMMITS,
        pr_limit: int = MAX_PROMPT_PULL_REQUESTS,
        readme_chars: int = DEFAULT_README_CHARS,
        file_excerpt_chars: int = DEFAULT_FILE_EXCERPT_CHARS,
        source_file_limit: int = DEFAULT_SOURCE_FILE_LIMIT,
        source_excerpt_chars: int = DEFAULT_SOURCE_EXCERPT_CHARS,
        renderer: SummaryRenderer | None = None,
    ) -> None:
        self._client = client
        self.max_tokens = max_tokens
        self.commit_limit = min(commit_limit, MAX_PROMPT_COMMITS)
        self.pr_limit = min(pr_limit, MAX_PROMPT_PULL_REQUESTS)
        self.readme_chars = readme_chars
        self.file_excerpt_chars = file_excerpt_chars
        self.source_file_limit = source_file_limit
        self.source_excerpt_chars = source_excerpt_chars
        self._renderer = renderer or SummaryRenderer()

    def build_prompt(self, inputs: ComposerInputs) -> str:
        """Build the deterministic summary prompt.

        Args:
            inputs: Analysis results and excerpts

        Returns:
            Prompt text
        """
        context = {
            "repository": inputs.ref,
            "readme": truncate(inputs.readme, self.readme_chars),
            "tech_stack": tech_stack_context(inputs.tech_stack),
            "structure": structure_context(inputs.structure),
            "languages": language_context(inputs.languages),
            "commits": format_commit_lines(inputs.commits, self.commit_limit),
            "pull_requests": format_pull_request_lines(inputs.pull_requests, self.pr_limit),
            "important_files": [
                (path, truncate(inputs.important_files[path], self.file_excerpt_chars))
                for path in sorted(inputs.important_files)
            ],
            "source_files": [
                (path, truncate(inputs.source_files[path], self.source_excerpt_chars))
                for path in sorted(inputs.source_files)[: self.source_file_limit]
            ],
            "rules": COMMON_RULES,
            "headings": heading_contract(),
        }
        return self._renderer.render_prompt(context)

    def generate(self, inputs: ComposerInputs) -> str:
        """Generate the raw summary text.

        Args:
            inputs: Analysis results and excerpts

        Returns:
            Raw completion text (not parsed)

        Raises:
            SummaryGenerationError: If the completion fails or is empty
        """
        prompt = self.build_prompt(inputs)
        logger.info("Requesting summary for %s (%d prompt chars)", inputs.ref, len(prompt))

        try:
            response = self._client.complete(
                prompt,
                system_prompt=SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
            )
        except LLMError as e:
            raise SummaryGenerationError(str(e), ref=inputs.ref) from e

        if not response.content.strip():
            raise SummaryGenerationError("completion service returned no content", ref=inputs.ref)

        if response.finish_reason == "length":
            logger.warning("Summary for %s was truncated at the token limit", inputs.ref)

        logger.info(
            "Received summary for %s (%d chars, %d tokens)",
            inputs.ref,
            len(response.content),
            response.usage.get("total_tokens", 0),
        )
        return response.content
