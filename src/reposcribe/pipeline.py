"""Analysis pipeline orchestrator.

Runs every deterministic analyzer over the branch tree before the single
completion request, then extracts and stores the summary.
"""

import asyncio
import logging

from reposcribe.analyzers import (
    BranchLanguageAnalyzer,
    PathClassifier,
    ProjectStructureAnalyzer,
    TechStackDetector,
    classify_file_type,
    select_important_files,
)
from reposcribe.config import ReposcribeConfig
from reposcribe.errors import ConfigurationError, ReposcribeError
from reposcribe.extraction import SectionExtractor
from reposcribe.llm.client import LLMClient, create_client
from reposcribe.llm.composer import ComposerInputs, SummaryComposer
from reposcribe.models.analysis import (
    AnalysisError,
    AnalysisOutcome,
    AnalysisStatus,
    PerformanceMetrics,
)
from reposcribe.models.repository import RepositoryRef, TreeEntry
from reposcribe.store import RepositoryRegistry, SummaryStore, create_sink
from reposcribe.utils.logging import configure_from_config
from reposcribe.vcs import BatchedContentFetcher, BranchFallbackPolicy, FallbackContentSource
from reposcribe.vcs.base import VCSContentSource

logger = logging.getLogger(__name__)

PULL_REQUEST_STATE = "all"


class AnalysisPipeline:
    """Orchestrates one repository-branch analysis.

    The pipeline sequence:
    1. Tree listing (with branch fallback)
    2. README, commits and pull requests
    3. Branch language statistics
    4. Important and source file selection, batched content fetch
    5. Tech stack detection and structure analysis
    6. Single completion request
    7. Section extraction and metrics
    8. Idempotent upsert

    Collaborator failures end the run with a FAILED outcome carrying the
    first fatal error; nothing is stored for a failed run.
    """

    def __init__(
        self,
        config: ReposcribeConfig,
        source: VCSContentSource,
        client: LLMClient,
        store: SummaryStore,
    ) -> None:
        """Initialize the analysis pipeline.

        Args:
            config: Reposcribe configuration
            source: VCS content source (wrapped with branch fallback)
            client: Completion client
            store: Summary store
        """
        self.config = config
        self._policy = BranchFallbackPolicy(
            default_branch=config.analysis.default_branch,
            alternate_branch=config.analysis.alternate_branch,
        )
        self._raw_source = source
        self._source = FallbackContentSource(source, self._policy)
        self._store = store

        self._classifier = PathClassifier()
        self._fetcher = BatchedContentFetcher(
            self._source,
            batch_size=config.fetch.batch_size,
            batch_delay=config.fetch.batch_delay,
            max_file_size=config.fetch.max_file_size,
            max_files=config.fetch.max_files,
        )
        self._detector = TechStackDetector()
        self._structure_analyzer = ProjectStructureAnalyzer(self._classifier)
        self._language_analyzer = BranchLanguageAnalyzer(self._classifier)
        self._composer = SummaryComposer(
            client,
            max_tokens=config.llm.max_tokens,
            commit_limit=config.analysis.commit_limit,
            pr_limit=config.analysis.pr_limit,
            readme_chars=config.analysis.readme_chars,
            source_file_limit=config.analysis.source_file_limit,
            source_excerpt_chars=config.analysis.source_excerpt_chars,
        )
        self._extractor = SectionExtractor()

    @classmethod
    def from_config(
        cls,
        config: ReposcribeConfig,
        source: VCSContentSource,
        registry: RepositoryRegistry,
        client: LLMClient | None = None,
    ) -> "AnalysisPipeline":
        """Build a pipeline from configuration.

        Applies the logging settings, then builds the completion client
        (unless one is given) and the summary store sink.

        Raises:
            ConfigurationError: If completions are disabled and no client is given
        """
        configure_from_config(config.logging.mode, config.logging.level)
        if client is None:
            if not config.llm.enabled:
                raise ConfigurationError("Completions are disabled; pass a client explicitly")
            client = create_client(config.llm)
        store = SummaryStore(create_sink(config.store), registry)
        return cls(config, source, client, store)

    async def run(self, ref: RepositoryRef) -> AnalysisOutcome:
        """Analyze a repository branch and store its summary.

        Args:
            ref: Repository branch to analyze

        Returns:
            AnalysisOutcome; COMPLETED with a summary id, or FAILED with
            the first fatal error
        """
        outcome = AnalysisOutcome(ref=ref, status=AnalysisStatus.RUNNING)
        logger.info("Starting analysis pipeline for %s", ref)

        try:
            await self._run(ref, outcome)
            outcome.status = AnalysisStatus.COMPLETED
        except Exception as e:
            logger.error("Pipeline failed for %s: %s", ref, e)
            outcome.status = AnalysisStatus.FAILED
            outcome.summary_id = None
            outcome.draft = None
            outcome.add_error(_fatal_error(e, ref))

        logger.info(
            "Analysis complete: %s (%d errors)",
            outcome.status.value,
            len(outcome.errors),
        )
        return outcome

    async def _run(self, ref: RepositoryRef, outcome: AnalysisOutcome) -> None:
        # Stage 1: Tree listing; later reads use the branch that answered
        read_ref, tree = await self._load_tree(ref)
        file_paths = [entry.path for entry in tree if entry.is_file]
        logger.info("Stage 1: %d files in %s", len(file_paths), read_ref)

        # Stage 2: History and README
        readme = await self._source.get_readme(read_ref)
        commits = await self._source.get_commits(read_ref, self.config.analysis.commit_limit)
        pull_requests = await self._source.get_pull_requests(
            PULL_REQUEST_STATE, self.config.analysis.pr_limit
        )
        logger.info(
            "Stage 2: %d commits, %d pull requests", len(commits), len(pull_requests)
        )

        # Stage 3: Branch languages
        languages = self._language_analyzer.analyze(tree)

        # Stage 4: Important files and contents
        important = select_important_files(
            file_paths, limit=self.config.analysis.important_file_limit
        )
        source_paths = self._source_paths(tree, exclude=set(important))
        contents = await self._fetcher.fetch(important + source_paths, read_ref)
        important_contents = {path: contents[path] for path in important if path in contents}
        source_contents = {path: contents[path] for path in source_paths if path in contents}
        logger.info(
            "Stage 4: %d of %d important files, %d of %d source files fetched",
            len(important_contents),
            len(important),
            len(source_contents),
            len(source_paths),
        )

        # Stage 5: Deterministic analysis
        tech_stack = self._detector.detect(important_contents)
        structure = self._structure_analyzer.analyze(tree, tech_stack)
        logger.info("Stage 5: project type %s", structure.project_type.value)

        # Stage 6: Completion (blocking client call runs off the event loop)
        inputs = ComposerInputs(
            ref=read_ref,
            readme=readme,
            commits=commits,
            pull_requests=pull_requests,
            tech_stack=tech_stack,
            structure=structure,
            languages=languages,
            important_files=important_contents,
            source_files=source_contents,
        )
        raw_text = await asyncio.to_thread(self._composer.generate, inputs)

        # Stage 7: Extraction and metrics
        draft = self._extractor.extract(raw_text, tech_stack)
        metrics = PerformanceMetrics.from_run(
            commits_analyzed=min(len(commits), self._composer.commit_limit),
            prs_analyzed=min(len(pull_requests), self._composer.pr_limit),
            files_analyzed=len(important_contents) + len(source_contents),
            languages=languages,
        )

        # Stage 8: Persist under the requested branch
        outcome.summary_id = self._store.upsert(ref, draft, metrics)
        outcome.draft = draft

    async def _load_tree(self, ref: RepositoryRef) -> tuple[RepositoryRef, list[TreeEntry]]:
        async def fetch(target: RepositoryRef) -> tuple[RepositoryRef, list[TreeEntry]]:
            return target, await self._raw_source.get_tree(target)

        return await self._policy.call(fetch, ref)

    def _source_paths(self, tree: list[TreeEntry], exclude: set[str]) -> list[str]:
        max_size = self.config.fetch.max_file_size
        paths = sorted(
            entry.path
            for entry in tree
            if entry.is_file
            and entry.path not in exclude
            and entry.size <= max_size
            and self._classifier.should_analyze(entry.path)
            and classify_file_type(entry.path) == "source"
        )
        return paths[: self.config.analysis.source_file_limit]


def _fatal_error(error: Exception, ref: RepositoryRef) -> AnalysisError:
    """Convert a run-ending exception into a non-recoverable AnalysisError."""
    context = {"ref": str(ref)}
    path = getattr(error, "path", None)
    if path:
        context["path"] = str(path)
    repository_id = getattr(error, "repository_id", None)
    if repository_id:
        context["repository_id"] = str(repository_id)

    component = error.component if isinstance(error, ReposcribeError) else "pipeline"
    return AnalysisError(
        component=component,
        message=str(error),
        context=context,
        recoverable=False,
    )
