"""Shared pytest fixtures for Reposcribe tests.

This module provides common fixtures used across unit and integration
tests. Fixtures are organized by category:
- VCS fixtures: In-memory content source with failure injection
- Store fixtures: In-memory sink and registry
- Analysis fixtures: Pre-built analysis results for composer/renderer tests
"""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pytest

from reposcribe.errors import RefNotFoundError, VCSError
from reposcribe.models import (
    Commit,
    EntryKind,
    PerformanceMetrics,
    PersistedSummary,
    PullRequest,
    RepositoryRef,
    ResumeBullet,
    SummaryDraft,
    TechStackProfile,
    TreeEntry,
)
from reposcribe.store import InMemoryRepositoryRegistry, InMemorySink, SummaryStore

# =============================================================================
# Fake VCS Source
# =============================================================================


class FakeContentSource:
    """In-memory VCSContentSource.

    Attributes:
        files: Path to raw bytes for every branch that exists
        missing_branches: Branches that raise RefNotFoundError
        failing_paths: Paths whose content fetch raises VCSError
        calls: Log of (method, branch) tuples in call order
        max_in_flight: Highest number of concurrent file fetches observed
    """

    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        missing_branches: set[str] | None = None,
        failing_paths: set[str] | None = None,
        readme: str = "",
        commits: list[Commit] | None = None,
        pull_requests: list[PullRequest] | None = None,
        fetch_delay: float = 0.0,
    ) -> None:
        self.files = files or {}
        self.missing_branches = missing_branches or set()
        self.failing_paths = failing_paths or set()
        self.readme = readme
        self.commits = commits or []
        self.pull_requests = pull_requests or []
        self.fetch_delay = fetch_delay
        self.calls: list[tuple[str, str]] = []
        self.fetched_paths: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _check_ref(self, method: str, ref: RepositoryRef) -> None:
        self.calls.append((method, ref.branch))
        if ref.branch in self.missing_branches:
            raise RefNotFoundError("Branch not found", ref=ref)

    async def get_tree(self, ref: RepositoryRef) -> list[TreeEntry]:
        self._check_ref("get_tree", ref)
        return [
            TreeEntry(path=path, kind=EntryKind.FILE, size=len(data))
            for path, data in self.files.items()
        ]

    async def get_file_content(self, path: str, ref: RepositoryRef) -> bytes | None:
        self._check_ref("get_file_content", ref)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.fetch_delay)
            self.fetched_paths.append(path)
            if path in self.failing_paths:
                raise VCSError("Server error", ref=ref, path=path)
            return self.files.get(path)
        finally:
            self.in_flight -= 1

    async def get_readme(self, ref: RepositoryRef) -> str:
        self._check_ref("get_readme", ref)
        return self.readme

    async def get_commits(self, ref: RepositoryRef, limit: int) -> list[Commit]:
        self._check_ref("get_commits", ref)
        return self.commits[:limit]

    async def get_pull_requests(self, state: str, limit: int) -> list[PullRequest]:
        self.calls.append(("get_pull_requests", state))
        return self.pull_requests[:limit]


# =============================================================================
# VCS Fixtures
# =============================================================================


@pytest.fixture
def repo_ref() -> RepositoryRef:
    """Return a ref on the default branch."""
    return RepositoryRef(owner="octo", name="shop", branch="main")


@pytest.fixture
def sample_files() -> dict[str, bytes]:
    """Return a small full-stack repository tree."""
    return {
        "package.json": b'{"dependencies": {"react": "^18.0.0", "express": "^4.18.0"},'
        b' "devDependencies": {"jest": "^29.0.0", "typescript": "^5.0.0"}}',
        "Dockerfile": b"FROM node:20-alpine\nRUN npm ci\n",
        "src/components/App.tsx": b"export const App = () => null;\n",
        "src/components/Cart.tsx": b"export const Cart = () => null;\n",
        "server/routes/orders.js": b"module.exports = {};\n",
        "README.md": b"# Shop\n",
        "node_modules/react/index.js": b"module.exports = {};\n",
        "public/logo.png": b"\x89PNG\r\n",
    }


@pytest.fixture
def fake_source(sample_files: dict[str, bytes]) -> FakeContentSource:
    """Return a fake content source over the sample tree."""
    return FakeContentSource(
        files=sample_files,
        readme="# Shop\nAn online shop.",
        commits=[
            Commit(sha="c3", message="Refactor cart state\n\nMove to reducer"),
            Commit(sha="c2", message="Add order API"),
            Commit(sha="c1", message="Initial commit"),
        ],
        pull_requests=[
            PullRequest(number=7, title="Cart reducer", body="Replaces ad-hoc state."),
        ],
    )


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def registry() -> InMemoryRepositoryRegistry:
    """Return a registry that knows octo/shop."""
    return InMemoryRepositoryRegistry(["octo/shop"])


@pytest.fixture
def sink() -> InMemorySink:
    """Return an empty in-memory sink."""
    return InMemorySink()


@pytest.fixture
def summary_store(sink: InMemorySink, registry: InMemoryRepositoryRegistry) -> SummaryStore:
    """Return a summary store over the in-memory sink and registry."""
    return SummaryStore(sink, registry)


# =============================================================================
# Analysis Fixtures
# =============================================================================


@pytest.fixture
def sample_draft() -> SummaryDraft:
    """Return a fully populated summary draft."""
    return SummaryDraft(
        project_intro="An online shop with a React storefront.",
        tech_stack=TechStackProfile(
            frontend={"React"},
            backend={"Express.js"},
            testing={"Jest"},
            detected={"Node.js", "TypeScript"},
        ),
        architecture_notes="Client and server live in one repository.",
        refactoring_history="Cart state moved to a reducer.",
        collaboration_flow="Changes land through reviewed pull requests.",
        resume_bullets=[
            ResumeBullet(title="Checkout", content="Built the checkout flow."),
            ResumeBullet(title="Testing", content="Added Jest coverage."),
        ],
        performance_metrics=PerformanceMetrics(
            commits_analyzed=3,
            prs_analyzed=1,
            files_analyzed=2,
            branch_total_files=6,
            branch_languages=3,
            top_languages=[{"language": "TypeScript", "file_count": 2, "percentage": 33}],
        ),
    )


@pytest.fixture
def sample_summary(sample_draft: SummaryDraft) -> PersistedSummary:
    """Return a persisted summary around the sample draft."""
    return PersistedSummary(
        summary_id="sum-1",
        repository_id="octo/shop",
        branch_name="main",
        draft=sample_draft,
        created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
        updated_at=datetime(2026, 1, 3, 3, 4, 5, tzinfo=UTC),
    )


# =============================================================================
# Completion Fixtures
# =============================================================================

WELL_FORMED_RESPONSE = """## 1. Project Introduction
An online shop with a React storefront and an Express API.

## 2. Tech Stack
React, Express.js, Jest

## 3. Architecture
The client lives in src/components and the API in server/routes.

## 4. Refactoring History
Cart state was moved into a reducer.

## 5. Collaboration Flow
Work lands through small reviewed pull requests.

## 6. Resume Bullets
Achievement 1: Checkout flow
Built the end-to-end checkout flow.
Achievement 2: Order API
Designed the order API used by the storefront.
"""


@pytest.fixture
def well_formed_response() -> str:
    """Return a completion response with all six headings."""
    return WELL_FORMED_RESPONSE


@pytest.fixture
def config_yaml(tmp_path: Path) -> Path:
    """Write a complete config file and return its path."""
    path = tmp_path / "reposcribe.yaml"
    path.write_text(
        """
llm:
  provider: ollama
  model: llama3.2
fetch:
  batch_size: 5
  batch_delay: 0
analysis:
  commit_limit: 5
store:
  backend: json
  path: summaries.json
logging:
  mode: json
  level: debug
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def source_factory() -> type[FakeContentSource]:
    """Return the fake content source class for custom trees."""
    return FakeContentSource
