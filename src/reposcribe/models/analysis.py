"""Analysis result entities.

This module contains entities related to analysis results:
- Detection: One (category, technology) finding from a rule table
- TechStackProfile: Categorized set of detected technologies
- ProjectStructureProfile: Folder/file composition and project type
- LanguageStats: Per-branch language distribution
- PerformanceMetrics: Counts describing what an analysis looked at
- SummaryDraft: Typed summary produced from model output
- PersistedSummary: Stored summary keyed by (repository, branch)
- AnalysisError / AnalysisOutcome: Result of a pipeline run
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from reposcribe.models.repository import RepositoryRef

# Category names of a TechStackProfile, in display order
TECH_CATEGORIES: tuple[str, ...] = ("frontend", "backend", "database", "devops", "testing")


class AnalysisStatus(Enum):
    """Status of an analysis operation."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ProjectType(Enum):
    """Architectural shape of a project, derived from structure signals."""

    FULL_STACK = "Full-stack application"
    FRONTEND = "Frontend application"
    FRONTEND_SPA = "Frontend SPA"
    NODE_API = "Node.js backend API"
    PYTHON_API = "Python backend API"
    GO_API = "Go backend API"
    BACKEND_API = "Backend API"
    LIBRARY = "Library/Utility"


class SummaryField(Enum):
    """Target fields of a summary, in response heading order."""

    PROJECT_INTRO = "project_intro"
    TECH_STACK = "tech_stack"
    ARCHITECTURE = "architecture_notes"
    REFACTORING = "refactoring_history"
    COLLABORATION = "collaboration_flow"
    RESUME_BULLETS = "resume_bullets"

    @property
    def title(self) -> str:
        """Human-readable section title."""
        return _FIELD_TITLES[self]


_FIELD_TITLES = {
    SummaryField.PROJECT_INTRO: "Project Introduction",
    SummaryField.TECH_STACK: "Tech Stack",
    SummaryField.ARCHITECTURE: "Architecture",
    SummaryField.REFACTORING: "Refactoring History",
    SummaryField.COLLABORATION: "Collaboration Flow",
    SummaryField.RESUME_BULLETS: "Resume Bullets",
}


@dataclass
class AnalysisError:
    """Error encountered during analysis.

    Attributes:
        component: Component that failed (vcs, composer, store, fetcher, ...)
        message: Error description
        context: Diagnostic context (ref, path, field, repository id)
        recoverable: Whether analysis continued after this error
    """

    component: str
    message: str
    context: dict[str, str] = field(default_factory=dict)
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "message": self.message,
            "context": dict(self.context),
            "recoverable": self.recoverable,
        }


@dataclass(frozen=True)
class Detection:
    """Single technology finding.

    Attributes:
        category: One of TECH_CATEGORIES, or None for detected-only entries
            (languages, package managers)
        name: Display name of the technology (e.g., "Express.js")
    """

    category: str | None
    name: str

    def __post_init__(self) -> None:
        """Validate category."""
        if self.category is not None and self.category not in TECH_CATEGORIES:
            raise ValueError(
                f"Invalid tech category '{self.category}'. "
                f"Must be one of: {list(TECH_CATEGORIES)}"
            )


@dataclass
class TechStackProfile:
    """Categorized set of detected technologies.

    Invariant: every entry in a category also appears in ``detected``.
    The invariant is enforced on construction, so profiles built by merging
    or from legacy dictionaries are always consistent.

    Attributes:
        frontend: Frontend frameworks and libraries
        backend: Backend frameworks
        database: Databases and ORMs
        devops: Containers, CI/CD, hosting
        testing: Test frameworks
        detected: Superset of all detected technologies
        other: Free-text note (model-written tech stack when overridden)
    """

    frontend: set[str] = field(default_factory=set)
    backend: set[str] = field(default_factory=set)
    database: set[str] = field(default_factory=set)
    devops: set[str] = field(default_factory=set)
    testing: set[str] = field(default_factory=set)
    detected: set[str] = field(default_factory=set)
    other: str = ""

    def __post_init__(self) -> None:
        """Normalize fields to sets and enforce the detected superset."""
        for category in TECH_CATEGORIES:
            setattr(self, category, set(getattr(self, category)))
        self.detected = set(self.detected)
        for category in TECH_CATEGORIES:
            self.detected |= getattr(self, category)

    @classmethod
    def from_detections(
        cls,
        detections: list[Detection],
        other: str = "",
    ) -> "TechStackProfile":
        """Build a profile from rule-table detections."""
        buckets: dict[str, set[str]] = {category: set() for category in TECH_CATEGORIES}
        detected: set[str] = set()
        for detection in detections:
            detected.add(detection.name)
            if detection.category is not None:
                buckets[detection.category].add(detection.name)
        return cls(detected=detected, other=other, **buckets)

    def merge(self, other: "TechStackProfile") -> "TechStackProfile":
        """Return a new profile containing entries of both profiles."""
        notes = [note for note in (self.other, other.other) if note]
        return TechStackProfile(
            frontend=self.frontend | other.frontend,
            backend=self.backend | other.backend,
            database=self.database | other.database,
            devops=self.devops | other.devops,
            testing=self.testing | other.testing,
            detected=self.detected | other.detected,
            other="\n".join(notes),
        )

    def with_note(self, note: str) -> "TechStackProfile":
        """Return a copy of this profile carrying a free-text note."""
        return TechStackProfile(
            frontend=self.frontend,
            backend=self.backend,
            database=self.database,
            devops=self.devops,
            testing=self.testing,
            detected=self.detected,
            other=note,
        )

    @property
    def is_empty(self) -> bool:
        """Return True if no technology was detected."""
        return not self.detected

    def finalize(self) -> dict[str, list[str]]:
        """Return deduplicated, sorted category lists including ``detected``."""
        result = {category: sorted(getattr(self, category)) for category in TECH_CATEGORIES}
        result["detected"] = sorted(self.detected)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = dict(self.finalize())
        data["other"] = self.other
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TechStackProfile":
        """Create a profile from a dictionary.

        Accepts both the current shape and the older category-only shape
        (no ``detected`` key); ``detected`` is rebuilt from categories.
        """
        return cls(
            frontend=set(data.get("frontend") or []),
            backend=set(data.get("backend") or []),
            database=set(data.get("database") or []),
            devops=set(data.get("devops") or []),
            testing=set(data.get("testing") or []),
            detected=set(data.get("detected") or []),
            other=str(data.get("other") or ""),
        )


@dataclass
class ProjectStructureProfile:
    """Folder/file composition of a repository.

    ``project_type`` is derived from structure indicators by
    ``reposcribe.analyzers.structure.derive_project_type``; it is never
    assigned from outside the analyzer.

    Attributes:
        top_level_folders: Top-level folders, most populated first
        file_type_counts: Counts for source, config, documentation, test, other
        project_type: Derived architectural shape
        folder_counts: File counts per top-level folder
        extension_counts: File counts per extension
    """

    top_level_folders: list[str] = field(default_factory=list)
    file_type_counts: dict[str, int] = field(
        default_factory=lambda: {
            "source": 0,
            "config": 0,
            "documentation": 0,
            "test": 0,
            "other": 0,
        }
    )
    project_type: ProjectType = ProjectType.LIBRARY
    folder_counts: dict[str, int] = field(default_factory=dict)
    extension_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "top_level_folders": list(self.top_level_folders),
            "file_type_counts": dict(self.file_type_counts),
            "project_type": self.project_type.value,
        }


@dataclass
class LanguageShare:
    """File count and rounded percentage of one language."""

    count: int
    percentage: int


@dataclass
class LanguageStats:
    """Per-branch language distribution.

    Percentages are rounded integers and are not corrected to sum to 100.

    Attributes:
        languages: Language name to share
        total_files: Number of files considered (including unmapped ones)
    """

    languages: dict[str, LanguageShare] = field(default_factory=dict)
    total_files: int = 0

    def top(self, n: int = 5) -> list[tuple[str, LanguageShare]]:
        """Return the n most frequent languages (ties broken by name)."""
        ranked = sorted(self.languages.items(), key=lambda item: (-item[1].count, item[0]))
        return ranked[:n]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "languages": {
                name: {"count": share.count, "percentage": share.percentage}
                for name, share in self.languages.items()
            },
            "total_files": self.total_files,
        }


@dataclass
class PerformanceMetrics:
    """Counts describing the scope of an analysis run.

    Attributes:
        commits_analyzed: Commits included in the prompt
        prs_analyzed: Pull requests included in the prompt
        files_analyzed: Important files whose contents were used
        branch_total_files: Files in the branch tree
        branch_languages: Distinct languages in the branch
        top_languages: Up to five {language, file_count, percentage} entries
    """

    commits_analyzed: int = 0
    prs_analyzed: int = 0
    files_analyzed: int = 0
    branch_total_files: int = 0
    branch_languages: int = 0
    top_languages: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_run(
        cls,
        commits_analyzed: int,
        prs_analyzed: int,
        files_analyzed: int,
        languages: LanguageStats,
    ) -> "PerformanceMetrics":
        """Build metrics from run counts and branch language statistics."""
        return cls(
            commits_analyzed=commits_analyzed,
            prs_analyzed=prs_analyzed,
            files_analyzed=files_analyzed,
            branch_total_files=languages.total_files,
            branch_languages=len(languages.languages),
            top_languages=[
                {
                    "language": name,
                    "file_count": share.count,
                    "percentage": share.percentage,
                }
                for name, share in languages.top(5)
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "commits_analyzed": self.commits_analyzed,
            "prs_analyzed": self.prs_analyzed,
            "files_analyzed": self.files_analyzed,
            "branch_total_files": self.branch_total_files,
            "branch_languages": self.branch_languages,
            "top_languages": [dict(entry) for entry in self.top_languages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceMetrics":
        """Create metrics from a dictionary."""
        return cls(
            commits_analyzed=int(data.get("commits_analyzed", 0)),
            prs_analyzed=int(data.get("prs_analyzed", 0)),
            files_analyzed=int(data.get("files_analyzed", 0)),
            branch_total_files=int(data.get("branch_total_files", 0)),
            branch_languages=int(data.get("branch_languages", 0)),
            top_languages=list(data.get("top_languages") or []),
        )


@dataclass
class ResumeBullet:
    """Resume-ready achievement."""

    title: str
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"title": self.title, "content": self.content}


@dataclass
class SummaryDraft:
    """Typed summary built from a completion response.

    Created empty and filled field by field by the section extractor.
    A draft is either persisted whole or discarded.

    Attributes:
        project_intro: What the project is and what problem it solves
        tech_stack: Technology profile (deterministic when detected)
        architecture_notes: Architecture description
        refactoring_history: Notable refactorings from commits/PRs
        collaboration_flow: Collaboration patterns from PRs
        resume_bullets: Resume-ready achievements
        performance_metrics: Scope of the analysis
    """

    project_intro: str = ""
    tech_stack: TechStackProfile = field(default_factory=TechStackProfile)
    architecture_notes: str = ""
    refactoring_history: str = ""
    collaboration_flow: str = ""
    resume_bullets: list[ResumeBullet] = field(default_factory=list)
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    def has_content(self) -> bool:
        """Return True if at least one text field or bullet is populated."""
        texts = (
            self.project_intro,
            self.architecture_notes,
            self.refactoring_history,
            self.collaboration_flow,
        )
        return any(text.strip() for text in texts) or bool(self.resume_bullets)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "project_intro": self.project_intro,
            "tech_stack": self.tech_stack.to_dict(),
            "architecture_notes": self.architecture_notes,
            "refactoring_history": self.refactoring_history,
            "collaboration_flow": self.collaboration_flow,
            "resume_bullets": [bullet.to_dict() for bullet in self.resume_bullets],
            "performance_metrics": self.performance_metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummaryDraft":
        """Create a draft from a dictionary."""
        return cls(
            project_intro=str(data.get("project_intro", "")),
            tech_stack=TechStackProfile.from_dict(data.get("tech_stack") or {}),
            architecture_notes=str(data.get("architecture_notes", "")),
            refactoring_history=str(data.get("refactoring_history", "")),
            collaboration_flow=str(data.get("collaboration_flow", "")),
            resume_bullets=[
                ResumeBullet(title=str(item.get("title", "")), content=str(item.get("content", "")))
                for item in data.get("resume_bullets") or []
            ],
            performance_metrics=PerformanceMetrics.from_dict(
                data.get("performance_metrics") or {}
            ),
        )


@dataclass
class PersistedSummary:
    """Stored summary, unique per (repository_id, branch_name).

    Attributes:
        summary_id: Stable identifier, kept across overwrites
        repository_id: Registry identifier ("owner/name")
        branch_name: Analyzed branch
        draft: Summary content
        created_at: First write timestamp (UTC)
        updated_at: Latest write timestamp (UTC)
    """

    summary_id: str
    repository_id: str
    branch_name: str
    draft: SummaryDraft
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Ensure timestamps are timezone-aware UTC."""
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=UTC)
        if self.updated_at.tzinfo is None:
            self.updated_at = self.updated_at.replace(tzinfo=UTC)

    @property
    def key(self) -> tuple[str, str]:
        """Uniqueness key."""
        return (self.repository_id, self.branch_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = self.draft.to_dict()
        data.update(
            {
                "summary_id": self.summary_id,
                "repository_id": self.repository_id,
                "branch_name": self.branch_name,
                "created_at": self.created_at.isoformat(),
                "updated_at": self.updated_at.isoformat(),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PersistedSummary":
        """Create a persisted summary from a dictionary."""
        return cls(
            summary_id=str(data["summary_id"]),
            repository_id=str(data["repository_id"]),
            branch_name=str(data["branch_name"]),
            draft=SummaryDraft.from_dict(data),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass
class AnalysisOutcome:
    """Result of one pipeline run.

    A failed run carries the first fatal cause and never a summary id.

    Attributes:
        ref: Analyzed repository branch
        status: Final status
        summary_id: Identifier of the stored summary (completed runs only)
        draft: Extracted summary (completed runs only)
        errors: Errors recorded during the run
    """

    ref: RepositoryRef
    status: AnalysisStatus = AnalysisStatus.PENDING
    summary_id: str | None = None
    draft: SummaryDraft | None = None
    errors: list[AnalysisError] = field(default_factory=list)

    def add_error(self, error: AnalysisError) -> None:
        """Add an analysis error."""
        self.errors.append(error)

    @property
    def failed(self) -> bool:
        """Return True if the run failed."""
        return self.status == AnalysisStatus.FAILED

    @property
    def first_fatal_error(self) -> AnalysisError | None:
        """First non-recoverable error, if any."""
        return next((e for e in self.errors if not e.recoverable), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "ref": self.ref.to_dict(),
            "status": self.status.value,
            "summary_id": self.summary_id,
            "draft": self.draft.to_dict() if self.draft else None,
            "errors": [e.to_dict() for e in self.errors],
        }
