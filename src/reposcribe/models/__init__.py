"""Reposcribe data models.

This module exports all core entities used throughout the application:
- RepositoryRef: Owner/name/branch identity of an analysis
- TreeEntry: Single entry of a branch tree
- TechStackProfile: Categorized detected technologies
- SummaryDraft: Typed summary extracted from model output
- PersistedSummary: Stored summary keyed by repository and branch
- AnalysisOutcome: Result of a pipeline run
"""

from reposcribe.models.analysis import (
    AnalysisError,
    AnalysisOutcome,
    AnalysisStatus,
    Detection,
    LanguageShare,
    LanguageStats,
    PerformanceMetrics,
    PersistedSummary,
    ProjectStructureProfile,
    ProjectType,
    ResumeBullet,
    SummaryDraft,
    SummaryField,
    TechStackProfile,
)
from reposcribe.models.repository import (
    Commit,
    EntryKind,
    PullRequest,
    RepositoryRef,
    TreeEntry,
)

__all__ = [
    "AnalysisError",
    "AnalysisOutcome",
    "AnalysisStatus",
    "Commit",
    "Detection",
    "EntryKind",
    "LanguageShare",
    "LanguageStats",
    "PerformanceMetrics",
    "PersistedSummary",
    "ProjectStructureProfile",
    "ProjectType",
    "PullRequest",
    "RepositoryRef",
    "ResumeBullet",
    "SummaryDraft",
    "SummaryField",
    "TechStackProfile",
    "TreeEntry",
]
