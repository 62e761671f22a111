"""Reposcribe analyzers - deterministic repository analysis.

This module contains all deterministic analyzers that run BEFORE the
completion service is invoked (Deterministic-First).

Analyzers:
- PathClassifier: Excludes vendor/build/binary/lock paths
- TechStackDetector: Categorized technologies from config files
- ProjectStructureAnalyzer: Folder composition and project type
- BranchLanguageAnalyzer: Per-branch language distribution
"""

from reposcribe.analyzers.languages import BranchLanguageAnalyzer, language_for_path
from reposcribe.analyzers.paths import PathClassifier, is_analyzable
from reposcribe.analyzers.structure import (
    ProjectStructureAnalyzer,
    StructureIndicators,
    classify_file_type,
    derive_project_type,
)
from reposcribe.analyzers.tech_stack import TechStackDetector, select_important_files

__all__ = [
    "BranchLanguageAnalyzer",
    "PathClassifier",
    "ProjectStructureAnalyzer",
    "StructureIndicators",
    "TechStackDetector",
    "classify_file_type",
    "derive_project_type",
    "is_analyzable",
    "language_for_path",
    "select_important_files",
]
