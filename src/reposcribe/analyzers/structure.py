"""Project structure analysis and project-type classification.

Summarizes folder and file composition of a branch tree and classifies the
project's architectural shape from boolean structure indicators. The
classification is a pure decision table evaluated in order; the first
matching rule wins:

1. frontend and backend      -> Full-stack application
2. frontend only             -> Frontend SPA (build-tool config) / Frontend application
3. backend only              -> Node.js / Python / Go backend API by marker file
4. neither                   -> Library/Utility
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from reposcribe.analyzers.languages import language_for_path
from reposcribe.analyzers.paths import PathClassifier
from reposcribe.models.analysis import (
    ProjectStructureProfile,
    ProjectType,
    TechStackProfile,
)
from reposcribe.models.repository import TreeEntry

logger = logging.getLogger(__name__)

FRONTEND_DIRECTORIES: frozenset[str] = frozenset(
    {"components", "pages", "views", "public", "assets", "styles", "frontend", "client", "web", "ui"}
)
FRONTEND_EXTENSIONS: frozenset[str] = frozenset(
    {"jsx", "tsx", "vue", "svelte", "html", "css", "scss", "sass", "less"}
)

BACKEND_DIRECTORIES: frozenset[str] = frozenset(
    {
        "api",
        "server",
        "backend",
        "routes",
        "controllers",
        "models",
        "services",
        "handlers",
        "middleware",
        "migrations",
    }
)
BACKEND_EXTENSIONS: frozenset[str] = frozenset(
    {"py", "go", "java", "rb", "php", "cs", "rs", "kt", "scala"}
)

# Frontend build-tool config filename prefixes (SPA indicator)
BUILD_TOOL_CONFIGS: tuple[str, ...] = (
    "vite.config.",
    "webpack.config.",
    "angular.json",
    "vue.config.",
    "svelte.config.",
)

DOCUMENTATION_EXTENSIONS: frozenset[str] = frozenset({"md", "mdx", "rst", "txt", "adoc"})
CONFIG_EXTENSIONS: frozenset[str] = frozenset(
    {"json", "yaml", "yml", "toml", "ini", "cfg", "conf", "env", "xml", "properties"}
)
CONFIG_FILENAMES: frozenset[str] = frozenset(
    {"dockerfile", "makefile", "jenkinsfile", ".env", ".gitignore", ".editorconfig", "procfile"}
)
TEST_DIRECTORIES: frozenset[str] = frozenset({"test", "tests", "__tests__", "spec", "specs"})


@dataclass(frozen=True)
class StructureIndicators:
    """Boolean indicators the project type is derived from.

    Attributes:
        has_frontend_signal: Frontend directories, extensions or frameworks
        has_backend_signal: Backend directories, extensions or frameworks
        has_build_tool_config: Frontend build tool config present
        has_node_manifest: package.json present
        has_python_requirements: requirements file (or pyproject/Pipfile) present
        has_go_module: go.mod present
    """

    has_frontend_signal: bool = False
    has_backend_signal: bool = False
    has_build_tool_config: bool = False
    has_node_manifest: bool = False
    has_python_requirements: bool = False
    has_go_module: bool = False


def derive_project_type(indicators: StructureIndicators) -> ProjectType:
    """Derive the project type from structure indicators.

    Rules are evaluated in order and later rules never override an
    earlier match.
    """
    frontend = indicators.has_frontend_signal
    backend = indicators.has_backend_signal

    if frontend and backend:
        return ProjectType.FULL_STACK
    if frontend:
        if indicators.has_build_tool_config:
            return ProjectType.FRONTEND_SPA
        return ProjectType.FRONTEND
    if backend:
        if indicators.has_node_manifest:
            return ProjectType.NODE_API
        if indicators.has_python_requirements:
            return ProjectType.PYTHON_API
        if indicators.has_go_module:
            return ProjectType.GO_API
        return ProjectType.BACKEND_API
    return ProjectType.LIBRARY


def _extension(name: str) -> str:
    if "." not in name.strip("."):
        return ""
    return name.rsplit(".", 1)[-1].lower()


def classify_file_type(path: str) -> str:
    """Classify a file as source, config, documentation, test or other."""
    posix = PurePosixPath(path)
    name = posix.name.lower()
    directories = {part.lower() for part in posix.parts[:-1]}
    extension = _extension(name)

    if (
        directories & TEST_DIRECTORIES
        or ".test." in name
        or ".spec." in name
        or name.startswith("test_")
        or name.endswith("_test.go")
    ):
        return "test"
    if extension in DOCUMENTATION_EXTENSIONS or "docs" in directories:
        return "documentation"
    if extension in CONFIG_EXTENSIONS or name in CONFIG_FILENAMES:
        return "config"
    if language_for_path(path) is not None:
        return "source"
    return "other"


class ProjectStructureAnalyzer:
    """Summarizes folder/file composition and classifies the project."""

    def __init__(self, classifier: PathClassifier | None = None) -> None:
        self._classifier = classifier or PathClassifier()

    def collect_indicators(
        self,
        paths: list[str],
        tech_stack: TechStackProfile | None = None,
    ) -> StructureIndicators:
        """Compute structure indicators for a list of file paths."""
        frontend = bool(tech_stack and tech_stack.frontend)
        backend = bool(tech_stack and tech_stack.backend)
        build_tool = node = python = go = False

        for path in paths:
            posix = PurePosixPath(path)
            name = posix.name.lower()
            directories = {part.lower() for part in posix.parts[:-1]}
            extension = _extension(name)

            if directories & FRONTEND_DIRECTORIES or extension in FRONTEND_EXTENSIONS:
                frontend = True
            if directories & BACKEND_DIRECTORIES or extension in BACKEND_EXTENSIONS:
                backend = True
            if name.startswith(BUILD_TOOL_CONFIGS):
                build_tool = True
            if name == "package.json":
                node = True
            elif (name.startswith("requirements") and name.endswith(".txt")) or name in (
                "pyproject.toml",
                "pipfile",
            ):
                python = True
            elif name == "go.mod":
                go = True

        return StructureIndicators(
            has_frontend_signal=frontend,
            has_backend_signal=backend,
            has_build_tool_config=build_tool,
            has_node_manifest=node,
            has_python_requirements=python,
            has_go_module=go,
        )

    def analyze(
        self,
        entries: list[TreeEntry],
        tech_stack: TechStackProfile | None = None,
    ) -> ProjectStructureProfile:
        """Analyze a branch tree.

        Args:
            entries: Full tree listing
            tech_stack: Detected technologies (extra frontend/backend signals)

        Returns:
            ProjectStructureProfile with derived project type
        """
        paths = [
            entry.path
            for entry in entries
            if entry.is_file and not self._classifier.in_excluded_directory(entry.path)
        ]

        folder_counts: dict[str, int] = {}
        extension_counts: dict[str, int] = {}
        file_type_counts = {"source": 0, "config": 0, "documentation": 0, "test": 0, "other": 0}

        for path in paths:
            parts = PurePosixPath(path).parts
            if len(parts) > 1:
                folder_counts[parts[0]] = folder_counts.get(parts[0], 0) + 1
            extension = _extension(parts[-1]) or "(none)"
            extension_counts[extension] = extension_counts.get(extension, 0) + 1
            file_type_counts[classify_file_type(path)] += 1

        top_level_folders = [
            folder for folder, _ in sorted(folder_counts.items(), key=lambda item: (-item[1], item[0]))
        ]

        indicators = self.collect_indicators(paths, tech_stack)
        project_type = derive_project_type(indicators)

        if project_type in (ProjectType.LIBRARY, ProjectType.BACKEND_API):
            logger.info(
                "Project type '%s' derived from weak signals (low confidence)",
                project_type.value,
            )
        else:
            logger.debug("Project type: %s (%s)", project_type.value, indicators)

        return ProjectStructureProfile(
            top_level_folders=top_level_folders,
            file_type_counts=file_type_counts,
            project_type=project_type,
            folder_counts=folder_counts,
            extension_counts=extension_counts,
        )
