"""Unit tests for project structure analysis and project-type derivation."""

import pytest

from reposcribe.analyzers.structure import (
    ProjectStructureAnalyzer,
    StructureIndicators,
    classify_file_type,
    derive_project_type,
)
from reposcribe.models.analysis import ProjectType, TechStackProfile
from reposcribe.models.repository import EntryKind, TreeEntry


def _tree(*paths: str) -> list[TreeEntry]:
    return [TreeEntry(path=path) for path in paths]


class TestDeriveProjectType:
    """Tests for the ordered project-type decision table."""

    @pytest.mark.parametrize(
        ("indicators", "expected"),
        [
            (
                StructureIndicators(has_frontend_signal=True, has_backend_signal=True),
                ProjectType.FULL_STACK,
            ),
            (
                StructureIndicators(has_frontend_signal=True, has_build_tool_config=True),
                ProjectType.FRONTEND_SPA,
            ),
            (StructureIndicators(has_frontend_signal=True), ProjectType.FRONTEND),
            (
                StructureIndicators(has_backend_signal=True, has_node_manifest=True),
                ProjectType.NODE_API,
            ),
            (
                StructureIndicators(has_backend_signal=True, has_python_requirements=True),
                ProjectType.PYTHON_API,
            ),
            (
                StructureIndicators(has_backend_signal=True, has_go_module=True),
                ProjectType.GO_API,
            ),
            (StructureIndicators(has_backend_signal=True), ProjectType.BACKEND_API),
            (StructureIndicators(), ProjectType.LIBRARY),
        ],
    )
    def test_decision_table(self, indicators: StructureIndicators, expected: ProjectType) -> None:
        """Test each rule of the decision table."""
        assert derive_project_type(indicators) == expected

    def test_full_stack_wins_over_build_tool(self) -> None:
        """Test an earlier rule is never overridden by a later one."""
        indicators = StructureIndicators(
            has_frontend_signal=True,
            has_backend_signal=True,
            has_build_tool_config=True,
            has_node_manifest=True,
        )

        assert derive_project_type(indicators) == ProjectType.FULL_STACK

    def test_node_manifest_checked_before_python(self) -> None:
        """Test marker-file precedence for backend-only projects."""
        indicators = StructureIndicators(
            has_backend_signal=True,
            has_node_manifest=True,
            has_python_requirements=True,
        )

        assert derive_project_type(indicators) == ProjectType.NODE_API


class TestClassifyFileType:
    """Tests for per-file type classification."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("tests/test_api.py", "test"),
            ("src/cart.test.ts", "test"),
            ("pkg/handler_test.go", "test"),
            ("README.md", "documentation"),
            ("docs/setup.py", "documentation"),
            ("config/app.yaml", "config"),
            ("Dockerfile", "config"),
            ("src/app.py", "source"),
            ("LICENSE", "other"),
        ],
    )
    def test_classification(self, path: str, expected: str) -> None:
        """Test classification precedence: test, documentation, config, source."""
        assert classify_file_type(path) == expected


class TestProjectStructureAnalyzer:
    """Tests for ProjectStructureAnalyzer."""

    def test_full_stack_repository(self) -> None:
        """Test frontend and backend signals yield a full-stack project."""
        tree = _tree(
            "package.json",
            "src/components/App.tsx",
            "server/routes/orders.js",
            "README.md",
        )

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.project_type == ProjectType.FULL_STACK

    def test_python_api(self) -> None:
        """Test a Python service is classified from its requirements file."""
        tree = _tree("requirements.txt", "app/main.py", "app/db.py")

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.project_type == ProjectType.PYTHON_API

    def test_frontend_spa(self) -> None:
        """Test frontend files plus a build tool config yield an SPA."""
        tree = _tree("package.json", "vite.config.ts", "src/App.vue", "index.html")

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.project_type == ProjectType.FRONTEND_SPA

    def test_library(self) -> None:
        """Test a repository without signals is a library."""
        tree = _tree("README.md", "lib/util.c", "Makefile")

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.project_type == ProjectType.LIBRARY

    def test_tech_stack_adds_signals(self) -> None:
        """Test detected frameworks count as structure signals."""
        tree = _tree("package.json", "index.js")
        tech_stack = TechStackProfile(backend={"Express.js"})

        profile = ProjectStructureAnalyzer().analyze(tree, tech_stack)

        assert profile.project_type == ProjectType.NODE_API

    def test_folders_ordered_by_count(self) -> None:
        """Test top-level folders are ordered by file count, then name."""
        tree = _tree("src/a.py", "src/b.py", "docs/x.md", "app/y.py", "setup.py")

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.top_level_folders == ["src", "app", "docs"]
        assert profile.folder_counts == {"src": 2, "docs": 1, "app": 1}

    def test_excluded_directories_and_directories_ignored(self) -> None:
        """Test vendor files and directory entries are not counted."""
        tree = [
            TreeEntry(path="node_modules/react/index.js"),
            TreeEntry(path="src", kind=EntryKind.DIRECTORY),
            TreeEntry(path="src/main.py"),
        ]

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.top_level_folders == ["src"]
        assert sum(profile.file_type_counts.values()) == 1

    def test_file_type_counts(self) -> None:
        """Test file type counts cover every file."""
        tree = _tree("src/app.py", "tests/test_app.py", "README.md", "pyproject.toml", "LICENSE")

        profile = ProjectStructureAnalyzer().analyze(tree)

        assert profile.file_type_counts == {
            "source": 1,
            "config": 1,
            "documentation": 1,
            "test": 1,
            "other": 1,
        }
