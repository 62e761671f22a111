"""Per-branch language distribution from file extensions.

Maps each file in a branch tree through a static extension table (plus a few
special-cased filenames such as Dockerfile) and tallies counts per language.
Percentages are ``round(count / total_files * 100)`` and are not corrected to
sum to 100.
"""

import logging
from pathlib import PurePosixPath

from reposcribe.analyzers.paths import PathClassifier
from reposcribe.models.analysis import LanguageShare, LanguageStats
from reposcribe.models.repository import TreeEntry

logger = logging.getLogger(__name__)

# Extension (lowercase, without dot) -> language
LANGUAGE_EXTENSIONS: dict[str, str] = {
    "js": "JavaScript",
    "jsx": "JavaScript",
    "mjs": "JavaScript",
    "cjs": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "cc": "C++",
    "cxx": "C++",
    "hpp": "C++",
    "c": "C",
    "h": "C",
    "cs": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "go": "Go",
    "rs": "Rust",
    "swift": "Swift",
    "kt": "Kotlin",
    "kts": "Kotlin",
    "scala": "Scala",
    "dart": "Dart",
    "m": "Objective-C",
    "r": "R",
    "lua": "Lua",
    "pl": "Perl",
    "ex": "Elixir",
    "exs": "Elixir",
    "clj": "Clojure",
    "hs": "Haskell",
    "html": "HTML",
    "htm": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sass": "Sass",
    "less": "Less",
    "vue": "Vue",
    "svelte": "Svelte",
    "json": "JSON",
    "xml": "XML",
    "yaml": "YAML",
    "yml": "YAML",
    "toml": "TOML",
    "md": "Markdown",
    "mdx": "Markdown",
    "sql": "SQL",
    "sh": "Shell",
    "bash": "Shell",
    "zsh": "Shell",
    "ps1": "PowerShell",
    "bat": "Batch",
    "graphql": "GraphQL",
    "gql": "GraphQL",
    "proto": "Protocol Buffers",
    "tf": "HCL",
}

# Filenames without a mapped extension that still identify a language
LANGUAGE_FILENAMES: dict[str, str] = {
    "dockerfile": "Dockerfile",
    "makefile": "Makefile",
    "jenkinsfile": "Groovy",
    "gemfile": "Ruby",
    "rakefile": "Ruby",
}

# Every language name the analyzer can report
KNOWN_LANGUAGES: frozenset[str] = frozenset(LANGUAGE_EXTENSIONS.values()) | frozenset(
    LANGUAGE_FILENAMES.values()
)


def language_for_path(path: str) -> str | None:
    """Return the language of a file path, or None if unmapped.

    Args:
        path: Repository-relative path

    Returns:
        Language name from the extension or filename tables
    """
    name = PurePosixPath(path).name.lower()
    if name in LANGUAGE_FILENAMES:
        return LANGUAGE_FILENAMES[name]
    if name.startswith("dockerfile.") or name.endswith(".dockerfile"):
        return "Dockerfile"
    if "." not in name.strip("."):
        return None
    return LANGUAGE_EXTENSIONS.get(name.rsplit(".", 1)[-1])


class BranchLanguageAnalyzer:
    """Computes language statistics for one branch tree."""

    def __init__(self, classifier: PathClassifier | None = None) -> None:
        self._classifier = classifier or PathClassifier()

    def analyze(self, entries: list[TreeEntry]) -> LanguageStats:
        """Tally files per language.

        Files inside vendor/build directories are ignored. Files whose
        extension is not in the table count toward ``total_files`` but are
        not attributed to any language.

        Args:
            entries: Tree entries for one branch

        Returns:
            LanguageStats (empty when there are no files)
        """
        counts: dict[str, int] = {}
        total_files = 0

        for entry in entries:
            if not entry.is_file or self._classifier.in_excluded_directory(entry.path):
                continue
            total_files += 1
            language = language_for_path(entry.path)
            if language is not None:
                counts[language] = counts.get(language, 0) + 1

        if total_files == 0:
            logger.info("No files to analyze for language statistics")
            return LanguageStats()

        languages = {
            language: LanguageShare(
                count=count,
                percentage=round(count / total_files * 100),
            )
            for language, count in sorted(counts.items())
        }

        if not languages:
            logger.info(
                "No known languages among %d files (low confidence language stats)",
                total_files,
            )

        logger.debug("Language statistics: %d languages over %d files", len(languages), total_files)
        return LanguageStats(languages=languages, total_files=total_files)
