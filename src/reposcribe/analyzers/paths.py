"""Path classification for repository content analysis.

Decides whether a tree path is worth fetching and analyzing. Three exclusion
tables are checked in order, and the first match short-circuits:
1. Vendor/dependency/build/IDE/VCS directory segments
2. Binary and media file extensions
3. Known lockfile and OS junk filenames
"""

from enum import Enum
from pathlib import PurePosixPath

# Directory segments excluded anywhere in a path, grouped by ecosystem
EXCLUDED_DIRECTORIES: frozenset[str] = frozenset(
    {
        # JavaScript / Node.js
        "node_modules", ".npm", ".yarn", "bower_components",
        # Python
        "venv", "env", ".venv", "__pycache__", ".pytest_cache",
        "site-packages", "dist-packages", ".tox", ".mypy_cache",
        # Java / Kotlin / Scala
        "target", ".gradle", "gradle", ".m2",
        # C / C++ / generic build output
        "build", "out", "classes", "bin", "obj",
        # .NET
        "packages", ".nuget",
        # Ruby / PHP
        "vendor", ".bundle", "gems", "composer",
        # Rust
        ".cargo",
        # Swift
        ".build", ".swiftpm",
        # Dart / Flutter
        ".dart_tool", ".pub",
        # iOS / Android
        "pods", ".cocoapods", "carthage", "derived_data", "deriveddata", ".android",
        # Release / coverage output
        "dist", "output", "release", "debug", "coverage",
        # Web frameworks and hosting
        ".next", ".nuxt", ".output", ".vercel", ".netlify", ".svelte-kit",
        # Caches and temp
        ".cache", ".tmp", "temp", "tmp", ".temp",
        # VCS internals
        ".git", ".svn", ".hg",
        # IDE metadata
        ".vscode", ".idea", ".eclipse", ".settings",
        # Logs
        "logs",
    }
)

# Binary and media extensions (lowercase, without dot)
EXCLUDED_EXTENSIONS: frozenset[str] = frozenset(
    {
        # Images
        "png", "jpg", "jpeg", "gif", "bmp", "ico", "svg", "webp", "tiff", "psd",
        # Video
        "mp4", "avi", "mov", "wmv", "flv", "mkv", "webm",
        # Audio
        "mp3", "wav", "flac", "aac", "ogg", "m4a",
        # Fonts
        "ttf", "otf", "woff", "woff2", "eot",
        # Archives
        "zip", "tar", "gz", "rar", "7z", "bz2", "xz", "tgz",
        # Executables and libraries
        "exe", "dll", "so", "dylib", "app", "dmg", "deb", "rpm", "msi", "apk", "ipa",
        # Compiled objects
        "class", "jar", "war", "pyc", "pyo", "o", "obj", "a", "lib", "wasm",
        # Documents
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        # Databases
        "db", "sqlite", "sqlite3",
        # Lock files
        "lock",
    }
)

# Exact filenames (lowercase) that are never analyzed
EXCLUDED_FILENAMES: frozenset[str] = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "composer.lock",
        "gemfile.lock",
        "pipfile.lock",
        "poetry.lock",
        "cargo.lock",
        "go.sum",
        ".ds_store",
        "thumbs.db",
        "desktop.ini",
    }
)


class ExclusionReason(Enum):
    """Which exclusion table rejected a path."""

    DIRECTORY = "directory"
    EXTENSION = "extension"
    FILENAME = "filename"


def _extension(filename: str) -> str:
    if "." not in filename.strip("."):
        return ""
    return filename.rsplit(".", 1)[-1].lower()


class PathClassifier:
    """Decides whether a repository path is analysis-worthy.

    The tables default to the module-level constants and can be extended per
    instance; classification itself is a pure function of the path.
    """

    def __init__(
        self,
        excluded_directories: frozenset[str] = EXCLUDED_DIRECTORIES,
        excluded_extensions: frozenset[str] = EXCLUDED_EXTENSIONS,
        excluded_filenames: frozenset[str] = EXCLUDED_FILENAMES,
    ) -> None:
        self.excluded_directories = frozenset(d.lower() for d in excluded_directories)
        self.excluded_extensions = frozenset(e.lower().lstrip(".") for e in excluded_extensions)
        self.excluded_filenames = frozenset(f.lower() for f in excluded_filenames)

    def exclusion_reason(self, path: str) -> ExclusionReason | None:
        """Return the first exclusion that matches a path, or None.

        Args:
            path: Repository-relative path

        Returns:
            ExclusionReason, or None if the path should be analyzed
        """
        parts = PurePosixPath(path.replace("\\", "/")).parts
        if not parts:
            return ExclusionReason.FILENAME

        if any(part.lower() in self.excluded_directories for part in parts):
            return ExclusionReason.DIRECTORY

        filename = parts[-1].lower()
        if _extension(filename) in self.excluded_extensions:
            return ExclusionReason.EXTENSION

        if filename in self.excluded_filenames:
            return ExclusionReason.FILENAME

        return None

    def in_excluded_directory(self, path: str) -> bool:
        """Return True if any directory segment of the path is excluded."""
        return self.exclusion_reason(path) == ExclusionReason.DIRECTORY

    def should_analyze(self, path: str) -> bool:
        """Return True if the file at path should be fetched and analyzed."""
        return self.exclusion_reason(path) is None

    def filter(self, paths: list[str]) -> list[str]:
        """Return analyzable paths, preserving order."""
        return [path for path in paths if self.should_analyze(path)]


_default_classifier = PathClassifier()


def is_analyzable(path: str) -> bool:
    """Classify a path with the default exclusion tables."""
    return _default_classifier.should_analyze(path)
