"""Repository entities consumed from the VCS content source.

These records are produced by the VCS collaborator and treated as read-only
by the analyzers:
- RepositoryRef: owner/name/branch identity of an analysis
- TreeEntry: One file or directory in a branch tree
- Commit: Commit metadata
- PullRequest: Pull request title and body
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import PurePosixPath
from typing import Any


class EntryKind(Enum):
    """Kind of a tree entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class RepositoryRef:
    """Identity of an analyzed repository branch.

    Attributes:
        owner: Repository owner (user or organization)
        name: Repository name
        branch: Branch name (e.g., "main")
    """

    owner: str
    name: str
    branch: str = "main"

    def __post_init__(self) -> None:
        """Validate ref fields."""
        if not self.owner or not self.owner.strip():
            raise ValueError("Repository owner cannot be empty")
        if not self.name or not self.name.strip():
            raise ValueError("Repository name cannot be empty")
        if not self.branch or not self.branch.strip():
            raise ValueError("Branch name cannot be empty")

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}@{self.branch}"

    @property
    def repository_id(self) -> str:
        """Registry identifier for the repository (branch-independent)."""
        return f"{self.owner}/{self.name}"

    def with_branch(self, branch: str) -> "RepositoryRef":
        """Return a copy of this ref pointing at another branch."""
        return replace(self, branch=branch)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"owner": self.owner, "name": self.name, "branch": self.branch}


@dataclass(frozen=True)
class TreeEntry:
    """Single entry of a branch tree listing.

    Attributes:
        path: Repository-relative POSIX path
        kind: File or directory
        size: Blob size in bytes (0 for directories)
    """

    path: str
    kind: EntryKind = EntryKind.FILE
    size: int = 0

    @property
    def is_file(self) -> bool:
        """Return True for file (blob) entries."""
        return self.kind == EntryKind.FILE

    @property
    def filename(self) -> str:
        """Final path component."""
        return PurePosixPath(self.path).name


@dataclass
class Commit:
    """Commit metadata.

    Attributes:
        sha: Commit SHA
        message: Full commit message
        author: Author name
        date: Commit date as reported by the VCS (ISO 8601)
    """

    sha: str
    message: str
    author: str | None = None
    date: str | None = None

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.strip().splitlines()[0] if self.message.strip() else ""


@dataclass
class PullRequest:
    """Pull request metadata.

    Attributes:
        number: PR number
        title: PR title
        body: PR description (may be empty)
        state: PR state (open, closed, all)
    """

    number: int
    title: str
    body: str = ""
    state: str = "closed"
