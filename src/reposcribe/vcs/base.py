"""VCS content source interface.

Implementations (HTTP clients for a code host, local git readers) live
outside this package. A source signals a missing branch with
RefNotFoundError and any other failure with VCSError; ``get_file_content``
returns None for files that do not exist at the ref.
"""

from typing import Protocol, runtime_checkable

from reposcribe.errors import RefNotFoundError, VCSError
from reposcribe.models.repository import Commit, PullRequest, RepositoryRef, TreeEntry

__all__ = ["RefNotFoundError", "VCSContentSource", "VCSError"]


@runtime_checkable
class VCSContentSource(Protocol):
    """Async read access to one repository's content."""

    async def get_tree(self, ref: RepositoryRef) -> list[TreeEntry]:
        """Return the flat tree listing at ref."""
        ...

    async def get_file_content(self, path: str, ref: RepositoryRef) -> bytes | None:
        """Return the blob at path, or None if absent."""
        ...

    async def get_readme(self, ref: RepositoryRef) -> str:
        """Return README text at ref (empty string if there is none)."""
        ...

    async def get_commits(self, ref: RepositoryRef, limit: int) -> list[Commit]:
        """Return up to limit most recent commits on ref."""
        ...

    async def get_pull_requests(self, state: str, limit: int) -> list[PullRequest]:
        """Return up to limit pull requests in the given state."""
        ...
