"""Persistence collaborator interfaces.

- KeyValueSink: upsert target keyed by (repository_id, branch_name)
- RepositoryRegistry: precondition check that a repository exists
"""

from typing import Any, Protocol, runtime_checkable

from reposcribe.errors import RepositoryNotFoundError

__all__ = ["KeyValueSink", "RepositoryNotFoundError", "RepositoryRegistry", "SummaryKey"]

SummaryKey = tuple[str, str]


@runtime_checkable
class KeyValueSink(Protocol):
    """Key-value store for serialized summaries."""

    def get(self, key: SummaryKey) -> dict[str, Any] | None:
        """Return the record stored under key, or None."""
        ...

    def put(self, key: SummaryKey, record: dict[str, Any]) -> None:
        """Insert or replace the record stored under key."""
        ...

    def values(self) -> list[dict[str, Any]]:
        """Return all stored records."""
        ...


@runtime_checkable
class RepositoryRegistry(Protocol):
    """Registry of known repositories."""

    def exists(self, repository_id: str) -> bool:
        """Return True if the repository is registered."""
        ...
