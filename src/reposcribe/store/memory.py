"""In-memory sink and repository registry."""

import copy
from typing import Any

from reposcribe.store.base import SummaryKey


class InMemorySink:
    """Dictionary-backed KeyValueSink.

    Records are deep-copied on the way in and out so callers cannot mutate
    stored state.
    """

    def __init__(self) -> None:
        self._records: dict[SummaryKey, dict[str, Any]] = {}

    def get(self, key: SummaryKey) -> dict[str, Any] | None:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def put(self, key: SummaryKey, record: dict[str, Any]) -> None:
        self._records[key] = copy.deepcopy(record)

    def values(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(record) for record in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)


class InMemoryRepositoryRegistry:
    """Set-backed RepositoryRegistry."""

    def __init__(self, repository_ids: list[str] | None = None) -> None:
        self._ids: set[str] = set(repository_ids or [])

    def register(self, repository_id: str) -> None:
        """Register a repository id ("owner/name")."""
        self._ids.add(repository_id)

    def exists(self, repository_id: str) -> bool:
        return repository_id in self._ids
