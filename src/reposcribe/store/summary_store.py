"""Idempotent summary persistence keyed by (repository, branch).

Re-analyzing a branch overwrites its summary in place: the conflict key is
(repository_id, branch_name), ``created_at`` and ``summary_id`` survive the
overwrite and ``updated_at`` is refreshed. Summaries are only stored for
repositories the registry knows about.
"""

import logging
import uuid
from datetime import UTC, datetime

from reposcribe.config import StoreConfig
from reposcribe.errors import RepositoryNotFoundError
from reposcribe.models.analysis import PerformanceMetrics, PersistedSummary, SummaryDraft
from reposcribe.models.repository import RepositoryRef
from reposcribe.store.base import KeyValueSink, RepositoryRegistry
from reposcribe.store.json_file import JsonFileSink
from reposcribe.store.memory import InMemorySink

logger = logging.getLogger(__name__)


class SummaryStore:
    """Stores one summary per (repository_id, branch_name)."""

    def __init__(self, sink: KeyValueSink, registry: RepositoryRegistry) -> None:
        self._sink = sink
        self._registry = registry

    def upsert(
        self,
        ref: RepositoryRef,
        draft: SummaryDraft,
        metrics: PerformanceMetrics | None = None,
    ) -> str:
        """Insert or overwrite the summary for a repository branch.

        Args:
            ref: Analyzed repository branch
            draft: Complete summary draft
            metrics: Performance metrics (replaces the draft's metrics if given)

        Returns:
            Summary id (stable across overwrites)

        Raises:
            RepositoryNotFoundError: If the repository is not registered
        """
        repository_id = ref.repository_id
        if not self._registry.exists(repository_id):
            raise RepositoryNotFoundError(repository_id)

        if metrics is not None:
            draft.performance_metrics = metrics

        key = (repository_id, ref.branch)
        now = datetime.now(UTC)
        existing = self._sink.get(key)

        if existing is not None:
            summary_id = str(existing["summary_id"])
            created_at = datetime.fromisoformat(existing["created_at"])
            logger.info("Overwriting summary %s for %s", summary_id, ref)
        else:
            summary_id = str(uuid.uuid4())
            created_at = now
            logger.info("Creating summary %s for %s", summary_id, ref)

        summary = PersistedSummary(
            summary_id=summary_id,
            repository_id=repository_id,
            branch_name=ref.branch,
            draft=draft,
            created_at=created_at,
            updated_at=now,
        )
        self._sink.put(key, summary.to_dict())
        return summary_id

    def get(self, repository_id: str, branch_name: str) -> PersistedSummary | None:
        """Return the summary for a repository branch, if stored."""
        record = self._sink.get((repository_id, branch_name))
        return PersistedSummary.from_dict(record) if record is not None else None

    def list_for_repository(self, repository_id: str) -> list[PersistedSummary]:
        """Return all branch summaries of a repository, most recently updated first."""
        summaries = [
            PersistedSummary.from_dict(record)
            for record in self._sink.values()
            if record.get("repository_id") == repository_id
        ]
        return sorted(summaries, key=lambda s: (s.updated_at, s.branch_name), reverse=True)


def create_sink(config: StoreConfig) -> KeyValueSink:
    """Create the sink selected by the store configuration."""
    if config.backend == "json":
        return JsonFileSink(config.path)
    return InMemorySink()
