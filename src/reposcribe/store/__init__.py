"""Summary persistence: store, sinks and repository registry."""

from reposcribe.store.base import KeyValueSink, RepositoryNotFoundError, RepositoryRegistry
from reposcribe.store.json_file import JsonFileSink
from reposcribe.store.memory import InMemoryRepositoryRegistry, InMemorySink
from reposcribe.store.summary_store import SummaryStore, create_sink

__all__ = [
    "InMemoryRepositoryRegistry",
    "InMemorySink",
    "JsonFileSink",
    "KeyValueSink",
    "RepositoryNotFoundError",
    "RepositoryRegistry",
    "SummaryStore",
    "create_sink",
]
