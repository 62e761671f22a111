"""Unit tests for summary persistence."""

import json
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

import reposcribe.store.json_file as json_file_module
import reposcribe.store.summary_store as store_module
from reposcribe.config import StoreConfig
from reposcribe.errors import RepositoryNotFoundError
from reposcribe.models.analysis import PerformanceMetrics, SummaryDraft
from reposcribe.models.repository import RepositoryRef
from reposcribe.store import (
    InMemoryRepositoryRegistry,
    InMemorySink,
    JsonFileSink,
    KeyValueSink,
    RepositoryRegistry,
    SummaryStore,
    create_sink,
)


class TestSummaryStore:
    """Tests for SummaryStore upsert semantics."""

    def test_insert_then_get(self, summary_store, repo_ref, sample_draft) -> None:
        """Test a new summary is stored and readable."""
        summary_id = summary_store.upsert(repo_ref, sample_draft)

        stored = summary_store.get("octo/shop", "main")

        assert stored is not None
        assert stored.summary_id == summary_id
        assert stored.draft.project_intro == sample_draft.project_intro
        assert stored.draft.tech_stack.frontend == {"React"}
        assert stored.created_at == stored.updated_at

    def test_upsert_is_idempotent_per_branch(self, summary_store, sink, repo_ref, sample_draft) -> None:
        """Test re-analysis overwrites in place and keeps identity."""
        first_id = summary_store.upsert(repo_ref, sample_draft)
        first = summary_store.get("octo/shop", "main")

        updated = SummaryDraft(project_intro="Rewritten intro.")
        second_id = summary_store.upsert(repo_ref, updated)
        second = summary_store.get("octo/shop", "main")

        assert second_id == first_id
        assert len(sink) == 1
        assert second.draft.project_intro == "Rewritten intro."
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at

    def test_updated_at_refreshed(self, summary_store, repo_ref, sample_draft) -> None:
        """Test the second write moves updated_at forward."""
        real_datetime = store_module.datetime
        first_time = real_datetime(2026, 1, 1, tzinfo=store_module.UTC)

        with patch.object(store_module, "datetime") as mock_datetime:
            mock_datetime.now.return_value = first_time
            mock_datetime.fromisoformat.side_effect = real_datetime.fromisoformat
            summary_store.upsert(repo_ref, sample_draft)

            mock_datetime.now.return_value = first_time + timedelta(hours=1)
            summary_store.upsert(repo_ref, sample_draft)

        stored = summary_store.get("octo/shop", "main")
        assert stored.created_at == first_time
        assert stored.updated_at == first_time + timedelta(hours=1)

    def test_branches_are_separate(self, summary_store, repo_ref, sample_draft) -> None:
        """Test different branches get different summaries."""
        main_id = summary_store.upsert(repo_ref, sample_draft)
        dev_id = summary_store.upsert(repo_ref.with_branch("develop"), sample_draft)

        assert main_id != dev_id
        assert summary_store.get("octo/shop", "develop").summary_id == dev_id

    def test_unknown_repository_rejected(self, sink, sample_draft) -> None:
        """Test nothing is stored for an unregistered repository."""
        store = SummaryStore(sink, InMemoryRepositoryRegistry())
        ref = RepositoryRef(owner="ghost", name="repo")

        with pytest.raises(RepositoryNotFoundError) as exc_info:
            store.upsert(ref, sample_draft)

        assert exc_info.value.repository_id == "ghost/repo"
        assert len(sink) == 0

    def test_metrics_attached(self, summary_store, repo_ref) -> None:
        """Test metrics passed to upsert are stored with the draft."""
        metrics = PerformanceMetrics(commits_analyzed=12, prs_analyzed=3)

        summary_store.upsert(repo_ref, SummaryDraft(project_intro="x"), metrics)

        stored = summary_store.get("octo/shop", "main")
        assert stored.draft.performance_metrics.commits_analyzed == 12
        assert stored.draft.performance_metrics.prs_analyzed == 3

    def test_get_missing(self, summary_store) -> None:
        """Test get returns None for an unknown branch."""
        assert summary_store.get("octo/shop", "nope") is None

    def test_list_for_repository(self, summary_store, registry, repo_ref, sample_draft) -> None:
        """Test listing returns one entry per branch, newest first."""
        registry.register("octo/other")
        summary_store.upsert(repo_ref, sample_draft)
        summary_store.upsert(repo_ref.with_branch("develop"), sample_draft)
        summary_store.upsert(RepositoryRef(owner="octo", name="other"), sample_draft)

        summaries = summary_store.list_for_repository("octo/shop")

        assert {s.branch_name for s in summaries} == {"main", "develop"}
        assert summaries[0].updated_at >= summaries[1].updated_at


class TestSinks:
    """Tests for sink implementations."""

    def test_in_memory_sink_copies_records(self) -> None:
        """Test callers cannot mutate stored records."""
        sink = InMemorySink()
        record = {"repository_id": "a/b", "branch_name": "main", "project_intro": "x"}
        sink.put(("a/b", "main"), record)

        record["project_intro"] = "changed"
        fetched = sink.get(("a/b", "main"))
        fetched["project_intro"] = "changed again"

        assert sink.get(("a/b", "main"))["project_intro"] == "x"

    def test_json_sink_round_trip(self, tmp_path: Path, repo_ref, sample_draft) -> None:
        """Test summaries survive a new store over the same file."""
        path = tmp_path / "nested" / "summaries.json"
        registry = InMemoryRepositoryRegistry(["octo/shop"])
        summary_id = SummaryStore(JsonFileSink(path), registry).upsert(repo_ref, sample_draft)

        reopened = SummaryStore(JsonFileSink(path), registry).get("octo/shop", "main")

        assert reopened is not None
        assert reopened.summary_id == summary_id
        assert reopened.draft.resume_bullets == sample_draft.resume_bullets
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data["summaries"]) == 1

    @pytest.mark.parametrize("failing_call", ["fsync", "replace"])
    def test_json_sink_failed_write_keeps_document(self, tmp_path: Path, failing_call: str) -> None:
        """Test an interrupted write leaves earlier records readable."""
        path = tmp_path / "summaries.json"
        sink = JsonFileSink(path)
        sink.put(("a/b", "main"), {"repository_id": "a/b", "branch_name": "main", "project_intro": "x"})

        with patch.object(json_file_module.os, failing_call, side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                sink.put(
                    ("a/b", "develop"),
                    {"repository_id": "a/b", "branch_name": "develop", "project_intro": "y"},
                )

        assert sink.get(("a/b", "main"))["project_intro"] == "x"
        assert sink.get(("a/b", "develop")) is None
        assert [p.name for p in tmp_path.iterdir()] == ["summaries.json"]

    def test_json_sink_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file reads as empty."""
        sink = JsonFileSink(tmp_path / "absent.json")

        assert sink.get(("a/b", "main")) is None
        assert sink.values() == []

    def test_protocols(self, tmp_path: Path) -> None:
        """Test implementations satisfy the collaborator protocols."""
        assert isinstance(InMemorySink(), KeyValueSink)
        assert isinstance(JsonFileSink(tmp_path / "s.json"), KeyValueSink)
        assert isinstance(InMemoryRepositoryRegistry(), RepositoryRegistry)

    def test_create_sink(self, tmp_path: Path) -> None:
        """Test the sink is chosen from store config."""
        assert isinstance(create_sink(StoreConfig()), InMemorySink)
        json_sink = create_sink(StoreConfig(backend="json", path=str(tmp_path / "s.json")))
        assert isinstance(json_sink, JsonFileSink)
