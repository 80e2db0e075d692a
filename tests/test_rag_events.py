from __future__ import annotations

from pathlib import Path

import pytest

from rhc_rag.embeddings import LocalPseudoEmbedder
from rhc_rag.index import build_embedding_index
from rhc_rag.rag import events_for_resource_type
from rhc_rag.store import EmbeddingStore, IndexNotLoadedError
from rhc_sdk.models import ContentIndex


@pytest.fixture
def store(two_policy_content: ContentIndex, tmp_path: Path) -> EmbeddingStore:
    holder = EmbeddingStore(tmp_path / "embeddings.json")
    holder.replace(build_embedding_index(two_policy_content, LocalPseudoEmbedder()))
    return holder


def test_token_overlap_keeps_matching_events(store: EmbeddingStore) -> None:
    answer = events_for_resource_type(store, "  Storage ")

    assert answer.fallback is False
    assert [result.id for result in answer.results] == ["event:PolicyFile_Storage.json#AccountDegraded"]
    assert answer.markdown.splitlines() == [
        "Events potentially related to **Storage** (top 1):",
        "- **AccountDegraded** - Account Degraded (ReasonType: Planned) in `PolicyFile_Storage.json`",
    ]


def test_no_match_falls_back_to_top_results(store: EmbeddingStore) -> None:
    answer = events_for_resource_type(store, "zebra")

    assert answer.fallback is True
    assert [result.id for result in answer.results] == [
        "event:PolicyFile_Compute.json#DiskUnavailable",
        "event:PolicyFile_Storage.json#AccountDegraded",
    ]
    assert answer.markdown.startswith("No strong token matches; showing top 2 similar event(s) (fallback).")


def test_only_events_are_returned(store: EmbeddingStore) -> None:
    answer = events_for_resource_type(store, "compute", limit=10)
    assert answer.results
    assert all(result.id.startswith("event:") for result in answer.results)


def test_empty_index_reports_no_events(tmp_path: Path) -> None:
    holder = EmbeddingStore(tmp_path / "embeddings.json")
    holder.replace(build_embedding_index(ContentIndex(), LocalPseudoEmbedder()))

    answer = events_for_resource_type(holder, "storage")
    assert answer.results == []
    assert answer.fallback is True
    assert answer.markdown.endswith("No matching events found. Try refining the resource type phrasing.")


def test_requires_loaded_index(tmp_path: Path) -> None:
    with pytest.raises(IndexNotLoadedError):
        events_for_resource_type(EmbeddingStore(tmp_path / "none.json"), "storage")
