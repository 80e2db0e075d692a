"""Embedding store bootstrap utilities for API handlers."""
from __future__ import annotations

from functools import lru_cache

from rhc_rag.embeddings import Embedder, create_embedder
from rhc_rag.models import EmbeddingIndexFile
from rhc_rag.store import EmbeddingStore
from rhc_sdk.config import RHCConfig, load_config
from rhc_sdk.loader import build_content_index


@lru_cache(maxsize=1)
def get_config() -> RHCConfig:
    return load_config()


@lru_cache(maxsize=1)
def get_store() -> EmbeddingStore:
    return EmbeddingStore(get_config().index_path)


def get_embedder() -> Embedder:
    # Read per build so a changed provider setting applies to the next rebuild.
    return create_embedder(get_config().embedding_provider)


def rebuild_index() -> EmbeddingIndexFile:
    """Rescan the workspace and replace the process-wide embedding index."""

    cfg = get_config()
    content = build_content_index(cfg.workspace)
    return get_store().rebuild(
        content,
        get_embedder(),
        include_docs=cfg.include_docs,
        docs_dir=cfg.docs_dir,
    )


def ensure_index() -> bool:
    """Load the persisted index if nothing is in memory yet."""

    return get_store().load_if_absent()


def reset() -> None:
    """Drop cached configuration and store (used when the workspace changes)."""

    get_store.cache_clear()
    get_config.cache_clear()
