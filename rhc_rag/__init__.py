"""Retrieval components for RHC policy and event discovery."""

from .embeddings import Embedder, LocalPseudoEmbedder, RemoteStubEmbedder, create_embedder, normalize, pseudo_embed
from .index import INDEX_VERSION, build_embedding_index, chunk_text, infer_resource_type
from .intent import IntentDetection, detect_intent
from .models import EmbeddingIndexFile, EmbeddingRecord, SimilarityResult
from .rag import RagAnswer, events_for_resource_type
from .store import EmbeddingStore, IndexNotLoadedError, cosine, load_index_file

__all__ = [
    "INDEX_VERSION",
    "Embedder",
    "EmbeddingIndexFile",
    "EmbeddingRecord",
    "EmbeddingStore",
    "IndexNotLoadedError",
    "IntentDetection",
    "LocalPseudoEmbedder",
    "RagAnswer",
    "RemoteStubEmbedder",
    "SimilarityResult",
    "build_embedding_index",
    "chunk_text",
    "cosine",
    "create_embedder",
    "detect_intent",
    "events_for_resource_type",
    "infer_resource_type",
    "load_index_file",
    "normalize",
    "pseudo_embed",
]
