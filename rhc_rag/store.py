"""Persistence and cosine-similarity search for the embedding index."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
from pydantic import ValidationError
import structlog

from rhc_sdk.models import ContentIndex

from .embeddings import Embedder, pseudo_embed
from .index import INDEX_VERSION, build_embedding_index
from .models import EmbeddingIndexFile, EmbeddingRecord, SimilarityResult

logger = structlog.get_logger(__name__)


class IndexNotLoadedError(RuntimeError):
    """Raised when a search runs before any index was built or loaded."""


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; falls back to the raw dot product for zero vectors."""

    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    dot = float(np.dot(left, right))
    denominator = float(np.linalg.norm(left)) * float(np.linalg.norm(right))
    if denominator == 0:
        return dot
    return dot / denominator


def load_index_file(path: Path) -> Optional[EmbeddingIndexFile]:
    """Read a persisted index, returning ``None`` when it is unusable.

    Missing, unreadable, malformed, wrong-version and inconsistent files are all
    reported the same way so callers only need to decide whether to rebuild.
    """

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("rag.index.unreadable", path=str(path), error=str(exc))
        return None

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("rag.index.malformed", path=str(path), error=exc.msg)
        return None

    if not isinstance(parsed, dict) or parsed.get("version") != INDEX_VERSION:
        found = parsed.get("version") if isinstance(parsed, dict) else None
        logger.info("rag.index.stale", path=str(path), found=found, expected=INDEX_VERSION)
        return None

    try:
        index_file = EmbeddingIndexFile.model_validate(parsed)
    except ValidationError as exc:
        logger.warning("rag.index.malformed", path=str(path), error=str(exc))
        return None

    for record in index_file.records:
        if len(record.vector) != index_file.dims:
            logger.warning(
                "rag.index.malformed",
                path=str(path),
                error=f"record {record.id} has {len(record.vector)} dims, expected {index_file.dims}",
            )
            return None
    return index_file


class EmbeddingStore:
    """Holds the active embedding index and its on-disk location.

    The in-memory index is only ever swapped as a whole, so readers see either
    the previous index or the new one.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._index: Optional[EmbeddingIndexFile] = None

    @property
    def loaded(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> Optional[EmbeddingIndexFile]:
        return self._index

    @property
    def dims(self) -> Optional[int]:
        return self._index.dims if self._index is not None else None

    @property
    def records(self) -> List[EmbeddingRecord]:
        return list(self._index.records) if self._index is not None else []

    def __len__(self) -> int:
        return len(self._index.records) if self._index is not None else 0

    def stats(self) -> Dict[str, int]:
        return self._index.stats() if self._index is not None else {}

    def replace(self, index_file: EmbeddingIndexFile) -> None:
        self._index = index_file

    def clear(self) -> None:
        self._index = None

    def persist(self, index_file: EmbeddingIndexFile) -> Path:
        """Write ``index_file`` to the store path, overwriting any previous copy."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = index_file.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("rag.index.persisted", path=str(self.path), records=len(index_file.records))
        return self.path

    def load_if_absent(self, expected_dims: Optional[int] = None) -> bool:
        """Ensure an index is in memory, reading the persisted copy if needed.

        Returns ``False`` (without raising) when nothing usable is on disk. With
        ``expected_dims`` set, a stored index of another dimensionality counts
        as unusable too.
        """

        if self._index is not None:
            return True

        index_file = load_index_file(self.path)
        if index_file is None:
            logger.info("rag.index.unavailable", path=str(self.path))
            return False
        if expected_dims is not None and index_file.dims != expected_dims:
            logger.info(
                "rag.index.unavailable",
                path=str(self.path),
                dims=index_file.dims,
                expected_dims=expected_dims,
            )
            return False

        self._index = index_file
        logger.info(
            "rag.index.loaded",
            path=str(self.path),
            dims=index_file.dims,
            records=len(index_file.records),
        )
        return True

    def rebuild(
        self,
        content_index: ContentIndex,
        embedder: Embedder,
        *,
        include_docs: bool = False,
        docs_dir: Optional[Path] = None,
        persist: bool = True,
    ) -> EmbeddingIndexFile:
        """Build a fresh index, make it current and optionally write it out."""

        index_file = build_embedding_index(
            content_index,
            embedder,
            include_docs=include_docs,
            docs_dir=docs_dir,
        )
        self.replace(index_file)
        if persist:
            self.persist(index_file)
        return index_file

    def search(
        self,
        query: str,
        limit: int = 10,
        kinds: Optional[Sequence[str]] = None,
        resource_type_hint: Optional[str] = None,
    ) -> List[SimilarityResult]:
        """Rank stored records against ``query`` by cosine similarity.

        The query is embedded with the stored index's dimensionality. Equal
        scores are ordered by record id.
        """

        index_file = self._index
        if index_file is None:
            raise IndexNotLoadedError("Embedding index not loaded")
        if limit <= 0:
            return []

        query_vector = pseudo_embed(query, index_file.dims)
        hint = resource_type_hint.lower() if resource_type_hint else None

        results: List[SimilarityResult] = []
        for record in index_file.records:
            if kinds is not None and record.kind not in kinds:
                continue
            if hint and record.resource_type and record.resource_type.lower() != hint:
                continue
            results.append(
                SimilarityResult(
                    id=record.id,
                    score=cosine(query_vector, record.vector),
                    text=record.text,
                    meta=dict(record.meta),
                )
            )

        results.sort(key=lambda result: (-result.score, result.id))
        return results[:limit]
