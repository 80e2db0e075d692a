"""Embedding index construction over the workspace content index."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any, Dict, Iterable, List, Optional

import structlog

from rhc_sdk.models import ContentIndex, PolicyIndexEntry

from .embeddings import Embedder
from .models import EmbeddingIndexFile, EmbeddingRecord

INDEX_VERSION = 2
CHUNK_SIZE = 800

_POLICY_FILE_PATTERN = re.compile(r"PolicyFile_(.+)\.json$", re.IGNORECASE)

logger = structlog.get_logger(__name__)


def infer_resource_type(file_name: str) -> Optional[str]:
    """Return ``Foo`` for ``PolicyFile_Foo.json`` and ``None`` otherwise."""

    match = _POLICY_FILE_PATTERN.search(file_name)
    return match.group(1) if match else None


def _join(parts: Iterable[Optional[str]]) -> str:
    return " ".join(part for part in parts if part)


def _meta(**fields: Any) -> Dict[str, Any]:
    # Unset fields are dropped so a persisted record reloads unchanged.
    return {key: value for key, value in fields.items() if value is not None}


def chunk_text(text: str, size: int = CHUNK_SIZE) -> List[str]:
    """Split text into consecutive non-overlapping chunks of ``size`` characters."""

    if size <= 0:
        raise ValueError("size must be a positive integer")
    return [text[start : start + size] for start in range(0, len(text), size)]


def read_document(path: Path) -> Optional[str]:
    """Return the UTF-8 text of ``path`` or ``None`` when it cannot be read."""

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("rag.index.doc_unreadable", path=str(path), error=str(exc))
        return None


def _policy_records(policy: PolicyIndexEntry, embedder: Embedder) -> List[EmbeddingRecord]:
    resource_type = infer_resource_type(policy.file)
    policy_text = _join([policy.file, resource_type])
    [policy_vector] = embedder.embed([policy_text])

    records = [
        EmbeddingRecord(
            id=f"policy:{policy.file}",
            kind="policy",
            resource_type=resource_type,
            text=policy_text,
            vector=policy_vector,
            meta={"file": policy.file},
        )
    ]

    if not policy.events:
        return records

    event_texts = [
        _join([event.event_id, event.title, event.reason_type, resource_type])
        for event in policy.events
    ]
    event_vectors = embedder.embed(event_texts)
    for event, text, vector in zip(policy.events, event_texts, event_vectors):
        records.append(
            EmbeddingRecord(
                id=f"event:{policy.file}#{event.event_id or 'unknown'}",
                kind="event",
                resource_type=resource_type,
                text=text,
                vector=vector,
                meta=_meta(
                    file=policy.file,
                    eventId=event.event_id,
                    title=event.title,
                    reasonType=event.reason_type,
                ),
            )
        )
    return records


def _document_records(docs_dir: Path, embedder: Embedder) -> List[EmbeddingRecord]:
    if not docs_dir.is_dir():
        return []

    records: List[EmbeddingRecord] = []
    for path in sorted(docs_dir.iterdir(), key=lambda item: item.name):
        text = read_document(path)
        if text is None:
            continue
        chunks = chunk_text(text)
        if not chunks:
            continue
        vectors = embedder.embed(chunks)
        for chunk_index, (chunk, vector) in enumerate(zip(chunks, vectors)):
            records.append(
                EmbeddingRecord(
                    id=f"doc:{path.name}#{chunk_index}",
                    kind="doc",
                    text=chunk,
                    vector=vector,
                    meta={"file": path.name, "chunk": chunk_index},
                )
            )
    return records


def build_embedding_index(
    content_index: ContentIndex,
    embedder: Embedder,
    *,
    include_docs: bool = False,
    docs_dir: Optional[Path] = None,
) -> EmbeddingIndexFile:
    """Embed every policy, event and optional documentation chunk.

    Every call is a full rebuild; records keep the order in which they were
    produced (policy, its events, next policy, ..., then documents).
    """

    records: List[EmbeddingRecord] = []
    for policy in content_index.policies:
        records.extend(_policy_records(policy, embedder))

    if include_docs and docs_dir is not None:
        records.extend(_document_records(Path(docs_dir), embedder))

    index_file = EmbeddingIndexFile(
        version=INDEX_VERSION,
        created=datetime.now(timezone.utc).isoformat(),
        dims=embedder.dims,
        records=records,
    )
    logger.info(
        "rag.index.built",
        embedder=embedder.name,
        dims=embedder.dims,
        records=len(records),
        per_kind=index_file.stats(),
    )
    return index_file
