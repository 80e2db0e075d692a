"""Event discovery answers assembled from similarity search results."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .models import SimilarityResult
from .store import EmbeddingStore

QUERY_SUFFIX = "events"
SCORE_THRESHOLD = 0.20
FALLBACK_LIMIT = 5


@dataclass
class RagAnswer:
    """Ranked results plus a deterministic markdown rendering."""

    results: List[SimilarityResult] = field(default_factory=list)
    markdown: str = ""
    fallback: bool = False


def _overlaps(result: SimilarityResult, tokens: List[str]) -> bool:
    text = result.text.lower()
    return any(token in text for token in tokens)


def _render_result(result: SimilarityResult) -> str:
    meta = result.meta
    line = f"- **{meta.get('eventId') or 'unknown'}**"
    if meta.get("title"):
        line += f" - {meta['title']}"
    if meta.get("reasonType"):
        line += f" (ReasonType: {meta['reasonType']})"
    if meta.get("file"):
        line += f" in `{meta['file']}`"
    return line


def events_for_resource_type(
    store: EmbeddingStore,
    phrase: str,
    limit: int = 15,
) -> RagAnswer:
    """Find events likely to belong to the resource type named by ``phrase``.

    Results must share a token with the phrase or score above
    ``SCORE_THRESHOLD``; when nothing qualifies the top unfiltered hits are
    returned with ``fallback`` set.
    """

    norm = phrase.strip()
    hits = store.search(f"{norm} {QUERY_SUFFIX}", limit, kinds=["event"])
    tokens = norm.lower().split()

    filtered = [hit for hit in hits if _overlaps(hit, tokens) or hit.score > SCORE_THRESHOLD]
    fallback = not filtered
    if fallback:
        filtered = hits[:FALLBACK_LIMIT]
        lines = [f"No strong token matches; showing top {len(filtered)} similar event(s) (fallback)."]
    else:
        lines = [f"Events potentially related to **{norm}** (top {len(filtered)}):"]

    lines.extend(_render_result(hit) for hit in filtered)
    if not filtered:
        lines.append("No matching events found. Try refining the resource type phrasing.")

    return RagAnswer(results=filtered, markdown="\n".join(lines), fallback=fallback)
