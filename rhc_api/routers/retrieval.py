"""Retrieval endpoints over the embedding index."""
from __future__ import annotations

from typing import List, Literal, Optional

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from rhc_api.rag import ensure_index, get_config, get_store
from rhc_api.utils import err, ok
from rhc_rag.models import SimilarityResult
from rhc_rag.rag import events_for_resource_type

router = APIRouter(prefix="/retrieval")
logger = structlog.get_logger(__name__)

NOT_BUILT = "Embedding index not built; POST /index/build first."


class RetrievalSearchIn(BaseModel):
    query: str
    k: int = Field(default=10, ge=1, le=100)
    kinds: Optional[List[Literal["policy", "event", "doc"]]] = None
    resource_type: Optional[str] = None


class EventDiscoveryIn(BaseModel):
    phrase: str = Field(min_length=1)
    k: Optional[int] = Field(default=None, ge=1, le=100)


def _serialize(result: SimilarityResult) -> dict:
    return {
        "id": result.id,
        "score": round(result.score, 6),
        "text": result.text,
        "meta": result.meta,
    }


@router.post("/search")
def search(payload: RetrievalSearchIn):
    if not ensure_index():
        return JSONResponse(status_code=409, content=err([NOT_BUILT]))

    results = get_store().search(
        payload.query,
        payload.k,
        kinds=payload.kinds,
        resource_type_hint=payload.resource_type,
    )
    return ok({"hits": [_serialize(result) for result in results]})


@router.post("/events")
def events(payload: EventDiscoveryIn):
    """Event discovery for a resource type phrase."""

    if not ensure_index():
        return JSONResponse(status_code=409, content=err([NOT_BUILT]))

    limit = payload.k or get_config().max_context_events
    answer = events_for_resource_type(get_store(), payload.phrase, limit)
    logger.info(
        "rag.events.answered",
        phrase=payload.phrase,
        results=len(answer.results),
        fallback=answer.fallback,
    )
    warnings = ["low-confidence fallback results"] if answer.fallback else []
    return ok(
        {
            "hits": [_serialize(result) for result in answer.results],
            "markdown": answer.markdown,
            "fallback": answer.fallback,
        },
        warnings=warnings,
    )
