"""Chat prompt routing: intent detection followed by event discovery."""
from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rhc_api.rag import ensure_index, get_config, get_store, rebuild_index
from rhc_api.utils import err, ok
from rhc_rag.intent import detect_intent, extract_resource_phrase
from rhc_rag.rag import events_for_resource_type

router = APIRouter(prefix="/chat")
logger = structlog.get_logger(__name__)


class ChatPromptIn(BaseModel):
    prompt: str


@router.post("/intent")
def chat_intent(payload: ChatPromptIn):
    raw = payload.prompt.strip()
    detection = detect_intent(raw)
    data = {
        "intent": detection.intent,
        "resource_type_query": detection.resource_type_query,
        "markdown": None,
    }

    if detection.intent != "eventDiscovery":
        return ok(data)

    phrase = extract_resource_phrase(detection.resource_type_query or "")
    if not phrase:
        data["markdown"] = (
            "Could not extract resource type phrase. "
            "Try: `what are the possible events for <ResourceType>`"
        )
        return ok(data)

    warnings = []
    if not ensure_index():
        try:
            rebuild_index()
        except OSError as exc:
            logger.error("chat.index.build_failed", error=str(exc))
            return JSONResponse(status_code=500, content=err([f"Embedding rebuild failed: {exc}"]))
        warnings.append("Built embedding index on first use.")

    answer = events_for_resource_type(get_store(), phrase, get_config().max_context_events)
    logger.info("chat.event_discovery", phrase=phrase, results=len(answer.results), fallback=answer.fallback)
    data["markdown"] = answer.markdown
    data["fallback"] = answer.fallback
    return ok(data, warnings=warnings)
