"""RHC retrieval FastAPI application."""
from __future__ import annotations

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rhc_rag.index import INDEX_VERSION

from .rag import get_config, get_store
from .routers import chat, health, index, retrieval, status

structlog.configure(processors=[structlog.processors.JSONRenderer()])
logger = structlog.get_logger(__name__)


def _log_config() -> None:
    cfg = get_config()
    logger.info(
        "rhc.config.loaded",
        workspace=str(cfg.workspace),
        embedder=cfg.embedding_provider,
        include_docs=cfg.include_docs,
        max_context_events=cfg.max_context_events,
    )


def _log_rag_index() -> None:
    store = get_store()
    loaded = store.load_if_absent()
    logger.info(
        "rag.index.initialized",
        loaded=loaded,
        format_version=INDEX_VERSION,
        dims=store.dims,
        per_kind=store.stats(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework glue
    _log_config()
    _log_rag_index()
    yield


app = FastAPI(title="RHC Retrieval API", version="0.1.0", lifespan=lifespan)
app.include_router(health.router)
app.include_router(index.router)
app.include_router(retrieval.router)
app.include_router(chat.router)
app.include_router(status.router)


def _cors_enabled() -> bool:
    toggle = os.getenv("RHC_API_ENABLE_CORS", "").strip().lower()
    return toggle in {"1", "true", "yes", "on"}


if _cors_enabled():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
