"""Embedding index lifecycle endpoints."""
from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from rhc_api.rag import ensure_index, get_config, get_store, rebuild_index
from rhc_api.utils import err, ok

router = APIRouter(prefix="/index")
logger = structlog.get_logger(__name__)


@router.post("/build")
def build():
    """Rescan the workspace and rebuild the embedding index from scratch."""

    try:
        index_file = rebuild_index()
    except OSError as exc:
        logger.error("rag.index.build_failed", error=str(exc))
        return JSONResponse(status_code=500, content=err([f"Embedding rebuild failed: {exc}"]))

    return ok(
        {
            "version": index_file.version,
            "created": index_file.created,
            "dims": index_file.dims,
            "records": len(index_file.records),
            "per_kind": index_file.stats(),
            "path": str(get_config().index_path),
        }
    )


@router.get("/stats")
def stats():
    if not ensure_index():
        return JSONResponse(status_code=404, content=err(["No usable embedding index on disk."]))

    store = get_store()
    index_file = store.index
    if index_file is None:
        return JSONResponse(status_code=404, content=err(["No usable embedding index on disk."]))
    return ok(
        {
            "version": index_file.version,
            "created": index_file.created,
            "dims": store.dims,
            "records": len(store),
            "per_kind": store.stats(),
        }
    )
