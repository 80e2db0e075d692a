"""Status endpoint exposing runtime metadata."""
from __future__ import annotations

import platform
import sys
import time

from fastapi import APIRouter

from rhc_api.rag import get_config, get_store
from rhc_rag.index import INDEX_VERSION
from rhc_sdk import __version__ as sdk_version

_started = time.time()
router = APIRouter()


@router.get("/status")
def status() -> dict[str, object]:
    """Return process health and index metadata."""

    cfg = get_config()
    store = get_store()
    uptime = round(time.time() - _started, 2)
    return {
        "ok": True,
        "data": {
            "sdk_version": sdk_version,
            "workspace": str(cfg.workspace),
            "embedder": cfg.embedding_provider,
            "include_docs": cfg.include_docs,
            "index": {
                "format_version": INDEX_VERSION,
                "loaded": store.loaded,
                "dims": store.dims,
                "per_kind": store.stats(),
                "path": str(store.path),
            },
            "uptime_sec": uptime,
            "build": {
                "python": sys.version.split()[0],
                "platform": platform.platform(),
                "fastapi": "installed",
            },
        },
        "warnings": [],
        "errors": [],
    }
