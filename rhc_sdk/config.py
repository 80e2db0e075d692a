"""Workspace configuration for indexing and retrieval."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .loader import load_yaml

CONFIG_NAME = "rhc.yml"
STORAGE_DIR_NAME = ".rhc"
INDEX_FILE_NAME = "embeddings.json"
DOCS_DIR_NAME = "documentation"

WORKSPACE_ENV = "RHC_WORKSPACE"
INCLUDE_DOCS_ENV = "RHC_INCLUDE_DOCS"
PROVIDER_ENV = "RHC_EMBEDDING_PROVIDER"
MAX_CONTEXT_EVENTS_ENV = "RHC_MAX_CONTEXT_EVENTS"

DEFAULT_PROVIDER = "local-pseudo"
DEFAULT_MAX_CONTEXT_EVENTS = 15

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class RHCConfig:
    """Settings read at index build time."""

    workspace: Path
    include_docs: bool = False
    embedding_provider: str = DEFAULT_PROVIDER
    max_context_events: int = DEFAULT_MAX_CONTEXT_EVENTS

    @property
    def storage_dir(self) -> Path:
        return self.workspace / STORAGE_DIR_NAME

    @property
    def index_path(self) -> Path:
        return self.storage_dir / INDEX_FILE_NAME

    @property
    def docs_dir(self) -> Path:
        return self.workspace / DOCS_DIR_NAME


def _env(name: str) -> str:
    value = os.getenv(name)
    return value.strip() if isinstance(value, str) else ""


def _as_bool(value: Any, *, source: str) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{source}: expected a boolean, got {value!r}")


def _as_positive_int(value: Any, *, source: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{source}: expected an integer, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{source}: must be positive, got {number}")
    return number


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{CONFIG_NAME}: '{key}' must be a mapping")
    return value


def default_workspace() -> Path:
    return Path(_env(WORKSPACE_ENV) or os.getcwd())


def load_config(workspace: Optional[Path | str] = None) -> RHCConfig:
    """Load ``rhc.yml`` from the workspace and apply environment overrides."""

    root = Path(workspace) if workspace is not None else default_workspace()
    cfg = RHCConfig(workspace=root)

    config_path = root / CONFIG_NAME
    if config_path.exists():
        raw = load_yaml(config_path)
        index_section = _section(raw, "index")
        ai_section = _section(raw, "ai")
        if "includeDocs" in index_section:
            cfg.include_docs = _as_bool(index_section["includeDocs"], source="index.includeDocs")
        if ai_section.get("embeddingProvider"):
            cfg.embedding_provider = str(ai_section["embeddingProvider"]).strip()
        if "maxContextEvents" in ai_section:
            cfg.max_context_events = _as_positive_int(
                ai_section["maxContextEvents"], source="ai.maxContextEvents"
            )

    if _env(INCLUDE_DOCS_ENV):
        cfg.include_docs = _as_bool(_env(INCLUDE_DOCS_ENV), source=INCLUDE_DOCS_ENV)
    if _env(PROVIDER_ENV):
        cfg.embedding_provider = _env(PROVIDER_ENV)
    if _env(MAX_CONTEXT_EVENTS_ENV):
        cfg.max_context_events = _as_positive_int(
            _env(MAX_CONTEXT_EVENTS_ENV), source=MAX_CONTEXT_EVENTS_ENV
        )

    return cfg


__all__ = ["RHCConfig", "default_workspace", "load_config"]
