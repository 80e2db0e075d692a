"""Public SDK surface for RHC workspace tooling."""
from __future__ import annotations

from .config import RHCConfig, default_workspace, load_config
from .loader import (
    build_content_index,
    decode_bytes,
    file_sha256,
    load_policy_file,
    load_resource_config,
    load_yaml,
    parse_jsonc,
    search_events,
)
from .models import ContentIndex, EventSummary, PolicyIndexEntry, ResourceConfigIndexEntry

__all__ = [
    "__version__",
    "ContentIndex",
    "EventSummary",
    "PolicyIndexEntry",
    "RHCConfig",
    "ResourceConfigIndexEntry",
    "build_content_index",
    "decode_bytes",
    "default_workspace",
    "file_sha256",
    "load_config",
    "load_policy_file",
    "load_resource_config",
    "load_yaml",
    "parse_jsonc",
    "search_events",
]

__version__ = "0.1.0"
