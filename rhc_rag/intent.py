"""Regex-based intent classification for chat prompts."""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal, Optional

Intent = Literal["eventDiscovery", "scaffoldResourceType", "none"]

_EVENT_DISCOVERY_PATTERNS = [
    re.compile(
        r"(what|list|show)\s+(are\s+)?(the\s+)?(possible|available)?\s*(events|event types)\s+(for|of)\s+(.+)",
        re.IGNORECASE,
    ),
    re.compile(r"possible\s+(events|event types)\s+for\s+(.+)", re.IGNORECASE),
]

_SCAFFOLD_PATTERNS = [
    re.compile(
        r"(create|onboard|add)\s+(a\s+)?(new\s+)?(resource\s*type|resourcetype)(\s+(.+))?",
        re.IGNORECASE,
    ),
]

_LEADING_FOR = re.compile(r"^for\s+", re.IGNORECASE)
_PHRASE_NOISE = re.compile(r"[^A-Za-z0-9_.\-\s]")


@dataclass
class IntentDetection:
    intent: Intent
    resource_type_query: Optional[str] = None


def detect_intent(raw: str) -> IntentDetection:
    """Classify a prompt as event discovery, resource type scaffolding or nothing."""

    for pattern in _EVENT_DISCOVERY_PATTERNS:
        match = pattern.search(raw)
        if match:
            phrase = (match.group(match.re.groups) or "").strip()
            return IntentDetection("eventDiscovery", phrase)

    for pattern in _SCAFFOLD_PATTERNS:
        match = pattern.search(raw)
        if match:
            name = (match.group(6) or "").strip()
            return IntentDetection("scaffoldResourceType", name or None)

    return IntentDetection("none")


def extract_resource_phrase(raw: str) -> str:
    """Clean a captured resource type phrase for use as a search query."""

    phrase = _LEADING_FOR.sub("", raw)
    return _PHRASE_NOISE.sub(" ", phrase).strip()
