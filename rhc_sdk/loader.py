"""Helpers for loading policy files and resource configs from a workspace."""
from __future__ import annotations

import hashlib
import json
from pathlib import Path
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import structlog
import yaml

from .models import ContentIndex, EventSummary, PolicyIndexEntry, ResourceConfigIndexEntry

POLICY_GLOB = "src/source/PolicyFiles/PolicyFile_*.json"
RESOURCE_CONFIG_DIR = "src/source/ResourceConfigs"
RESOURCE_CONFIG_GLOB = "ResourceConfig_*.json"
EVENT_SECTIONS = ("PersistentEvents", "TransientEvents")

logger = structlog.get_logger(__name__)


def load_yaml(path: Path | str) -> Dict[str, Any]:
    """Load a YAML file as a dictionary."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of {p}, got {type(data)!r}")
    return data


def file_sha256(path: Path) -> str:
    """Compute a SHA-256 digest for the supplied file path."""

    data = path.read_bytes()
    return hashlib.sha256(data).hexdigest()


def decode_bytes(raw: bytes) -> str:
    """Decode file content, honouring UTF-16 byte order marks."""

    if raw[:2] == b"\xff\xfe":
        return raw[2:].decode("utf-16-le", errors="replace")
    if raw[:2] == b"\xfe\xff":
        return raw[2:].decode("utf-16-be", errors="replace")
    if raw[:3] == b"\xef\xbb\xbf":
        raw = raw[3:]
    return raw.decode("utf-8", errors="replace")


def _strip_comments(text: str) -> str:
    out: List[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            out.append(char)
            if char == "\\" and index + 1 < length:
                out.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            out.append(char)
            index += 1
            continue
        if text.startswith("//", index):
            end = text.find("\n", index)
            index = length if end == -1 else end
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            # Keep newlines so error positions still point at the right line.
            block = text[index : length if end == -1 else end + 2]
            out.append("\n" * block.count("\n"))
            index = length if end == -1 else end + 2
            continue
        out.append(char)
        index += 1
    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out: List[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            out.append(char)
            continue
        if char == '"':
            in_string = True
        elif char == ",":
            ahead = index + 1
            while ahead < len(text) and text[ahead].isspace():
                ahead += 1
            if ahead < len(text) and text[ahead] in "}]":
                continue
        out.append(char)
    return "".join(out)


_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = {"true": True, "false": False, "null": None}
_MISSING = object()


class _RecoveringParser:
    """Best-effort JSON reader that keeps whatever it can make sense of.

    Missing delimiters, stray characters and unterminated containers are
    recorded as ``message@line:col`` anomalies instead of aborting the parse.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.anomalies: List[str] = []

    def _note(self, message: str) -> None:
        at = self.pos
        line = self.text.count("\n", 0, at) + 1
        column = at - self.text.rfind("\n", 0, at)
        self.anomalies.append(f"{message}@{line}:{column}")

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def parse(self) -> Optional[Any]:
        value = self._value()
        self._skip_ws()
        if self.pos < len(self.text):
            self._note("Extra data")
        return None if value is _MISSING else value

    def _value(self) -> Any:
        self._skip_ws()
        char = self._peek()
        if not char:
            self._note("Expecting value")
            return _MISSING
        if char == "{":
            return self._object()
        if char == "[":
            return self._array()
        if char == '"':
            return self._string()
        match = _NUMBER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            token = match.group(0)
            return float(token) if any(c in token for c in ".eE") else int(token)
        for literal, result in _LITERALS.items():
            if self.text.startswith(literal, self.pos):
                self.pos += len(literal)
                return result
        self._note("Unexpected character")
        self.pos += 1
        return _MISSING

    def _string(self) -> str:
        try:
            value, self.pos = json.decoder.scanstring(self.text, self.pos + 1, False)
        except json.JSONDecodeError:
            self._note("Unterminated string")
            value, self.pos = self.text[self.pos + 1 :], len(self.text)
        return value

    def _object(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        self.pos += 1
        while True:
            self._skip_ws()
            char = self._peek()
            if not char:
                self._note("Unterminated object")
                return result
            if char == "}":
                self.pos += 1
                return result
            if char == ",":
                self.pos += 1
                continue
            if char != '"':
                self._note("Expecting property name enclosed in double quotes")
                self.pos += 1
                continue
            key = self._string()
            self._skip_ws()
            if self._peek() == ":":
                self.pos += 1
            else:
                self._note("Expecting ':' delimiter")
            value = self._value()
            if value is not _MISSING:
                result[key] = value
            self._skip_ws()
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() not in ("}", ""):
                self._note("Expecting ',' delimiter")

    def _array(self) -> List[Any]:
        result: List[Any] = []
        self.pos += 1
        while True:
            self._skip_ws()
            char = self._peek()
            if not char:
                self._note("Unterminated array")
                return result
            if char == "]":
                self.pos += 1
                return result
            if char == ",":
                self.pos += 1
                continue
            value = self._value()
            if value is not _MISSING:
                result.append(value)
            self._skip_ws()
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() not in ("]", ""):
                self._note("Expecting ',' delimiter")


def parse_jsonc(text: str) -> Tuple[Optional[Any], List[str]]:
    """Parse JSON that may contain comments, trailing commas and syntax slips.

    Well-formed input goes through :mod:`json`; anything else is salvaged by a
    recovering reader. Returns the value (``None`` when nothing could be read)
    and a list of ``message@line:col`` anomaly strings. Never raises for bad
    input.
    """

    stripped = _strip_comments(text)
    try:
        return json.loads(_strip_trailing_commas(stripped)), []
    except json.JSONDecodeError:
        parser = _RecoveringParser(stripped)
        value = parser.parse()
        return value, parser.anomalies


def _read_jsonc(path: Path, *, label: str) -> Optional[Any]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        logger.error("content.file.unreadable", kind=label, path=str(path), error=str(exc))
        return None

    text = decode_bytes(raw)
    parsed, anomalies = parse_jsonc(text)
    if anomalies:
        hint = None
        if raw[:2] == b"{\x00":
            hint = "looks like UTF-16 LE without BOM; convert to UTF-8"
        elif raw[:64].count(0) > 10:
            hint = "suspicious high NUL count; possible UTF-16 without BOM"
        logger.warning(
            "content.file.anomalies",
            kind=label,
            path=str(path),
            anomalies=anomalies,
            first_bytes=raw[:16].hex(" "),
            hint=hint,
        )
    return parsed


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def load_policy_file(path: Path) -> PolicyIndexEntry:
    """Extract the events declared in a policy file.

    Unreadable or unparsable files produce an entry with no events.
    """

    path = Path(path)
    data = _read_jsonc(path, label="policy")
    events: List[EventSummary] = []
    if isinstance(data, dict):
        for section in EVENT_SECTIONS:
            entries = data.get(section) or []
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                events.append(
                    EventSummary(
                        event_id=_optional_str(entry.get("EventId")),
                        title=_optional_str(entry.get("Title")),
                        reason_type=_optional_str(entry.get("ReasonType")),
                        policy_file=path.name,
                    )
                )
    return PolicyIndexEntry(file=path.name, events=events)


def load_resource_config(path: Path, root: Path) -> ResourceConfigIndexEntry:
    """Extract the resource type, policy reference and region count of a config."""

    path = Path(path)
    relative = path.relative_to(root).as_posix()
    data = _read_jsonc(path, label="resource_config")
    if not isinstance(data, dict):
        return ResourceConfigIndexEntry(file=relative)

    accounts = data.get("MdmAccounts")
    return ResourceConfigIndexEntry(
        file=relative,
        resource_type=_optional_str(data.get("ResourceType")),
        policy_file=_optional_str(data.get("PolicyFile")),
        region_count=len(accounts) if isinstance(accounts, list) else None,
    )


def build_content_index(root: Path | str) -> ContentIndex:
    """Scan a workspace for policy files and resource configs.

    Always a full rebuild; files are visited in sorted path order.
    """

    root = Path(root)
    policies = [load_policy_file(path) for path in sorted(root.glob(POLICY_GLOB))]
    config_dir = root / RESOURCE_CONFIG_DIR
    resource_configs = [
        load_resource_config(path, root) for path in sorted(config_dir.rglob(RESOURCE_CONFIG_GLOB))
    ] if config_dir.is_dir() else []

    index = ContentIndex(policies=policies, resource_configs=resource_configs, timestamp=time.time())
    logger.info(
        "content.index.built",
        root=str(root),
        policies=len(policies),
        events=index.event_count(),
        resource_configs=len(resource_configs),
    )
    return index


def search_events(index: ContentIndex, query: str) -> List[EventSummary]:
    """Case-insensitive substring search over event ids and titles."""

    needle = query.lower()
    matches: List[EventSummary] = []
    for policy in index.policies:
        for event in policy.events:
            if (event.event_id and needle in event.event_id.lower()) or (
                event.title and needle in event.title.lower()
            ):
                matches.append(event)
    return matches
