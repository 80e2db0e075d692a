from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Iterator

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from rhc_sdk.models import ContentIndex, EventSummary, PolicyIndexEntry  # noqa: E402


def _write_json(path: Path, payload: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def foo_content() -> ContentIndex:
    """One policy file with a single event."""

    return ContentIndex(
        policies=[
            PolicyIndexEntry(
                file="PolicyFile_Foo.json",
                events=[
                    EventSummary(
                        event_id="Bar",
                        title="Bar Title",
                        reason_type="Unplanned",
                        policy_file="PolicyFile_Foo.json",
                    )
                ],
            )
        ]
    )


@pytest.fixture
def two_policy_content() -> ContentIndex:
    """Compute and Storage policies with one event each."""

    return ContentIndex(
        policies=[
            PolicyIndexEntry(
                file="PolicyFile_Compute.json",
                events=[
                    EventSummary(
                        event_id="DiskUnavailable",
                        title="Disk Unavailable",
                        reason_type="Unplanned",
                        policy_file="PolicyFile_Compute.json",
                    )
                ],
            ),
            PolicyIndexEntry(
                file="PolicyFile_Storage.json",
                events=[
                    EventSummary(
                        event_id="AccountDegraded",
                        title="Account Degraded",
                        reason_type="Planned",
                        policy_file="PolicyFile_Storage.json",
                    )
                ],
            ),
        ]
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace laid out like an RHC source tree."""

    policies = tmp_path / "src" / "source" / "PolicyFiles"
    _write_json(
        policies / "PolicyFile_Storage.json",
        {
            "PersistentEvents": [
                {"EventId": "AccountDegraded", "Title": "Account Degraded", "ReasonType": "Planned"}
            ],
            "TransientEvents": [
                {"EventId": "AccountUnavailable", "Title": "Account Unavailable", "ReasonType": "Unplanned"}
            ],
        },
    )
    (policies / "PolicyFile_Compute.json").write_text(
        "{\n"
        "  // compute events\n"
        '  "PersistentEvents": [\n'
        '    {"EventId": "DiskUnavailable", "Title": "Disk Unavailable", "ReasonType": "Unplanned"},\n'
        "  ],\n"
        "}\n",
        encoding="utf-8",
    )

    configs = tmp_path / "src" / "source" / "ResourceConfigs" / "Prod"
    _write_json(
        configs / "ResourceConfig_Storage.json",
        {
            "ResourceType": "Microsoft.Storage/storageAccounts",
            "PolicyFile": "PolicyFile_Storage.json",
            "MdmAccounts": [{"Region": "westus"}, {"Region": "eastus"}],
        },
    )

    docs = tmp_path / "documentation"
    docs.mkdir()
    (docs / "overview.md").write_text("health monitoring " * 50, encoding="utf-8")
    return tmp_path


@pytest.fixture
def api_workspace(workspace: Path, monkeypatch) -> Iterator[Path]:
    """Point the API at a temporary workspace with fresh cached state."""

    from rhc_api import rag

    monkeypatch.setenv("RHC_WORKSPACE", str(workspace))
    rag.reset()
    try:
        yield workspace
    finally:
        rag.reset()
