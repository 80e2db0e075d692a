"""Pydantic models for the workspace content index."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventSummary(BaseModel):
    """Lightweight projection of an event declared in a policy file."""

    model_config = ConfigDict(populate_by_name=True)

    event_id: Optional[str] = Field(default=None, alias="eventId")
    title: Optional[str] = None
    reason_type: Optional[str] = Field(default=None, alias="reasonType")
    policy_file: Optional[str] = Field(default=None, alias="policyFile")


class PolicyIndexEntry(BaseModel):
    """A policy file and the events discovered inside it."""

    file: str
    events: List[EventSummary] = Field(default_factory=list)


class ResourceConfigIndexEntry(BaseModel):
    """An environment specific resource configuration file."""

    model_config = ConfigDict(populate_by_name=True)

    file: str
    resource_type: Optional[str] = Field(default=None, alias="resourceType")
    policy_file: Optional[str] = Field(default=None, alias="policyFile")
    region_count: Optional[int] = Field(default=None, alias="regionCount")


class ContentIndex(BaseModel):
    """Snapshot of every policy and resource config found in a workspace."""

    model_config = ConfigDict(populate_by_name=True)

    policies: List[PolicyIndexEntry] = Field(default_factory=list)
    resource_configs: List[ResourceConfigIndexEntry] = Field(
        default_factory=list, alias="resourceConfigs"
    )
    timestamp: float = 0.0

    def event_count(self) -> int:
        return sum(len(policy.events) for policy in self.policies)
