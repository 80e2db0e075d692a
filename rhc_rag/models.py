"""Pydantic models for the persisted embedding index."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RecordKind = Literal["policy", "event", "doc"]


class EmbeddingRecord(BaseModel):
    """Single retrievable unit with its embedded text and vector."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: RecordKind
    resource_type: Optional[str] = Field(default=None, alias="resourceType")
    text: str
    vector: List[float]
    meta: Dict[str, Any] = Field(default_factory=dict)


class EmbeddingIndexFile(BaseModel):
    """Versioned aggregate written to and read from the index store."""

    version: int
    created: str
    dims: int
    records: List[EmbeddingRecord] = Field(default_factory=list)

    def stats(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self.records:
            counts[record.kind] = counts.get(record.kind, 0) + 1
        return counts


@dataclass
class SimilarityResult:
    """Search result entry."""

    id: str
    score: float
    text: str
    meta: Dict[str, Any] = field(default_factory=dict)
