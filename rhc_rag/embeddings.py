"""Deterministic pseudo-embeddings for offline retrieval."""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import List, Protocol, runtime_checkable

import numpy as np

LOCAL_PROVIDER = "local-pseudo"
REMOTE_PROVIDER = "azureOpenAI"

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_SEPARATORS = re.compile(r"[._-]+")
_NON_TOKEN = re.compile(r"[^a-z0-9\s]")

_HASH_MOD = 2**32


@runtime_checkable
class Embedder(Protocol):
    """Protocol for embedding backends used by the index builder."""

    name: str
    dims: int

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Encode input texts into a list of float vectors."""
        raise NotImplementedError


def normalize(text: str) -> List[str]:
    """Split text into lowercase alphanumeric tokens.

    ``virtualMachines.list_all`` becomes ``["virtual", "machines", "list", "all"]``.
    """

    expanded = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    expanded = _SEPARATORS.sub(" ", expanded)
    cleaned = _NON_TOKEN.sub(" ", expanded.lower())
    return cleaned.split()


def _token_hash(token: str) -> int:
    value = 0
    for char in token:
        value = (value * 31 + ord(char)) % _HASH_MOD
    return value


def pseudo_embed(text: str, dims: int) -> List[float]:
    """Hash tokens into ``dims`` buckets and return an L2-normalised vector.

    Text without tokens yields the all-zero vector.
    """

    if dims <= 0:
        raise ValueError("dims must be a positive integer")

    accumulator = np.zeros(dims, dtype=np.float64)
    for token in normalize(text):
        accumulator[_token_hash(token) % dims] += 1.0

    norm = float(np.linalg.norm(accumulator))
    if norm > 0:
        accumulator /= norm
    return accumulator.tolist()


@dataclass
class LocalPseudoEmbedder:
    """Local hash-based embedder with a small vector size."""

    dims: int = 128
    name: str = LOCAL_PROVIDER

    def embed(self, texts: List[str]) -> List[List[float]]:
        return [pseudo_embed(text, self.dims) for text in texts]


@dataclass
class RemoteStubEmbedder:
    """Placeholder for a hosted embedding model.

    Keeps the hosted model's vector size but computes vectors locally; no
    network calls are made.
    """

    dims: int = 1536
    name: str = REMOTE_PROVIDER

    def embed(self, texts: List[str]) -> List[List[float]]:
        return [pseudo_embed(text, self.dims) for text in texts]


def create_embedder(provider: str = LOCAL_PROVIDER) -> Embedder:
    """Return the embedder configured by ``provider``."""

    if provider == REMOTE_PROVIDER:
        return RemoteStubEmbedder()
    return LocalPseudoEmbedder()
