from __future__ import annotations

import math

import pytest

from rhc_rag.embeddings import (
    Embedder,
    LocalPseudoEmbedder,
    RemoteStubEmbedder,
    create_embedder,
    normalize,
    pseudo_embed,
)


def test_normalize_splits_camel_case_and_separators() -> None:
    assert normalize("virtualMachines.list_all-now") == ["virtual", "machines", "list", "all", "now"]


def test_normalize_drops_punctuation_and_empty_input() -> None:
    assert normalize("Disk (Unavailable)!") == ["disk", "unavailable"]
    assert normalize("") == []
    assert normalize("  ...___ ") == []


def test_normalize_keeps_uppercase_runs_together() -> None:
    assert normalize("VMRestart") == ["vmrestart"]


def test_pseudo_embed_is_deterministic() -> None:
    text = "PolicyFile_Foo.json Foo"
    assert pseudo_embed(text, 128) == pseudo_embed(text, 128)


@pytest.mark.parametrize("dims", [1, 7, 128, 1536])
def test_pseudo_embed_is_unit_length(dims: int) -> None:
    vector = pseudo_embed("Bar Bar Title Unplanned Foo", dims)
    assert len(vector) == dims
    assert math.sqrt(sum(value * value for value in vector)) == pytest.approx(1.0)


def test_pseudo_embed_without_tokens_is_zero_vector() -> None:
    vector = pseudo_embed("!!! ---", 16)
    assert vector == [0.0] * 16


def test_pseudo_embed_counts_repeated_tokens() -> None:
    vector = pseudo_embed("bar bar", 128)
    # "bar" hashes to 97299, bucket 19 of 128.
    assert vector[19] == pytest.approx(1.0)
    assert sum(1 for value in vector if value) == 1


def test_pseudo_embed_rejects_non_positive_dims() -> None:
    with pytest.raises(ValueError):
        pseudo_embed("bar", 0)


def test_provider_variants_share_math_but_not_dims() -> None:
    local = LocalPseudoEmbedder()
    remote = RemoteStubEmbedder()
    assert local.dims == 128
    assert remote.dims == 1536
    assert local.embed(["bar", "foo"]) == [pseudo_embed("bar", 128), pseudo_embed("foo", 128)]
    assert remote.embed(["bar"]) == [pseudo_embed("bar", 1536)]


def test_create_embedder_selects_by_provider_name() -> None:
    assert isinstance(create_embedder("azureOpenAI"), RemoteStubEmbedder)
    assert isinstance(create_embedder("local-pseudo"), LocalPseudoEmbedder)
    assert isinstance(create_embedder("something-else"), LocalPseudoEmbedder)
    assert isinstance(create_embedder(), Embedder)
