from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from rhc_sdk.cli import app

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def test_index_build_and_stats(workspace: Path, monkeypatch) -> None:
    monkeypatch.delenv("RHC_INCLUDE_DOCS", raising=False)
    monkeypatch.delenv("RHC_EMBEDDING_PROVIDER", raising=False)
    (workspace / "rhc.yml").write_text("index:\n  includeDocs: true\n", encoding="utf-8")

    result = _invoke("index", "build", "--workspace", str(workspace))
    assert result.exit_code == 0, result.output
    assert "records: 7 (dims=128, embedder=local-pseudo)" in result.output
    assert "doc: 2" in result.output

    result = _invoke("index", "stats", "--workspace", str(workspace))
    assert result.exit_code == 0, result.output
    assert "version: 2" in result.output
    assert "records: 7" in result.output


def test_search_without_index_fails(workspace: Path) -> None:
    result = _invoke("search", "account", "--workspace", str(workspace))
    assert result.exit_code == 1
    assert "run 'index build' first" in result.output


def test_search_and_events(workspace: Path, monkeypatch) -> None:
    monkeypatch.delenv("RHC_INCLUDE_DOCS", raising=False)
    monkeypatch.delenv("RHC_EMBEDDING_PROVIDER", raising=False)
    assert _invoke("index", "build", "--workspace", str(workspace)).exit_code == 0

    result = _invoke("search", "disk", "--kind", "event", "-k", "1", "--workspace", str(workspace))
    assert result.exit_code == 0, result.output
    assert "event:PolicyFile_Compute.json#DiskUnavailable" in result.output

    result = _invoke("events", "compute", "--workspace", str(workspace))
    assert result.exit_code == 0, result.output
    assert "Events potentially related to **compute**" in result.output
    assert "DiskUnavailable" in result.output


def test_find_uses_keyword_search(workspace: Path) -> None:
    result = _invoke("find", "unavailable", "--workspace", str(workspace))
    assert result.exit_code == 0, result.output
    assert "2 match(es)" in result.output
    assert "AccountUnavailable" in result.output


def test_malformed_config_is_reported(workspace: Path) -> None:
    (workspace / "rhc.yml").write_text("index: [unclosed\n", encoding="utf-8")
    result = _invoke("index", "build", "--workspace", str(workspace))
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_stats_without_index_fails(workspace: Path) -> None:
    result = _invoke("index", "stats", "--workspace", str(workspace))
    assert result.exit_code == 1
    assert "run 'index build' first" in result.output
