"""Command line helpers for building and querying the embedding index."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import structlog
import typer

from rhc_rag.embeddings import create_embedder
from rhc_rag.rag import events_for_resource_type
from rhc_rag.store import EmbeddingStore, IndexNotLoadedError

from .config import RHCConfig, load_config
from .loader import build_content_index, file_sha256, search_events

app = typer.Typer(help="RHC workspace utilities")
index_app = typer.Typer(help="Embedding index commands")
app.add_typer(index_app, name="index")

logger = structlog.get_logger(__name__)

WORKSPACE_OPTION = typer.Option(None, "--workspace", "-w", help="Workspace root (defaults to $RHC_WORKSPACE or cwd)")


def _config(workspace: Optional[Path]) -> RHCConfig:
    try:
        return load_config(workspace)
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}")
        raise typer.Exit(code=1) from exc


def _loaded_store(cfg: RHCConfig) -> EmbeddingStore:
    store = EmbeddingStore(cfg.index_path)
    if not store.load_if_absent():
        typer.echo(f"No usable embedding index at {cfg.index_path}; run 'index build' first.")
        raise typer.Exit(code=1)
    return store


@index_app.command("build")
def index_build(workspace: Optional[Path] = WORKSPACE_OPTION) -> None:
    """Rebuild the embedding index from the workspace and persist it."""

    cfg = _config(workspace)
    content = build_content_index(cfg.workspace)
    embedder = create_embedder(cfg.embedding_provider)
    store = EmbeddingStore(cfg.index_path)
    try:
        index_file = store.rebuild(
            content,
            embedder,
            include_docs=cfg.include_docs,
            docs_dir=cfg.docs_dir,
        )
    except OSError as exc:
        typer.echo(f"Embedding rebuild failed: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(f"records: {len(index_file.records)} (dims={index_file.dims}, embedder={embedder.name})")
    for kind, count in sorted(index_file.stats().items()):
        typer.echo(f"  {kind}: {count}")
    typer.echo(f"written: {cfg.index_path}")


@index_app.command("stats")
def index_stats(workspace: Optional[Path] = WORKSPACE_OPTION) -> None:
    """Print descriptive statistics about the persisted index."""

    cfg = _config(workspace)
    store = _loaded_store(cfg)
    index_file = store.index
    if index_file is None:
        typer.echo(f"No usable embedding index at {cfg.index_path}; run 'index build' first.")
        raise typer.Exit(code=1)

    typer.echo(f"version: {index_file.version}")
    typer.echo(f"created: {index_file.created}")
    typer.echo(f"dims: {store.dims}")
    typer.echo(f"records: {len(store)}")
    for kind, count in sorted(store.stats().items()):
        typer.echo(f"  {kind}: {count}")
    typer.echo(f"sha256: {file_sha256(cfg.index_path)[:12]}")


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Free-text query"),
    limit: int = typer.Option(10, "--limit", "-k", min=1),
    kinds: Optional[List[str]] = typer.Option(None, "--kind", help="Restrict to policy, event or doc"),
    resource_type: Optional[str] = typer.Option(None, "--resource-type", help="Resource type hint"),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Rank indexed records by similarity to QUERY."""

    cfg = _config(workspace)
    store = _loaded_store(cfg)
    try:
        results = store.search(query, limit, kinds=kinds or None, resource_type_hint=resource_type)
    except IndexNotLoadedError as exc:  # pragma: no cover - guarded by _loaded_store
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc

    if not results:
        typer.echo("No results.")
        return
    for result in results:
        typer.echo(f"{result.score:.3f}  {result.id}  {result.text}")


@app.command("events")
def events(
    phrase: str = typer.Argument(..., help="Resource type phrase, e.g. 'virtual machines'"),
    limit: Optional[int] = typer.Option(None, "--limit", "-k", min=1),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """List events likely to belong to a resource type."""

    cfg = _config(workspace)
    store = _loaded_store(cfg)
    answer = events_for_resource_type(store, phrase, limit or cfg.max_context_events)
    logger.info(
        "rag.events.answered",
        phrase=phrase,
        results=len(answer.results),
        fallback=answer.fallback,
    )
    typer.echo(answer.markdown)


@app.command("find")
def find(
    term: str = typer.Argument(..., help="Substring matched against EventId and Title"),
    workspace: Optional[Path] = WORKSPACE_OPTION,
) -> None:
    """Keyword search over events without using embeddings."""

    cfg = _config(workspace)
    content = build_content_index(cfg.workspace)
    matches = search_events(content, term)
    typer.echo(f"{len(matches)} match(es)")
    for event in matches:
        typer.echo(f"- {event.event_id} ({event.title or ''}) in {event.policy_file}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
