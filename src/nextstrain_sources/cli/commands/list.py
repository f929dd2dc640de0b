"""Listing commands for CLI."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from nextstrain_sources.cli.formatting import info_lines, sources_table
from nextstrain_sources.cli.main import (
    AVAILABILITY_OPTION,
    GROUP_OPTION,
    app,
    build_registry,
    run,
)
from nextstrain_sources.core.models import Principal
from nextstrain_sources.core.registry import parse_request_path, require_visible


SOURCE_ARGUMENT = typer.Argument(
    ...,
    help="Source prefix, e.g. /staging, /groups/blab or /community/owner/repo. "
    "Anything else means core.",
)


@app.command(name="sources")
def list_sources(
    groups: list[str] | None = GROUP_OPTION,
    all_sources: bool = typer.Option(
        False,
        "--all",
        help="Include sources hidden from the user.",
    ),
) -> None:
    """List registered sources."""
    registry = build_registry()
    principal = Principal.of(groups) if groups else None

    sources = [
        source
        for source in registry
        if all_sources or source.source_visible_to_user(principal)
    ]

    # Force terminal output to ensure tables render correctly in all environments
    console = Console(force_terminal=True)
    console.print(sources_table(sources, principal))


@app.command(name="datasets")
def list_datasets(
    source: str = SOURCE_ARGUMENT,
    availability: Path | None = AVAILABILITY_OPTION,
    groups: list[str] | None = GROUP_OPTION,
) -> None:
    """List datasets available from a source."""
    registry = build_registry(availability)
    principal = Principal.of(groups) if groups else None

    async def _list() -> list[str]:
        instance = registry.source_for(parse_request_path(source))
        return await require_visible(instance, principal).available_datasets()

    paths = run(_list(), registry.backends)
    if not paths:
        typer.echo("No datasets found.")
        return
    for path in paths:
        typer.echo(path)


@app.command(name="narratives")
def list_narratives(
    source: str = SOURCE_ARGUMENT,
    groups: list[str] | None = GROUP_OPTION,
) -> None:
    """List narratives available from a source."""
    registry = build_registry()
    principal = Principal.of(groups) if groups else None

    async def _list() -> list[str]:
        instance = registry.source_for(parse_request_path(source))
        return await require_visible(instance, principal).available_narratives()

    paths = run(_list(), registry.backends)
    if not paths:
        typer.echo("No narratives found.")
        return
    for path in paths:
        typer.echo(path)


@app.command(name="info")
def show_info(
    source: str = SOURCE_ARGUMENT,
    groups: list[str] | None = GROUP_OPTION,
) -> None:
    """Show a source's descriptive information."""
    registry = build_registry()
    principal = Principal.of(groups) if groups else None

    async def _info() -> list[str]:
        instance = registry.source_for(parse_request_path(source))
        return info_lines(await require_visible(instance, principal).get_info())

    for line in run(_info(), registry.backends):
        typer.echo(line)
