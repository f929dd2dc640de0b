"""CLI commands for nextstrain_sources."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import typer

from nextstrain_sources.adapters import create_backends
from nextstrain_sources.config import load_availability
from nextstrain_sources.core.exceptions import SourcesError
from nextstrain_sources.core.models import Principal
from nextstrain_sources.core.ports import Backends
from nextstrain_sources.core.registry import (
    SourceRegistry,
    default_registry,
    parse_request_path,
    require_visible,
)
from nextstrain_sources.core.resources import Dataset


T = TypeVar("T")

app = typer.Typer(
    name="nextstrain-sources",
    help="Resolve Nextstrain request paths to datasets and narratives.",
    no_args_is_help=True,
)

AVAILABILITY_OPTION = typer.Option(
    None,
    "--availability",
    "-a",
    help="Availability snapshot JSON. Defaults to .nextstrain-sources/availability.json.",
)
GROUP_OPTION = typer.Option(
    None,
    "--group",
    "-g",
    help="Group membership of the user to resolve as (repeatable).",
)


def build_registry(availability: Path | None = None) -> SourceRegistry:
    """Create the default registry for CLI commands.

    Raises:
        typer.Exit: If the availability snapshot can't be loaded.
    """
    try:
        snapshot = load_availability(availability)
    except SourcesError as e:
        fail(e)
    return default_registry(create_backends(availability=snapshot))


def run(coro: Coroutine[Any, Any, T], backends: Backends) -> T:
    """Run a coroutine, turning library errors into a clean exit.

    The backends' connections are closed on the same event loop once the
    coroutine finishes, whatever the outcome.
    """

    async def _run_and_close() -> T:
        try:
            return await coro
        finally:
            await backends.aclose()

    try:
        return asyncio.run(_run_and_close())
    except SourcesError as e:
        fail(e)


def fail(error: SourcesError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    raise typer.Exit(1) from None


@app.command()
def resolve(
    path: str = typer.Argument(..., help="Request path, e.g. /groups/blab/ncov/19B."),
    types: list[str] | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Subresource types to show URLs for. Defaults to main (or md).",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Also check that the resource exists.",
    ),
    availability: Path | None = AVAILABILITY_OPTION,
    groups: list[str] | None = GROUP_OPTION,
) -> None:
    """Resolve a request path and print its URLs."""
    registry = build_registry(availability)
    principal = Principal.of(groups) if groups else None

    async def _resolve() -> None:
        request = parse_request_path(path)
        source = require_visible(registry.source_for(request), principal)
        if request.narrative:
            resource = source.narrative(request.path_parts)
        else:
            resource = source.dataset(request.path_parts).resolve()

        typer.echo(f"Source: {source.name}")
        typer.echo(f"Path: {resource.path}")
        if isinstance(resource, Dataset) and resource.path_parts != request.path_parts:
            typer.echo(f"  (alias of /{'/'.join(request.path_parts)})")

        for type in types or [resource.subresource_class.valid_types[0]]:
            subresource = resource.subresource(type)
            typer.echo(f"  {type}: {await subresource.url()}")

        if check:
            exists = await resource.exists()
            typer.echo(f"Exists: {'yes' if exists else 'no'}")
            if not exists:
                raise typer.Exit(1)

    run(_resolve(), registry.backends)


def main() -> None:
    """Entry point for the CLI."""
    app()
