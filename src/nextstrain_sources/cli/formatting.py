"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table
from rich.text import Text


if TYPE_CHECKING:
    from nextstrain_sources.core.models import Principal, SourceInfo
    from nextstrain_sources.core.sources import Source


def _source_kind(source: type[Source]) -> str:
    if not source.is_group():
        return "built-in"
    return "public group" if source.source_visible_to_user(None) else "private group"


def sources_table(sources: list[type[Source]], principal: Principal | None) -> Table:
    """Build a table of sources with their kind and visibility.

    Args:
        sources: Source classes to list.
        principal: User to evaluate visibility for.

    Returns:
        Rich Table with one row per source.
    """
    table = Table()
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Visible")
    for source in sorted(sources, key=lambda s: s.name.lower()):
        visible = source.source_visible_to_user(principal)
        table.add_row(
            source.name,
            _source_kind(source),
            Text("yes", style="green") if visible else Text("no", style="red"),
        )
    return table


def info_lines(info: SourceInfo) -> list[str]:
    """Render a SourceInfo as plain lines."""
    lines = [info.title]
    if info.byline:
        lines.append(f"  {info.byline.strip()}")
    if info.website:
        lines.append(f"  Website: {info.website}")
    lines.append(f"  Datasets shown: {'yes' if info.show_datasets else 'no'}")
    lines.append(f"  Narratives shown: {'yes' if info.show_narratives else 'no'}")
    if info.avatar:
        lines.append(f"  Avatar: {info.avatar}")
    if info.error:
        lines.append(f"  Error: {info.error}")
    return lines
