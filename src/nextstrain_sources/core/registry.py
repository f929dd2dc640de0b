"""Source registry and request path routing.

Routes a request path such as ``/groups/blab/ncov/19B`` to the Source
that serves it, in the same way a storage router dispatches on a URI
scheme.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nextstrain_sources import config
from nextstrain_sources.core.community import CommunitySource
from nextstrain_sources.core.exceptions import (
    AccessDeniedError,
    ConfigurationError,
    UnknownSourceError,
)
from nextstrain_sources.core.groups import make_group_source
from nextstrain_sources.core.sources import CoreSource, CoreStagingSource, UrlDefinedSource


if TYPE_CHECKING:
    from nextstrain_sources.core.models import Principal
    from nextstrain_sources.core.ports import Backends
    from nextstrain_sources.core.resources import Dataset, Narrative
    from nextstrain_sources.core.sources import Source


@dataclass(frozen=True, slots=True)
class RequestPath:
    """A request path split into its source and resource parts.

    Attributes:
        source_name: Registry name of the source.
        source_args: Positional arguments for the source's constructor.
        path_parts: Remaining resource path segments.
        narrative: Whether the path names a narrative rather than a dataset.
    """

    source_name: str
    source_args: tuple[str, ...] = ()
    path_parts: tuple[str, ...] = ()
    narrative: bool = False


def split_path(path: str) -> list[str]:
    """Split a request path into non-empty segments."""
    return [part for part in path.split("/") if part]


def parse_request_path(path: str) -> RequestPath:
    """Work out which source serves a request path.

    Args:
        path: Request path, e.g. "/community/nextstrain/zika-tutorial/zika".

    Returns:
        The RequestPath. Paths without a recognised prefix belong to core.

    Example:
        >>> parse_request_path("/groups/blab/ncov/19B")
        RequestPath(source_name='blab', source_args=(), path_parts=('ncov', '19B'), narrative=False)
    """
    narrative, parts = _take_narratives_marker(split_path(path))
    head, rest = (parts[0], parts[1:]) if parts else ("", [])

    if head == "staging":
        marked, rest = _take_narratives_marker(rest)
        return RequestPath("staging", (), tuple(rest), narrative or marked)

    if head == "community":
        marked, rest = _take_narratives_marker(rest)
        owner = rest[0] if rest else ""
        repo_name = rest[1] if len(rest) > 1 else ""
        return RequestPath("community", (owner, repo_name), tuple(rest[2:]), narrative or marked)

    if head == "fetch":
        marked, rest = _take_narratives_marker(rest)
        authority = rest[0] if rest else ""
        return RequestPath("fetch", (authority,), tuple(rest[1:]), narrative or marked)

    if head == "groups":
        group = rest[0] if rest else ""
        marked, rest = _take_narratives_marker(rest[1:])
        return RequestPath(group, (), tuple(rest), narrative or marked)

    return RequestPath("core", (), tuple(parts), narrative)


def _take_narratives_marker(parts: list[str]) -> tuple[bool, list[str]]:
    if parts[:1] == ["narratives"]:
        return True, parts[1:]
    return False, parts


class SourceRegistry:
    """Maps source names to Source implementations.

    Args:
        sources: Source classes to register.
        backends: Backends handed to every source the registry creates.

    Raises:
        ConfigurationError: If two sources share a name.
    """

    def __init__(self, sources: Iterable[type[Source]], backends: Backends) -> None:
        self._sources: dict[str, type[Source]] = {}
        for source in sources:
            if source.name in self._sources:
                raise ConfigurationError(f"Duplicate source name: {source.name!r}")
            self._sources[source.name] = source
        self.backends = backends

    def get(self, name: str) -> type[Source]:
        """Look up a source implementation by name.

        Raises:
            UnknownSourceError: If no source has that name.
        """
        try:
            return self._sources[name]
        except KeyError:
            raise UnknownSourceError(name, available=self.names()) from None

    def names(self) -> list[str]:
        return sorted(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __iter__(self) -> Iterator[type[Source]]:
        return iter(self._sources.values())

    def groups(
        self, principal: Principal | None = None, *, include_hidden: bool = False
    ) -> list[type[Source]]:
        """Group sources, optionally restricted to those a principal may see."""
        return [
            source
            for source in self._sources.values()
            if source.is_group()
            and (include_hidden or source.source_visible_to_user(principal))
        ]

    def create(self, name: str, *args: str) -> Source:
        """Instantiate a source with the registry's backends."""
        return self.get(name)(*args, backends=self.backends)

    def source_for(self, request: RequestPath) -> Source:
        return self.create(request.source_name, *request.source_args)


def default_registry(backends: Backends) -> SourceRegistry:
    """Registry of the built-in sources plus every configured group."""
    return SourceRegistry(
        [
            CoreSource,
            CoreStagingSource,
            CommunitySource,
            UrlDefinedSource,
            *(make_group_source(entry) for entry in config.GROUPS),
        ],
        backends,
    )


def require_visible(source: Source, principal: Principal | None) -> Source:
    """Return the source if the principal may see it.

    Raises:
        AccessDeniedError: If the source is hidden from the principal.
    """
    if not source.visible_to_user(principal):
        raise AccessDeniedError(source.name)
    return source


def resolve_dataset(registry: SourceRegistry, path: str) -> Dataset:
    """Route a request path to a dataset and resolve any alias."""
    request = parse_request_path(path)
    source = registry.source_for(request)
    return source.dataset(request.path_parts).resolve()


def resolve_narrative(registry: SourceRegistry, path: str) -> Narrative:
    """Route a request path to a narrative."""
    request = parse_request_path(path)
    source = registry.source_for(request)
    return source.narrative(request.path_parts)


def resolve_resource(registry: SourceRegistry, path: str) -> Dataset | Narrative:
    """Route a request path to a dataset or narrative, whichever it names."""
    if parse_request_path(path).narrative:
        return resolve_narrative(registry, path)
    return resolve_dataset(registry, path)
