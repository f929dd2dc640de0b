"""Core domain models for nextstrain_sources.

These models are pure Python dataclasses with no I/O dependencies.
They describe the values exchanged between sources, resources and the
backend adapters.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """A resolved user, as far as access control is concerned.

    Attributes:
        groups: Names of the groups the user belongs to.
    """

    groups: tuple[str, ...] = ()

    @classmethod
    def of(cls, groups: Iterable[str] | None) -> Principal:
        """Build a Principal from any iterable of group names."""
        return cls(groups=tuple(groups or ()))


@dataclass(frozen=True, slots=True)
class AvailabilityCache:
    """Read-only snapshot of known datasets, refreshed by the ingest side.

    A source missing from ``paths`` is unknown, not empty.

    Attributes:
        paths: Source name to canonical dataset paths ("flu/seasonal/h3n2/ha/2y").
        defaults: Source name to a map of path prefix -> next default segment.
        second_tree_options: Source name to a map of path -> second tree paths.

    Example:
        >>> cache = AvailabilityCache.from_mapping({
        ...     "paths": {"core": ["zika"]},
        ...     "defaults": {"core": {}},
        ... })
        >>> cache.knows("core")
        True
    """

    paths: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    defaults: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    second_tree_options: Mapping[str, Mapping[str, tuple[str, ...]]] = field(
        default_factory=dict
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AvailabilityCache:
        """Build a snapshot from the ingest collaborator's JSON document."""
        paths = {
            name: tuple(values or ()) for name, values in (data.get("paths") or {}).items()
        }
        defaults = {
            name: MappingProxyType(dict(prefixes or {}))
            for name, prefixes in (data.get("defaults") or {}).items()
        }
        second = {
            name: MappingProxyType(
                {path: tuple(opts or ()) for path, opts in (options or {}).items()}
            )
            for name, options in (data.get("secondTreeOptions") or {}).items()
        }
        return cls(
            paths=MappingProxyType(paths),
            defaults=MappingProxyType(defaults),
            second_tree_options=MappingProxyType(second),
        )

    def knows(self, source_name: str) -> bool:
        """Whether the snapshot carries any entry for a source."""
        return source_name in self.paths

    def has_path(self, source_name: str, path: str) -> bool:
        return path in self.paths.get(source_name, ())

    def next_default(self, source_name: str, prefix: str) -> str | None:
        """Next segment completing an alias prefix, if one is known."""
        return self.defaults.get(source_name, {}).get(prefix)

    def datasets(self, source_name: str) -> list[str]:
        return list(self.paths.get(source_name, ()))

    def second_trees(self, source_name: str, path: str) -> list[str]:
        return list(self.second_tree_options.get(source_name, {}).get(path, ()))


@dataclass(frozen=True, slots=True)
class SourceInfo:
    """Descriptive record shown on a source's landing page.

    Attributes:
        title: Page title.
        byline: Short description under the title.
        website: Owner's website, if any.
        show_datasets: Whether the page lists datasets.
        show_narratives: Whether the page lists narratives.
        avatar: URL of a logo image.
        overview: Markdown body of the overview document.
        error: Set when the record is a fallback after a failure.
    """

    title: str
    byline: str | None = None
    website: str | None = None
    show_datasets: bool = True
    show_narratives: bool = True
    avatar: str | None = None
    overview: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the wire names used by the front end."""
        record: dict[str, Any] = {
            "title": self.title,
            "byline": self.byline,
            "website": self.website,
            "showDatasets": self.show_datasets,
            "showNarratives": self.show_narratives,
        }
        if self.avatar is not None:
            record["avatar"] = self.avatar
        if self.overview is not None:
            record["overview"] = self.overview
        if self.error is not None:
            record["error"] = self.error
        return record


@dataclass(frozen=True, slots=True)
class RepoEntry:
    """One item of a repository contents listing."""

    name: str
    type: str = "file"

    @property
    def is_file(self) -> bool:
        return self.type == "file"


@dataclass(frozen=True, slots=True)
class StoredObject:
    """An object read from object storage.

    Attributes:
        key: Object key within its bucket.
        body: Raw bytes as stored.
        content_encoding: The object's Content-Encoding, e.g. "gzip".
    """

    key: str
    body: bytes
    content_encoding: str | None = None


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Result of an HTTP request made by the transport."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return self.status == 200


@dataclass(frozen=True, slots=True)
class GroupEntry:
    """A row of the group table.

    Attributes:
        name: Source name, as used in /groups/{name}/ request paths.
        private: Whether membership is required to see the group.
        bucket: Bucket override; defaults to "nextstrain-{name}".
    """

    name: str
    private: bool = False
    bucket: str | None = None

    def __post_init__(self) -> None:
        """Validate the entry."""
        if not self.name:
            raise ValueError("Group name cannot be empty")

    @property
    def bucket_name(self) -> str:
        return self.bucket or f"nextstrain-{self.name}"
