"""Resources (datasets and narratives) and their subresources.

A Resource maps an ordered list of path parts from a Source onto backend
keys. Each physical file making up a Resource is a Subresource, which
knows its own file name and asks its Source for a URL.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar, Self

from nextstrain_sources.core.exceptions import (
    InvalidSubresourceError,
    NoResourcePathError,
)


if TYPE_CHECKING:
    from nextstrain_sources.core.sources import Source


logger = logging.getLogger(__name__)

# Upper bound on alias completions followed by Dataset.resolve()
MAX_ALIAS_DEPTH = 32


class Resource(ABC):
    """An addressable item of a Source.

    Attributes:
        source: The Source the resource belongs to.
        path_parts: Path segments from the request, in order.

    Raises:
        NoResourcePathError: If the resource has no base parts.
    """

    subresource_class: ClassVar[type[Subresource]]

    def __init__(self, source: Source, path_parts: Sequence[str]) -> None:
        self.source = source
        self.path_parts = tuple(path_parts)

        # Checked on base_parts rather than path_parts since subclasses may
        # contribute parts of their own.
        if not self.base_parts:
            raise NoResourcePathError(source.name)

    @property
    def base_parts(self) -> tuple[str, ...]:
        return self.path_parts

    @property
    def base_name(self) -> str:
        return "_".join(self.base_parts)

    @property
    def path(self) -> str:
        """Slash-joined request path, as listed by sources."""
        return "/".join(self.path_parts)

    def subresource(self, type: str) -> Subresource:
        """Build a validated subresource of this resource.

        Raises:
            InvalidSubresourceError: If ``type`` isn't valid for this kind.
        """
        return self.subresource_class(self, type)

    @abstractmethod
    async def exists(self) -> bool:
        """Check whether the resource is present in its backend."""

    async def _subresource_exists(self, type: str) -> bool:
        method = "HEAD"
        url = await self.subresource(type).url(method)
        response = await self.source.backends.http.request(method, url)
        return response.status == 200

    async def _all_subresources_exist(self, *types: str) -> bool:
        """Check several subresources concurrently, failing on the first miss."""
        tasks = [asyncio.ensure_future(self._subresource_exists(t)) for t in types]
        try:
            for next_done in asyncio.as_completed(tasks):
                if not await next_done:
                    return False
            return True
        finally:
            for task in tasks:
                task.cancel()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.source is other.source
            and self.path_parts == other.path_parts
        )

    def __hash__(self) -> int:
        return hash((type(self), id(self.source), self.path_parts))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source.name!r}, {list(self.path_parts)!r})"


class Subresource(ABC):
    """One physical backend object of a Resource.

    Attributes:
        resource: The parent resource.
        type: Which file of the resource this is.

    Raises:
        InvalidSubresourceError: If ``type`` isn't in ``valid_types``.
    """

    valid_types: ClassVar[tuple[str, ...]] = ()

    def __init__(self, resource: Resource, type: str) -> None:
        if not isinstance(resource, Resource):
            raise TypeError(
                f"invalid Subresource parent resource type: {resource.__class__.__name__}"
            )
        if type not in self.valid_types:
            raise InvalidSubresourceError(type, self.valid_types)
        self.resource = resource
        self.type = type

    @property
    @abstractmethod
    def base_name(self) -> str:
        """Backend-relative file name or key."""

    async def url(self, method: str = "GET") -> str:
        """URL to fetch this subresource with the given HTTP method."""
        return await self.resource.source.url_for(self.base_name, method)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource!r}, {self.type!r})"


class DatasetSubresource(Subresource):
    valid_types = ("main", "root-sequence", "tip-frequencies", "meta", "tree")

    @property
    def base_name(self) -> str:
        if self.type == "main":
            return f"{self.resource.base_name}.json"
        return f"{self.resource.base_name}_{self.type}.json"


class NarrativeSubresource(Subresource):
    valid_types = ("md",)

    @property
    def base_name(self) -> str:
        return f"{self.resource.base_name}.md"


class Dataset(Resource):
    """A phylogenetic dataset: a main JSON plus optional sidecars."""

    subresource_class = DatasetSubresource

    async def exists(self) -> bool:
        """Check for the main JSON, falling back to legacy meta+tree files.

        Legacy datasets were published as separate ``_meta.json`` and
        ``_tree.json`` files; both must be present.
        """
        if await self._subresource_exists("main"):
            return True
        return await self._all_subresources_exist("meta", "tree")

    def with_path_parts(self, path_parts: Sequence[str]) -> Self:
        """Return a new dataset of the same kind and source."""
        return type(self)(self.source, path_parts)

    def resolve(self) -> Dataset:
        """Resolve this dataset to its canonical path if it is an alias.

        For example, in the core source /flu/seasonal/h3n2 is an alias for
        /flu/seasonal/h3n2/ha/2y.

        Returns this dataset itself when it is already canonical, when the
        availability snapshot knows nothing about the source, or when no
        default completion exists. ``dataset.resolve() is dataset`` thus
        tells whether ``dataset`` is an alias.
        """
        availability = self.source.backends.availability
        source_name = self.source.name

        if not availability.knows(source_name):
            logger.debug(
                "No available datasets known for source %r; not resolving %s",
                source_name,
                self.path,
            )
            return self

        dataset: Dataset = self
        for _ in range(MAX_ALIAS_DEPTH):
            if availability.has_path(source_name, dataset.path):
                return dataset

            next_default = availability.next_default(source_name, dataset.path) or ""
            next_parts = [part for part in next_default.split("/") if part]
            if not next_parts:
                return dataset

            dataset = dataset.with_path_parts([*dataset.path_parts, *next_parts])

        logger.warning(
            "Stopped resolving %r in source %r after %d alias completions",
            self.path,
            source_name,
            MAX_ALIAS_DEPTH,
        )
        return dataset

    @property
    def is_request_valid_without_dataset(self) -> bool:
        """Whether a request may name only the collection, not a dataset."""
        return False


class Narrative(Resource):
    """A narrative markdown document."""

    subresource_class = NarrativeSubresource

    async def exists(self) -> bool:
        return await self._subresource_exists("md")
