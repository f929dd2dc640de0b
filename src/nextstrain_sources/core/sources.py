"""Sources: where datasets and narratives come from.

These Source classes, together with the Dataset and Narrative resources
they construct, map an array of dataset/narrative path parts onto a URL.
Source selection from a request path is handled by
``nextstrain_sources.core.registry``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import urljoin

from nextstrain_sources import config
from nextstrain_sources.core.exceptions import ConfigurationError
from nextstrain_sources.core.models import SourceInfo
from nextstrain_sources.core.path_utils import narratives_from_filenames
from nextstrain_sources.core.resources import (
    Dataset,
    DatasetSubresource,
    Narrative,
    NarrativeSubresource,
)


if TYPE_CHECKING:
    from nextstrain_sources.core.models import Principal
    from nextstrain_sources.core.ports import Backends


logger = logging.getLogger(__name__)


class Source:
    """Base class for every source.

    Attributes:
        name: Registry name of the source, unique across sources.
        backends: Transports and availability snapshot used by the source.
    """

    name: ClassVar[str]

    def __init__(self, *, backends: Backends) -> None:
        self.backends = backends

    async def base_url(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} must implement base_url()")

    async def url_for(self, key: str, method: str = "GET") -> str:  # noqa: ARG002
        """Resolve a backend-relative key to a fetchable URL."""
        return urljoin(await self.base_url(), key)

    @classmethod
    def is_group(cls) -> bool:
        """Whether the source is a Nextstrain group."""
        return False

    def dataset(self, path_parts: Sequence[str]) -> Dataset:
        return Dataset(self, path_parts)

    def narrative(self, path_parts: Sequence[str]) -> Narrative:
        return Narrative(self, path_parts)

    def second_tree_options(self, path: str) -> list[str]:  # noqa: ARG002
        return []

    async def available_datasets(self) -> list[str]:
        return []

    async def available_narratives(self) -> list[str]:
        return []

    @classmethod
    def source_visible_to_user(cls, principal: Principal | None) -> bool:  # noqa: ARG003
        """Access control for the entire source, regardless of instance."""
        return True

    def visible_to_user(self, principal: Principal | None) -> bool:
        """Instance access control; delegates to the source-wide rule."""
        return type(self).source_visible_to_user(principal)

    async def get_info(self) -> SourceInfo:
        raise NotImplementedError(f"{type(self).__name__} must implement get_info()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class CoreSource(Source):
    """Nextstrain's canonical datasets and narratives."""

    name = "core"
    data_url = config.CORE_DATA_URL
    narratives_repo = config.NARRATIVES_REPO
    narratives_branch = "master"

    async def base_url(self) -> str:
        return self.data_url

    async def url_for(self, key: str, method: str = "GET") -> str:  # noqa: ARG002
        # Narratives live in a GitHub repository, datasets on the data host
        if key.endswith(".md"):
            base = f"{config.GITHUB_RAW_URL}/{self.narratives_repo}/{self.narratives_branch}/"
        else:
            base = await self.base_url()
        return urljoin(base, key)

    def second_tree_options(self, path: str) -> list[str]:
        return self.backends.availability.second_trees(self.name, path)

    async def available_datasets(self) -> list[str]:
        return self.backends.availability.datasets(self.name)

    async def available_narratives(self) -> list[str]:
        owner, repo = self.narratives_repo.split("/", 1)
        entries = await self.backends.repositories.list_contents(
            owner, repo, "", self.narratives_branch
        )
        return narratives_from_filenames(
            (entry.name for entry in entries if entry.is_file),
            exclude=("README.md",),
        )

    async def get_info(self) -> SourceInfo:
        return SourceInfo(
            title=f"Nextstrain {self.name} datasets & narratives",
            show_datasets=True,
            show_narratives=True,
        )


class CoreStagingSource(CoreSource):
    """Staging copy of the core source."""

    name = "staging"
    data_url = config.STAGING_DATA_URL
    narratives_branch = "staging"


class UrlDefinedDatasetSubresource(DatasetSubresource):
    @property
    def base_name(self) -> str:
        base_name = self.resource.base_name
        if self.type == "main":
            return base_name
        if base_name.endswith(".json"):
            return f"{base_name[: -len('.json')]}_{self.type}.json"
        return f"{base_name}_{self.type}"


class UrlDefinedNarrativeSubresource(NarrativeSubresource):
    @property
    def base_name(self) -> str:
        return self.resource.base_name


class UrlDefinedDataset(Dataset):
    """A dataset whose location is given directly by the request URL."""

    subresource_class = UrlDefinedDatasetSubresource

    @property
    def base_name(self) -> str:
        return "/".join(self.base_parts)

    async def exists(self) -> bool:
        # No fallback page to show instead, and signed URLs only permit one
        # method, so a HEAD check would break the subsequent GET.
        return True


class UrlDefinedNarrative(Narrative):
    """A narrative whose location is given directly by the request URL."""

    subresource_class = UrlDefinedNarrativeSubresource

    @property
    def base_name(self) -> str:
        return "/".join(self.base_parts)

    async def exists(self) -> bool:
        return True


class UrlDefinedSource(Source):
    """Datasets and narratives fetched from an arbitrary URL authority.

    Args:
        authority: Host (and optional port) to fetch from.
        backends: Transports and availability snapshot.

    Raises:
        ConfigurationError: If no authority is given.
    """

    name = "fetch"

    def __init__(self, authority: str, *, backends: Backends) -> None:
        super().__init__(backends=backends)
        if not authority:
            raise ConfigurationError(
                f"Cannot construct a {type(self).__name__} without a URL authority"
            )
        self.authority = authority

    async def base_url(self) -> str:
        return f"https://{self.authority}"

    def dataset(self, path_parts: Sequence[str]) -> UrlDefinedDataset:
        return UrlDefinedDataset(self, path_parts)

    def narrative(self, path_parts: Sequence[str]) -> UrlDefinedNarrative:
        return UrlDefinedNarrative(self, path_parts)

    # Available datasets and narratives are unknowable for arbitrary URLs

    async def get_info(self) -> SourceInfo:
        return SourceInfo(
            title=f"Datasets and narratives from {self.authority}",
            show_datasets=False,
            show_narratives=False,
        )
