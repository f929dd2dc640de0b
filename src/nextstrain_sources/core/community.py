"""Community sources: datasets and narratives shared from GitHub repositories.

A community repository keeps datasets under ``auspice/`` and narratives
under ``narratives/``, each file name starting with the repository name,
e.g. ``auspice/community-test_zika_tutorial.json``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from nextstrain_sources import config
from nextstrain_sources.core.exceptions import (
    ConfigurationError,
    NotFoundError,
)
from nextstrain_sources.core.models import SourceInfo
from nextstrain_sources.core.path_utils import (
    datasets_from_filenames,
    narratives_from_filenames,
    strip_repo_prefix,
)
from nextstrain_sources.core.resources import Dataset, Narrative
from nextstrain_sources.core.sources import Source


if TYPE_CHECKING:
    from nextstrain_sources.core.ports import Backends


logger = logging.getLogger(__name__)


class CommunityDataset(Dataset):
    @property
    def base_parts(self) -> tuple[str, ...]:
        # Datasets must be in auspice/ and carry the repo name in their basename
        return (f"auspice/{self.source.repo_name}", *self.path_parts)

    @property
    def is_request_valid_without_dataset(self) -> bool:
        return not self.path_parts


class CommunityNarrative(Narrative):
    @property
    def base_parts(self) -> tuple[str, ...]:
        # Narratives must be in narratives/ and carry the repo name in their basename
        return (f"narratives/{self.source.repo_name}", *self.path_parts)


class CommunitySource(Source):
    """A GitHub repository, optionally pinned to a branch.

    Args:
        owner: GitHub user or organization.
        repo_name: Repository name, optionally suffixed with ``@branch``.
        backends: Transports and availability snapshot.

    Raises:
        ConfigurationError: If owner or repository name is missing.

    Example:
        >>> source = CommunitySource("nextstrain", "community-test@alt", backends=b)
        >>> source.repo
        'nextstrain/community-test'
    """

    name = "community"

    def __init__(self, owner: str, repo_name: str, *, backends: Backends) -> None:
        super().__init__(backends=backends)

        if not owner:
            raise ConfigurationError(f"Cannot construct a {type(self).__name__} without an owner")
        if not repo_name:
            raise ConfigurationError(
                f"Cannot construct a {type(self).__name__} without a repo_name"
            )

        name, _, branch = repo_name.partition("@")
        if not name:
            raise ConfigurationError(
                f"Cannot construct a {type(self).__name__} without a repo_name "
                "after splitting on '@'"
            )

        self.owner = owner
        self.repo_name = name
        self.pinned_branch = branch or None
        self._default_branch_task: asyncio.Task[str] | None = None

    @property
    def repo(self) -> str:
        return f"{self.owner}/{self.repo_name}"

    @property
    def branch_explicitly_defined(self) -> bool:
        return self.pinned_branch is not None

    async def default_branch(self) -> str:
        """The repository's default branch, looked up once per source.

        Concurrent callers share a single lookup. A failed lookup settles on
        the fallback branch rather than failing the request. A pending
        lookup belongs to the event loop that started it, so a source
        reused under another loop before it settled (or whose lookup was
        cancelled) looks up again.
        """
        task = self._default_branch_task
        if task is not None and task.done() and not task.cancelled():
            return task.result()

        loop = asyncio.get_running_loop()
        if task is None or task.get_loop() is not loop or task.cancelled():
            task = self._default_branch_task = loop.create_task(self._lookup_default_branch())
        return await asyncio.shield(task)

    async def _lookup_default_branch(self) -> str:
        try:
            return await self.backends.repositories.default_branch(self.owner, self.repo_name)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Error interpreting the default branch of %s for %s: %s; using %r",
                type(self).__name__,
                self.repo,
                e,
                config.FALLBACK_BRANCH,
            )
            return config.FALLBACK_BRANCH

    async def branch(self) -> str:
        if self.pinned_branch is not None:
            return self.pinned_branch
        return await self.default_branch()

    async def base_url(self) -> str:
        return f"{config.GITHUB_URL}/{self.repo}/raw/{await self.branch()}/"

    async def repo_name_with_branch(self) -> str:
        """Repository name as it appears in request paths.

        The branch is omitted when it is the default and wasn't pinned.
        """
        branch = await self.branch()
        if not self.branch_explicitly_defined and branch == await self.default_branch():
            return self.repo_name
        return f"{self.repo_name}@{branch}"

    def dataset(self, path_parts: Sequence[str]) -> CommunityDataset:
        return CommunityDataset(self, path_parts)

    def narrative(self, path_parts: Sequence[str]) -> CommunityNarrative:
        return CommunityNarrative(self, path_parts)

    async def available_datasets(self) -> list[str]:
        """List datasets in the repository's auspice/ directory.

        Raises:
            NotFoundError: If the repository (or its auspice/ directory)
                doesn't exist.
        """
        entries = await self.backends.repositories.list_contents(
            self.owner, self.repo_name, "auspice", await self.branch()
        )
        filenames = [
            entry.name
            for entry in entries
            if entry.is_file and entry.name.startswith(self.repo_name)
        ]
        # CommunityDataset.base_parts adds the repo name back in
        return [
            strip_repo_prefix(path, self.repo_name)
            for path in datasets_from_filenames(filenames)
        ]

    async def available_narratives(self) -> list[str]:
        try:
            entries = await self.backends.repositories.list_contents(
                self.owner, self.repo_name, "narratives", await self.branch()
            )
        except NotFoundError:
            # No narratives/ directory just means no narratives
            return []

        filenames = [
            entry.name
            for entry in entries
            if entry.is_file and entry.name.startswith(self.repo_name)
        ]
        return [
            strip_repo_prefix(path, self.repo_name)
            for path in narratives_from_filenames(filenames, exclude=("README.md",))
        ]

    async def get_info(self) -> SourceInfo:
        branch = await self.branch()
        return SourceInfo(
            title=f"{self.owner}'s \"{self.repo_name}\" community builds",
            byline=(
                f"Nextstrain community builds for GitHub → {self.repo} ({branch} branch). "
                "The available datasets and narratives in this repository are listed below."
            ),
            website=None,
            show_datasets=True,
            show_narratives=True,
            avatar=f"{config.GITHUB_URL}/{self.owner}.png?size=200",
        )
