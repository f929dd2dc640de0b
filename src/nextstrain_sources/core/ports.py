"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. Sources and
resources depend only on these protocols, never on concrete clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from nextstrain_sources.core.models import AvailabilityCache


if TYPE_CHECKING:
    from nextstrain_sources.core.models import FetchResponse, RepoEntry, StoredObject


@runtime_checkable
class HttpPort(Protocol):
    """HTTP GET/HEAD capability."""

    async def request(self, method: str, url: str) -> FetchResponse:
        """Issue a request without following caches.

        Args:
            method: "GET" or "HEAD".
            url: Absolute URL to request.

        Returns:
            FetchResponse with status, headers and body (empty for HEAD).
        """
        ...


@runtime_checkable
class ObjectStorePort(Protocol):
    """Object storage backend (S3 buckets)."""

    async def list_keys(self, bucket: str) -> list[str]:
        """List every object key in a bucket.

        All pages are read before returning.

        Raises:
            BackendError: If the listing fails.
        """
        ...

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        """Read one object with its content encoding.

        Raises:
            NotFoundError: If the object does not exist.
            BackendError: For other failures.
        """
        ...

    async def presign(self, operation: str, bucket: str, key: str) -> str:
        """Generate a short-lived signed URL.

        Args:
            operation: "get_object" or "head_object".
            bucket: Bucket name.
            key: Object key.

        Returns:
            The signed URL.
        """
        ...


@runtime_checkable
class RepositoryPort(Protocol):
    """Repository hosting backend (GitHub)."""

    async def list_contents(
        self, owner: str, repo: str, path: str, ref: str
    ) -> list[RepoEntry]:
        """List a repository directory at a ref.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Directory within the repository ("" for the root).
            ref: Branch, tag or commit.

        Returns:
            Entries of the directory. Empty when the listing failed for any
            reason other than the repository being absent.

        Raises:
            NotFoundError: If the repository (or directory) does not exist.
        """
        ...

    async def default_branch(self, owner: str, repo: str) -> str:
        """Look up a repository's default branch.

        Raises:
            BackendError: If the lookup fails.
        """
        ...


@dataclass(frozen=True)
class Backends:
    """Everything a Source needs to talk to the outside world.

    Attributes:
        http: HTTP transport for existence checks and lookups.
        objects: Object store used by group sources.
        repositories: Repository host used by core and community sources.
        availability: Current availability snapshot.
    """

    http: HttpPort
    objects: ObjectStorePort
    repositories: RepositoryPort
    availability: AvailabilityCache = field(default_factory=AvailabilityCache)

    async def aclose(self) -> None:
        """Close adapters that hold connections.

        Adapters without an ``aclose`` coroutine are skipped, and an adapter
        shared between ports is closed once.
        """
        closed: list[object] = []
        for adapter in (self.http, self.objects, self.repositories):
            if any(adapter is other for other in closed):
                continue
            closed.append(adapter)
            aclose = getattr(adapter, "aclose", None)
            if aclose is not None:
                await aclose()
