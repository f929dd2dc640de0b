"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
fake adapters for the core ports, so sources can be tested without I/O.
"""

from __future__ import annotations

import asyncio
import gzip

import pytest

from nextstrain_sources.core.exceptions import BackendError, NotFoundError
from nextstrain_sources.core.models import (
    AvailabilityCache,
    FetchResponse,
    RepoEntry,
    StoredObject,
)
from nextstrain_sources.core.ports import Backends


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, sources and resources")
    config.addinivalue_line("markers", "storage: Object storage adapters")
    config.addinivalue_line("markers", "http: HTTP and GitHub adapters")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "property: Property-based tests using hypothesis")
    config.addinivalue_line(
        "markers", "tra: Test Responsibility Anchor (TRA) - namespace.Anchor format"
    )
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


class FakeHttp:
    """HttpPort answering from a URL -> status table (404 otherwise)."""

    def __init__(self, statuses: dict[str, int] | None = None) -> None:
        self.statuses = dict(statuses or {})
        self.calls: list[tuple[str, str]] = []
        self.closed = 0

    async def request(self, method: str, url: str) -> FetchResponse:
        self.calls.append((method, url))
        return FetchResponse(status=self.statuses.get(url, 404))

    async def aclose(self) -> None:
        self.closed += 1


class FakeObjectStore:
    """ObjectStorePort over in-memory buckets."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, StoredObject]] = {}
        self.failing = False

    def put(self, bucket: str, key: str, body: bytes | str = b"{}", gzipped: bool = False) -> None:
        data = body.encode() if isinstance(body, str) else body
        if gzipped:
            data = gzip.compress(data)
        self.buckets.setdefault(bucket, {})[key] = StoredObject(
            key=key, body=data, content_encoding="gzip" if gzipped else None
        )

    async def list_keys(self, bucket: str) -> list[str]:
        if self.failing:
            raise BackendError("listing failed", location=f"s3://{bucket}")
        return list(self.buckets.get(bucket, {}))

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        try:
            return self.buckets[bucket][key]
        except KeyError:
            raise NotFoundError("no such key", location=f"s3://{bucket}/{key}") from None

    async def presign(self, operation: str, bucket: str, key: str) -> str:
        return f"https://{bucket}.s3.amazonaws.com/{key}?signed-for={operation}"


class FakeRepositories:
    """RepositoryPort over an in-memory (owner, repo, path) -> entries table."""

    def __init__(self, default: str = "main") -> None:
        self.contents: dict[tuple[str, str, str], list[RepoEntry]] = {}
        self.default = default
        self.branch_lookups = 0
        self.branch_error: Exception | None = None
        self.listed_refs: list[str] = []
        self.closed = 0

    def add(self, owner: str, repo: str, path: str, *names: str, type: str = "file") -> None:
        entries = self.contents.setdefault((owner, repo, path), [])
        entries.extend(RepoEntry(name=name, type=type) for name in names)

    async def list_contents(self, owner: str, repo: str, path: str, ref: str) -> list[RepoEntry]:
        self.listed_refs.append(ref)
        try:
            return list(self.contents[(owner, repo, path)])
        except KeyError:
            raise NotFoundError("not found", location=f"{owner}/{repo}/{path}") from None

    async def default_branch(self, owner: str, repo: str) -> str:
        self.branch_lookups += 1
        # Yield so concurrent callers overlap
        await asyncio.sleep(0)
        if self.branch_error is not None:
            raise self.branch_error
        return self.default

    async def aclose(self) -> None:
        self.closed += 1


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def objects() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def repositories() -> FakeRepositories:
    return FakeRepositories()


@pytest.fixture
def availability() -> AvailabilityCache:
    """Availability snapshot with a chained core alias."""
    return AvailabilityCache.from_mapping(
        {
            "paths": {
                "core": ["flu/seasonal/h3n2/ha/2y", "flu/seasonal/h3n2/ha/12y", "zika"],
            },
            "defaults": {
                "core": {
                    "flu": "seasonal",
                    "flu/seasonal": "h3n2",
                    "flu/seasonal/h3n2": "ha",
                    "flu/seasonal/h3n2/ha": "2y",
                },
            },
            "secondTreeOptions": {
                "core": {"flu/seasonal/h3n2/ha/2y": ["flu/seasonal/h3n2/na/2y"]},
            },
        }
    )


@pytest.fixture
def backends(
    http: FakeHttp,
    objects: FakeObjectStore,
    repositories: FakeRepositories,
    availability: AvailabilityCache,
) -> Backends:
    """Backends wired to the fake adapters."""
    return Backends(
        http=http,
        objects=objects,
        repositories=repositories,
        availability=availability,
    )
