"""Default wiring of adapters into Backends."""

from __future__ import annotations

from typing import Any

import httpx

from nextstrain_sources.adapters.http import GitHubRepositories, HttpxClient
from nextstrain_sources.adapters.storage import S3ObjectStore
from nextstrain_sources.core.models import AvailabilityCache
from nextstrain_sources.core.ports import Backends


def create_backends(
    availability: AvailabilityCache | None = None,
    s3_client: Any | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Backends:
    """Create Backends with the default adapters.

    Args:
        availability: Availability snapshot. Defaults to an empty one.
        s3_client: Optional boto3 S3 client. If not provided, creates default.
        http_client: Optional AsyncClient shared by the HTTP adapters.

    Returns:
        Backends using httpx for HTTP and GitHub, and boto3 for S3.
    """
    client = http_client or httpx.AsyncClient(follow_redirects=True)
    return Backends(
        http=HttpxClient(client),
        objects=S3ObjectStore(client=s3_client),
        repositories=GitHubRepositories(client),
        availability=availability or AvailabilityCache(),
    )
