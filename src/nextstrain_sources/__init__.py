"""nextstrain_sources - resolve request paths to Nextstrain datasets and narratives.

This library maps a hierarchical request path onto a fetchable location
across Nextstrain's backends: the core and staging data hosts, GitHub
community repositories, S3-backed groups and arbitrary URLs.

Example:
    >>> from nextstrain_sources import create_backends, default_registry, resolve_dataset
    >>> registry = default_registry(create_backends())
    >>> dataset = resolve_dataset(registry, "/groups/blab/ncov/19B")
    >>> url = await dataset.subresource("main").url()
"""

from nextstrain_sources.adapters import create_backends
from nextstrain_sources.adapters.http import GitHubRepositories, HttpxClient
from nextstrain_sources.adapters.storage import S3ObjectStore
from nextstrain_sources.config import load_availability
from nextstrain_sources.core.community import (
    CommunityDataset,
    CommunityNarrative,
    CommunitySource,
)
from nextstrain_sources.core.exceptions import (
    AccessDeniedError,
    BackendError,
    ConfigurationError,
    ConstructionError,
    InvalidSubresourceError,
    NoResourcePathError,
    NotFoundError,
    OverviewError,
    SourcesError,
    UnknownSourceError,
)
from nextstrain_sources.core.groups import (
    PrivateGroupSource,
    PrivateS3Source,
    PublicGroupSource,
    S3Source,
    make_group_source,
)
from nextstrain_sources.core.models import (
    AvailabilityCache,
    FetchResponse,
    GroupEntry,
    Principal,
    RepoEntry,
    SourceInfo,
    StoredObject,
)
from nextstrain_sources.core.ports import (
    Backends,
    HttpPort,
    ObjectStorePort,
    RepositoryPort,
)
from nextstrain_sources.core.registry import (
    RequestPath,
    SourceRegistry,
    default_registry,
    parse_request_path,
    require_visible,
    resolve_dataset,
    resolve_narrative,
    resolve_resource,
)
from nextstrain_sources.core.resources import (
    Dataset,
    DatasetSubresource,
    Narrative,
    NarrativeSubresource,
    Resource,
    Subresource,
)
from nextstrain_sources.core.sources import (
    CoreSource,
    CoreStagingSource,
    Source,
    UrlDefinedDataset,
    UrlDefinedNarrative,
    UrlDefinedSource,
)


__version__ = "0.1.0"

__all__ = [
    "AccessDeniedError",
    "AvailabilityCache",
    "BackendError",
    "Backends",
    "CommunityDataset",
    "CommunityNarrative",
    "CommunitySource",
    "ConfigurationError",
    "ConstructionError",
    "CoreSource",
    "CoreStagingSource",
    "Dataset",
    "DatasetSubresource",
    "FetchResponse",
    "GitHubRepositories",
    "GroupEntry",
    "HttpPort",
    "HttpxClient",
    "InvalidSubresourceError",
    "Narrative",
    "NarrativeSubresource",
    "NoResourcePathError",
    "NotFoundError",
    "ObjectStorePort",
    "OverviewError",
    "Principal",
    "PrivateGroupSource",
    "PrivateS3Source",
    "PublicGroupSource",
    "RepoEntry",
    "RepositoryPort",
    "RequestPath",
    "Resource",
    "S3ObjectStore",
    "S3Source",
    "Source",
    "SourceInfo",
    "SourceRegistry",
    "SourcesError",
    "StoredObject",
    "Subresource",
    "UnknownSourceError",
    "UrlDefinedDataset",
    "UrlDefinedNarrative",
    "UrlDefinedSource",
    "__version__",
    "create_backends",
    "default_registry",
    "load_availability",
    "parse_request_path",
    "require_visible",
    "resolve_dataset",
    "resolve_narrative",
    "resolve_resource",
]
