"""HTTP adapters."""

from nextstrain_sources.adapters.http.client import HttpxClient
from nextstrain_sources.adapters.http.github import GitHubRepositories


__all__ = ["GitHubRepositories", "HttpxClient"]
