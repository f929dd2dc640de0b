"""GitHub repository adapter using httpx."""

from __future__ import annotations

import logging

import httpx

from nextstrain_sources import config
from nextstrain_sources.core.exceptions import BackendError, NotFoundError
from nextstrain_sources.core.models import RepoEntry


logger = logging.getLogger(__name__)


class GitHubRepositories:
    """Repository listings from the GitHub REST API.

    Implements RepositoryPort. A missing repository is an error; any other
    failed listing is logged and treated as empty.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        token: str | None = None,
        api_url: str = config.GITHUB_API_URL,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Optional shared AsyncClient.
            token: Optional API token; defaults to $GITHUB_TOKEN.
            api_url: Base URL of the GitHub API.
        """
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self._api_url = api_url.rstrip("/")
        token = token if token is not None else config.github_token()
        self._headers = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    async def list_contents(
        self, owner: str, repo: str, path: str, ref: str
    ) -> list[RepoEntry]:
        """List a repository directory at a ref.

        Raises:
            NotFoundError: If GitHub answers 404.
        """
        url = f"{self._api_url}/repos/{owner}/{repo}/contents"
        if path:
            url = f"{url}/{path.strip('/')}"

        try:
            response = await self._client.get(url, params={"ref": ref}, headers=self._headers)
        except httpx.HTTPError as e:
            logger.warning("Error fetching %s/%s contents from GitHub: %s", owner, repo, e)
            return []

        if response.status_code == 404:
            raise NotFoundError(f"Not found on GitHub: {owner}/{repo}/{path}", location=url)
        if response.status_code not in (200, 304):
            logger.warning(
                "Error fetching %s/%s contents from GitHub: %s %s",
                owner,
                repo,
                response.status_code,
                response.text[:200],
            )
            return []

        try:
            items = response.json()
            if not isinstance(items, list):
                # A path naming a file rather than a directory
                return []
            return [
                RepoEntry(name=item["name"], type=item.get("type", "file")) for item in items
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "Unreadable %s/%s contents listing from GitHub: %s", owner, repo, e
            )
            return []

    async def default_branch(self, owner: str, repo: str) -> str:
        """Look up a repository's default branch.

        Raises:
            BackendError: If the lookup fails or the response lacks a branch.
        """
        url = f"{self._api_url}/repos/{owner}/{repo}"
        try:
            response = await self._client.get(url, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendError(f"Could not look up {owner}/{repo}: {e}", location=url, cause=e) from e

        if not isinstance(data, dict):
            raise BackendError(f"Unexpected repository record for {owner}/{repo}", location=url)
        branch = data.get("default_branch")
        if not branch or not isinstance(branch, str):
            raise BackendError(f"No default branch reported for {owner}/{repo}", location=url)
        return branch

    async def aclose(self) -> None:
        await self._client.aclose()
