"""HTTP transport adapter using httpx."""

from __future__ import annotations

import httpx

from nextstrain_sources.core.exceptions import BackendError
from nextstrain_sources.core.models import FetchResponse


class HttpxClient:
    """HTTP transport for existence checks and lookups.

    Implements HttpPort. Requests bypass caches so existence checks see
    the backend's current state.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the transport.

        Args:
            client: Optional shared AsyncClient. If not provided, creates one
                that follows redirects.
        """
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    async def request(self, method: str, url: str) -> FetchResponse:
        """Issue a request and return its status, headers and body.

        Raises:
            BackendError: If the request couldn't be made at all.
        """
        try:
            response = await self._client.request(
                method, url, headers={"Cache-Control": "no-store"}
            )
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {url} failed: {e}", location=url, cause=e) from e

        return FetchResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
