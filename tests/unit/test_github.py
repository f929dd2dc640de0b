"""Unit tests for the GitHub repository adapter."""

from __future__ import annotations

import httpx
import pytest
import respx


CONTENTS_URL = "https://api.github.com/repos/nextstrain/community-test/contents/auspice"
REPO_URL = "https://api.github.com/repos/nextstrain/community-test"


@pytest.fixture
def github():
    from nextstrain_sources.adapters.http import GitHubRepositories

    return GitHubRepositories(client=httpx.AsyncClient(), token="")


@pytest.mark.http
@pytest.mark.tier(1)
class TestListContents:
    """Tests for list_contents()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_lists_entries(self, github) -> None:
        """Directory listings become RepoEntry values."""
        from nextstrain_sources.core.models import RepoEntry

        route = respx.get(CONTENTS_URL, params={"ref": "main"}).respond(
            json=[
                {"name": "community-test_zika.json", "type": "file"},
                {"name": "old", "type": "dir"},
            ]
        )

        entries = await github.list_contents("nextstrain", "community-test", "auspice", "main")

        assert route.called
        assert entries == [
            RepoEntry("community-test_zika.json", "file"),
            RepoEntry("old", "dir"),
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_root_listing(self, github) -> None:
        """An empty path lists the repository root."""
        route = respx.get(
            "https://api.github.com/repos/nextstrain/narratives/contents",
            params={"ref": "master"},
        ).respond(json=[{"name": "README.md", "type": "file"}])

        entries = await github.list_contents("nextstrain", "narratives", "", "master")

        assert route.called
        assert [entry.name for entry in entries] == ["README.md"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_raises_not_found(self, github) -> None:
        """A missing repository is an error."""
        from nextstrain_sources.core.exceptions import NotFoundError

        respx.get(CONTENTS_URL).respond(status_code=404)

        with pytest.raises(NotFoundError):
            await github.list_contents("nextstrain", "community-test", "auspice", "main")

    @pytest.mark.asyncio
    @respx.mock
    async def test_other_errors_are_empty(self, github) -> None:
        """Rate limits and server errors give an empty listing."""
        respx.get(CONTENTS_URL).respond(status_code=500, text="oops")

        assert await github.list_contents("nextstrain", "community-test", "auspice", "main") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_errors_are_empty(self, github) -> None:
        """Connection failures give an empty listing."""
        respx.get(CONTENTS_URL).mock(side_effect=httpx.ConnectError("refused"))

        assert await github.list_contents("nextstrain", "community-test", "auspice", "main") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_file_path_is_empty(self, github) -> None:
        """Listing a file rather than a directory gives nothing."""
        respx.get(CONTENTS_URL).respond(json={"name": "auspice", "type": "file"})

        assert await github.list_contents("nextstrain", "community-test", "auspice", "main") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body_is_empty(self, github) -> None:
        """An HTML page served with 200 gives an empty listing."""
        respx.get(CONTENTS_URL).respond(status_code=200, text="<html>rate limited</html>")

        assert await github.list_contents("nextstrain", "community-test", "auspice", "main") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_entries_are_empty(self, github) -> None:
        """Entries without a name give an empty listing."""
        respx.get(CONTENTS_URL).respond(json=[{"type": "file"}, "community-test_zika.json"])

        assert await github.list_contents("nextstrain", "community-test", "auspice", "main") == []


@pytest.mark.http
@pytest.mark.tier(1)
class TestDefaultBranch:
    """Tests for default_branch()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_reads_default_branch(self, github) -> None:
        """The repository's default branch is returned."""
        respx.get(REPO_URL).respond(json={"default_branch": "main"})

        assert await github.default_branch("nextstrain", "community-test") == "main"

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_raises(self, github) -> None:
        """A failed lookup is a BackendError."""
        from nextstrain_sources.core.exceptions import BackendError

        respx.get(REPO_URL).respond(status_code=403)

        with pytest.raises(BackendError) as exc_info:
            await github.default_branch("nextstrain", "community-test")

        assert exc_info.value.location == REPO_URL

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_field_raises(self, github) -> None:
        """A response without default_branch is a BackendError."""
        from nextstrain_sources.core.exceptions import BackendError

        respx.get(REPO_URL).respond(json={"name": "community-test"})

        with pytest.raises(BackendError, match="No default branch"):
            await github.default_branch("nextstrain", "community-test")

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_object_body_raises(self, github) -> None:
        """A JSON list instead of a repository record is a BackendError."""
        from nextstrain_sources.core.exceptions import BackendError

        respx.get(REPO_URL).respond(json=["x"])

        with pytest.raises(BackendError) as exc_info:
            await github.default_branch("nextstrain", "community-test")

        assert exc_info.value.location == REPO_URL

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body_raises(self, github) -> None:
        """An HTML page served with 200 is a BackendError."""
        from nextstrain_sources.core.exceptions import BackendError

        respx.get(REPO_URL).respond(status_code=200, text="<html>rate limited</html>")

        with pytest.raises(BackendError):
            await github.default_branch("nextstrain", "community-test")


@pytest.mark.http
@pytest.mark.tier(1)
class TestHeaders:
    """Tests for request headers."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_token_is_sent(self) -> None:
        """A token is sent as a bearer Authorization header."""
        from nextstrain_sources.adapters.http import GitHubRepositories

        route = respx.get(REPO_URL).respond(json={"default_branch": "main"})
        github = GitHubRepositories(client=httpx.AsyncClient(), token="secret")

        await github.default_branch("nextstrain", "community-test")

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["Accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_token_no_header(self, github) -> None:
        """Without a token no Authorization header is sent."""
        route = respx.get(REPO_URL).respond(json={"default_branch": "main"})

        await github.default_branch("nextstrain", "community-test")

        assert "Authorization" not in route.calls.last.request.headers
