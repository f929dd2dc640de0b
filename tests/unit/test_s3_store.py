"""Unit tests for the S3ObjectStore adapter."""

from __future__ import annotations

import gzip

import boto3
import pytest
from moto import mock_aws


@pytest.fixture
def s3_client():
    """Create a mocked S3 client with a test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-bucket")
        yield client


@pytest.mark.storage
@pytest.mark.tier(1)
class TestListKeys:
    """Tests for list_keys()."""

    def test_lists_all_keys(self, s3_client) -> None:
        """Every key in the bucket should be listed."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        s3_client.put_object(Bucket="test-bucket", Key="ncov.json", Body=b"{}")
        s3_client.put_object(Bucket="test-bucket", Key="group-overview.md", Body=b"---")

        store = S3ObjectStore(client=s3_client)

        assert sorted(store.list_keys_sync("test-bucket")) == ["group-overview.md", "ncov.json"]

    @pytest.mark.tier(2)
    def test_reads_every_page(self, s3_client) -> None:
        """Listings beyond one page should be complete."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        for i in range(1005):
            s3_client.put_object(Bucket="test-bucket", Key=f"d{i:04d}.json", Body=b"")

        store = S3ObjectStore(client=s3_client)

        assert len(store.list_keys_sync("test-bucket")) == 1005

    def test_empty_bucket(self, s3_client) -> None:
        """An empty bucket lists nothing."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        assert S3ObjectStore(client=s3_client).list_keys_sync("test-bucket") == []

    def test_missing_bucket_raises_not_found(self, s3_client) -> None:
        """A bucket that doesn't exist is a NotFoundError."""
        from nextstrain_sources.adapters.storage import S3ObjectStore
        from nextstrain_sources.core.exceptions import NotFoundError

        store = S3ObjectStore(client=s3_client)

        with pytest.raises(NotFoundError) as exc_info:
            store.list_keys_sync("no-such-bucket")

        assert exc_info.value.location == "s3://no-such-bucket"

    @pytest.mark.asyncio
    async def test_async_listing(self, s3_client) -> None:
        """The async method gives the same result."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        s3_client.put_object(Bucket="test-bucket", Key="zika.json", Body=b"{}")

        assert await S3ObjectStore(client=s3_client).list_keys("test-bucket") == ["zika.json"]


@pytest.mark.storage
@pytest.mark.tier(1)
class TestGetObject:
    """Tests for get_object()."""

    def test_reads_body(self, s3_client) -> None:
        """The body is read in full."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        s3_client.put_object(Bucket="test-bucket", Key="a.md", Body=b"hello")

        stored = S3ObjectStore(client=s3_client).get_object_sync("test-bucket", "a.md")

        assert stored.key == "a.md"
        assert stored.body == b"hello"
        assert stored.content_encoding is None

    def test_keeps_content_encoding(self, s3_client) -> None:
        """Gzipped objects are returned compressed with their encoding."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        s3_client.put_object(
            Bucket="test-bucket",
            Key="group-overview.md",
            Body=gzip.compress(b"---\ntitle: T\n---\n"),
            ContentEncoding="gzip",
        )

        stored = S3ObjectStore(client=s3_client).get_object_sync(
            "test-bucket", "group-overview.md"
        )

        assert stored.content_encoding == "gzip"
        assert gzip.decompress(stored.body).startswith(b"---")

    @pytest.mark.asyncio
    async def test_missing_key_raises_not_found(self, s3_client) -> None:
        """A missing key is a NotFoundError."""
        from nextstrain_sources.adapters.storage import S3ObjectStore
        from nextstrain_sources.core.exceptions import NotFoundError

        with pytest.raises(NotFoundError) as exc_info:
            await S3ObjectStore(client=s3_client).get_object("test-bucket", "nope.md")

        assert "nope.md" in exc_info.value.location
        assert exc_info.value.recovery_hint is not None


@pytest.mark.storage
@pytest.mark.tier(1)
class TestPresign:
    """Tests for presign()."""

    @pytest.mark.asyncio
    async def test_signs_get_and_head(self, s3_client) -> None:
        """Both read operations can be signed."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        store = S3ObjectStore(client=s3_client, expires_in=60)

        for operation in ("get_object", "head_object"):
            url = await store.presign(operation, "test-bucket", "ncov.json")
            assert "test-bucket" in url
            assert "ncov.json" in url
            assert "Expires" in url

    def test_rejects_other_operations(self, s3_client) -> None:
        """Only reads can be signed."""
        from nextstrain_sources.adapters.storage import S3ObjectStore

        with pytest.raises(ValueError, match="put_object"):
            S3ObjectStore(client=s3_client).presign_sync("put_object", "test-bucket", "x")


@pytest.mark.storage
@pytest.mark.tier(0)
class TestProtocol:
    """S3ObjectStore satisfies the port."""

    def test_is_object_store_port(self, s3_client) -> None:
        from nextstrain_sources.adapters.storage import S3ObjectStore
        from nextstrain_sources.core.ports import ObjectStorePort

        assert isinstance(S3ObjectStore(client=s3_client), ObjectStorePort)
