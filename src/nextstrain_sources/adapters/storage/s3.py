"""S3 object store adapter using boto3."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from nextstrain_sources import config
from nextstrain_sources.core.exceptions import BackendError, NotFoundError
from nextstrain_sources.core.models import StoredObject


if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


# Operations a presigned URL may be generated for
_SIGNABLE_OPERATIONS = ("get_object", "head_object")


class S3ObjectStore:
    """Object store adapter for group buckets.

    Implements ObjectStorePort for AWS S3. boto3 is blocking, so each call
    runs in a worker thread.
    """

    def __init__(
        self,
        client: S3Client | None = None,
        expires_in: int = config.SIGNED_URL_EXPIRY,
    ) -> None:
        """Initialize the S3 object store.

        Args:
            client: Optional boto3 S3 client. If not provided, creates a default client.
            expires_in: Lifetime of presigned URLs, in seconds.
        """
        self._client = client or boto3.client("s3")
        self._expires_in = expires_in

    async def list_keys(self, bucket: str) -> list[str]:
        """List every key in a bucket, reading all pages."""
        return await asyncio.to_thread(self.list_keys_sync, bucket)

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        return await asyncio.to_thread(self.get_object_sync, bucket, key)

    async def presign(self, operation: str, bucket: str, key: str) -> str:
        return await asyncio.to_thread(self.presign_sync, operation, bucket, key)

    def list_keys_sync(self, bucket: str) -> list[str]:
        """List every key in a bucket.

        Args:
            bucket: Bucket name.

        Returns:
            All object keys, in listing order.

        Raises:
            NotFoundError: If the bucket does not exist.
            BackendError: For other S3 errors.
        """
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        try:
            for page in paginator.paginate(Bucket=bucket):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, f"s3://{bucket}") from e
        return keys

    def get_object_sync(self, bucket: str, key: str) -> StoredObject:
        """Read a whole object.

        Raises:
            NotFoundError: If the object does not exist.
            BackendError: For other S3 errors.
        """
        location = f"s3://{bucket}/{key}"
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, location) from e

        return StoredObject(
            key=key,
            body=body,
            content_encoding=response.get("ContentEncoding"),
        )

    def presign_sync(self, operation: str, bucket: str, key: str) -> str:
        """Generate a presigned URL for one operation on one object.

        Raises:
            ValueError: If the operation can't be signed.
        """
        if operation not in _SIGNABLE_OPERATIONS:
            raise ValueError(f"Cannot sign S3 operation: {operation}")
        return self._client.generate_presigned_url(
            operation,
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=self._expires_in,
        )

    def _translate_error(self, error: Exception, location: str) -> BackendError:
        """Translate a botocore error to a domain exception.

        Args:
            error: The botocore exception.
            location: The S3 URI for context.

        Returns:
            Appropriate BackendError subclass.
        """
        if not isinstance(error, ClientError):
            return BackendError(f"S3 error: {error}", location=location, cause=error)

        code = error.response.get("Error", {}).get("Code", "")

        if code in ("404", "NoSuchKey", "NoSuchBucket"):
            return NotFoundError(f"Object not found: {location}", location=location, cause=error)

        return BackendError(f"S3 error ({code}): {error}", location=location, cause=error)
