"""Object storage adapters."""

from nextstrain_sources.adapters.storage.s3 import S3ObjectStore


__all__ = ["S3ObjectStore"]
