"""
Client factory — picks a bucket client from configuration.
"""

from __future__ import annotations

from bucketstore.clients.base import ObjectStoreClient
from bucketstore.core.config import BackendConfig
from bucketstore.core.errors import ConfigError


def create_client(config: BackendConfig) -> ObjectStoreClient:
    """
    Build the client named by config.provider.

    SDK-backed clients are imported on demand so the memory and sqlite
    providers work without cloud credentials configured.
    """
    if config.provider == "memory":
        from bucketstore.clients.memory import InMemoryBucketClient

        return InMemoryBucketClient(page_size=config.page_size)

    if config.provider == "sqlite":
        from bucketstore.clients.sqlite import SQLiteBucketClient

        return SQLiteBucketClient(
            config.sqlite_path,
            bucket=config.sqlite_bucket,
            page_size=config.page_size,
        )

    if config.provider == "gcs":
        if not config.gcs_bucket:
            raise ConfigError("backend.gcs_bucket is required for the gcs provider")
        from bucketstore.clients.gcs import GCSBucketClient

        return GCSBucketClient.from_name(
            config.gcs_bucket,
            project=config.gcs_project,
            page_size=config.page_size,
        )

    raise ConfigError(f"Unknown backend provider: {config.provider}")
