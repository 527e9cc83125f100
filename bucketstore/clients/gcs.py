"""
Google Cloud Storage bucket client.

Wraps a google.cloud.storage Bucket. The SDK is blocking, so every call
runs in the default executor to keep the event loop free.

404s are translated by call site:
    download/delete       → ObjectNotFoundError
    upload/list/metadata  → BucketNotFoundError
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage

from bucketstore.clients.base import BucketMetadata, ListPage, ObjectStoreClient
from bucketstore.core.errors import (
    BucketNotFoundError,
    ClientError,
    ObjectNotFoundError,
)

logger = logging.getLogger(__name__)


class GCSBucketClient(ObjectStoreClient):
    """
    Bucket client backed by Google Cloud Storage.

    Usage:
        client = GCSBucketClient.from_name("ipfs-gcs", project="my-project")
        store = BucketDatastore("/ipfs", client=client, create_if_missing=True)
    """

    def __init__(self, bucket: storage.Bucket, page_size: int = 1000) -> None:
        self._bucket = bucket
        self.page_size = page_size

    @classmethod
    def from_name(
        cls,
        bucket_name: str,
        project: str | None = None,
        page_size: int = 1000,
    ) -> GCSBucketClient:
        """Build a client using application default credentials."""
        client = storage.Client(project=project)
        return cls(client.bucket(bucket_name), page_size=page_size)

    @property
    def name(self) -> str:
        return self._bucket.name

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def exists(self, name: str) -> bool:
        try:
            return await self._run(self._bucket.blob(name).exists)
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to check object '{name}': {e}", name=name) from e

    async def upload(self, name: str, data: bytes) -> None:
        blob = self._bucket.blob(name)
        try:
            await self._run(
                blob.upload_from_string,
                bytes(data),
                content_type="application/octet-stream",
            )
        except gcs_exceptions.NotFound as e:
            raise BucketNotFoundError(
                f"Bucket '{self.name}' does not exist", name=name
            ) from e
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to upload object '{name}': {e}", name=name) from e

    async def download(self, name: str) -> bytes:
        try:
            return await self._run(self._bucket.blob(name).download_as_bytes)
        except gcs_exceptions.NotFound as e:
            raise ObjectNotFoundError(f"No such object: {name}", name=name) from e
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to download object '{name}': {e}", name=name) from e

    async def delete(self, name: str) -> None:
        try:
            await self._run(self._bucket.blob(name).delete)
        except gcs_exceptions.NotFound as e:
            raise ObjectNotFoundError(f"No such object: {name}", name=name) from e
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to delete object '{name}': {e}", name=name) from e

    def _list_page_sync(self, prefix: str, page_token: str | None) -> ListPage:
        iterator = self._bucket.list_blobs(
            prefix=prefix or None,
            page_token=page_token,
            page_size=self.page_size,
        )
        page = next(iterator.pages, None)
        if page is None:
            return ListPage(names=[])
        names = [blob.name for blob in page]
        return ListPage(names=names, next_page_token=iterator.next_page_token)

    async def list_page(self, prefix: str, page_token: str | None = None) -> ListPage:
        try:
            return await self._run(self._list_page_sync, prefix, page_token)
        except gcs_exceptions.NotFound as e:
            raise BucketNotFoundError(f"Bucket '{self.name}' does not exist") from e
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to list objects with prefix '{prefix}': {e}") from e

    async def get_metadata(self) -> BucketMetadata:
        try:
            await self._run(self._bucket.reload)
        except gcs_exceptions.NotFound as e:
            raise BucketNotFoundError(f"Bucket '{self.name}' does not exist") from e
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to read bucket '{self.name}': {e}") from e
        return BucketMetadata(
            name=self.name,
            location=self._bucket.location,
            extra={"storage_class": self._bucket.storage_class},
        )

    async def create_bucket(self) -> None:
        try:
            await self._run(self._bucket.create)
        except gcs_exceptions.Conflict:
            logger.debug(f"Bucket '{self.name}' already exists")
            return
        except gcs_exceptions.GoogleAPIError as e:
            raise ClientError(f"Failed to create bucket '{self.name}': {e}") from e
        logger.info(f"Created bucket '{self.name}'")
