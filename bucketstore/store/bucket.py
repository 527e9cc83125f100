"""
BucketDatastore — the datastore contract on top of a bucket.

Every key lives under a fixed root inside the bucket:

    root="/ipfs", key=/blocks/CIQA  →  object "ipfs/blocks/CIQA"

The store keeps no connection or cache of its own. Each operation is one
or a few client calls, and consistency is whatever the bucket provides.
"""

from __future__ import annotations

import asyncio
import logging

from bucketstore.clients.base import ObjectStoreClient
from bucketstore.core.config import BucketStoreConfig
from bucketstore.core.errors import (
    BucketNotFoundError,
    BucketStoreError,
    ClientError,
    ConfigError,
    DeleteFailedError,
    InvalidValueError,
    NotFoundError,
    ObjectNotFoundError,
    OpenFailedError,
    WriteFailedError,
)
from bucketstore.core.key import Key
from bucketstore.store.base import Datastore
from bucketstore.store.batch import Batch
from bucketstore.store.keymap import full_key, key_from_object_name, listing_prefix
from bucketstore.store.query import Query, QueryResults

logger = logging.getLogger(__name__)


class BucketDatastore(Datastore):
    """
    Datastore backed by a bucket.

    Usage:
        client = InMemoryBucketClient()
        store = BucketDatastore("/data", client=client, create_if_missing=True)
        await store.open()

        await store.put("/a/b", b"x")
        value = await store.get("/a/b")  # b"x"
    """

    def __init__(
        self,
        root: str = "/",
        client: ObjectStoreClient | None = None,
        create_if_missing: bool = False,
    ) -> None:
        if not isinstance(root, str):
            raise ConfigError(f"root must be a string but was {type(root).__name__}")
        if not isinstance(client, ObjectStoreClient):
            raise ConfigError(
                "An ObjectStoreClient for an existing or creatable bucket must be supplied"
            )
        if not isinstance(create_if_missing, bool):
            raise ConfigError(
                f"create_if_missing must be a boolean but was "
                f"({type(create_if_missing).__name__}) {create_if_missing}"
            )
        self.root = root
        self.create_if_missing = create_if_missing
        self._client = client

    @classmethod
    def from_config(
        cls,
        config: BucketStoreConfig,
        client: ObjectStoreClient | None = None,
    ) -> BucketDatastore:
        """Build a store, creating the client from config.backend unless given."""
        if client is None:
            from bucketstore.clients.factory import create_client

            client = create_client(config.backend)
        return cls(
            config.store.root,
            client=client,
            create_if_missing=config.store.create_if_missing,
        )

    @property
    def client(self) -> ObjectStoreClient:
        return self._client

    def _full_key(self, key: Key | str) -> str:
        return full_key(self.root, Key.of(key))

    # ━━━ Single-key operations ━━━

    async def has(self, key: Key | str) -> bool:
        return await self._client.exists(self._full_key(key))

    async def put(self, key: Key | str, value: bytes) -> None:
        name = self._full_key(key)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise InvalidValueError(
                f"Value for {key} must be bytes-like but was {type(value).__name__}"
            )
        value = bytes(value)
        try:
            await self._client.upload(name, value)
        except BucketNotFoundError as e:
            if not self.create_if_missing:
                raise WriteFailedError(
                    f"Bucket is missing and create_if_missing is off: {e}", key=str(key)
                ) from e
            logger.info(f"Bucket missing while writing {name}, creating it")
            await self._client.create_bucket()
            try:
                await self._client.upload(name, value)
            except ClientError as retry_error:
                raise WriteFailedError(
                    f"Failed to write {key} after creating bucket: {retry_error}",
                    key=str(key),
                ) from retry_error
        except ClientError as e:
            raise WriteFailedError(f"Failed to write {key}: {e}", key=str(key)) from e
        logger.debug(f"put {key} → {name} ({len(value)} bytes)")

    async def get(self, key: Key | str) -> bytes:
        try:
            return await self._client.download(self._full_key(key))
        except ObjectNotFoundError as e:
            raise NotFoundError(f"Key not found: {key}", key=str(key)) from e

    async def delete(self, key: Key | str) -> None:
        try:
            await self._client.delete(self._full_key(key))
        except ObjectNotFoundError as e:
            raise NotFoundError(f"Key not found: {key}", key=str(key)) from e
        except ClientError as e:
            raise DeleteFailedError(f"Failed to delete {key}: {e}", key=str(key)) from e
        logger.debug(f"delete {key}")

    # ━━━ Query ━━━

    def query(self, query: Query | None = None) -> QueryResults:
        return QueryResults(query or Query(), list_keys=self._list_keys, fetch=self.get)

    async def _list_keys(self, prefix: str) -> list[Key]:
        """Walk every listing page under prefix, sequentially."""
        object_prefix = listing_prefix(self.root, prefix)
        keys: list[Key] = []
        page_token: str | None = None
        pages = 0

        while True:
            page = await self._client.list_page(object_prefix, page_token)
            pages += 1
            for name in page.names:
                key = key_from_object_name(self.root, name)
                if key is None:
                    logger.debug(f"Skipping object outside root {self.root!r}: {name}")
                    continue
                keys.append(key)
            page_token = page.next_page_token
            if not page_token:
                break

        logger.debug(f"Listed {len(keys)} keys under {object_prefix!r} in {pages} pages")
        return keys

    # ━━━ Batch ━━━

    def batch(self) -> Batch:
        return Batch(self)

    # ━━━ Lifecycle ━━━

    async def open(self) -> None:
        """
        Check the bucket. A missing bucket is bootstrapped by writing an
        empty record at the root key; anything else fails the open.
        """
        try:
            await self._client.get_metadata()
        except BucketNotFoundError:
            logger.info(f"Bucket not found, bootstrapping store at {self.root!r}")
            try:
                await self.put(Key.root(), b"")
            except BucketStoreError as e:
                raise OpenFailedError(f"Failed to bootstrap store: {e}") from e
            return
        except ClientError as e:
            raise OpenFailedError(f"Failed to open store: {e}") from e

    async def close(self) -> None:
        # Nothing to release; the client belongs to the caller
        await asyncio.sleep(0)
