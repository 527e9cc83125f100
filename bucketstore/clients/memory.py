"""
In-memory bucket client — for testing.

Simple dict-based bucket. Data lost when process exits.
"""

from __future__ import annotations

from bucketstore.clients.base import BucketMetadata, ListPage, ObjectStoreClient
from bucketstore.core.errors import BucketNotFoundError, ObjectNotFoundError


class InMemoryBucketClient(ObjectStoreClient):
    """
    In-memory bucket for testing.

    Listing is paginated with page_size so callers see the same
    continuation-token flow as a real bucket.

    Usage:
        client = InMemoryBucketClient(page_size=2)
        await client.upload("a/b", b"value")
        assert await client.download("a/b") == b"value"
    """

    def __init__(
        self,
        name: str = "memory",
        page_size: int = 1000,
        bucket_exists: bool = True,
    ) -> None:
        self.name = name
        self.page_size = page_size
        self.bucket_exists = bucket_exists
        self._objects: dict[str, bytes] = {}

    def _require_bucket(self) -> None:
        if not self.bucket_exists:
            raise BucketNotFoundError(f"Bucket '{self.name}' does not exist")

    async def exists(self, name: str) -> bool:
        return self.bucket_exists and name in self._objects

    async def upload(self, name: str, data: bytes) -> None:
        self._require_bucket()
        self._objects[name] = bytes(data)

    async def download(self, name: str) -> bytes:
        if name not in self._objects:
            raise ObjectNotFoundError(f"No such object: {name}", name=name)
        return self._objects[name]

    async def delete(self, name: str) -> None:
        if name not in self._objects:
            raise ObjectNotFoundError(f"No such object: {name}", name=name)
        del self._objects[name]

    async def list_page(self, prefix: str, page_token: str | None = None) -> ListPage:
        self._require_bucket()
        names = sorted(
            n for n in self._objects
            if n.startswith(prefix) and (page_token is None or n > page_token)
        )
        page = names[: self.page_size]
        next_token = page[-1] if len(names) > self.page_size else None
        return ListPage(names=page, next_page_token=next_token)

    async def get_metadata(self) -> BucketMetadata:
        self._require_bucket()
        return BucketMetadata(name=self.name, extra={"objects": len(self._objects)})

    async def create_bucket(self) -> None:
        self.bucket_exists = True
