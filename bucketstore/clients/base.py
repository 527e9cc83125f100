"""
Object store client interface.

The datastore never talks to a cloud SDK directly. It consumes this
facade, which flattens a bucket into named byte blobs plus a paginated
prefix listing.

Implementations:
    GCSBucketClient — Google Cloud Storage
    SQLiteBucketClient — local bucket emulation on disk
    InMemoryBucketClient — for testing
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ListPage:
    """One page of a prefix listing."""

    names: list[str]
    next_page_token: str | None = None


@dataclass(frozen=True, slots=True)
class BucketMetadata:
    """What the backend knows about the bucket."""

    name: str
    location: str | None = None
    extra: dict = field(default_factory=dict)


class ObjectStoreClient(ABC):
    """
    Abstract base class for bucket clients.

    Names are flat strings ("ipfs/blocks/CIQA"); values are bytes.

    Errors:
        ObjectNotFoundError — download/delete of a missing object
        BucketNotFoundError — upload/get_metadata against a missing bucket
        ClientError — anything else
    """

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Check if an object exists."""
        ...

    @abstractmethod
    async def upload(self, name: str, data: bytes) -> None:
        """Write an object, replacing any existing one."""
        ...

    @abstractmethod
    async def download(self, name: str) -> bytes:
        """Read a whole object."""
        ...

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Delete an object."""
        ...

    @abstractmethod
    async def list_page(self, prefix: str, page_token: str | None = None) -> ListPage:
        """List one page of object names starting with prefix."""
        ...

    @abstractmethod
    async def get_metadata(self) -> BucketMetadata:
        """Fetch bucket metadata. Doubles as an existence check."""
        ...

    @abstractmethod
    async def create_bucket(self) -> None:
        """Create the bucket."""
        ...

    async def close(self) -> None:
        """Release client resources."""
        return None
