"""
Datastore interface.

Uniform key/value contract consumed by composing layers (repositories,
locks, tiered stores). Keys are Key objects (plain strings are coerced);
values are bytes (serialization is caller's responsibility).

Implementations:
    BucketDatastore — backed by a bucket through an ObjectStoreClient
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from bucketstore.core.key import Key

if TYPE_CHECKING:
    from bucketstore.store.batch import Batch
    from bucketstore.store.query import Query, QueryResults


class Datastore(ABC):
    """Abstract base class for datastores."""

    @abstractmethod
    async def has(self, key: Key | str) -> bool:
        """Check if a key exists."""
        ...

    @abstractmethod
    async def put(self, key: Key | str, value: bytes) -> None:
        """Store a value. Overwrites if exists."""
        ...

    @abstractmethod
    async def get(self, key: Key | str) -> bytes:
        """Get a value. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, key: Key | str) -> None:
        """Delete a key. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    def query(self, query: Query | None = None) -> QueryResults:
        """Start a query. Work begins on the first pull."""
        ...

    @abstractmethod
    def batch(self) -> Batch:
        """Create a new, empty batch."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """Prepare the store for use."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the store."""
        ...

    async def __aenter__(self) -> Datastore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
