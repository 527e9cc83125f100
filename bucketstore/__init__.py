"""
bucketstore — a key/value datastore on top of a cloud object bucket.

Public API:
    from bucketstore import BucketDatastore, Key, Query
"""

__version__ = "0.1.0"

# Core
from bucketstore.core.config import BucketStoreConfig
from bucketstore.core.errors import (
    BucketStoreError,
    NotFoundError,
    WriteFailedError,
    DeleteFailedError,
    OpenFailedError,
    BatchCommitError,
)
from bucketstore.core.key import Key

# Clients
from bucketstore.clients.base import ObjectStoreClient, ListPage, BucketMetadata
from bucketstore.clients.memory import InMemoryBucketClient

# Store
from bucketstore.store.base import Datastore
from bucketstore.store.batch import Batch, BatchResult
from bucketstore.store.bucket import BucketDatastore
from bucketstore.store.query import Entry, Query, QueryResults, QueryState

__all__ = [
    # Core
    "BucketStoreConfig",
    "BucketStoreError",
    "NotFoundError",
    "WriteFailedError",
    "DeleteFailedError",
    "OpenFailedError",
    "BatchCommitError",
    "Key",
    # Clients
    "ObjectStoreClient",
    "ListPage",
    "BucketMetadata",
    "InMemoryBucketClient",
    # Store
    "Datastore",
    "Batch",
    "BatchResult",
    "BucketDatastore",
    "Entry",
    "Query",
    "QueryResults",
    "QueryState",
]
