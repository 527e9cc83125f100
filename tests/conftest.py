"""Shared test fixtures for bucketstore."""

import pytest
from bucketstore.clients.memory import InMemoryBucketClient
from bucketstore.core.config import BucketStoreConfig
from bucketstore.store.bucket import BucketDatastore


@pytest.fixture
def config():
    """Create a default config without loading from disk."""
    return BucketStoreConfig()


@pytest.fixture
def client():
    """In-memory bucket with a tiny page size so listings paginate."""
    return InMemoryBucketClient(page_size=2)


@pytest.fixture
def store(client):
    """A datastore rooted at /data on the in-memory bucket."""
    return BucketDatastore("/data", client=client)
