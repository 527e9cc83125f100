"""
bucketstore exception hierarchy.

Every error in the system inherits from BucketStoreError.
Each layer has its own error class for targeted catching.

Usage:
    try:
        value = await store.get(Key("/a/b"))
    except NotFoundError:
        # Key is absent
    except BucketStoreError as e:
        # Anything else went wrong
"""

from __future__ import annotations


class BucketStoreError(Exception):
    """Base exception for all bucketstore errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Layer 0: Core Errors ━━━


class ConfigError(BucketStoreError):
    """Configuration is invalid, missing, or malformed."""

    pass


class InvalidKeyError(BucketStoreError):
    """A key could not be built from the given value."""

    pass


class InvalidValueError(BucketStoreError):
    """A record value is not bytes-like."""

    pass


# ━━━ Layer 1: Client Errors ━━━


class ClientError(BucketStoreError):
    """Object store client failure: transport, auth or quota errors."""

    def __init__(
        self,
        message: str,
        name: str = "",
        details: dict | None = None,
    ):
        self.name = name
        super().__init__(message, details)


class ObjectNotFoundError(ClientError):
    """The named object does not exist in the bucket."""

    pass


class BucketNotFoundError(ClientError):
    """The bucket itself does not exist."""

    pass


# ━━━ Layer 2: Datastore Errors ━━━


class DatastoreError(BucketStoreError):
    """Datastore operation failure."""

    def __init__(
        self,
        message: str,
        key: str = "",
        details: dict | None = None,
    ):
        self.key = key
        super().__init__(message, details)


class NotFoundError(DatastoreError):
    """Requested key does not exist."""

    pass


class WriteFailedError(DatastoreError):
    """A put could not complete."""

    pass


class DeleteFailedError(DatastoreError):
    """A delete failed for a reason other than the key being absent."""

    pass


class OpenFailedError(DatastoreError):
    """The store could not establish or bootstrap its bucket."""

    pass


class BatchCommitError(DatastoreError):
    """A batch commit finished with at least one failed phase."""

    def __init__(self, message: str, result, details: dict | None = None):
        self.result = result
        super().__init__(message, details=details)
