"""
Batch — queued puts and deletes applied on commit.

Not atomic. Commit runs every put in insertion order, then every delete in
insertion order, one at a time. The first failure in a phase stops that
phase only; whatever already succeeded stays applied. A key queued for
both put and delete ends up deleted, since the delete phase runs last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bucketstore.core.errors import BatchCommitError
from bucketstore.core.key import Key

if TYPE_CHECKING:
    from bucketstore.store.base import Datastore

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """What a commit managed to apply, and the first error of each phase."""

    put_keys: list[Key] = field(default_factory=list)
    deleted_keys: list[Key] = field(default_factory=list)
    put_error: Exception | None = None
    delete_error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.put_error is None and self.delete_error is None

    def raise_for_error(self) -> None:
        """Raise BatchCommitError if either phase failed."""
        if self.ok:
            return
        cause = self.put_error or self.delete_error
        raise BatchCommitError(
            f"Batch commit failed after {len(self.put_keys)} puts "
            f"and {len(self.deleted_keys)} deletes: {cause}",
            result=self,
        ) from cause


class Batch:
    """
    Pending writes against a datastore.

    Usage:
        batch = store.batch()
        batch.put("/x", b"1")
        batch.delete("/y")
        result = await batch.commit()
        result.raise_for_error()
    """

    def __init__(self, store: Datastore) -> None:
        self._store = store
        self._puts: list[tuple[Key | str, bytes]] = []
        self._deletes: list[Key | str] = []

    def put(self, key: Key | str, value: bytes) -> None:
        # Validated at commit; queuing never fails
        self._puts.append((key, value))

    def delete(self, key: Key | str) -> None:
        self._deletes.append(key)

    def __len__(self) -> int:
        return len(self._puts) + len(self._deletes)

    async def commit(self) -> BatchResult:
        """Apply pending operations. Always returns a result; never rolls back."""
        puts, self._puts = self._puts, []
        deletes, self._deletes = self._deletes, []
        result = BatchResult()

        for key, value in puts:
            try:
                await self._store.put(key, value)
            except Exception as e:
                logger.warning(f"Batch put of {key} failed, skipping remaining puts: {e}")
                result.put_error = e
                break
            result.put_keys.append(Key.of(key))

        for key in deletes:
            try:
                await self._store.delete(key)
            except Exception as e:
                logger.warning(f"Batch delete of {key} failed, skipping remaining deletes: {e}")
                result.delete_error = e
                break
            result.deleted_keys.append(Key.of(key))

        logger.debug(
            f"Batch committed: {len(result.put_keys)}/{len(puts)} puts, "
            f"{len(result.deleted_keys)}/{len(deletes)} deletes"
        )
        return result
