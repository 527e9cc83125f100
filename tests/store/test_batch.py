"""Tests for batches."""

import pytest
from bucketstore.clients.memory import InMemoryBucketClient
from bucketstore.core.errors import (
    BatchCommitError,
    ClientError,
    InvalidKeyError,
    InvalidValueError,
    NotFoundError,
    WriteFailedError,
)
from bucketstore.core.key import Key
from bucketstore.store.bucket import BucketDatastore


class RecordingClient(InMemoryBucketClient):
    """Logs every mutation and fails uploads for chosen names."""

    def __init__(self, fail_upload: set[str] | None = None, **kwargs):
        super().__init__(**kwargs)
        self.fail_upload = fail_upload or set()
        self.log: list[str] = []

    async def upload(self, name, data):
        self.log.append(f"upload {name}")
        if name in self.fail_upload:
            raise ClientError("upload rejected", name=name)
        await super().upload(name, data)

    async def delete(self, name):
        self.log.append(f"delete {name}")
        await super().delete(name)


@pytest.mark.asyncio
async def test_batch_queues_without_io():
    client = RecordingClient()
    store = BucketDatastore("/", client=client)
    batch = store.batch()
    batch.put("/a", b"1")
    batch.delete("/b")
    assert len(batch) == 2
    assert client.log == []


@pytest.mark.asyncio
async def test_commit_applies_puts_then_deletes_in_order():
    client = RecordingClient()
    store = BucketDatastore("/", client=client)
    await store.put("/old", b"")
    client.log.clear()

    batch = store.batch()
    batch.delete("/old")
    batch.put("/b", b"2")
    batch.put("/a", b"1")
    result = await batch.commit()

    assert result.ok
    assert client.log == ["upload b", "upload a", "delete old"]
    assert result.put_keys == [Key("/b"), Key("/a")]
    assert result.deleted_keys == [Key("/old")]
    assert await store.get("/a") == b"1"
    assert await store.has("/old") is False


@pytest.mark.asyncio
async def test_uncommitted_batch_is_discarded(store):
    batch = store.batch()
    batch.put("/x", b"1")
    del batch
    assert await store.has("/x") is False


@pytest.mark.asyncio
async def test_delete_of_missing_key_reports_not_found_but_keeps_puts(store):
    batch = store.batch()
    batch.put("/x", b"1")
    batch.delete("/y")

    result = await batch.commit()

    assert not result.ok
    assert result.put_error is None
    assert isinstance(result.delete_error, NotFoundError)
    assert result.put_keys == [Key("/x")]
    assert await store.get("/x") == b"1"


@pytest.mark.asyncio
async def test_put_failure_halts_put_phase_only():
    client = RecordingClient(fail_upload={"b"})
    store = BucketDatastore("/", client=client)
    await store.put("/gone", b"")
    client.log.clear()

    batch = store.batch()
    batch.put("/a", b"1")
    batch.put("/b", b"2")
    batch.put("/c", b"3")
    batch.delete("/gone")
    result = await batch.commit()

    assert isinstance(result.put_error, WriteFailedError)
    assert result.put_keys == [Key("/a")]
    assert "upload c" not in client.log
    # applied puts are not rolled back
    assert await store.get("/a") == b"1"
    # the delete phase still runs
    assert result.deleted_keys == [Key("/gone")]


@pytest.mark.asyncio
async def test_delete_failure_halts_remaining_deletes(store):
    await store.put("/c", b"")
    batch = store.batch()
    batch.delete("/missing")
    batch.delete("/c")

    result = await batch.commit()

    assert isinstance(result.delete_error, NotFoundError)
    assert result.deleted_keys == []
    assert await store.has("/c") is True


@pytest.mark.asyncio
async def test_key_in_both_sets_ends_up_deleted(store):
    batch = store.batch()
    batch.delete("/k")
    batch.put("/k", b"v")

    result = await batch.commit()

    assert result.ok
    assert await store.has("/k") is False


@pytest.mark.asyncio
async def test_duplicate_puts_last_one_wins(store):
    batch = store.batch()
    batch.put("/k", b"1")
    batch.put("/k", b"2")
    await batch.commit()
    assert await store.get("/k") == b"2"


@pytest.mark.asyncio
async def test_raise_for_error(store):
    batch = store.batch()
    batch.delete("/missing")
    result = await batch.commit()

    with pytest.raises(BatchCommitError) as exc_info:
        result.raise_for_error()
    assert exc_info.value.result is result
    assert isinstance(exc_info.value.__cause__, NotFoundError)


@pytest.mark.asyncio
async def test_raise_for_error_is_silent_on_success(store):
    batch = store.batch()
    batch.put("/k", b"v")
    (await batch.commit()).raise_for_error()


@pytest.mark.asyncio
async def test_commit_clears_batch(store):
    batch = store.batch()
    batch.put("/k", b"v")
    await batch.commit()
    assert len(batch) == 0

    batch.put("/k2", b"v")
    result = await batch.commit()
    assert result.put_keys == [Key("/k2")]


@pytest.mark.asyncio
async def test_empty_commit(store):
    result = await store.batch().commit()
    assert result.ok
    assert result.put_keys == []
    assert result.deleted_keys == []


@pytest.mark.asyncio
async def test_invalid_entries_queue_and_fail_at_commit(store):
    batch = store.batch()
    batch.put("/ok", b"1")
    batch.put(42, b"2")  # type: ignore[arg-type]
    batch.put("/late", b"3")
    batch.delete(None)  # type: ignore[arg-type]
    assert len(batch) == 4

    result = await batch.commit()

    assert isinstance(result.put_error, InvalidKeyError)
    assert isinstance(result.delete_error, InvalidKeyError)
    assert result.put_keys == [Key("/ok")]
    assert await store.has("/late") is False


@pytest.mark.asyncio
async def test_non_bytes_value_fails_put_phase(store):
    batch = store.batch()
    batch.put("/k", "text")  # type: ignore[arg-type]

    result = await batch.commit()

    assert isinstance(result.put_error, InvalidValueError)
    assert result.put_keys == []
