"""
Query engine — filters, orders, offset and limit over a prefix listing.

The bucket only knows how to list names by prefix, page by page. Everything
else a Query asks for is layered on top as a pull-based pipeline:

    listing → fetch value → filters → orders → offset → limit

Listing is eager: the first pull fetches every page and holds all matching
keys in memory. Values are fetched lazily, one per pulled entry, so at most
one download is in flight per consumer. Filters, offset and limit stream;
each order is a full, stable resort and therefore buffers its input.

Orders are applied one after another, left to right. With a stable sort
the LAST order dominates and earlier orders only break its ties:

    orders=[order_by_key(), order_by_value_size()]
    → by size, and within equal sizes by key
"""

from __future__ import annotations

from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import AsyncIterator, Awaitable, Callable

from bucketstore.core.key import Key

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Types
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(slots=True)
class Entry:
    """A query result. value is None for keys-only queries."""

    key: Key
    value: bytes | None = None


Filter = Callable[[Entry], bool]
Order = Callable[[Entry, Entry], int]


@dataclass
class Query:
    """What to return from a datastore query."""

    prefix: str = ""
    filters: list[Filter] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    offset: int | None = None
    limit: int | None = None
    keys_only: bool = False


class QueryState(str, Enum):
    """Lifecycle of a QueryResults iterator."""

    IDLE = "idle"
    LISTING = "listing"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Results
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class QueryResults:
    """
    Async iterator over query results.

    Nothing happens until the first pull. Any error (listing or fetching)
    moves the iterator to ERROR and is raised to the consumer; later pulls
    just end the iteration.

    Usage:
        async for entry in store.query(Query(prefix="/blocks", limit=10)):
            print(entry.key, len(entry.value))
    """

    def __init__(
        self,
        query: Query,
        list_keys: Callable[[str], Awaitable[list[Key]]],
        fetch: Callable[[Key], Awaitable[bytes]],
    ) -> None:
        self.query = query
        self.state = QueryState.IDLE
        self._list_keys = list_keys
        self._fetch = fetch
        self._pipeline: AsyncIterator[Entry] | None = None

    def __aiter__(self) -> QueryResults:
        return self

    async def __anext__(self) -> Entry:
        if self.state in (QueryState.DONE, QueryState.ERROR):
            raise StopAsyncIteration
        if self._pipeline is None:
            self._pipeline = self._build()
        try:
            return await self._pipeline.__anext__()
        except StopAsyncIteration:
            self.state = QueryState.DONE
            raise
        except Exception:
            self.state = QueryState.ERROR
            raise

    async def collect(self) -> list[Entry]:
        """Drain the remaining results into a list."""
        return [entry async for entry in self]

    async def aclose(self) -> None:
        """Stop the query and discard anything not yet pulled."""
        if self._pipeline is not None:
            await self._pipeline.aclose()  # type: ignore[attr-defined]
        if self.state is not QueryState.ERROR:
            self.state = QueryState.DONE

    def _build(self) -> AsyncIterator[Entry]:
        q = self.query
        stream: AsyncIterator[Entry] = self._source()
        for predicate in q.filters:
            stream = _filtered(stream, predicate)
        for order in q.orders:
            stream = _sorted(stream, order)
        if q.offset is not None:
            stream = _skip(stream, q.offset)
        if q.limit is not None:
            stream = _take(stream, q.limit)
        return stream

    async def _source(self) -> AsyncIterator[Entry]:
        self.state = QueryState.LISTING
        keys = await self._list_keys(self.query.prefix)
        self.state = QueryState.STREAMING
        for key in keys:
            if self.query.keys_only:
                yield Entry(key)
            else:
                yield Entry(key, await self._fetch(key))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Pipeline Stages
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


async def _filtered(source: AsyncIterator[Entry], predicate: Filter) -> AsyncIterator[Entry]:
    async with aclosing(source):
        async for entry in source:
            if predicate(entry):
                yield entry


async def _sorted(source: AsyncIterator[Entry], order: Order) -> AsyncIterator[Entry]:
    async with aclosing(source):
        entries = [entry async for entry in source]
    entries.sort(key=cmp_to_key(order))
    for entry in entries:
        yield entry


async def _skip(source: AsyncIterator[Entry], count: int) -> AsyncIterator[Entry]:
    skipped = 0
    async with aclosing(source):
        async for entry in source:
            if skipped < count:
                skipped += 1
                continue
            yield entry


async def _take(source: AsyncIterator[Entry], count: int) -> AsyncIterator[Entry]:
    # Stops pulling as soon as the limit is reached, so no extra fetches
    if count <= 0:
        return
    taken = 0
    async with aclosing(source):
        async for entry in source:
            yield entry
            taken += 1
            if taken >= count:
                return


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Filter and Order Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def filter_key_prefix(prefix: str) -> Filter:
    """Keep entries whose key string starts with prefix."""
    return lambda entry: str(entry.key).startswith(prefix)


def filter_value_equals(value: bytes) -> Filter:
    """Keep entries whose value equals value (never matches keys-only entries)."""
    return lambda entry: entry.value == value


def order_by_key(descending: bool = False) -> Order:
    sign = -1 if descending else 1
    return lambda a, b: sign * _compare(a.key, b.key)


def order_by_value(descending: bool = False) -> Order:
    sign = -1 if descending else 1
    return lambda a, b: sign * _compare(a.value or b"", b.value or b"")


def order_by_value_size(descending: bool = False) -> Order:
    sign = -1 if descending else 1
    return lambda a, b: sign * _compare(len(a.value or b""), len(b.value or b""))
