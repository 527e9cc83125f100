"""
SQLite bucket client.

Emulates a bucket on local disk using aiosqlite.
WAL mode enabled for concurrent read support.
Several named buckets can share one database file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from bucketstore.clients.base import BucketMetadata, ListPage, ObjectStoreClient
from bucketstore.core.errors import (
    BucketNotFoundError,
    ClientError,
    ObjectNotFoundError,
)

logger = logging.getLogger(__name__)


class SQLiteBucketClient(ObjectStoreClient):
    """
    SQLite-backed bucket.

    Usage:
        client = SQLiteBucketClient("~/.bucketstore/bucket.db", bucket="dev")
        await client.initialize()
        await client.create_bucket()

        await client.upload("user/name", b"Alex")
        value = await client.download("user/name")  # b"Alex"
    """

    def __init__(
        self,
        db_path: str | Path,
        bucket: str = "default",
        page_size: int = 1000,
    ) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db: aiosqlite.Connection | None = None
        self.bucket = bucket
        self.page_size = page_size

    async def initialize(self) -> None:
        """Open the database and create tables."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._db = await aiosqlite.connect(str(self._db_path))

            await self._db.execute("PRAGMA journal_mode=WAL")
            await self._db.execute("PRAGMA synchronous=NORMAL")

            await self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS buckets (
                    name TEXT PRIMARY KEY,
                    created_at REAL NOT NULL DEFAULT (unixepoch('now'))
                )
                """
            )
            await self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS objects (
                    bucket TEXT NOT NULL,
                    name TEXT NOT NULL,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL DEFAULT (unixepoch('now')),
                    PRIMARY KEY (bucket, name)
                )
                """
            )

            await self._db.commit()
            logger.debug(f"SQLite bucket client initialized at {self._db_path}")

        except Exception as e:
            raise ClientError(f"Failed to initialize SQLite at {self._db_path}: {e}")

    async def _ensure_db(self) -> aiosqlite.Connection:
        """Ensure database is initialized."""
        if self._db is None:
            await self.initialize()
        return self._db  # type: ignore[return-value]

    async def _bucket_exists(self, db: aiosqlite.Connection) -> bool:
        async with db.execute(
            "SELECT 1 FROM buckets WHERE name = ?", (self.bucket,)
        ) as cursor:
            return await cursor.fetchone() is not None

    async def _require_bucket(self, db: aiosqlite.Connection) -> None:
        if not await self._bucket_exists(db):
            raise BucketNotFoundError(f"Bucket '{self.bucket}' does not exist")

    async def exists(self, name: str) -> bool:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT 1 FROM objects WHERE bucket = ? AND name = ?",
                (self.bucket, name),
            ) as cursor:
                return await cursor.fetchone() is not None
        except Exception as e:
            raise ClientError(f"Failed to check object '{name}': {e}", name=name)

    async def upload(self, name: str, data: bytes) -> None:
        db = await self._ensure_db()
        await self._require_bucket(db)
        try:
            await db.execute(
                """
                INSERT INTO objects (bucket, name, value, updated_at)
                VALUES (?, ?, ?, unixepoch('now'))
                ON CONFLICT(bucket, name) DO UPDATE
                SET value = excluded.value, updated_at = unixepoch('now')
                """,
                (self.bucket, name, bytes(data)),
            )
            await db.commit()
        except Exception as e:
            raise ClientError(f"Failed to upload object '{name}': {e}", name=name)

    async def download(self, name: str) -> bytes:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT value FROM objects WHERE bucket = ? AND name = ?",
                (self.bucket, name),
            ) as cursor:
                row = await cursor.fetchone()
        except Exception as e:
            raise ClientError(f"Failed to download object '{name}': {e}", name=name)
        if row is None:
            raise ObjectNotFoundError(f"No such object: {name}", name=name)
        return bytes(row[0])

    async def delete(self, name: str) -> None:
        db = await self._ensure_db()
        try:
            cursor = await db.execute(
                "DELETE FROM objects WHERE bucket = ? AND name = ?",
                (self.bucket, name),
            )
            await db.commit()
        except Exception as e:
            raise ClientError(f"Failed to delete object '{name}': {e}", name=name)
        if cursor.rowcount == 0:
            raise ObjectNotFoundError(f"No such object: {name}", name=name)

    async def list_page(self, prefix: str, page_token: str | None = None) -> ListPage:
        db = await self._ensure_db()
        await self._require_bucket(db)
        try:
            # Fetch one extra row to learn whether another page exists
            async with db.execute(
                """
                SELECT name FROM objects
                WHERE bucket = ? AND substr(name, 1, ?) = ? AND name > ?
                ORDER BY name
                LIMIT ?
                """,
                (self.bucket, len(prefix), prefix, page_token or "", self.page_size + 1),
            ) as cursor:
                rows = await cursor.fetchall()
        except Exception as e:
            raise ClientError(f"Failed to list objects with prefix '{prefix}': {e}")

        names = [row[0] for row in rows[: self.page_size]]
        next_token = names[-1] if len(rows) > self.page_size else None
        return ListPage(names=names, next_page_token=next_token)

    async def get_metadata(self) -> BucketMetadata:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT created_at FROM buckets WHERE name = ?", (self.bucket,)
            ) as cursor:
                row = await cursor.fetchone()
        except Exception as e:
            raise ClientError(f"Failed to read bucket '{self.bucket}': {e}")
        if row is None:
            raise BucketNotFoundError(f"Bucket '{self.bucket}' does not exist")
        return BucketMetadata(
            name=self.bucket,
            location=str(self._db_path),
            extra={"created_at": row[0]},
        )

    async def create_bucket(self) -> None:
        db = await self._ensure_db()
        try:
            await db.execute(
                "INSERT OR IGNORE INTO buckets (name) VALUES (?)", (self.bucket,)
            )
            await db.commit()
            logger.info(f"Created bucket '{self.bucket}' in {self._db_path}")
        except Exception as e:
            raise ClientError(f"Failed to create bucket '{self.bucket}': {e}")

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None
