"""On-device document store backed by SQLite (aiosqlite).

Each object store is a table of JSON values keyed by a string. ``trips``
derives its key from the document's ``id``; the per-trip list stores are
keyless and take the trip id explicitly. The schema version lives in
``PRAGMA user_version``.
"""

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite

from tripsync.errors import ErrorCode, StorageError
from tripsync.observability import ObservabilitySink, report

logger = logging.getLogger(__name__)

DB_VERSION = 5
MAX_OPEN_ATTEMPTS = 3

TRIPS_STORE = "trips"
# Keyless list stores, one entry per trip id.
LIST_STORES = ("packing_lists", "meals", "shopping_lists", "deleted_ingredients", "todo_items")
# Stores that carried a key path in the version 1 schema.
LEGACY_ARRAY_STORES = ("packing_lists", "meals", "shopping_lists")

_OPEN_ERRORS = (sqlite3.Error, OSError)


class LocalStore:
    """Versioned local store. Opens lazily on first use and stays open until ``close()``."""

    def __init__(
        self,
        path: str | Path,
        sink: ObservabilitySink | None = None,
        retry_delay: float = 0.15,
    ) -> None:
        self._path = Path(path).expanduser()
        self._sink = sink
        self._retry_delay = retry_delay
        self._conn: aiosqlite.Connection | None = None
        self._key_paths: dict[str, str | None] = {}

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is None:
            self._conn = await self._open_with_retry()
            self._key_paths = await self._load_key_paths(self._conn)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> "LocalStore":
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # === Open and upgrade ===

    async def _open_with_retry(self) -> aiosqlite.Connection:
        for attempt in range(1, MAX_OPEN_ATTEMPTS + 1):
            try:
                return await self._connect()
            except _OPEN_ERRORS as e:
                logger.warning("Local store open attempt %d failed: %s", attempt, e)
                report(self._sink, f"open_attempt_{attempt}", e, subsystem="local_store")
                if attempt < MAX_OPEN_ATTEMPTS:
                    await asyncio.sleep(self._retry_delay * attempt)

        # Every attempt failed: assume corruption, delete and start fresh.
        try:
            self._delete_files()
            logger.error("Local store deleted for recovery: %s", self._path)
            report(
                self._sink,
                "corruption_recovery",
                StorageError("Local database deleted for recovery"),
                subsystem="local_store",
            )
            return await self._connect()
        except _OPEN_ERRORS as e:
            report(self._sink, "recovery_failed", e, subsystem="local_store")
            raise StorageError(
                f"Unable to open local database at {self._path}: {e}",
                code=ErrorCode.STORAGE_OPEN_FAILED,
            ) from e

    async def _connect(self) -> aiosqlite.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self._path)
        try:
            await self._upgrade(conn)
        except BaseException:
            await conn.close()
            raise
        return conn

    def _delete_files(self) -> None:
        for suffix in ("", "-wal", "-shm", "-journal"):
            Path(f"{self._path}{suffix}").unlink(missing_ok=True)

    async def _upgrade(self, conn: aiosqlite.Connection) -> None:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        old_version = row[0] if row else 0
        if old_version >= DB_VERSION:
            return

        logger.info("Upgrading local store from v%d to v%d", old_version, DB_VERSION)
        await conn.execute("CREATE TABLE IF NOT EXISTS _object_stores (name TEXT PRIMARY KEY, key_path TEXT)")

        if old_version < 1:
            await self._create_store(conn, TRIPS_STORE, key_path="id")
            for name in LIST_STORES:
                await self._create_store(conn, name)
        if old_version == 1:
            await self._rebuild_legacy_stores(conn)
        if old_version < 3:
            await self._create_store(conn, "deleted_ingredients")
        # v4 carried no schema change.
        if old_version < 5:
            await self._create_store(conn, "todo_items")

        await conn.execute(f"PRAGMA user_version = {DB_VERSION}")
        await conn.commit()

    @staticmethod
    async def _create_store(conn: aiosqlite.Connection, name: str, key_path: str | None = None) -> None:
        await conn.execute(f"CREATE TABLE IF NOT EXISTS {name} (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
        await conn.execute(
            "INSERT OR REPLACE INTO _object_stores (name, key_path) VALUES (?, ?)",
            (name, key_path),
        )

    async def _rebuild_legacy_stores(self, conn: aiosqlite.Connection) -> None:
        """Recreate the version 1 array stores without a key path, carrying over list rows."""
        for name in LEGACY_ARRAY_STORES:
            rows: list[tuple[str, str]] = []
            try:
                async with conn.execute(f"SELECT key, value FROM {name}") as cursor:
                    rows = [(str(key), value) for key, value in await cursor.fetchall()]
            except sqlite3.OperationalError:
                logger.info("Legacy store %s missing; creating it empty", name)

            kept = []
            for key, value in rows:
                try:
                    decoded = json.loads(value)
                except (TypeError, ValueError):
                    continue
                if isinstance(decoded, list):
                    kept.append((key, json.dumps(decoded)))

            await conn.execute(f"DROP TABLE IF EXISTS {name}")
            await self._create_store(conn, name)
            await conn.executemany(f"INSERT INTO {name} (key, value) VALUES (?, ?)", kept)
            dropped = len(rows) - len(kept)
            if dropped:
                logger.warning("Dropped %d unreadable rows from legacy store %s", dropped, name)
            logger.info("Rebuilt legacy store %s with %d rows", name, len(kept))

    @staticmethod
    async def _load_key_paths(conn: aiosqlite.Connection) -> dict[str, str | None]:
        async with conn.execute("SELECT name, key_path FROM _object_stores") as cursor:
            return {name: key_path for name, key_path in await cursor.fetchall()}

    # === Operations ===

    async def _require_connection(self) -> aiosqlite.Connection:
        await self.open()
        if self._conn is None:
            raise StorageError("Local store is not open", code=ErrorCode.STORAGE_OPEN_FAILED)
        return self._conn

    def _check_store(self, store: str) -> str | None:
        """Return the store's key path, raising for unknown stores."""
        if store not in self._key_paths:
            raise StorageError(f"Unknown object store: {store}")
        return self._key_paths[store]

    async def get_all(self, store: str) -> list[Any]:
        conn = await self._require_connection()
        self._check_store(store)
        try:
            async with conn.execute(f"SELECT value FROM {store} ORDER BY rowid") as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {store}: {e}") from e
        return [json.loads(value) for (value,) in rows]

    async def get(self, store: str, key: str) -> Any | None:
        conn = await self._require_connection()
        self._check_store(store)
        try:
            async with conn.execute(f"SELECT value FROM {store} WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {store}/{key}: {e}") from e
        return json.loads(row[0]) if row else None

    async def put(self, store: str, value: Any, key: str | None = None) -> None:
        """Insert or overwrite one entry.

        Keyed stores take the key from ``value``; keyless stores require ``key``.
        """
        conn = await self._require_connection()
        key_path = self._check_store(store)
        if key_path is not None:
            if key is not None:
                raise StorageError(f"Store {store} uses in-line keys; an explicit key is not allowed")
            if not isinstance(value, dict) or not value.get(key_path):
                raise StorageError(f"Value for {store} is missing key path {key_path!r}")
            key = str(value[key_path])
        elif key is None:
            raise StorageError(f"Store {store} has no key path; an explicit key is required")

        try:
            await conn.execute(
                f"INSERT INTO {store} (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )
            await conn.commit()
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to write {store}/{key}: {e}") from e

    async def delete(self, store: str, key: str) -> None:
        conn = await self._require_connection()
        self._check_store(store)
        try:
            await conn.execute(f"DELETE FROM {store} WHERE key = ?", (key,))
            await conn.commit()
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to delete {store}/{key}: {e}") from e

    async def delete_trip(self, trip_id: str) -> None:
        """Remove a trip and every child-collection entry for it in one transaction."""
        conn = await self._require_connection()
        stores = (TRIPS_STORE, *LIST_STORES)
        for store in stores:
            self._check_store(store)
        try:
            for store in stores:
                await conn.execute(f"DELETE FROM {store} WHERE key = ?", (trip_id,))
            await conn.commit()
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to delete trip {trip_id}: {e}") from e
