"""PostgreSQL flavour of the remote store.

Tables are declared in ``tripsync.db.schemas``: trips are keyed by
``(user_id, id)``, groups and child items by ``(user_id, trip_id, id)``.
Every statement filters on ``user_id``.
"""

import json
import logging
from datetime import date, datetime
from typing import Any

import boto3
import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from tripsync.auth.interface import AuthStateProvider
from tripsync.config import Config
from tripsync.db.schemas import Base
from tripsync.errors import NotFoundOrForbiddenError, PartialReplaceFailure, RemoteFailureError
from tripsync.models import CollectionKind, coerce_group_colors
from tripsync.remote.batch import MAX_BATCH, OpType, WriteOp, execute_batched
from tripsync.remote.interface import RemoteStore
from tripsync.remote.mapping import (
    GROUPS_TABLE,
    RECORD_FIELDS,
    TRIPS_TABLE,
    group_to_record,
    items_from_records,
    item_to_record,
    trip_from_record,
    trip_to_record,
)

logger = logging.getLogger(__name__)

_JSON_COLUMNS = frozenset({"data", "ingredients", "splits"})
_CHILD_TABLES = (GROUPS_TABLE, *(kind.value for kind in CollectionKind))


def _columns(table: str) -> tuple[str, ...]:
    """Stored fields of ``table`` that exist in the declared schema."""
    declared = Base.metadata.tables[table].columns
    return tuple(name for name in RECORD_FIELDS[table] if name in declared)


def _param(column: str, value: Any) -> Any:
    return Jsonb(value) if column in _JSON_COLUMNS and value is not None else value


def _normalize(row: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, (datetime, date)) else value
        for key, value in row.items()
    }


def _select(table: str, *predicates: str) -> sql.Composed:
    conditions = sql.SQL(" AND ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in predicates
    )
    return sql.SQL("SELECT {columns} FROM {table} WHERE {conditions}").format(
        columns=sql.SQL(", ").join(map(sql.Identifier, _columns(table))),
        table=sql.Identifier(table),
        conditions=conditions,
    )


def _primary_key(table: str) -> tuple[str, ...]:
    return tuple(column.name for column in Base.metadata.tables[table].primary_key.columns)


def _upsert(table: str) -> sql.Composed:
    columns = _columns(table)
    key = _primary_key(table)
    updates = [column for column in columns if column not in key]
    return sql.SQL(
        "INSERT INTO {table} ({columns}) VALUES ({values}) "
        "ON CONFLICT ({key}) DO UPDATE SET {updates} RETURNING {columns}"
    ).format(
        table=sql.Identifier(table),
        key=sql.SQL(", ").join(map(sql.Identifier, key)),
        columns=sql.SQL(", ").join(map(sql.Identifier, columns)),
        values=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        updates=sql.SQL(", ").join(
            sql.SQL("{0} = EXCLUDED.{0}").format(sql.Identifier(column)) for column in updates
        ),
    )


def _delete_where(table: str, *predicates: str) -> sql.Composed:
    conditions = sql.SQL(" AND ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in predicates
    )
    return sql.SQL("DELETE FROM {table} WHERE {conditions}").format(
        table=sql.Identifier(table),
        conditions=conditions,
    )


def load_credentials(config: Config) -> dict[str, str]:
    """Connection settings from Secrets Manager when an ARN is configured, else from config."""
    if config.postgres_secret_arn:
        client = boto3.client("secretsmanager", region_name=config.aws_region)
        secret = client.get_secret_value(SecretId=config.postgres_secret_arn)
        return json.loads(secret["SecretString"])
    return {
        "host": config.postgres_host,
        "port": str(config.postgres_port),
        "dbname": config.postgres_database,
        "user": config.postgres_user,
        "password": config.postgres_password,
    }


class PostgresRemoteStore(RemoteStore):
    def __init__(
        self,
        auth: AuthStateProvider,
        config: Config,
        connection: psycopg.Connection | None = None,
        max_batch: int = MAX_BATCH,
    ) -> None:
        super().__init__(auth, max_batch)
        self._config = config
        self._conn = connection
        self._secret_cache: dict[str, str] | None = None

    def _get_credentials(self) -> dict[str, str]:
        if self._secret_cache is None:
            self._secret_cache = load_credentials(self._config)
        return self._secret_cache

    def connect(self) -> None:
        creds = self._get_credentials()
        self._conn = psycopg.connect(
            host=creds.get("host", self._config.postgres_host),
            port=int(creds.get("port", self._config.postgres_port)),
            dbname=creds.get("dbname", self._config.postgres_database),
            user=creds.get("username", creds.get("user", self._config.postgres_user)),
            password=creds.get("password", self._config.postgres_password),
            autocommit=True,
        )

    def disconnect(self) -> None:
        if self._conn and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def _require_connection(self) -> psycopg.Connection:
        """Return the active connection, connecting on first use."""
        if self._conn is None or self._conn.closed:
            try:
                self.connect()
            except psycopg.Error as e:
                raise RemoteFailureError(f"Unable to connect to PostgreSQL: {e}") from e
        if self._conn is None:
            raise RemoteFailureError("PostgreSQL connection is not available")
        return self._conn

    def _fetch(self, query: sql.Composable, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = self._require_connection()
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return [_normalize(row) for row in cur.fetchall()]

    def __enter__(self) -> "PostgresRemoteStore":
        self._require_connection()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    # === Trips ===

    async def save_trip(self, trip: dict[str, Any], owner: str | None = None) -> dict[str, Any]:
        owner = self._resolve_owner(owner)
        trip = coerce_group_colors(trip)
        trip_id = trip["id"]
        record = trip_to_record(trip, owner)
        groups = [group_to_record(group, trip_id, owner) for group in trip["groups"]]
        trip_columns = _columns(TRIPS_TABLE)
        group_columns = _columns(GROUPS_TABLE)

        conn = self._require_connection()
        try:
            with conn.transaction(), conn.cursor(row_factory=dict_row) as cur:
                cur.execute(_upsert(TRIPS_TABLE), tuple(_param(c, record.get(c)) for c in trip_columns))
                stored = _normalize(cur.fetchone())
                stored_groups = []
                for group in groups:
                    cur.execute(_upsert(GROUPS_TABLE), tuple(_param(c, group.get(c)) for c in group_columns))
                    stored_groups.append(_normalize(cur.fetchone()))
                cur.execute(
                    sql.SQL("DELETE FROM {} WHERE user_id = %s AND trip_id = %s AND NOT (id = ANY(%s))").format(
                        sql.Identifier(GROUPS_TABLE)
                    ),
                    (owner, trip_id, [group["id"] for group in groups]),
                )
                pruned = cur.rowcount
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to save trip {trip_id}: {e}") from e

        logger.info("Saved trip %s with %d groups (%d pruned) for %s", trip_id, len(groups), pruned, owner)
        return trip_from_record(stored, stored_groups)

    async def get_trips(self, owner: str | None = None) -> list[dict[str, Any]]:
        owner = self._resolve_owner(owner)
        try:
            trips = self._fetch(_select(TRIPS_TABLE, "user_id"), (owner,))
            groups = self._fetch(_select(GROUPS_TABLE, "user_id"), (owner,))
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to fetch trips: {e}") from e

        groups_by_trip: dict[str, list[dict[str, Any]]] = {}
        for group in groups:
            groups_by_trip.setdefault(group["trip_id"], []).append(group)
        return [trip_from_record(trip, groups_by_trip.get(trip["id"], [])) for trip in trips]

    async def get_trip(self, trip_id: str, owner: str | None = None) -> dict[str, Any] | None:
        owner = self._resolve_owner(owner)
        try:
            rows = self._fetch(_select(TRIPS_TABLE, "user_id", "id"), (owner, trip_id))
            if not rows:
                return None
            record = rows[0]
            if record.get("user_id") != owner:
                logger.warning("Trip %s fetched for %s belongs to another owner", trip_id, owner)
                return None
            groups = self._fetch(_select(GROUPS_TABLE, "user_id", "trip_id"), (owner, trip_id))
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to fetch trip {trip_id}: {e}") from e
        return trip_from_record(record, groups)

    async def delete_trip(self, trip_id: str, owner: str | None = None) -> None:
        owner = self._resolve_owner(owner)
        conn = self._require_connection()
        try:
            with conn.transaction(), conn.cursor() as cur:
                cur.execute(
                    sql.SQL("DELETE FROM {} WHERE user_id = %s AND id = %s RETURNING id").format(
                        sql.Identifier(TRIPS_TABLE)
                    ),
                    (owner, trip_id),
                )
                deleted = cur.fetchall()
                if deleted:
                    for table in _CHILD_TABLES:
                        cur.execute(_delete_where(table, "user_id", "trip_id"), (owner, trip_id))
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to delete trip {trip_id}: {e}") from e

        if not deleted:
            logger.error("No trip deleted for %s: %s not found or access denied", owner, trip_id)
            raise NotFoundOrForbiddenError("Trip not found or you do not have permission to delete this trip")
        logger.info("Deleted trip %s for %s", trip_id, owner)

    # === Child collections ===

    async def save_collection(
        self, kind: CollectionKind, trip_id: str, items: list[Any], owner: str | None = None
    ) -> None:
        owner = self._resolve_owner(owner)
        table = kind.value

        records: dict[str, dict[str, Any]] = {}
        for item in items:
            record = item_to_record(kind, item, trip_id, owner)
            if record["id"] in records:
                logger.warning("Duplicate %s id %s in replace; keeping the last", table, record["id"])
            records[record["id"]] = record

        try:
            existing = self._fetch(
                sql.SQL("SELECT id FROM {} WHERE user_id = %s AND trip_id = %s").format(sql.Identifier(table)),
                (owner, trip_id),
            )
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to read existing {table} for trip {trip_id}: {e}") from e

        delete_refs = [row["id"] for row in existing if row["id"] not in records]
        set_operations = list(records.items())
        columns = _columns(table)

        async def commit(chunk: list[WriteOp]) -> None:
            conn = self._require_connection()
            with conn.transaction(), conn.cursor() as cur:
                for op in chunk:
                    if op.type is OpType.DELETE:
                        cur.execute(_delete_where(table, "user_id", "trip_id", "id"), (owner, trip_id, op.ref))
                    else:
                        cur.execute(_upsert(table), tuple(_param(c, op.data.get(c)) for c in columns))

        result = await execute_batched(delete_refs, set_operations, commit, self._max_batch)
        if result.error is not None:
            raise PartialReplaceFailure(
                f"Replace of {table} for trip {trip_id} stopped after "
                f"{result.committed_chunks}/{result.total_chunks} chunks: {result.error}",
                committed_chunks=result.committed_chunks,
                total_chunks=result.total_chunks,
            ) from result.error
        logger.info("Replaced %s for trip %s: %d items, %d removed", table, trip_id, len(records), len(delete_refs))

    async def get_collection(self, kind: CollectionKind, trip_id: str, owner: str | None = None) -> list[Any]:
        owner = self._resolve_owner(owner)
        try:
            records = self._fetch(_select(kind.value, "user_id", "trip_id"), (owner, trip_id))
        except psycopg.Error as e:
            raise RemoteFailureError(f"Failed to fetch {kind.value} for trip {trip_id}: {e}") from e
        return items_from_records(kind, records)

    async def close(self) -> None:
        self.disconnect()
