"""DynamoDB flavour of the remote store.

One table per entity, named ``<prefix><entity>``, keyed by ``user_id`` (HASH)
and ``doc_id`` (RANGE). A trip's ``doc_id`` is its id; group and child item
``doc_id``s are ``<trip_id>#<id>``, so every query carries the owner in its
key condition and can narrow to one trip with ``begins_with``.
"""

import logging
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from tripsync.auth.interface import AuthStateProvider
from tripsync.clients import get_dynamo_client
from tripsync.errors import NotFoundOrForbiddenError, PartialReplaceFailure, RemoteFailureError
from tripsync.models import CollectionKind, coerce_group_colors
from tripsync.remote.batch import MAX_BATCH, OpType, WriteOp, execute_batched
from tripsync.remote.interface import RemoteStore
from tripsync.remote.mapping import (
    GROUPS_TABLE,
    TRIPS_TABLE,
    group_to_record,
    items_from_records,
    item_to_record,
    trip_from_record,
    trip_to_record,
)

logger = logging.getLogger(__name__)

# TransactWriteItems accepts at most 100 actions.
MAX_TRANSACT_ITEMS = 100
KEY_SEPARATOR = "#"
ENTITIES = (TRIPS_TABLE, GROUPS_TABLE, *(kind.value for kind in CollectionKind))

_AWS_ERRORS = (ClientError, BotoCoreError)
_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamo(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: _to_dynamo(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(inner) for inner in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: _from_dynamo(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(inner) for inner in value]
    return value


def child_doc_id(trip_id: str, item_id: str) -> str:
    return f"{trip_id}{KEY_SEPARATOR}{item_id}"


def to_item(record: dict[str, Any], doc_id: str) -> dict[str, Any]:
    item = {key: _serializer.serialize(_to_dynamo(value)) for key, value in record.items()}
    item["doc_id"] = {"S": doc_id}
    return item


def from_item(item: dict[str, Any]) -> dict[str, Any]:
    record = {key: _from_dynamo(_deserializer.deserialize(value)) for key, value in item.items()}
    record.pop("doc_id", None)
    return record


def ensure_tables(dynamo_client: Any, table_prefix: str) -> list[str]:
    """Create any missing entity tables. Returns the names of tables created."""
    created = []
    for entity in ENTITIES:
        name = f"{table_prefix}{entity}"
        try:
            dynamo_client.create_table(
                TableName=name,
                KeySchema=[
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "doc_id", "KeyType": "RANGE"},
                ],
                AttributeDefinitions=[
                    {"AttributeName": "user_id", "AttributeType": "S"},
                    {"AttributeName": "doc_id", "AttributeType": "S"},
                ],
                BillingMode="PAY_PER_REQUEST",
            )
            created.append(name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise
    return created


class DynamoRemoteStore(RemoteStore):
    def __init__(
        self,
        auth: AuthStateProvider,
        dynamo_client: Any | None = None,
        table_prefix: str = "TripSync_",
        max_batch: int = MAX_BATCH,
    ) -> None:
        super().__init__(auth, min(max_batch, MAX_TRANSACT_ITEMS))
        self._client = dynamo_client
        self._prefix = table_prefix

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_dynamo_client()
        return self._client

    def _table(self, entity: str) -> str:
        return f"{self._prefix}{entity}"

    @staticmethod
    def _key(owner: str, doc_id: str) -> dict[str, Any]:
        return {"user_id": {"S": owner}, "doc_id": {"S": doc_id}}

    def _query(self, entity: str, owner: str, trip_id: str | None = None) -> list[dict[str, Any]]:
        """All records of ``entity`` owned by ``owner``, optionally narrowed to one trip."""
        condition = "user_id = :owner"
        values: dict[str, Any] = {":owner": {"S": owner}}
        if trip_id is not None:
            condition += " AND begins_with(doc_id, :prefix)"
            values[":prefix"] = {"S": child_doc_id(trip_id, "")}

        records = []
        last_key = None
        while True:
            query_kwargs: dict[str, Any] = {
                "TableName": self._table(entity),
                "KeyConditionExpression": condition,
                "ExpressionAttributeValues": values,
            }
            if last_key:
                query_kwargs["ExclusiveStartKey"] = last_key

            response = self.client.query(**query_kwargs)
            records.extend(from_item(item) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break

        if trip_id is not None:
            records = [record for record in records if record.get("trip_id") == trip_id]
        return records

    async def _commit(self, entity: str, chunk: list[WriteOp]) -> None:
        table = self._table(entity)
        actions = [
            {"Delete": {"TableName": table, "Key": op.ref}}
            if op.type is OpType.DELETE
            else {"Put": {"TableName": table, "Item": op.data}}
            for op in chunk
        ]
        self.client.transact_write_items(TransactItems=actions)

    # === Trips ===

    async def save_trip(self, trip: dict[str, Any], owner: str | None = None) -> dict[str, Any]:
        owner = self._resolve_owner(owner)
        trip = coerce_group_colors(trip)
        trip_id = trip["id"]
        record = trip_to_record(trip, owner)
        groups = [group_to_record(group, trip_id, owner) for group in trip["groups"]]

        try:
            self.client.put_item(TableName=self._table(TRIPS_TABLE), Item=to_item(record, trip_id))
            for group in groups:
                self.client.put_item(
                    TableName=self._table(GROUPS_TABLE),
                    Item=to_item(group, child_doc_id(trip_id, group["id"])),
                )
            keep = {group["id"] for group in groups}
            for stale in self._query(GROUPS_TABLE, owner, trip_id):
                if stale["id"] not in keep:
                    self.client.delete_item(
                        TableName=self._table(GROUPS_TABLE),
                        Key=self._key(owner, child_doc_id(trip_id, stale["id"])),
                    )
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to save trip {trip_id}: {e}") from e

        logger.info("Saved trip %s with %d groups for %s", trip_id, len(groups), owner)
        return trip_from_record(record, groups)

    async def get_trips(self, owner: str | None = None) -> list[dict[str, Any]]:
        owner = self._resolve_owner(owner)
        try:
            trips = self._query(TRIPS_TABLE, owner)
            groups = self._query(GROUPS_TABLE, owner)
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to fetch trips: {e}") from e

        groups_by_trip: dict[str, list[dict[str, Any]]] = {}
        for group in groups:
            groups_by_trip.setdefault(group["trip_id"], []).append(group)
        return [trip_from_record(trip, groups_by_trip.get(trip["id"], [])) for trip in trips]

    async def get_trip(self, trip_id: str, owner: str | None = None) -> dict[str, Any] | None:
        owner = self._resolve_owner(owner)
        try:
            response = self.client.get_item(TableName=self._table(TRIPS_TABLE), Key=self._key(owner, trip_id))
            item = response.get("Item")
            if item is None:
                return None
            record = from_item(item)
            if record.get("user_id") != owner:
                logger.warning("Trip %s fetched for %s belongs to another owner", trip_id, owner)
                return None
            groups = self._query(GROUPS_TABLE, owner, trip_id)
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to fetch trip {trip_id}: {e}") from e
        return trip_from_record(record, groups)

    async def delete_trip(self, trip_id: str, owner: str | None = None) -> None:
        owner = self._resolve_owner(owner)
        try:
            response = self.client.delete_item(
                TableName=self._table(TRIPS_TABLE),
                Key=self._key(owner, trip_id),
                ReturnValues="ALL_OLD",
            )
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to delete trip {trip_id}: {e}") from e

        deleted = response.get("Attributes")
        if not deleted or deleted.get("user_id", {}).get("S") != owner:
            logger.error("No trip deleted for %s: %s not found or access denied", owner, trip_id)
            raise NotFoundOrForbiddenError("Trip not found or you do not have permission to delete this trip")

        for entity in (GROUPS_TABLE, *(kind.value for kind in CollectionKind)):
            try:
                stale = [self._key(owner, child_doc_id(trip_id, r["id"])) for r in self._query(entity, owner, trip_id)]
            except _AWS_ERRORS as e:
                raise RemoteFailureError(f"Failed to read {entity} of deleted trip {trip_id}: {e}") from e
            result = await execute_batched(
                stale,
                [],
                lambda chunk, name=entity: self._commit(name, chunk),
                self._max_batch,
            )
            if result.error is not None:
                raise RemoteFailureError(f"Failed to delete {entity} of trip {trip_id}: {result.error}") from result.error
        logger.info("Deleted trip %s for %s", trip_id, owner)

    # === Child collections ===

    async def save_collection(
        self, kind: CollectionKind, trip_id: str, items: list[Any], owner: str | None = None
    ) -> None:
        owner = self._resolve_owner(owner)
        entity = kind.value

        puts: dict[str, dict[str, Any]] = {}
        for item in items:
            record = item_to_record(kind, item, trip_id, owner)
            doc_id = child_doc_id(trip_id, record["id"])
            if doc_id in puts:
                logger.warning("Duplicate %s id %s in replace; keeping the last", entity, record["id"])
            puts[doc_id] = to_item(record, doc_id)

        try:
            existing = self._query(entity, owner, trip_id)
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to read existing {entity} for trip {trip_id}: {e}") from e

        # A transaction may not touch the same item twice, so keys being re-put are not deleted.
        delete_refs = [
            self._key(owner, doc_id)
            for doc_id in (child_doc_id(trip_id, record["id"]) for record in existing)
            if doc_id not in puts
        ]
        set_operations = [(self._key(owner, doc_id), item) for doc_id, item in puts.items()]

        result = await execute_batched(
            delete_refs,
            set_operations,
            lambda chunk: self._commit(entity, chunk),
            self._max_batch,
        )
        if result.error is not None:
            raise PartialReplaceFailure(
                f"Replace of {entity} for trip {trip_id} stopped after "
                f"{result.committed_chunks}/{result.total_chunks} chunks: {result.error}",
                committed_chunks=result.committed_chunks,
                total_chunks=result.total_chunks,
            ) from result.error
        logger.info("Replaced %s for trip %s: %d items, %d removed", entity, trip_id, len(puts), len(delete_refs))

    async def get_collection(self, kind: CollectionKind, trip_id: str, owner: str | None = None) -> list[Any]:
        owner = self._resolve_owner(owner)
        try:
            records = self._query(kind.value, owner, trip_id)
        except _AWS_ERRORS as e:
            raise RemoteFailureError(f"Failed to fetch {kind.value} for trip {trip_id}: {e}") from e
        return items_from_records(kind, records)
