"""Validated access to the local store for trips and their child collections."""

import json
import logging
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from tripsync.errors import StorageError, ValidationError
from tripsync.local.store import TRIPS_STORE, LocalStore
from tripsync.models import CollectionKind, Trip, coerce_group_colors

logger = logging.getLogger(__name__)


def _issues(error: SchemaValidationError) -> str:
    return json.dumps(
        [{"path": list(issue["loc"]), "message": issue["msg"]} for issue in error.errors()],
        default=str,
    )


def validate_trip(trip: dict[str, Any]) -> dict[str, Any]:
    """Coerce group colours and validate ``trip``. Returns the validated document."""
    try:
        return Trip.model_validate(coerce_group_colors(trip)).to_document()
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid trip: {_issues(e)}") from e


def validate_items(kind: CollectionKind, items: list[Any]) -> None:
    schema = kind.item_schema
    for index, item in enumerate(items):
        if schema is None:
            if not isinstance(item, str) or not item:
                raise ValidationError(f"Invalid {kind.value}[{index}]: expected a non-empty string")
            continue
        try:
            schema.model_validate(item)
        except SchemaValidationError as e:
            raise ValidationError(f"Invalid {kind.value}[{index}]: {_issues(e)}") from e


class TripStorage:
    def __init__(self, store: LocalStore) -> None:
        self._store = store

    async def save_trip(self, trip: dict[str, Any]) -> dict[str, Any]:
        """Persist a trip after validation. Raises on validation or storage failure."""
        document = validate_trip(trip)
        try:
            await self._store.put(TRIPS_STORE, document)
        except StorageError as e:
            raise StorageError("Failed to save trip", code=e.code) from e
        logger.debug("Saved trip %s locally", document["id"])
        return document

    async def get_trips(self) -> list[dict[str, Any]]:
        try:
            trips = await self._store.get_all(TRIPS_STORE)
        except StorageError as e:
            raise StorageError("Failed to fetch trips", code=e.code) from e
        return [coerce_group_colors(trip) for trip in trips]

    async def get_trip(self, trip_id: str) -> dict[str, Any] | None:
        try:
            trip = await self._store.get(TRIPS_STORE, trip_id)
        except StorageError as e:
            raise StorageError("Failed to fetch trip", code=e.code) from e
        return coerce_group_colors(trip) if trip is not None else None

    async def delete_trip(self, trip_id: str) -> None:
        """Delete a trip and all related data."""
        try:
            await self._store.delete_trip(trip_id)
        except StorageError as e:
            raise StorageError("Failed to delete trip", code=e.code) from e

    async def get_collection(self, kind: CollectionKind, trip_id: str) -> list[Any]:
        try:
            items = await self._store.get(kind.local_store, trip_id)
        except StorageError as e:
            raise StorageError(f"Failed to fetch {kind.value}", code=e.code) from e
        return items or []

    async def save_collection(self, kind: CollectionKind, trip_id: str, items: list[Any]) -> None:
        validate_items(kind, items)
        try:
            await self._store.put(kind.local_store, list(items), key=trip_id)
        except StorageError as e:
            raise StorageError(f"Failed to save {kind.value}", code=e.code) from e
