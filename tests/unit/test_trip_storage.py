import json
from unittest.mock import AsyncMock, patch

import pytest

from tripsync.errors import ErrorCode, StorageError, ValidationError
from tripsync.local.store import TRIPS_STORE, LocalStore
from tripsync.local.trip_storage import TripStorage, validate_items, validate_trip
from tripsync.models import GROUP_COLORS, CollectionKind


def test_validate_trip_reports_issues_as_json(trip):
    with pytest.raises(ValidationError) as exc_info:
        validate_trip({**trip, "tripName": "", "endDate": "2024-06-01"})

    issues = json.loads(exc_info.value.message.removeprefix("Invalid trip: "))
    assert {"path": ["tripName"], "message": "String should have at least 1 character"} in issues


def test_validate_items_deleted_ingredients():
    validate_items(CollectionKind.DELETED_INGREDIENTS, ["salt", "pepper"])
    with pytest.raises(ValidationError, match=r"deleted_ingredients\[1\]"):
        validate_items(CollectionKind.DELETED_INGREDIENTS, ["salt", ""])


def test_validate_items_uses_kind_schema():
    with pytest.raises(ValidationError, match=r"meals\[0\]"):
        validate_items(CollectionKind.MEALS, [{"id": "m1", "name": "Chili", "type": "brunch"}])


@pytest.mark.asyncio
async def test_save_and_get_trip(trip_storage, trip):
    saved = await trip_storage.save_trip(trip)

    assert saved["tripName"] == "Algonquin Loop"
    assert await trip_storage.get_trip("trip-1") == saved
    assert await trip_storage.get_trips() == [saved]


@pytest.mark.asyncio
async def test_save_invalid_trip_writes_nothing(trip_storage, trip):
    with pytest.raises(ValidationError):
        await trip_storage.save_trip({**trip, "tripType": "glamping"})

    assert await trip_storage.get_trips() == []


@pytest.mark.asyncio
async def test_group_colors_coerced_on_save(trip_storage, trip):
    trip["groups"][0]["color"] = "#000000"

    saved = await trip_storage.save_trip(trip)

    assert saved["groups"][0]["color"] == GROUP_COLORS[0]


@pytest.mark.asyncio
async def test_group_colors_coerced_on_read(local_store, trip_storage):
    await local_store.put(TRIPS_STORE, {"id": "trip-9", "groups": [{"id": "g1", "color": "teal"}]})

    assert (await trip_storage.get_trip("trip-9"))["groups"][0]["color"] == GROUP_COLORS[0]
    assert (await trip_storage.get_trips())[0]["groups"][0]["color"] == GROUP_COLORS[0]


@pytest.mark.asyncio
async def test_get_missing_trip(trip_storage):
    assert await trip_storage.get_trip("nope") is None


@pytest.mark.asyncio
async def test_collections_round_trip(trip_storage):
    items = [{"id": "t1", "text": "Book campsite", "displayOrder": 1}]

    assert await trip_storage.get_collection(CollectionKind.TODO_ITEMS, "trip-1") == []
    await trip_storage.save_collection(CollectionKind.TODO_ITEMS, "trip-1", items)

    assert await trip_storage.get_collection(CollectionKind.TODO_ITEMS, "trip-1") == items
    assert await trip_storage.get_collection(CollectionKind.TODO_ITEMS, "trip-2") == []


@pytest.mark.asyncio
async def test_save_collection_replaces(trip_storage):
    await trip_storage.save_collection(CollectionKind.DELETED_INGREDIENTS, "trip-1", ["salt", "pepper"])
    await trip_storage.save_collection(CollectionKind.DELETED_INGREDIENTS, "trip-1", ["sugar"])

    assert await trip_storage.get_collection(CollectionKind.DELETED_INGREDIENTS, "trip-1") == ["sugar"]


@pytest.mark.asyncio
async def test_delete_trip_removes_collections(trip_storage, trip):
    await trip_storage.save_trip(trip)
    await trip_storage.save_collection(CollectionKind.PACKING_ITEMS, "trip-1", [{"id": "p1", "name": "Tent"}])

    await trip_storage.delete_trip("trip-1")

    assert await trip_storage.get_trip("trip-1") is None
    assert await trip_storage.get_collection(CollectionKind.PACKING_ITEMS, "trip-1") == []


@pytest.mark.asyncio
async def test_storage_errors_are_rewrapped(trip, tmp_path):
    store = LocalStore(tmp_path / "local.db")
    cause = StorageError("disk full", code=ErrorCode.STORAGE_OPEN_FAILED)

    with patch.object(store, "put", AsyncMock(side_effect=cause)):
        with pytest.raises(StorageError, match="Failed to save trip") as exc_info:
            await TripStorage(store).save_trip(trip)

    assert exc_info.value.code is ErrorCode.STORAGE_OPEN_FAILED
    assert exc_info.value.__cause__ is cause
