from unittest.mock import AsyncMock

import pytest
from fakes import FakeAuth

from tripsync.local.trip_storage import TripStorage
from tripsync.models import CollectionKind
from tripsync.remote.interface import RemoteStore
from tripsync.services.hybrid import HybridStore, merge_shopping_items

SHOPPING = CollectionKind.SHOPPING_ITEMS


@pytest.fixture
def local():
    return AsyncMock(spec=TripStorage)


@pytest.fixture
def remote():
    return AsyncMock(spec=RemoteStore)


def test_merge_sums_quantities_by_source_item():
    current = [{"id": "s1", "name": "Eggs", "quantity": 6, "sourceItemId": "m1"}]

    merged = merge_shopping_items(current, [{"id": "s2", "name": "Eggs", "quantity": 4, "sourceItemId": "m1"}])

    assert merged == [{"id": "s1", "name": "Eggs", "quantity": 10, "sourceItemId": "m1"}]
    assert current[0]["quantity"] == 6


def test_merge_appends_new_sources():
    merged = merge_shopping_items(
        [{"id": "s1", "quantity": 1, "sourceItemId": "m1"}],
        [{"id": "s2", "quantity": 1, "sourceItemId": "m2"}],
    )
    assert [item["id"] for item in merged] == ["s1", "s2"]


def test_merge_never_matches_items_without_source():
    merged = merge_shopping_items([{"id": "s1", "quantity": 1}], [{"quantity": 2}, {"quantity": 3}])

    assert [item["quantity"] for item in merged] == [1, 2, 3]
    assert all(item["id"] for item in merged)
    assert merged[1]["id"] != merged[2]["id"]


@pytest.mark.asyncio
async def test_signed_out_routes_to_local(local, remote, trip):
    local.get_trips.return_value = [trip]
    hybrid = HybridStore(FakeAuth(), local, remote)

    assert await hybrid.save_trip(trip) == trip
    assert await hybrid.get_trips() == [trip]
    await hybrid.get_trip("trip-1")
    await hybrid.delete_trip("trip-1")
    await hybrid.save_collection(SHOPPING, "trip-1", [])
    await hybrid.get_collection(SHOPPING, "trip-1")

    local.save_trip.assert_awaited_once_with(trip)
    local.get_trip.assert_awaited_once_with("trip-1")
    local.delete_trip.assert_awaited_once_with("trip-1")
    local.save_collection.assert_awaited_once_with(SHOPPING, "trip-1", [])
    local.get_collection.assert_awaited_once_with(SHOPPING, "trip-1")
    assert remote.mock_calls == []


@pytest.mark.asyncio
async def test_signed_in_routes_to_remote_with_owner(local, remote, trip):
    remote.save_trip.return_value = trip
    hybrid = HybridStore(FakeAuth("user-a"), local, remote)

    assert await hybrid.save_trip(trip) == trip
    await hybrid.get_trips()
    await hybrid.get_trip("trip-1")
    await hybrid.delete_trip("trip-1")
    await hybrid.save_collection(SHOPPING, "trip-1", [])
    await hybrid.get_collection(SHOPPING, "trip-1")

    remote.save_trip.assert_awaited_once_with(trip, owner="user-a")
    remote.get_trips.assert_awaited_once_with(owner="user-a")
    remote.get_trip.assert_awaited_once_with("trip-1", owner="user-a")
    remote.delete_trip.assert_awaited_once_with("trip-1", owner="user-a")
    remote.save_collection.assert_awaited_once_with(SHOPPING, "trip-1", [], owner="user-a")
    remote.get_collection.assert_awaited_once_with(SHOPPING, "trip-1", owner="user-a")
    assert local.mock_calls == []


@pytest.mark.asyncio
async def test_identity_is_pinned_for_the_whole_call(local, remote):
    auth = FakeAuth("user-a")

    async def sign_out_mid_call(*args, **kwargs):
        auth.sign_out()
        return [{"id": "s1", "quantity": 1, "sourceItemId": "m1"}]

    remote.get_collection.side_effect = sign_out_mid_call
    hybrid = HybridStore(auth, local, remote)

    merged = await hybrid.add_shopping_items("trip-1", [{"id": "s2", "quantity": 2, "sourceItemId": "m1"}])

    assert merged == [{"id": "s1", "quantity": 3, "sourceItemId": "m1"}]
    remote.save_collection.assert_awaited_once_with(SHOPPING, "trip-1", merged, owner="user-a")
    local.save_collection.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_shopping_items_locally(local_store, remote):
    hybrid = HybridStore(FakeAuth(), TripStorage(local_store), remote)
    eggs = {"id": "s1", "name": "Eggs", "category": "food", "quantity": 6, "sourceItemId": "m1"}

    await hybrid.add_shopping_items("trip-1", [eggs])
    merged = await hybrid.add_shopping_items("trip-1", [{**eggs, "id": "s2", "quantity": 6}])

    assert merged == [{**eggs, "quantity": 12}]
    assert await hybrid.get_collection(SHOPPING, "trip-1") == merged
