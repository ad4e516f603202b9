"""Routes each storage call to the local store or the remote store.

The auth state is read at the start of every call and the resolved identity
is pinned into the remote call, so a sign-out between the check and the call
cannot send an unauthenticated request to the remote store.
"""

import logging
import uuid
from typing import Any

from tripsync.auth.interface import AuthStateProvider
from tripsync.local.trip_storage import TripStorage
from tripsync.models import CollectionKind
from tripsync.remote.interface import RemoteStore

logger = logging.getLogger(__name__)


def merge_shopping_items(current: list[dict[str, Any]], new_items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge ``new_items`` into ``current`` by ``sourceItemId``, summing quantities.

    Items without a ``sourceItemId`` are always appended. Items without an id get a fresh one.
    """
    merged = [dict(item) for item in current]
    for raw in new_items:
        item = {**raw, "id": raw.get("id") or str(uuid.uuid4())}
        source_id = item.get("sourceItemId")
        existing = next(
            (entry for entry in merged if source_id is not None and entry.get("sourceItemId") == source_id),
            None,
        )
        if existing is not None:
            existing["quantity"] = (existing.get("quantity") or 0) + (item.get("quantity") or 0)
        else:
            merged.append(item)
    return merged


class HybridStore:
    def __init__(self, auth: AuthStateProvider, local: TripStorage, remote: RemoteStore) -> None:
        self._auth = auth
        self._local = local
        self._remote = remote

    def _owner(self) -> str | None:
        user = self._auth.current_user()
        return user.user_id if user is not None else None

    async def save_trip(self, trip: dict[str, Any]) -> dict[str, Any]:
        owner = self._owner()
        if owner is not None:
            return await self._remote.save_trip(trip, owner=owner)
        await self._local.save_trip(trip)
        return trip

    async def get_trips(self) -> list[dict[str, Any]]:
        owner = self._owner()
        if owner is not None:
            return await self._remote.get_trips(owner=owner)
        return await self._local.get_trips()

    async def get_trip(self, trip_id: str) -> dict[str, Any] | None:
        owner = self._owner()
        if owner is not None:
            return await self._remote.get_trip(trip_id, owner=owner)
        return await self._local.get_trip(trip_id)

    async def delete_trip(self, trip_id: str) -> None:
        owner = self._owner()
        if owner is not None:
            await self._remote.delete_trip(trip_id, owner=owner)
        else:
            await self._local.delete_trip(trip_id)

    async def save_collection(self, kind: CollectionKind, trip_id: str, items: list[Any]) -> None:
        await self._save_collection(kind, trip_id, items, self._owner())

    async def get_collection(self, kind: CollectionKind, trip_id: str) -> list[Any]:
        return await self._get_collection(kind, trip_id, self._owner())

    async def add_shopping_items(self, trip_id: str, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Merge ``items`` into the trip's shopping list and save the result."""
        owner = self._owner()
        current = await self._get_collection(CollectionKind.SHOPPING_ITEMS, trip_id, owner)
        merged = merge_shopping_items(current, items)
        await self._save_collection(CollectionKind.SHOPPING_ITEMS, trip_id, merged, owner)
        logger.debug("Added %d shopping items to trip %s (%d total)", len(items), trip_id, len(merged))
        return merged

    async def _save_collection(self, kind: CollectionKind, trip_id: str, items: list[Any], owner: str | None) -> None:
        if owner is not None:
            await self._remote.save_collection(kind, trip_id, items, owner=owner)
        else:
            await self._local.save_collection(kind, trip_id, items)

    async def _get_collection(self, kind: CollectionKind, trip_id: str, owner: str | None) -> list[Any]:
        if owner is not None:
            return await self._remote.get_collection(kind, trip_id, owner=owner)
        return await self._local.get_collection(kind, trip_id)
