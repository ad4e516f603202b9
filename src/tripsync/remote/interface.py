import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tripsync.auth.interface import AuthStateProvider
from tripsync.errors import NotSignedInError
from tripsync.models import CollectionKind
from tripsync.remote.batch import MAX_BATCH

if TYPE_CHECKING:
    from tripsync.local.trip_storage import TripStorage

logger = logging.getLogger(__name__)


class RemoteStore(ABC):
    """Owner-scoped remote persistence for trips and their child collections.

    Every method takes an optional ``owner``. When given, it pins the identity
    for the call; otherwise the identity is read from the auth provider and
    ``NotSignedInError`` is raised if nobody is signed in.
    """

    def __init__(self, auth: AuthStateProvider, max_batch: int = MAX_BATCH) -> None:
        self._auth = auth
        self._max_batch = max_batch

    def _resolve_owner(self, owner: str | None = None) -> str:
        if owner:
            return owner
        user = self._auth.current_user()
        if user is None or not user.user_id:
            raise NotSignedInError()
        return user.user_id

    @abstractmethod
    async def save_trip(self, trip: dict[str, Any], owner: str | None = None) -> dict[str, Any]:
        """Write trip metadata and upsert-then-prune its groups. Returns the stored form."""

    @abstractmethod
    async def get_trips(self, owner: str | None = None) -> list[dict[str, Any]]: ...

    @abstractmethod
    async def get_trip(self, trip_id: str, owner: str | None = None) -> dict[str, Any] | None: ...

    @abstractmethod
    async def delete_trip(self, trip_id: str, owner: str | None = None) -> None:
        """Delete a trip with its groups and child collections.

        Raises NotFoundOrForbiddenError when no trip owned by the caller matched.
        """

    @abstractmethod
    async def save_collection(
        self, kind: CollectionKind, trip_id: str, items: list[Any], owner: str | None = None
    ) -> None:
        """Replace the whole collection for (trip, owner) with ``items``."""

    @abstractmethod
    async def get_collection(self, kind: CollectionKind, trip_id: str, owner: str | None = None) -> list[Any]: ...

    async def close(self) -> None:
        """Release any connection held by the store."""

    async def migrate_trips(self, trip_ids: Iterable[str], source: "TripStorage", owner: str | None = None) -> None:
        """Copy each local trip and its non-empty child collections into this store."""
        owner = self._resolve_owner(owner)
        for trip_id in trip_ids:
            trip = await source.get_trip(trip_id)
            if trip is None:
                logger.warning("Skipping migration of trip %s: no local trip document", trip_id)
                continue
            await self.save_trip(trip, owner=owner)
            for kind in CollectionKind:
                items = await source.get_collection(kind, trip_id)
                if items:
                    await self.save_collection(kind, trip_id, items, owner=owner)
                    logger.info("Migrated %d %s for trip %s", len(items), kind.value, trip_id)
