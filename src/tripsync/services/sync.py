"""Composition root: wires the local store, the remote store and auth into one surface."""

import logging
from collections.abc import Iterable
from typing import Any

from tripsync.auth.interface import AuthStateProvider, AuthUser, get_token_verifier
from tripsync.auth.session import AuthEvent, AuthSession
from tripsync.config import Config, get_config
from tripsync.errors import ValidationError
from tripsync.local.store import LocalStore
from tripsync.local.trip_storage import TripStorage
from tripsync.models import CollectionKind, MigrationStatus
from tripsync.observability import LoggingSink, ObservabilitySink
from tripsync.remote.interface import RemoteStore
from tripsync.services.hybrid import HybridStore
from tripsync.services.migration import MigrationEngine

logger = logging.getLogger(__name__)


def _collection_kind(kind: CollectionKind | str) -> CollectionKind:
    try:
        return CollectionKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unknown collection kind: {kind}") from e


def build_remote_store(config: Config, auth: AuthStateProvider) -> RemoteStore:
    if config.remote_backend == "postgres":
        from tripsync.remote.postgres import PostgresRemoteStore

        return PostgresRemoteStore(auth, config, max_batch=config.max_batch)

    from tripsync.remote.dynamo import DynamoRemoteStore

    return DynamoRemoteStore(auth, table_prefix=config.dynamodb_table_prefix, max_batch=config.max_batch)


class TripSyncService:
    """Public surface for trip persistence.

    Reads and writes go to the local store while signed out and to the
    remote store while signed in. Local trips are migrated to the remote
    store on the first sign-in of a session.
    """

    def __init__(
        self,
        auth: AuthStateProvider,
        local_store: LocalStore,
        remote: RemoteStore,
        sink: ObservabilitySink | None = None,
        migration_max_attempts: int = 3,
        migration_backoff_seconds: float = 1.0,
    ) -> None:
        self._auth = auth
        self._local_store = local_store
        self._local = TripStorage(local_store)
        self._remote = remote
        self._hybrid = HybridStore(auth, self._local, remote)
        self._migration = MigrationEngine(
            auth,
            self._local,
            remote,
            sink=sink,
            max_attempts=migration_max_attempts,
            backoff_base=migration_backoff_seconds,
        )
        self._unsubscribe = auth.subscribe(self.handle_auth_event)

    @property
    def auth(self) -> AuthStateProvider:
        return self._auth

    @property
    def local(self) -> TripStorage:
        return self._local

    @property
    def remote(self) -> RemoteStore:
        return self._remote

    # === Trips ===

    async def save(self, trip: dict[str, Any]) -> dict[str, Any]:
        return await self._hybrid.save_trip(trip)

    async def get_all(self) -> list[dict[str, Any]]:
        return await self._hybrid.get_trips()

    async def get_by_id(self, trip_id: str) -> dict[str, Any] | None:
        return await self._hybrid.get_trip(trip_id)

    async def delete(self, trip_id: str) -> None:
        await self._hybrid.delete_trip(trip_id)

    # === Child collections ===

    async def save_collection(self, kind: CollectionKind | str, trip_id: str, items: list[Any]) -> None:
        await self._hybrid.save_collection(_collection_kind(kind), trip_id, items)

    async def get_collection(self, kind: CollectionKind | str, trip_id: str) -> list[Any]:
        return await self._hybrid.get_collection(_collection_kind(kind), trip_id)

    async def add_shopping_items(self, trip_id: str, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return await self._hybrid.add_shopping_items(trip_id, items)

    # === Migration ===

    @property
    def migration_status(self) -> MigrationStatus | None:
        return self._migration.status

    @property
    def migration(self) -> MigrationEngine:
        return self._migration

    async def handle_auth_event(self, event: AuthEvent, user: AuthUser | None) -> None:
        await self._migration.handle_auth_event(event, user)

    async def migrate_local_data_to_remote(self, trip_ids: Iterable[str]) -> None:
        user = self._auth.current_user()
        if user is None:
            logger.warning("Cannot migrate data: user not signed in")
            return
        await self._remote.migrate_trips(list(trip_ids), self._local, owner=user.user_id)

    async def retry_migration(self) -> None:
        await self._migration.retry_migration()

    async def wait_for_migration(self) -> None:
        await self._migration.wait()

    async def close(self) -> None:
        self._unsubscribe()
        await self._migration.wait()
        await self._local_store.close()
        await self._remote.close()


def create_sync_service(
    config: Config | None = None,
    auth: AuthStateProvider | None = None,
    sink: ObservabilitySink | None = None,
) -> TripSyncService:
    """Build a TripSyncService from configuration.

    Without ``auth``, an AuthSession is created, verifying tokens with Clerk
    when a Clerk secret is configured.
    """
    config = config or get_config()
    if auth is None:
        auth = AuthSession(verifier=get_token_verifier() if config.clerk_secret_key else None)
    sink = sink or LoggingSink()
    return TripSyncService(
        auth,
        LocalStore(config.local_db_path, sink=sink),
        build_remote_store(config, auth),
        sink=sink,
        migration_max_attempts=config.migration_max_attempts,
        migration_backoff_seconds=config.migration_backoff_seconds,
    )
