"""One-shot transfer of local trips into the remote store after sign-in."""

import asyncio
import logging

from tripsync.auth.interface import AuthStateProvider, AuthUser
from tripsync.auth.session import AuthEvent
from tripsync.errors import MigrationError
from tripsync.local.trip_storage import TripStorage
from tripsync.models import MigrationStatus
from tripsync.observability import ObservabilitySink, report
from tripsync.remote.interface import RemoteStore

logger = logging.getLogger(__name__)


class MigrationEngine:
    """Migrates local trips once per sign-in, with bounded retries.

    Attempt ``n`` (1-based) that fails waits ``backoff_base * 2**n`` seconds
    before the next one. Local copies are left in place after success.
    """

    def __init__(
        self,
        auth: AuthStateProvider,
        local: TripStorage,
        remote: RemoteStore,
        sink: ObservabilitySink | None = None,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
    ) -> None:
        self._auth = auth
        self._local = local
        self._remote = remote
        self._sink = sink
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base
        self._status: MigrationStatus | None = None
        self._has_triggered = False
        self._last_error: MigrationError | None = None
        self._task: asyncio.Task[None] | None = None
        self._task_owner: str | None = None

    @property
    def status(self) -> MigrationStatus | None:
        return self._status

    @property
    def has_triggered(self) -> bool:
        return self._has_triggered

    @property
    def last_error(self) -> MigrationError | None:
        return self._last_error

    async def handle_auth_event(self, event: AuthEvent, user: AuthUser | None) -> None:
        if event is AuthEvent.SIGNED_IN:
            if user is not None and not self._has_triggered:
                self._has_triggered = True
                self._start(user.user_id)
        elif event is AuthEvent.SIGNED_OUT:
            self._cancel()
            self._has_triggered = False
            self._status = None
            self._last_error = None

    async def retry_migration(self) -> None:
        """Run the migration again, e.g. after the status reached ``error``."""
        user = self._auth.current_user()
        if user is None:
            logger.warning("Cannot retry migration: user not signed in")
            return
        await self._start(user.user_id)

    async def wait(self) -> None:
        """Wait for the running migration, if any, to finish.

        A migration cancelled by sign-out counts as finished.
        """
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])
        if not task.cancelled():
            task.result()

    def _start(self, owner: str) -> "asyncio.Task[None]":
        if self._task is not None and not self._task.done() and self._task_owner != owner:
            self._cancel()
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(owner))
            self._task_owner = owner
        return self._task

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            logger.info("Cancelling migration for previous user")
            self._task.cancel()
        self._task = None
        self._task_owner = None

    async def _run(self, owner: str) -> None:
        retry_count = 0
        self._last_error = None
        while True:
            self._status = MigrationStatus.RETRYING if retry_count > 0 else MigrationStatus.PENDING
            try:
                trip_ids = [trip["id"] for trip in await self._local.get_trips()]
                if trip_ids:
                    logger.info("Starting migration of %d trips (attempt %d)", len(trip_ids), retry_count + 1)
                    await self._remote.migrate_trips(trip_ids, self._local, owner=owner)
                    logger.info("Data migration completed successfully")
                else:
                    logger.info("No trips found to migrate")
                self._status = MigrationStatus.COMPLETE
                return
            except Exception as e:
                retry_count += 1
                logger.error("Data migration failed (attempt %d): %s", retry_count, e)
                if retry_count >= self._max_attempts:
                    error = MigrationError(f"Migration failed after {retry_count} attempts: {e}")
                    error.__cause__ = e
                    self._last_error = error
                    self._status = MigrationStatus.ERROR
                    report(self._sink, "migration_failed", e, attempts=str(retry_count))
                    return
                delay = self._backoff_base * 2**retry_count
                logger.info("Retrying migration in %.1fs", delay)
                await asyncio.sleep(delay)
