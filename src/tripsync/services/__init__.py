"""
Services for tripsync.

- hybrid.py: routes each call to the local or the remote store
- migration.py: moves local trips to the remote store after sign-in
- optimistic.py: optimistic state updates with rollback
- sync.py: the TripSyncService composition root
- schema_migrations.py: Alembic upgrades for the PostgreSQL store
"""

__all__: list[str] = []
