"""
Persistence and synchronization core for the trip planner.

Trips and their child collections live in an on-device store until the user
signs in; after that they live in an owner-scoped remote store. Callers go
through ``tripsync.services.sync.TripSyncService`` and never touch either
backend directly.
"""

__all__: list[str] = []
