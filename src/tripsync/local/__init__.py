"""On-device storage: the versioned local store and its validated wrapper."""

from tripsync.local.store import DB_VERSION, LocalStore
from tripsync.local.trip_storage import TripStorage, validate_items, validate_trip

__all__ = ["DB_VERSION", "LocalStore", "TripStorage", "validate_items", "validate_trip"]
