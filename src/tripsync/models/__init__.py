"""
Pydantic models for tripsync.
"""

from tripsync.models.collections import CollectionKind, MigrationStatus
from tripsync.models.items import Meal, PackingItem, ShoppingItem, TodoItem
from tripsync.models.trip import GROUP_COLORS, TRIP_TYPES, Group, Trip, coerce_group_colors, to_group_color

__all__ = [
    "CollectionKind",
    "GROUP_COLORS",
    "Group",
    "Meal",
    "MigrationStatus",
    "PackingItem",
    "ShoppingItem",
    "TRIP_TYPES",
    "TodoItem",
    "Trip",
    "coerce_group_colors",
    "to_group_color",
]
