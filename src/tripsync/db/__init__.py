"""
Relational table models for the PostgreSQL remote store.

Importing this package registers all models on Base.metadata,
which Alembic needs for autogenerate.
"""

from tripsync.db.schemas import (
    Base,
    DeletedIngredientRecord,
    GroupRecord,
    MealRecord,
    PackingItemRecord,
    ShoppingItemRecord,
    TodoItemRecord,
    TripRecord,
)

__all__ = [
    "Base",
    "DeletedIngredientRecord",
    "GroupRecord",
    "MealRecord",
    "PackingItemRecord",
    "ShoppingItemRecord",
    "TodoItemRecord",
    "TripRecord",
]
