from tripsync.db.schemas.base import Base
from tripsync.db.schemas.items import (
    DeletedIngredientRecord,
    MealRecord,
    PackingItemRecord,
    ShoppingItemRecord,
    TodoItemRecord,
)
from tripsync.db.schemas.trip import GroupRecord, TripRecord

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
