from enum import Enum

from pydantic import BaseModel

from tripsync.models.items import Meal, PackingItem, ShoppingItem, TodoItem


class CollectionKind(str, Enum):
    """Child collections stored per (trip, owner)."""

    PACKING_ITEMS = "packing_items"
    MEALS = "meals"
    SHOPPING_ITEMS = "shopping_items"
    TODO_ITEMS = "todo_items"
    DELETED_INGREDIENTS = "deleted_ingredients"

    @property
    def local_store(self) -> str:
        """Name of the on-device store holding this collection."""
        return _LOCAL_STORES[self]

    @property
    def item_schema(self) -> type[BaseModel] | None:
        """Validation schema for one item; deleted ingredients are bare strings."""
        return _ITEM_SCHEMAS[self]


_LOCAL_STORES = {
    CollectionKind.PACKING_ITEMS: "packing_lists",
    CollectionKind.MEALS: "meals",
    CollectionKind.SHOPPING_ITEMS: "shopping_lists",
    CollectionKind.TODO_ITEMS: "todo_items",
    CollectionKind.DELETED_INGREDIENTS: "deleted_ingredients",
}

_ITEM_SCHEMAS: dict[CollectionKind, type[BaseModel] | None] = {
    CollectionKind.PACKING_ITEMS: PackingItem,
    CollectionKind.MEALS: Meal,
    CollectionKind.SHOPPING_ITEMS: ShoppingItem,
    CollectionKind.TODO_ITEMS: TodoItem,
    CollectionKind.DELETED_INGREDIENTS: None,
}


class MigrationStatus(str, Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    COMPLETE = "complete"
    ERROR = "error"
