"""camelCase domain documents <-> snake_case stored records.

Both remote flavours store the same record shapes, so data written by one
is readable by the other.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from tripsync.models import CollectionKind, to_group_color

TRIPS_TABLE = "trips"
GROUPS_TABLE = "groups"

# Trip fields with their own column; everything else goes into ``data``.
_TRIP_COLUMNS = {
    "id": "id",
    "tripName": "trip_name",
    "tripType": "trip_type",
    "startDate": "start_date",
    "endDate": "end_date",
    "location": "location",
    "description": "description",
}

RECORD_FIELDS: dict[str, tuple[str, ...]] = {
    TRIPS_TABLE: (
        "id", "user_id", "trip_name", "trip_type", "start_date", "end_date", "location", "description", "data",
    ),
    GROUPS_TABLE: ("id", "trip_id", "user_id", "name", "size", "contact_name", "contact_email", "color"),
    CollectionKind.PACKING_ITEMS.value: (
        "id", "trip_id", "user_id", "name", "category", "quantity", "weight", "is_owned", "needs_to_buy",
        "is_packed", "required", "assigned_group_id", "is_personal", "packed_by_user_id", "last_modified_by",
        "last_modified_at", "notes", "created_at", "updated_at",
    ),
    CollectionKind.MEALS.value: (
        "id", "trip_id", "user_id", "name", "day", "type", "ingredients", "is_custom", "assigned_group_id",
        "shared_servings", "servings", "last_modified_by", "last_modified_at", "created_at", "updated_at",
    ),
    CollectionKind.SHOPPING_ITEMS.value: (
        "id", "trip_id", "user_id", "name", "quantity", "category", "is_owned", "needs_to_buy", "source_item_id",
        "assigned_group_id", "cost", "paid_by_group_id", "paid_by_user_name", "splits",
    ),
    CollectionKind.TODO_ITEMS.value: (
        "id", "trip_id", "user_id", "text", "is_completed", "display_order", "created_at", "updated_at",
    ),
    CollectionKind.DELETED_INGREDIENTS.value: ("id", "trip_id", "user_id", "ingredient_name"),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _without_none(document: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in document.items() if value is not None}


# === Trips and groups ===


def trip_to_record(trip: dict[str, Any], owner: str) -> dict[str, Any]:
    record: dict[str, Any] = {column: trip.get(field) for field, column in _TRIP_COLUMNS.items()}
    record["user_id"] = owner
    record["data"] = {key: value for key, value in trip.items() if key not in _TRIP_COLUMNS and key != "groups"}
    return record


def trip_from_record(record: dict[str, Any], groups: list[dict[str, Any]]) -> dict[str, Any]:
    trip = _without_none({field: record.get(column) for field, column in _TRIP_COLUMNS.items()})
    trip.update(record.get("data") or {})
    trip["groups"] = [group_from_record(group) for group in groups]
    return trip


def group_to_record(group: dict[str, Any], trip_id: str, owner: str) -> dict[str, Any]:
    return {
        "id": group["id"],
        "trip_id": trip_id,
        "user_id": owner,
        "name": group.get("name"),
        "size": group.get("size"),
        "contact_name": group.get("contactName"),
        "contact_email": group.get("contactEmail"),
        "color": to_group_color(group.get("color")),
    }


def group_from_record(record: dict[str, Any]) -> dict[str, Any]:
    return _without_none(
        {
            "id": record["id"],
            "name": record.get("name"),
            "size": record.get("size"),
            "contactName": record.get("contact_name"),
            "contactEmail": record.get("contact_email"),
            "color": to_group_color(record.get("color")),
        }
    )


# === Child collections ===


def _packing_to_record(item: dict[str, Any], trip_id: str, owner: str, now: str) -> dict[str, Any]:
    return {
        "id": item["id"],
        "trip_id": trip_id,
        "user_id": owner,
        "name": item.get("name") or "",
        "category": item.get("category") or "Other",
        "quantity": item.get("quantity") or 1,
        "weight": item.get("weight") or None,
        "is_owned": bool(item.get("isOwned")),
        "needs_to_buy": bool(item.get("needsToBuy")),
        "is_packed": bool(item.get("isPacked")),
        "required": bool(item.get("required")),
        "assigned_group_id": item.get("assignedGroupId") or None,
        "is_personal": bool(item.get("isPersonal")),
        "packed_by_user_id": item.get("packedByUserId") or None,
        "last_modified_by": owner,
        "last_modified_at": now,
        "notes": item.get("notes") or None,
        "created_at": now,
        "updated_at": now,
    }


def _packing_from_record(record: dict[str, Any]) -> dict[str, Any]:
    return _without_none(
        {
            "id": record["id"],
            "name": record.get("name"),
            "category": record.get("category"),
            "quantity": record.get("quantity") or 1,
            "weight": record.get("weight"),
            "isOwned": record.get("is_owned") or False,
            "needsToBuy": record.get("needs_to_buy") or False,
            "isPacked": record.get("is_packed") or False,
            "required": record.get("required") or False,
            "assignedGroupId": record.get("assigned_group_id"),
            "isPersonal": record.get("is_personal") or False,
            "packedByUserId": record.get("packed_by_user_id"),
            "lastModifiedBy": record.get("last_modified_by"),
            "lastModifiedAt": record.get("last_modified_at"),
            "notes": record.get("notes"),
        }
    )


def _meal_to_record(item: dict[str, Any], trip_id: str, owner: str, now: str) -> dict[str, Any]:
    shared = item.get("sharedServings")
    return {
        "id": item["id"],
        "trip_id": trip_id,
        "user_id": owner,
        "name": item.get("name") or "",
        "day": item.get("day") or 1,
        "type": item.get("type") or "dinner",
        "ingredients": item.get("ingredients") or [],
        "is_custom": bool(item.get("isCustom")),
        "assigned_group_id": item.get("assignedGroupId") or None,
        "shared_servings": bool(shared) if shared is not None else True,
        "servings": item.get("servings") or 1,
        "last_modified_by": owner,
        "last_modified_at": now,
        "created_at": now,
        "updated_at": now,
    }


def _meal_from_record(record: dict[str, Any]) -> dict[str, Any]:
    return _without_none(
        {
            "id": record["id"],
            "name": record.get("name"),
            "day": record.get("day"),
            "type": record.get("type"),
            "ingredients": record.get("ingredients") or [],
            "isCustom": record.get("is_custom"),
            "assignedGroupId": record.get("assigned_group_id"),
            "sharedServings": record.get("shared_servings"),
            "servings": record.get("servings"),
            "lastModifiedBy": record.get("last_modified_by"),
            "lastModifiedAt": record.get("last_modified_at"),
        }
    )


def _shopping_to_record(item: dict[str, Any], trip_id: str, owner: str, now: str) -> dict[str, Any]:
    return {
        "id": item["id"],
        "trip_id": trip_id,
        "user_id": owner,
        "name": item.get("name"),
        "quantity": item.get("quantity"),
        "category": item.get("category"),
        "is_owned": item.get("isOwned"),
        "needs_to_buy": item.get("needsToBuy"),
        "source_item_id": item.get("sourceItemId"),
        "assigned_group_id": item.get("assignedGroupId"),
        "cost": item.get("cost"),
        "paid_by_group_id": item.get("paidByGroupId"),
        "paid_by_user_name": item.get("paidByUserName"),
        "splits": item.get("splits"),
    }


def _shopping_from_record(record: dict[str, Any]) -> dict[str, Any]:
    return _without_none(
        {
            "id": record["id"],
            "name": record.get("name"),
            "quantity": record.get("quantity") or 1,
            "category": record.get("category"),
            "isOwned": record.get("is_owned"),
            "needsToBuy": record.get("needs_to_buy"),
            "sourceItemId": record.get("source_item_id"),
            "assignedGroupId": record.get("assigned_group_id"),
            "cost": record.get("cost"),
            "paidByGroupId": record.get("paid_by_group_id"),
            "paidByUserName": record.get("paid_by_user_name"),
            "splits": record.get("splits") or [],
        }
    )


def _todo_to_record(item: dict[str, Any], trip_id: str, owner: str, now: str) -> dict[str, Any]:
    return {
        "id": item["id"],
        "trip_id": trip_id,
        "user_id": owner,
        "text": item.get("text"),
        "is_completed": item.get("isCompleted"),
        "display_order": item.get("displayOrder"),
        "created_at": item.get("createdAt"),
        "updated_at": item.get("updatedAt"),
    }


def _todo_from_record(record: dict[str, Any]) -> dict[str, Any]:
    return _without_none(
        {
            "id": record["id"],
            "text": record.get("text"),
            "isCompleted": record.get("is_completed") or False,
            "createdAt": record.get("created_at"),
            "updatedAt": record.get("updated_at"),
            "displayOrder": record.get("display_order") or 0,
        }
    )


def _ingredient_to_record(name: str, trip_id: str, owner: str, now: str) -> dict[str, Any]:
    return {"id": str(uuid.uuid4()), "trip_id": trip_id, "user_id": owner, "ingredient_name": name}


def _ingredient_from_record(record: dict[str, Any]) -> str:
    return record["ingredient_name"]


_TO_RECORD = {
    CollectionKind.PACKING_ITEMS: _packing_to_record,
    CollectionKind.MEALS: _meal_to_record,
    CollectionKind.SHOPPING_ITEMS: _shopping_to_record,
    CollectionKind.TODO_ITEMS: _todo_to_record,
    CollectionKind.DELETED_INGREDIENTS: _ingredient_to_record,
}

_FROM_RECORD = {
    CollectionKind.PACKING_ITEMS: _packing_from_record,
    CollectionKind.MEALS: _meal_from_record,
    CollectionKind.SHOPPING_ITEMS: _shopping_from_record,
    CollectionKind.TODO_ITEMS: _todo_from_record,
    CollectionKind.DELETED_INGREDIENTS: _ingredient_from_record,
}


def item_to_record(kind: CollectionKind, item: Any, trip_id: str, owner: str, now: str | None = None) -> dict[str, Any]:
    """Map one collection item to its stored record, stamped with ``owner``."""
    return _TO_RECORD[kind](item, trip_id, owner, now or _now())


def item_from_record(kind: CollectionKind, record: dict[str, Any]) -> Any:
    return _FROM_RECORD[kind](record)


def items_from_records(kind: CollectionKind, records: list[dict[str, Any]]) -> list[Any]:
    if kind is CollectionKind.TODO_ITEMS:
        records = sorted(records, key=lambda record: record.get("display_order") or 0)
    return [item_from_record(kind, record) for record in records]
