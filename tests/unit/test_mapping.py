from tripsync.models import GROUP_COLORS, CollectionKind
from tripsync.remote.mapping import (
    group_from_record,
    group_to_record,
    item_from_record,
    item_to_record,
    items_from_records,
    trip_from_record,
    trip_to_record,
)

NOW = "2024-06-01T12:00:00+00:00"


def test_trip_record_splits_columns_from_data(trip):
    record = trip_to_record({**trip, "activities": ["paddle"]}, "user-a")

    assert record["user_id"] == "user-a"
    assert record["trip_name"] == "Algonquin Loop"
    assert record["description"] is None
    assert record["data"] == {"isCoordinated": True, "activities": ["paddle"]}
    assert "groups" not in record["data"]


def test_trip_round_trip(trip):
    groups = [group_to_record(group, trip["id"], "user-a") for group in trip["groups"]]

    restored = trip_from_record(trip_to_record(trip, "user-a"), groups)

    assert restored == trip


def test_group_color_coerced_both_ways():
    record = group_to_record({"id": "g1", "name": "A", "size": 1, "color": "blue"}, "trip-1", "user-a")
    assert record["color"] == GROUP_COLORS[0]
    assert record["trip_id"] == "trip-1"

    assert group_from_record({"id": "g1", "color": None})["color"] == GROUP_COLORS[0]


def test_packing_record_stamps_owner_and_time():
    record = item_to_record(
        CollectionKind.PACKING_ITEMS,
        {"id": "p1", "name": "Tent", "lastModifiedBy": "someone-else", "weight": 0},
        "trip-1",
        "user-a",
        now=NOW,
    )

    assert record["last_modified_by"] == "user-a"
    assert record["last_modified_at"] == NOW
    assert record["category"] == "Other"
    assert record["quantity"] == 1
    assert record["weight"] is None
    assert record["is_packed"] is False


def test_packing_from_record_defaults():
    item = item_from_record(CollectionKind.PACKING_ITEMS, {"id": "p1", "name": "Tent", "quantity": None})

    assert item == {
        "id": "p1",
        "name": "Tent",
        "quantity": 1,
        "isOwned": False,
        "needsToBuy": False,
        "isPacked": False,
        "required": False,
        "isPersonal": False,
    }


def test_meal_shared_servings_default():
    meal = {"id": "m1", "name": "Chili"}
    assert item_to_record(CollectionKind.MEALS, meal, "trip-1", "user-a", NOW)["shared_servings"] is True

    meal["sharedServings"] = False
    assert item_to_record(CollectionKind.MEALS, meal, "trip-1", "user-a", NOW)["shared_servings"] is False


def test_shopping_from_record_defaults():
    item = item_from_record(CollectionKind.SHOPPING_ITEMS, {"id": "s1", "name": "Eggs", "category": "food"})

    assert item["quantity"] == 1
    assert item["splits"] == []
    assert "cost" not in item


def test_todo_items_sorted_by_display_order():
    records = [
        {"id": "b", "text": "second", "display_order": 2},
        {"id": "a", "text": "first", "display_order": None},
        {"id": "c", "text": "third", "display_order": 3},
    ]

    items = items_from_records(CollectionKind.TODO_ITEMS, records)

    assert [item["id"] for item in items] == ["a", "b", "c"]
    assert items[0]["displayOrder"] == 0
    assert items[0]["isCompleted"] is False


def test_deleted_ingredients_get_fresh_ids():
    first = item_to_record(CollectionKind.DELETED_INGREDIENTS, "salt", "trip-1", "user-a")
    second = item_to_record(CollectionKind.DELETED_INGREDIENTS, "salt", "trip-1", "user-a")

    assert first["ingredient_name"] == "salt"
    assert first["id"] != second["id"]
    assert item_from_record(CollectionKind.DELETED_INGREDIENTS, first) == "salt"
