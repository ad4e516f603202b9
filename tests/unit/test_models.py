import pytest
from pydantic import ValidationError

from tripsync.models import (
    GROUP_COLORS,
    CollectionKind,
    Group,
    Meal,
    PackingItem,
    ShoppingItem,
    TodoItem,
    Trip,
    coerce_group_colors,
    to_group_color,
)

VALID_TRIP = dict(
    id="trip-1",
    tripName="  Algonquin Loop  ",
    tripType="canoe camping",
    startDate="2024-07-01",
    endDate="2024-07-05",
    groups=[{"id": "g1", "name": "Smiths", "size": 4, "color": "#48BB78"}],
)


def test_trip_valid_round_trips_to_camel_case():
    document = Trip.model_validate(VALID_TRIP).to_document()

    assert document["tripName"] == "Algonquin Loop"
    assert document["tripType"] == "canoe camping"
    assert document["isCoordinated"] is False
    assert document["groups"][0] == {"id": "g1", "name": "Smiths", "size": 4, "color": "#48BB78"}
    assert "description" not in document


def test_trip_keeps_unknown_fields():
    document = Trip.model_validate({**VALID_TRIP, "gearLocker": ["stove"]}).to_document()
    assert document["gearLocker"] == ["stove"]


def test_trip_same_day_is_valid():
    Trip.model_validate({**VALID_TRIP, "endDate": VALID_TRIP["startDate"]})


def test_trip_end_before_start():
    with pytest.raises(ValidationError, match="End date must be after start date"):
        Trip.model_validate({**VALID_TRIP, "endDate": "2024-06-30"})


@pytest.mark.parametrize(
    "field,value",
    [
        ("tripName", "   "),
        ("tripName", "x" * 101),
        ("tripType", "glamping"),
        ("startDate", "2024-7-1"),
        ("endDate", "2024-02-30"),
        ("description", "x" * 501),
        ("location", "x" * 201),
    ],
)
def test_trip_invalid_fields(field, value):
    with pytest.raises(ValidationError):
        Trip.model_validate({**VALID_TRIP, field: value})


def test_group_color_coerced_to_palette():
    group = Group.model_validate({"id": "g1", "name": "Smiths", "size": 2, "color": "#123456"})
    assert group.color == GROUP_COLORS[0]


@pytest.mark.parametrize(
    "group",
    [
        {"id": "g1", "name": "", "size": 2, "color": "#48BB78"},
        {"id": "g1", "name": "Smiths", "size": 0, "color": "#48BB78"},
        {"id": "g1", "name": "Smiths", "size": 2, "contactEmail": "not-an-email", "color": "#48BB78"},
    ],
)
def test_group_invalid(group):
    with pytest.raises(ValidationError):
        Group.model_validate(group)


def test_to_group_color():
    assert to_group_color("#ED64A6") == "#ED64A6"
    assert to_group_color(None) == GROUP_COLORS[0]
    assert to_group_color("red") == GROUP_COLORS[0]


def test_coerce_group_colors_does_not_mutate_input():
    trip = {"id": "t", "groups": [{"id": "g1", "color": "purple"}]}

    coerced = coerce_group_colors(trip)

    assert coerced["groups"][0]["color"] == GROUP_COLORS[0]
    assert trip["groups"][0]["color"] == "purple"


def test_coerce_group_colors_without_groups():
    assert coerce_group_colors({"id": "t"})["groups"] == []


def test_item_defaults():
    assert PackingItem.model_validate({"id": "p1", "name": "Tent"}).quantity == 1
    assert Meal.model_validate({"id": "m1", "name": "Chili"}).shared_servings is True
    assert TodoItem.model_validate({"id": "t1", "text": "Book site"}).display_order == 0


def test_shopping_item_category():
    ShoppingItem.model_validate({"id": "s1", "name": "Eggs", "category": "food", "sourceItemId": "m1"})
    with pytest.raises(ValidationError):
        ShoppingItem.model_validate({"id": "s1", "name": "Eggs", "category": "dairy"})


def test_collection_kind_local_stores():
    assert CollectionKind.PACKING_ITEMS.local_store == "packing_lists"
    assert CollectionKind.SHOPPING_ITEMS.local_store == "shopping_lists"
    assert CollectionKind("todo_items").item_schema is TodoItem
    assert CollectionKind.DELETED_INGREDIENTS.item_schema is None
