"""Pydantic schemas for child-collection items."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Item(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1)


class PackingItem(_Item):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(default="Other", min_length=1)
    quantity: int = Field(default=1, gt=0)
    is_checked: bool = False
    weight: float | None = None
    is_owned: bool = False
    needs_to_buy: bool = False
    is_packed: bool = False
    required: bool = False
    assigned_group_id: str | None = None
    is_personal: bool = False
    notes: str | None = None


class Meal(_Item):
    name: str = Field(..., min_length=1, max_length=100)
    day: int = Field(default=1, ge=1)
    type: Literal["breakfast", "lunch", "dinner", "snack"] = "dinner"
    ingredients: list[str] = []
    is_custom: bool = False
    assigned_group_id: str | None = None
    shared_servings: bool = True
    servings: int = Field(default=1, gt=0)


class ShoppingItem(_Item):
    name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(default=1, gt=0)
    category: Literal["food", "camping"]
    is_checked: bool | None = None
    is_owned: bool | None = None
    needs_to_buy: bool | None = None
    source_item_id: str | None = None
    assigned_group_id: str | None = None
    cost: float | None = None
    paid_by_group_id: str | None = None
    paid_by_user_name: str | None = None
    splits: list[Any] = []


class TodoItem(_Item):
    text: str = Field(..., min_length=1)
    is_completed: bool = False
    display_order: int = 0
    created_at: str | None = None
    updated_at: str | None = None
