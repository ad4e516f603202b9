"""SQLAlchemy models for the per-trip child collection tables."""

from sqlalchemy import Boolean, Float, ForeignKeyConstraint, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from tripsync.db.schemas.base import Base


class _TripChild:
    """Composite key (user_id, trip_id, id): item ids are unique per owner and trip."""

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    @declared_attr.directive
    def __table_args__(cls) -> tuple:
        return (ForeignKeyConstraint(["user_id", "trip_id"], ["trips.user_id", "trips.id"], ondelete="CASCADE"),)


class PackingItemRecord(_TripChild, Base):
    __tablename__ = "packing_items"

    name: Mapped[str] = mapped_column(String(100), nullable=False, server_default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, server_default="Other")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    weight: Mapped[float | None] = mapped_column(Float)
    is_owned: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    needs_to_buy: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    is_packed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    assigned_group_id: Mapped[str | None] = mapped_column(String(255))
    is_personal: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    packed_by_user_id: Mapped[str | None] = mapped_column(String(255))
    last_modified_by: Mapped[str | None] = mapped_column(String(255))
    last_modified_at = mapped_column(TIMESTAMP(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at = mapped_column(TIMESTAMP(timezone=True))
    updated_at = mapped_column(TIMESTAMP(timezone=True))


class MealRecord(_TripChild, Base):
    __tablename__ = "meals"

    name: Mapped[str] = mapped_column(String(100), nullable=False, server_default="")
    day: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    type: Mapped[str] = mapped_column(String(20), nullable=False, server_default="dinner")
    ingredients = mapped_column(JSONB, nullable=False, server_default="[]")
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    assigned_group_id: Mapped[str | None] = mapped_column(String(255))
    shared_servings: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    servings: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    last_modified_by: Mapped[str | None] = mapped_column(String(255))
    last_modified_at = mapped_column(TIMESTAMP(timezone=True))
    created_at = mapped_column(TIMESTAMP(timezone=True))
    updated_at = mapped_column(TIMESTAMP(timezone=True))


class ShoppingItemRecord(_TripChild, Base):
    __tablename__ = "shopping_items"

    name: Mapped[str | None] = mapped_column(String(100))
    quantity: Mapped[int | None] = mapped_column(Integer)
    category: Mapped[str | None] = mapped_column(String(20))
    is_owned: Mapped[bool | None] = mapped_column(Boolean)
    needs_to_buy: Mapped[bool | None] = mapped_column(Boolean)
    source_item_id: Mapped[str | None] = mapped_column(String(255))
    assigned_group_id: Mapped[str | None] = mapped_column(String(255))
    cost: Mapped[float | None] = mapped_column(Float)
    paid_by_group_id: Mapped[str | None] = mapped_column(String(255))
    paid_by_user_name: Mapped[str | None] = mapped_column(Text)
    splits = mapped_column(JSONB)


class TodoItemRecord(_TripChild, Base):
    __tablename__ = "todo_items"

    text: Mapped[str | None] = mapped_column(Text)
    is_completed: Mapped[bool | None] = mapped_column(Boolean)
    display_order: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[str | None] = mapped_column(Text)
    updated_at: Mapped[str | None] = mapped_column(Text)


class DeletedIngredientRecord(_TripChild, Base):
    __tablename__ = "deleted_ingredients"

    ingredient_name: Mapped[str] = mapped_column(Text, nullable=False)
