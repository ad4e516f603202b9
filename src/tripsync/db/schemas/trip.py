"""SQLAlchemy models for the trips and groups tables."""

from sqlalchemy import CheckConstraint, ForeignKeyConstraint, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from tripsync.db.schemas.base import Base


class TripRecord(Base):
    __tablename__ = "trips"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    trip_name: Mapped[str] = mapped_column(String(100), nullable=False)
    trip_type: Mapped[str | None] = mapped_column(String(32))
    start_date: Mapped[str | None] = mapped_column(String(10))
    end_date: Mapped[str | None] = mapped_column(String(10))
    location: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    data = mapped_column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    created_at = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))

    __table_args__ = (
        CheckConstraint(
            "trip_type IN ('car camping', 'canoe camping', 'hike camping', 'cottage')",
            name="chk_trips_trip_type",
        ),
    )


class GroupRecord(Base):
    __tablename__ = "groups"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(100))
    size: Mapped[int | None] = mapped_column(Integer)
    contact_name: Mapped[str | None] = mapped_column(Text)
    contact_email: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(String(7))

    __table_args__ = (
        ForeignKeyConstraint(["user_id", "trip_id"], ["trips.user_id", "trips.id"], ondelete="CASCADE"),
    )
