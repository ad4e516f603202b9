"""Pydantic validation schema for trips and their groups.

Field names are snake_case in Python and camelCase on the wire; documents
are validated from and dumped back to their camelCase form.
"""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

TRIP_TYPES = ("car camping", "canoe camping", "hike camping", "cottage")
TripType = Literal["car camping", "canoe camping", "hike camping", "cottage"]

GROUP_COLORS = (
    "#4299E1",
    "#48BB78",
    "#ED8936",
    "#9F7AEA",
    "#F56565",
    "#38B2AC",
    "#ED64A6",
    "#ECC94B",
)

_ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


def to_group_color(color: Any) -> str:
    """Return ``color`` if it is a palette colour, else the first palette colour."""
    return color if color in GROUP_COLORS else GROUP_COLORS[0]


def coerce_group_colors(trip: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``trip`` with every group colour forced into the palette."""
    groups = trip.get("groups") or []
    return {
        **trip,
        "groups": [
            {**group, "color": to_group_color(group.get("color"))} if isinstance(group, dict) else group
            for group in groups
        ],
    }


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Group(_Document):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    size: int = Field(..., gt=0)
    contact_name: str | None = None
    contact_email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("color", mode="before")
    @classmethod
    def _palette_color(cls, value: Any) -> str:
        return to_group_color(value)


class Trip(_Document):
    id: str = Field(..., min_length=1)
    trip_name: str = Field(..., min_length=1, max_length=100)
    trip_type: TripType
    start_date: str = Field(..., pattern=_ISO_DATE)
    end_date: str = Field(..., pattern=_ISO_DATE)
    description: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=200)
    is_coordinated: bool = False
    groups: list[Group] = []
    activities: list[Any] | None = None
    emergency_contacts: list[Any] | None = None

    @field_validator("trip_name", "description", "location", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def end_not_before_start(self) -> "Trip":
        if date.fromisoformat(self.end_date) < date.fromisoformat(self.start_date):
            raise ValueError("End date must be after start date")
        return self

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
