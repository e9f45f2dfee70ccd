"""Pydantic models for timetable editing.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Attributes are snake_case in Python; the storage API speaks camelCase JSON, so
every model carries camelCase aliases and accepts either form on input.
"""

from datetime import date
from enum import Enum
from typing import Any, Generic, Literal, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.timetable.utils import TIME_PATTERN, to_minutes

T = TypeVar("T")

BlockType = Literal["class", "break", "meal", "study", "exam", "custom"]


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def new_block_id() -> str:
    """Client-side id for a block that has not been persisted yet."""
    return f"new-{uuid4().hex[:12]}"


class ScheduleBlock(CamelModel):
    """One timetable entry as manipulated by the editor.

    Blocks loaded from storage carry the timetable item id. Blocks added in
    the editor get a client-side id; storage assigns the real one on create.
    """

    id: str = Field(default_factory=new_block_id)
    start_time: str = Field(pattern=TIME_PATTERN)  # "09:00"
    end_time: str = Field(pattern=TIME_PATTERN)  # "10:00"
    day_of_week: DayOfWeek
    title: str = ""
    notes: str | None = None
    color: str | None = None
    block_type: BlockType | None = Field(default=None, alias="type")

    @model_validator(mode="after")
    def check_time_order(self) -> "ScheduleBlock":
        if to_minutes(self.start_time) >= to_minutes(self.end_time):
            raise ValueError(
                f"startTime {self.start_time} must be before endTime {self.end_time}"
            )
        return self

    @property
    def label(self) -> str:
        return f"{self.day_of_week.value} {self.start_time}-{self.end_time}"


class TimeSlot(CamelModel):
    """A storage-level (startTime, endTime) record referenced by items."""

    id: str
    name: str = ""  # "1st period", "Lunch", ...
    start_time: str
    end_time: str
    duration: int  # minutes
    is_break: bool = False
    order: int = 0


class TimeSlotCreate(CamelModel):
    """Request body for creating a time slot."""

    name: str
    start_time: str
    end_time: str
    duration: int
    is_break: bool = False
    order: int


class CreationContext(CamelModel):
    """References needed to persist a brand-new block as a timetable item."""

    class_id: str = ""
    teacher_id: str = ""
    timetable_id: str | None = None
    room_id: str | None = None
    start_date: date
    end_date: date | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.class_id and self.teacher_id)


class TimetableItem(CamelModel):
    """A persisted timetable entry as returned by the storage API."""

    id: str
    timetable_id: str | None = None
    class_id: str
    teacher_id: str
    day_of_week: DayOfWeek
    time_slot_id: str
    room_id: str | None = None
    start_date: date
    end_date: date | None = None
    is_recurring: bool = False
    status: str = "active"
    notes: str | None = None


class ApiResponse(BaseModel, Generic[T]):
    """Envelope every storage operation returns.

    Failures are reported with ``success=False`` instead of raising.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResponse[Any]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str | None = None) -> "ApiResponse[Any]":
        return cls(success=False, error=error)

    def error_message(self, fallback: str) -> str:
        """The collaborator's error text, or ``fallback`` when it gave none."""
        return self.error or self.message or fallback
