from __future__ import annotations

from datetime import time

from pydantic import BaseModel, Field, field_validator

from app.models.time_slot import DayOfWeek, SlotType
from app.services.intervals import TIME_OF_DAY_PATTERN


def normalize_time_value(value: str) -> str:
    stripped = value.strip()
    match = TIME_OF_DAY_PATTERN.match(stripped)
    if match is None:
        raise ValueError("Time must be in HH:MM:SS 24-hour format")
    hours, minutes, seconds = match.groups()
    return f"{int(hours):02d}:{minutes}:{seconds}"


def normalize_day_value(value):
    if isinstance(value, str):
        return value.strip().capitalize()
    return value


class TimeSlotCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    slot_name: str = Field(min_length=1, max_length=100)
    slot_type: SlotType = SlotType.regular
    is_active: bool = True

    @field_validator("day_of_week", mode="before")
    @classmethod
    def normalize_day(cls, value):
        return normalize_day_value(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return normalize_time_value(value)

    @field_validator("slot_name")
    @classmethod
    def validate_slot_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("slot_name must not be blank")
        return value.strip()


class TimeSlotUpdate(BaseModel):
    day_of_week: DayOfWeek | None = None
    start_time: str | None = None
    end_time: str | None = None
    slot_name: str | None = Field(default=None, min_length=1, max_length=100)
    slot_type: SlotType | None = None
    is_active: bool | None = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def normalize_day(cls, value):
        return normalize_day_value(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return normalize_time_value(value)


class TimeSlotOut(BaseModel):
    id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    slot_name: str
    slot_type: SlotType
    is_active: bool

    model_config = {"from_attributes": True}


class SlotStatistics(BaseModel):
    total_slots: int
    active_slots: int
    inactive_slots: int
    regular_slots: int
    break_slots: int
    lunch_slots: int
    avg_duration_minutes: float
