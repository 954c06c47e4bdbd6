from __future__ import annotations

import re
from datetime import datetime, time

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.booking import BookingStatus
from app.services.conflict_policy import ResourceKind

ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}-\d{4}$")

# Ids are stored in 32-bit INTEGER columns.
MAX_ID = 2_147_483_647
REQUIRED_BOOKING_FIELDS = ("classroom_id", "slot_id", "academic_year", "semester")


def check_academic_year_format(value: str) -> str:
    value = value.strip()
    if not ACADEMIC_YEAR_PATTERN.match(value):
        raise ValueError("Academic year must be in YYYY-YYYY format (e.g., 2025-2026)")
    return value


class BookingCreate(BaseModel):
    classroom_id: int = Field(ge=1, le=MAX_ID)
    slot_id: int = Field(ge=1, le=MAX_ID)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    academic_year: str = Field(min_length=9, max_length=9)
    semester: int = Field(ge=1, le=12)
    subject_code: str | None = Field(default=None, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    expected_students: int | None = Field(default=None, ge=0, le=5000)

    @field_validator("academic_year")
    @classmethod
    def validate_academic_year(cls, value: str) -> str:
        return check_academic_year_format(value)


class BookingUpdate(BaseModel):
    classroom_id: int | None = Field(default=None, ge=1, le=MAX_ID)
    slot_id: int | None = Field(default=None, ge=1, le=MAX_ID)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    academic_year: str | None = Field(default=None, min_length=9, max_length=9)
    semester: int | None = Field(default=None, ge=1, le=12)
    subject_code: str | None = Field(default=None, max_length=50)
    section: str | None = Field(default=None, max_length=20)
    expected_students: int | None = Field(default=None, ge=0, le=5000)

    @field_validator("academic_year")
    @classmethod
    def validate_academic_year(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return check_academic_year_format(value)

    @model_validator(mode="after")
    def reject_cleared_required_fields(self) -> "BookingUpdate":
        cleared = [name for name in REQUIRED_BOOKING_FIELDS if name in self.model_fields_set and getattr(self, name) is None]
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(cleared)}")
        return self


class BookingOut(BaseModel):
    id: int
    classroom_id: int
    slot_id: int
    faculty_id: str | None
    academic_year: str
    semester: int
    subject_code: str | None
    section: str | None
    expected_students: int | None
    status: BookingStatus
    created_at: datetime | None = None
    retired_at: datetime | None = None

    model_config = {"from_attributes": True}


class BookingDecisionOut(BaseModel):
    booking: BookingOut
    warnings: list[str] = Field(default_factory=list)


class AvailabilityQuery(BaseModel):
    resource_kind: ResourceKind = ResourceKind.classroom
    resource_id: int | str
    slot_id: int = Field(ge=1, le=MAX_ID)
    academic_year: str = Field(min_length=1, max_length=20)
    semester: int = Field(ge=1, le=12)
    exclude_booking_id: int | None = Field(default=None, ge=1, le=MAX_ID)

    @field_validator("resource_id")
    @classmethod
    def validate_resource_id(cls, value: int | str) -> int | str:
        if isinstance(value, int) and not 1 <= value <= MAX_ID:
            raise ValueError(f"Resource id must be between 1 and {MAX_ID}")
        if isinstance(value, str) and not 1 <= len(value) <= 36:
            raise ValueError("Resource id must be 1 to 36 characters")
        return value


class AvailabilityOut(BaseModel):
    available: bool
    resource_kind: ResourceKind
    resource_id: str
    slot_id: int
    academic_year: str
    semester: int


class ScheduleEntryOut(BaseModel):
    booking_id: int
    slot_id: int
    slot_name: str
    start_time: time
    end_time: time
    faculty_id: str | None
    subject_code: str | None
    section: str | None
