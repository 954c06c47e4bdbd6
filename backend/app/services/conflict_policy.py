"""Shared conflict rules for slot definitions and booking occupancy.

Two checks of different strength live here:

* slot definitions must never overlap in time on the same day (interval semantics);
* live bookings must never repeat the same (resource, slot, period) key
  (exact-key semantics).

Everything is a pure function over values handed in by the catalog or the
availability checker.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from app.models.booking import Booking, BookingStatus
from app.models.time_slot import TimeSlot
from app.services.intervals import TimeInterval


class ResourceKind(str, Enum):
    classroom = "classroom"
    faculty = "faculty"

    @property
    def booking_attribute(self) -> str:
        return f"{self.value}_id"


@dataclass(frozen=True)
class BookingKey:
    kind: ResourceKind
    resource_id: int | str
    slot_id: int
    academic_year: str
    semester: int

    def as_dict(self) -> dict:
        return {
            "resource_kind": self.kind.value,
            "resource_id": str(self.resource_id),
            "slot_id": self.slot_id,
            "academic_year": self.academic_year,
            "semester": self.semester,
        }


def slot_interval(slot: TimeSlot) -> TimeInterval:
    return TimeInterval(slot.day_of_week, slot.start_time, slot.end_time)


def find_duplicate(
    candidate: TimeInterval,
    slots: Iterable[TimeSlot],
    exclude_id: int | None = None,
) -> TimeSlot | None:
    for slot in slots:
        if exclude_id is not None and slot.id == exclude_id:
            continue
        if slot_interval(slot).same_span(candidate):
            return slot
    return None


def find_overlapping(
    candidate: TimeInterval,
    slots: Iterable[TimeSlot],
    exclude_id: int | None = None,
) -> TimeSlot | None:
    # Inactive slots count too: a deactivated slot can be switched back on at any time.
    for slot in slots:
        if exclude_id is not None and slot.id == exclude_id:
            continue
        if slot_interval(slot).overlaps(candidate):
            return slot
    return None


def booking_matches(booking: Booking, key: BookingKey, exclude_booking_id: int | None = None) -> bool:
    if booking.status != BookingStatus.active:
        return False
    if exclude_booking_id is not None and booking.id == exclude_booking_id:
        return False
    resource_value = getattr(booking, key.kind.booking_attribute)
    return (
        resource_value is not None
        and str(resource_value) == str(key.resource_id)
        and booking.slot_id == key.slot_id
        and booking.academic_year == key.academic_year
        and booking.semester == key.semester
    )


def describe_slot(slot: TimeSlot) -> str:
    return f"{slot.slot_name} ({slot_interval(slot)})"
