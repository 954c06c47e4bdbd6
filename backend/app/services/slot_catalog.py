from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateSlotError,
    InvalidRangeError,
    OverlappingSlotError,
    ResourceInUseError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from app.models.booking import Booking, BookingStatus
from app.models.time_slot import DayOfWeek, SlotType, TimeSlot
from app.services.conflict_policy import describe_slot, find_duplicate, find_overlapping, slot_interval
from app.services.intervals import TimeInterval, parse_day

module_logger = logging.getLogger(__name__)

STANDARD_WEEKDAYS = (
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
    DayOfWeek.saturday,
)

INTERVAL_FIELDS = ("day_of_week", "start_time", "end_time")
PATCHABLE_FIELDS = INTERVAL_FIELDS + ("slot_name", "slot_type", "is_active")


def parse_slot_type(kind: SlotType | str) -> SlotType:
    try:
        return SlotType(kind)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in SlotType)
        raise ValidationFailedError(f"Invalid slot type {kind!r}; expected one of: {allowed}") from exc


@dataclass
class SlotUsage:
    live: int
    retired: int

    @property
    def total(self) -> int:
        return self.live + self.retired


class SlotCatalog:
    """Owns time slot records and keeps same-day slot definitions disjoint."""

    def __init__(self, db: Session, logger: logging.Logger | None = None) -> None:
        self.db = db
        self.logger = logger or module_logger

    def get(self, slot_id: int) -> TimeSlot:
        slot = self.db.get(TimeSlot, slot_id)
        if slot is None:
            raise ResourceNotFoundError("Time slot", slot_id)
        return slot

    def define(
        self,
        *,
        day: str | DayOfWeek,
        start: str | time,
        end: str | time,
        name: str,
        kind: SlotType | str = SlotType.regular,
        active: bool = True,
    ) -> TimeSlot:
        if not name or not str(name).strip():
            raise ValidationFailedError("Field slot_name is required")
        slot_type = parse_slot_type(kind)
        candidate = TimeInterval.parse(day, start, end)

        self._lock_day(candidate.day)
        same_day = self._slots_on(candidate.day)
        duplicate = find_duplicate(candidate, same_day)
        if duplicate is not None:
            raise DuplicateSlotError(details={"conflicting_slot_id": duplicate.id})
        overlapping = find_overlapping(candidate, same_day)
        if overlapping is not None:
            raise OverlappingSlotError(
                f"This time slot overlaps with an existing slot: {describe_slot(overlapping)}",
                details={"conflicting_slot_id": overlapping.id},
            )

        slot = TimeSlot(
            day_of_week=candidate.day,
            start_time=candidate.start,
            end_time=candidate.end,
            slot_name=str(name).strip(),
            slot_type=slot_type,
            is_active=active,
        )
        self.db.add(slot)
        self._flush_or_duplicate()
        self.logger.info("Defined time slot %s as %s", slot.id, candidate)
        return slot

    def redefine(self, slot_id: int, patch: dict) -> TimeSlot:
        slot = self.get(slot_id)
        changes = {key: value for key, value in patch.items() if key in PATCHABLE_FIELDS and value is not None}
        if not changes:
            raise ValidationFailedError("No valid fields provided for update")

        if any(field in changes for field in INTERVAL_FIELDS):
            candidate = TimeInterval.parse(
                changes.get("day_of_week", slot.day_of_week),
                changes.get("start_time", slot.start_time),
                changes.get("end_time", slot.end_time),
            )
            self._lock_day(candidate.day)
            conflicting = find_overlapping(candidate, self._slots_on(candidate.day), exclude_id=slot.id)
            if conflicting is not None:
                raise OverlappingSlotError(
                    f"Updated time slot would conflict with an existing slot: {describe_slot(conflicting)}",
                    details={"conflicting_slot_id": conflicting.id},
                )
            changes["day_of_week"] = candidate.day
            changes["start_time"] = candidate.start
            changes["end_time"] = candidate.end

        if "slot_name" in changes:
            if not str(changes["slot_name"]).strip():
                raise ValidationFailedError("Field slot_name is required")
            changes["slot_name"] = str(changes["slot_name"]).strip()
        if "slot_type" in changes:
            changes["slot_type"] = parse_slot_type(changes["slot_type"])

        for key, value in changes.items():
            setattr(slot, key, value)
        self._flush_or_duplicate()
        self.logger.info("Redefined time slot %s (%s)", slot.id, ", ".join(sorted(changes)))
        return slot

    def usage(self, slot_id: int) -> SlotUsage:
        rows = self.db.execute(
            select(Booking.status, func.count(Booking.id))
            .where(Booking.slot_id == slot_id)
            .group_by(Booking.status)
        ).all()
        counts = {status: count for status, count in rows}
        return SlotUsage(
            live=counts.get(BookingStatus.active, 0),
            retired=counts.get(BookingStatus.retired, 0),
        )

    def retire(self, slot_id: int) -> TimeSlot:
        slot = self.get(slot_id)
        # Counted over every academic period, not just the current one.
        usage = self.usage(slot.id)
        if usage.live:
            raise ResourceInUseError(
                f"Cannot delete time slot that is being used in {usage.live} active booking(s); deactivate it instead",
                details={"live_bookings": usage.live, "retired_bookings": usage.retired},
            )
        if usage.retired:
            raise ResourceInUseError(
                f"Cannot delete time slot referenced by {usage.retired} retired booking(s); deactivate it instead",
                details={"live_bookings": 0, "retired_bookings": usage.retired},
            )
        self.db.delete(slot)
        self.db.flush()
        self.logger.info("Deleted time slot %s", slot_id)
        return slot

    def set_active(self, slot_id: int, active: bool) -> TimeSlot:
        slot = self.get(slot_id)
        slot.is_active = active
        self.db.flush()
        return slot

    def list_by_day(self, day: str | DayOfWeek) -> list[TimeSlot]:
        statement = (
            select(TimeSlot)
            .where(TimeSlot.day_of_week == parse_day(day), TimeSlot.is_active.is_(True))
            .order_by(TimeSlot.start_time.asc())
        )
        return list(self.db.execute(statement).scalars())

    def list_slots(
        self,
        *,
        day: str | DayOfWeek | None = None,
        kind: SlotType | str | None = None,
        active: bool | None = None,
    ) -> list[TimeSlot]:
        statement = select(TimeSlot)
        if day is not None:
            statement = statement.where(TimeSlot.day_of_week == parse_day(day))
        if kind is not None:
            statement = statement.where(TimeSlot.slot_type == parse_slot_type(kind))
        if active is not None:
            statement = statement.where(TimeSlot.is_active.is_(active))
        slots = self.db.execute(statement).scalars()
        return sorted(slots, key=lambda slot: (slot.day_of_week.order, slot.start_time))

    def available_slots(self, day: str | DayOfWeek | None = None) -> list[TimeSlot]:
        return self.list_slots(day=day, kind=SlotType.regular, active=True)

    def usage_statistics(self) -> dict:
        slots = self.list_slots()
        durations = [slot_interval(slot).duration_minutes for slot in slots]
        return {
            "total_slots": len(slots),
            "active_slots": sum(1 for slot in slots if slot.is_active),
            "inactive_slots": sum(1 for slot in slots if not slot.is_active),
            "regular_slots": sum(1 for slot in slots if slot.slot_type == SlotType.regular),
            "break_slots": sum(1 for slot in slots if slot.slot_type == SlotType.break_),
            "lunch_slots": sum(1 for slot in slots if slot.slot_type == SlotType.lunch),
            "avg_duration_minutes": round(sum(durations) / len(durations), 2) if durations else 0.0,
        }

    def define_standard_week(
        self,
        *,
        days: tuple[DayOfWeek, ...] = STANDARD_WEEKDAYS,
        first_hour: int = 8,
        last_hour: int = 17,
    ) -> list[TimeSlot]:
        """Define one-hour periods from `first_hour` to `last_hour` on each day.

        Hours that would clash with an existing slot are skipped, so running it
        again over a partly built grid only fills the gaps.
        """
        if not 0 <= first_hour < last_hour <= 23:
            raise InvalidRangeError(
                "Standard week hours must satisfy 0 <= first_hour < last_hour <= 23",
                details={"first_hour": first_hour, "last_hour": last_hour},
            )
        created: list[TimeSlot] = []
        for day in days:
            day = parse_day(day)
            for period, hour in enumerate(range(first_hour, last_hour), start=1):
                candidate = TimeInterval(day, time(hour), time(hour + 1))
                if find_overlapping(candidate, self._slots_on(day)) is not None:
                    continue
                created.append(
                    self.define(day=day, start=candidate.start, end=candidate.end, name=f"Period {period}")
                )
        return created

    def _slots_on(self, day: DayOfWeek) -> list[TimeSlot]:
        return list(self.db.execute(select(TimeSlot).where(TimeSlot.day_of_week == day)).scalars())

    def _lock_day(self, day: DayOfWeek) -> None:
        # Serializes concurrent definitions for one day until the transaction ends.
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                {"key": f"time_slots:{day.value}"},
            )

    def _flush_or_duplicate(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateSlotError() from exc

