from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    BookingConflictError,
    BookingStateError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from app.models.booking import Booking, BookingStatus
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.conflict_policy import BookingKey

module_logger = logging.getLogger(__name__)

BOOKING_FIELDS = (
    "classroom_id",
    "slot_id",
    "faculty_id",
    "academic_year",
    "semester",
    "subject_code",
    "section",
    "expected_students",
)

LIVE_BOOKING_INDEXES = (
    "uq_bookings_live_classroom_slot_period",
    "uq_bookings_live_faculty_slot_period",
)


class BookingRegistry:
    """Durable store of bookings; the partial unique indexes are the final word on conflicts."""

    def __init__(self, db: Session, logger: logging.Logger | None = None) -> None:
        self.db = db
        self.logger = logger or module_logger

    def get(self, booking_id: int) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise ResourceNotFoundError("Booking", booking_id)
        return booking

    def live_bookings_for(self, key: BookingKey, exclude_booking_id: int | None = None) -> Select:
        column = getattr(Booking, key.kind.booking_attribute)
        statement = select(Booking).where(
            column == key.resource_id,
            Booking.slot_id == key.slot_id,
            Booking.academic_year == key.academic_year,
            Booking.semester == key.semester,
            Booking.status == BookingStatus.active,
        )
        if exclude_booking_id is not None:
            statement = statement.where(Booking.id != exclude_booking_id)
        return statement

    def find_live(self, key: BookingKey, exclude_booking_id: int | None = None) -> Booking | None:
        statement = self.live_bookings_for(key, exclude_booking_id).limit(1)
        return self.db.execute(statement).scalars().first()

    def live_bookings_in_period(
        self, key: BookingKey, exclude_booking_id: int | None = None
    ) -> list[tuple[Booking, TimeSlot]]:
        """Every live booking the resource holds in the key's period, paired with its slot."""
        column = getattr(Booking, key.kind.booking_attribute)
        statement = select(Booking, TimeSlot).join(TimeSlot, TimeSlot.id == Booking.slot_id).where(
            column == key.resource_id,
            Booking.academic_year == key.academic_year,
            Booking.semester == key.semester,
            Booking.status == BookingStatus.active,
        )
        if exclude_booking_id is not None:
            statement = statement.where(Booking.id != exclude_booking_id)
        return [(booking, slot) for booking, slot in self.db.execute(statement).all()]

    def insert(self, values: dict, *, actor_id: str | None = None) -> Booking:
        booking = Booking(
            **{key: values.get(key) for key in BOOKING_FIELDS},
            status=BookingStatus.active,
            created_by_id=actor_id,
        )
        self.db.add(booking)
        self._flush_or_conflict(values)
        self.logger.info(
            "Booked classroom %s for slot %s in %s/%s as booking %s",
            booking.classroom_id,
            booking.slot_id,
            booking.academic_year,
            booking.semester,
            booking.id,
        )
        return booking

    def update(self, booking: Booking, values: dict) -> Booking:
        if booking.status != BookingStatus.active:
            raise BookingStateError("Retired bookings cannot be edited", details={"booking_id": booking.id})
        for key in BOOKING_FIELDS:
            if key in values:
                setattr(booking, key, values[key])
        self._flush_or_conflict(values)
        return booking

    def retire(self, booking: Booking) -> Booking:
        if booking.status == BookingStatus.retired:
            raise BookingStateError("Booking is already retired", details={"booking_id": booking.id})
        booking.status = BookingStatus.retired
        booking.retired_at = datetime.now(timezone.utc)
        self.db.flush()
        self.logger.info("Retired booking %s", booking.id)
        return booking

    def list_bookings(
        self,
        *,
        academic_year: str | None = None,
        semester: int | None = None,
        classroom_id: int | None = None,
        faculty_id: str | None = None,
        slot_id: int | None = None,
        include_retired: bool = False,
    ) -> list[Booking]:
        statement = select(Booking)
        if academic_year is not None:
            statement = statement.where(Booking.academic_year == academic_year)
        if semester is not None:
            statement = statement.where(Booking.semester == semester)
        if classroom_id is not None:
            statement = statement.where(Booking.classroom_id == classroom_id)
        if faculty_id is not None:
            statement = statement.where(Booking.faculty_id == faculty_id)
        if slot_id is not None:
            statement = statement.where(Booking.slot_id == slot_id)
        if not include_retired:
            statement = statement.where(Booking.status == BookingStatus.active)
        return list(self.db.execute(statement.order_by(Booking.id.asc())).scalars())

    def classroom_schedule(
        self,
        classroom_id: int,
        day: DayOfWeek,
        academic_year: str,
        semester: int,
    ) -> list[tuple[Booking, TimeSlot]]:
        statement = (
            select(Booking, TimeSlot)
            .join(TimeSlot, Booking.slot_id == TimeSlot.id)
            .where(
                Booking.classroom_id == classroom_id,
                TimeSlot.day_of_week == day,
                Booking.academic_year == academic_year,
                Booking.semester == semester,
                Booking.status == BookingStatus.active,
            )
            .order_by(TimeSlot.start_time.asc())
        )
        return [(booking, slot) for booking, slot in self.db.execute(statement).all()]

    def count_live_for_classroom(self, classroom_id: int) -> int:
        statement = select(func.count(Booking.id)).where(
            Booking.classroom_id == classroom_id,
            Booking.status == BookingStatus.active,
        )
        return self.db.execute(statement).scalar_one()

    def _flush_or_conflict(self, values: dict) -> None:
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            details = {key: values.get(key) for key in ("classroom_id", "faculty_id", "slot_id", "academic_year", "semester")}
            if not is_unique_violation(exc):
                self.logger.warning("Booking write rejected by a storage constraint: %s", exc.orig)
                raise ValidationFailedError("Booking violates a storage constraint", details=details) from exc
            self.logger.info("Booking write rejected by uniqueness guard: %s", exc.orig)
            raise BookingConflictError(
                "The classroom or faculty member is already booked for this slot and academic period",
                details=details,
            ) from exc


def is_unique_violation(exc: IntegrityError) -> bool:
    # 23505 is PostgreSQL's unique_violation; SQLite only reports it in the message.
    if getattr(exc.orig, "sqlstate", None) == "23505":
        return True
    message = str(exc.orig)
    return "UNIQUE constraint failed" in message or any(index in message for index in LIVE_BOOKING_INDEXES)
