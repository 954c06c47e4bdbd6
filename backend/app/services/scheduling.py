"""Entry points the CRUD surface calls to create and edit slots and bookings.

Each public method is one unit of work: it validates, writes, records an audit
entry and commits, or rolls back and re-raises.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    BookingConflictError,
    BookingStateError,
    ResourceNotFoundError,
    ResourceUnavailableError,
    ValidationFailedError,
)
from app.models.booking import Booking, BookingStatus
from app.models.classroom import Classroom, ClassroomStatus
from app.models.time_slot import TimeSlot
from app.schemas.booking import REQUIRED_BOOKING_FIELDS, BookingCreate, BookingUpdate
from app.schemas.time_slot import TimeSlotCreate, TimeSlotUpdate
from app.services.audit import log_activity
from app.services.availability import AvailabilityChecker
from app.services.booking_registry import BOOKING_FIELDS, BookingRegistry
from app.services.conflict_policy import BookingKey, ResourceKind, describe_slot
from app.services.slot_catalog import SlotCatalog

module_logger = logging.getLogger(__name__)


@dataclass
class BookingDecision:
    booking: Booking
    warnings: list[str] = field(default_factory=list)


def validate_academic_year(academic_year: str, *, today: date, window: int) -> None:
    try:
        start_text, end_text = academic_year.split("-")
        start_year, end_year = int(start_text), int(end_text)
    except (AttributeError, ValueError) as exc:
        raise ValidationFailedError("Academic year must be in YYYY-YYYY format (e.g., 2025-2026)") from exc
    if end_year != start_year + 1:
        raise ValidationFailedError("Academic year end year must be exactly one year after start year")
    if abs(start_year - today.year) > window:
        raise ValidationFailedError(
            "Academic year seems unreasonable. Please check the year range.",
            details={"academic_year": academic_year, "window_years": window},
        )


def capacity_warnings(classroom: Classroom, expected_students: int | None) -> list[str]:
    if not expected_students:
        return []
    capacity = classroom.capacity
    if expected_students > capacity:
        return [
            f"CAPACITY EXCEEDED: {expected_students} students expected but classroom "
            f"{classroom.display_name} only has capacity for {capacity}"
        ]
    if expected_students > capacity * 0.9:
        return [f"NEAR CAPACITY: Classroom {classroom.room_number} is nearly full ({expected_students}/{capacity} students)"]
    if expected_students > capacity * 0.8:
        return [f"HIGH OCCUPANCY: Classroom {classroom.room_number} is {expected_students}/{capacity} students"]
    return []


class ValidationGateway:
    def __init__(
        self,
        db: Session,
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        today: date | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.logger = logger or module_logger
        self.today = today
        self.catalog = SlotCatalog(db, logger=self.logger)
        self.registry = BookingRegistry(db, logger=self.logger)
        self.checker = AvailabilityChecker(
            db,
            registry=self.registry,
            strict_intervals=self.settings.strict_interval_availability,
            logger=self.logger,
        )

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Time slots

    def define_slot(self, payload: TimeSlotCreate, *, actor_id: str | None = None) -> TimeSlot:
        with self._unit_of_work():
            slot = self.catalog.define(
                day=payload.day_of_week,
                start=payload.start_time,
                end=payload.end_time,
                name=payload.slot_name,
                kind=payload.slot_type,
                active=payload.is_active,
            )
            log_activity(
                self.db,
                actor_id=actor_id,
                action="CREATE_TIMESLOT",
                entity_type="time_slots",
                entity_id=slot.id,
                details=payload.model_dump(mode="json"),
            )
        self.db.refresh(slot)
        return slot

    def redefine_slot(self, slot_id: int, payload: TimeSlotUpdate, *, actor_id: str | None = None) -> TimeSlot:
        patch = payload.model_dump(exclude_unset=True)
        with self._unit_of_work():
            slot = self.catalog.redefine(slot_id, patch)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="UPDATE_TIMESLOT",
                entity_type="time_slots",
                entity_id=slot.id,
                details=payload.model_dump(mode="json", exclude_unset=True),
            )
        self.db.refresh(slot)
        return slot

    def retire_slot(self, slot_id: int, *, actor_id: str | None = None) -> None:
        with self._unit_of_work():
            slot = self.catalog.retire(slot_id)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="DELETE_TIMESLOT",
                entity_type="time_slots",
                entity_id=slot_id,
                details={"slot": describe_slot(slot)},
            )

    def set_slot_active(self, slot_id: int, active: bool, *, actor_id: str | None = None) -> TimeSlot:
        with self._unit_of_work():
            slot = self.catalog.set_active(slot_id, active)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="ACTIVATE_TIMESLOT" if active else "DEACTIVATE_TIMESLOT",
                entity_type="time_slots",
                entity_id=slot_id,
                details={"is_active": active},
            )
        self.db.refresh(slot)
        return slot

    def seed_standard_week(
        self,
        *,
        first_hour: int = 8,
        last_hour: int = 17,
        actor_id: str | None = None,
    ) -> list[TimeSlot]:
        with self._unit_of_work():
            created = self.catalog.define_standard_week(first_hour=first_hour, last_hour=last_hour)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="SEED_TIMESLOTS",
                entity_type="time_slots",
                details={"created": len(created), "first_hour": first_hour, "last_hour": last_hour},
            )
        self.logger.info("Seeded %d standard week slots", len(created))
        return created

    # Availability

    def check_availability(
        self,
        resource_id: int | str,
        slot_id: int,
        academic_year: str,
        semester: int,
        exclude_booking_id: int | None = None,
        *,
        kind: ResourceKind = ResourceKind.classroom,
    ) -> bool:
        return self.checker.is_available(
            resource_id,
            slot_id,
            academic_year,
            semester,
            exclude_booking_id,
            kind=kind,
        )

    # Bookings

    def create_booking(self, payload: BookingCreate, *, actor_id: str | None = None) -> BookingDecision:
        values = payload.model_dump()
        with self._unit_of_work():
            classroom = self._validate_proposal(values)
            booking = self.registry.insert(values, actor_id=actor_id)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="CREATE_BOOKING",
                entity_type="bookings",
                entity_id=booking.id,
                details=payload.model_dump(mode="json"),
            )
        self.db.refresh(booking)
        return BookingDecision(booking=booking, warnings=capacity_warnings(classroom, values["expected_students"]))

    def update_booking(
        self,
        booking_id: int,
        payload: BookingUpdate,
        *,
        actor_id: str | None = None,
    ) -> BookingDecision:
        patch = payload.model_dump(exclude_unset=True)
        cleared = [name for name in REQUIRED_BOOKING_FIELDS if name in patch and patch[name] is None]
        if cleared:
            raise ValidationFailedError("Required booking fields cannot be cleared", details={"fields": cleared})
        with self._unit_of_work():
            booking = self.registry.get(booking_id)
            if booking.status != BookingStatus.active:
                raise BookingStateError("Retired bookings cannot be edited", details={"booking_id": booking_id})
            values = {key: getattr(booking, key) for key in BOOKING_FIELDS}
            values.update(patch)
            classroom = self._validate_proposal(values, exclude_booking_id=booking.id)
            self.registry.update(booking, values)
            log_activity(
                self.db,
                actor_id=actor_id,
                action="UPDATE_BOOKING",
                entity_type="bookings",
                entity_id=booking.id,
                details=payload.model_dump(mode="json", exclude_unset=True),
            )
        self.db.refresh(booking)
        return BookingDecision(booking=booking, warnings=capacity_warnings(classroom, values["expected_students"]))

    def retire_booking(self, booking_id: int, *, actor_id: str | None = None) -> Booking:
        with self._unit_of_work():
            booking = self.registry.retire(self.registry.get(booking_id))
            log_activity(
                self.db,
                actor_id=actor_id,
                action="RETIRE_BOOKING",
                entity_type="bookings",
                entity_id=booking.id,
                details={"status": booking.status.value},
            )
        self.db.refresh(booking)
        return booking

    def _validate_proposal(self, values: dict, exclude_booking_id: int | None = None) -> Classroom:
        validate_academic_year(
            values["academic_year"],
            today=self.today or date.today(),
            window=self.settings.academic_year_window,
        )

        classroom = self.db.get(Classroom, values["classroom_id"])
        if classroom is None:
            raise ResourceNotFoundError("Classroom", values["classroom_id"])
        if not classroom.is_active:
            raise ResourceUnavailableError(f"Classroom {classroom.display_name} is not active")
        if classroom.status != ClassroomStatus.available:
            raise ResourceUnavailableError(
                f"Classroom {classroom.display_name} is currently {classroom.status.value.capitalize()}"
            )

        slot = self.catalog.get(values["slot_id"])
        if not slot.is_active:
            raise ResourceUnavailableError(f"Time slot {describe_slot(slot)} is not active")

        period = (values["slot_id"], values["academic_year"], values["semester"])
        if values.get("faculty_id"):
            faculty_key = BookingKey(ResourceKind.faculty, values["faculty_id"], *period)
            held = self.checker.find_conflict(faculty_key, exclude_booking_id)
            if held is not None:
                raise BookingConflictError(
                    f"Faculty conflict: already teaching {held.subject_code or 'another class'} "
                    f"in classroom {held.classroom_id} at this time",
                    details={**faculty_key.as_dict(), "conflicting_booking_id": held.id},
                )

        classroom_key = BookingKey(ResourceKind.classroom, classroom.id, *period)
        held = self.checker.find_conflict(classroom_key, exclude_booking_id)
        if held is not None:
            raise BookingConflictError(
                f"Classroom conflict: {classroom.display_name} is already booked "
                f"for {held.subject_code or 'another class'} at this time",
                details={**classroom_key.as_dict(), "conflicting_booking_id": held.id},
            )
        return classroom
