from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.time_slot import TimeSlot
from app.services.booking_registry import BookingRegistry
from app.services.conflict_policy import BookingKey, ResourceKind, booking_matches, slot_interval

module_logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Answers whether a resource is free for a slot within an academic period.

    By default a resource is busy only for the exact slot it already holds
    (exact-key semantics). With ``strict_intervals`` enabled a live booking in
    any other slot whose interval overlaps the requested slot also counts.
    """

    def __init__(
        self,
        db: Session,
        *,
        registry: BookingRegistry | None = None,
        strict_intervals: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.db = db
        self.logger = logger or module_logger
        self.registry = registry or BookingRegistry(db, logger=self.logger)
        self.strict_intervals = strict_intervals

    def find_conflict(self, key: BookingKey, exclude_booking_id: int | None = None) -> Booking | None:
        """Return the live booking that makes `key` unavailable, or None.

        Store errors propagate; use `is_available` for a fail-closed answer.
        """
        booking = self.registry.find_live(key, exclude_booking_id)
        if booking is not None and booking_matches(booking, key, exclude_booking_id):
            return booking
        if not self.strict_intervals:
            return None

        requested = self.db.get(TimeSlot, key.slot_id)
        if requested is None:
            return None
        wanted = slot_interval(requested)
        for held, held_slot in self.registry.live_bookings_in_period(key, exclude_booking_id):
            if slot_interval(held_slot).overlaps(wanted):
                return held
        return None

    def is_available(
        self,
        resource_id: int | str,
        slot_id: int,
        academic_year: str,
        semester: int,
        exclude_booking_id: int | None = None,
        *,
        kind: ResourceKind = ResourceKind.classroom,
    ) -> bool:
        if kind is ResourceKind.classroom:
            try:
                resource_id = int(resource_id)
            except (TypeError, ValueError):
                self.logger.warning("Rejected availability check for non-numeric classroom id %r", resource_id)
                return False
        key = BookingKey(kind, resource_id, slot_id, academic_year, semester)
        try:
            return self.find_conflict(key, exclude_booking_id) is None
        except Exception:
            # Fail closed: an unanswerable check never reads as "available".
            self.logger.exception("Error checking %s availability for %s", kind.value, key.as_dict())
            return False
