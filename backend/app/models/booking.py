from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.classroom import Classroom
from app.models.time_slot import TimeSlot

LIVE_BOOKING_PREDICATE = "status = 'active'"


class BookingStatus(str, Enum):
    active = "active"
    retired = "retired"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # Authoritative guard against double booking; the application check only fast-rejects.
        Index(
            "uq_bookings_live_classroom_slot_period",
            "classroom_id",
            "slot_id",
            "academic_year",
            "semester",
            unique=True,
            sqlite_where=text(LIVE_BOOKING_PREDICATE),
            postgresql_where=text(LIVE_BOOKING_PREDICATE),
        ),
        Index(
            "uq_bookings_live_faculty_slot_period",
            "faculty_id",
            "slot_id",
            "academic_year",
            "semester",
            unique=True,
            sqlite_where=text(f"{LIVE_BOOKING_PREDICATE} AND faculty_id IS NOT NULL"),
            postgresql_where=text(f"{LIVE_BOOKING_PREDICATE} AND faculty_id IS NOT NULL"),
        ),
        Index("ix_bookings_slot_id", "slot_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    classroom_id: Mapped[int] = mapped_column(ForeignKey("classrooms.id"), nullable=False, index=True)
    slot_id: Mapped[int] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    faculty_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    expected_students: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(BookingStatus, name="booking_status"),
        nullable=False,
        default=BookingStatus.active,
    )
    created_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
    retired_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    classroom: Mapped[Classroom] = relationship()
    slot: Mapped[TimeSlot] = relationship()

    @property
    def is_live(self) -> bool:
        return self.status == BookingStatus.active
