"""create scheduling core

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

LIVE_BOOKING = "status = 'active'"


def upgrade() -> None:
    day_of_week = sa.Enum(
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday", name="day_of_week"
    )
    slot_type = sa.Enum("regular", "break", "lunch", name="slot_type")
    room_type = sa.Enum("lecture", "lab", "seminar", name="room_type")
    classroom_status = sa.Enum("available", "maintenance", "reserved", "unavailable", name="classroom_status")
    booking_status = sa.Enum("active", "retired", name="booking_status")

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_of_week", day_of_week, nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_name", sa.String(length=100), nullable=False),
        sa.Column("slot_type", slot_type, nullable=False, server_default="regular"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("day_of_week", "start_time", "end_time", name="uq_time_slots_day_interval"),
        sa.CheckConstraint("start_time < end_time", name="ck_time_slots_start_before_end"),
    )
    op.create_index("ix_time_slots_day_of_week", "time_slots", ["day_of_week"])

    op.create_table(
        "classrooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("room_type", room_type, nullable=False, server_default="lecture"),
        sa.Column("status", classroom_status, nullable=False, server_default="available"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("room_number", "building", name="uq_classrooms_room_building"),
    )
    op.create_index("ix_classrooms_room_number", "classrooms", ["room_number"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("slot_id", sa.Integer(), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=True),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("subject_code", sa.String(length=50), nullable=True),
        sa.Column("section", sa.String(length=20), nullable=True),
        sa.Column("expected_students", sa.Integer(), nullable=True),
        sa.Column("status", booking_status, nullable=False, server_default="active"),
        sa.Column("created_by_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retired_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_bookings_classroom_id", "bookings", ["classroom_id"])
    op.create_index("ix_bookings_faculty_id", "bookings", ["faculty_id"])
    op.create_index("ix_bookings_slot_id", "bookings", ["slot_id"])
    # Store-level double booking guard; only live bookings take part.
    op.create_index(
        "uq_bookings_live_classroom_slot_period",
        "bookings",
        ["classroom_id", "slot_id", "academic_year", "semester"],
        unique=True,
        postgresql_where=sa.text(LIVE_BOOKING),
        sqlite_where=sa.text(LIVE_BOOKING),
    )
    op.create_index(
        "uq_bookings_live_faculty_slot_period",
        "bookings",
        ["faculty_id", "slot_id", "academic_year", "semester"],
        unique=True,
        postgresql_where=sa.text(f"{LIVE_BOOKING} AND faculty_id IS NOT NULL"),
        sqlite_where=sa.text(f"{LIVE_BOOKING} AND faculty_id IS NOT NULL"),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_index("uq_bookings_live_faculty_slot_period", table_name="bookings")
    op.drop_index("uq_bookings_live_classroom_slot_period", table_name="bookings")
    op.drop_index("ix_bookings_slot_id", table_name="bookings")
    op.drop_index("ix_bookings_faculty_id", table_name="bookings")
    op.drop_index("ix_bookings_classroom_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_classrooms_room_number", table_name="classrooms")
    op.drop_table("classrooms")
    op.drop_index("ix_time_slots_day_of_week", table_name="time_slots")
    op.drop_table("time_slots")

    bind = op.get_bind()
    for enum_name in ("booking_status", "classroom_status", "room_type", "slot_type", "day_of_week"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
