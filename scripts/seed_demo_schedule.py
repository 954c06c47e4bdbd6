"""Seed demo classrooms and the standard weekly slot grid for Slotwise.

Run:
  PYTHONPATH=backend python scripts/seed_demo_schedule.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.classroom import Classroom, RoomType
from app.models.time_slot import TimeSlot
from app.services.scheduling import ValidationGateway

SEED_ACTOR_ID = os.getenv("SEED_ACTOR_ID", "seed-script").strip() or "seed-script"
FIRST_HOUR = int(os.getenv("SEED_FIRST_HOUR", "8"))
LAST_HOUR = int(os.getenv("SEED_LAST_HOUR", "17"))

DEMO_CLASSROOMS = [
    {"room_number": "A101", "building": "Academic Block A", "capacity": 60, "room_type": RoomType.lecture},
    {"room_number": "A102", "building": "Academic Block A", "capacity": 60, "room_type": RoomType.lecture},
    {"room_number": "A201", "building": "Academic Block A", "capacity": 120, "room_type": RoomType.lecture},
    {"room_number": "L1", "building": "Lab Complex", "capacity": 36, "room_type": RoomType.lab},
    {"room_number": "L2", "building": "Lab Complex", "capacity": 36, "room_type": RoomType.lab},
    {"room_number": "S1", "building": "Library", "capacity": 24, "room_type": RoomType.seminar},
]


def seed_classrooms(db) -> int:
    created = 0
    for values in DEMO_CLASSROOMS:
        existing = db.execute(
            select(Classroom).where(
                Classroom.room_number == values["room_number"],
                Classroom.building == values["building"],
            )
        ).scalar_one_or_none()
        if existing is not None:
            continue
        db.add(Classroom(**values))
        created += 1
    db.commit()
    return created


def main() -> None:
    configure_logging(get_settings().log_level)
    ensure_runtime_schema_compatibility()
    with SessionLocal() as db:
        classroom_count = seed_classrooms(db)
        slots = ValidationGateway(db).seed_standard_week(
            first_hour=FIRST_HOUR,
            last_hour=LAST_HOUR,
            actor_id=SEED_ACTOR_ID,
        )
        total_slots = db.execute(select(func.count(TimeSlot.id))).scalar_one()

    print("Demo schedule seeded successfully.")
    print("")
    print(f"Classrooms added: {classroom_count}")
    print(f"Time slots added: {len(slots)} (total {total_slots})")


if __name__ == "__main__":
    main()
