from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.db.base import Base
from app.db.session import engine as default_engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "time_slots": {"id", "day_of_week", "start_time", "end_time", "slot_name", "slot_type", "is_active"},
    "classrooms": {"id", "room_number", "building", "capacity", "status", "is_active"},
    "bookings": {"id", "classroom_id", "slot_id", "faculty_id", "academic_year", "semester", "status"},
    "activity_logs": {"id", "actor_id", "action", "entity_type", "entity_id", "details"},
}

# Partial unique indexes that make double booking impossible at the store level.
REQUIRED_INDEXES: dict[str, set[str]] = {
    "bookings": {"uq_bookings_live_classroom_slot_period", "uq_bookings_live_faculty_slot_period"},
}


def _assert_required_schema(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing.append(f"{table_name}.{column_name}")
        for table_name, required in REQUIRED_INDEXES.items():
            existing = {item["name"] for item in inspector.get_indexes(table_name)}
            for index_name in sorted(required - existing):
                missing.append(f"{table_name}:{index_name}")
        if missing:
            raise RuntimeError(f"Missing required columns or indexes: {', '.join(missing)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    try:
        # Ensure missing tables and indexes exist before checking the schema.
        Base.metadata.create_all(bind=engine)
        _assert_required_schema(engine)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
