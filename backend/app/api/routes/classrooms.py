from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db, get_gateway
from app.core.exceptions import AppError, ResourceInUseError, ResourceNotFoundError
from app.models.booking import Booking
from app.models.classroom import Classroom, ClassroomStatus
from app.schemas.booking import MAX_ID, AvailabilityOut, ScheduleEntryOut
from app.schemas.classroom import ClassroomCreate, ClassroomOut, ClassroomUpdate
from app.services.audit import log_activity
from app.services.booking_registry import BookingRegistry
from app.services.conflict_policy import ResourceKind
from app.services.intervals import parse_day
from app.services.scheduling import ValidationGateway

router = APIRouter()


def _get_classroom(db: Session, classroom_id: int) -> Classroom:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise ResourceNotFoundError("Classroom", classroom_id)
    return classroom


def _ensure_unique_room(db: Session, room_number: str, building: str, exclude_id: int | None = None) -> None:
    statement = select(Classroom).where(Classroom.room_number == room_number, Classroom.building == building)
    if exclude_id is not None:
        statement = statement.where(Classroom.id != exclude_id)
    if db.execute(statement).scalar_one_or_none() is not None:
        raise AppError(
            f"Classroom {room_number} already exists in {building}",
            status_code=status.HTTP_409_CONFLICT,
        )


@router.get("/", response_model=list[ClassroomOut])
def list_classrooms(
    status_filter: ClassroomStatus | None = Query(default=None, alias="status"),
    is_active: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ClassroomOut]:
    statement = select(Classroom).order_by(Classroom.building.asc(), Classroom.room_number.asc())
    if status_filter is not None:
        statement = statement.where(Classroom.status == status_filter)
    if is_active is not None:
        statement = statement.where(Classroom.is_active.is_(is_active))
    return list(db.execute(statement).scalars())


@router.post("/", response_model=ClassroomOut, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ClassroomOut:
    _ensure_unique_room(db, payload.room_number, payload.building)
    classroom = Classroom(**payload.model_dump())
    db.add(classroom)
    db.flush()
    log_activity(
        db,
        actor_id=actor_id,
        action="CREATE_CLASSROOM",
        entity_type="classrooms",
        entity_id=classroom.id,
        details=payload.model_dump(mode="json"),
    )
    db.commit()
    db.refresh(classroom)
    return classroom


@router.put("/{classroom_id}", response_model=ClassroomOut)
def update_classroom(
    classroom_id: Annotated[int, Path(le=MAX_ID)],
    payload: ClassroomUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ClassroomOut:
    classroom = _get_classroom(db, classroom_id)
    data = payload.model_dump(exclude_unset=True)
    if "room_number" in data or "building" in data:
        _ensure_unique_room(
            db,
            data.get("room_number", classroom.room_number),
            data.get("building", classroom.building),
            exclude_id=classroom_id,
        )
    for key, value in data.items():
        setattr(classroom, key, value)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="UPDATE_CLASSROOM",
            entity_type="classrooms",
            entity_id=classroom_id,
            details=payload.model_dump(mode="json", exclude_unset=True),
        )
    db.commit()
    db.refresh(classroom)
    return classroom


@router.delete("/{classroom_id}")
def delete_classroom(
    classroom_id: int = Path(le=MAX_ID),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> dict:
    classroom = _get_classroom(db, classroom_id)
    live = BookingRegistry(db).count_live_for_classroom(classroom_id)
    if live:
        raise ResourceInUseError(
            f"Cannot delete classroom with {live} active booking(s); deactivate it instead",
            details={"live_bookings": live},
        )
    referenced = db.execute(select(func.count(Booking.id)).where(Booking.classroom_id == classroom_id)).scalar_one()
    if referenced:
        raise ResourceInUseError(
            f"Cannot delete classroom referenced by {referenced} retired booking(s); deactivate it instead",
            details={"live_bookings": 0, "retired_bookings": referenced},
        )
    log_activity(
        db,
        actor_id=actor_id,
        action="DELETE_CLASSROOM",
        entity_type="classrooms",
        entity_id=classroom_id,
        details={"classroom": classroom.display_name},
    )
    db.delete(classroom)
    db.commit()
    return {"success": True}


@router.get("/{classroom_id}/availability", response_model=AvailabilityOut)
def classroom_availability(
    classroom_id: int = Path(le=MAX_ID),
    slot_id: int = Query(ge=1, le=MAX_ID),
    academic_year: str = Query(min_length=1, max_length=20),
    semester: int = Query(ge=1, le=12),
    exclude_booking_id: int | None = Query(default=None, ge=1, le=MAX_ID),
    gateway: ValidationGateway = Depends(get_gateway),
) -> AvailabilityOut:
    available = gateway.check_availability(classroom_id, slot_id, academic_year, semester, exclude_booking_id)
    return AvailabilityOut(
        available=available,
        resource_kind=ResourceKind.classroom,
        resource_id=str(classroom_id),
        slot_id=slot_id,
        academic_year=academic_year,
        semester=semester,
    )


@router.get("/{classroom_id}/schedule", response_model=list[ScheduleEntryOut])
def classroom_schedule(
    classroom_id: int = Path(le=MAX_ID),
    day: str = Query(),
    academic_year: str = Query(min_length=1, max_length=20),
    semester: int = Query(ge=1, le=12),
    db: Session = Depends(get_db),
) -> list[ScheduleEntryOut]:
    _get_classroom(db, classroom_id)
    rows = BookingRegistry(db).classroom_schedule(classroom_id, parse_day(day), academic_year, semester)
    return [
        ScheduleEntryOut(
            booking_id=booking.id,
            slot_id=slot.id,
            slot_name=slot.slot_name,
            start_time=slot.start_time,
            end_time=slot.end_time,
            faculty_id=booking.faculty_id,
            subject_code=booking.subject_code,
            section=booking.section,
        )
        for booking, slot in rows
    ]
