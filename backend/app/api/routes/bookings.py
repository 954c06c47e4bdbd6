from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db, get_gateway
from app.schemas.booking import MAX_ID, BookingCreate, BookingDecisionOut, BookingOut, BookingUpdate
from app.services.booking_registry import BookingRegistry
from app.services.scheduling import ValidationGateway

router = APIRouter()


@router.get("/", response_model=list[BookingOut])
def list_bookings(
    academic_year: str | None = Query(default=None),
    semester: int | None = Query(default=None, ge=1),
    classroom_id: int | None = Query(default=None, le=MAX_ID),
    faculty_id: str | None = Query(default=None),
    slot_id: int | None = Query(default=None, le=MAX_ID),
    include_retired: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[BookingOut]:
    return BookingRegistry(db).list_bookings(
        academic_year=academic_year,
        semester=semester,
        classroom_id=classroom_id,
        faculty_id=faculty_id,
        slot_id=slot_id,
        include_retired=include_retired,
    )


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int = Path(le=MAX_ID), db: Session = Depends(get_db)) -> BookingOut:
    return BookingRegistry(db).get(booking_id)


@router.post("/", response_model=BookingDecisionOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> BookingDecisionOut:
    decision = gateway.create_booking(payload, actor_id=actor_id)
    return BookingDecisionOut(booking=BookingOut.model_validate(decision.booking), warnings=decision.warnings)


@router.put("/{booking_id}", response_model=BookingDecisionOut)
def update_booking(
    booking_id: Annotated[int, Path(le=MAX_ID)],
    payload: BookingUpdate,
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> BookingDecisionOut:
    decision = gateway.update_booking(booking_id, payload, actor_id=actor_id)
    return BookingDecisionOut(booking=BookingOut.model_validate(decision.booking), warnings=decision.warnings)


@router.post("/{booking_id}/retire", response_model=BookingOut)
def retire_booking(
    booking_id: int = Path(le=MAX_ID),
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> BookingOut:
    return gateway.retire_booking(booking_id, actor_id=actor_id)
