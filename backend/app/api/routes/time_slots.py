from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db, get_gateway
from app.models.time_slot import DayOfWeek, SlotType
from app.schemas.booking import MAX_ID
from app.schemas.time_slot import SlotStatistics, TimeSlotCreate, TimeSlotOut, TimeSlotUpdate
from app.services.scheduling import ValidationGateway
from app.services.slot_catalog import SlotCatalog

router = APIRouter()


@router.get("/", response_model=list[TimeSlotOut])
def list_time_slots(
    day: DayOfWeek | None = Query(default=None),
    slot_type: SlotType | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TimeSlotOut]:
    return SlotCatalog(db).list_slots(day=day, kind=slot_type, active=is_active)


@router.get("/available", response_model=list[TimeSlotOut])
def list_schedulable_slots(
    day: DayOfWeek | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TimeSlotOut]:
    return SlotCatalog(db).available_slots(day)


@router.get("/statistics", response_model=SlotStatistics)
def slot_statistics(db: Session = Depends(get_db)) -> SlotStatistics:
    return SlotStatistics(**SlotCatalog(db).usage_statistics())


@router.get("/by-day/{day}", response_model=list[TimeSlotOut])
def list_slots_for_day(day: str, db: Session = Depends(get_db)) -> list[TimeSlotOut]:
    return SlotCatalog(db).list_by_day(day)


@router.get("/{slot_id}", response_model=TimeSlotOut)
def get_time_slot(slot_id: int = Path(le=MAX_ID), db: Session = Depends(get_db)) -> TimeSlotOut:
    return SlotCatalog(db).get(slot_id)


@router.post("/", response_model=TimeSlotOut, status_code=status.HTTP_201_CREATED)
def create_time_slot(
    payload: TimeSlotCreate,
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> TimeSlotOut:
    return gateway.define_slot(payload, actor_id=actor_id)


@router.put("/{slot_id}", response_model=TimeSlotOut)
def update_time_slot(
    slot_id: Annotated[int, Path(le=MAX_ID)],
    payload: TimeSlotUpdate,
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> TimeSlotOut:
    return gateway.redefine_slot(slot_id, payload, actor_id=actor_id)


@router.post("/{slot_id}/activate", response_model=TimeSlotOut)
def activate_time_slot(
    slot_id: int = Path(le=MAX_ID),
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> TimeSlotOut:
    return gateway.set_slot_active(slot_id, True, actor_id=actor_id)


@router.post("/{slot_id}/deactivate", response_model=TimeSlotOut)
def deactivate_time_slot(
    slot_id: int = Path(le=MAX_ID),
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> TimeSlotOut:
    return gateway.set_slot_active(slot_id, False, actor_id=actor_id)


@router.delete("/{slot_id}")
def delete_time_slot(
    slot_id: int = Path(le=MAX_ID),
    gateway: ValidationGateway = Depends(get_gateway),
    actor_id: str | None = Depends(get_actor_id),
) -> dict:
    gateway.retire_slot(slot_id, actor_id=actor_id)
    return {"success": True}
