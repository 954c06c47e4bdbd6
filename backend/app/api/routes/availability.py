from fastapi import APIRouter, Depends

from app.api.deps import get_gateway
from app.schemas.booking import AvailabilityOut, AvailabilityQuery
from app.services.scheduling import ValidationGateway

router = APIRouter()


@router.post("/check", response_model=AvailabilityOut)
def check_availability(
    payload: AvailabilityQuery,
    gateway: ValidationGateway = Depends(get_gateway),
) -> AvailabilityOut:
    available = gateway.check_availability(
        payload.resource_id,
        payload.slot_id,
        payload.academic_year,
        payload.semester,
        payload.exclude_booking_id,
        kind=payload.resource_kind,
    )
    return AvailabilityOut(
        available=available,
        resource_kind=payload.resource_kind,
        resource_id=str(payload.resource_id),
        slot_id=payload.slot_id,
        academic_year=payload.academic_year,
        semester=payload.semester,
    )
