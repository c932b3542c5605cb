from fastapi import APIRouter, Depends, Query

from slotbook.api.deps import get_store
from slotbook.api.schemas.availability import DayAvailabilityResponse, SlotInfo
from slotbook.core.config import settings
from slotbook.services.availability_service import get_day_availability
from slotbook.stores import BookingStore

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=DayAvailabilityResponse)
async def day_availability(
    employee_id: str = Query(...),
    date_param: str = Query(..., alias="date"),
    store: BookingStore = Depends(get_store),
) -> DayAvailabilityResponse:
    """Slot grid for one employee and day. Advisory: booking may still return 409."""
    slots = await get_day_availability(store, employee_id, date_param)
    return DayAvailabilityResponse(
        employee_id=employee_id,
        date=date_param,
        timezone=settings.business_timezone,
        step_minutes=settings.slot_step_minutes,
        slots=[
            SlotInfo(
                time=s.time.strftime("%H:%M"),
                start_at=s.start_at,
                end_at=s.end_at,
                available=s.available,
                booking_id=s.booking_id,
                is_booking_start=s.is_booking_start,
            )
            for s in slots
        ],
    )
