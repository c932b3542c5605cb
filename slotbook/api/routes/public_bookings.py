from fastapi import APIRouter, Depends, status

from slotbook.api.deps import get_booking_service
from slotbook.api.schemas.booking import BookingCreateRequest
from slotbook.models import BookingPublic
from slotbook.services.booking_service import BookingService

router = APIRouter(prefix="/public", tags=["public"])


@router.post("/bookings", response_model=BookingPublic, status_code=status.HTTP_201_CREATED)
async def create_public_booking(
    body: BookingCreateRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingPublic:
    """Booking from the public booking link. A 409 means the customer must pick another slot."""
    return await service.create(
        employee_id=body.employee_id,
        service_id=body.service_id,
        customer_id=body.customer_id,
        booking_date=body.date,
        start_time=body.start_time,
        notes=body.notes,
    )
