import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from slotbook.api.deps import get_booking_service, require_admin, require_staff
from slotbook.api.schemas.booking import BookingCreateRequest, BookingUpdateRequest
from slotbook.core.errors import NotFoundError
from slotbook.core.security import Principal, Role
from slotbook.models import BookingPublic
from slotbook.services.booking_service import BookingService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=list[BookingPublic])
async def list_bookings(
    employee_id: str | None = Query(None),
    from_date: date | None = Query(None),
    principal: Principal = Depends(require_staff),
    service: BookingService = Depends(get_booking_service),
) -> list[BookingPublic]:
    """Admins see every booking; employees only the ones assigned to them."""
    if principal.role == Role.EMPLOYEE:
        employee_id = principal.subject
    return await service.list_bookings(employee_id=employee_id, from_date=from_date)


@router.post("", response_model=BookingPublic, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreateRequest,
    _: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> BookingPublic:
    """Admin calendar booking; same conflict-checked writer as the public page."""
    return await service.create(
        employee_id=body.employee_id,
        service_id=body.service_id,
        customer_id=body.customer_id,
        booking_date=body.date,
        start_time=body.start_time,
        notes=body.notes,
    )


@router.get("/{booking_id}", response_model=BookingPublic)
async def get_booking(
    booking_id: str,
    principal: Principal = Depends(require_staff),
    service: BookingService = Depends(get_booking_service),
) -> BookingPublic:
    booking = await service.get(booking_id)
    if principal.role == Role.EMPLOYEE and str(booking.employee_id) != principal.subject:
        # Do not reveal bookings of other employees.
        raise NotFoundError("Booking", booking_id)
    return booking


@router.patch("/{booking_id}", response_model=BookingPublic)
async def update_booking(
    booking_id: str,
    body: BookingUpdateRequest,
    _: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> BookingPublic:
    return await service.update(booking_id, body.model_dump(exclude_unset=True))


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: str,
    _: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> None:
    """Cancels the booking. The row is kept for history and the slot is freed."""
    await service.cancel(booking_id)
