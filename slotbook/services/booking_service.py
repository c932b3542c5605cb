"""Booking service: the only code path that writes bookings.

Every create and every reschedule runs the same half-open overlap check
against a fresh read of the employee's bookings, inside the store's
schedule lock, before anything is persisted.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any

from slotbook.core.config import settings
from slotbook.core.errors import ConflictError, InvalidInputError, NotFoundError
from slotbook.models import Booking, BookingPublic, BookingStatus, Customer, Employee, Service
from slotbook.models.booking import PartySummary, ServiceSummary
from slotbook.models.types import utc_now
from slotbook.scheduling.overlap import find_conflicts
from slotbook.scheduling.status import ensure_transition
from slotbook.scheduling.timeutil import combine, local_date, parse_date, parse_time, parse_uuid
from slotbook.services.availability_service import bookings_near
from slotbook.services.catalog_service import resolve_service
from slotbook.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = frozenset({"employee_id", "service_id", "date", "start_time"})
PATCH_FIELDS = SCHEDULE_FIELDS | {"status", "notes"}


def _parse_status(value: Any) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidInputError(
            "status must be one of: " + ", ".join(s.value for s in BookingStatus), field="status"
        ) from None


def _parse_notes(value: Any) -> str | None:
    if value is not None and not isinstance(value, str):
        raise InvalidInputError("notes must be a string", field="notes")
    return value


class BookingService:
    """Conflict-checked reservation writer and rescheduling path."""

    def __init__(self, store: BookingStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self._tz = tz or settings.tz

    def _interval(self, day: date, start_time: time, duration_seconds: int) -> tuple[datetime, datetime]:
        start_at = combine(day, start_time, self._tz)
        return start_at, start_at + timedelta(seconds=duration_seconds)

    async def _require_employee(self, employee_id: uuid.UUID, must_be_active: bool = True) -> Employee:
        employee = await self._store.get_employee(employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        if must_be_active and not employee.is_active:
            raise InvalidInputError("Employee is not accepting bookings", field="employee_id")
        return employee

    async def _require_customer(self, customer_id: uuid.UUID) -> Customer:
        customer = await self._store.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    async def _ensure_free(
        self,
        employee_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> None:
        existing = await bookings_near(self._store, employee_id, start_at, end_at, self._tz)
        conflicts = find_conflicts(start_at, end_at, existing, exclude_booking_id=exclude_booking_id)
        if conflicts:
            logger.info(
                "Booking conflict: employee=%s start=%s end=%s overlaps=%d",
                employee_id,
                start_at.isoformat(),
                end_at.isoformat(),
                len(conflicts),
            )
            raise ConflictError()

    async def create(
        self,
        employee_id: uuid.UUID | str,
        service_id: uuid.UUID | str,
        customer_id: uuid.UUID | str,
        booking_date: date | str,
        start_time: time | str,
        notes: str | None = None,
    ) -> BookingPublic:
        """Validate, check for overlap and persist a new pending booking.

        Raises InvalidInputError, NotFoundError or ConflictError; nothing is
        written when any of them is raised.
        """
        emp_id = parse_uuid(employee_id, "employee_id")
        svc_id = parse_uuid(service_id, "service_id")
        cust_id = parse_uuid(customer_id, "customer_id")
        day = parse_date(booking_date, "date")
        start_tod = parse_time(start_time, "start_time")
        notes = _parse_notes(notes)

        resolved = await resolve_service(self._store, svc_id)
        employee = await self._require_employee(emp_id)
        customer = await self._require_customer(cust_id)
        start_at, end_at = self._interval(day, start_tod, resolved.duration_seconds)

        async with self._store.schedule_lock(emp_id):
            await self._ensure_free(emp_id, start_at, end_at)
            booking = Booking(
                employee_id=emp_id,
                service_id=svc_id,
                customer_id=cust_id,
                booking_date=local_date(start_at, self._tz),
                start_at=start_at,
                end_at=end_at,
                status=BookingStatus.PENDING,
                total_price=resolved.price,
                notes=notes,
            )
            booking = await self._store.insert_booking(booking)

        logger.info(
            "Booking %s created: employee=%s service=%s start=%s",
            booking.id,
            emp_id,
            svc_id,
            start_at.isoformat(),
        )
        return self.to_public(booking, resolved.service, employee, customer)

    async def update(self, booking_id: uuid.UUID | str, patch: Mapping[str, Any]) -> BookingPublic:
        """Apply a partial change; moving a booking re-runs the overlap check without itself."""
        bid = parse_uuid(booking_id, "booking_id")
        unknown = set(patch) - PATCH_FIELDS
        if unknown:
            raise InvalidInputError(f"Unknown fields: {', '.join(sorted(unknown))}")

        booking = await self._store.get_booking(bid)
        if not booking:
            raise NotFoundError("Booking", bid)

        scheduling = SCHEDULE_FIELDS.intersection(patch)
        for field in scheduling:
            if patch[field] is None:
                raise InvalidInputError(f"{field} cannot be null", field=field)
        locked_employee = booking.employee_id
        emp_id = parse_uuid(patch["employee_id"], "employee_id") if "employee_id" in patch else locked_employee

        async with self._store.schedule_lock(locked_employee, emp_id):
            # Everything below works on the row as it is now, not as first read.
            booking = await self._store.get_booking(bid, for_update=True)
            if not booking:
                raise NotFoundError("Booking", bid)
            if booking.employee_id != locked_employee:
                raise ConflictError("Booking was changed by another request, please retry")
            booking = await self._apply_patch(booking, patch, scheduling, emp_id)

        self._log_update(booking, patch)
        return await self.get(booking.id)

    async def _apply_patch(
        self,
        booking: Booking,
        patch: Mapping[str, Any],
        scheduling: frozenset[str],
        emp_id: uuid.UUID,
    ) -> Booking:
        """Validate and persist a patch. Must run inside schedule_lock for the booking's employees."""
        current_status = BookingStatus(booking.status)
        target_status = current_status
        if "status" in patch:
            target_status = _parse_status(patch["status"])
            ensure_transition(current_status, target_status)
        notes = _parse_notes(patch["notes"]) if "notes" in patch else booking.notes

        if scheduling and current_status == BookingStatus.CANCELLED:
            raise InvalidInputError("Cancelled bookings cannot be rescheduled")

        if scheduling:
            svc_id = parse_uuid(patch["service_id"], "service_id") if "service_id" in patch else booking.service_id
            day = parse_date(patch["date"], "date") if "date" in patch else booking.booking_date
            if "start_time" in patch:
                start_tod = parse_time(patch["start_time"], "start_time")
            else:
                start_tod = booking.start_at.astimezone(self._tz).time()

            resolved = await resolve_service(self._store, svc_id)
            await self._require_employee(emp_id, must_be_active=emp_id != booking.employee_id)
            start_at, end_at = self._interval(day, start_tod, resolved.duration_seconds)
            if target_status != BookingStatus.CANCELLED:
                await self._ensure_free(emp_id, start_at, end_at, exclude_booking_id=booking.id)

            # Price stays frozen unless the booking is moved to another service.
            if svc_id != booking.service_id:
                booking.total_price = resolved.price
            booking.employee_id = emp_id
            booking.service_id = svc_id
            booking.booking_date = local_date(start_at, self._tz)
            booking.start_at = start_at
            booking.end_at = end_at

        booking.status = target_status
        booking.notes = notes
        booking.updated_at = utc_now()
        return await self._store.update_booking(booking)

    async def cancel(self, booking_id: uuid.UUID | str) -> BookingPublic:
        """Cancel a booking; the row is kept and its time becomes free."""
        return await self.update(booking_id, {"status": BookingStatus.CANCELLED.value})

    async def get(self, booking_id: uuid.UUID | str) -> BookingPublic:
        bid = parse_uuid(booking_id, "booking_id")
        booking = await self._store.get_booking(bid)
        if not booking:
            raise NotFoundError("Booking", bid)
        return (await self._with_details([booking]))[0]

    async def list_bookings(
        self, employee_id: uuid.UUID | str | None = None, from_date: date | str | None = None
    ) -> list[BookingPublic]:
        eid = parse_uuid(employee_id, "employee_id") if employee_id else None
        d = parse_date(from_date, "from_date") if from_date else None
        bookings = await self._store.list_bookings(employee_id=eid, from_date=d)
        return await self._with_details(bookings)

    async def _with_details(self, bookings: list[Booking]) -> list[BookingPublic]:
        services: dict[uuid.UUID, Service | None] = {}
        employees: dict[uuid.UUID, Employee | None] = {}
        customers: dict[uuid.UUID, Customer | None] = {}
        out: list[BookingPublic] = []
        for b in bookings:
            if b.service_id not in services:
                services[b.service_id] = await self._store.get_service(b.service_id)
            if b.employee_id not in employees:
                employees[b.employee_id] = await self._store.get_employee(b.employee_id)
            if b.customer_id not in customers:
                customers[b.customer_id] = await self._store.get_customer(b.customer_id)
            out.append(
                self.to_public(
                    b, services[b.service_id], employees[b.employee_id], customers[b.customer_id]
                )
            )
        return out

    @staticmethod
    def to_public(
        booking: Booking,
        service: Service | None,
        employee: Employee | None,
        customer: Customer | None,
    ) -> BookingPublic:
        return BookingPublic(
            id=booking.id,
            employee_id=booking.employee_id,
            service_id=booking.service_id,
            customer_id=booking.customer_id,
            booking_date=booking.booking_date,
            start_at=booking.start_at,
            end_at=booking.end_at,
            status=booking.status,
            total_price=booking.total_price,
            notes=booking.notes,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            employee=PartySummary(
                id=employee.id,
                first_name=employee.first_name,
                last_name=employee.last_name,
                email=employee.email,
            )
            if employee
            else None,
            service=ServiceSummary(
                id=service.id,
                name=service.name,
                price=service.price,
                duration_seconds=service.duration_seconds,
            )
            if service
            else None,
            customer=PartySummary(
                id=customer.id,
                first_name=customer.first_name,
                last_name=customer.last_name,
                email=customer.email,
            )
            if customer
            else None,
        )

    @staticmethod
    def _log_update(booking: Booking, patch: Mapping[str, Any]) -> None:
        logger.info("Booking %s updated: fields=%s status=%s", booking.id, sorted(patch), booking.status.value)
