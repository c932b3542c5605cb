import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from slotbook.core.errors import ConflictError
from slotbook.models import Booking, BookingStatus, Customer, Employee, EmployeeService, Service
from slotbook.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)

# PostgreSQL exclusion_violation, raised by ex_bookings_employee_no_overlap.
_EXCLUSION_VIOLATION = "23P01"


def _is_overlap_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == _EXCLUSION_VIOLATION or "ex_bookings_employee_no_overlap" in str(orig)


class SqlBookingStore(BookingStore):
    """Store backed by the request's AsyncSession; the caller owns commit/rollback."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def _dialect(self) -> str:
        return self._session.bind.dialect.name

    async def get_service(self, service_id: uuid.UUID) -> Service | None:
        return await self._session.get(Service, service_id)

    async def list_services(self) -> list[Service]:
        result = await self._session.execute(select(Service).order_by(Service.name))
        return list(result.scalars().all())

    async def save_service(self, service: Service) -> Service:
        self._session.add(service)
        await self._session.flush()
        return service

    async def get_employee(self, employee_id: uuid.UUID) -> Employee | None:
        return await self._session.get(Employee, employee_id)

    async def list_employees(self, active_only: bool = True) -> list[Employee]:
        q = select(Employee).order_by(Employee.last_name, Employee.first_name)
        if active_only:
            q = q.where(Employee.is_active == True)  # noqa: E712
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def save_employee(self, employee: Employee) -> Employee:
        self._session.add(employee)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError("An employee with this email already exists") from exc
        return employee

    async def services_for_employee(self, employee_id: uuid.UUID) -> list[Service]:
        result = await self._session.execute(
            select(Service)
            .join(EmployeeService, EmployeeService.service_id == Service.id)
            .where(EmployeeService.employee_id == employee_id)
            .order_by(Service.name)
        )
        return list(result.scalars().all())

    async def assign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> None:
        if await self._session.get(EmployeeService, (employee_id, service_id)):
            return
        self._session.add(EmployeeService(employee_id=employee_id, service_id=service_id))
        await self._session.flush()

    async def unassign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> bool:
        link = await self._session.get(EmployeeService, (employee_id, service_id))
        if not link:
            return False
        await self._session.delete(link)
        await self._session.flush()
        return True

    async def get_customer(self, customer_id: uuid.UUID) -> Customer | None:
        return await self._session.get(Customer, customer_id)

    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        result = await self._session.execute(
            select(Customer).where(Customer.phone == phone).order_by(Customer.created_at).limit(1)
        )
        return result.scalars().first()

    async def list_customers(self) -> list[Customer]:
        result = await self._session.execute(select(Customer).order_by(Customer.created_at.desc()))
        return list(result.scalars().all())

    async def save_customer(self, customer: Customer) -> Customer:
        self._session.add(customer)
        await self._session.flush()
        return customer

    async def get_booking(self, booking_id: uuid.UUID, for_update: bool = False) -> Booking | None:
        if not for_update:
            return await self._session.get(Booking, booking_id)
        # populate_existing: the identity map may hold a copy read before the lock.
        result = await self._session.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_bookings(
        self, employee_id: uuid.UUID | None = None, from_date: date | None = None
    ) -> list[Booking]:
        q = select(Booking).order_by(Booking.start_at)
        if employee_id:
            q = q.where(Booking.employee_id == employee_id)
        if from_date:
            q = q.where(Booking.booking_date >= from_date)
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def bookings_for_employee_on_date(
        self, employee_id: uuid.UUID, day: date
    ) -> list[Booking]:
        result = await self._session.execute(
            select(Booking)
            .where(
                Booking.employee_id == employee_id,
                Booking.booking_date == day,
                Booking.status != BookingStatus.CANCELLED,
            )
            .order_by(Booking.start_at)
        )
        return list(result.scalars().all())

    async def _flush_booking(self, booking: Booking) -> Booking:
        self._session.add(booking)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if _is_overlap_violation(exc):
                logger.info("Overlap rejected by database for employee %s", booking.employee_id)
                raise ConflictError() from exc
            raise
        await self._session.refresh(booking)
        return booking

    async def insert_booking(self, booking: Booking) -> Booking:
        return await self._flush_booking(booking)

    async def update_booking(self, booking: Booking) -> Booking:
        return await self._flush_booking(booking)

    @asynccontextmanager
    async def schedule_lock(self, *employee_ids: uuid.UUID) -> AsyncIterator[None]:
        # Held until the request transaction ends.
        ids = sorted(set(employee_ids))
        if self._dialect == "sqlite":
            # SQLite ignores FOR UPDATE and starts transactions lazily; a no-op
            # write takes the database write lock before the overlap reads.
            await self._session.execute(
                update(Employee)
                .where(Employee.id.in_(ids))
                .values(is_active=Employee.is_active)
                .execution_options(synchronize_session=False)
            )
        else:
            await self._session.execute(
                select(Employee.id).where(Employee.id.in_(ids)).order_by(Employee.id).with_for_update()
            )
        yield
