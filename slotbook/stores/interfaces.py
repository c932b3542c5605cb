"""Store interfaces (repository pattern).

Stores must be swappable and return model instances. Implementations must make
the booking check-then-write atomic per employee: schedule_lock() has to keep
any other writer from inserting or moving a booking for those employees until
the block exits, and insert_booking/update_booking must refuse a row that would
overlap another non-cancelled booking of the same employee (ConflictError).
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date

from slotbook.models import Booking, Customer, Employee, Service


class BookingStore(ABC):
    """Interface for service, employee, customer and booking persistence."""

    @abstractmethod
    async def get_service(self, service_id: uuid.UUID) -> Service | None:
        """Return a service by ID, or None if not found."""
        ...

    @abstractmethod
    async def list_services(self) -> list[Service]:
        """Return all services ordered by name."""
        ...

    @abstractmethod
    async def save_service(self, service: Service) -> Service:
        """Insert or update a service."""
        ...

    @abstractmethod
    async def get_employee(self, employee_id: uuid.UUID) -> Employee | None:
        ...

    @abstractmethod
    async def list_employees(self, active_only: bool = True) -> list[Employee]:
        """Return employees ordered by last name, first name."""
        ...

    @abstractmethod
    async def save_employee(self, employee: Employee) -> Employee:
        """Insert or update an employee. Raises ConflictError if the email is taken."""
        ...

    @abstractmethod
    async def services_for_employee(self, employee_id: uuid.UUID) -> list[Service]:
        """Return the services assigned to an employee."""
        ...

    @abstractmethod
    async def assign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> None:
        """Record that an employee offers a service. Idempotent."""
        ...

    @abstractmethod
    async def unassign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> bool:
        """Remove an assignment. Returns False if there was none."""
        ...

    @abstractmethod
    async def get_customer(self, customer_id: uuid.UUID) -> Customer | None:
        ...

    @abstractmethod
    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        ...

    @abstractmethod
    async def list_customers(self) -> list[Customer]:
        """Return customers, newest first."""
        ...

    @abstractmethod
    async def save_customer(self, customer: Customer) -> Customer:
        ...

    @abstractmethod
    async def get_booking(self, booking_id: uuid.UUID, for_update: bool = False) -> Booking | None:
        """Return a booking by ID.

        for_update=True is used inside schedule_lock() and must return the
        latest committed row, locked against other writers where storage allows.
        """
        ...

    @abstractmethod
    async def list_bookings(
        self, employee_id: uuid.UUID | None = None, from_date: date | None = None
    ) -> list[Booking]:
        """Return bookings (cancelled included) ordered by start_at."""
        ...

    @abstractmethod
    async def bookings_for_employee_on_date(
        self, employee_id: uuid.UUID, day: date
    ) -> list[Booking]:
        """Return non-cancelled bookings of an employee with booking_date == day."""
        ...

    @abstractmethod
    async def insert_booking(self, booking: Booking) -> Booking:
        """Persist a new booking. Raises ConflictError if storage rejects an overlap."""
        ...

    @abstractmethod
    async def update_booking(self, booking: Booking) -> Booking:
        """Persist changes to an existing booking. Raises ConflictError on overlap."""
        ...

    @abstractmethod
    def schedule_lock(self, *employee_ids: uuid.UUID) -> AbstractAsyncContextManager[None]:
        """Serialize booking writes for the given employees."""
        ...
