from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from typing import TypeVar

from sqlmodel import SQLModel

from slotbook.core.errors import ConflictError
from slotbook.models import Booking, BookingStatus, Customer, Employee, Service
from slotbook.scheduling.overlap import find_conflicts
from slotbook.stores.interfaces import BookingStore

ModelT = TypeVar("ModelT", bound=SQLModel)


def _clone(model: ModelT) -> ModelT:
    # Callers mutate what they get back; the stored row must only change on save.
    return type(model).model_validate(model.model_dump())


class MemoryBookingStore(BookingStore):
    """Single-process store. Overlaps are refused at write time like the DB constraint."""

    def __init__(self) -> None:
        self._services: dict[uuid.UUID, Service] = {}
        self._employees: dict[uuid.UUID, Employee] = {}
        self._employee_services: dict[uuid.UUID, set[uuid.UUID]] = {}
        self._customers: dict[uuid.UUID, Customer] = {}
        self._bookings: dict[uuid.UUID, Booking] = {}
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}

    # Seeding helpers used by tests and the memory backend.

    def add_service(self, service: Service) -> Service:
        self._services[service.id] = _clone(service)
        return service

    def add_employee(self, employee: Employee, service_ids: list[uuid.UUID] | None = None) -> Employee:
        self._employees[employee.id] = _clone(employee)
        self._employee_services[employee.id] = set(service_ids or [])
        return employee

    def add_customer(self, customer: Customer) -> Customer:
        self._customers[customer.id] = _clone(customer)
        return customer

    # BookingStore

    async def get_service(self, service_id: uuid.UUID) -> Service | None:
        service = self._services.get(service_id)
        return _clone(service) if service else None

    async def list_services(self) -> list[Service]:
        return [_clone(s) for s in sorted(self._services.values(), key=lambda s: s.name)]

    async def save_service(self, service: Service) -> Service:
        self._services[service.id] = _clone(service)
        return service

    async def get_employee(self, employee_id: uuid.UUID) -> Employee | None:
        employee = self._employees.get(employee_id)
        return _clone(employee) if employee else None

    async def list_employees(self, active_only: bool = True) -> list[Employee]:
        employees = [e for e in self._employees.values() if e.is_active or not active_only]
        employees.sort(key=lambda e: (e.last_name, e.first_name))
        return [_clone(e) for e in employees]

    async def save_employee(self, employee: Employee) -> Employee:
        email = employee.email.lower()
        if any(e.email.lower() == email and e.id != employee.id for e in self._employees.values()):
            raise ConflictError("An employee with this email already exists")
        self._employees[employee.id] = _clone(employee)
        self._employee_services.setdefault(employee.id, set())
        return employee

    async def services_for_employee(self, employee_id: uuid.UUID) -> list[Service]:
        ids = self._employee_services.get(employee_id, set())
        services = [self._services[i] for i in ids if i in self._services]
        return [_clone(s) for s in sorted(services, key=lambda s: s.name)]

    async def assign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> None:
        self._employee_services.setdefault(employee_id, set()).add(service_id)

    async def unassign_service(self, employee_id: uuid.UUID, service_id: uuid.UUID) -> bool:
        assigned = self._employee_services.get(employee_id, set())
        if service_id not in assigned:
            return False
        assigned.discard(service_id)
        return True

    async def get_customer(self, customer_id: uuid.UUID) -> Customer | None:
        customer = self._customers.get(customer_id)
        return _clone(customer) if customer else None

    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        for customer in self._customers.values():
            if customer.phone == phone:
                return _clone(customer)
        return None

    async def list_customers(self) -> list[Customer]:
        customers = sorted(self._customers.values(), key=lambda c: c.created_at, reverse=True)
        return [_clone(c) for c in customers]

    async def save_customer(self, customer: Customer) -> Customer:
        self._customers[customer.id] = _clone(customer)
        return customer

    async def get_booking(self, booking_id: uuid.UUID, for_update: bool = False) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return _clone(booking) if booking else None

    async def list_bookings(
        self, employee_id: uuid.UUID | None = None, from_date: date | None = None
    ) -> list[Booking]:
        bookings = [
            b
            for b in self._bookings.values()
            if (employee_id is None or b.employee_id == employee_id)
            and (from_date is None or b.booking_date >= from_date)
        ]
        bookings.sort(key=lambda b: b.start_at)
        return [_clone(b) for b in bookings]

    async def bookings_for_employee_on_date(
        self, employee_id: uuid.UUID, day: date
    ) -> list[Booking]:
        bookings = [
            b
            for b in self._bookings.values()
            if b.employee_id == employee_id
            and b.booking_date == day
            and b.status != BookingStatus.CANCELLED
        ]
        bookings.sort(key=lambda b: b.start_at)
        return [_clone(b) for b in bookings]

    def _ensure_no_overlap(self, booking: Booking) -> None:
        if booking.status == BookingStatus.CANCELLED:
            return
        same_employee = (b for b in self._bookings.values() if b.employee_id == booking.employee_id)
        if find_conflicts(booking.start_at, booking.end_at, same_employee, exclude_booking_id=booking.id):
            raise ConflictError()

    async def insert_booking(self, booking: Booking) -> Booking:
        self._ensure_no_overlap(booking)
        self._bookings[booking.id] = _clone(booking)
        return booking

    async def update_booking(self, booking: Booking) -> Booking:
        self._ensure_no_overlap(booking)
        self._bookings[booking.id] = _clone(booking)
        return booking

    @asynccontextmanager
    async def schedule_lock(self, *employee_ids: uuid.UUID) -> AsyncIterator[None]:
        # Stable order so two writers touching the same pair cannot deadlock.
        held: list[asyncio.Lock] = []
        try:
            for employee_id in sorted(set(employee_ids)):
                lock = self._locks.setdefault(employee_id, asyncio.Lock())
                await lock.acquire()
                held.append(lock)
            yield
        finally:
            for lock in reversed(held):
                lock.release()
