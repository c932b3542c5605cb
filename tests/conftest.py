"""Shared test fixtures and helpers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./slotbook-test.db")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BUSINESS_TIMEZONE", "UTC")

import uuid
from dataclasses import dataclass
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from slotbook.api.deps import get_store
from slotbook.core.security import Role, create_access_token
from slotbook.main import app
from slotbook.models import Customer, Employee, Service
from slotbook.services.booking_service import BookingService
from slotbook.stores import MemoryBookingStore


@dataclass
class Seed:
    haircut: Service  # 30 min, 50.00
    coloring: Service  # 90 min, 120.00
    e1: Employee
    e2: Employee
    inactive: Employee
    customer: Customer


def make_service(name: str, minutes: int, price: str) -> Service:
    return Service(name=name, price=Decimal(price), duration_seconds=minutes * 60)


def make_employee(first: str, last: str, is_active: bool = True) -> Employee:
    return Employee(
        first_name=first,
        last_name=last,
        email=f"{first.lower()}@example.com",
        is_active=is_active,
    )


@pytest.fixture
def seed() -> Seed:
    return Seed(
        haircut=make_service("Haircut", 30, "50.00"),
        coloring=make_service("Coloring", 90, "120.00"),
        e1=make_employee("Anna", "Berg"),
        e2=make_employee("Ben", "Cole"),
        inactive=make_employee("Cara", "Dunn", is_active=False),
        customer=Customer(first_name="Dana", last_name="Ely", email="dana@example.com"),
    )


@pytest.fixture
def store(seed: Seed) -> MemoryBookingStore:
    s = MemoryBookingStore()
    s.add_service(seed.haircut)
    s.add_service(seed.coloring)
    s.add_employee(seed.e1, service_ids=[seed.haircut.id, seed.coloring.id])
    s.add_employee(seed.e2, service_ids=[seed.haircut.id])
    s.add_employee(seed.inactive)
    s.add_customer(seed.customer)
    return s


@pytest.fixture
def booking_service(store: MemoryBookingStore) -> BookingService:
    return BookingService(store)


@pytest.fixture
def client(store: MemoryBookingStore):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(role: Role, subject: object = None) -> dict[str, str]:
    token = create_access_token(subject or uuid.uuid4(), role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth_headers(Role.ADMIN)

