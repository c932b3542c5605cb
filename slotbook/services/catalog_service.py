import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from slotbook.core.errors import InvalidInputError, NotFoundError
from slotbook.models import Employee, EmployeeCreate, Service, ServiceCreate, ServiceUpdate
from slotbook.scheduling.timeutil import parse_uuid
from slotbook.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedService:
    service: Service
    duration_seconds: int
    price: Decimal


async def resolve_service(store: BookingStore, service_id: uuid.UUID | str) -> ResolvedService:
    """Duration and price of a service. Raises NotFoundError if it does not exist."""
    sid = parse_uuid(service_id, "service_id")
    service = await store.get_service(sid)
    if not service:
        raise NotFoundError("Service", sid)
    return ResolvedService(
        service=service,
        duration_seconds=int(service.duration_seconds),
        price=Decimal(service.price),
    )


async def list_services(store: BookingStore) -> list[Service]:
    return await store.list_services()


async def update_service(
    store: BookingStore, service_id: uuid.UUID | str, data: ServiceUpdate
) -> Service:
    """Change a service. Bookings already written keep their own price."""
    resolved = await resolve_service(store, service_id)
    service = resolved.service
    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "price", "duration_seconds"):
        if field in changes and changes[field] is None:
            raise InvalidInputError(f"{field} cannot be null", field=field)
    for field, value in changes.items():
        setattr(service, field, value)
    service = await store.save_service(service)
    logger.info("Service %s updated: %s", service.id, sorted(changes))
    return service


async def get_employee(store: BookingStore, employee_id: uuid.UUID | str) -> Employee:
    eid = parse_uuid(employee_id, "employee_id")
    employee = await store.get_employee(eid)
    if not employee:
        raise NotFoundError("Employee", eid)
    return employee


async def list_employees(store: BookingStore, active_only: bool = True) -> list[Employee]:
    return await store.list_employees(active_only=active_only)


async def services_for_employee(store: BookingStore, employee_id: uuid.UUID | str) -> list[Service]:
    employee = await get_employee(store, employee_id)
    return await store.services_for_employee(employee.id)


async def create_service(store: BookingStore, data: ServiceCreate) -> Service:
    service = await store.save_service(Service.model_validate(data))
    logger.info("Service %s created: %s", service.id, service.name)
    return service


async def create_employee(store: BookingStore, data: EmployeeCreate) -> Employee:
    for service_id in data.service_ids:
        await resolve_service(store, service_id)
    employee = Employee.model_validate(data.model_dump(exclude={"service_ids"}))
    employee.email = employee.email.strip().lower()
    employee = await store.save_employee(employee)
    for service_id in data.service_ids:
        await store.assign_service(employee.id, service_id)
    logger.info("Employee %s created with %d service(s)", employee.id, len(data.service_ids))
    return employee


async def assign_service(
    store: BookingStore, employee_id: uuid.UUID | str, service_id: uuid.UUID | str
) -> list[Service]:
    employee = await get_employee(store, employee_id)
    resolved = await resolve_service(store, service_id)
    await store.assign_service(employee.id, resolved.service.id)
    return await store.services_for_employee(employee.id)


async def unassign_service(
    store: BookingStore, employee_id: uuid.UUID | str, service_id: uuid.UUID | str
) -> None:
    employee = await get_employee(store, employee_id)
    sid = parse_uuid(service_id, "service_id")
    if not await store.unassign_service(employee.id, sid):
        raise NotFoundError("Employee service", sid)
