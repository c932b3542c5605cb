from fastapi import APIRouter, Depends, status

from slotbook.api.deps import get_store, require_admin
from slotbook.api.schemas.catalog import ServiceAssignment
from slotbook.core.security import Principal
from slotbook.models import (
    Employee,
    EmployeeCreate,
    EmployeePublic,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
)
from slotbook.services import catalog_service
from slotbook.stores import BookingStore

router = APIRouter(tags=["catalog"])


def _employee_public(e: Employee) -> EmployeePublic:
    return EmployeePublic(
        id=e.id,
        first_name=e.first_name,
        last_name=e.last_name,
        display_name=e.display_name,
        is_active=e.is_active,
    )


@router.get("/services", response_model=list[ServicePublic])
async def list_services(store: BookingStore = Depends(get_store)) -> list[ServicePublic]:
    services = await catalog_service.list_services(store)
    return [ServicePublic.model_validate(s, from_attributes=True) for s in services]


@router.post("/services", response_model=ServicePublic, status_code=status.HTTP_201_CREATED)
async def create_service(
    body: ServiceCreate,
    _: Principal = Depends(require_admin),
    store: BookingStore = Depends(get_store),
) -> ServicePublic:
    service = await catalog_service.create_service(store, body)
    return ServicePublic.model_validate(service, from_attributes=True)


@router.get("/services/{service_id}", response_model=ServicePublic)
async def get_service(service_id: str, store: BookingStore = Depends(get_store)) -> ServicePublic:
    resolved = await catalog_service.resolve_service(store, service_id)
    return ServicePublic.model_validate(resolved.service, from_attributes=True)


@router.patch("/services/{service_id}", response_model=ServicePublic)
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    _: Principal = Depends(require_admin),
    store: BookingStore = Depends(get_store),
) -> ServicePublic:
    service = await catalog_service.update_service(store, service_id, body)
    return ServicePublic.model_validate(service, from_attributes=True)


@router.get("/employees", response_model=list[EmployeePublic])
async def list_employees(store: BookingStore = Depends(get_store)) -> list[EmployeePublic]:
    return [_employee_public(e) for e in await catalog_service.list_employees(store)]


@router.post("/employees", response_model=EmployeePublic, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    _: Principal = Depends(require_admin),
    store: BookingStore = Depends(get_store),
) -> EmployeePublic:
    return _employee_public(await catalog_service.create_employee(store, body))


@router.get("/employees/{employee_id}/services", response_model=list[ServicePublic])
async def list_employee_services(
    employee_id: str, store: BookingStore = Depends(get_store)
) -> list[ServicePublic]:
    services = await catalog_service.services_for_employee(store, employee_id)
    return [ServicePublic.model_validate(s, from_attributes=True) for s in services]


@router.post("/employees/{employee_id}/services", response_model=list[ServicePublic])
async def assign_employee_service(
    employee_id: str,
    body: ServiceAssignment,
    _: Principal = Depends(require_admin),
    store: BookingStore = Depends(get_store),
) -> list[ServicePublic]:
    services = await catalog_service.assign_service(store, employee_id, body.service_id)
    return [ServicePublic.model_validate(s, from_attributes=True) for s in services]


@router.delete("/employees/{employee_id}/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_employee_service(
    employee_id: str,
    service_id: str,
    _: Principal = Depends(require_admin),
    store: BookingStore = Depends(get_store),
) -> None:
    await catalog_service.unassign_service(store, employee_id, service_id)
