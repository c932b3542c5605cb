from fastapi import APIRouter, Depends, Query, Response, status

from slotbook.api.deps import get_store, require_staff
from slotbook.api.schemas.customer import PhoneCheckResponse
from slotbook.core.security import Principal
from slotbook.models import CustomerCreate, CustomerPublic
from slotbook.services import customer_service
from slotbook.stores import BookingStore

router = APIRouter(tags=["customers"])


@router.get("/customers", response_model=list[CustomerPublic])
async def list_customers(
    _: Principal = Depends(require_staff),
    store: BookingStore = Depends(get_store),
) -> list[CustomerPublic]:
    customers = await customer_service.list_customers(store)
    return [CustomerPublic.model_validate(c, from_attributes=True) for c in customers]


@router.get("/public/customers/check-phone", response_model=PhoneCheckResponse)
async def check_phone(
    phone: str = Query(...),
    store: BookingStore = Depends(get_store),
) -> PhoneCheckResponse:
    """Lets the booking page recognise a returning customer by phone number."""
    customer = await customer_service.find_by_phone(store, phone)
    if not customer:
        return PhoneCheckResponse(exists=False)
    return PhoneCheckResponse(
        exists=True, customer=CustomerPublic.model_validate(customer, from_attributes=True)
    )


@router.post("/public/customers", response_model=CustomerPublic, status_code=status.HTTP_201_CREATED)
async def find_or_create_customer(
    body: CustomerCreate,
    response: Response,
    store: BookingStore = Depends(get_store),
) -> CustomerPublic:
    """201 with a new customer, or 200 with the existing one holding the same phone."""
    customer, created = await customer_service.find_or_create(store, body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return CustomerPublic.model_validate(customer, from_attributes=True)
