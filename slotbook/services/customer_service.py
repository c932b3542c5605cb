import logging
import uuid

from slotbook.core.errors import InvalidInputError, NotFoundError
from slotbook.models import Customer, CustomerCreate
from slotbook.scheduling.timeutil import parse_uuid
from slotbook.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)


def normalize_phone(phone: str | None) -> str | None:
    """Strip whitespace so "+49 151 234" and "+49151234" match."""
    if phone is None:
        return None
    normalized = "".join(phone.split())
    return normalized or None


async def get_customer(store: BookingStore, customer_id: uuid.UUID | str) -> Customer:
    cid = parse_uuid(customer_id, "customer_id")
    customer = await store.get_customer(cid)
    if not customer:
        raise NotFoundError("Customer", cid)
    return customer


async def find_by_phone(store: BookingStore, phone: str) -> Customer | None:
    normalized = normalize_phone(phone)
    if not normalized:
        raise InvalidInputError("Phone number is required", field="phone")
    return await store.find_customer_by_phone(normalized)


async def find_or_create(store: BookingStore, data: CustomerCreate) -> tuple[Customer, bool]:
    """Return the customer with the same phone number, or create one.

    The second element is True when a new customer was written.
    """
    phone = normalize_phone(data.phone)
    if phone:
        existing = await store.find_customer_by_phone(phone)
        if existing:
            return existing, False
    customer = Customer.model_validate(data.model_dump())
    customer.phone = phone
    if customer.email:
        customer.email = customer.email.strip().lower()
    customer = await store.save_customer(customer)
    logger.info("Customer %s created", customer.id)
    return customer, True


async def list_customers(store: BookingStore) -> list[Customer]:
    return await store.list_customers()
