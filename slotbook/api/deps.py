from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from slotbook.core.config import settings
from slotbook.core.db import get_session
from slotbook.core.errors import ForbiddenError, UnauthorizedError
from slotbook.core.security import Principal, Role, decode_access_token
from slotbook.services.booking_service import BookingService
from slotbook.stores import BookingStore, MemoryBookingStore, SqlBookingStore

security = HTTPBearer(auto_error=False)

_memory_store: MemoryBookingStore | None = None


def get_memory_store() -> MemoryBookingStore:
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryBookingStore()
    return _memory_store


async def get_store(
    session: AsyncSession = Depends(get_session),
) -> AsyncGenerator[BookingStore, None]:
    if settings.storage_backend == "memory":
        yield get_memory_store()
    else:
        yield SqlBookingStore(session)


def get_booking_service(store: BookingStore = Depends(get_store)) -> BookingService:
    return BookingService(store)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()
    principal = decode_access_token(credentials.credentials)
    if not principal:
        raise UnauthorizedError("Invalid or expired token")
    return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")
    return principal


async def require_staff(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Admins and employees; employees only ever see their own bookings."""
    if principal.role not in (Role.ADMIN, Role.EMPLOYEE):
        raise ForbiddenError("Staff access required")
    return principal
