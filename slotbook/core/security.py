from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from jose import JWTError, jwt

from slotbook.core.config import settings


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    GUEST = "guest"


@dataclass(frozen=True)
class Principal:
    """Verified caller identity taken from the bearer token."""

    subject: str
    role: Role


def create_access_token(subject: str | object, role: Role | str = Role.GUEST) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": "access",
        "role": Role(role).value,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Principal | None:
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    try:
        role = Role(payload.get("role", Role.GUEST.value))
    except ValueError:
        return None
    return Principal(subject=str(sub), role=role)
