import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column
from sqlmodel import Field, SQLModel

from slotbook.models.types import UTCDateTime, utc_now

# Availability reads look back one business day, so no booking may last longer.
MAX_DURATION_SECONDS = 24 * 60 * 60


class ServiceBase(SQLModel):
    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(max_digits=10, decimal_places=2, ge=0)
    duration_seconds: int = Field(gt=0, le=MAX_DURATION_SECONDS)


class Service(ServiceBase, table=True):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint(
            f"duration_seconds > 0 AND duration_seconds <= {MAX_DURATION_SECONDS}",
            name="ck_services_duration_range",
        ),
    )
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False)
    )


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(default=None, max_digits=10, decimal_places=2, ge=0)
    duration_seconds: int | None = Field(default=None, gt=0, le=MAX_DURATION_SECONDS)


class ServicePublic(ServiceBase):
    id: uuid.UUID
