import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Enum as SAEnum
from sqlmodel import Field, SQLModel

from slotbook.models.types import UTCDateTime, utc_now


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Booking(SQLModel, table=True):
    """A reservation of one employee for one service.

    end_at and booking_date are derived from start_at and the service duration;
    total_price is copied from the service when the booking is written.
    """

    __tablename__ = "bookings"
    __table_args__ = (CheckConstraint("end_at > start_at", name="ck_bookings_end_after_start"),)
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", index=True)
    service_id: uuid.UUID = Field(foreign_key="services.id", index=True)
    customer_id: uuid.UUID = Field(foreign_key="customers.id", index=True)
    booking_date: date = Field(index=True)
    start_at: datetime = Field(sa_column=Column(UTCDateTime(), nullable=False, index=True))
    end_at: datetime = Field(sa_column=Column(UTCDateTime(), nullable=False))
    status: BookingStatus = Field(
        default=BookingStatus.PENDING,
        sa_column=Column(
            SAEnum(
                BookingStatus,
                name="booking_status",
                native_enum=False,
                length=16,
                values_callable=lambda e: [m.value for m in e],
            ),
            nullable=False,
            index=True,
        ),
    )
    total_price: Decimal = Field(max_digits=10, decimal_places=2)
    notes: str | None = None
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False)
    )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED


class PartySummary(SQLModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str | None = None


class ServiceSummary(SQLModel):
    id: uuid.UUID
    name: str
    price: Decimal
    duration_seconds: int


class BookingPublic(SQLModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    service_id: uuid.UUID
    customer_id: uuid.UUID
    booking_date: date
    start_at: datetime
    end_at: datetime
    status: BookingStatus
    total_price: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    employee: PartySummary | None = None
    service: ServiceSummary | None = None
    customer: PartySummary | None = None
