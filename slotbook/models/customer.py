import uuid
from datetime import datetime

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from slotbook.models.types import UTCDateTime, utc_now


class CustomerBase(SQLModel):
    first_name: str = Field(min_length=1)
    last_name: str = ""
    email: str | None = Field(default=None, index=True)
    phone: str | None = Field(default=None, index=True)


class Customer(CustomerBase, table=True):
    __tablename__ = "customers"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False)
    )


class CustomerCreate(CustomerBase):
    pass


class CustomerPublic(CustomerBase):
    id: uuid.UUID
