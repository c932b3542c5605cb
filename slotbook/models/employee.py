import uuid
from datetime import datetime

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from slotbook.models.types import UTCDateTime, utc_now


class EmployeeBase(SQLModel):
    first_name: str = Field(min_length=1)
    last_name: str
    email: str = Field(unique=True, index=True)
    is_active: bool = True


class Employee(EmployeeBase, table=True):
    __tablename__ = "employees"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False)
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class EmployeeCreate(EmployeeBase):
    service_ids: list[uuid.UUID] = []


class EmployeeService(SQLModel, table=True):
    """Which services an employee offers."""

    __tablename__ = "employee_services"
    employee_id: uuid.UUID = Field(foreign_key="employees.id", primary_key=True)
    service_id: uuid.UUID = Field(foreign_key="services.id", primary_key=True)


class EmployeePublic(SQLModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    display_name: str
    is_active: bool
