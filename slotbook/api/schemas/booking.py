from pydantic import BaseModel, ConfigDict


class BookingCreateRequest(BaseModel):
    """Wire shape shared by the public booking page and the admin calendar."""

    employee_id: str
    service_id: str
    customer_id: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    notes: str | None = None


class BookingUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    employee_id: str | None = None
    service_id: str | None = None
    date: str | None = None
    start_time: str | None = None
    status: str | None = None
    notes: str | None = None
