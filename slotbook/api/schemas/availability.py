import uuid
from datetime import datetime

from pydantic import BaseModel


class SlotInfo(BaseModel):
    time: str  # HH:MM, business timezone
    start_at: datetime
    end_at: datetime
    available: bool
    booking_id: uuid.UUID | None = None
    is_booking_start: bool = False


class DayAvailabilityResponse(BaseModel):
    employee_id: uuid.UUID
    date: str  # YYYY-MM-DD
    timezone: str
    step_minutes: int
    slots: list[SlotInfo]
