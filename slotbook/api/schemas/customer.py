from pydantic import BaseModel

from slotbook.models import CustomerPublic


class PhoneCheckResponse(BaseModel):
    exists: bool
    customer: CustomerPublic | None = None
