from pydantic import BaseModel


class ServiceAssignment(BaseModel):
    service_id: str
