from slotbook.models.booking import Booking, BookingPublic, BookingStatus
from slotbook.models.customer import Customer, CustomerCreate, CustomerPublic
from slotbook.models.employee import Employee, EmployeeCreate, EmployeePublic, EmployeeService
from slotbook.models.service import Service, ServiceCreate, ServicePublic, ServiceUpdate

__all__ = [
    "Booking",
    "BookingPublic",
    "BookingStatus",
    "Customer",
    "CustomerCreate",
    "CustomerPublic",
    "Employee",
    "EmployeeCreate",
    "EmployeePublic",
    "EmployeeService",
    "Service",
    "ServiceCreate",
    "ServicePublic",
    "ServiceUpdate",
]
