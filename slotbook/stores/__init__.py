from slotbook.stores.interfaces import BookingStore
from slotbook.stores.memory_store import MemoryBookingStore
from slotbook.stores.sql_store import SqlBookingStore

__all__ = ["BookingStore", "MemoryBookingStore", "SqlBookingStore"]
