from slotbook.scheduling.overlap import (
    find_conflicts,
    intervals_overlap,
    is_occupied,
    overlapping_bookings,
)
from slotbook.scheduling.slots import generate_slots
from slotbook.scheduling.status import can_transition, ensure_transition

__all__ = [
    "can_transition",
    "ensure_transition",
    "find_conflicts",
    "generate_slots",
    "intervals_overlap",
    "is_occupied",
    "overlapping_bookings",
]
