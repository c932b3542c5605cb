"""
Slot grid generation.

Candidate start times for one calendar day, independent of any booking.
"""

from datetime import date, datetime, time, timedelta

from slotbook.core.errors import InvalidInputError


def generate_slots(open_time: time, close_time: time, step_minutes: int) -> list[time]:
    """
    Every step_minutes-spaced time of day in [open_time, close_time].

    open_time is always included; close_time only when it lands exactly on the grid.
    08:00-20:00 at 30 minutes gives 25 slots (08:00 ... 20:00).
    """
    if step_minutes <= 0:
        raise InvalidInputError("step_minutes must be positive", field="step_minutes")
    if close_time < open_time:
        raise InvalidInputError("close_time must not be before open_time", field="close_time")

    # Walk on an arbitrary anchor day so the loop never wraps past midnight.
    anchor = date(2000, 1, 1)
    current = datetime.combine(anchor, open_time)
    end = datetime.combine(anchor, close_time)
    delta = timedelta(minutes=step_minutes)

    slots: list[time] = []
    while current <= end:
        slots.append(current.time())
        current += delta
    return slots
