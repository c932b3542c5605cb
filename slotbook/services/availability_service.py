import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from slotbook.core.config import settings
from slotbook.models import Booking
from slotbook.scheduling.overlap import overlapping_bookings
from slotbook.scheduling.slots import generate_slots
from slotbook.scheduling.timeutil import combine, local_date, parse_date
from slotbook.services.catalog_service import get_employee
from slotbook.stores.interfaces import BookingStore


@dataclass(frozen=True)
class SlotAvailability:
    time: time
    start_at: datetime
    end_at: datetime
    available: bool
    booking_id: uuid.UUID | None = None
    is_booking_start: bool = False


async def bookings_near(
    store: BookingStore,
    employee_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    tz: tzinfo,
) -> list[Booking]:
    """Non-cancelled bookings of an employee that could intersect [start_at, end_at).

    Reads by booking_date, including the previous day so a booking that runs past
    midnight is still compared by its instants.
    """
    first = local_date(start_at, tz) - timedelta(days=1)
    last = local_date(end_at, tz)
    seen: dict[uuid.UUID, Booking] = {}
    day = first
    while day <= last:
        for b in await store.bookings_for_employee_on_date(employee_id, day):
            seen[b.id] = b
        day += timedelta(days=1)
    return sorted(seen.values(), key=lambda b: b.start_at)


async def get_day_availability(
    store: BookingStore,
    employee_id: uuid.UUID | str,
    day: date | str,
    open_time: time | None = None,
    close_time: time | None = None,
    step_minutes: int | None = None,
) -> list[SlotAvailability]:
    """Returns the slot grid for the day with occupancy per slot.

    Advisory only: the result can be stale by the time a booking is attempted.
    """
    employee = await get_employee(store, employee_id)
    d = parse_date(day, "date")
    tz = settings.tz
    step = settings.slot_step_minutes if step_minutes is None else step_minutes
    slots = generate_slots(
        settings.business_open if open_time is None else open_time,
        settings.business_close if close_time is None else close_time,
        step,
    )
    if not slots:
        return []
    window_start = combine(d, slots[0], tz)
    window_end = combine(d, slots[-1], tz) + timedelta(minutes=step)
    bookings = await bookings_near(store, employee.id, window_start, window_end, tz)

    out: list[SlotAvailability] = []
    for t in slots:
        start = combine(d, t, tz)
        covering = overlapping_bookings(d, t, bookings, tz, employee_id=employee.id)
        first = covering[0] if covering else None
        out.append(
            SlotAvailability(
                time=t,
                start_at=start,
                end_at=start + timedelta(minutes=step),
                available=first is None,
                booking_id=first.id if first else None,
                is_booking_start=bool(first and first.start_at == start),
            )
        )
    return out
