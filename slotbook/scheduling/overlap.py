"""
Overlap detection

Half-open [start, end) interval checks between a candidate and the
existing bookings of one employee. Cancelled bookings never occupy time.
Callers pass the bookings in explicitly; nothing here reads storage.
"""

import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, tzinfo

from slotbook.models.booking import Booking
from slotbook.scheduling.timeutil import combine


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True when [start_a, end_a) and [start_b, end_b) intersect."""
    return start_a < end_b and end_a > start_b


def _active(bookings: Iterable[Booking]) -> Iterable[Booking]:
    return (b for b in bookings if b.is_active)


def find_conflicts(
    start_at: datetime,
    end_at: datetime,
    bookings: Iterable[Booking],
    exclude_booking_id: uuid.UUID | None = None,
) -> list[Booking]:
    """
    Non-cancelled bookings whose interval intersects [start_at, end_at).

    exclude_booking_id removes the booking being rescheduled from its own
    conflict set. Comparison is on instants, never on booking_date.
    """
    return [
        b
        for b in _active(bookings)
        if b.id != exclude_booking_id
        and intervals_overlap(b.start_at, b.end_at, start_at, end_at)
    ]


def bookings_covering(instant: datetime, bookings: Iterable[Booking]) -> list[Booking]:
    """Non-cancelled bookings with start_at <= instant < end_at."""
    return [b for b in _active(bookings) if b.start_at <= instant < b.end_at]


def overlapping_bookings(
    day: date,
    candidate_start: time,
    bookings: Iterable[Booking],
    tz: tzinfo,
    employee_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Bookings occupying the grid slot that starts at candidate_start on day.

    With employee_id, bookings of other employees are ignored.
    """
    if employee_id is not None:
        bookings = (b for b in bookings if b.employee_id == employee_id)
    return bookings_covering(combine(day, candidate_start, tz), bookings)


def is_occupied(
    employee_id: uuid.UUID,
    day: date,
    candidate_start: time,
    bookings: Iterable[Booking],
    tz: tzinfo,
) -> bool:
    """
    Whether the employee's slot at candidate_start falls anywhere inside a booking.

    A booking spanning several grid buckets occupies all of them; a slot at
    exactly a booking's end is free.
    """
    return bool(overlapping_bookings(day, candidate_start, bookings, tz, employee_id=employee_id))
