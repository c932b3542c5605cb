"""Parsing and instant arithmetic shared by the scheduling functions."""

import re
import uuid
from datetime import UTC, date, datetime, time, tzinfo

from slotbook.core.errors import InvalidInputError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def parse_uuid(value: str | uuid.UUID, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid {field}", field=field) from None


def parse_date(value: str | date, field: str = "date") -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        raise InvalidInputError(f"{field} must be a date without time", field=field)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidInputError(f"{field} must be in YYYY-MM-DD format", field=field)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidInputError(f"{field} is not a valid calendar date", field=field) from None


def parse_time(value: str | time, field: str = "start_time") -> time:
    """Accept a time or an HH:MM string."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidInputError(f"{field} must be in HH:MM format", field=field)
    hours, minutes = int(value[:2]), int(value[3:])
    if hours > 23 or minutes > 59:
        raise InvalidInputError(f"{field} is not a valid time of day", field=field)
    return time(hours, minutes)


def combine(day: date, time_of_day: time, tz: tzinfo) -> datetime:
    """Instant for a wall-clock time on a business-local day, returned in UTC."""
    return datetime.combine(day, time_of_day, tzinfo=tz).astimezone(UTC)


def local_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant in the business's local reckoning."""
    if instant.tzinfo is None:
        raise ValueError("instant must be timezone-aware")
    return instant.astimezone(tz).date()
