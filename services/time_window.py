"""
Time-window policy for bookings.

A booking stores a calendar date and a wall-clock time slot. Combining the two
gives the session instant, a naive datetime in the app's single local
timezone. Every predicate here takes ``now`` explicitly and never reads the
clock itself, and every predicate fails closed on a malformed slot.
"""

import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from services.errors import InvalidTimeSlot, ValidationError

CANCEL_CUTOFF_MINUTES = 60
CHECKIN_OPENS_MINUTES_BEFORE = 60
CHECKIN_CLOSES_MINUTES_AFTER = 30

_TWELVE_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TWENTY_FOUR_HOUR = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in ``tz_name``, as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def parse_time_slot(time_slot: str):
    """Return ``(hour, minute)`` for "h:mm AM/PM" or "H:mm" slots."""
    if not isinstance(time_slot, str):
        raise InvalidTimeSlot()

    m = _TWELVE_HOUR.match(time_slot)
    if m:
        hour, minute, period = int(m.group(1)), int(m.group(2)), m.group(3).upper()
        if not 1 <= hour <= 12 or minute > 59:
            raise InvalidTimeSlot(f"Invalid time slot: {time_slot!r}")
        hour = hour % 12
        if period == "PM":
            hour += 12
        return hour, minute

    m = _TWENTY_FOUR_HOUR.match(time_slot)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if hour > 23 or minute > 59:
            raise InvalidTimeSlot(f"Invalid time slot: {time_slot!r}")
        return hour, minute

    raise InvalidTimeSlot(f"Invalid time slot: {time_slot!r}")


def normalize_time_slot(time_slot: str) -> str:
    """Canonical stored form: zero-padded 24-hour "HH:MM"."""
    hour, minute = parse_time_slot(time_slot)
    return f"{hour:02d}:{minute:02d}"


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Invalid date: {value!r}. Use YYYY-MM-DD")


def session_instant(booking_date, time_slot: str) -> datetime:
    hour, minute = parse_time_slot(time_slot)
    day = parse_date(booking_date)
    return datetime(day.year, day.month, day.day, hour, minute)


def _truncate_to_minute(now: datetime) -> datetime:
    return now.replace(second=0, microsecond=0)


def _until(booking_date, time_slot, now: datetime):
    """``session_instant - now``, or None when the date or slot is malformed."""
    try:
        return session_instant(booking_date, time_slot) - now
    except ValidationError:
        return None


def is_past(booking_date, time_slot: str, now: datetime) -> bool:
    delta = _until(booking_date, time_slot, _truncate_to_minute(now))
    if delta is None:
        return True
    return delta <= timedelta(0)


def can_cancel(booking_date, time_slot: str, now: datetime,
               cutoff_minutes: int = CANCEL_CUTOFF_MINUTES) -> bool:
    delta = _until(booking_date, time_slot, now)
    if delta is None:
        return False
    # exactly at the cutoff is already too late
    return delta > timedelta(minutes=cutoff_minutes)


def can_check_in(booking_date, time_slot: str, now: datetime,
                 opens_before: int = CHECKIN_OPENS_MINUTES_BEFORE,
                 closes_after: int = CHECKIN_CLOSES_MINUTES_AFTER) -> bool:
    delta = _until(booking_date, time_slot, now)
    if delta is None:
        return False
    return -timedelta(minutes=closes_after) <= delta <= timedelta(minutes=opens_before)


def _plural(n: int, unit: str) -> str:
    return f"in {n} {unit}{'' if n == 1 else 's'}"


def time_until(booking_date, time_slot: str, now: datetime) -> str:
    """
    "in 2 days", "in 3 hours", "in 45 minutes" using the largest non-zero
    unit. Empty string for sessions that already started or can't be parsed.
    """
    delta = _until(booking_date, time_slot, now)
    if delta is None or delta <= timedelta(0):
        return ""

    total_minutes = int(delta.total_seconds() // 60)
    days, rem = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem, 60)

    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    return _plural(minutes, "minute")


def is_today(booking_date, now: datetime) -> bool:
    try:
        return parse_date(booking_date) == now.date()
    except ValidationError:
        return False
