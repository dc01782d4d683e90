"""
Booking-day keys.

Every per-day query (queue numbering, duplicate checks, counts) partitions on
a ``YYYY-MM-DD`` string computed in one fixed civil timezone, independent of
the host clock's timezone. Writers and readers must both go through
``booking_day`` or partitions stop lining up.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Africa/Cairo"


def _aware(instant: datetime | None) -> datetime:
    if instant is None:
        return datetime.now(timezone.utc)
    if instant.tzinfo is None:
        # naive values in this codebase are UTC
        return instant.replace(tzinfo=timezone.utc)
    return instant


def booking_day(instant: datetime | None = None, tz: str = DEFAULT_TIMEZONE) -> str:
    """Calendar day of ``instant`` in ``tz``.

    >>> booking_day(datetime(2025, 12, 19, 23, 0, tzinfo=timezone.utc))
    '2025-12-20'
    """
    return _aware(instant).astimezone(ZoneInfo(tz)).date().isoformat()


def is_booking_day_today(day: str, now: datetime | None = None, tz: str = DEFAULT_TIMEZONE) -> bool:
    return day == booking_day(now, tz)


def previous_booking_day(day: str) -> str:
    return (date.fromisoformat(day) - timedelta(days=1)).isoformat()


def next_booking_day(day: str) -> str:
    return (date.fromisoformat(day) + timedelta(days=1)).isoformat()


def booking_day_bounds(day: str, tz: str = DEFAULT_TIMEZONE) -> tuple[datetime, datetime]:
    """Naive UTC [start, end) of a booking day."""
    zone = ZoneInfo(tz)
    start_local = datetime.combine(date.fromisoformat(day), time.min, tzinfo=zone)
    end_local = datetime.combine(date.fromisoformat(next_booking_day(day)), time.min, tzinfo=zone)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def end_of_booking_day(instant: datetime | None = None, tz: str = DEFAULT_TIMEZONE) -> datetime:
    """23:59:59.999 of the booking day containing ``instant``, as naive UTC."""
    _, end = booking_day_bounds(booking_day(instant, tz), tz)
    return end - timedelta(milliseconds=1)
