"""Calendar-day utilities shared by every recurrence strider.

All recurrence arithmetic works on plain ``datetime.date`` values, which are
calendar days with no time-of-day. Instants (``datetime`` values) are brought
down to their calendar day with :func:`calendar_day` in an explicitly supplied
calendar (a ``tzinfo``), never the machine's local zone, so results do not
depend on where the code happens to run.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from dateutil import tz
from dateutil.relativedelta import relativedelta

from . import constants

logger = logging.getLogger(__name__)

Instant = Union[date, datetime]
Calendar = Union[str, tzinfo, None]


def resolve_calendar(calendar: Calendar) -> tzinfo:
    """
    Turn a calendar identity into a ``tzinfo``.

    Args:
        calendar: IANA zone name (``"America/Chicago"``), a ``tzinfo``, or
            None for the default calendar (UTC)

    Returns:
        tzinfo to use for calendar-day normalization

    Raises:
        ValueError: If the zone name is unknown
    """
    if calendar is None:
        calendar = constants.DEFAULT_CALENDAR
    if isinstance(calendar, tzinfo):
        return calendar
    resolved = tz.gettz(calendar)
    if resolved is None:
        raise ValueError(f"Unknown calendar: {calendar!r}")
    return resolved


def optional_calendar(calendar: Calendar) -> Optional[tzinfo]:
    """Like :func:`resolve_calendar`, but None stays None (naive wall-clock time)."""
    if calendar is None:
        return None
    return resolve_calendar(calendar)


def _local(moment: datetime) -> datetime:
    """Shift a wall-clock time skipped by a DST jump to the first real time after it."""
    if moment.tzinfo is None:
        return moment
    return tz.resolve_imaginary(moment)


def calendar_day(instant: Instant, calendar: Calendar = None) -> date:
    """
    Return the calendar day an instant falls on.

    Aware datetimes are converted into ``calendar`` first; naive datetimes
    are read as wall-clock time already in ``calendar``. Dates pass through
    unchanged, so the function is idempotent.
    """
    if isinstance(instant, datetime):
        calendar = optional_calendar(calendar)
        if instant.tzinfo is not None and calendar is not None:
            instant = instant.astimezone(calendar)
        return instant.date()
    return instant


def start_of_day(instant: Instant, calendar: Calendar = None) -> datetime:
    """
    Return the first moment of the instant's calendar day.

    That is midnight, unless the calendar skips midnight on that day (a DST
    change at 00:00), in which case it is the first wall-clock time that
    exists. ``start_of_day(start_of_day(x, cal), cal) == start_of_day(x, cal)``.
    """
    calendar = optional_calendar(calendar)
    day = calendar_day(instant, calendar)
    return _local(datetime.combine(day, time.min, tzinfo=calendar))


def at_clock_time(day: date, hour: int, minute: int = 0, calendar: Calendar = None) -> datetime:
    """Return ``day`` at a fixed local clock time in ``calendar``."""
    return _local(datetime.combine(day, time(hour, minute), tzinfo=optional_calendar(calendar)))


def days_between(start: date, end: date) -> int:
    """Signed number of whole days from ``start`` to ``end``."""
    return (end - start).days


def add_days(day: date, days: int) -> Optional[date]:
    """Add days, returning None when the result leaves the representable range."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        logger.debug("Cannot add %d days to %s", days, day)
        return None


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> Optional[date]:
    """Add months with relativedelta (day clamps to the target month's end)."""
    try:
        return day + relativedelta(months=months)
    except (OverflowError, ValueError):
        logger.debug("Cannot add %d months to %s", months, day)
        return None


def clamp_day(year: int, month: int, day_of_month: int) -> Optional[date]:
    """
    Build a date in the given month, clamping the day to the month's length.

    ``clamp_day(2024, 2, 31)`` is ``date(2024, 2, 29)``. Returns None if the
    year/month cannot be represented.

    Examples:
        >>> clamp_day(2023, 2, 30)
        datetime.date(2023, 2, 28)
        >>> clamp_day(2024, 4, 15)
        datetime.date(2024, 4, 15)
    """
    try:
        return date(year, month, 1) + relativedelta(day=max(day_of_month, 1))
    except (OverflowError, ValueError):
        logger.debug("Cannot construct %04d-%02d-%02d", year, month, day_of_month)
        return None


def month_occurrence(day_in_month: date, day_of_month: int) -> Optional[date]:
    """Occurrence of ``day_of_month`` in the month containing ``day_in_month``."""
    return clamp_day(day_in_month.year, day_in_month.month, day_of_month)
