"""
Calendar helpers for billing date arithmetic.

Month lengths and leap years come from the standard ``calendar`` module;
plain month/year offsets use ``dateutil.relativedelta``, which clamps to the
last day of shorter months.
"""

import calendar
from datetime import UTC, date, datetime, time

from dateutil.relativedelta import relativedelta


def is_leap_year(year: int) -> bool:
    """Check if a year is a leap year."""
    return calendar.isleap(year)


def last_day_of_month(year: int, month: int) -> int:
    """Get the last day (28-31) of a specific month and year."""
    return calendar.monthrange(year, month)[1]


def add_months(source: date, months: int) -> date:
    """Add months, clamping the day to the end of the target month."""
    return source + relativedelta(months=months)


def add_months_on_day(source: date, months: int, preferred_day: int) -> date:
    """
    Add months and land on ``preferred_day``, or the month's last day if shorter.

    The preferred day is re-applied on every call, so a 31st billing day
    moves Jan 31 -> Feb 29 -> Mar 31 rather than sticking to the 29th.
    """
    month_index = source.month - 1 + months
    target_year = source.year + month_index // 12
    target_month = month_index % 12 + 1
    day = min(preferred_day, last_day_of_month(target_year, target_month))
    return date(target_year, target_month, day)


def add_years(source: date, years: int) -> date:
    """Add years; Feb 29 becomes Feb 28 in non-leap target years."""
    target_year = source.year + years
    day = source.day
    if source.month == 2 and day == 29 and not is_leap_year(target_year):
        day = 28
    return date(target_year, source.month, day)


def month_bounds(reference: date | datetime | None = None) -> tuple[date, date]:
    """
    First and last calendar day of the month containing ``reference``.

    Defaults to the current UTC month when no reference is given.
    """
    if reference is None:
        reference = datetime.now(UTC)
    if isinstance(reference, datetime):
        reference = reference.date()
    start = reference.replace(day=1)
    end = reference.replace(day=last_day_of_month(reference.year, reference.month))
    return start, end


def as_instant(value: date | datetime, tz_source: datetime | None = None) -> datetime:
    """
    Promote a date to a datetime at midnight.

    Datetimes are returned unchanged. When ``tz_source`` is given, the
    midnight takes its timezone so aware and naive values never get mixed.
    """
    if isinstance(value, datetime):
        return value
    tzinfo = tz_source.tzinfo if tz_source is not None else None
    return datetime.combine(value, time.min, tzinfo=tzinfo)


def today(now: date | datetime) -> date:
    """Calendar day of an instant."""
    if isinstance(now, datetime):
        return now.date()
    return now
