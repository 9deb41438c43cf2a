"""
Business-day calendar arithmetic.

A single Monday-Friday working week; Saturday and Sunday are the only
non-working days (no holidays). All functions work on calendar dates and
ignore time of day.

Every function steps one calendar day at a time, so cost is linear in the
number of days crossed. That is fine for project-scale spans (a few
thousand days at most).
"""

from datetime import date, datetime, timedelta

ONE_DAY = timedelta(days=1)


def to_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_business_day(day: date) -> bool:
    # Monday=0 ... Friday=4
    return day.weekday() < 5


def add_business_days(start: date, days: int) -> date:
    """
    Step forward until `days` working days have been passed.

    `add_business_days(d, 0)` returns `d` unchanged, even on a weekend.
    Adding 1 to a Friday lands on the following Monday.
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")

    result = to_date(start)
    remaining = days
    while remaining > 0:
        result += ONE_DAY
        if is_business_day(result):
            remaining -= 1
    return result


def subtract_business_days(end: date, days: int) -> date:
    """Mirror of add_business_days, stepping backward."""
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")

    result = to_date(end)
    remaining = days
    while remaining > 0:
        result -= ONE_DAY
        if is_business_day(result):
            remaining -= 1
    return result


def shift_business_days(day: date, days: int) -> date:
    """Signed shift: forward for positive `days`, backward for negative."""
    if days >= 0:
        return add_business_days(day, days)
    return subtract_business_days(day, -days)


def business_days_between(start: date, end: date) -> int:
    """
    Count working days in the half-open range (start, end].

    The start date itself is never counted; returns 0 when end <= start.
    """
    current = to_date(start)
    end = to_date(end)
    count = 0
    while current < end:
        current += ONE_DAY
        if is_business_day(current):
            count += 1
    return count
