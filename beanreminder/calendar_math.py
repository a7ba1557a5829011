"""Calendar arithmetic helpers used by the occurrence iterators.

All functions are pure and operate on ``datetime.date`` values. Month and
year arithmetic clamps to the end of the target month, so adding one year
to 2020-02-29 gives 2021-02-28.
"""

import calendar
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from .constants import DAYS_PER_WEEK


def length_of_year(d: date) -> int:
    """Number of days in the year of ``d`` (365 or 366)."""
    return 366 if calendar.isleap(d.year) else 365


def length_of_month(d: date) -> int:
    """Number of days in the month of ``d``."""
    return calendar.monthrange(d.year, d.month)[1]


def day_of_year(d: date) -> int:
    """1-based ordinal of ``d`` within its year."""
    return d.timetuple().tm_yday


def is_last_day_of_year(d: date) -> bool:
    return day_of_year(d) == length_of_year(d)


def is_last_day_of_month(d: date) -> bool:
    return d.day == length_of_month(d)


def last_day_of_year(d: date) -> date:
    return date(d.year, 12, 31)


def last_day_of_month(d: date) -> date:
    return d.replace(day=length_of_month(d))


def with_day_of_year(d: date, n: int) -> date:
    """
    Return the date with day-of-year ``n`` in the year of ``d``.

    Args:
        d: Any date in the target year
        n: 1-based day of year; values past the end of the year clamp to Dec 31

    Raises:
        ValueError: If ``n`` is less than 1
    """
    if n < 1:
        raise ValueError(f"day of year must be at least 1, got {n}")
    n = min(n, length_of_year(d))
    return date(d.year, 1, 1) + timedelta(days=n - 1)


def with_day_of_month(d: date, n: int) -> date:
    """
    Return the date with day-of-month ``n`` in the month of ``d``.

    Args:
        d: Any date in the target month
        n: 1-based day of month; values past the end of the month clamp to its last day

    Raises:
        ValueError: If ``n`` is less than 1
    """
    if n < 1:
        raise ValueError(f"day of month must be at least 1, got {n}")
    return d.replace(day=min(n, length_of_month(d)))


def with_weekday(d: date, weekday: int) -> date:
    """Move ``d`` to ``weekday`` (0=Monday) within its Monday-based week."""
    return d + timedelta(days=weekday - d.weekday())


def before(a: date, b: date) -> bool:
    """Strict ordering: ``a`` is earlier than ``b``."""
    return a < b


def plus_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def plus_weeks(d: date, n: int) -> date:
    return d + timedelta(days=n * DAYS_PER_WEEK)


def plus_months(d: date, n: int) -> date:
    return d + relativedelta(months=n)


def plus_years(d: date, n: int) -> date:
    return d + relativedelta(years=n)
