"""
Date utilities for CDS schedules.

Uses opendate.Date as the primary date type.
"""

from datetime import date, datetime

from opendate import CustomCalendar, Date, register_calendar
from opendate import set_default_calendar

from .enums import BadDayConvention, DayCountConvention
from .exceptions import ArgumentError

# CDS conventions roll on weekends only; holidays are not modelled
WEEKENDS_ONLY = CustomCalendar(
    name='WEEKENDS_ONLY',
    holidays=set(),
    weekmask='Mon Tue Wed Thu Fri',
)
register_calendar('WEEKENDS_ONLY', WEEKENDS_ONLY)
set_default_calendar('WEEKENDS_ONLY')


# Inputs accepted wherever a date is expected
DateLike = Date | date | datetime | str


def to_date(d: DateLike) -> Date:
    """Normalize a date-like input to an opendate.Date on the weekends-only calendar."""
    if isinstance(d, Date):
        return d.calendar(WEEKENDS_ONLY)
    if isinstance(d, datetime):
        return Date.instance(d.date()).calendar(WEEKENDS_ONLY)
    if isinstance(d, date):
        return Date.instance(d).calendar(WEEKENDS_ONLY)
    if isinstance(d, str):
        result = Date.parse(d)
        if result is None:
            raise ArgumentError(f'Cannot parse date: {d!r}')
        return result.calendar(WEEKENDS_ONLY)
    raise TypeError(f'Expected Date, date, datetime, or string, got {type(d)}')


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed number of calendar days from start to end."""
    return to_date(end).toordinal() - to_date(start).toordinal()


def year_fraction(
    start: DateLike,
    end: DateLike,
    convention: DayCountConvention = DayCountConvention.ACT_360,
) -> float:
    """
    Calculate the year fraction between two dates.

    The result is negative when end is before start, which is how times
    of past dates (e.g. an accrual start before the trade date) are
    represented.

    Args:
        start: Start date
        end: End date
        convention: Day count convention to use

    Returns
        Year fraction as a float
    """
    d1 = to_date(start)
    d2 = to_date(end)

    if convention == DayCountConvention.ACT_360:
        return days_between(d1, d2) / 360.0

    if convention == DayCountConvention.ACT_365F:
        return days_between(d1, d2) / 365.0

    if convention == DayCountConvention.THIRTY_360:
        if d2 < d1:
            return -year_fraction(d2, d1, convention)
        y1, m1, d1_day = d1.year, d1.month, d1.day
        y2, m2, d2_day = d2.year, d2.month, d2.day
        if d1_day == 31:
            d1_day = 30
        if d2_day == 31 and d1_day >= 30:
            d2_day = 30
        return (360 * (y2 - y1) + 30 * (m2 - m1) + (d2_day - d1_day)) / 360.0

    raise ArgumentError(f'Unsupported day count convention: {convention}')


def add_days(d: DateLike, days: int) -> Date:
    """Add calendar days to a date."""
    od = to_date(d)
    return od.add(days=days) if days >= 0 else od.subtract(days=-days)


def add_months(d: DateLike, months: int) -> Date:
    """Add months to a date."""
    od = to_date(d)
    return od.add(months=months) if months >= 0 else od.subtract(months=-months)


def add_business_days(d: DateLike, days: int) -> Date:
    """Add business days to a date."""
    od = to_date(d)
    if days == 0:
        return od
    return od.b.add(days=days) if days > 0 else od.b.subtract(days=abs(days))


def is_business_day(d: DateLike) -> bool:
    """Check if a date is a business day."""
    return to_date(d).is_business_day()


def adjust_date(
    d: DateLike,
    convention: BadDayConvention = BadDayConvention.FOLLOWING,
) -> Date:
    """
    Roll a date that falls on a non-business day.

    opendate snaps with a zero-day business move: `.b.add(days=0)` goes to
    the next business day, `.b.subtract(days=0)` to the previous one.
    """
    od = to_date(d)
    if convention == BadDayConvention.NONE or od.is_business_day():
        return od
    if convention == BadDayConvention.PRECEDING:
        return od.b.subtract(days=0)
    following = od.b.add(days=0)
    if convention == BadDayConvention.FOLLOWING:
        return following
    if convention == BadDayConvention.MODIFIED_FOLLOWING:
        return following if following.month == od.month else od.b.subtract(days=0)
    raise ArgumentError(f'Unsupported bad day convention: {convention}')
