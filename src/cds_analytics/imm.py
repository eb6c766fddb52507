"""
IMM (International Monetary Market) dates.

Standard CDS accrue from and mature on IMM dates, the 20th of March,
June, September and December.
"""

from opendate import Date

from .dates import DateLike, to_date
from .tenor import Tenor, parse_tenor

# Standard IMM months
IMM_MONTHS = (3, 6, 9, 12)

# IMM day of month
IMM_DAY = 20


def is_imm_date(d: DateLike) -> bool:
    """
    Check if a date is an IMM date.

    Args:
        d: Date to check

    Returns
        True if the date is the 20th of an IMM month
    """
    od = to_date(d)
    return od.day == IMM_DAY and od.month in IMM_MONTHS


def next_imm_date(d: DateLike) -> Date:
    """
    First IMM date strictly after d.

    Args:
        d: Reference date

    Returns
        Next IMM date
    """
    od = to_date(d)
    year, month = od.year, od.month
    if month in IMM_MONTHS and od.day < IMM_DAY:
        return to_date(Date(year, month, IMM_DAY))
    month = (month // 3) * 3 + 3
    if month > 12:
        month -= 12
        year += 1
    return to_date(Date(year, month, IMM_DAY))


def previous_imm_date(d: DateLike) -> Date:
    """
    Last IMM date strictly before d.

    Args:
        d: Reference date

    Returns
        Previous IMM date
    """
    od = to_date(d)
    year, month = od.year, od.month
    if month in IMM_MONTHS and od.day > IMM_DAY:
        return to_date(Date(year, month, IMM_DAY))
    month = ((month - 1) // 3) * 3
    if month == 0:
        month = 12
        year -= 1
    return to_date(Date(year, month, IMM_DAY))


def imm_maturity(trade_date: DateLike, tenor: 'str | Tenor') -> Date:
    """
    Standard maturity of a CDS: the next IMM date after the trade date
    rolled forward by the tenor.
    """
    return parse_tenor(tenor).add_to(next_imm_date(trade_date))
