"""
Tenor parsing for CDS maturities and coupon intervals.

A tenor is a period such as "6M" or "5Y" added to a reference date to
obtain a maturity.
"""

import re
from dataclasses import dataclass

from opendate import Date

from .dates import DateLike, add_days, add_months, to_date

_TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$')


@dataclass(frozen=True)
class Tenor:
    """
    A calendar period.

    Attributes
        value: Number of units (e.g. 3 for "3M")
        unit: One of 'D', 'W', 'M', 'Y'
    """

    value: int
    unit: str

    def __post_init__(self):
        if self.unit not in {'D', 'W', 'M', 'Y'}:
            raise ValueError(f'Invalid tenor unit: {self.unit}')

    def __str__(self) -> str:
        return f'{self.value}{self.unit}'

    @property
    def months(self) -> int:
        """Length in months; zero for day and week tenors."""
        if self.unit == 'M':
            return self.value
        if self.unit == 'Y':
            return 12 * self.value
        return 0

    def add_to(self, d: DateLike) -> Date:
        """Unadjusted date one tenor after d."""
        if self.unit == 'D':
            return add_days(d, self.value)
        if self.unit == 'W':
            return add_days(d, 7 * self.value)
        return add_months(to_date(d), self.months)


def parse_tenor(s: 'str | Tenor') -> Tenor:
    """
    Parse a tenor string such as "6M", "1Y" or "10Y".

    Tenor instances are returned unchanged.
    """
    if isinstance(s, Tenor):
        return s
    match = _TENOR_PATTERN.match(s.strip().upper())
    if match is None:
        raise ValueError(f'Cannot parse tenor: {s}')
    return Tenor(int(match.group(1)), match.group(2))
