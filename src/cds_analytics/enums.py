"""
Enumeration types for the CDS analytics library.

These enums define the market conventions and the pricing choices
(accrual-on-default formula, clean/dirty price, bump type) used
throughout the package.
"""

from enum import Enum, auto


def _normalize(s: str) -> str:
    return s.upper().replace(' ', '').replace('_', '').replace('-', '')


class DayCountConvention(Enum):
    """Day count conventions for calculating year fractions.

    Values correspond to opendate Interval.yearfrac() basis parameter:
    - 0 = US (NASD) 30/360
    - 2 = Actual/360
    - 3 = Actual/365
    """

    ACT_360 = 2       # Actual/360 - opendate basis=2
    ACT_365F = 3      # Actual/365 Fixed - opendate basis=3
    THIRTY_360 = 0    # US 30/360 - opendate basis=0

    @classmethod
    def from_string(cls, s: str) -> 'DayCountConvention':
        """Parse a day count convention from string."""
        mapping = {
            'ACT/360': cls.ACT_360,
            'ACT360': cls.ACT_360,
            'A360': cls.ACT_360,
            'ACT/365F': cls.ACT_365F,
            'ACT/365': cls.ACT_365F,
            'ACT365': cls.ACT_365F,
            'ACT365F': cls.ACT_365F,
            'A365F': cls.ACT_365F,
            '30/360': cls.THIRTY_360,
            '30360': cls.THIRTY_360,
        }
        key = s.upper().replace(' ', '')
        if key not in mapping:
            raise ValueError(f'Unknown day count convention: {s}')
        return mapping[key]


class BadDayConvention(Enum):
    """Business day adjustment conventions."""

    NONE = auto()
    FOLLOWING = auto()
    MODIFIED_FOLLOWING = auto()  # Unless it crosses a month boundary
    PRECEDING = auto()

    @classmethod
    def from_string(cls, s: str) -> 'BadDayConvention':
        """Parse a bad day convention from string."""
        mapping = {
            'NONE': cls.NONE,
            'N': cls.NONE,
            'FOLLOWING': cls.FOLLOWING,
            'F': cls.FOLLOWING,
            'MODIFIEDFOLLOWING': cls.MODIFIED_FOLLOWING,
            'MODFOLLOWING': cls.MODIFIED_FOLLOWING,
            'MF': cls.MODIFIED_FOLLOWING,
            'PRECEDING': cls.PRECEDING,
            'P': cls.PRECEDING,
        }
        key = _normalize(s)
        if key not in mapping:
            raise ValueError(f'Unknown bad day convention: {s}')
        return mapping[key]


class StubMethod(Enum):
    """Stub period conventions for CDS schedules."""

    FRONT_SHORT = auto()    # Short first period
    FRONT_LONG = auto()     # Long first period
    BACK_SHORT = auto()     # Short last period
    BACK_LONG = auto()      # Long last period

    @property
    def is_front(self) -> bool:
        """True when the stub sits at the start of the schedule."""
        return self in {StubMethod.FRONT_SHORT, StubMethod.FRONT_LONG}

    @property
    def is_long(self) -> bool:
        """True when the stub is merged into its neighbouring period."""
        return self in {StubMethod.FRONT_LONG, StubMethod.BACK_LONG}

    @classmethod
    def from_string(cls, s: str) -> 'StubMethod':
        """Parse a stub method from string."""
        mapping = {
            'FRONTSHORT': cls.FRONT_SHORT,
            'SHORTFRONT': cls.FRONT_SHORT,
            'SHORTINITIAL': cls.FRONT_SHORT,
            'FRONTLONG': cls.FRONT_LONG,
            'LONGFRONT': cls.FRONT_LONG,
            'LONGINITIAL': cls.FRONT_LONG,
            'BACKSHORT': cls.BACK_SHORT,
            'SHORTBACK': cls.BACK_SHORT,
            'SHORTFINAL': cls.BACK_SHORT,
            'BACKLONG': cls.BACK_LONG,
            'LONGBACK': cls.BACK_LONG,
            'LONGFINAL': cls.BACK_LONG,
        }
        key = _normalize(s)
        if key not in mapping:
            raise ValueError(f'Unknown stub method: {s}')
        return mapping[key]


class PaymentFrequency(Enum):
    """Payment frequency for CDS fee leg."""

    QUARTERLY = 3    # Standard CDS payment frequency
    SEMI_ANNUAL = 6
    ANNUAL = 12
    MONTHLY = 1

    @property
    def months(self) -> int:
        """Return the number of months between payments."""
        return self.value

    @classmethod
    def from_string(cls, s: str) -> 'PaymentFrequency':
        """Parse payment frequency from string."""
        mapping = {
            'Q': cls.QUARTERLY,
            'QUARTERLY': cls.QUARTERLY,
            '3M': cls.QUARTERLY,
            'S': cls.SEMI_ANNUAL,
            'SEMIANNUAL': cls.SEMI_ANNUAL,
            '6M': cls.SEMI_ANNUAL,
            'A': cls.ANNUAL,
            'ANNUAL': cls.ANNUAL,
            '1Y': cls.ANNUAL,
            '12M': cls.ANNUAL,
            'M': cls.MONTHLY,
            'MONTHLY': cls.MONTHLY,
            '1M': cls.MONTHLY,
        }
        key = _normalize(s)
        if key not in mapping:
            raise ValueError(f'Unknown payment frequency: {s}')
        return mapping[key]


class AccrualOnDefaultFormula(Enum):
    """
    Approximation used for the premium accrued at the default time.

    ORIGINAL_ISDA is the formula of the ISDA C library, including its
    half-day offset. MARKIT_FIX is the Markit variant that drops the
    running accrual time from the integrand. CORRECT integrates the
    accrual exactly with no offset.
    """

    ORIGINAL_ISDA = auto()
    MARKIT_FIX = auto()
    CORRECT = auto()

    @property
    def omega(self) -> float:
        """Accrual time offset (half a day for the original ISDA formula)."""
        return 1.0 / 730.0 if self is AccrualOnDefaultFormula.ORIGINAL_ISDA else 0.0

    @classmethod
    def from_string(cls, s: str) -> 'AccrualOnDefaultFormula':
        """Parse an accrual-on-default formula from string."""
        mapping = {
            'ORIGINALISDA': cls.ORIGINAL_ISDA,
            'ISDA': cls.ORIGINAL_ISDA,
            'MARKITFIX': cls.MARKIT_FIX,
            'MARKIT': cls.MARKIT_FIX,
            'CORRECT': cls.CORRECT,
        }
        key = _normalize(s)
        if key not in mapping:
            raise ValueError(f'Unknown accrual on default formula: {s}')
        return mapping[key]


class PriceType(Enum):
    """Whether a premium leg value includes the accrued coupon."""

    CLEAN = auto()
    DIRTY = auto()

    @classmethod
    def from_string(cls, s: str) -> 'PriceType':
        """Parse a price type from string."""
        key = _normalize(s)
        if key not in {'CLEAN', 'DIRTY'}:
            raise ValueError(f'Unknown price type: {s}')
        return cls[key]


class ShiftType(Enum):
    """How a bump is applied to a market spread."""

    ABSOLUTE = auto()
    RELATIVE = auto()

    def apply(self, value: float, amount: float) -> float:
        """Return value shifted by amount."""
        if self is ShiftType.ABSOLUTE:
            return value + amount
        return value * (1.0 + amount)

    @classmethod
    def from_string(cls, s: str) -> 'ShiftType':
        """Parse a shift type from string."""
        key = _normalize(s)
        if key not in {'ABSOLUTE', 'RELATIVE'}:
            raise ValueError(f'Unknown shift type: {s}')
        return cls[key]


class FiniteDifferenceType(Enum):
    """Finite difference scheme for bump-and-reprice sensitivities."""

    FORWARD = auto()
    CENTRAL = auto()
    BACKWARD = auto()

    @classmethod
    def from_string(cls, s: str) -> 'FiniteDifferenceType':
        """Parse a finite difference scheme from string."""
        key = _normalize(s)
        if key not in {'FORWARD', 'CENTRAL', 'BACKWARD'}:
            raise ValueError(f'Unknown finite difference type: {s}')
        return cls[key]
