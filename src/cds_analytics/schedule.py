"""
CDS coupon schedules.

Two representations are used. `CouponPeriod` is the date-level premium
leg period produced by the ISDA schedule rules. `CdsSchedule` is the
analytic form consumed by the pricer: every date becomes a year fraction
from the trade date under the curve day count, with the one-day
protection offset already applied.
"""

from dataclasses import dataclass, replace

from opendate import Date

from .dates import DateLike, add_days, add_months, adjust_date, to_date
from .dates import year_fraction
from .enums import BadDayConvention, DayCountConvention, PaymentFrequency
from .enums import StubMethod
from .exceptions import ArgumentError

# Tolerance for period contiguity checks on times
_TIME_TOLERANCE = 1e-12


@dataclass(frozen=True)
class CouponPeriod:
    """
    Represents a single coupon payment period.

    Attributes
        accrual_start: Start of accrual period
        accrual_end: End of accrual period
        payment_date: Date when payment is made
        year_fraction: Accrual year fraction for this period
    """

    accrual_start: Date
    accrual_end: Date
    payment_date: Date
    year_fraction: float

    def __repr__(self) -> str:
        return (
            f'CouponPeriod({self.accrual_start}, {self.accrual_end}, '
            f'yf={self.year_fraction:.6f})'
        )


def _unadjusted_dates(
    start: Date,
    end: Date,
    months: int,
    stub: StubMethod,
) -> list[Date]:
    """Roll dates from one end of the schedule, leaving the stub at the other."""
    if stub.is_front:
        dates = [end]
        k = 1
        while True:
            d = add_months(end, -k * months)
            if d <= start:
                break
            dates.append(d)
            k += 1
        has_stub = d < start
        dates.append(start)
        dates.reverse()
        if stub.is_long and has_stub and len(dates) > 2:
            del dates[1]
        return dates

    dates = [start]
    k = 1
    while True:
        d = add_months(start, k * months)
        if d >= end:
            break
        dates.append(d)
        k += 1
    has_stub = d > end
    dates.append(end)
    if stub.is_long and has_stub and len(dates) > 2:
        del dates[-2]
    return dates


def generate_coupon_periods(
    accrual_start: DateLike,
    maturity: DateLike,
    frequency: PaymentFrequency = PaymentFrequency.QUARTERLY,
    stub: StubMethod = StubMethod.FRONT_SHORT,
    bad_day: BadDayConvention = BadDayConvention.FOLLOWING,
    day_count: DayCountConvention = DayCountConvention.ACT_360,
    protect_start: bool = True,
) -> list[CouponPeriod]:
    """
    Generate the premium leg periods of a CDS following the ISDA rules.

    Intermediate accrual dates are business-day adjusted; the first
    accrual start is used as given and the final accrual end is the
    unadjusted maturity. When protection starts at the beginning of the
    day the final accrual end is moved one day later, so the last coupon
    accrues the maturity date itself.

    Args:
        accrual_start: Start of first accrual period (typically previous IMM date)
        maturity: CDS maturity date
        frequency: Coupon frequency
        stub: Where the irregular period goes and whether it is merged
        bad_day: Business day adjustment for accrual and payment dates
        day_count: Accrual day count (ACT/360 for standard CDS)
        protect_start: Protection from the start of the day

    Returns
        List of coupon periods in date order
    """
    start = to_date(accrual_start)
    end = to_date(maturity)
    if end <= start:
        raise ArgumentError(f'Maturity {end} must be after accrual start {start}')

    unadjusted = _unadjusted_dates(start, end, frequency.months, stub)
    n = len(unadjusted) - 1

    periods = []
    acc_start = start
    for i in range(n):
        last = i == n - 1
        if last:
            acc_end = add_days(end, 1) if protect_start else end
        else:
            acc_end = adjust_date(unadjusted[i + 1], bad_day)
        pay_date = adjust_date(unadjusted[i + 1], bad_day)
        periods.append(CouponPeriod(
            accrual_start=acc_start,
            accrual_end=acc_end,
            payment_date=pay_date,
            year_fraction=year_fraction(acc_start, acc_end, day_count),
        ))
        acc_start = acc_end
    return periods


@dataclass(frozen=True)
class CdsCoupon:
    """
    One premium period in analytic form.

    Attributes
        effective_start: Time from which default triggers accrual payment
        effective_end: Time at which survival is observed for the coupon
        payment_time: Time of the coupon payment
        year_fraction: Accrual year fraction (accrual day count)
        yf_ratio: year_fraction over the curve-day-count length of the period
        period: Date-level period, when built from dates
    """

    effective_start: float
    effective_end: float
    payment_time: float
    year_fraction: float
    yf_ratio: float = 1.0
    period: CouponPeriod | None = None

    @classmethod
    def from_period(
        cls,
        trade_date: DateLike,
        period: CouponPeriod,
        protect_start: bool = True,
        curve_day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> 'CdsCoupon':
        """Convert a dated period to times from the trade date."""
        offset = -1 if protect_start else 0
        eff_start = add_days(period.accrual_start, offset)
        eff_end = add_days(period.accrual_end, offset)
        curve_yf = year_fraction(period.accrual_start, period.accrual_end, curve_day_count)
        return cls(
            effective_start=year_fraction(trade_date, eff_start, curve_day_count),
            effective_end=year_fraction(trade_date, eff_end, curve_day_count),
            payment_time=year_fraction(trade_date, period.payment_date, curve_day_count),
            year_fraction=period.year_fraction,
            yf_ratio=period.year_fraction / curve_yf,
            period=period,
        )


@dataclass(frozen=True)
class CdsSchedule:
    """
    Immutable analytic description of a single CDS.

    Times are year fractions from the trade date. The trade terms
    (coupon rate, notional and direction) are only used for trade-level
    present values; the leg functions take the spread explicitly.

    Attributes
        coupons: Premium periods in time order
        accrual_start: Time of the first accrual start (negative if in the past)
        effective_protection_start: Time from which protection applies
        protection_end: Time at which protection ends
        cash_settle_time: Time to which values are rolled
        accrued_year_fraction: Accrual from the start of the current period to step-in
        accrued_days: Calendar days of that accrual
        recovery_rate: Assumed recovery on default
        pay_accrual_on_default: Whether accrued premium is paid on default
        coupon_rate: Fixed coupon of the trade
        notional: Trade notional
        buy_protection: True for the protection buyer
    """

    coupons: tuple[CdsCoupon, ...]
    accrual_start: float
    effective_protection_start: float
    protection_end: float
    cash_settle_time: float = 0.0
    accrued_year_fraction: float = 0.0
    accrued_days: int = 0
    recovery_rate: float = 0.4
    pay_accrual_on_default: bool = True
    coupon_rate: float = 0.01
    notional: float = 1.0
    buy_protection: bool = True
    trade_date: Date | None = None
    step_in_date: Date | None = None
    cash_settle_date: Date | None = None
    accrual_start_date: Date | None = None
    maturity: Date | None = None

    def __post_init__(self):
        object.__setattr__(self, 'coupons', tuple(self.coupons))
        if not 0.0 <= self.recovery_rate <= 1.0:
            raise ArgumentError(f'Recovery rate must be in [0, 1], got {self.recovery_rate}')
        if self.is_expired:
            return
        if not self.coupons:
            raise ArgumentError('A live CDS needs at least one coupon period')
        for prev, nxt in zip(self.coupons, self.coupons[1:]):
            if abs(prev.effective_end - nxt.effective_start) > _TIME_TOLERANCE:
                raise ArgumentError(
                    f'Coupon periods are not contiguous: {prev.effective_end} '
                    f'then {nxt.effective_start}'
                )
        if abs(self.coupons[-1].effective_end - self.protection_end) > _TIME_TOLERANCE:
            raise ArgumentError(
                f'Last period ends at {self.coupons[-1].effective_end}, '
                f'protection ends at {self.protection_end}'
            )

    @property
    def num_payments(self) -> int:
        """Number of remaining coupon periods."""
        return len(self.coupons)

    @property
    def lgd(self) -> float:
        """Loss given default, 1 - recovery."""
        return 1.0 - self.recovery_rate

    @property
    def is_expired(self) -> bool:
        """True when protection has already ended."""
        return self.protection_end <= 0.0

    @property
    def direction(self) -> float:
        """+1 for the protection buyer, -1 for the seller."""
        return 1.0 if self.buy_protection else -1.0

    def with_coupon(self, coupon_rate: float) -> 'CdsSchedule':
        """Same schedule with a different fixed coupon."""
        return replace(self, coupon_rate=coupon_rate)

    def with_recovery_rate(self, recovery_rate: float) -> 'CdsSchedule':
        """Same schedule with a different recovery assumption."""
        return replace(self, recovery_rate=recovery_rate)

    def with_notional(self, notional: float) -> 'CdsSchedule':
        """Same schedule with a different notional."""
        return replace(self, notional=notional)

    def with_direction(self, buy_protection: bool) -> 'CdsSchedule':
        """Same schedule seen from the buyer (True) or seller (False)."""
        return replace(self, buy_protection=buy_protection)
