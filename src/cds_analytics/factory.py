"""
Construction of analytic CDS schedules from trade dates.

The factory holds a set of market conventions and turns (trade date,
accrual start, maturity) triples into CdsSchedule objects, including the
standard IMM-dated contracts.
"""

from dataclasses import replace
from collections.abc import Sequence

from .config import DEFAULT_CONVENTIONS, CdsConventions
from .dates import DateLike, add_business_days, add_days, adjust_date
from .dates import days_between, to_date, year_fraction
from .exceptions import ArgumentError
from .imm import imm_maturity, next_imm_date, previous_imm_date
from .schedule import CdsCoupon, CdsSchedule, generate_coupon_periods
from .tenor import Tenor, parse_tenor


class CdsScheduleFactory:
    """
    Builds CdsSchedule objects under a fixed set of conventions.

    Example:
        >>> factory = CdsScheduleFactory().with_recovery_rate(0.25)
        >>> cds = factory.make_imm_cds('2013-04-21', '5Y')
    """

    def __init__(self, conventions: CdsConventions = DEFAULT_CONVENTIONS):
        self.conventions = conventions

    def __repr__(self) -> str:
        return f'CdsScheduleFactory({self.conventions})'

    def _with(self, **changes) -> 'CdsScheduleFactory':
        return CdsScheduleFactory(replace(self.conventions, **changes))

    def with_recovery_rate(self, recovery_rate: float) -> 'CdsScheduleFactory':
        """Factory with a different recovery assumption."""
        return self._with(recovery_rate=recovery_rate)

    def with_step_in(self, days: int) -> 'CdsScheduleFactory':
        """Factory with a different step-in lag."""
        return self._with(step_in_days=days)

    def with_cash_settle(self, days: int) -> 'CdsScheduleFactory':
        """Factory with a different cash settlement lag (business days)."""
        return self._with(cash_settle_days=days)

    def with_pay_accrual_on_default(self, pay: bool) -> 'CdsScheduleFactory':
        """Factory that does (or does not) pay accrued premium on default."""
        return self._with(pay_accrual_on_default=pay)

    def with_protect_start(self, protect_start: bool) -> 'CdsScheduleFactory':
        """Factory with protection from the start (True) or end of day."""
        return self._with(protect_start=protect_start)

    def with_conventions(self, **changes) -> 'CdsScheduleFactory':
        """Factory with any convention fields replaced."""
        return self._with(**changes)

    def make_cds(
        self,
        trade_date: DateLike,
        accrual_start: DateLike,
        maturity: DateLike,
        step_in_date: DateLike | None = None,
        cash_settle_date: DateLike | None = None,
        coupon_rate: float = 0.01,
        notional: float = 1.0,
        buy_protection: bool = True,
    ) -> CdsSchedule:
        """
        Build a CDS from its dates.

        Args:
            trade_date: Trade date; all times are measured from it
            accrual_start: Start of the first accrual period
            maturity: Protection end date
            step_in_date: Defaults to trade date plus the step-in lag
            cash_settle_date: Defaults to trade date plus the settlement lag
            coupon_rate: Fixed coupon of the trade
            notional: Trade notional
            buy_protection: True for the protection buyer

        Returns
            CdsSchedule
        """
        conv = self.conventions
        trade = to_date(trade_date)
        acc_start = to_date(accrual_start)
        mat = to_date(maturity)
        step_in = (
            add_days(trade, conv.step_in_days) if step_in_date is None
            else to_date(step_in_date)
        )
        cash_settle = (
            add_business_days(trade, conv.cash_settle_days) if cash_settle_date is None
            else to_date(cash_settle_date)
        )
        if step_in < trade:
            raise ArgumentError(f'Step-in date {step_in} is before trade date {trade}')

        periods = generate_coupon_periods(
            acc_start, mat,
            frequency=conv.frequency,
            stub=conv.stub,
            bad_day=conv.bad_day,
            day_count=conv.accrual_day_count,
            protect_start=conv.protect_start,
        )
        live = [p for p in periods if p.accrual_end > step_in]
        dc = conv.curve_day_count
        coupons = tuple(
            CdsCoupon.from_period(trade, p, conv.protect_start, dc) for p in live
        )

        accrued_yf = 0.0
        accrued_days = 0
        if live and step_in > live[0].accrual_start:
            accrued_yf = year_fraction(live[0].accrual_start, step_in, conv.accrual_day_count)
            accrued_days = days_between(live[0].accrual_start, step_in)

        offset = -1 if conv.protect_start else 0
        protection_start = add_days(max(acc_start, step_in), offset)

        return CdsSchedule(
            coupons=coupons,
            accrual_start=year_fraction(trade, acc_start, dc),
            effective_protection_start=year_fraction(trade, protection_start, dc),
            protection_end=year_fraction(trade, mat, dc),
            cash_settle_time=year_fraction(trade, cash_settle, dc),
            accrued_year_fraction=accrued_yf,
            accrued_days=accrued_days,
            recovery_rate=conv.recovery_rate,
            pay_accrual_on_default=conv.pay_accrual_on_default,
            coupon_rate=coupon_rate,
            notional=notional,
            buy_protection=buy_protection,
            trade_date=trade,
            step_in_date=step_in,
            cash_settle_date=cash_settle,
            accrual_start_date=acc_start,
            maturity=mat,
        )

    def make_cds_batch(
        self,
        trade_date: DateLike,
        accrual_start: DateLike,
        maturities: Sequence[DateLike],
    ) -> list[CdsSchedule]:
        """CDSs sharing trade date and accrual start, one per maturity."""
        if not maturities:
            raise ArgumentError('maturities must not be empty')
        return [self.make_cds(trade_date, accrual_start, m) for m in maturities]

    def imm_accrual_start(self, trade_date: DateLike, adjust: bool = True):
        """Previous IMM date, business-day adjusted unless adjust is False."""
        prev = previous_imm_date(trade_date)
        return adjust_date(prev, self.conventions.bad_day) if adjust else prev

    def make_imm_cds(
        self,
        trade_date: DateLike,
        tenor: 'str | Tenor',
        adjust_accrual_start: bool = True,
        **trade_terms,
    ) -> CdsSchedule:
        """
        Standard CDS: accrual from the previous IMM date, maturity on the
        next IMM date rolled by the tenor.
        """
        accrual_start = self.imm_accrual_start(trade_date, adjust_accrual_start)
        maturity = imm_maturity(trade_date, tenor)
        return self.make_cds(trade_date, accrual_start, maturity, **trade_terms)

    def make_imm_cds_batch(
        self,
        trade_date: DateLike,
        tenors: Sequence['str | Tenor'],
        adjust_accrual_start: bool = True,
    ) -> list[CdsSchedule]:
        """Standard CDSs for each tenor, e.g. the pillars of a credit curve."""
        if not tenors:
            raise ArgumentError('tenors must not be empty')
        accrual_start = self.imm_accrual_start(trade_date, adjust_accrual_start)
        return [
            self.make_cds(trade_date, accrual_start, imm_maturity(trade_date, t))
            for t in tenors
        ]

    def make_forward_starting_cds(
        self,
        trade_date: DateLike,
        forward_start: DateLike,
        maturity: DateLike,
        accrual_start: DateLike | None = None,
    ) -> CdsSchedule:
        """
        CDS whose protection starts at a future date; step-in and cash
        settlement are measured from the forward start date.
        """
        trade = to_date(trade_date)
        fwd = to_date(forward_start)
        if fwd < trade:
            raise ArgumentError(f'Forward start {fwd} is before trade date {trade}')
        conv = self.conventions
        if accrual_start is None:
            accrual_start = self.imm_accrual_start(fwd)
        return self.make_cds(
            trade, accrual_start, maturity,
            step_in_date=add_days(fwd, conv.step_in_days),
            cash_settle_date=add_business_days(fwd, conv.cash_settle_days),
        )

    def make_forward_starting_imm_cds(
        self,
        trade_date: DateLike,
        forward_start: DateLike,
        tenor: 'str | Tenor',
    ) -> CdsSchedule:
        """Forward starting CDS with a standard IMM maturity."""
        maturity = parse_tenor(tenor).add_to(next_imm_date(forward_start))
        return self.make_forward_starting_cds(trade_date, forward_start, maturity)
