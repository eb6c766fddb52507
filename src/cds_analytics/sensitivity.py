"""
Credit spread sensitivities (CS01).

Two calculators are provided:

- SpreadSensitivityCalculator works analytically. The pricer gives the
  derivative of the target PV and of each bucket par spread with respect
  to every credit curve knot; solving the resulting linear system
  converts knot risk into risk per unit of each bucket spread.
- FiniteDifferenceSpreadSensitivityCalculator bumps market quotes,
  recalibrates the credit curve and reprices. Results are PV changes
  divided by the bump, so a 1bp bump is given as 1e-4.
"""

import logging
from collections.abc import Sequence

import numpy as np

from .config import SolverConfig
from .credit_curve import CreditCurveBuilder, broadcast_values
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula, FiniteDifferenceType, PriceType, ShiftType
from .exceptions import ArgumentError, check_argument
from .hedging import solve_hedge
from .quote_converter import MarketQuoteConverter
from .quotes import CdsQuote, ParSpread, PointsUpFront, QuotedSpread
from .schedule import CdsSchedule

logger = logging.getLogger(__name__)

# Smallest bump that gives a meaningful difference quotient
_MIN_BUMP = 1e-10


def _check_bump(bump: float) -> None:
    check_argument(abs(bump) > _MIN_BUMP, f'Bump amount {bump} is too small')


def _bumped(values: Sequence[float], amount: float, shift_type: ShiftType,
            index: int | None = None) -> list[float]:
    """New list with one value (or all, when index is None) shifted."""
    if index is None:
        return [shift_type.apply(v, amount) for v in values]
    out = list(values)
    out[index] = shift_type.apply(out[index], amount)
    return out


class SpreadSensitivityCalculator:
    """
    Analytic bucketed and parallel CS01.

    Example:
        >>> calc = SpreadSensitivityCalculator()
        >>> cs01 = calc.bucketed_cs01(cds, 0.01, pillars, yield_curve, credit_curve)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        config: SolverConfig | None = None,
    ):
        self.builder = CreditCurveBuilder(formula, config)
        self.pricer = self.builder.pricer

    def __repr__(self) -> str:
        return f'SpreadSensitivityCalculator({self.pricer.formula.name})'

    def spread_jacobian(
        self,
        buckets: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """J[i, j] = d(par spread of bucket j)/dRT_i, shape (num_knots, len(buckets))."""
        check_argument(len(buckets) > 0, 'No bucket CDSs supplied')
        return np.array([
            [
                self.pricer.par_spread_credit_sensitivity(b, discount_curve, credit_curve, i)
                for b in buckets
            ]
            for i in range(credit_curve.num_knots)
        ])

    def bucketed_cs01(
        self,
        target: CdsSchedule,
        coupon: float,
        buckets: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """
        Sensitivity of the target PV to the par spread of each bucket CDS.

        Args:
            target: CDS whose risk is measured
            coupon: Premium paid by the target
            buckets: Bucket CDSs, at least as many as credit curve knots
            discount_curve: Risk-free curve
            credit_curve: Credit curve

        Returns
            dPV/dS_j per unit spread for each bucket

        Raises
            UnderDeterminedHedgeError: If there are fewer buckets than knots
        """
        jac = self.spread_jacobian(buckets, discount_curve, credit_curve)
        v = self.pricer.pv_credit_sensitivities(
            target, discount_curve, credit_curve, coupon, PriceType.CLEAN
        )
        logger.debug('Bucketed CS01 over %d buckets and %d knots', len(buckets), len(v))
        return solve_hedge(jac, v)

    def bucketed_cs01_from_par_spreads(
        self,
        target: CdsSchedule,
        coupon: float,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        discount_curve: DiscountCurve,
    ) -> np.ndarray:
        """Bucketed CS01 against the pillars, calibrating the curve from their par spreads."""
        curve = self.builder.calibrate_par_spreads(pillars, spreads, discount_curve)
        return self.bucketed_cs01(target, coupon, pillars, discount_curve, curve)

    def bucketed_cs01_from_quotes(
        self,
        target: CdsSchedule,
        coupon: float,
        pillars: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        discount_curve: DiscountCurve,
    ) -> np.ndarray:
        """Bucketed CS01 against the pillars, calibrating the curve from their quotes."""
        curve = self.builder.calibrate(pillars, quotes, discount_curve)
        return self.bucketed_cs01(target, coupon, pillars, discount_curve, curve)

    def parallel_cs01(
        self,
        target: CdsSchedule,
        coupon: float,
        pillars: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> float:
        """Sensitivity to a parallel shift of all pillar par spreads, per unit spread."""
        return float(np.sum(self.bucketed_cs01(target, coupon, pillars, discount_curve, credit_curve)))

    def parallel_cs01_from_par_spreads(
        self,
        target: CdsSchedule,
        coupon: float,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        discount_curve: DiscountCurve,
    ) -> float:
        """Parallel CS01 off the curve calibrated from the pillar par spreads."""
        return float(np.sum(
            self.bucketed_cs01_from_par_spreads(target, coupon, pillars, spreads, discount_curve)
        ))


class FiniteDifferenceSpreadSensitivityCalculator:
    """
    Bump-and-recalibrate CS01.

    Example:
        >>> calc = FiniteDifferenceSpreadSensitivityCalculator()
        >>> cs01 = calc.parallel_cs01(cds, QuotedSpread(0.01, 0.015), yield_curve, 1e-4)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        config: SolverConfig | None = None,
    ):
        self.converter = MarketQuoteConverter(formula, config)
        self.builder = self.converter.builder
        self.pricer = self.converter.pricer

    def __repr__(self) -> str:
        return f'FiniteDifferenceSpreadSensitivityCalculator({self.pricer.formula.name})'

    # Parallel CS01

    def parallel_cs01(
        self,
        schedule: CdsSchedule,
        quote: CdsQuote,
        discount_curve: DiscountCurve,
        bump: float,
    ) -> float:
        """
        Parallel CS01 of a CDS from its own market quote, on a flat curve.

        Args:
            schedule: CDS to measure
            quote: Market quote of the CDS
            discount_curve: Risk-free curve
            bump: Spread bump as a fraction (1e-4 for 1bp)

        Returns
            PV change per unit spread
        """
        if isinstance(quote, QuotedSpread):
            return self.parallel_cs01_from_par_spreads(
                schedule, quote.coupon, discount_curve,
                [schedule], [quote.quoted_spread], bump, ShiftType.ABSOLUTE,
            )
        if isinstance(quote, PointsUpFront):
            return self.parallel_cs01_from_puf(
                schedule, quote.coupon, discount_curve, quote.puf, bump
            )
        if isinstance(quote, ParSpread):
            return self.parallel_cs01_from_par_spreads(
                schedule, quote.spread, discount_curve,
                [schedule], [quote.spread], bump, ShiftType.ABSOLUTE,
            )
        raise ArgumentError(f'Unsupported quote type {type(quote).__name__}')

    def parallel_cs01_from_puf(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        puf: float,
        bump: float,
    ) -> float:
        """Parallel CS01 of a CDS quoted as points up front, bumping its quoted spread."""
        _check_bump(bump)
        qs = self.converter.puf_to_quoted_spread(schedule, coupon, discount_curve, puf)
        bumped = self.builder.calibrate_single(schedule, ParSpread(qs + bump), discount_curve)
        price = self.pricer.pv(schedule, discount_curve, bumped, coupon)
        return (price - puf) / bump

    def parallel_cs01_from_par_spreads(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> float:
        """
        Parallel CS01 from bumping every pillar par spread at once.

        Prices are DIRTY, so the accrued premium cancels in the difference.
        """
        _check_bump(bump)
        check_argument(
            len(pillars) == len(spreads),
            f'{len(pillars)} pillars but {len(spreads)} spreads',
        )
        up = _bumped(spreads, bump, shift_type)
        diff = self._price_difference(
            schedule, coupon, discount_curve, pillars, up, spreads, PriceType.DIRTY
        )
        return diff / bump

    def parallel_cs01_from_credit_curve(
        self,
        schedule: CdsSchedule,
        coupon: float,
        pillars: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        bump: float,
    ) -> float:
        """Parallel CS01 from bumping the par spreads the credit curve implies at the pillars."""
        _check_bump(bump)
        spreads = self._implied_spreads(pillars, discount_curve, credit_curve)
        base = self.builder.calibrate_par_spreads(pillars, spreads, discount_curve)
        bumped = self.builder.calibrate_par_spreads(
            pillars, _bumped(spreads, bump, ShiftType.ABSOLUTE), discount_curve
        )
        base_price = self.pricer.pv(schedule, discount_curve, base, coupon)
        price = self.pricer.pv(schedule, discount_curve, bumped, coupon)
        return (price - base_price) / bump

    def parallel_cs01_from_pillar_quotes(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        bump: float,
    ) -> float:
        """Parallel CS01 from bumping every pillar quote in its own convention."""
        _check_bump(bump)
        base = self.builder.calibrate(pillars, quotes, discount_curve)
        bumped_quotes = self.bump_quotes(pillars, quotes, discount_curve, bump)
        bumped = self.builder.calibrate(pillars, bumped_quotes, discount_curve)
        base_price = self.pricer.pv(schedule, discount_curve, base, coupon)
        price = self.pricer.pv(schedule, discount_curve, bumped, coupon)
        return (price - base_price) / bump

    # Bucketed CS01

    def bucketed_cs01_from_pillar_quotes(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        bump: float,
    ) -> np.ndarray:
        """CS01 to each pillar quote, bumped one at a time in its own convention."""
        _check_bump(bump)
        check_argument(
            len(pillars) == len(quotes),
            f'{len(pillars)} pillars but {len(quotes)} quotes',
        )
        base = self.builder.calibrate(pillars, quotes, discount_curve)
        base_price = self.pricer.pv(schedule, discount_curve, base, coupon)
        result = np.zeros(len(pillars))
        for i, pillar in enumerate(pillars):
            bumped_quotes = list(quotes)
            bumped_quotes[i] = self.bump_quote(pillar, quotes[i], discount_curve, bump)
            curve = self.builder.calibrate(pillars, bumped_quotes, discount_curve)
            result[i] = (self.pricer.pv(schedule, discount_curve, curve, coupon) - base_price) / bump
        return result

    def bucketed_cs01_from_par_spreads(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> np.ndarray:
        """CS01 to each pillar par spread, bumped one at a time, on DIRTY prices."""
        _check_bump(bump)
        check_argument(
            len(pillars) == len(spreads),
            f'{len(pillars)} pillars but {len(spreads)} spreads',
        )
        base = self.builder.calibrate_par_spreads(pillars, spreads, discount_curve)
        base_price = self.pricer.pv(schedule, discount_curve, base, coupon, PriceType.DIRTY)
        result = np.zeros(len(pillars))
        for i in range(len(pillars)):
            curve = self.builder.calibrate_par_spreads(
                pillars, _bumped(spreads, bump, shift_type, i), discount_curve
            )
            price = self.pricer.pv(schedule, discount_curve, curve, coupon, PriceType.DIRTY)
            result[i] = (price - base_price) / bump
        return result

    def bucketed_cs01_from_quoted_spreads(
        self,
        schedule: CdsSchedule,
        deal_spread: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        quoted_spreads: Sequence[float],
        bump: float,
        shift_type: ShiftType = ShiftType.ABSOLUTE,
    ) -> np.ndarray:
        """
        CS01 to each pillar quoted spread, bumped one at a time.

        Every pillar is assumed to pay deal_spread. Each bumped quoted
        spread is turned into an upfront on its flat curve and the full
        curve is recalibrated from the upfronts.
        """
        _check_bump(bump)
        check_argument(
            len(pillars) == len(quoted_spreads),
            f'{len(pillars)} pillars but {len(quoted_spreads)} quoted spreads',
        )
        pufs = self.converter.quoted_spreads_to_puf(
            pillars, deal_spread, discount_curve, quoted_spreads
        )
        base = self.builder.calibrate_puf(pillars, deal_spread, pufs, discount_curve)
        base_price = self.pricer.pv(schedule, discount_curve, base, deal_spread, PriceType.DIRTY)
        result = np.zeros(len(pillars))
        for i, pillar in enumerate(pillars):
            bumped_pufs = pufs.copy()
            bumped_pufs[i] = self.converter.quoted_spread_to_puf(
                pillar, deal_spread, discount_curve, shift_type.apply(quoted_spreads[i], bump)
            )
            curve = self.builder.calibrate_puf(pillars, deal_spread, bumped_pufs, discount_curve)
            price = self.pricer.pv(schedule, discount_curve, curve, deal_spread, PriceType.DIRTY)
            result[i] = (price - base_price) / bump
        return result

    def bucketed_cs01_from_credit_curve(
        self,
        schedule: CdsSchedule,
        coupon: float,
        buckets: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        bump: float,
    ) -> np.ndarray:
        """
        CS01 to the par spread each bucket CDS implies off the credit curve.

        Buckets maturing after the first one at or beyond the target's
        protection end cannot move its price and are left at zero.
        """
        _check_bump(bump)
        spreads = self._implied_spreads(buckets, discount_curve, credit_curve)
        n = len(buckets)
        ends = np.array([b.protection_end for b in buckets])
        last = min(int(np.searchsorted(ends, schedule.protection_end)), n - 1)

        base = self.builder.calibrate_par_spreads(buckets, spreads, discount_curve)
        base_price = self.pricer.pv(schedule, discount_curve, base, coupon)
        result = np.zeros(n)
        for i in range(last + 1):
            curve = self.builder.calibrate_par_spreads(
                buckets, _bumped(spreads, bump, ShiftType.ABSOLUTE, i), discount_curve
            )
            result[i] = (self.pricer.pv(schedule, discount_curve, curve, coupon) - base_price) / bump
        logger.debug('Bucketed CS01 computed for %d of %d buckets', last + 1, n)
        return result

    def finite_difference_spread_sensitivity(
        self,
        schedule: CdsSchedule,
        spread: float,
        price_type: PriceType,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        deltas: Sequence[float],
        fd_type: FiniteDifferenceType | str = FiniteDifferenceType.CENTRAL,
    ) -> float:
        """
        PV difference between curves built from shifted pillar spreads.

        Each pillar spread is shifted by its own delta. The result is the
        raw PV difference, not divided by the shift:

        - CENTRAL: pv(spreads + deltas) - pv(spreads - deltas)
        - FORWARD: pv(spreads + deltas) - pv(spreads)
        - BACKWARD: pv(spreads) - pv(spreads - deltas)

        Raises
            ArgumentError: If lengths differ, a spread is not positive, a
                delta is negative, or a downward shift would reach zero
        """
        if isinstance(fd_type, str):
            fd_type = FiniteDifferenceType.from_string(fd_type)
        n = len(pillars)
        check_argument(n > 0, 'No pillar CDSs supplied')
        check_argument(len(spreads) == n, f'{n} pillars but {len(spreads)} spreads')
        check_argument(len(deltas) == n, f'{n} pillars but {len(deltas)} deltas')
        for s, d in zip(spreads, deltas):
            check_argument(s > 0.0, f'Spreads must be positive, got {s}')
            check_argument(d >= 0.0, f'Deltas must be non-negative, got {d}')
            check_argument(
                fd_type is FiniteDifferenceType.FORWARD or d < s,
                f'Delta {d} must be less than spread {s} unless using forward differences',
            )

        up = [s + d for s, d in zip(spreads, deltas)]
        down = [s - d for s, d in zip(spreads, deltas)]
        if fd_type is FiniteDifferenceType.CENTRAL:
            hi, lo = up, down
        elif fd_type is FiniteDifferenceType.FORWARD:
            hi, lo = up, list(spreads)
        else:
            hi, lo = list(spreads), down
        return self._price_difference(schedule, spread, discount_curve, pillars, hi, lo, price_type)

    # Quote bumping

    def bump_quote(
        self,
        schedule: CdsSchedule,
        quote: CdsQuote,
        discount_curve: DiscountCurve,
        eps: float,
    ) -> CdsQuote:
        """
        The quote with its spread raised by eps.

        Points up front are bumped through their quoted spread, so every
        convention moves by the same amount of spread.
        """
        if isinstance(quote, ParSpread):
            return ParSpread(quote.spread + eps)
        if isinstance(quote, QuotedSpread):
            return QuotedSpread(quote.coupon, quote.quoted_spread + eps)
        if isinstance(quote, PointsUpFront):
            qs = self.converter.puf_to_quoted_spread(schedule, quote.coupon, discount_curve, quote.puf)
            puf = self.converter.quoted_spread_to_puf(schedule, quote.coupon, discount_curve, qs + eps)
            return PointsUpFront(quote.coupon, puf)
        raise ArgumentError(f'Unsupported quote type {type(quote).__name__}')

    def bump_quotes(
        self,
        pillars: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        discount_curve: DiscountCurve,
        eps: float | Sequence[float],
    ) -> list[CdsQuote]:
        """bump_quote for each pillar; eps may be a single value."""
        check_argument(
            len(pillars) == len(quotes),
            f'{len(pillars)} pillars but {len(quotes)} quotes',
        )
        bumps = broadcast_values(eps, len(pillars), 'bumps')
        return [
            self.bump_quote(p, q, discount_curve, e)
            for p, q, e in zip(pillars, quotes, bumps)
        ]

    def _implied_spreads(
        self,
        pillars: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> list[float]:
        check_argument(len(pillars) > 0, 'No pillar CDSs supplied')
        ends = [p.protection_end for p in pillars]
        check_argument(
            all(b > a for a, b in zip(ends, ends[1:])),
            'Pillars must be in ascending maturity order',
        )
        return [self.pricer.par_spread(p, discount_curve, credit_curve) for p in pillars]

    def _price_difference(
        self,
        schedule: CdsSchedule,
        coupon: float,
        discount_curve: DiscountCurve,
        pillars: Sequence[CdsSchedule],
        spreads_up: Sequence[float],
        spreads_down: Sequence[float],
        price_type: PriceType,
    ) -> float:
        curve_up = self.builder.calibrate_par_spreads(pillars, spreads_up, discount_curve)
        curve_down = self.builder.calibrate_par_spreads(pillars, spreads_down, discount_curve)
        up = self.pricer.pv(schedule, discount_curve, curve_up, coupon, price_type)
        down = self.pricer.pv(schedule, discount_curve, curve_down, coupon, price_type)
        return up - down
