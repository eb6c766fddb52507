"""
Credit curve bootstrapping from CDS quotes.

Builds a piecewise constant hazard rate curve, one knot per pillar CDS at
its protection end, using the ISDA standard methodology: pillars are
taken in maturity order and the forward hazard rate of each new segment
is solved so that the pillar reprices its quote exactly, with the
earlier knots held fixed.
"""

import logging
from collections.abc import Sequence

import numpy as np

from .config import DEFAULT_SOLVER, SolverConfig
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .exceptions import CalibrationFailure, ConvergenceError, check_argument
from .pricer import AnalyticCdsPricer
from .quotes import CdsQuote, ParSpread, PointsUpFront, QuotedSpread, quote_target
from .root_finding import find_bracket, newton_bracketed
from .schedule import CdsSchedule

logger = logging.getLogger(__name__)


def broadcast_values(value: float | Sequence[float], n: int, name: str) -> list[float]:
    """Broadcast a scalar to n values, or check a sequence has n values."""
    if np.ndim(value) == 0:
        return [float(value)] * n
    values = [float(v) for v in value]
    check_argument(len(values) == n, f'Expected {n} {name}, got {len(values)}')
    return values


class CreditCurveBuilder:
    """
    Bootstraps credit curves from pillar CDSs and their market quotes.

    Example:
        >>> builder = CreditCurveBuilder()
        >>> curve = builder.calibrate_par_spreads(pillars, [0.007, 0.01, 0.012], yield_curve)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        config: SolverConfig | None = None,
    ):
        self.pricer = AnalyticCdsPricer(formula)
        self.config = DEFAULT_SOLVER if config is None else config

    def __repr__(self) -> str:
        return f'CreditCurveBuilder({self.formula.name})'

    @property
    def formula(self) -> AccrualOnDefaultFormula:
        return self.pricer.formula

    def calibrate(
        self,
        pillars: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        discount_curve: DiscountCurve,
    ) -> CreditCurve:
        """
        Bootstrap a credit curve that reprices every pillar at its quote.

        Args:
            pillars: Pillar CDSs with strictly increasing protection end
            quotes: One quote per pillar
            discount_curve: Risk-free curve

        Returns
            CreditCurve with one knot per pillar

        Raises
            ArgumentError: If inputs are empty, mismatched or out of order
            CalibrationFailure: If a pillar cannot be repriced
        """
        check_argument(len(pillars) > 0, 'No pillar CDSs supplied')
        check_argument(
            len(pillars) == len(quotes),
            f'{len(pillars)} pillars but {len(quotes)} quotes',
        )
        targets = [self._target(p, q, discount_curve) for p, q in zip(pillars, quotes)]
        premiums = [t[0] for t in targets]
        pufs = [t[1] for t in targets]
        return self._bootstrap(pillars, premiums, pufs, discount_curve)

    def calibrate_single(
        self,
        pillar: CdsSchedule,
        quote: CdsQuote,
        discount_curve: DiscountCurve,
    ) -> CreditCurve:
        """Flat (one knot) credit curve that reprices a single CDS."""
        return self.calibrate([pillar], [quote], discount_curve)

    def calibrate_par_spreads(
        self,
        pillars: Sequence[CdsSchedule],
        spreads: Sequence[float],
        discount_curve: DiscountCurve,
    ) -> CreditCurve:
        """Bootstrap from par spreads, one per pillar."""
        check_argument(
            len(pillars) == len(spreads),
            f'{len(pillars)} pillars but {len(spreads)} spreads',
        )
        return self.calibrate(pillars, [ParSpread(s) for s in spreads], discount_curve)

    def calibrate_puf(
        self,
        pillars: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        pufs: Sequence[float],
        discount_curve: DiscountCurve,
    ) -> CreditCurve:
        """
        Bootstrap from points up front.

        Args:
            pillars: Pillar CDSs
            premiums: Coupon of each pillar, or one coupon for all
            pufs: Clean upfront of each pillar
            discount_curve: Risk-free curve

        Returns
            CreditCurve with one knot per pillar
        """
        check_argument(len(pillars) > 0, 'No pillar CDSs supplied')
        coupons = broadcast_values(premiums, len(pillars), 'premiums')
        check_argument(
            len(pufs) == len(pillars),
            f'{len(pillars)} pillars but {len(pufs)} upfronts',
        )
        quotes = [PointsUpFront(c, p) for c, p in zip(coupons, pufs)]
        return self.calibrate(pillars, quotes, discount_curve)

    def _target(
        self,
        pillar: CdsSchedule,
        quote: CdsQuote,
        discount_curve: DiscountCurve,
    ) -> tuple[float, float]:
        """(premium, clean PV) that the calibrated curve must reproduce."""
        if isinstance(quote, QuotedSpread):
            flat = self.calibrate_single(pillar, ParSpread(quote.quoted_spread), discount_curve)
            puf = self.pricer.pv(pillar, discount_curve, flat, quote.coupon, PriceType.CLEAN)
            return quote.coupon, puf
        return quote_target(quote)

    def _bootstrap(
        self,
        pillars: Sequence[CdsSchedule],
        premiums: list[float],
        pufs: list[float],
        discount_curve: DiscountCurve,
    ) -> CreditCurve:
        times = np.array([p.protection_end for p in pillars], dtype=float)
        check_argument(times[0] > 0.0, f'First pillar has expired (protection end {times[0]})')
        check_argument(
            bool(np.all(np.diff(times) > 0.0)),
            'Pillar protection end times must be strictly increasing',
        )
        base_date = pillars[0].trade_date
        cfg = self.config
        pricer = self.pricer
        rts: list[float] = []

        for k, pillar in enumerate(pillars):
            t_prev = 0.0 if k == 0 else times[k - 1]
            rt_prev = 0.0 if k == 0 else rts[-1]
            dt = times[k] - t_prev
            premium = premiums[k]
            puf = pufs[k]

            def curve_for(h: float) -> CreditCurve:
                return CreditCurve(times[:k + 1], [*rts, rt_prev + h * dt], base_date=base_date)

            def objective(h: float) -> float:
                curve = curve_for(h)
                return pricer.pv(pillar, discount_curve, curve, premium, PriceType.CLEAN) - puf

            def derivative(h: float) -> float:
                curve = curve_for(h)
                sense = pricer.pv_credit_sensitivity(
                    pillar, discount_curve, curve, premium, k, PriceType.CLEAN
                )
                return sense * dt

            lgd = pillar.lgd
            guess = premium / lgd if lgd > 0.0 else premium
            lower = -rt_prev / dt
            try:
                a, b = find_bracket(
                    objective, guess, lower, cfg.max_hazard_rate, cfg.max_bracket_expansions
                )
                h = newton_bracketed(
                    objective, derivative, guess, a, b, cfg.tolerance, cfg.max_iterations
                )
            except ConvergenceError as e:
                raise CalibrationFailure(
                    f'Failed to bootstrap pillar {k} (protection end {times[k]:.4f}): {e}',
                    pillar_index=k,
                ) from e

            rts.append(rt_prev + h * dt)
            logger.debug('Pillar %d: t=%.6f forward hazard=%.8f', k, times[k], h)

        return CreditCurve(times, rts, base_date=base_date)
