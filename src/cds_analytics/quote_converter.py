"""
Conversion between CDS quote conventions.

Two modes are supported:

- Flat: each CDS is converted on its own flat (single knot) credit curve.
  This is the market convention linking points up front and quoted
  spreads.
- Full curve: one credit curve is bootstrapped across all CDSs and every
  CDS is then repriced off it. Par spreads convert this way.
"""

import logging
from collections.abc import Sequence

import numpy as np

from .config import SolverConfig
from .credit_curve import CreditCurveBuilder, broadcast_values
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .exceptions import ArgumentError, check_argument
from .quotes import CdsQuote, ParSpread, PointsUpFront, QuotedSpread
from .schedule import CdsSchedule

logger = logging.getLogger(__name__)


def _check_lengths(cds: Sequence[CdsSchedule], values: Sequence, name: str) -> None:
    check_argument(len(cds) > 0, 'No CDSs supplied')
    check_argument(len(values) == len(cds), f'{len(cds)} CDSs but {len(values)} {name}')


class MarketQuoteConverter:
    """
    Converts between par spreads, quoted spreads and points up front.

    Example:
        >>> converter = MarketQuoteConverter()
        >>> puf = converter.quoted_spread_to_puf(cds, 0.01, yield_curve, 0.015)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        config: SolverConfig | None = None,
    ):
        self.builder = CreditCurveBuilder(formula, config)
        self.pricer = self.builder.pricer

    def __repr__(self) -> str:
        return f'MarketQuoteConverter({self.pricer.formula.name})'

    @staticmethod
    def clean_price(puf: float) -> float:
        """Bond-style clean price, 1 - PUF."""
        return 1.0 - puf

    @staticmethod
    def clean_prices(pufs: Sequence[float]) -> np.ndarray:
        """Clean price of each upfront."""
        return 1.0 - np.asarray(pufs, dtype=float)

    def clean_price_from_curve(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        coupon: float,
    ) -> float:
        """Clean price of a CDS paying coupon, off a given credit curve."""
        return 1.0 - self.points_upfront(schedule, coupon, discount_curve, credit_curve)

    def principal(
        self,
        notional: float,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        coupon: float,
    ) -> float:
        """Clean upfront cash amount for a notional."""
        return notional * self.points_upfront(schedule, coupon, discount_curve, credit_curve)

    def points_upfront(
        self,
        schedule: CdsSchedule,
        premium: float,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> float:
        """Clean PV per unit notional of a CDS paying premium."""
        return self.pricer.pv(schedule, discount_curve, credit_curve, premium, PriceType.CLEAN)

    def points_upfront_batch(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """PUF of each CDS off one credit curve; premiums may be a single value."""
        check_argument(len(cds) > 0, 'No CDSs supplied')
        coupons = broadcast_values(premiums, len(cds), 'premiums')
        return np.array([
            self.points_upfront(s, c, discount_curve, credit_curve)
            for s, c in zip(cds, coupons)
        ])

    def par_spreads(
        self,
        cds: Sequence[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """Par spread of each CDS off one credit curve."""
        check_argument(len(cds) > 0, 'No CDSs supplied')
        return self.pricer.par_spreads(list(cds), discount_curve, credit_curve)

    # Flat curve conversions

    def quoted_spread_to_puf(
        self,
        schedule: CdsSchedule,
        premium: float,
        discount_curve: DiscountCurve,
        quoted_spread: float,
    ) -> float:
        """
        PUF of a CDS paying premium, priced off the flat curve that
        makes quoted_spread its par spread.
        """
        flat = self.builder.calibrate_single(schedule, ParSpread(quoted_spread), discount_curve)
        return self.points_upfront(schedule, premium, discount_curve, flat)

    def puf_to_quoted_spread(
        self,
        schedule: CdsSchedule,
        premium: float,
        discount_curve: DiscountCurve,
        puf: float,
    ) -> float:
        """Par spread of the flat curve that reprices the upfront."""
        flat = self.builder.calibrate_single(schedule, PointsUpFront(premium, puf), discount_curve)
        return self.pricer.par_spread(schedule, discount_curve, flat)

    def convert(
        self,
        schedule: CdsSchedule,
        quote: CdsQuote,
        discount_curve: DiscountCurve,
    ) -> CdsQuote:
        """
        Convert a quote to the other upfront convention.

        QuotedSpread becomes PointsUpFront at the same coupon and vice
        versa.

        Raises
            ArgumentError: For par spread quotes, which carry no upfront
        """
        if isinstance(quote, QuotedSpread):
            puf = self.quoted_spread_to_puf(
                schedule, quote.coupon, discount_curve, quote.quoted_spread
            )
            return PointsUpFront(quote.coupon, puf)
        if isinstance(quote, PointsUpFront):
            qs = self.puf_to_quoted_spread(schedule, quote.coupon, discount_curve, quote.puf)
            return QuotedSpread(quote.coupon, qs)
        raise ArgumentError(f'Cannot convert a {type(quote).__name__} quote')

    def quoted_spreads_to_puf(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        quoted_spreads: Sequence[float],
    ) -> np.ndarray:
        """quoted_spread_to_puf for each CDS, each on its own flat curve."""
        _check_lengths(cds, quoted_spreads, 'quoted spreads')
        coupons = broadcast_values(premiums, len(cds), 'premiums')
        return np.array([
            self.quoted_spread_to_puf(s, c, discount_curve, q)
            for s, c, q in zip(cds, coupons, quoted_spreads)
        ])

    def puf_to_quoted_spreads(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        pufs: Sequence[float],
    ) -> np.ndarray:
        """puf_to_quoted_spread for each CDS, each on its own flat curve."""
        _check_lengths(cds, pufs, 'upfronts')
        coupons = broadcast_values(premiums, len(cds), 'premiums')
        return np.array([
            self.puf_to_quoted_spread(s, c, discount_curve, p)
            for s, c, p in zip(cds, coupons, pufs)
        ])

    def convert_all(
        self,
        cds: Sequence[CdsSchedule],
        quotes: Sequence[CdsQuote],
        discount_curve: DiscountCurve,
    ) -> list[CdsQuote]:
        """convert for each CDS and quote."""
        _check_lengths(cds, quotes, 'quotes')
        return [self.convert(s, q, discount_curve) for s, q in zip(cds, quotes)]

    # Full curve conversions

    def par_spreads_to_puf(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        par_spreads: Sequence[float],
    ) -> np.ndarray:
        """
        PUF of each CDS off the curve bootstrapped from all the par spreads.

        Args:
            cds: CDSs in maturity order, used as curve pillars
            premiums: Coupon of each CDS, or one coupon for all
            discount_curve: Risk-free curve
            par_spreads: Par spread of each CDS

        Returns
            Array of PUF
        """
        _check_lengths(cds, par_spreads, 'par spreads')
        coupons = broadcast_values(premiums, len(cds), 'premiums')
        curve = self.builder.calibrate_par_spreads(cds, par_spreads, discount_curve)
        logger.debug('Converting %d par spreads to upfronts', len(cds))
        return self.points_upfront_batch(cds, coupons, discount_curve, curve)

    def puf_to_par_spreads(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        pufs: Sequence[float],
    ) -> np.ndarray:
        """Par spread of each CDS off the curve bootstrapped from all the upfronts."""
        _check_lengths(cds, pufs, 'upfronts')
        curve = self.builder.calibrate_puf(cds, premiums, pufs, discount_curve)
        logger.debug('Converting %d upfronts to par spreads', len(cds))
        return self.par_spreads(cds, discount_curve, curve)

    def par_spreads_to_quoted_spreads(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        par_spreads: Sequence[float],
    ) -> np.ndarray:
        """Par spreads to PUF off the full curve, then each PUF to its flat quoted spread."""
        pufs = self.par_spreads_to_puf(cds, premiums, discount_curve, par_spreads)
        return self.puf_to_quoted_spreads(cds, premiums, discount_curve, pufs)

    def quoted_spreads_to_par_spreads(
        self,
        cds: Sequence[CdsSchedule],
        premiums: float | Sequence[float],
        discount_curve: DiscountCurve,
        quoted_spreads: Sequence[float],
    ) -> np.ndarray:
        """Quoted spreads to PUF on flat curves, then par spreads off the full curve."""
        pufs = self.quoted_spreads_to_puf(cds, premiums, discount_curve, quoted_spreads)
        return self.puf_to_par_spreads(cds, premiums, discount_curve, pufs)
