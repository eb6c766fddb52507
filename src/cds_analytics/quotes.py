"""
Market quote conventions for single-name CDS.

A CDS trades either at par (running spread only) or with a standard
coupon plus an upfront amount. The upfront is quoted directly as points
up front, or indirectly as a quoted spread: the flat-curve par spread
that reproduces it.
"""

from dataclasses import dataclass

from .exceptions import ArgumentError


@dataclass(frozen=True)
class CdsQuote:
    """Base class of the quote conventions; every quote has a coupon."""


@dataclass(frozen=True)
class ParSpread(CdsQuote):
    """
    A par spread quote; the CDS pays the spread and has zero clean PV.

    Attributes
        spread: Par spread as a fraction (0.01 for 100bps)
    """

    spread: float

    def __post_init__(self):
        if self.spread <= 0.0:
            raise ArgumentError(f'Par spread must be positive, got {self.spread}')

    @property
    def coupon(self) -> float:
        """The running premium, which for a par quote is the spread."""
        return self.spread


@dataclass(frozen=True)
class QuotedSpread(CdsQuote):
    """
    Standard coupon CDS quoted by its flat-curve par spread.

    Attributes
        coupon: Standard coupon paid
        quoted_spread: Spread of the flat curve that prices the upfront
    """

    coupon: float
    quoted_spread: float

    def __post_init__(self):
        if self.quoted_spread <= 0.0:
            raise ArgumentError(f'Quoted spread must be positive, got {self.quoted_spread}')


@dataclass(frozen=True)
class PointsUpFront(CdsQuote):
    """
    Standard coupon CDS quoted by its clean upfront payment.

    Attributes
        coupon: Standard coupon paid
        puf: Clean upfront as a fraction of notional, paid by the buyer
    """

    coupon: float
    puf: float

    @property
    def clean_price(self) -> float:
        """Bond-style price, 1 - PUF."""
        return 1.0 - self.puf


def quote_target(quote: CdsQuote) -> tuple[float, float]:
    """
    The (premium, clean PV) pair a quote fixes, where the quote gives it
    directly.

    Raises
        ArgumentError: For quoted spreads, which need a curve to resolve
    """
    if isinstance(quote, ParSpread):
        return quote.spread, 0.0
    if isinstance(quote, PointsUpFront):
        return quote.coupon, quote.puf
    raise ArgumentError(f'{type(quote).__name__} has no direct price target')
