"""
CDS Analytics - ISDA Standard Model in Python

Prices single-name Credit Default Swaps, bootstraps credit curves from
market quotes, converts between quoting conventions and computes
analytic and bump-and-recalibrate spread risk.

Basic Usage:
    >>> from cds_analytics import CdsScheduleFactory, CreditCurveBuilder
    >>> from cds_analytics import AnalyticCdsPricer, DiscountCurve
    >>>
    >>> factory = CdsScheduleFactory()
    >>> pillars = factory.make_imm_cds_batch('2024-06-13', ['1Y', '3Y', '5Y'])
    >>> yield_curve = DiscountCurve.from_zero_rates([0.5, 1, 5, 10], [0.04] * 4)
    >>>
    >>> builder = CreditCurveBuilder()
    >>> credit_curve = builder.calibrate_par_spreads(pillars, [0.006, 0.009, 0.011], yield_curve)
    >>>
    >>> pricer = AnalyticCdsPricer()
    >>> puf = pricer.pv(pillars[-1], yield_curve, credit_curve, 0.01)
"""

import logging

__version__ = '1.0.0'

# Trade-level API
from .cds import CDS, CDSPricingResult
# Configuration
from .config import DEFAULT_CONVENTIONS, DEFAULT_SOLVER, CdsConventions
from .config import SolverConfig
# Curve building and quote conversion
from .credit_curve import CreditCurveBuilder
# Curve classes
from .curves import CreditCurve, DiscountCurve, IsdaCurve
# Date utilities
from .dates import add_business_days, add_days, add_months, adjust_date
from .dates import is_business_day, year_fraction
# Enumerations
from .enums import AccrualOnDefaultFormula, BadDayConvention
from .enums import DayCountConvention, FiniteDifferenceType, PaymentFrequency
from .enums import PriceType, ShiftType, StubMethod
# Errors
from .exceptions import ArgumentError, CalibrationFailure, CDSError
from .exceptions import ConvergenceError, CurveError, InterpolationError
from .exceptions import UnderDeterminedHedgeError
# Schedules
from .factory import CdsScheduleFactory
# Risk
from .hedging import HedgeRatioCalculator, solve_hedge
# IMM dates
from .imm import imm_maturity, is_imm_date, next_imm_date, previous_imm_date
# Pricing
from .pricer import AnalyticCdsPricer
from .quote_converter import MarketQuoteConverter
# Quotes
from .quotes import CdsQuote, ParSpread, PointsUpFront, QuotedSpread
from .schedule import CdsCoupon, CdsSchedule, CouponPeriod
from .schedule import generate_coupon_periods
from .sensitivity import FiniteDifferenceSpreadSensitivityCalculator
from .sensitivity import SpreadSensitivityCalculator
# Tenor parsing
from .tenor import Tenor, parse_tenor

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    '__version__',
    # Trade-level API
    'CDS',
    'CDSPricingResult',
    # Pricing
    'AnalyticCdsPricer',
    'CreditCurveBuilder',
    'MarketQuoteConverter',
    # Risk
    'SpreadSensitivityCalculator',
    'FiniteDifferenceSpreadSensitivityCalculator',
    'HedgeRatioCalculator',
    'solve_hedge',
    # Curves
    'IsdaCurve',
    'DiscountCurve',
    'CreditCurve',
    # Quotes
    'CdsQuote',
    'ParSpread',
    'QuotedSpread',
    'PointsUpFront',
    # Schedules
    'CdsScheduleFactory',
    'CdsSchedule',
    'CdsCoupon',
    'CouponPeriod',
    'generate_coupon_periods',
    # Configuration
    'CdsConventions',
    'SolverConfig',
    'DEFAULT_CONVENTIONS',
    'DEFAULT_SOLVER',
    # Enums
    'AccrualOnDefaultFormula',
    'BadDayConvention',
    'DayCountConvention',
    'FiniteDifferenceType',
    'PaymentFrequency',
    'PriceType',
    'ShiftType',
    'StubMethod',
    # Errors
    'CDSError',
    'ArgumentError',
    'CurveError',
    'InterpolationError',
    'CalibrationFailure',
    'ConvergenceError',
    'UnderDeterminedHedgeError',
    # Dates
    'year_fraction',
    'add_days',
    'add_months',
    'add_business_days',
    'adjust_date',
    'is_business_day',
    # IMM
    'is_imm_date',
    'next_imm_date',
    'previous_imm_date',
    'imm_maturity',
    # Tenor
    'Tenor',
    'parse_tenor',
]
