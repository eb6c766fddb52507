"""
Shared test fixtures for CDS analytics tests.
"""

import os
import pathlib
import sys

import pytest
from opendate import Date

# Add src to path for imports
sys.path.insert(0, os.path.join(pathlib.Path(__file__).parent, '..', 'src'))

from cds_analytics import CdsScheduleFactory, CreditCurve  # noqa: E402
from cds_analytics import CreditCurveBuilder, DiscountCurve  # noqa: E402


@pytest.fixture
def trade_date():
    """Sample trade date (a Thursday)."""
    return Date(2014, 2, 13)


@pytest.fixture
def factory():
    """Schedule factory with standard conventions."""
    return CdsScheduleFactory()


@pytest.fixture
def pillar_tenors():
    """Tenors of the credit curve pillars."""
    return ['6M', '1Y', '2Y', '3Y', '5Y', '7Y', '10Y']


@pytest.fixture
def par_spreads():
    """Par spreads for an upward sloping investment grade curve."""
    return [0.0060, 0.0070, 0.0085, 0.0100, 0.0120, 0.0135, 0.0145]


@pytest.fixture
def yield_curve(trade_date):
    """USD-like zero curve."""
    times = [0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 7.0, 10.0, 15.0]
    rates = [0.0024, 0.0031, 0.0045, 0.0070, 0.0105, 0.0165, 0.0210, 0.0260, 0.0300]
    return DiscountCurve.from_zero_rates(times, rates, base_date=trade_date)


@pytest.fixture
def flat_yield_curve():
    """Flat 3% zero curve."""
    return DiscountCurve.flat(0.03)


@pytest.fixture
def zero_yield_curve():
    """Zero interest rates."""
    return DiscountCurve.flat(0.0)


@pytest.fixture
def flat_credit_curve():
    """Flat 2% hazard rate."""
    return CreditCurve.flat(0.02)


@pytest.fixture
def pillars(factory, trade_date, pillar_tenors):
    """Standard IMM CDSs used as curve pillars."""
    return factory.make_imm_cds_batch(trade_date, pillar_tenors)


@pytest.fixture
def five_year_cds(factory, trade_date):
    """Standard 5Y CDS with a 100bp coupon."""
    return factory.make_imm_cds(trade_date, '5Y', coupon_rate=0.01, notional=10_000_000)


@pytest.fixture
def builder():
    """Credit curve builder with the original ISDA formula."""
    return CreditCurveBuilder()


@pytest.fixture
def credit_curve(builder, pillars, par_spreads, yield_curve):
    """Credit curve calibrated to the par spreads."""
    return builder.calibrate_par_spreads(pillars, par_spreads, yield_curve)
