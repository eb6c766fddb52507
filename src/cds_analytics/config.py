"""
Default conventions and numerical settings.

The defaults are those of the ISDA standard model for single-name CDS.
"""

from dataclasses import dataclass

from .enums import BadDayConvention, DayCountConvention, PaymentFrequency
from .enums import StubMethod


@dataclass(frozen=True)
class CdsConventions:
    """
    Market conventions used to turn trade dates into a CdsSchedule.

    Attributes
        step_in_days: Calendar days from trade date to step-in (protection) date
        cash_settle_days: Business days from trade date to cash settlement
        pay_accrual_on_default: Whether accrued premium is paid on default
        frequency: Coupon frequency
        stub: Stub placement
        protect_start: Protection from the start of the day
        recovery_rate: Recovery assumption
        bad_day: Business day adjustment
        accrual_day_count: Day count for coupon accrual
        curve_day_count: Day count for curve times
    """

    step_in_days: int = 1
    cash_settle_days: int = 3
    pay_accrual_on_default: bool = True
    frequency: PaymentFrequency = PaymentFrequency.QUARTERLY
    stub: StubMethod = StubMethod.FRONT_SHORT
    protect_start: bool = True
    recovery_rate: float = 0.4
    bad_day: BadDayConvention = BadDayConvention.FOLLOWING
    accrual_day_count: DayCountConvention = DayCountConvention.ACT_360
    curve_day_count: DayCountConvention = DayCountConvention.ACT_365F


@dataclass(frozen=True)
class SolverConfig:
    """
    Settings for the credit curve bootstrap.

    Attributes
        tolerance: Absolute tolerance on the pillar price error
        max_iterations: Hard cap on root-finder iterations per pillar
        max_bracket_expansions: Hard cap on bracket doublings
        max_hazard_rate: Upper limit on a forward hazard rate
    """

    tolerance: float = 1e-12
    max_iterations: int = 100
    max_bracket_expansions: int = 60
    max_hazard_rate: float = 100.0


# Exponent below which segment integrals switch to their Taylor surrogate
TAYLOR_THRESHOLD = 1e-5

DEFAULT_CONVENTIONS = CdsConventions()
DEFAULT_SOLVER = SolverConfig()
