"""
Trade-level CDS pricing.

Provides the CDS class that combines a schedule, market curves and the
analytic pricer to report currency values and risk for one trade.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from .curves import CreditCurve, DiscountCurve
from .enums import PriceType
from .pricer import AnalyticCdsPricer
from .schedule import CdsSchedule
from .sensitivity import FiniteDifferenceSpreadSensitivityCalculator

logger = logging.getLogger(__name__)

ONE_BP = 1e-4


@dataclass
class CDSPricingResult:
    """
    Results from pricing a CDS.

    Currency amounts carry the trade direction: positive values are an
    asset to the holder.
    """

    # Core PV metrics
    pv_dirty: float
    pv_clean: float
    accrued_interest: float

    # Leg values, unsigned
    premium_leg_pv: float  # Dirty, at the trade coupon
    protection_leg_pv: float

    # Additional metrics
    par_spread: float | None = None
    risky_annuity: float | None = None

    # Risk metrics
    credit_sensitivities: np.ndarray = field(default_factory=lambda: np.zeros(0))
    cs01: float | None = None  # PV change for a 1bp parallel pillar spread move

    def __repr__(self) -> str:
        cs01 = 'n/a' if self.cs01 is None else f'{self.cs01:.2f}'
        par = 'n/a' if self.par_spread is None else f'{self.par_spread * 1e4:.4f}bp'
        return (
            f'CDSPricingResult(\n'
            f'  pv_dirty={self.pv_dirty:.6f},\n'
            f'  pv_clean={self.pv_clean:.6f},\n'
            f'  accrued={self.accrued_interest:.6f},\n'
            f'  par_spread={par},\n'
            f'  cs01={cs01}\n'
            f')'
        )


class CDS:
    """
    A CDS trade with full pricing capability.

    Holds the trade schedule (which carries coupon, notional, recovery and
    direction) and the market curves needed for pricing.
    """

    def __init__(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        pricer: AnalyticCdsPricer | None = None,
        pillars: Sequence[CdsSchedule] | None = None,
    ):
        """
        Initialize a CDS for pricing.

        Args:
            schedule: CDS schedule and trade terms
            discount_curve: Risk-free curve
            credit_curve: Credit curve for survival probabilities
            pricer: Analytic pricer (default ORIGINAL_ISDA accrual on default)
            pillars: Pillar CDSs the credit curve was calibrated to, needed for CS01
        """
        self.schedule = schedule
        self.discount_curve = discount_curve
        self.credit_curve = credit_curve
        self.pricer = AnalyticCdsPricer() if pricer is None else pricer
        self.pillars = None if pillars is None else list(pillars)

    def __repr__(self) -> str:
        return (
            f'CDS(coupon={self.schedule.coupon_rate}, notional={self.schedule.notional}, '
            f'protection_end={self.schedule.protection_end:.4f})'
        )

    @property
    def signed_notional(self) -> float:
        return self.schedule.direction * self.schedule.notional

    def pv(self, price_type: PriceType = PriceType.CLEAN) -> float:
        """Currency PV of the trade."""
        return self.pricer.present_value(
            self.schedule, self.discount_curve, self.credit_curve, price_type
        )

    def price(self, compute_sensitivities: bool = True) -> CDSPricingResult:
        """
        Price the CDS.

        Args:
            compute_sensitivities: Compute knot sensitivities and CS01

        Returns
            CDSPricingResult with all pricing metrics
        """
        s = self.schedule
        y = self.discount_curve
        c = self.credit_curve
        notional = s.notional
        coupon = s.coupon_rate

        pv_dirty = self.pv(PriceType.DIRTY)
        pv_clean = self.pv(PriceType.CLEAN)
        protection = notional * self.pricer.protection_leg(s, y, c)
        premium = notional * self.pricer.premium_leg(s, y, c, coupon, PriceType.DIRTY)
        accrued = notional * self.pricer.accrued_premium(s)

        if s.is_expired:
            par_spread = None
            annuity = 0.0
        else:
            par_spread = self.pricer.par_spread(s, y, c)
            annuity = self.pricer.annuity(s, y, c)

        sensitivities = np.zeros(c.num_knots)
        cs01 = None
        if compute_sensitivities:
            sensitivities = self.signed_notional * self.pricer.pv_credit_sensitivities(
                s, y, c, coupon
            )
            if self.pillars:
                cs01 = self._compute_cs01()

        return CDSPricingResult(
            pv_dirty=pv_dirty,
            pv_clean=pv_clean,
            accrued_interest=accrued,
            premium_leg_pv=premium,
            protection_leg_pv=protection,
            par_spread=par_spread,
            risky_annuity=annuity,
            credit_sensitivities=sensitivities,
            cs01=cs01,
        )

    def _compute_cs01(self, bump_size: float = ONE_BP) -> float:
        """
        Compute CS01 (credit spread sensitivity).

        CS01 is the change in PV for a 1bp parallel shift in the par
        spreads the credit curve implies at the pillars.
        """
        calc = FiniteDifferenceSpreadSensitivityCalculator(self.pricer.formula)
        per_unit = calc.parallel_cs01_from_credit_curve(
            self.schedule, self.schedule.coupon_rate, self.pillars,
            self.discount_curve, self.credit_curve, bump_size,
        )
        logger.debug('CS01 per unit spread %.8f over %d pillars', per_unit, len(self.pillars))
        return self.signed_notional * per_unit * bump_size
