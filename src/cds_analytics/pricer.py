"""
Analytic CDS pricer.

Prices a CdsSchedule against a discount curve and a credit curve using
the ISDA standard model: closed-form segment integrals between the knots
of both curves, with the accrual-on-default convention fixed when the
pricer is built.

Values are per unit notional. The protection leg and annuities are
rolled forward to the valuation time, which defaults to the cash
settlement time of the CDS. Sensitivities are derivatives with respect
to the RT value of one curve knot.
"""

import numpy as np

from .contingent_leg import protection_integral
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .exceptions import ArgumentError
from .fee_leg import accrued_premium_factor, annuity_integral
from .schedule import CdsSchedule


class AnalyticCdsPricer:
    """
    Analytic pricer for single-name CDS.

    Example:
        >>> pricer = AnalyticCdsPricer(AccrualOnDefaultFormula.MARKIT_FIX)
        >>> spread = pricer.par_spread(cds, yield_curve, credit_curve)
        >>> pv = pricer.pv(cds, yield_curve, credit_curve, 0.01)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
    ):
        if isinstance(formula, str):
            formula = AccrualOnDefaultFormula.from_string(formula)
        self.formula = formula

    def __repr__(self) -> str:
        return f'AnalyticCdsPricer({self.formula.name})'

    @property
    def omega(self) -> float:
        """Half-day shift of the accrual time used by ORIGINAL_ISDA."""
        return self.formula.omega

    def _valuation_df(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        valuation_time: float | None,
    ) -> tuple[float, float]:
        t = schedule.cash_settle_time if valuation_time is None else valuation_time
        return t, discount_curve.discount_factor(t)

    def _clean_annuity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        price_type: PriceType,
        credit_knot: int | None = None,
        yield_knot: int | None = None,
    ) -> tuple[float, float]:
        """Annuity at time zero and its knot derivative."""
        value, sense = annuity_integral(
            schedule, discount_curve, credit_curve, self.formula, credit_knot, yield_knot
        )
        if price_type == PriceType.DIRTY or schedule.accrued_year_fraction == 0.0:
            return value, sense

        value -= accrued_premium_factor(schedule, discount_curve, credit_curve)
        acc = schedule.accrued_year_fraction
        t_ps = schedule.effective_protection_start
        t_cs = schedule.cash_settle_time
        if credit_knot is not None and t_ps != 0.0:
            dq = credit_curve.single_node_discount_factor_sensitivity(t_ps, credit_knot)
            sense -= acc * discount_curve.discount_factor(t_cs) * dq
        if yield_knot is not None:
            q = 1.0 if t_ps == 0.0 else credit_curve.survival_probability(t_ps)
            dp = discount_curve.single_node_discount_factor_sensitivity(t_cs, yield_knot)
            sense -= acc * dp * q
        return value, sense

    def protection_leg(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        valuation_time: float | None = None,
    ) -> float:
        """
        Value of the protection leg, per unit notional.

        Args:
            schedule: CDS to price
            discount_curve: Risk-free curve
            credit_curve: Credit curve
            valuation_time: Time values are rolled to (default cash settlement)

        Returns
            Protection leg value; 0 for an expired CDS
        """
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        return protection_integral(schedule, discount_curve, credit_curve)[0] / df

    def dirty_annuity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> float:
        """Risky annuity at time zero including accrued premium."""
        if schedule.is_expired:
            return 0.0
        return annuity_integral(schedule, discount_curve, credit_curve, self.formula)[0]

    def annuity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """
        Risky annuity (RPV01): value of the premium leg per unit spread.

        The clean annuity excludes the premium accrued up to step-in.

        Args:
            schedule: CDS to price
            discount_curve: Risk-free curve
            credit_curve: Credit curve
            price_type: CLEAN or DIRTY
            valuation_time: Time values are rolled to (default cash settlement)

        Returns
            Risky annuity; 0 for an expired CDS
        """
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        value, _ = self._clean_annuity(schedule, discount_curve, credit_curve, price_type)
        return value / df

    def premium_leg(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """Value of the premium leg at the given spread, per unit notional."""
        return fractional_spread * self.annuity(
            schedule, discount_curve, credit_curve, price_type, valuation_time
        )

    def pv(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """
        PV of the CDS to the protection buyer, per unit notional.

            PV = protection_leg - spread * annuity

        Args:
            schedule: CDS to price
            discount_curve: Risk-free curve
            credit_curve: Credit curve
            fractional_spread: Premium paid (e.g. 0.01 for 100bps)
            price_type: CLEAN or DIRTY
            valuation_time: Time values are rolled to (default cash settlement)

        Returns
            PV per unit notional; 0 for an expired CDS
        """
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        protection, _ = protection_integral(schedule, discount_curve, credit_curve)
        annuity, _ = self._clean_annuity(schedule, discount_curve, credit_curve, price_type)
        return (protection - fractional_spread * annuity) / df

    def par_spread(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> float:
        """
        Spread at which the clean PV of the CDS is zero.

        Raises
            ArgumentError: If the CDS has expired
        """
        if schedule.is_expired:
            raise ArgumentError('Par spread of an expired CDS is undefined')
        protection, _ = protection_integral(schedule, discount_curve, credit_curve)
        annuity, _ = self._clean_annuity(schedule, discount_curve, credit_curve, PriceType.CLEAN)
        return protection / annuity

    def par_spreads(
        self,
        schedules: list[CdsSchedule],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """Par spread of each CDS."""
        return np.array([
            self.par_spread(s, discount_curve, credit_curve) for s in schedules
        ])

    def present_value(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        price_type: PriceType = PriceType.CLEAN,
    ) -> float:
        """
        Currency PV of the trade described by the schedule's terms.

        Positive when the trade is an asset to its holder: a protection
        buyer gains when spreads widen above the coupon.
        """
        per_unit = self.pv(
            schedule, discount_curve, credit_curve, schedule.coupon_rate, price_type
        )
        return schedule.direction * schedule.notional * per_unit

    def accrued_premium(self, schedule: CdsSchedule) -> float:
        """Premium accrued up to step-in, per unit notional."""
        return schedule.coupon_rate * schedule.accrued_year_fraction

    # Credit curve sensitivities

    def protection_leg_credit_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        knot: int,
        valuation_time: float | None = None,
    ) -> float:
        """d(protection leg)/dRT_knot of a credit knot."""
        credit_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        _, sense = protection_integral(schedule, discount_curve, credit_curve, credit_knot=knot)
        return sense / df

    def premium_leg_credit_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        knot: int,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """d(annuity)/dRT_knot of a credit knot; the premium leg per unit spread."""
        credit_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        _, sense = self._clean_annuity(
            schedule, discount_curve, credit_curve, price_type, credit_knot=knot
        )
        return sense / df

    def pv_credit_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        knot: int,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """
        dPV/dRT_knot of a credit knot.

        Args:
            schedule: CDS to price
            discount_curve: Risk-free curve
            credit_curve: Credit curve
            fractional_spread: Premium paid
            knot: Index of the credit curve knot
            price_type: CLEAN or DIRTY
            valuation_time: Time values are rolled to (default cash settlement)

        Returns
            Sensitivity per unit notional; 0 for an expired CDS

        Raises
            ArgumentError: If knot is not a knot of the credit curve
        """
        credit_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        _, df = self._valuation_df(schedule, discount_curve, valuation_time)
        _, d_prot = protection_integral(schedule, discount_curve, credit_curve, credit_knot=knot)
        _, d_ann = self._clean_annuity(
            schedule, discount_curve, credit_curve, price_type, credit_knot=knot
        )
        return (d_prot - fractional_spread * d_ann) / df

    def pv_credit_sensitivities(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        price_type: PriceType = PriceType.CLEAN,
    ) -> np.ndarray:
        """dPV/dRT_i for every credit knot i."""
        return np.array([
            self.pv_credit_sensitivity(
                schedule, discount_curve, credit_curve, fractional_spread, k, price_type
            )
            for k in range(credit_curve.num_knots)
        ])

    def par_spread_credit_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        knot: int,
    ) -> float:
        """
        d(par spread)/dRT_knot of a credit knot.

        Raises
            ArgumentError: If the CDS has expired or knot is out of range
        """
        credit_curve.check_index(knot)
        if schedule.is_expired:
            raise ArgumentError('Par spread of an expired CDS is undefined')
        prot, d_prot = protection_integral(
            schedule, discount_curve, credit_curve, credit_knot=knot
        )
        ann, d_ann = self._clean_annuity(
            schedule, discount_curve, credit_curve, PriceType.CLEAN, credit_knot=knot
        )
        return (d_prot - prot / ann * d_ann) / ann

    # Yield curve sensitivities

    def _rolled_yield_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        value: float,
        sense: float,
        knot: int,
        valuation_time: float | None,
    ) -> float:
        """Derivative of value / P(t_v) given value and its derivative at time zero."""
        t, df = self._valuation_df(schedule, discount_curve, valuation_time)
        d_df = discount_curve.single_node_discount_factor_sensitivity(t, knot)
        return (sense - value / df * d_df) / df

    def protection_leg_yield_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        knot: int,
        valuation_time: float | None = None,
    ) -> float:
        """d(protection leg)/dRT_knot of a yield knot."""
        discount_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        value, sense = protection_integral(
            schedule, discount_curve, credit_curve, yield_knot=knot
        )
        return self._rolled_yield_sensitivity(
            schedule, discount_curve, value, sense, knot, valuation_time
        )

    def premium_leg_yield_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        knot: int,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """d(annuity)/dRT_knot of a yield knot."""
        discount_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        value, sense = self._clean_annuity(
            schedule, discount_curve, credit_curve, price_type, yield_knot=knot
        )
        return self._rolled_yield_sensitivity(
            schedule, discount_curve, value, sense, knot, valuation_time
        )

    def pv_yield_sensitivity(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        knot: int,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """dPV/dRT_knot of a yield knot, including the roll to the valuation time."""
        discount_curve.check_index(knot)
        if schedule.is_expired:
            return 0.0
        prot, d_prot = protection_integral(
            schedule, discount_curve, credit_curve, yield_knot=knot
        )
        ann, d_ann = self._clean_annuity(
            schedule, discount_curve, credit_curve, price_type, yield_knot=knot
        )
        return self._rolled_yield_sensitivity(
            schedule, discount_curve,
            prot - fractional_spread * ann,
            d_prot - fractional_spread * d_ann,
            knot, valuation_time,
        )

    def pv_yield_sensitivities(
        self,
        schedule: CdsSchedule,
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
        fractional_spread: float,
        price_type: PriceType = PriceType.CLEAN,
    ) -> np.ndarray:
        """dPV/dRT_i for every yield knot i."""
        return np.array([
            self.pv_yield_sensitivity(
                schedule, discount_curve, credit_curve, fractional_spread, k, price_type
            )
            for k in range(discount_curve.num_knots)
        ])
