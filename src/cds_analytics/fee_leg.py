"""
Fee (premium) leg calculation for CDS.

The fee leg is the stream of coupon payments from the protection buyer
to the protection seller. Per unit spread (the risky annuity) it is

1. Regular coupons: year_fraction * P(payment) * Q(effective_end)
2. Accrued premium on default (optional): the premium accrued between
   the start of the period and the default time, paid on default

The accrual-on-default integral over one segment of a coupon is

    h * b0 * w(x),   w(x) = t0 * epsilon(-x) + dt * epsilon'(-x)

where t0 is the accrual time at the segment start. MARKIT_FIX drops the
t0 term; ORIGINAL_ISDA also shifts t0 by half a day.
"""

import math

from .config import TAYLOR_THRESHOLD
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula
from .numerics import epsilon, epsilon_p, epsilon_pp, integration_points
from .numerics import node_values, node_weights, segment_sensitivity
from .numerics import truncate_points
from .schedule import CdsCoupon, CdsSchedule


def accrual_kernel(
    x: float,
    t0: float,
    dt: float,
    formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
) -> tuple[float, float]:
    """
    Accrual-on-default segment quotient w(x) and its derivative.

    Above the Taylor threshold the closed forms are used:
        MARKIT_FIX:  dt / x * ((1 - e^-x) / x - e^-x)
        otherwise:   t0 * (1 - e^-x) / x + dt / x * ((1 - e^-x) / x - e^-x)

    Args:
        x: Combined credit and yield RT increment of the segment
        t0: Accrual time at the segment start
        dt: Segment length
        formula: Accrual on default formula

    Returns
        (w, dw/dx)
    """
    markit = formula == AccrualOnDefaultFormula.MARKIT_FIX
    eps_p = epsilon_p(-x)
    w_x = -dt * epsilon_pp(-x)
    if not markit:
        w_x -= t0 * eps_p

    if abs(x) < TAYLOR_THRESHOLD:
        w = dt * eps_p
        if not markit:
            w += t0 * epsilon(-x)
        return w, w_x

    c = math.exp(-x)
    w0 = -math.expm1(-x) / x
    if markit:
        return dt / x * (w0 - c), w_x
    return t0 * w0 + dt * (w0 - c) / x, w_x


def _accrual_on_default(
    coupon: CdsCoupon,
    protection_start: float,
    points,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    formula: AccrualOnDefaultFormula,
    credit_knot: int | None,
    yield_knot: int | None,
) -> tuple[float, float]:
    """Value and knot derivative of the accrued premium paid on default in one period."""
    start = max(coupon.effective_start, protection_start)
    if start >= coupon.effective_end:
        return 0.0, 0.0

    knots = truncate_points(points, start, coupon.effective_end)
    ht = node_values(credit_curve, knots)
    rt = node_values(discount_curve, knots)
    s = node_weights(credit_curve, knots, credit_knot)
    u = node_weights(discount_curve, knots, yield_knot)
    want_sense = credit_knot is not None or yield_knot is not None

    t0 = start - coupon.effective_start + formula.omega
    pv = 0.0
    sense = 0.0
    for j in range(1, len(knots)):
        dt = knots[j] - knots[j - 1]
        h = ht[j] - ht[j - 1]
        x = h + rt[j] - rt[j - 1]
        b0 = math.exp(-ht[j - 1] - rt[j - 1])
        w, w_x = accrual_kernel(x, t0, dt, formula)
        pv += h * b0 * w
        if want_sense:
            sense += segment_sensitivity(h, b0, w, w_x, s[j - 1], s[j], u[j - 1], u[j])
        t0 += dt

    return coupon.yf_ratio * pv, coupon.yf_ratio * sense


def annuity_integral(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    formula: AccrualOnDefaultFormula,
    credit_knot: int | None = None,
    yield_knot: int | None = None,
) -> tuple[float, float]:
    """Value and knot derivative of the dirty risky annuity at time zero."""
    pv = 0.0
    sense = 0.0
    for coupon in schedule.coupons:
        q = credit_curve.survival_probability(coupon.effective_end)
        p = discount_curve.discount_factor(coupon.payment_time)
        pv += coupon.year_fraction * p * q
        if credit_knot is not None:
            dq = credit_curve.single_node_discount_factor_sensitivity(coupon.effective_end, credit_knot)
            sense += coupon.year_fraction * p * dq
        if yield_knot is not None:
            dp = discount_curve.single_node_discount_factor_sensitivity(coupon.payment_time, yield_knot)
            sense += coupon.year_fraction * dp * q

    if not schedule.pay_accrual_on_default or not schedule.coupons:
        return pv, sense

    if schedule.num_payments == 1:
        start = schedule.effective_protection_start
    else:
        start = schedule.accrual_start
    end = schedule.protection_end
    if end <= start:
        return pv, sense

    points = integration_points(start, end, discount_curve.knot_times, credit_curve.knot_times)
    for coupon in schedule.coupons:
        aod, aod_sense = _accrual_on_default(
            coupon, schedule.effective_protection_start, points,
            discount_curve, credit_curve, formula, credit_knot, yield_knot,
        )
        pv += aod
        sense += aod_sense
    return pv, sense


def dirty_annuity(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
) -> float:
    """
    Risky annuity (fee leg PV per unit spread) at time zero, including
    accrued premium.

    Args:
        schedule: CDS to price
        discount_curve: Risk-free curve
        credit_curve: Credit curve
        formula: Accrual on default formula

    Returns
        Dirty risky annuity
    """
    return annuity_integral(schedule, discount_curve, credit_curve, formula)[0]


def dirty_annuity_credit_sensitivity(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    knot: int,
    formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
) -> float:
    """dA/dRT_knot of the dirty annuity at time zero for a credit knot."""
    credit_curve.check_index(knot)
    return annuity_integral(schedule, discount_curve, credit_curve, formula, credit_knot=knot)[1]


def dirty_annuity_yield_sensitivity(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    knot: int,
    formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
) -> float:
    """dA/dRT_knot of the dirty annuity at time zero for a yield knot."""
    discount_curve.check_index(knot)
    return annuity_integral(schedule, discount_curve, credit_curve, formula, yield_knot=knot)[1]


def accrued_premium_factor(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
) -> float:
    """
    Accrued premium per unit spread as seen at time zero, the amount that
    separates the dirty from the clean annuity:

        accrued_year_fraction * P(cash_settle) * Q(effective_protection_start)
    """
    if schedule.accrued_year_fraction == 0.0:
        return 0.0
    t = schedule.effective_protection_start
    q = 1.0 if t == 0.0 else credit_curve.survival_probability(t)
    return schedule.accrued_year_fraction * discount_curve.discount_factor(schedule.cash_settle_time) * q
