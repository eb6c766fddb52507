"""
Contingent (protection) leg calculation for CDS.

The contingent leg is the payment of (1 - R) by the protection seller on
default. Its value is

    PV = (1 - R) * integral over [t_s, T] of -dQ(t) P(t)

Between integration nodes both curves are exponential in t. With
h = RT_c(t1) - RT_c(t0) and x = h + RT_y(t1) - RT_y(t0) each segment
integrates to

    h * b0 * (1 - e^-x) / x,    b0 = exp(-RT_c(t0) - RT_y(t0))

which is evaluated through epsilon(-x) when |x| is below the Taylor
threshold.
"""

import math

import numpy as np

from .config import TAYLOR_THRESHOLD
from .curves import CreditCurve, DiscountCurve
from .numerics import epsilon, epsilon_p, integration_points, node_values
from .numerics import node_weights, segment_sensitivity
from .schedule import CdsSchedule


def protection_kernel(x: float) -> tuple[float, float]:
    """
    The quotient w(x) = (1 - e^-x) / x and its derivative.

    Args:
        x: Combined credit and yield RT increment of a segment

    Returns
        (w, dw/dx)
    """
    w_x = -epsilon_p(-x)
    if abs(x) < TAYLOR_THRESHOLD:
        return epsilon(-x), w_x
    return -math.expm1(-x) / x, w_x


def protection_integral(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    credit_knot: int | None = None,
    yield_knot: int | None = None,
) -> tuple[float, float]:
    """Value and knot derivative of the protection leg at time zero."""
    start = schedule.effective_protection_start
    end = schedule.protection_end
    if end <= start:
        return 0.0, 0.0

    points = integration_points(
        start, end, discount_curve.knot_times, credit_curve.knot_times
    )
    ht = node_values(credit_curve, points)
    rt = node_values(discount_curve, points)
    s = node_weights(credit_curve, points, credit_knot)
    u = node_weights(discount_curve, points, yield_knot)
    want_sense = credit_knot is not None or yield_knot is not None

    pv = 0.0
    sense = 0.0
    for j in range(1, len(points)):
        h = ht[j] - ht[j - 1]
        x = h + rt[j] - rt[j - 1]
        b0 = math.exp(-ht[j - 1] - rt[j - 1])
        w, w_x = protection_kernel(x)
        pv += h * b0 * w
        if want_sense:
            sense += segment_sensitivity(h, b0, w, w_x, s[j - 1], s[j], u[j - 1], u[j])

    return schedule.lgd * pv, schedule.lgd * sense


def protection_leg_pv(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
) -> float:
    """
    Present value of the protection leg at time zero, per unit notional.

    Args:
        schedule: CDS to price
        discount_curve: Risk-free curve
        credit_curve: Credit curve

    Returns
        Protection leg PV (positive value)
    """
    return protection_integral(schedule, discount_curve, credit_curve)[0]


def protection_leg_credit_sensitivity(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    knot: int,
) -> float:
    """dPV/dRT_knot of the protection leg at time zero for a credit knot."""
    credit_curve.check_index(knot)
    return protection_integral(schedule, discount_curve, credit_curve, credit_knot=knot)[1]


def protection_leg_yield_sensitivity(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
    knot: int,
) -> float:
    """dPV/dRT_knot of the protection leg at time zero for a yield knot."""
    discount_curve.check_index(knot)
    return protection_integral(schedule, discount_curve, credit_curve, yield_knot=knot)[1]


def expected_loss(schedule: CdsSchedule, credit_curve: CreditCurve) -> float:
    """
    Undiscounted expected loss over the protection period.

        EL = (1 - R) * (Q(t_s) - Q(T))
    """
    start = schedule.effective_protection_start
    end = schedule.protection_end
    if end <= start:
        return 0.0
    q0 = credit_curve.survival_probability(start)
    q1 = credit_curve.survival_probability(end)
    return schedule.lgd * (q0 - q1)


def protection_leg_credit_sensitivities(
    schedule: CdsSchedule,
    discount_curve: DiscountCurve,
    credit_curve: CreditCurve,
) -> np.ndarray:
    """Protection leg sensitivity to every credit knot."""
    return np.array([
        protection_leg_credit_sensitivity(schedule, discount_curve, credit_curve, k)
        for k in range(credit_curve.num_knots)
    ])
