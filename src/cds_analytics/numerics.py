"""
Numerical kernels shared by the leg calculations.

The closed-form leg integrals contain (1 - exp(-x)) / x and related
quotients, which lose all precision as x goes to zero. The epsilon
functions below are those quotients written as entire functions of y,
evaluated by a short power series near zero and by expm1 elsewhere:

    epsilon(y)   = (e^y - 1) / y
    epsilon_p(y) = d/dy epsilon(y)
    epsilon_pp(y) = d2/dy2 epsilon(y)
"""

import math

import numpy as np

# Below this |y| the epsilon functions use their power series
_SERIES_CUTOFF = 1e-2

# Highest power of y kept in the series
_SERIES_ORDER = 6

_EPS_COEFFS = tuple(
    1.0 / math.factorial(k + 1) for k in range(_SERIES_ORDER + 1)
)
_EPS_P_COEFFS = tuple(
    (k + 1) / math.factorial(k + 2) for k in range(_SERIES_ORDER + 1)
)
_EPS_PP_COEFFS = tuple(
    (k + 1) * (k + 2) / math.factorial(k + 3) for k in range(_SERIES_ORDER + 1)
)


def _horner(coeffs: tuple[float, ...], y: float) -> float:
    total = 0.0
    for c in reversed(coeffs):
        total = total * y + c
    return total


def epsilon(y: float) -> float:
    """
    (e^y - 1) / y, with value 1 at y = 0.

    Args:
        y: Exponent

    Returns
        The quotient, accurate to machine precision for all finite y
    """
    if abs(y) < _SERIES_CUTOFF:
        return _horner(_EPS_COEFFS, y)
    return math.expm1(y) / y


def epsilon_p(y: float) -> float:
    """First derivative of epsilon; 1/2 at y = 0."""
    if abs(y) < _SERIES_CUTOFF:
        return _horner(_EPS_P_COEFFS, y)
    return ((y - 1.0) * math.expm1(y) + y) / (y * y)


def epsilon_pp(y: float) -> float:
    """Second derivative of epsilon; 1/3 at y = 0."""
    if abs(y) < _SERIES_CUTOFF:
        return _horner(_EPS_PP_COEFFS, y)
    y2 = y * y
    return (math.expm1(y) * (y2 - 2.0 * y + 2.0) + y2 - 2.0 * y) / (y2 * y)


def integration_points(
    start: float,
    end: float,
    *knot_sets: np.ndarray,
) -> np.ndarray:
    """
    Nodes for piecewise integration between two times.

    The result holds start, every knot of the given curves lying strictly
    inside (start, end), and end, in ascending order. Between consecutive
    nodes both curves are exponential in t, so each segment integrates
    in closed form.

    Args:
        start: Lower limit
        end: Upper limit, must be after start
        *knot_sets: Knot time arrays of the curves involved

    Returns
        Ascending numpy array of nodes
    """
    if not end > start:
        raise ValueError(f'Integration end {end} must be after start {start}')
    inner = [np.asarray(k, dtype=float) for k in knot_sets]
    if inner:
        knots = np.unique(np.concatenate(inner))
        knots = knots[(knots > start) & (knots < end)]
    else:
        knots = np.empty(0)
    return np.concatenate(([start], knots, [end]))


def truncate_points(points: np.ndarray, lower: float, upper: float) -> np.ndarray:
    """
    Restrict integration nodes to [lower, upper].

    Nodes strictly inside the interval are kept and the two limits are
    added, so the result always starts at lower and ends at upper.
    """
    inside = points[(points > lower) & (points < upper)]
    return np.concatenate(([lower], inside, [upper]))


def segment_sensitivity(
    h: float,
    b0: float,
    w: float,
    w_x: float,
    s0: float,
    s1: float,
    u0: float = 0.0,
    u1: float = 0.0,
) -> float:
    """
    Derivative of one closed-form segment integral V = h * b0 * w(x).

    The segment runs between two integration nodes with credit RT values
    ht0, ht1 and yield RT values rt0, rt1, so that h = ht1 - ht0,
    x = h + rt1 - rt0 and b0 = exp(-ht0 - rt0).

    Args:
        h: Credit RT increment over the segment
        b0: exp(-ht0 - rt0)
        w: Segment kernel value w(x)
        w_x: Kernel derivative dw/dx
        s0, s1: dht/dtheta at the segment start and end
        u0, u1: drt/dtheta at the segment start and end

    Returns
        dV/dtheta
    """
    big_w = b0 * w
    big_wx = b0 * w_x
    d_ht0 = -(1.0 + h) * big_w - h * big_wx
    d_ht1 = big_w + h * big_wx
    d_rt0 = -h * (big_w + big_wx)
    d_rt1 = h * big_wx
    return d_ht0 * s0 + d_ht1 * s1 + d_rt0 * u0 + d_rt1 * u1


def node_values(curve, points: np.ndarray) -> np.ndarray:
    """RT of a curve at each integration node."""
    return np.array([curve.rt(t) for t in points])


def node_weights(curve, points: np.ndarray, knot: int | None) -> np.ndarray:
    """dRT/dRT_knot of a curve at each integration node; zeros if knot is None."""
    if knot is None:
        return np.zeros(len(points))
    return np.array([curve.single_node_rt_sensitivity(t, knot) for t in points])
