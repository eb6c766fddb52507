"""
Interpolation of ISDA curves.

ISDA curves are linear in RT(t) = r(t) * t between knots, which makes the
instantaneous forward rate piecewise constant (flat forward). Before the
first knot the zero rate is held flat; after the last knot the last
segment is extended.

All functions take the knot arrays explicitly and never modify them.
"""

import numpy as np

from .exceptions import InterpolationError


def validate_knots(times: np.ndarray, rt_values: np.ndarray) -> None:
    """
    Check that a pair of knot arrays describes a valid curve.

    Raises
        InterpolationError: If the arrays are empty, differ in length,
            contain non-finite values, or times are not positive and
            strictly increasing
    """
    if times.ndim != 1 or rt_values.ndim != 1:
        raise InterpolationError('Knot arrays must be one-dimensional')
    if len(times) == 0:
        raise InterpolationError('Empty curve data')
    if len(times) != len(rt_values):
        raise InterpolationError(
            f'Times and values arrays must have same length: '
            f'{len(times)} != {len(rt_values)}'
        )
    if not (np.all(np.isfinite(times)) and np.all(np.isfinite(rt_values))):
        raise InterpolationError('Knot arrays must be finite')
    if times[0] <= 0.0:
        raise InterpolationError(f'First knot time must be positive, got {times[0]}')
    if np.any(np.diff(times) <= 0.0):
        raise InterpolationError('Knot times must be strictly increasing')


def _segment(t: float, times: np.ndarray) -> int:
    """Index of the upper knot of the segment used for t beyond the first knot."""
    return min(int(np.searchsorted(times, t)), len(times) - 1)


def rt_interp(t: float, times: np.ndarray, rt_values: np.ndarray) -> float:
    """
    Interpolate RT(t).

    Args:
        t: Time (in years)
        times: Knot times
        rt_values: RT at each knot

    Returns
        RT(t)
    """
    n = len(times)
    if n == 1 or t <= times[0]:
        return rt_values[0] * t / times[0]
    ip = _segment(t, times)
    if times[ip] == t:
        return rt_values[ip]
    t0, t1 = times[ip - 1], times[ip]
    r0, r1 = rt_values[ip - 1], rt_values[ip]
    return r0 + (r1 - r0) * (t - t0) / (t1 - t0)


def rt_weight(t: float, times: np.ndarray, index: int) -> float:
    """
    dRT(t)/dRT_index: the weight of one knot in the interpolated value.

    Args:
        t: Time (in years)
        times: Knot times
        index: Knot index

    Returns
        Interpolation weight; zero for knots outside the segment used
    """
    n = len(times)
    if n == 1 or t <= times[0]:
        return t / times[0] if index == 0 else 0.0
    ip = _segment(t, times)
    if times[ip] == t:
        return 1.0 if index == ip else 0.0
    t0, t1 = times[ip - 1], times[ip]
    if index == ip:
        return (t - t0) / (t1 - t0)
    if index == ip - 1:
        return (t1 - t) / (t1 - t0)
    return 0.0


def rt_weights(t: float, times: np.ndarray) -> np.ndarray:
    """Weights of every knot at t, as an array the length of times."""
    weights = np.zeros(len(times))
    n = len(times)
    if n == 1 or t <= times[0]:
        weights[0] = t / times[0]
        return weights
    ip = _segment(t, times)
    if times[ip] == t:
        weights[ip] = 1.0
        return weights
    t0, t1 = times[ip - 1], times[ip]
    weights[ip] = (t - t0) / (t1 - t0)
    weights[ip - 1] = (t1 - t) / (t1 - t0)
    return weights


def forward_rate_interp(t: float, times: np.ndarray, rt_values: np.ndarray) -> float:
    """
    Instantaneous forward rate dRT/dt at t.

    On a knot the rate of the segment to its right is returned.
    """
    n = len(times)
    if n == 1 or t < times[0]:
        return rt_values[0] / times[0]
    ip = min(int(np.searchsorted(times, t, side='right')), n - 1)
    return (rt_values[ip] - rt_values[ip - 1]) / (times[ip] - times[ip - 1])
