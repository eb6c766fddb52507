"""
Root finding algorithms for curve bootstrapping.

The credit curve bootstrap solves one monotone equation per pillar. The
pricer supplies the analytic derivative, so Newton steps are used,
safeguarded by a bracket: any step that leaves the bracket or fails to
reduce the error is replaced by bisection.
"""

import logging
import math
from collections.abc import Callable

from .exceptions import ConvergenceError

logger = logging.getLogger(__name__)

# Growth factor for bracket expansion
_EXPANSION = 1.6


def find_bracket(
    f: Callable[[float], float],
    x0: float,
    lower_limit: float = -math.inf,
    upper_limit: float = math.inf,
    max_expansions: int = 60,
) -> tuple[float, float]:
    """
    Find an interval around x0 on which f changes sign.

    The interval starts at x0 +/- max(|x0|/2, 1e-3) and grows on the side
    where |f| is smaller, never leaving [lower_limit, upper_limit].

    Args:
        f: Function to bracket
        x0: Initial guess
        lower_limit: Hard lower bound for the bracket
        upper_limit: Hard upper bound for the bracket
        max_expansions: Maximum number of expansion steps

    Returns
        (a, b) with a < b and f(a) * f(b) <= 0

    Raises
        ConvergenceError: If no sign change is found
    """
    if not lower_limit < upper_limit:
        raise ConvergenceError(f'Empty search range [{lower_limit}, {upper_limit}]')
    x0 = min(max(x0, lower_limit), upper_limit)
    width = max(0.5 * abs(x0), 1e-3)
    a = max(x0 - width, lower_limit)
    b = min(x0 + width, upper_limit)
    fa = f(a)
    fb = f(b)

    for _ in range(max_expansions):
        if fa * fb <= 0:
            return a, b
        can_down = a > lower_limit
        can_up = b < upper_limit
        if not (can_down or can_up):
            break
        grow_down = can_down and (abs(fa) < abs(fb) or not can_up)
        step = _EXPANSION * (b - a)
        if grow_down:
            a = max(a - step, lower_limit)
            fa = f(a)
        else:
            b = min(b + step, upper_limit)
            fb = f(b)

    if fa * fb <= 0:
        return a, b
    raise ConvergenceError(
        f'No sign change found in [{a}, {b}]: f(a)={fa}, f(b)={fb}'
    )


def newton_bracketed(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x0: float,
    a: float,
    b: float,
    tol: float = 1e-12,
    max_iter: int = 100,
) -> float:
    """
    Find a root in [a, b] by Newton steps guarded with bisection.

    Args:
        f: Function to find root of
        df: Derivative of f
        x0: Initial guess, replaced by the midpoint if outside [a, b]
        a: Lower bound (f(a) and f(b) must have opposite signs)
        b: Upper bound
        tol: Absolute tolerance on f
        max_iter: Maximum iterations

    Returns
        x such that |f(x)| < tol, or the bracket has collapsed onto x

    Raises
        ConvergenceError: If f(a) and f(b) have the same sign, or max_iter exceeded
    """
    fa = f(a)
    if abs(fa) < tol:
        return a
    fb = f(b)
    if abs(fb) < tol:
        return b
    if fa * fb > 0:
        raise ConvergenceError(
            f'Function values at bounds must have opposite signs: '
            f'f({a})={fa}, f({b})={fb}'
        )

    # Orient so that f(neg) < 0 < f(pos)
    neg, pos = (a, b) if fa < 0 else (b, a)
    x = x0 if min(a, b) < x0 < max(a, b) else 0.5 * (a + b)
    f_prev = math.inf
    bisections = 0

    for _ in range(max_iter):
        fx = f(x)
        if abs(fx) < tol:
            break
        if fx < 0:
            neg = x
        else:
            pos = x

        lo, hi = min(neg, pos), max(neg, pos)
        dfx = df(x)
        x_new = x - fx / dfx if dfx != 0.0 and math.isfinite(dfx) else math.nan
        if not lo < x_new < hi or abs(fx) > 0.5 * f_prev:
            x_new = 0.5 * (lo + hi)
            bisections += 1
            logger.debug('Newton step rejected at x=%g, bisecting [%g, %g]', x, lo, hi)
        f_prev = abs(fx)

        if abs(x_new - x) <= 4.0 * math.ulp(max(abs(x), 1.0)):
            x = x_new
            break
        x = x_new
    else:
        raise ConvergenceError(f'Newton-Raphson did not converge in {max_iter} iterations')

    if bisections:
        logger.warning('Newton fell back to bisection %d times before converging', bisections)
    return x
