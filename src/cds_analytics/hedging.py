"""
Hedge ratios against credit curve knot risk.

A portfolio is hedged when its sensitivity to every knot of the credit
curve is zero. With J[i, j] the sensitivity of hedge j to knot i and
v[i] that of the target, the hedge notionals (per unit target notional)
solve J x = v:

- as many hedges as knots: exact LU solve
- fewer hedges than knots: no exact hedge exists and an error is raised
- more hedges than knots: the minimum norm solution x = J^T (J J^T)^-1 v
"""

import logging
import warnings
from collections.abc import Sequence

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from .credit_curve import broadcast_values
from .curves import CreditCurve, DiscountCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .exceptions import ArgumentError, UnderDeterminedHedgeError, check_argument
from .pricer import AnalyticCdsPricer
from .schedule import CdsSchedule

logger = logging.getLogger(__name__)

# Relative pivot size below which a matrix is treated as singular
_SINGULAR_TOLERANCE = 1e-14


def _lu_solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solve a square system by LU decomposition, rejecting singular matrices."""
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', LinAlgWarning)
        lu, piv = lu_factor(matrix)
    pivots = np.abs(np.diag(lu))
    if pivots.min() <= _SINGULAR_TOLERANCE * max(pivots.max(), 1.0):
        raise ArgumentError('Sensitivity matrix is singular; hedge instruments are not independent')
    return lu_solve((lu, piv), rhs)


def solve_hedge(jacobian: np.ndarray, target: np.ndarray) -> np.ndarray:
    """
    Solve J x = v for the hedge amounts.

    Args:
        jacobian: Sensitivity matrix, rows are curve knots and columns hedges
        target: Sensitivity of the position to each knot

    Returns
        Hedge amount for each column of the jacobian

    Raises
        ArgumentError: If shapes disagree or the system is singular
        UnderDeterminedHedgeError: If there are fewer hedges than knots
    """
    jac = np.asarray(jacobian, dtype=float)
    v = np.asarray(target, dtype=float)
    check_argument(jac.ndim == 2, f'Jacobian must be two-dimensional, got shape {jac.shape}')
    n_knots, n_hedges = jac.shape
    check_argument(
        v.shape == (n_knots,),
        f'Target has shape {v.shape}, expected ({n_knots},)',
    )

    if n_hedges < n_knots:
        raise UnderDeterminedHedgeError(
            f'{n_hedges} hedge instruments cannot neutralize {n_knots} curve knots'
        )
    if n_hedges == n_knots:
        logger.debug('Exact hedge solve with %d instruments', n_hedges)
        return _lu_solve(jac, v)

    logger.debug('Minimum norm hedge with %d instruments for %d knots', n_hedges, n_knots)
    a = jac.T
    z = _lu_solve(a.T @ a, v)
    return a @ z


class HedgeRatioCalculator:
    """
    Hedge ratios of a CDS against a set of hedge CDSs.

    Example:
        >>> calc = HedgeRatioCalculator()
        >>> ratios = calc.hedge_ratios(target, 0.01, hedges, 0.01, yield_curve, credit_curve)
    """

    def __init__(
        self,
        formula: AccrualOnDefaultFormula | str = AccrualOnDefaultFormula.ORIGINAL_ISDA,
    ):
        self.pricer = AnalyticCdsPricer(formula)

    def __repr__(self) -> str:
        return f'HedgeRatioCalculator({self.pricer.formula.name})'

    def curve_sensitivities(
        self,
        cds: Sequence[CdsSchedule],
        coupons: float | Sequence[float],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """
        Credit knot sensitivity of each CDS.

        Returns
            Array of shape (num_knots, len(cds))
        """
        check_argument(len(cds) > 0, 'No CDSs supplied')
        spreads = broadcast_values(coupons, len(cds), 'coupons')
        columns = [
            self.pricer.pv_credit_sensitivities(s, discount_curve, credit_curve, c, PriceType.CLEAN)
            for s, c in zip(cds, spreads)
        ]
        return np.column_stack(columns)

    def hedge_ratios(
        self,
        target: CdsSchedule,
        target_coupon: float,
        hedges: Sequence[CdsSchedule],
        hedge_coupons: float | Sequence[float],
        discount_curve: DiscountCurve,
        credit_curve: CreditCurve,
    ) -> np.ndarray:
        """
        Notional of each hedge, per unit target notional, whose combined
        knot sensitivity equals that of the target.

        Selling these amounts of protection against a long protection
        position in the target leaves no credit curve knot risk.

        Args:
            target: CDS to hedge
            target_coupon: Coupon of the target
            hedges: Hedge CDSs
            hedge_coupons: Coupon of each hedge, or one coupon for all
            discount_curve: Risk-free curve
            credit_curve: Credit curve

        Returns
            Hedge ratio of each hedge
        """
        jac = self.curve_sensitivities(hedges, hedge_coupons, discount_curve, credit_curve)
        v = self.pricer.pv_credit_sensitivities(
            target, discount_curve, credit_curve, target_coupon, PriceType.CLEAN
        )
        return solve_hedge(jac, v)

    @staticmethod
    def solve(jacobian: np.ndarray, target: np.ndarray) -> np.ndarray:
        """Solve J x = v under the exact / reject / minimum norm policy."""
        return solve_hedge(jacobian, target)

    @staticmethod
    def residual(jacobian: np.ndarray, target: np.ndarray, ratios: np.ndarray) -> np.ndarray:
        """Knot sensitivity left after hedging, J x - v."""
        return np.asarray(jacobian) @ np.asarray(ratios) - np.asarray(target)
