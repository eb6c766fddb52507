"""
Tests for fee (premium) leg calculations.
"""

import math

import pytest
from scipy.integrate import quad

from cds_analytics import AccrualOnDefaultFormula, CdsCoupon, CdsSchedule, CreditCurve
from cds_analytics.config import TAYLOR_THRESHOLD
from cds_analytics.fee_leg import accrual_kernel, accrued_premium_factor, dirty_annuity
from cds_analytics.fee_leg import dirty_annuity_credit_sensitivity, dirty_annuity_yield_sensitivity

FORMULAS = list(AccrualOnDefaultFormula)


def quarterly_schedule(years=1, pay_aod=True):
    n = 4 * years
    coupons = [
        CdsCoupon(effective_start=0.25 * i, effective_end=0.25 * (i + 1),
                  payment_time=0.25 * (i + 1), year_fraction=0.25)
        for i in range(n)
    ]
    return CdsSchedule(
        coupons=coupons,
        accrual_start=0.0,
        effective_protection_start=0.0,
        protection_end=0.25 * n,
        pay_accrual_on_default=pay_aod,
    )


def flat_aod(lam, r, years, omega=0.0):
    """Accrual on default for flat curves, period by period."""
    k = lam + r
    d = 0.25
    total = 0.0
    for i in range(4 * years):
        s = d * i
        total += lam * math.exp(-k * s) * (1 - math.exp(-k * d) * (1 + k * d)) / k ** 2
        total += omega * lam / k * math.exp(-k * s) * (1 - math.exp(-k * d))
    return total


def coupon_sum(schedule, discount_curve, credit_curve):
    return sum(
        c.year_fraction * discount_curve.discount_factor(c.payment_time)
        * credit_curve.survival_probability(c.effective_end)
        for c in schedule.coupons
    )


class TestDirtyAnnuity:
    """Tests for the risky annuity."""

    def test_no_accrual_on_default(self, yield_curve, credit_curve):
        """Without accrual on default the annuity is the coupon sum."""
        schedule = quarterly_schedule(years=3, pay_aod=False)
        annuity = dirty_annuity(schedule, yield_curve, credit_curve)
        assert abs(annuity - coupon_sum(schedule, yield_curve, credit_curve)) < 1e-15

    def test_flat_curves_correct_formula(self, flat_yield_curve, flat_credit_curve):
        """Exact accrual integral for flat curves."""
        schedule = quarterly_schedule(years=5)
        annuity = dirty_annuity(schedule, flat_yield_curve, flat_credit_curve, AccrualOnDefaultFormula.CORRECT)
        expected = coupon_sum(schedule, flat_yield_curve, flat_credit_curve) + flat_aod(0.02, 0.03, 5)
        assert abs(annuity - expected) < 1e-14

    def test_flat_curves_original_isda(self, flat_yield_curve, flat_credit_curve):
        """The original formula adds half a day of accrual to every default."""
        schedule = quarterly_schedule(years=5)
        annuity = dirty_annuity(
            schedule, flat_yield_curve, flat_credit_curve, AccrualOnDefaultFormula.ORIGINAL_ISDA
        )
        expected = (
            coupon_sum(schedule, flat_yield_curve, flat_credit_curve)
            + flat_aod(0.02, 0.03, 5, omega=1 / 730)
        )
        assert abs(annuity - expected) < 1e-14

    def test_markit_fix_single_segment(self, flat_yield_curve, flat_credit_curve):
        """With one segment per period the Markit fix equals the correct formula."""
        schedule = quarterly_schedule(years=2)
        markit = dirty_annuity(schedule, flat_yield_curve, flat_credit_curve, AccrualOnDefaultFormula.MARKIT_FIX)
        correct = dirty_annuity(schedule, flat_yield_curve, flat_credit_curve, AccrualOnDefaultFormula.CORRECT)
        assert abs(markit - correct) < 1e-15

    @pytest.mark.parametrize('formula', [AccrualOnDefaultFormula.CORRECT, AccrualOnDefaultFormula.ORIGINAL_ISDA])
    def test_matches_quadrature(self, yield_curve, formula):
        """Piecewise curves match numerical integration of the accrued premium."""
        credit = CreditCurve.from_forward_rates([0.4, 1.1, 3.0], [0.01, 0.03, 0.02])
        schedule = quarterly_schedule(years=3)
        knots = sorted(set(credit.knot_times) | set(yield_curve.knot_times))

        aod = 0.0
        for c in schedule.coupons:
            s, e = c.effective_start, c.effective_end

            def integrand(t, s=s):
                accrued = t - s + formula.omega
                return (accrued * credit.hazard_rate(t) * credit.survival_probability(t)
                        * yield_curve.discount_factor(t))

            inner = [k for k in knots if s < k < e]
            value, _ = quad(integrand, s, e, points=inner or None, epsabs=1e-15, epsrel=1e-12)
            aod += value

        expected = coupon_sum(schedule, yield_curve, credit) + aod
        assert abs(dirty_annuity(schedule, yield_curve, credit, formula) - expected) < 1e-11

    def test_formula_ordering(self, yield_curve, credit_curve, five_year_cds):
        """The half-day offset makes the original formula the largest."""
        values = {
            f: dirty_annuity(five_year_cds, yield_curve, credit_curve, f) for f in FORMULAS
        }
        assert values[AccrualOnDefaultFormula.ORIGINAL_ISDA] > values[AccrualOnDefaultFormula.CORRECT]

    def test_accrued_premium_factor(self, five_year_cds, yield_curve, credit_curve):
        """Accrued premium discounted from cash settlement."""
        expected = 56 / 360 * yield_curve.discount_factor(5 / 365)
        factor = accrued_premium_factor(five_year_cds, yield_curve, credit_curve)
        assert abs(factor - expected) < 1e-12

    def test_expired(self, yield_curve, credit_curve):
        """An expired schedule has no annuity."""
        schedule = CdsSchedule(
            coupons=[], accrual_start=-1.0, effective_protection_start=0.0, protection_end=-0.1
        )
        assert dirty_annuity(schedule, yield_curve, credit_curve) == 0.0
        assert accrued_premium_factor(schedule, yield_curve, credit_curve) == 0.0


class TestAccrualKernel:
    """Tests for the accrual-on-default quotient."""

    @pytest.mark.parametrize('formula', FORMULAS)
    def test_continuous_at_threshold(self, formula):
        """Value and derivative agree on both sides of the Taylor threshold."""
        for x in (TAYLOR_THRESHOLD, -TAYLOR_THRESHOLD):
            below = accrual_kernel(x * (1 - 1e-9), 0.3, 0.25, formula)
            above = accrual_kernel(x * (1 + 1e-9), 0.3, 0.25, formula)
            assert abs(below[0] - above[0]) < 1e-10
            assert abs(below[1] - above[1]) < 1e-10

    @pytest.mark.parametrize('formula', FORMULAS)
    @pytest.mark.parametrize('x', [-0.3, 3e-6, 0.05, 1.0])
    def test_derivative(self, formula, x):
        """The returned derivative matches a central difference."""
        h = 1e-6
        up = accrual_kernel(x + h, 0.1, 0.25, formula)[0]
        down = accrual_kernel(x - h, 0.1, 0.25, formula)[0]
        assert abs((up - down) / (2 * h) - accrual_kernel(x, 0.1, 0.25, formula)[1]) < 1e-7

    def test_markit_ignores_start(self):
        """The Markit fix has no dependence on the accrual start."""
        a = accrual_kernel(0.02, 0.0, 0.25, AccrualOnDefaultFormula.MARKIT_FIX)
        b = accrual_kernel(0.02, 0.2, 0.25, AccrualOnDefaultFormula.MARKIT_FIX)
        assert a == b

    def test_zero_exponent(self):
        """w(0) = t0 + dt / 2."""
        w, _ = accrual_kernel(0.0, 0.1, 0.25, AccrualOnDefaultFormula.CORRECT)
        assert abs(w - 0.225) < 1e-15


class TestAnnuitySensitivity:
    """Tests for knot sensitivities of the annuity."""

    @pytest.mark.parametrize('formula', FORMULAS)
    def test_credit_sensitivity_matches_bump(self, five_year_cds, yield_curve, credit_curve, formula):
        """Analytic credit knot derivative against a central bump."""
        eps = 1e-6
        for k in range(credit_curve.num_knots):
            up = dirty_annuity(five_year_cds, yield_curve, credit_curve.with_rt_shift(k, eps), formula)
            down = dirty_annuity(five_year_cds, yield_curve, credit_curve.with_rt_shift(k, -eps), formula)
            fd = (up - down) / (2 * eps)
            analytic = dirty_annuity_credit_sensitivity(five_year_cds, yield_curve, credit_curve, k, formula)
            assert abs(fd - analytic) < 1e-7

    def test_yield_sensitivity_matches_bump(self, five_year_cds, yield_curve, credit_curve):
        """Analytic yield knot derivative against a central bump."""
        eps = 1e-6
        for k in range(yield_curve.num_knots):
            up = dirty_annuity(five_year_cds, yield_curve.with_rt_shift(k, eps), credit_curve)
            down = dirty_annuity(five_year_cds, yield_curve.with_rt_shift(k, -eps), credit_curve)
            fd = (up - down) / (2 * eps)
            analytic = dirty_annuity_yield_sensitivity(five_year_cds, yield_curve, credit_curve, k)
            assert abs(fd - analytic) < 1e-7

    def test_bad_knot(self, five_year_cds, yield_curve, credit_curve):
        """Test out of range knots raise."""
        with pytest.raises(ValueError):
            dirty_annuity_yield_sensitivity(five_year_cds, yield_curve, credit_curve, yield_curve.num_knots)
