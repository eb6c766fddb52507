"""
Tests for contingent (protection) leg calculations.
"""

import math

import numpy as np
import pytest
from scipy.integrate import quad

from cds_analytics import CdsCoupon, CdsSchedule, CreditCurve, DiscountCurve
from cds_analytics.config import TAYLOR_THRESHOLD
from cds_analytics.contingent_leg import expected_loss, protection_kernel
from cds_analytics.contingent_leg import protection_leg_credit_sensitivities
from cds_analytics.contingent_leg import protection_leg_credit_sensitivity
from cds_analytics.contingent_leg import protection_leg_pv, protection_leg_yield_sensitivity


def quarterly_schedule(years=1, protection_start=0.0, recovery=0.4):
    n = 4 * years
    coupons = [
        CdsCoupon(effective_start=0.25 * i, effective_end=0.25 * (i + 1),
                  payment_time=0.25 * (i + 1), year_fraction=0.25)
        for i in range(n)
    ]
    return CdsSchedule(
        coupons=coupons,
        accrual_start=0.0,
        effective_protection_start=protection_start,
        protection_end=0.25 * n,
        recovery_rate=recovery,
    )


class TestProtectionLegPv:
    """Tests for protection_leg_pv."""

    def test_zero_rates_equals_expected_loss(self, zero_yield_curve):
        """With no discounting the leg is the expected loss."""
        credit = CreditCurve.from_forward_rates([0.5, 1.0, 3.0], [0.01, 0.02, 0.04])
        schedule = quarterly_schedule(years=2)
        pv = protection_leg_pv(schedule, zero_yield_curve, credit)
        assert abs(pv - expected_loss(schedule, credit)) < 1e-14

    def test_flat_curves_closed_form(self, flat_yield_curve, flat_credit_curve):
        """lgd * lambda / (lambda + r) * (1 - exp(-(lambda + r) T))."""
        schedule = quarterly_schedule(years=5)
        lam, r, t = 0.02, 0.03, 5.0
        expected = 0.6 * lam / (lam + r) * (1 - math.exp(-(lam + r) * t))
        pv = protection_leg_pv(schedule, flat_yield_curve, flat_credit_curve)
        assert abs(pv - expected) < 1e-14

    def test_matches_quadrature(self, yield_curve):
        """Piecewise curves match numerical integration of lgd * h(t) Q(t) P(t)."""
        credit = CreditCurve.from_forward_rates([0.5, 1.0, 3.0], [0.01, 0.02, 0.04])
        schedule = quarterly_schedule(years=4)

        def integrand(t):
            return credit.hazard_rate(t) * credit.survival_probability(t) * yield_curve.discount_factor(t)

        knots = sorted(set(credit.knot_times) | set(yield_curve.knot_times))
        inner = [k for k in knots if k < 4.0]
        value, _ = quad(integrand, 0.0, 4.0, points=inner, limit=200, epsabs=1e-14, epsrel=1e-12)
        pv = protection_leg_pv(schedule, yield_curve, credit)
        assert abs(pv - 0.6 * value) < 1e-10

    def test_zero_recovery_scales(self, flat_yield_curve, flat_credit_curve):
        """The leg is proportional to the loss given default."""
        pv40 = protection_leg_pv(quarterly_schedule(), flat_yield_curve, flat_credit_curve)
        pv0 = protection_leg_pv(quarterly_schedule(recovery=0.0), flat_yield_curve, flat_credit_curve)
        assert abs(pv0 - pv40 / 0.6) < 1e-14

    def test_zero_hazard(self, flat_yield_curve):
        """No default risk means no protection value."""
        pv = protection_leg_pv(quarterly_schedule(), flat_yield_curve, CreditCurve.flat(0.0))
        assert pv == 0.0

    def test_forward_start(self, flat_yield_curve, flat_credit_curve):
        """Protection starting later is worth less."""
        spot = protection_leg_pv(quarterly_schedule(), flat_yield_curve, flat_credit_curve)
        fwd = protection_leg_pv(quarterly_schedule(protection_start=0.5), flat_yield_curve, flat_credit_curve)
        assert 0.0 < fwd < spot


class TestProtectionKernel:
    """Tests for the (1 - e^-x) / x kernel."""

    def test_continuous_at_threshold(self):
        """Value and derivative agree on both sides of the Taylor threshold."""
        for x in (TAYLOR_THRESHOLD, -TAYLOR_THRESHOLD):
            below = protection_kernel(x * (1 - 1e-9))
            above = protection_kernel(x * (1 + 1e-9))
            assert abs(below[0] - above[0]) < 1e-13
            assert abs(below[1] - above[1]) < 1e-13

    def test_zero(self):
        """w(0) = 1 and w'(0) = -1/2."""
        w, w_x = protection_kernel(0.0)
        assert w == 1.0
        assert w_x == -0.5

    @pytest.mark.parametrize('x', [-0.4, 2e-6, 0.03, 1.2])
    def test_derivative(self, x):
        """The returned derivative matches a central difference."""
        h = 1e-6
        fd = (protection_kernel(x + h)[0] - protection_kernel(x - h)[0]) / (2 * h)
        assert abs(fd - protection_kernel(x)[1]) < 1e-8


class TestProtectionSensitivity:
    """Tests for knot sensitivities of the protection leg."""

    def test_credit_sensitivity_matches_bump(self, five_year_cds, yield_curve, credit_curve):
        """Analytic credit knot derivative against a central bump."""
        eps = 1e-6
        for k in range(credit_curve.num_knots):
            up = protection_leg_pv(five_year_cds, yield_curve, credit_curve.with_rt_shift(k, eps))
            down = protection_leg_pv(five_year_cds, yield_curve, credit_curve.with_rt_shift(k, -eps))
            fd = (up - down) / (2 * eps)
            analytic = protection_leg_credit_sensitivity(five_year_cds, yield_curve, credit_curve, k)
            assert abs(fd - analytic) < 1e-7

    def test_yield_sensitivity_matches_bump(self, five_year_cds, yield_curve, credit_curve):
        """Analytic yield knot derivative against a central bump."""
        eps = 1e-6
        for k in range(yield_curve.num_knots):
            up = protection_leg_pv(five_year_cds, yield_curve.with_rt_shift(k, eps), credit_curve)
            down = protection_leg_pv(five_year_cds, yield_curve.with_rt_shift(k, -eps), credit_curve)
            fd = (up - down) / (2 * eps)
            analytic = protection_leg_yield_sensitivity(five_year_cds, yield_curve, credit_curve, k)
            assert abs(fd - analytic) < 1e-7

    def test_vector_form(self, five_year_cds, yield_curve, credit_curve):
        """Vector of credit sensitivities matches the scalar form."""
        vec = protection_leg_credit_sensitivities(five_year_cds, yield_curve, credit_curve)
        assert vec.shape == (credit_curve.num_knots,)
        assert np.allclose(vec[:2], [
            protection_leg_credit_sensitivity(five_year_cds, yield_curve, credit_curve, k)
            for k in range(2)
        ])

    def test_knots_after_maturity_have_no_effect(self, five_year_cds, yield_curve, credit_curve):
        """Knots beyond the 5Y pillar do not affect a 5Y CDS."""
        vec = protection_leg_credit_sensitivities(five_year_cds, yield_curve, credit_curve)
        assert np.all(np.abs(vec[5:]) < 1e-15)
        assert np.all(vec[:5] > 0.0)

    def test_flat_curve_discount_bump(self, flat_yield_curve, flat_credit_curve):
        """Raising rates lowers the leg value."""
        s = protection_leg_yield_sensitivity(quarterly_schedule(), flat_yield_curve, flat_credit_curve, 0)
        assert s < 0.0

    def test_bad_knot(self, flat_yield_curve, flat_credit_curve):
        """Test out of range knots raise."""
        with pytest.raises(ValueError):
            protection_leg_credit_sensitivity(quarterly_schedule(), flat_yield_curve, flat_credit_curve, 3)


def test_expected_loss_flat():
    """(1 - R) * (1 - exp(-lambda T))."""
    el = expected_loss(quarterly_schedule(years=2), CreditCurve.flat(0.05))
    assert abs(el - 0.6 * (1 - math.exp(-0.1))) < 1e-15


def test_discount_curve_fixture_is_flat(flat_yield_curve):
    """Sanity check of the shared flat curve."""
    assert isinstance(flat_yield_curve, DiscountCurve)
    assert abs(flat_yield_curve.zero_rate(7.0) - 0.03) < 1e-15
