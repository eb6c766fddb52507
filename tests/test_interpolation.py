"""
Tests for interpolation functions.
"""

import numpy as np
import pytest

from cds_analytics import InterpolationError
from cds_analytics.interpolation import forward_rate_interp, rt_interp, rt_weight
from cds_analytics.interpolation import rt_weights, validate_knots

TIMES = np.array([1.0, 2.0, 4.0])
RT = np.array([0.02, 0.05, 0.13])


class TestRtInterp:
    """Tests for linear interpolation of RT."""

    def test_at_knots(self):
        """Test interpolation returns exact values at knots."""
        for t, rt in zip(TIMES, RT):
            assert rt_interp(t, TIMES, RT) == rt

    def test_between_knots(self):
        """RT is linear between knots."""
        assert abs(rt_interp(3.0, TIMES, RT) - 0.09) < 1e-15

    def test_before_first_knot(self):
        """Before the first knot the zero rate is flat."""
        assert abs(rt_interp(0.5, TIMES, RT) - 0.01) < 1e-15
        assert rt_interp(0.0, TIMES, RT) == 0.0

    def test_after_last_knot(self):
        """The last segment is extrapolated."""
        assert abs(rt_interp(6.0, TIMES, RT) - 0.21) < 1e-15

    def test_single_knot(self):
        """A single knot gives a flat zero rate everywhere."""
        times = np.array([2.0])
        rt = np.array([0.06])
        assert abs(rt_interp(5.0, times, rt) - 0.15) < 1e-15


class TestRtWeight:
    """Tests for the knot weights of RT."""

    def test_weights_sum_between_knots(self):
        """Between knots the two neighbouring weights sum to one."""
        w = rt_weights(3.0, TIMES)
        assert abs(w.sum() - 1.0) < 1e-15
        assert w[0] == 0.0

    def test_weight_matches_bump(self):
        """The weight is the derivative of RT with respect to the knot value."""
        eps = 1e-6
        for t in (0.3, 1.0, 1.7, 3.5, 6.0):
            for i in range(len(TIMES)):
                up = RT.copy()
                up[i] += eps
                fd = (rt_interp(t, TIMES, up) - rt_interp(t, TIMES, RT)) / eps
                assert abs(fd - rt_weight(t, TIMES, i)) < 1e-8

    def test_extrapolated_weights(self):
        """Beyond the last knot the upper weight exceeds one."""
        w = rt_weights(6.0, TIMES)
        assert abs(w[2] - 2.0) < 1e-15
        assert abs(w[1] + 1.0) < 1e-15

    def test_weight_and_weights_agree(self):
        """Scalar and vector forms agree."""
        for t in (0.5, 2.0, 2.5, 5.0):
            w = rt_weights(t, TIMES)
            for i in range(len(TIMES)):
                assert w[i] == rt_weight(t, TIMES, i)


class TestForwardRate:
    """Tests for the instantaneous forward rate."""

    def test_piecewise_constant(self):
        """The forward rate is constant on each segment."""
        assert abs(forward_rate_interp(0.5, TIMES, RT) - 0.02) < 1e-15
        assert abs(forward_rate_interp(1.5, TIMES, RT) - 0.03) < 1e-15
        assert abs(forward_rate_interp(3.0, TIMES, RT) - 0.04) < 1e-15
        assert abs(forward_rate_interp(9.0, TIMES, RT) - 0.04) < 1e-15

    def test_right_continuous_at_knot(self):
        """On a knot the rate of the segment to the right is used."""
        assert abs(forward_rate_interp(2.0, TIMES, RT) - 0.04) < 1e-15


class TestValidateKnots:
    """Tests for knot validation."""

    def test_valid(self):
        """Valid knots pass."""
        validate_knots(TIMES, RT)

    @pytest.mark.parametrize(('times', 'values'), [
        ([], []),
        ([1.0, 2.0], [0.01]),
        ([0.0, 1.0], [0.0, 0.01]),
        ([1.0, 1.0], [0.01, 0.02]),
        ([2.0, 1.0], [0.01, 0.02]),
        ([1.0, np.nan], [0.01, 0.02]),
    ])
    def test_invalid(self, times, values):
        """Test malformed knots raise InterpolationError."""
        with pytest.raises(InterpolationError):
            validate_knots(np.array(times, dtype=float), np.array(values, dtype=float))
