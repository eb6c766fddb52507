"""
Tests for CDS coupon schedules.
"""

from datetime import date

import pytest

from cds_analytics import ArgumentError, BadDayConvention, CdsCoupon, CdsSchedule
from cds_analytics import PaymentFrequency, StubMethod, generate_coupon_periods


def _coupon(start, end, yf=0.25):
    return CdsCoupon(effective_start=start, effective_end=end, payment_time=end, year_fraction=yf)


class TestGenerateCouponPeriods:
    """Tests for generate_coupon_periods."""

    def test_regular_quarterly(self):
        """5 years quarterly from an IMM date gives 20 periods."""
        periods = generate_coupon_periods(date(2020, 3, 20), date(2025, 3, 20))
        assert len(periods) == 20

    def test_semi_annual(self):
        """Semi-annual coupons halve the period count."""
        periods = generate_coupon_periods(
            date(2020, 3, 20), date(2025, 3, 20), frequency=PaymentFrequency.SEMI_ANNUAL
        )
        assert len(periods) == 10

    def test_periods_are_contiguous(self):
        """Each period starts where the previous one ends."""
        periods = generate_coupon_periods(date(2014, 1, 10), date(2015, 3, 20))
        for prev, nxt in zip(periods, periods[1:]):
            assert prev.accrual_end == nxt.accrual_start

    def test_front_short_stub(self):
        """The short stub is the first period."""
        periods = generate_coupon_periods(date(2014, 1, 10), date(2015, 3, 20))
        assert len(periods) == 5
        assert periods[0].accrual_start == date(2014, 1, 10)
        assert periods[0].accrual_end == date(2014, 3, 20)
        assert abs(periods[0].year_fraction - 69 / 360) < 1e-12

    def test_front_long_stub(self):
        """The long stub merges the first two periods."""
        periods = generate_coupon_periods(
            date(2014, 1, 10), date(2015, 3, 20), stub=StubMethod.FRONT_LONG
        )
        assert len(periods) == 4
        assert periods[0].accrual_end == date(2014, 6, 20)

    def test_back_short_stub(self):
        """Back stubs roll forward from the accrual start."""
        periods = generate_coupon_periods(
            date(2014, 1, 10), date(2015, 3, 20), stub=StubMethod.BACK_SHORT
        )
        assert len(periods) == 5
        assert periods[1].accrual_start == date(2014, 4, 10)

    def test_back_long_stub(self):
        """The long back stub merges the last two periods."""
        periods = generate_coupon_periods(
            date(2014, 1, 10), date(2015, 3, 20), stub=StubMethod.BACK_LONG
        )
        assert len(periods) == 4
        assert periods[-1].accrual_start == date(2014, 10, 10)

    def test_accrual_dates_adjusted(self):
        """Intermediate dates falling on weekends roll forward."""
        periods = generate_coupon_periods(date(2014, 1, 10), date(2015, 3, 20))
        # 20 September 2014 is a Saturday
        assert periods[2].accrual_end == date(2014, 9, 22)
        assert periods[2].payment_date == date(2014, 9, 22)

    def test_unadjusted_with_none(self):
        """No adjustment keeps the unadjusted roll dates."""
        periods = generate_coupon_periods(
            date(2014, 1, 10), date(2015, 3, 20), bad_day=BadDayConvention.NONE
        )
        assert periods[2].accrual_end == date(2014, 9, 20)

    def test_last_period_includes_maturity(self):
        """With protection from the start of day the final accrual runs one day past maturity."""
        periods = generate_coupon_periods(date(2014, 1, 10), date(2015, 3, 20))
        assert periods[-1].accrual_end == date(2015, 3, 21)
        assert periods[-1].payment_date == date(2015, 3, 20)

    def test_last_period_end_of_day(self):
        """Without it the final accrual ends on maturity."""
        periods = generate_coupon_periods(
            date(2014, 1, 10), date(2015, 3, 20), protect_start=False
        )
        assert periods[-1].accrual_end == date(2015, 3, 20)

    def test_maturity_before_start(self):
        """Test maturity on or before the accrual start raises."""
        with pytest.raises(ArgumentError):
            generate_coupon_periods(date(2015, 3, 20), date(2015, 3, 20))


class TestCdsScheduleFromFactory:
    """Tests for the analytic schedule of a standard 5Y CDS."""

    def test_counts(self, five_year_cds):
        """21 quarterly coupons from 20 December 2013 to 20 March 2019."""
        assert five_year_cds.num_payments == 21
        assert five_year_cds.accrual_start_date == date(2013, 12, 20)
        assert five_year_cds.maturity == date(2019, 3, 20)

    def test_times(self, five_year_cds):
        """Times are ACT/365F year fractions from the trade date."""
        assert abs(five_year_cds.protection_end - 1861 / 365) < 1e-12
        assert abs(five_year_cds.cash_settle_time - 5 / 365) < 1e-12
        assert abs(five_year_cds.accrual_start + 55 / 365) < 1e-12
        assert five_year_cds.effective_protection_start == 0.0

    def test_accrued(self, five_year_cds):
        """Accrual runs from the period start to the step-in date."""
        assert five_year_cds.accrued_days == 56
        assert abs(five_year_cds.accrued_year_fraction - 56 / 360) < 1e-12

    def test_first_coupon(self, five_year_cds):
        """First coupon times carry the one day protection offset."""
        c = five_year_cds.coupons[0]
        assert abs(c.effective_start + 56 / 365) < 1e-12
        assert abs(c.effective_end - 34 / 365) < 1e-12
        assert abs(c.payment_time - 35 / 365) < 1e-12
        assert abs(c.year_fraction - 0.25) < 1e-12
        assert abs(c.yf_ratio - 365 / 360) < 1e-12

    def test_last_coupon_ends_at_protection_end(self, five_year_cds):
        """The last coupon observes survival at protection end."""
        c = five_year_cds.coupons[-1]
        assert abs(c.effective_end - five_year_cds.protection_end) < 1e-12
        assert abs(c.year_fraction - 91 / 360) < 1e-12

    def test_trade_terms(self, five_year_cds):
        """Trade terms are carried but not used by the legs."""
        assert five_year_cds.coupon_rate == 0.01
        assert five_year_cds.notional == 10_000_000
        assert five_year_cds.direction == 1.0
        assert abs(five_year_cds.lgd - 0.6) < 1e-15

    def test_with_methods_return_new_schedules(self, five_year_cds):
        """Updates return copies and leave the original unchanged."""
        sold = five_year_cds.with_direction(False)
        assert sold.direction == -1.0
        assert five_year_cds.direction == 1.0
        assert five_year_cds.with_coupon(0.05).coupon_rate == 0.05
        assert five_year_cds.with_recovery_rate(0.25).lgd == 0.75
        assert five_year_cds.with_notional(1.0).notional == 1.0


class TestCdsScheduleValidation:
    """Tests for CdsSchedule invariants."""

    def test_valid_schedule(self):
        """Contiguous coupons ending at protection end are accepted."""
        s = CdsSchedule(
            coupons=[_coupon(0.0, 0.5), _coupon(0.5, 1.0)],
            accrual_start=0.0,
            effective_protection_start=0.0,
            protection_end=1.0,
        )
        assert s.num_payments == 2
        assert isinstance(s.coupons, tuple)

    def test_gap_between_coupons(self):
        """Test non-contiguous coupons raise."""
        with pytest.raises(ArgumentError):
            CdsSchedule(
                coupons=[_coupon(0.0, 0.4), _coupon(0.5, 1.0)],
                accrual_start=0.0,
                effective_protection_start=0.0,
                protection_end=1.0,
            )

    def test_last_coupon_mismatch(self):
        """Test a last coupon ending away from protection end raises."""
        with pytest.raises(ArgumentError):
            CdsSchedule(
                coupons=[_coupon(0.0, 0.9)],
                accrual_start=0.0,
                effective_protection_start=0.0,
                protection_end=1.0,
            )

    def test_live_schedule_needs_coupons(self):
        """Test a live CDS without coupons raises."""
        with pytest.raises(ArgumentError):
            CdsSchedule(coupons=[], accrual_start=0.0, effective_protection_start=0.0, protection_end=1.0)

    def test_expired_schedule_may_be_empty(self):
        """An expired CDS needs no coupons."""
        s = CdsSchedule(coupons=[], accrual_start=-2.0, effective_protection_start=-2.0, protection_end=-0.5)
        assert s.is_expired
        assert s.num_payments == 0

    @pytest.mark.parametrize('recovery', [-0.1, 1.1])
    def test_bad_recovery(self, recovery):
        """Test recovery outside [0, 1] raises."""
        with pytest.raises(ArgumentError):
            CdsSchedule(
                coupons=[_coupon(0.0, 1.0)],
                accrual_start=0.0,
                effective_protection_start=0.0,
                protection_end=1.0,
                recovery_rate=recovery,
            )
