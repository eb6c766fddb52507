#!/usr/bin/env python3
"""
Calibrate and Price Example
===========================

Bootstraps a credit curve from par spreads on standard IMM pillar CDSs,
prices a 5Y trade on it and reports its spread risk: bucketed CS01
against the pillars and the hedge notionals that neutralize it.
"""

from cds_analytics import CDS, CdsScheduleFactory, CreditCurveBuilder, DiscountCurve
from cds_analytics import HedgeRatioCalculator, SpreadSensitivityCalculator

# =============================================================================
# Market Data Setup
# =============================================================================

trade_date = '2024-06-13'

# Risk-free zero rates (continuously compounded, ACT/365F)
zero_times = [0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 7.0, 10.0]
zero_rates = [0.0530, 0.0525, 0.0505, 0.0470, 0.0450, 0.0430, 0.0425, 0.0420]

pillar_tenors = ['6M', '1Y', '2Y', '3Y', '5Y', '7Y', '10Y']
par_spreads = [0.0040, 0.0048, 0.0062, 0.0075, 0.0098, 0.0112, 0.0125]

notional = 10_000_000
coupon = 0.01

print('=' * 70)
print('CDS Analytics - Calibrate and Price')
print('=' * 70)
print()

# =============================================================================
# Curves
# =============================================================================

factory = CdsScheduleFactory()
pillars = factory.make_imm_cds_batch(trade_date, pillar_tenors)
yield_curve = DiscountCurve.from_zero_rates(zero_times, zero_rates, base_date=trade_date)
credit_curve = CreditCurveBuilder().calibrate_par_spreads(pillars, par_spreads, yield_curve)

print(f"{'Tenor':<8} {'Par Spread (bps)':>18} {'Survival':>12}")
print('-' * 40)
for tenor, pillar, spread in zip(pillar_tenors, pillars, par_spreads):
    survival = credit_curve.survival_probability(pillar.protection_end)
    print(f'{tenor:<8} {spread * 10_000:>18.1f} {survival:>12.6f}')
print()

# =============================================================================
# Trade Pricing
# =============================================================================

trade = factory.make_imm_cds(trade_date, '5Y', coupon_rate=coupon, notional=notional)
result = CDS(trade, yield_curve, credit_curve, pillars=pillars).price()

print('-' * 70)
print(f'5Y Buy Protection, Notional ${notional:,.0f}, Coupon {coupon * 10_000:.0f} bps')
print('-' * 70)
print(f'Clean PV:          ${result.pv_clean:>14,.2f}')
print(f'Dirty PV:          ${result.pv_dirty:>14,.2f}')
print(f'Accrued:           ${result.accrued_interest:>14,.2f}')
print(f'Par Spread:         {result.par_spread * 10_000:>14.2f} bps')
print(f'Risky Annuity:      {result.risky_annuity:>14.4f}')
print(f'CS01 (1bp):        ${result.cs01:>14,.2f}')
print()

# =============================================================================
# Bucketed CS01 and Hedges
# =============================================================================

calc = SpreadSensitivityCalculator()
bucketed = calc.bucketed_cs01(trade, coupon, pillars, yield_curve, credit_curve)
hedges = HedgeRatioCalculator().hedge_ratios(trade, coupon, pillars, coupon, yield_curve, credit_curve)

print(f"{'Bucket':<8} {'CS01 ($/bp)':>14} {'Hedge Notional':>18}")
print('-' * 44)
for tenor, cs01, ratio in zip(pillar_tenors, bucketed, hedges):
    print(f'{tenor:<8} {notional * cs01 * 1e-4:>14,.2f} {-notional * ratio:>18,.0f}')
print()
print('Hedge notionals are sold protection (negative) on each pillar')
