"""
ISDA yield and credit curves.

Both curves are stored the same way: knot times t_i and the values
RT_i = r(t_i) * t_i, interpolated linearly in t (see interpolation.py).

- DiscountCurve: P(t) = exp(-RT(t)), r is the zero rate
- CreditCurve: Q(t) = exp(-RT(t)), r is the zero hazard rate

Curves are immutable. The knot arrays are read-only and every update
method returns a new curve of the same type.
"""

from collections.abc import Sequence

import numpy as np

from .dates import DateLike, year_fraction
from .enums import DayCountConvention
from .exceptions import ArgumentError
from .interpolation import forward_rate_interp, rt_interp, rt_weight, rt_weights
from .interpolation import validate_knots


class IsdaCurve:
    """
    Piecewise linear RT(t) curve.

    Attributes
        knot_times: Read-only array of knot times (in years)
        rt_values: Read-only array of RT at each knot
        base_date: Date that time zero refers to, if known
        day_count: Day count used to turn dates into times
    """

    def __init__(
        self,
        knot_times: Sequence[float] | np.ndarray,
        rt_values: Sequence[float] | np.ndarray,
        base_date: DateLike | None = None,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ):
        times = np.array(knot_times, dtype=float)
        values = np.array(rt_values, dtype=float)
        validate_knots(times, values)
        times.setflags(write=False)
        values.setflags(write=False)
        self._times = times
        self._values = values
        self._base_date = base_date
        self._day_count = day_count

    def __repr__(self) -> str:
        rates = ', '.join(f'{t:.4f}: {r:.6f}' for t, r in zip(self._times, self.zero_rates))
        return f'{type(self).__name__}({rates})'

    def __len__(self) -> int:
        return len(self._times)

    @property
    def knot_times(self) -> np.ndarray:
        return self._times

    @property
    def rt_values(self) -> np.ndarray:
        return self._values

    @property
    def zero_rates(self) -> np.ndarray:
        """Zero rate r_i = RT_i / t_i at each knot."""
        return self._values / self._times

    @property
    def num_knots(self) -> int:
        return len(self._times)

    @property
    def base_date(self):
        return self._base_date

    @property
    def day_count(self) -> DayCountConvention:
        return self._day_count

    def time_from_date(self, d: DateLike) -> float:
        """Convert a date to time (years from base date)."""
        if self._base_date is None:
            raise ArgumentError(f'{type(self).__name__} has no base date')
        return year_fraction(self._base_date, d, self._day_count)

    def check_index(self, index: int) -> None:
        """Raise ArgumentError unless index is a knot of this curve."""
        if not 0 <= index < len(self._times):
            raise ArgumentError(
                f'Knot index {index} out of range for curve with {len(self._times)} knots'
            )

    def rt(self, t: float) -> float:
        """RT(t), the integrated rate to t."""
        return rt_interp(t, self._times, self._values)

    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate RT(t) / t; the first knot's rate at 0."""
        if t == 0.0:
            return self._values[0] / self._times[0]
        return self.rt(t) / t

    def forward_rate(self, t: float) -> float:
        """Instantaneous forward rate at t."""
        return forward_rate_interp(t, self._times, self._values)

    def _df(self, t: float) -> float:
        return float(np.exp(-self.rt(t)))

    def single_node_rt_sensitivity(self, t: float, index: int) -> float:
        """dRT(t)/dRT_index."""
        self.check_index(index)
        return rt_weight(t, self._times, index)

    def rt_and_sensitivity(self, t: float, index: int) -> tuple[float, float]:
        """RT(t) together with dRT(t)/dRT_index."""
        return self.rt(t), self.single_node_rt_sensitivity(t, index)

    def node_rt_sensitivities(self, t: float) -> np.ndarray:
        """dRT(t)/dRT_i for every knot i."""
        return rt_weights(t, self._times)

    def single_node_discount_factor_sensitivity(self, t: float, index: int) -> float:
        """d exp(-RT(t)) / dRT_index."""
        rt, weight = self.rt_and_sensitivity(t, index)
        return -weight * float(np.exp(-rt))

    def with_knots(
        self,
        knot_times: Sequence[float] | np.ndarray,
        rt_values: Sequence[float] | np.ndarray,
    ):
        """New curve of the same type and base date with different knots."""
        return type(self)(knot_times, rt_values, base_date=self._base_date, day_count=self._day_count)

    def with_rt(self, index: int, value: float):
        """New curve with the RT of one knot replaced."""
        self.check_index(index)
        values = self._values.copy()
        values[index] = value
        return self.with_knots(self._times, values)

    def with_rate(self, index: int, zero_rate: float):
        """New curve with the zero rate of one knot replaced."""
        self.check_index(index)
        return self.with_rt(index, zero_rate * self._times[index])

    def with_rt_shift(self, index: int, shift: float):
        """New curve with shift added to the RT of one knot."""
        self.check_index(index)
        return self.with_rt(index, self._values[index] + shift)

    def truncated(self, num_knots: int):
        """New curve holding only the first num_knots knots."""
        if not 1 <= num_knots <= len(self._times):
            raise ArgumentError(f'Cannot keep {num_knots} of {len(self._times)} knots')
        return self.with_knots(self._times[:num_knots], self._values[:num_knots])

    @classmethod
    def from_rt(cls, knot_times, rt_values, **kwargs):
        """Curve from knot times and RT values."""
        return cls(knot_times, rt_values, **kwargs)

    @classmethod
    def from_zero_rates(cls, knot_times, zero_rates, **kwargs):
        """Curve from knot times and continuously compounded zero rates."""
        times = np.asarray(knot_times, dtype=float)
        rates = np.asarray(zero_rates, dtype=float)
        if times.shape != rates.shape:
            raise ArgumentError(f'{len(times)} knot times but {len(rates)} zero rates')
        return cls(times, rates * times, **kwargs)

    @classmethod
    def from_forward_rates(cls, knot_times, forward_rates, **kwargs):
        """
        Curve from knot times and the flat forward rate of each segment.

        forward_rates[0] applies on (0, t_0], forward_rates[i] on (t_{i-1}, t_i].
        """
        times = np.asarray(knot_times, dtype=float)
        fwds = np.asarray(forward_rates, dtype=float)
        if times.shape != fwds.shape:
            raise ArgumentError(f'{len(times)} knot times but {len(fwds)} forward rates')
        dts = np.diff(times, prepend=0.0)
        return cls(times, np.cumsum(fwds * dts), **kwargs)

    @classmethod
    def flat(cls, rate: float, t: float = 1.0, **kwargs):
        """Single-knot curve with a constant zero rate."""
        return cls([t], [rate * t], **kwargs)


class DiscountCurve(IsdaCurve):
    """
    Risk-free yield curve for discounting.

    Zero rates are continuously compounded: P(t) = exp(-r(t) * t).
    """

    def discount_factor(self, t: float) -> float:
        """Discount factor P(t) = exp(-RT(t))."""
        return self._df(t)

    def discount_factor_at_date(self, d: DateLike) -> float:
        """Discount factor at a date; requires a base date."""
        return self.discount_factor(self.time_from_date(d))

    def forward_discount_factor(self, t1: float, t2: float) -> float:
        """P(t2) / P(t1)."""
        return float(np.exp(self.rt(t1) - self.rt(t2)))


class CreditCurve(IsdaCurve):
    """
    Credit curve with piecewise constant forward hazard rates.

    Survival probability Q(t) = exp(-RT(t)), where RT(t) is the integrated
    hazard rate. The zero hazard rate RT(t) / t is the average hazard rate
    from 0 to t.
    """

    def survival_probability(self, t: float) -> float:
        """Survival probability Q(t) = exp(-RT(t))."""
        return self._df(t)

    def survival_probability_at_date(self, d: DateLike) -> float:
        """Survival probability at a date; requires a base date."""
        return self.survival_probability(self.time_from_date(d))

    def default_probability(self, t: float) -> float:
        """Cumulative default probability 1 - Q(t)."""
        return 1.0 - self.survival_probability(t)

    def hazard_rate(self, t: float) -> float:
        """Forward (instantaneous) hazard rate at t."""
        return self.forward_rate(t)

    def zero_hazard_rate(self, t: float) -> float:
        """Average hazard rate from 0 to t."""
        return self.zero_rate(t)

    def forward_survival_probability(self, t1: float, t2: float) -> float:
        """Q(t2) / Q(t1)."""
        return float(np.exp(self.rt(t1) - self.rt(t2)))

    def single_node_survival_sensitivity(self, t: float, index: int) -> float:
        """dQ(t)/dRT_index."""
        return self.single_node_discount_factor_sensitivity(t, index)
