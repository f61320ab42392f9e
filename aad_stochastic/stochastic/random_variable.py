# stochastic/random_variable.py
from __future__ import annotations
import math
import numpy as np
from typing import Any, Callable

from .dispatch import dispatching, is_number, outranks


class RandomVariable:
    """
    Immutable stochastic vector: a deterministic scalar or a vector of
    per-path realizations, measurable w.r.t. the filtration at `time`.

    Attributes
    ----------
    time : float
        Filtration time. Constants use -inf.
    val : np.float64 | np.ndarray
        The value (deterministic case) or the read-only array of realizations.

    All arithmetic returns a new RandomVariable. Division by zero or the log of
    a non-positive value give numpy's inf/nan; use `is_nan()` to detect them.
    """

    __slots__ = ("time", "val")

    # neither ufuncs nor ndarray operators should swallow a RandomVariable
    __array_ufunc__ = None

    TYPE_PRIORITY = 1

    def __init__(self, value: Any, time: float = -np.inf):
        if isinstance(value, RandomVariable):
            time = max(time, value.time)
            value = value.val

        if isinstance(value, (list, tuple, np.ndarray)):
            arr = np.array(value, dtype=np.float64)
            if arr.ndim == 0:
                val = np.float64(arr)
            else:
                arr = arr.ravel()
                arr.setflags(write=False)
                val = arr
        elif is_number(value):
            val = np.float64(value)
        else:
            raise TypeError(
                f"RandomVariable only accepts numeric types (int, float, list, tuple, ndarray), "
                f"but got {type(value)}"
            )

        self.time = float(time)
        self.val = val

    @classmethod
    def _of(cls, time: float, val) -> "RandomVariable":
        # internal constructor: `val` is freshly computed, no copy needed
        rv = cls.__new__(cls)
        rv.time = time
        if np.ndim(val) == 0:
            rv.val = np.float64(val)
        else:
            val = np.asarray(val, dtype=np.float64)
            val.setflags(write=False)
            rv.val = val
        return rv

    def __repr__(self):
        return f"RandomVariable({self.val!r}, time={self.time!r})"

    # ------------------------------------------------------------------ #
    # Queries (end points, not differentiable)
    # ------------------------------------------------------------------ #
    def get_type_priority(self) -> int:
        return self.TYPE_PRIORITY

    def get_values(self) -> "RandomVariable":
        return self

    def get_filtration_time(self) -> float:
        return self.time

    def is_deterministic(self) -> bool:
        return np.ndim(self.val) == 0

    def size(self) -> int:
        return 1 if self.is_deterministic() else int(self.val.size)

    def get(self, path: int) -> float:
        return float(self.val) if self.is_deterministic() else float(self.val[path])

    def get_realizations(self) -> np.ndarray:
        return np.atleast_1d(np.array(self.val, dtype=np.float64))

    def double_value(self) -> float:
        if self.is_deterministic():
            return float(self.val)
        if self.val.size == 1:
            return float(self.val[0])
        raise ValueError("double_value() requires a deterministic random variable.")

    def __float__(self):
        return self.double_value()

    def get_average(self) -> float:
        return float(np.mean(self.val))

    def get_variance(self) -> float:
        if self.is_deterministic():
            return 0.0
        return float(np.var(self.val))

    def get_sample_variance(self) -> float:
        n = self.size()
        if n == 1:
            return 0.0
        return self.get_variance() * n / (n - 1)

    def get_standard_deviation(self) -> float:
        return math.sqrt(self.get_variance())

    def get_standard_error(self) -> float:
        if self.is_deterministic():
            return 0.0
        return self.get_standard_deviation() / math.sqrt(self.size())

    def get_min(self) -> float:
        return float(np.min(self.val))

    def get_max(self) -> float:
        return float(np.max(self.val))

    def get_quantile(self, quantile: float) -> float:
        return float(np.quantile(self.val, quantile))

    def equals(self, other) -> bool:
        other = lift(plain(other))
        if self.is_deterministic() != other.is_deterministic():
            return False
        return bool(np.array_equal(self.val, other.val))

    def is_nan(self) -> "RandomVariable":
        return RandomVariable._of(self.time, np.isnan(self.val).astype(np.float64))

    # ------------------------------------------------------------------ #
    # Elementwise arithmetic
    # ------------------------------------------------------------------ #
    def _apply(self, f: Callable, *operands) -> "RandomVariable":
        time = self.time
        values = [self.val]
        for operand in operands:
            if is_number(operand):
                values.append(float(operand))
            else:
                operand = lift(operand)
                time = max(time, operand.time)
                values.append(operand.val)
        return RandomVariable._of(time, f(*values))

    def apply(self, function: Callable, *arguments) -> "RandomVariable":
        """Apply a numpy-vectorized function to this and the (plain) arguments."""
        return self._apply(function, *[plain(a) for a in arguments])

    def squared(self):
        return self._apply(np.square)

    def sqrt(self):
        return self._apply(np.sqrt)

    def exp(self):
        return self._apply(np.exp)

    def log(self):
        return self._apply(np.log)

    def sin(self):
        return self._apply(np.sin)

    def cos(self):
        return self._apply(np.cos)

    def abs(self):
        return self._apply(np.abs)

    def invert(self):
        return self._apply(lambda a: 1.0 / a)

    def pow(self, exponent):
        return self._apply(np.power, plain(exponent))

    def average(self):
        return RandomVariable._of(self.time, np.mean(self.val))

    def get_conditional_expectation(self, estimator):
        return estimator.get_conditional_expectation(self)

    @dispatching("add")
    def add(self, other):
        return self._apply(np.add, other)

    @dispatching("sub")
    def sub(self, other):
        return self._apply(np.subtract, other)

    @dispatching("bus")
    def bus(self, other):
        return self._apply(lambda a, b: b - a, other)

    @dispatching("mult")
    def mult(self, other):
        return self._apply(np.multiply, other)

    @dispatching("div")
    def div(self, other):
        return self._apply(np.divide, other)

    @dispatching("vid")
    def vid(self, other):
        return self._apply(lambda a, b: b / a, other)

    @dispatching("cap")
    def cap(self, other):
        return self._apply(np.minimum, other)

    @dispatching("floor")
    def floor(self, other):
        return self._apply(np.maximum, other)

    def choose(self, value_if_non_negative, value_if_negative):
        """this >= 0 ? value_if_non_negative : value_if_negative (pathwise)."""
        if outranks(value_if_non_negative, self) or outranks(value_if_negative, self):
            # trigger is a constant for the higher-ranked branches: b + (a - b) 1{this >= 0}
            indicator = self.choose(1.0, 0.0)
            return lift(value_if_non_negative).mult(indicator).add(
                lift(value_if_negative).mult(indicator.bus(1.0)))
        return self._apply(lambda t, a, b: np.where(t >= 0.0, a, b),
                           value_if_non_negative, value_if_negative)

    def add_product(self, factor1, factor2):
        if outranks(factor1, self) or outranks(factor2, self):
            return lift(factor1).mult(factor2).add(self)
        return self._apply(lambda a, b, c: a + b * c, factor1, factor2)

    def add_ratio(self, numerator, denominator):
        if outranks(numerator, self) or outranks(denominator, self):
            return lift(numerator).div(denominator).add(self)
        return self._apply(lambda a, b, c: a + b / c, numerator, denominator)

    def sub_ratio(self, numerator, denominator):
        if outranks(numerator, self) or outranks(denominator, self):
            return lift(numerator).div(denominator).mult(-1.0).add(self)
        return self._apply(lambda a, b, c: a - b / c, numerator, denominator)

    def accrue(self, rate, period_length: float):
        if outranks(rate, self):
            return rate.mult(period_length).add(1.0).mult(self)
        return self._apply(lambda a, r: a * (1.0 + r * period_length), rate)

    def discount(self, rate, period_length: float):
        if outranks(rate, self):
            return rate.mult(period_length).add(1.0).invert().mult(self)
        return self._apply(lambda a, r: a / (1.0 + r * period_length), rate)

    # statistics as (deterministic) values
    def variance(self):
        return RandomVariable._of(self.time, self.get_variance())

    def sample_variance(self):
        return RandomVariable._of(self.time, self.get_sample_variance())

    def standard_deviation(self):
        return RandomVariable._of(self.time, self.get_standard_deviation())

    def standard_error(self):
        return RandomVariable._of(self.time, self.get_standard_error())

    def min(self):
        return RandomVariable._of(self.time, self.get_min())

    def max(self):
        return RandomVariable._of(self.time, self.get_max())

    # Operator overloading
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other):
        return self.bus(other)

    def __mul__(self, other):
        return self.mult(other)

    def __rmul__(self, other):
        return self.mult(other)

    def __truediv__(self, other):
        return self.div(other)

    def __rtruediv__(self, other):
        return self.vid(other)

    def __neg__(self):
        return self.mult(-1.0)

    def __pow__(self, exponent):
        return self.pow(exponent)


def lift(x):
    """Wrap a plain number or array as a RandomVariable."""
    return RandomVariable(x) if is_number(x) or isinstance(x, (list, tuple, np.ndarray)) else x


def plain(x):
    """Strip differentiable wrappers down to a number or RandomVariable."""
    while not is_number(x) and not isinstance(x, (RandomVariable, list, tuple, np.ndarray)):
        x = x.get_values()
    return x
