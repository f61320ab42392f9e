# aad/ops/special.py
"""
Non-smooth and stochastic primitives: cap/floor/abs, the indicator
`choose`, expectation operators and statistics taken as values.

The derivative of `choose` with respect to its trigger is a Dirac delta;
how it is approximated is decided by the node's configuration (see
`aad.core.dirac`).
"""

from ..core.node import OperatorType
from .arithmetic import _record


def cap(x, y):
    """min(x, y)"""
    return _record(x, OperatorType.CAP, (x, y), lambda a, b: a.cap(b))


def floor(x, y):
    """max(x, y)"""
    return _record(x, OperatorType.FLOOR, (x, y), lambda a, b: a.floor(b))


def abs(x):
    return _record(x, OperatorType.ABS, (x,), lambda a: a.abs())


def choose(trigger, value_if_non_negative, value_if_negative):
    """trigger >= 0 ? value_if_non_negative : value_if_negative"""
    return _record(trigger, OperatorType.CHOOSE, (trigger, value_if_non_negative, value_if_negative),
                   lambda t, a, b: t.choose(a, b))


def average(x):
    """Deterministic value E[x]."""
    return _record(x, OperatorType.AVERAGE, (x,), lambda a: a.average())


def conditional_expectation(x, estimator):
    """E[x | F], F given by the estimator's regression basis."""
    return _record(x, OperatorType.CONDITIONAL_EXPECTATION, (x,),
                   lambda a: a.get_conditional_expectation(estimator), operator=estimator)


# ---------------- statistics as deterministic values ---------------- #
def variance(x):
    return _record(x, OperatorType.VARIANCE, (x,), lambda a: a.variance())


def sample_variance(x):
    return _record(x, OperatorType.SVARIANCE, (x,), lambda a: a.sample_variance())


def standard_deviation(x):
    return _record(x, OperatorType.STDEV, (x,), lambda a: a.standard_deviation())


def standard_error(x):
    return _record(x, OperatorType.STDERROR, (x,), lambda a: a.standard_error())


def min(x):
    return _record(x, OperatorType.MIN, (x,), lambda a: a.min())


def max(x):
    return _record(x, OperatorType.MAX, (x,), lambda a: a.max())
