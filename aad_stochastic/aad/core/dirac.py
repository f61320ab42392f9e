# aad/core/dirac.py
"""
Discontinuity approximation policies for the `choose` (indicator) operator.

For  y = choose(X, Y, Z) = (X >= 0 ? Y : Z)  the exact derivative with respect
to the trigger X is the Dirac delta  delta(X) * (Y - Z),  which has no
representation as a vector of realizations. Each policy below supplies a
finite substitute:

    ZERO                        0
    ONE                         Y - Z
    DISCRETE_DELTA              (Y - Z) 1{-eps/2 <= X < eps/2} / eps,  eps = k sigma(X)
    REGRESSION_ON_DENSITY       (Y - Z), with the upstream derivative localized
    REGRESSION_ON_DISTRIBUTION  around X = 0 and scaled by a regression estimate
                                of the density of X at 0

The regression policies act on the upstream derivative (`localize`) and keep
the partial derivative at Y - Z.
"""
from __future__ import annotations
import functools
import logging
import math
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from ...stochastic.random_variable import RandomVariable, plain
from ...stochastic.regression import LinearRegression
from .config import AADConfig, DiracDeltaApproximationMethod
from .errors import UnsupportedOperationError

logger = logging.getLogger(__name__)

ZERO = RandomVariable(0.0)
ONE = RandomVariable(1.0)


def window_indicator(trigger: RandomVariable, epsilon: float) -> RandomVariable:
    """1{-epsilon/2 <= trigger < epsilon/2}"""
    return trigger.add(epsilon / 2).choose(ONE, ZERO).mult(trigger.sub(epsilon / 2).choose(ZERO, ONE))


class DiracDeltaApproximation(ABC):
    """
    Base class of the approximation policies.

    Attributes:
        config (AADConfig): engine configuration holding the tuning constants.
    """

    method = None

    def __init__(self, config: AADConfig):
        self.config = config

    @abstractmethod
    def trigger_partial_derivative(self, X, Y, Z):
        """Partial derivative of choose(X, Y, Z) with respect to X."""
        pass

    def localize(self, derivative, X):
        """Transform the upstream derivative before it meets the trigger partial."""
        return derivative


class ZeroApproximation(DiracDeltaApproximation):
    method = DiracDeltaApproximationMethod.ZERO

    def trigger_partial_derivative(self, X, Y, Z):
        return ZERO


class OneApproximation(DiracDeltaApproximation):
    method = DiracDeltaApproximationMethod.ONE

    def trigger_partial_derivative(self, X, Y, Z):
        return Y.sub(Z)


class DiscreteDeltaApproximation(DiracDeltaApproximation):
    """Finite difference of the indicator over a window of k standard deviations."""
    method = DiracDeltaApproximationMethod.DISCRETE_DELTA

    def trigger_partial_derivative(self, X, Y, Z):
        width_per_std_dev = self.config.dirac_delta_approximation_width_per_std_dev
        if math.isinf(width_per_std_dev):
            return Y.sub(Z)

        trigger = plain(X)
        epsilon = width_per_std_dev * trigger.get_standard_deviation()
        if epsilon > 0:
            return Y.sub(Z).mult(window_indicator(trigger, epsilon)).div(epsilon)
        return ZERO


class _DensityRegressionApproximation(DiracDeltaApproximation):
    """
    Shared part of the regression policies: the upstream derivative is
    restricted to the window around the kink, renormalized by the window
    probability and multiplied by the estimated density of X at 0.
    """

    def trigger_partial_derivative(self, X, Y, Z):
        return Y.sub(Z)

    def localize(self, derivative, X):
        trigger = plain(X)
        epsilon = self.config.dirac_delta_approximation_width_per_std_dev * trigger.get_standard_deviation()
        localized_one = window_indicator(trigger, epsilon)
        probability = localized_one.get_average()
        if not probability > 0:
            logger.warning("Empty localization window around the kink (epsilon=%g); derivative set to zero.", epsilon)
            return ZERO
        return derivative.mult(localized_one).div(probability).mult(self.density_at_zero(trigger))

    def density_at_zero(self, trigger: RandomVariable) -> float:
        std_dev = trigger.get_standard_deviation()
        n_half = self.config.density_regression_sample_points
        width_per_std_dev = self.config.dirac_delta_approximation_density_regression_width_per_std_dev
        sample_interval_width_half = width_per_std_dev / 2 * std_dev / n_half
        if not sample_interval_width_half > 0:
            logger.warning("Degenerate density regression range (std_dev=%g); density set to zero.", std_dev)
            return 0.0

        indicator_positive = trigger.choose(ONE, ZERO)
        indicator_negative = trigger.choose(ZERO, ONE)

        sample_x = np.empty(2 * n_half)
        probability_negative = np.empty(n_half)
        probability_positive = np.empty(n_half)
        sample_interval = sample_interval_width_half
        for i in range(n_half):
            sample_interval += sample_interval_width_half
            # P(-s <= X < 0) and P(0 <= X < s)
            probability_negative[i] = trigger.add(sample_interval).choose(ONE, ZERO).mult(indicator_negative).get_average()
            probability_positive[i] = trigger.sub(sample_interval).choose(ZERO, ONE).mult(indicator_positive).get_average()
            sample_x[2 * i] = -sample_interval
            sample_x[2 * i + 1] = sample_interval

        sample_y = self._sample_values(sample_x, probability_negative, probability_positive)
        basis, index = self._basis(sample_x)
        return float(LinearRegression(basis).get_regression_coefficients(sample_y)[index])

    @abstractmethod
    def _sample_values(self, sample_x, probability_negative, probability_positive) -> np.ndarray:
        pass

    @abstractmethod
    def _basis(self, sample_x) -> Tuple[list, int]:
        """Regression basis and the index of the coefficient that equals the density at 0."""
        pass


class RegressionOnDensityApproximation(_DensityRegressionApproximation):
    """Quadratic fit of bucket densities; the intercept is the density at 0."""
    method = DiracDeltaApproximationMethod.REGRESSION_ON_DENSITY

    def _sample_values(self, sample_x, probability_negative, probability_positive):
        sample_y = np.empty_like(sample_x)
        sample_y[0::2] = probability_negative / np.abs(sample_x[0::2])
        sample_y[1::2] = probability_positive / sample_x[1::2]
        return sample_y

    def _basis(self, sample_x):
        return [np.ones_like(sample_x), sample_x, sample_x ** 2], 0


class RegressionOnDistributionApproximation(_DensityRegressionApproximation):
    """Cubic fit (no constant) of the signed distribution; the slope is the density at 0."""
    method = DiracDeltaApproximationMethod.REGRESSION_ON_DISTRIBUTION

    def _sample_values(self, sample_x, probability_negative, probability_positive):
        sample_y = np.empty_like(sample_x)
        sample_y[0::2] = -probability_negative
        sample_y[1::2] = probability_positive
        return sample_y

    def _basis(self, sample_x):
        return [sample_x, sample_x ** 2, sample_x ** 3], 0


_POLICIES = {
    policy.method: policy
    for policy in (
        ZeroApproximation,
        OneApproximation,
        DiscreteDeltaApproximation,
        RegressionOnDensityApproximation,
        RegressionOnDistributionApproximation,
    )
}


def resolve_method(method) -> DiracDeltaApproximationMethod:
    if isinstance(method, DiracDeltaApproximationMethod):
        return method
    try:
        return DiracDeltaApproximationMethod(str(method).upper())
    except ValueError:
        raise UnsupportedOperationError(
            f"Dirac delta approximation method {method!r} not supported.") from None


@functools.lru_cache(maxsize=None)
def get_approximation(config: AADConfig) -> DiracDeltaApproximation:
    """The policy selected by `config`."""
    return _POLICIES[resolve_method(config.dirac_delta_approximation_method)](config)
