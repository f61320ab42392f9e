"""
Derivative of choose() with respect to its trigger under each Dirac delta
approximation method.
"""

import numpy as np
import pytest
from scipy.stats import norm

from aad_stochastic.aad import (
    AADConfig,
    DifferentiableFactory,
    DiracDeltaApproximationMethod,
    UnsupportedOperationError,
)

N_PATHS = 200_000


def trigger_derivative(method, values, **properties):
    """Derivative of E[1{X >= 0}] with respect to the paths of X."""
    factory = DifferentiableFactory(AADConfig(dirac_delta_approximation_method=method, **properties))
    x = factory.create_random_variable(values)
    digital = x.choose(1.0, 0.0).average()
    return digital.get_gradient()[x.get_id()]


@pytest.fixture(scope="module")
def normal_samples():
    return np.random.default_rng(2024).standard_normal(N_PATHS)


def test_zero_method(normal_samples):
    derivative = trigger_derivative(DiracDeltaApproximationMethod.ZERO, normal_samples)
    assert np.all(derivative.get_realizations() == 0.0)


def test_one_method_gives_branch_difference():
    values = np.linspace(-1.0, 1.0, 11)
    factory = DifferentiableFactory(AADConfig(dirac_delta_approximation_method="ONE"))
    x = factory.create_random_variable(values)
    derivative = x.choose(3.0, -1.0).get_gradient()[x.get_id()]
    np.testing.assert_allclose(derivative.get_realizations(), 4.0)


def test_infinitely_wide_discrete_delta_matches_one():
    values = np.linspace(-1.0, 1.0, 11)
    factory = DifferentiableFactory(AADConfig(dirac_delta_approximation_width_per_std_dev=float("inf")))
    x = factory.create_random_variable(values)
    derivative = x.choose(3.0, -1.0).get_gradient()[x.get_id()]
    np.testing.assert_allclose(derivative.get_realizations(), 4.0)


def test_discrete_delta_window(normal_samples):
    width = 0.05
    derivative = trigger_derivative(DiracDeltaApproximationMethod.DISCRETE_DELTA, normal_samples,
                                    dirac_delta_approximation_width_per_std_dev=width)

    epsilon = width * np.std(normal_samples)
    in_window = (normal_samples + epsilon / 2 >= 0) & (normal_samples - epsilon / 2 < 0)
    np.testing.assert_allclose(derivative.get_realizations(), in_window / epsilon, rtol=1e-12)
    # E[delta(X)] = density of X at 0
    assert derivative.get_average() == pytest.approx(norm.pdf(0.0), abs=0.02)


def test_degenerate_trigger_has_zero_discrete_delta():
    factory = DifferentiableFactory()
    x = factory.create_random_variable(0.5)
    derivative = x.choose(1.0, 0.0).get_gradient()[x.get_id()]
    assert derivative.double_value() == 0.0


@pytest.mark.parametrize("method", [
    DiracDeltaApproximationMethod.REGRESSION_ON_DENSITY,
    DiracDeltaApproximationMethod.REGRESSION_ON_DISTRIBUTION,
])
def test_regression_methods_estimate_the_density(method, normal_samples):
    derivative = trigger_derivative(method, normal_samples)

    # the derivative is localized around the kink
    assert np.all(derivative.get_realizations()[np.abs(normal_samples) > 0.1] == 0.0)
    assert derivative.get_average() == pytest.approx(norm.pdf(0.0), abs=0.04)


def test_shifted_digital_vs_closed_form(normal_samples):
    # d/ds P(X + s >= 0) = pdf(s)
    shift = 0.4
    factory = DifferentiableFactory(AADConfig(dirac_delta_approximation_width_per_std_dev=0.1))
    s = factory.create_random_variable(shift)
    digital = s.add(normal_samples).choose(1.0, 0.0).average()

    derivative = digital.get_gradient()[s.get_id()]
    assert digital.double_value() == pytest.approx(norm.cdf(shift), abs=0.01)
    assert derivative.get_average() == pytest.approx(norm.pdf(shift), abs=0.02)


def test_unknown_method_fails_when_derivative_is_needed():
    factory = DifferentiableFactory(AADConfig(dirac_delta_approximation_method="NOT_A_METHOD"))
    x = factory.create_random_variable([-1.0, 1.0])
    y = x.choose(1.0, 0.0)

    np.testing.assert_allclose(y.get_realizations(), [0.0, 1.0])
    with pytest.raises(UnsupportedOperationError):
        y.get_gradient()


def test_branches_are_differentiable():
    factory = DifferentiableFactory()
    trigger = factory.create_random_variable([-1.0, 2.0])
    a = factory.create_random_variable([10.0, 20.0])
    b = factory.create_random_variable([30.0, 40.0])

    gradient = trigger.choose(a, b).get_gradient()
    np.testing.assert_allclose(gradient[a.get_id()].get_realizations(), [0.0, 1.0])
    np.testing.assert_allclose(gradient[b.get_id()].get_realizations(), [1.0, 0.0])
