"""
Plain stochastic vectors, regression and conditional expectation.
"""

import numpy as np
import pytest

from aad_stochastic.stochastic import LinearRegression, RandomVariable, RegressionConditionalExpectation


def test_construction():
    deterministic = RandomVariable(2)
    stochastic = RandomVariable([1.0, 2.0, 3.0], time=0.5)

    assert deterministic.is_deterministic()
    assert deterministic.size() == 1
    assert deterministic.get_filtration_time() == -np.inf
    assert not stochastic.is_deterministic()
    assert stochastic.size() == 3
    assert stochastic.get(1) == 2.0
    assert stochastic.get_filtration_time() == 0.5


def test_construction_rejects_non_numeric():
    with pytest.raises(TypeError):
        RandomVariable("1.0")


def test_values_are_read_only_copies():
    source = np.array([1.0, 2.0])
    rv = RandomVariable(source)
    source[0] = 100.0
    assert rv.get(0) == 1.0
    with pytest.raises(ValueError):
        rv.val[0] = 5.0


def test_double_value_requires_deterministic():
    assert float(RandomVariable(3.5)) == 3.5
    with pytest.raises(ValueError):
        RandomVariable([1.0, 2.0]).double_value()


def test_arithmetic_takes_latest_filtration_time():
    a = RandomVariable([1.0, 2.0], time=1.0)
    b = RandomVariable([3.0, 4.0], time=2.0)

    result = a.add(b).mult(2.0)
    np.testing.assert_allclose(result.get_realizations(), [8.0, 12.0])
    assert result.get_filtration_time() == 2.0


def test_mirrored_operations():
    a = RandomVariable([1.0, 4.0])
    np.testing.assert_allclose(a.bus(10.0).get_realizations(), [9.0, 6.0])
    np.testing.assert_allclose(a.vid(8.0).get_realizations(), [8.0, 2.0])
    np.testing.assert_allclose((10.0 - a).get_realizations(), [9.0, 6.0])
    np.testing.assert_allclose((8.0 / a).get_realizations(), [8.0, 2.0])


def test_compound_operations():
    a = RandomVariable([1.0, 2.0])
    np.testing.assert_allclose(a.add_product(2.0, 3.0).get_realizations(), [7.0, 8.0])
    np.testing.assert_allclose(a.add_ratio(4.0, 2.0).get_realizations(), [3.0, 4.0])
    np.testing.assert_allclose(a.sub_ratio(4.0, 2.0).get_realizations(), [-1.0, 0.0])
    np.testing.assert_allclose(a.accrue(0.1, 2.0).get_realizations(), [1.2, 2.4])
    np.testing.assert_allclose(a.discount(0.1, 2.0).get_realizations(), [1.0 / 1.2, 2.0 / 1.2])
    np.testing.assert_allclose(a.cap(1.5).get_realizations(), [1.0, 1.5])
    np.testing.assert_allclose(a.floor(1.5).get_realizations(), [1.5, 2.0])


def test_choose_selects_non_negative_branch_at_zero():
    trigger = RandomVariable([-1.0, 0.0, 1.0])
    np.testing.assert_allclose(trigger.choose(1.0, -1.0).get_realizations(), [-1.0, 1.0, 1.0])


def test_statistics():
    values = np.array([1.0, 4.0, 2.0, 8.0, 5.0])
    rv = RandomVariable(values)

    assert rv.get_average() == pytest.approx(values.mean())
    assert rv.get_variance() == pytest.approx(values.var())
    assert rv.get_sample_variance() == pytest.approx(values.var(ddof=1))
    assert rv.get_standard_deviation() == pytest.approx(values.std())
    assert rv.get_standard_error() == pytest.approx(values.std() / np.sqrt(5))
    assert rv.get_min() == 1.0 and rv.get_max() == 8.0
    assert rv.get_quantile(0.5) == pytest.approx(4.0)
    assert rv.average().is_deterministic()


def test_numerical_edge_cases_are_not_trapped():
    with np.errstate(divide="ignore", invalid="ignore"):
        result = RandomVariable([-1.0, 0.0, 1.0]).log()
    np.testing.assert_array_equal(result.is_nan().get_realizations(), [1.0, 0.0, 0.0])
    assert result.get(1) == -np.inf


def test_equals():
    assert RandomVariable([1.0, 2.0]).equals([1.0, 2.0])
    assert RandomVariable(1.0).equals(1.0)
    assert not RandomVariable([1.0, 1.0]).equals(1.0)


def test_linear_regression_recovers_coefficients():
    rng = np.random.default_rng(1)
    x = RandomVariable(rng.standard_normal(1000))
    y = x.mult(3.0).add(2.0)

    coefficients = LinearRegression([RandomVariable(1.0), x]).get_regression_coefficients(y)
    np.testing.assert_allclose(coefficients, [2.0, 3.0], atol=1e-10)


def test_linear_regression_requires_basis():
    with pytest.raises(ValueError):
        LinearRegression([])


def test_conditional_expectation_is_a_projection():
    rng = np.random.default_rng(3)
    W1 = RandomVariable(rng.standard_normal(2000), time=1.0)
    W2 = W1.add(RandomVariable(rng.standard_normal(2000), time=2.0))
    estimator = RegressionConditionalExpectation([RandomVariable(1.0), W1, W1.squared()])

    projected = W2.squared().get_conditional_expectation(estimator)
    assert projected.get_filtration_time() == 1.0
    # idempotent
    np.testing.assert_allclose(projected.get_conditional_expectation(estimator).get_realizations(),
                               projected.get_realizations(), atol=1e-10)
    # E[W2^2 | W1] = W1^2 + 1
    np.testing.assert_allclose(projected.get_average(), W2.squared().get_average(), rtol=1e-10)
