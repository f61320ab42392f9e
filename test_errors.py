"""
Error paths, configuration and graph reports.
"""

import numpy as np
import pytest

from aad_stochastic.aad import (
    AADConfig,
    AADError,
    ADVar,
    DiracDeltaApproximationMethod,
    InvalidArgumentError,
    UnsupportedOperationError,
    grad,
    value,
)
from aad_stochastic.aad.core.dirac import get_approximation, resolve_method
from aad_stochastic.aad.core.graph_utils import get_graph_stats, print_computation_graph, print_graph_summary
from aad_stochastic.stochastic import RandomVariable


def test_apply_is_unsupported():
    x = ADVar([1.0, 2.0])
    with pytest.raises(UnsupportedOperationError):
        x.apply(np.tanh)
    with pytest.raises(NotImplementedError):
        x.apply(np.tanh)


def test_error_hierarchy():
    assert issubclass(UnsupportedOperationError, AADError)
    assert issubclass(InvalidArgumentError, AADError)
    assert issubclass(InvalidArgumentError, ValueError)


def test_nan_propagates_through_values_and_gradient():
    x = ADVar([-1.0, 4.0])
    with np.errstate(invalid="ignore", divide="ignore"):
        y = x.log()
        derivative = y.get_gradient()[x.get_id()]

    np.testing.assert_array_equal(y.is_nan().get_realizations(), [1.0, 0.0])
    np.testing.assert_allclose(derivative.get_realizations(), [-1.0, 0.25])


def test_config_defaults():
    config = AADConfig()
    assert config.dirac_delta_approximation_method is DiracDeltaApproximationMethod.DISCRETE_DELTA
    assert config.dirac_delta_approximation_width_per_std_dev == 0.05
    assert config.gradient_retains_leaf_nodes_only is True


def test_config_from_properties():
    config = AADConfig.from_properties({
        "dirac_delta_approximation_method": "REGRESSION_ON_DENSITY",
        "gradient_retains_leaf_nodes_only": False,
    })
    assert resolve_method(config.dirac_delta_approximation_method) is \
        DiracDeltaApproximationMethod.REGRESSION_ON_DENSITY
    assert config.with_properties(gradient_retains_leaf_nodes_only=True).gradient_retains_leaf_nodes_only


def test_config_rejects_unknown_properties():
    with pytest.raises(InvalidArgumentError):
        AADConfig.from_properties({"diracDeltaApproximationMethod": "ONE"})


def test_unknown_method_name():
    with pytest.raises(UnsupportedOperationError):
        get_approximation(AADConfig(dirac_delta_approximation_method="BOGUS"))


def test_grad_and_value_helpers():
    derivative = grad(lambda x: x.squared().add(x), 3.0)
    assert derivative.double_value() == pytest.approx(7.0)
    # a constant output does not depend on the input
    assert grad(lambda x: 1.0, 3.0).double_value() == 0.0

    x = ADVar(2.0)
    assert isinstance(value(x), RandomVariable)
    assert value(5.0) == 5.0


def test_graph_reports(capsys):
    x = ADVar([1.0, 2.0])
    y = ADVar(3.0)
    z = x.mult(y).add(x.exp()).average()

    stats = get_graph_stats(z.node)
    assert stats["nodes"] == 6
    assert stats["leaves"] == 2
    assert stats["edges"] == 6
    assert stats["operations"]["MULT"] == 1
    assert stats["max_fan_out"] == 2

    print_graph_summary(z.node, detailed=True)
    print_computation_graph(z.node, max_nodes=3)
    out = capsys.readouterr().out
    assert "OPERATOR TREE SUMMARY" in out
    assert "AVERAGE" in out
    assert "more nodes" in out
