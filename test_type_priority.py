"""
Type-priority dispatch between numbers, RandomVariable and ADVar.
"""

import numpy as np
import pytest

from aad_stochastic.aad import ADVar, DifferentiableFactory
from aad_stochastic.stochastic import RandomVariable, type_priority


def test_priorities():
    inner = DifferentiableFactory()
    outer = DifferentiableFactory(base_factory=inner)

    assert type_priority(2.0) == 0
    assert type_priority(RandomVariable([1.0, 2.0])) == 1
    assert type_priority(ADVar(1.0)) == 3
    assert type_priority(outer.create_random_variable(1.0)) == 4


@pytest.mark.parametrize("op", ["add", "mult", "cap", "floor"])
def test_symmetric_operations_give_the_differentiable_result(op):
    x = ADVar([0.5, 1.5, -2.0])
    y = RandomVariable([1.0, 1.0, 3.0])

    xy = getattr(x, op)(y)
    yx = getattr(y, op)(x)

    assert isinstance(xy, ADVar)
    assert isinstance(yx, ADVar)
    np.testing.assert_allclose(xy.get_realizations(), yx.get_realizations())


@pytest.mark.parametrize("op, mirror", [("sub", "bus"), ("div", "vid")])
def test_mirrored_operations(op, mirror):
    x = ADVar([2.0, 4.0])
    y = RandomVariable([1.0, 8.0])

    # y.op(x) is evaluated by x as x.mirror(y)
    result = getattr(y, op)(x)
    assert isinstance(result, ADVar)
    np.testing.assert_allclose(result.get_realizations(),
                               getattr(y, op)(x.get_values()).get_realizations())
    np.testing.assert_allclose(result.get_realizations(), getattr(x, mirror)(y).get_realizations())


def test_reflected_python_operators():
    x = ADVar(4.0)

    minus = 10.0 - x
    ratio = 2.0 / x

    assert minus.double_value() == pytest.approx(6.0)
    assert ratio.double_value() == pytest.approx(0.5)
    assert minus.get_gradient()[x.get_id()].double_value() == pytest.approx(-1.0)
    assert ratio.get_gradient()[x.get_id()].double_value() == pytest.approx(-2.0 / 16.0)


def test_numpy_array_does_not_swallow_advar():
    x = ADVar([1.0, 2.0])
    result = np.array([3.0, 4.0]) * x
    assert isinstance(result, ADVar)
    np.testing.assert_allclose(result.get_realizations(), [3.0, 8.0])


def test_plain_receiver_with_differentiable_factors():
    x = ADVar([1.0, 2.0])
    base = RandomVariable([10.0, 20.0])

    result = base.add_product(x, 3.0)
    assert isinstance(result, ADVar)
    np.testing.assert_allclose(result.get_realizations(), [13.0, 26.0])
    assert result.get_gradient()[x.get_id()].double_value() == pytest.approx(3.0)

    result = base.add_ratio(6.0, x)
    np.testing.assert_allclose(result.get_realizations(), [16.0, 23.0])

    result = base.sub_ratio(x, 2.0)
    np.testing.assert_allclose(result.get_realizations(), [9.5, 19.0])


def test_plain_receiver_with_differentiable_rate():
    r = ADVar(0.1)
    notional = RandomVariable(100.0)

    accrued = notional.accrue(r, 2.0)
    discounted = notional.discount(r, 2.0)

    assert accrued.double_value() == pytest.approx(120.0)
    assert discounted.double_value() == pytest.approx(100.0 / 1.2)
    assert accrued.get_gradient()[r.get_id()].double_value() == pytest.approx(200.0)
    assert discounted.get_gradient()[r.get_id()].double_value() == pytest.approx(-200.0 / 1.44)


def test_plain_trigger_with_differentiable_branch():
    trigger = RandomVariable([-1.0, 0.0, 2.0])
    a = ADVar([5.0, 6.0, 7.0])

    result = trigger.choose(a, 0.0)
    assert isinstance(result, ADVar)
    np.testing.assert_allclose(result.get_realizations(), [0.0, 6.0, 7.0])
    np.testing.assert_allclose(result.get_gradient()[a.get_id()].get_realizations(), [0.0, 1.0, 1.0])


def test_nested_values_dispatch_to_outer_level():
    inner = DifferentiableFactory()
    outer = DifferentiableFactory(base_factory=inner)

    x = outer.create_random_variable(3.0)
    a = inner.create_random_variable(2.0)

    for result in (x.mult(a), a.mult(x), a.add(x)):
        assert type_priority(result) == 4
    # an inner value is a constant at the outer level
    assert x.mult(a).get_gradient()[x.get_id()].double_value() == pytest.approx(2.0)
