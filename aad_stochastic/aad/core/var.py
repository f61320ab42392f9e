# aad/core/var.py
from __future__ import annotations
import numpy as np
from typing import Any, Dict, Iterable, Optional

from ...stochastic.dispatch import dispatching, outranks
from ...stochastic.random_variable import RandomVariable, lift
from .errors import UnsupportedOperationError
from .factory import DifferentiableFactory, default_factory
from .node import Node


class ADVar:
    """
    Differentiable stochastic value for reverse-mode Automatic Differentiation (AD).

    Attributes
    ----------
    values : RandomVariable | ADVar
        Forward (primal) value. For nested (second order) differentiation
        this is itself an ADVar of the inner factory.
    node : Node
        Operator-tree node that produced this value; a leaf node for
        independent variables.
    factory : DifferentiableFactory
        Carries the engine configuration and the type priority.

    ADVars are immutable. Every operation records a new node referencing the
    nodes of its differentiable arguments and returns a new ADVar.
    """

    __slots__ = ("values", "node", "factory")

    # numpy must hand binary operators back to ADVar instead of broadcasting over it
    __array_ufunc__ = None

    def __init__(self, value: Any, factory: Optional[DifferentiableFactory] = None):
        factory = factory if factory is not None else default_factory()
        base_factory = factory.base_factory
        # values of the base factory's kind are used as they are
        if not hasattr(value, "get_type_priority") or \
                value.get_type_priority() != base_factory.get_type_priority():
            value = base_factory.create_random_variable(value)

        self.values = value
        self.node = Node(config=factory.config)
        self.factory = factory

    @classmethod
    def of(cls, value: Any, factory: Optional[DifferentiableFactory] = None) -> "ADVar":
        return cls(value, factory=factory)

    @classmethod
    def _of(cls, values, node: Node, factory: DifferentiableFactory) -> "ADVar":
        # internal constructor for operation results
        var = cls.__new__(cls)
        var.values = values
        var.node = node
        var.factory = factory
        return var

    def __reduce__(self):
        # values (and any inner graph) first, then this graph in id order: every
        # node then finds its arguments already pickled, which keeps deep graphs
        # from recursing
        return (_restore, (self.values, self.node.ordered_graph(), self.node, self.factory))

    def __repr__(self):
        return f"ADVar({self.values!r}, id={self.node.id})"

    # ------------------------------------------------------------------ #
    # Identity and differentiation
    # ------------------------------------------------------------------ #
    def get_id(self) -> int:
        return self.node.id

    def get_type_priority(self) -> int:
        return self.factory.get_type_priority()

    def get_values(self):
        return self.values

    def get_clone_independent(self) -> "ADVar":
        """A new leaf with the same values and no link to this value's graph."""
        return ADVar(self.values, factory=self.factory)

    def get_gradient(self, independent_ids: Optional[Iterable[int]] = None) -> Dict[int, Any]:
        """
        Derivatives of this value with respect to the nodes of its graph,
        keyed by id. Restricted to `independent_ids` when given.
        """
        from .engine import get_gradient
        return get_gradient(self.node, independent_ids)

    # ------------------------------------------------------------------ #
    # Read-only statistics of the underlying vector (not differentiable)
    # ------------------------------------------------------------------ #
    def get_filtration_time(self) -> float:
        return self.values.get_filtration_time()

    def is_deterministic(self) -> bool:
        return self.values.is_deterministic()

    def size(self) -> int:
        return self.values.size()

    def get(self, path: int) -> float:
        return self.values.get(path)

    def get_realizations(self) -> np.ndarray:
        return self.values.get_realizations()

    def double_value(self) -> float:
        return self.values.double_value()

    def __float__(self):
        return self.double_value()

    def get_average(self) -> float:
        return self.values.get_average()

    def get_variance(self) -> float:
        return self.values.get_variance()

    def get_sample_variance(self) -> float:
        return self.values.get_sample_variance()

    def get_standard_deviation(self) -> float:
        return self.values.get_standard_deviation()

    def get_standard_error(self) -> float:
        return self.values.get_standard_error()

    def get_min(self) -> float:
        return self.values.get_min()

    def get_max(self) -> float:
        return self.values.get_max()

    def get_quantile(self, quantile: float) -> float:
        return self.values.get_quantile(quantile)

    def equals(self, other) -> bool:
        return self.values.equals(other)

    def is_nan(self) -> RandomVariable:
        return self.values.is_nan()

    def apply(self, *args, **kwargs):
        raise UnsupportedOperationError("apply() is not supported on differentiable values.")

    # ------------------------------------------------------------------ #
    # Functions of one argument
    # ------------------------------------------------------------------ #
    def squared(self):
        from ..ops.arithmetic import squared
        return squared(self)

    def invert(self):
        from ..ops.arithmetic import invert
        return invert(self)

    def sqrt(self):
        from ..ops.transcendental import sqrt
        return sqrt(self)

    def exp(self):
        from ..ops.transcendental import exp
        return exp(self)

    def log(self):
        from ..ops.transcendental import log
        return log(self)

    def sin(self):
        from ..ops.transcendental import sin
        return sin(self)

    def cos(self):
        from ..ops.transcendental import cos
        return cos(self)

    def abs(self):
        from ..ops.special import abs
        return abs(self)

    def average(self):
        from ..ops.special import average
        return average(self)

    def get_conditional_expectation(self, estimator):
        from ..ops.special import conditional_expectation
        return conditional_expectation(self, estimator)

    def variance(self):
        from ..ops.special import variance
        return variance(self)

    def sample_variance(self):
        from ..ops.special import sample_variance
        return sample_variance(self)

    def standard_deviation(self):
        from ..ops.special import standard_deviation
        return standard_deviation(self)

    def standard_error(self):
        from ..ops.special import standard_error
        return standard_error(self)

    def min(self):
        from ..ops.special import min
        return min(self)

    def max(self):
        from ..ops.special import max
        return max(self)

    # ------------------------------------------------------------------ #
    # Functions of two arguments
    # ------------------------------------------------------------------ #
    @dispatching("add")
    def add(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    @dispatching("sub")
    def sub(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    @dispatching("bus")
    def bus(self, other):
        from ..ops.arithmetic import bus
        return bus(self, other)

    @dispatching("mult")
    def mult(self, other):
        from ..ops.arithmetic import mult
        return mult(self, other)

    @dispatching("div")
    def div(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    @dispatching("vid")
    def vid(self, other):
        from ..ops.arithmetic import vid
        return vid(self, other)

    @dispatching("cap")
    def cap(self, other):
        from ..ops.special import cap
        return cap(self, other)

    @dispatching("floor")
    def floor(self, other):
        from ..ops.special import floor
        return floor(self, other)

    def pow(self, exponent):
        from ..ops.arithmetic import pow
        return pow(self, exponent)

    # ------------------------------------------------------------------ #
    # Functions of three arguments
    # ------------------------------------------------------------------ #
    def add_product(self, factor1, factor2):
        if outranks(factor1, self) or outranks(factor2, self):
            return lift(factor1).mult(factor2).add(self)
        from ..ops.arithmetic import add_product
        return add_product(self, factor1, factor2)

    def add_ratio(self, numerator, denominator):
        if outranks(numerator, self) or outranks(denominator, self):
            return lift(numerator).div(denominator).add(self)
        from ..ops.arithmetic import add_ratio
        return add_ratio(self, numerator, denominator)

    def sub_ratio(self, numerator, denominator):
        if outranks(numerator, self) or outranks(denominator, self):
            return lift(numerator).div(denominator).mult(-1.0).add(self)
        from ..ops.arithmetic import sub_ratio
        return sub_ratio(self, numerator, denominator)

    def accrue(self, rate, period_length: float):
        if outranks(rate, self):
            return rate.mult(period_length).add(1.0).mult(self)
        from ..ops.arithmetic import accrue
        return accrue(self, rate, period_length)

    def discount(self, rate, period_length: float):
        if outranks(rate, self):
            return rate.mult(period_length).add(1.0).invert().mult(self)
        from ..ops.arithmetic import discount
        return discount(self, rate, period_length)

    def choose(self, value_if_non_negative, value_if_negative):
        """this >= 0 ? value_if_non_negative : value_if_negative (pathwise)."""
        if outranks(value_if_non_negative, self) or outranks(value_if_negative, self):
            indicator = self.choose(1.0, 0.0)
            return lift(value_if_non_negative).mult(indicator).add(
                lift(value_if_negative).mult(indicator.bus(1.0)))
        from ..ops.special import choose
        return choose(self, value_if_non_negative, value_if_negative)

    # Operator overloading for arithmetic operations
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


def _restore(values, graph, node: Node, factory: DifferentiableFactory) -> ADVar:
    # `graph` only fixes the pickling order of the nodes
    return ADVar._of(values, node, factory)
