# aad/core/node.py
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...stochastic.random_variable import RandomVariable, plain
from .config import AADConfig
from .dirac import get_approximation
from .errors import InvalidArgumentError
from .ids import global_counter

ZERO = RandomVariable(0.0)
ONE = RandomVariable(1.0)
MINUS_ONE = RandomVariable(-1.0)


class OperatorType(Enum):
    ADD = "add"
    SUB = "sub"
    MULT = "mult"
    DIV = "div"
    SQUARED = "squared"
    SQRT = "sqrt"
    LOG = "log"
    EXP = "exp"
    SIN = "sin"
    COS = "cos"
    INVERT = "invert"
    CAP = "cap"
    FLOOR = "floor"
    ABS = "abs"
    ADDPRODUCT = "add_product"
    ADDRATIO = "add_ratio"
    SUBRATIO = "sub_ratio"
    ACCRUE = "accrue"
    DISCOUNT = "discount"
    POW = "pow"
    CHOOSE = "choose"
    AVERAGE = "average"
    CONDITIONAL_EXPECTATION = "conditional_expectation"
    MIN = "min"
    MAX = "max"
    VARIANCE = "variance"
    STDEV = "stdev"
    STDERROR = "stderror"
    SVARIANCE = "svariance"


class Node:
    """
    One node of the operator tree, produced by a primitive operation.

    Attributes
    ----------
    id : int
        Drawn from the process-wide counter at construction; larger than the
        id of every argument.
    operator_type : OperatorType | None
        The primitive. None for a leaf (an independent variable).
    arguments : tuple
        Argument nodes in call order; None marks a non-differentiable constant.
    argument_values : tuple | None
        Argument values kept for the backward pass. Values that no partial
        derivative of a differentiable argument reads are dropped (None).
    operator : Any
        The conditional expectation estimator of CONDITIONAL_EXPECTATION.
    config : AADConfig
        Configuration in force when the node was recorded.

    Nodes only reference their arguments, never their dependents, so the
    graph is a DAG owned by the values that reach it.
    """

    __slots__ = ("id", "operator_type", "arguments", "argument_values", "operator", "config", "__weakref__")

    def __init__(self, operator_type: Optional[OperatorType] = None,
                 arguments: Sequence[Optional["Node"]] = (),
                 argument_values: Sequence[Any] = (),
                 operator: Any = None,
                 config: Optional[AADConfig] = None):
        self.id = global_counter.next_id()
        self.operator_type = operator_type
        self.arguments = tuple(arguments)
        self.operator = operator
        self.config = config if config is not None else AADConfig()
        self.argument_values = retain_argument_values(operator_type, self.arguments, argument_values)

    def rehydrate(self, operator_type, arguments, argument_values, operator, config) -> "Node":
        """Fill a deserialized node; it receives a fresh id from the counter."""
        self.id = global_counter.next_id()
        self.operator_type = operator_type
        self.arguments = tuple(arguments)
        self.argument_values = argument_values
        self.operator = operator
        self.config = config
        return self

    def is_leaf(self) -> bool:
        return not self.arguments

    def __repr__(self):
        op = self.operator_type.name if self.operator_type is not None else "LEAF"
        args = ", ".join("const" if a is None else str(a.id) for a in self.arguments)
        return f"Node(id={self.id}, {op}, args=[{args}])"

    # ------------------------------------------------------------------ #
    # Backward pass
    # ------------------------------------------------------------------ #
    def propagate_derivatives_from_result_to_argument(self, derivatives: Dict[int, Any]) -> None:
        """
        Update rule  D_i += D_m * d f_m / d x_i  for every differentiable
        argument i of this node m.
        """
        for index, argument in enumerate(self.arguments):
            if argument is None:
                continue

            partial_derivative = self.get_partial_derivative(argument, index)
            derivative = derivatives[self.id]

            # adjoints of the stochastic operators act on the upstream derivative
            if self.operator_type is OperatorType.AVERAGE:
                derivative = derivative.average()
            elif self.operator_type is OperatorType.CONDITIONAL_EXPECTATION:
                derivative = derivative.get_conditional_expectation(self.operator)
            elif self.operator_type is OperatorType.CHOOSE and index == 0:
                derivative = get_approximation(self.config).localize(derivative, self.argument_values[0])

            argument_derivative = derivatives.get(argument.id)
            if argument_derivative is None:
                derivatives[argument.id] = derivative.mult(partial_derivative)
            else:
                derivatives[argument.id] = argument_derivative.add_product(partial_derivative, derivative)

    def get_partial_derivative(self, differential: "Node", differential_index: int):
        """
        Partial derivative of this node with respect to the argument at
        `differential_index`. The index is needed since the same node may
        appear in several argument slots, e.g. f(X, X).
        """
        values = self.argument_values or ()
        X = values[0] if len(values) > 0 else None
        Y = values[1] if len(values) > 1 else None
        Z = values[2] if len(values) > 2 else None

        op = self.operator_type
        i = differential_index

        # ---------- functions of one argument ----------
        if op is OperatorType.SQUARED:
            return X.mult(2.0)
        if op is OperatorType.SQRT:
            return X.sqrt().invert().mult(0.5)
        if op is OperatorType.EXP:
            return X.exp()
        if op is OperatorType.LOG:
            return X.invert()
        if op is OperatorType.SIN:
            return X.cos()
        if op is OperatorType.COS:
            return X.sin().mult(-1.0)
        if op is OperatorType.INVERT:
            return X.invert().squared().mult(-1.0)
        if op is OperatorType.ABS:
            return X.choose(ONE, MINUS_ONE)
        if op in (OperatorType.AVERAGE, OperatorType.CONDITIONAL_EXPECTATION):
            # the operator itself is applied to the upstream derivative
            return ONE

        # ---------- statistics as values ----------
        if op is OperatorType.VARIANCE:
            return X.sub(X.get_average()).mult(2.0 / X.size())
        if op is OperatorType.SVARIANCE:
            n = X.size()
            return X.sub(X.get_average()).mult(2.0 / (n - 1)) if n > 1 else ZERO
        if op is OperatorType.STDEV:
            return X.sub(X.get_average()).div(X.size() * X.get_standard_deviation())
        if op is OperatorType.STDERROR:
            n = X.size()
            return X.sub(X.get_average()).div(n * X.get_standard_deviation() * n ** 0.5)
        if op is OperatorType.MIN:
            minimum = X.get_min()
            return plain(X).apply(lambda x: (x == minimum).astype(float))
        if op is OperatorType.MAX:
            maximum = X.get_max()
            return plain(X).apply(lambda x: (x == maximum).astype(float))

        # ---------- functions of two arguments ----------
        if op is OperatorType.ADD:
            return ONE
        if op is OperatorType.SUB:
            return ONE if i == 0 else MINUS_ONE
        if op is OperatorType.MULT:
            return Y if i == 0 else X
        if op is OperatorType.DIV:
            return Y.invert() if i == 0 else X.div(Y.squared()).mult(-1.0)
        if op is OperatorType.CAP:
            # min(X, Y): X is selected where X <= Y
            return Y.sub(X).choose(ONE, ZERO) if i == 0 else Y.sub(X).choose(ZERO, ONE)
        if op is OperatorType.FLOOR:
            # max(X, Y): X is selected where X > Y
            return Y.sub(X).choose(ZERO, ONE) if i == 0 else Y.sub(X).choose(ONE, ZERO)
        if op is OperatorType.POW:
            # the exponent is treated as a constant
            return X.pow(Y.sub(1.0)).mult(Y) if i == 0 else ZERO

        # ---------- functions of three arguments ----------
        if op is OperatorType.ADDPRODUCT:
            return (ONE, Z, Y)[i]
        if op is OperatorType.ADDRATIO:
            if i == 0:
                return ONE
            return Z.invert() if i == 1 else Y.div(Z.squared()).mult(-1.0)
        if op is OperatorType.SUBRATIO:
            if i == 0:
                return ONE
            return Z.invert().mult(-1.0) if i == 1 else Y.div(Z.squared())
        if op is OperatorType.ACCRUE:
            if i == 0:
                return Y.mult(Z).add(1.0)
            return X.mult(Z) if i == 1 else X.mult(Y)
        if op is OperatorType.DISCOUNT:
            if i == 0:
                return Y.mult(Z).add(1.0).invert()
            growth_squared = Y.mult(Z).add(1.0).squared()
            return X.mult(Z if i == 1 else Y).div(growth_squared).mult(-1.0)
        if op is OperatorType.CHOOSE:
            if i == 0:
                return get_approximation(self.config).trigger_partial_derivative(X, Y, Z)
            return X.choose(ONE, ZERO) if i == 1 else X.choose(ZERO, ONE)

        name = op.name if op is not None else None
        raise InvalidArgumentError(f"Operation {name} not supported in differentiation.")

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    # A node pickles as an empty shell followed by its state. Pickle memoizes
    # the shell, so a node reached from several values of one dump is restored
    # once and shared. The fresh id is drawn when the state is set, after the
    # arguments have been restored, so restored ids keep the argument order.
    def __reduce__(self):
        state = (self.operator_type, self.arguments, self.argument_values, self.operator, self.config)
        return (_node_shell, (), state)

    def __setstate__(self, state):
        self.rehydrate(*state)

    def ordered_graph(self) -> List["Node"]:
        """
        The nodes reachable from this node through its arguments, ordered by
        id, so arguments always precede the nodes using them.
        """
        reachable = {}
        stack = [self]
        while stack:
            node = stack.pop()
            if node.id in reachable:
                continue
            reachable[node.id] = node
            stack.extend(a for a in node.arguments if a is not None)
        return sorted(reachable.values(), key=lambda n: n.id)


def _node_shell() -> Node:
    return Node.__new__(Node)


def retain_argument_values(operator_type: Optional[OperatorType],
                           arguments: Tuple[Optional[Node], ...],
                           argument_values: Sequence[Any]) -> Optional[Tuple]:
    """
    Keep only the argument values read by the partial derivatives of the
    differentiable arguments; the rest are set to None.
    """
    if operator_type in (None, OperatorType.ADD, OperatorType.SUB, OperatorType.AVERAGE):
        return None
    if all(a is None for a in arguments):
        return None

    values = list(argument_values)
    differentiable = [a is not None for a in arguments]

    if operator_type is OperatorType.MULT:
        # d/dx0 = x1, d/dx1 = x0
        if not differentiable[0]:
            values[1] = None
        if not differentiable[1]:
            values[0] = None
    elif operator_type is OperatorType.DIV:
        # the numerator only enters d/dx1
        if not differentiable[1]:
            values[0] = None
    elif operator_type is OperatorType.ADDPRODUCT:
        values[0] = None
        if not differentiable[1]:
            values[2] = None
        if not differentiable[2]:
            values[1] = None
    elif operator_type is OperatorType.ACCRUE:
        # d/dx0 = 1 + x1 x2, d/dx1 = x0 x2, d/dx2 = x0 x1
        if not differentiable[1] and not differentiable[2]:
            values[0] = None
        if not differentiable[0] and not differentiable[2]:
            values[1] = None
        if not differentiable[0] and not differentiable[1]:
            values[2] = None
    elif operator_type is OperatorType.DISCOUNT:
        # x1 and x2 enter every partial, x0 only those of x1 and x2
        if not differentiable[1] and not differentiable[2]:
            values[0] = None
    elif operator_type is OperatorType.CHOOSE:
        # the branch values only enter d/dtrigger
        if not differentiable[0]:
            values[1] = None
            values[2] = None

    return tuple(values)
