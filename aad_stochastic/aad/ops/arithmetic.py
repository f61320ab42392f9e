# aad/ops/arithmetic.py
from ...stochastic.random_variable import lift
from ..core.node import Node, OperatorType
from ..core.var import ADVar


def _operand(x, receiver):
    """
    (node, values) of an operand as seen by `receiver`.

    Only ADVars of the receiver's own priority are differentiable here;
    everything else (numbers, plain vectors, inner ADVars of a nested
    factory) enters as a constant with no node.
    """
    if isinstance(x, ADVar) and x.get_type_priority() == receiver.get_type_priority():
        return x.node, x.values
    return None, lift(x)


def _record(receiver, operator_type, operands, f, operator=None):
    """
    Generic primitive:
      - evaluates f on the operands' values
      - records a Node with the operands' nodes and values
      - returns an ADVar owned by the receiver's factory
    """
    nodes, values = zip(*[_operand(x, receiver) for x in operands])
    out_values = f(*values)
    node = Node(operator_type, nodes, values, operator, receiver.factory.config)
    return ADVar._of(out_values, node, receiver.factory)


def add(x, y):
    return _record(x, OperatorType.ADD, (x, y), lambda a, b: a.add(b))


def sub(x, y):
    return _record(x, OperatorType.SUB, (x, y), lambda a, b: a.sub(b))


def bus(x, y):
    """y - x"""
    return _record(x, OperatorType.SUB, (y, x), lambda b, a: b.sub(a))


def mult(x, y):
    return _record(x, OperatorType.MULT, (x, y), lambda a, b: a.mult(b))


def div(x, y):
    return _record(x, OperatorType.DIV, (x, y), lambda a, b: a.div(b))


def vid(x, y):
    """y / x"""
    return _record(x, OperatorType.DIV, (y, x), lambda b, a: b.div(a))


def neg(x):
    return mult(x, -1.0)


def squared(x):
    return _record(x, OperatorType.SQUARED, (x,), lambda a: a.squared())


def invert(x):
    return _record(x, OperatorType.INVERT, (x,), lambda a: a.invert())


def pow(x, exponent):
    """
    x ** exponent. The exponent is held constant when differentiating
    (its partial derivative is 0).
    """
    return _record(x, OperatorType.POW, (x, exponent), lambda a, p: a.pow(p))


def add_product(x, factor1, factor2):
    """x + factor1 * factor2"""
    return _record(x, OperatorType.ADDPRODUCT, (x, factor1, factor2),
                   lambda a, b, c: a.add_product(b, c))


def add_ratio(x, numerator, denominator):
    """x + numerator / denominator"""
    return _record(x, OperatorType.ADDRATIO, (x, numerator, denominator),
                   lambda a, b, c: a.add_ratio(b, c))


def sub_ratio(x, numerator, denominator):
    """x - numerator / denominator"""
    return _record(x, OperatorType.SUBRATIO, (x, numerator, denominator),
                   lambda a, b, c: a.sub_ratio(b, c))


def accrue(x, rate, period_length):
    """x * (1 + rate * period_length)"""
    return _record(x, OperatorType.ACCRUE, (x, rate, period_length),
                   lambda a, r, _: a.accrue(r, period_length))


def discount(x, rate, period_length):
    """x / (1 + rate * period_length)"""
    return _record(x, OperatorType.DISCOUNT, (x, rate, period_length),
                   lambda a, r, _: a.discount(r, period_length))
