# aad/core/__init__.py

"""
Core public API for the AAD package.

Exports:
    ADVar          : Differentiable stochastic value; records an operator tree.
    Node           : Operator-tree node (operator, arguments, retained values).
    get_gradient   : Run a single reverse pass from a node.
    AADConfig      : Engine configuration (Dirac delta method, retention).
    grad           : Convenience: derivative of f at a point.
    value          : Convenience: extract the values from an ADVar.
"""

from .var import ADVar
from .node import Node, OperatorType
from .engine import get_gradient
from .config import AADConfig
from .seeds import grad, value

__all__ = [
    "ADVar",
    "Node", "OperatorType",
    "get_gradient",
    "AADConfig",
    "grad", "value",
]
