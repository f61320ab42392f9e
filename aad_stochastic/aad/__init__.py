# aad/__init__.py
# Adjoint Algorithmic Differentiation over stochastic vectors

from .core.var import ADVar
from .core.node import Node, OperatorType
from .core.engine import get_gradient
from .core.config import AADConfig, DiracDeltaApproximationMethod
from .core.factory import DifferentiableFactory, RandomVariableFactory
from .core.errors import AADError, UnsupportedOperationError, InvalidArgumentError
from .core.seeds import grad, grads, grads_list, value

__all__ = [
    # Core
    'ADVar',
    'Node',
    'OperatorType',
    'DifferentiableFactory',
    'RandomVariableFactory',
    # Configuration
    'AADConfig',
    'DiracDeltaApproximationMethod',
    # Engine
    'get_gradient',
    'grad',
    'grads',
    'grads_list',
    'value',
    # Errors
    'AADError',
    'UnsupportedOperationError',
    'InvalidArgumentError',
]
