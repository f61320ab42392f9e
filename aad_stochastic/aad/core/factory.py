# aad/core/factory.py
"""
Value factories.

A factory fixes the kind of value it creates, and with it the type priority
used by dispatch:

    RandomVariableFactory                                  plain vectors (1)
    DifferentiableFactory()                                ADVar (3)
    DifferentiableFactory(base_factory=DifferentiableFactory())
                                                           nested ADVar (4)

A nested factory creates ADVars whose values are ADVars of its base factory,
which gives derivatives that are themselves differentiable.
"""
from __future__ import annotations
import functools
from typing import Any, Optional

import numpy as np

from ...stochastic.random_variable import RandomVariable
from .config import AADConfig


class RandomVariableFactory:
    def get_type_priority(self) -> int:
        return RandomVariable.TYPE_PRIORITY

    def create_random_variable(self, value: Any, time: float = -np.inf) -> RandomVariable:
        return RandomVariable(value, time)


class DifferentiableFactory:
    TYPE_PRIORITY = 3

    def __init__(self, config: Optional[AADConfig] = None, base_factory=None):
        self.config = config if config is not None else AADConfig()
        self.base_factory = base_factory if base_factory is not None else RandomVariableFactory()

    def __repr__(self):
        return f"DifferentiableFactory(priority={self.get_type_priority()}, config={self.config!r})"

    def get_type_priority(self) -> int:
        if isinstance(self.base_factory, DifferentiableFactory):
            return self.base_factory.get_type_priority() + 1
        return self.TYPE_PRIORITY

    def create_random_variable(self, value: Any, time: float = -np.inf):
        """A new independent (leaf) ADVar holding `value`."""
        from .var import ADVar
        return ADVar(self.base_factory.create_random_variable(value, time), factory=self)


@functools.lru_cache(maxsize=None)
def default_factory() -> DifferentiableFactory:
    """Factory used by `ADVar(value)` when none is given."""
    return DifferentiableFactory()
