# stochastic/__init__.py
"""
Stochastic vector value type consumed by the AAD engine.
"""

from .random_variable import RandomVariable
from .regression import LinearRegression
from .conditional_expectation import ConditionalExpectationEstimator, RegressionConditionalExpectation
from .dispatch import type_priority

__all__ = [
    "RandomVariable",
    "LinearRegression",
    "ConditionalExpectationEstimator",
    "RegressionConditionalExpectation",
    "type_priority",
]
