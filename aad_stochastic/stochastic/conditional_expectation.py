# stochastic/conditional_expectation.py
"""
Conditional expectation estimators.

An estimator projects a random variable onto the information available at an
earlier time. The regression estimator below is a linear, idempotent
projection: applying it twice gives the same result as applying it once.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
import numpy as np
from typing import Optional, Sequence

from .random_variable import RandomVariable
from .regression import LinearRegression, design_matrix


class ConditionalExpectationEstimator(ABC):
    """Interface of an estimator of E[ X | F_t ]."""

    @abstractmethod
    def get_conditional_expectation(self, random_variable: RandomVariable) -> RandomVariable:
        pass


class RegressionConditionalExpectation(ConditionalExpectationEstimator):
    """
    Least squares Monte-Carlo estimator of E[ X | F_t ].

    Args:
        basis_functions: F_t-measurable random variables used for the regression.
        basis_functions_predictor: optional basis on which the fitted
            coefficients are evaluated (defaults to `basis_functions`).
    """

    def __init__(self, basis_functions: Sequence[RandomVariable],
                 basis_functions_predictor: Optional[Sequence[RandomVariable]] = None):
        self.basis_functions = list(basis_functions)
        self.basis_functions_predictor = list(basis_functions_predictor or basis_functions)
        self.time = max(b.get_filtration_time() for b in self.basis_functions_predictor)

    def get_conditional_expectation(self, random_variable: RandomVariable) -> RandomVariable:
        coefficients = LinearRegression(self.basis_functions).get_regression_coefficients(random_variable)
        size = max([random_variable.size()] + [b.size() for b in self.basis_functions_predictor])
        values = design_matrix(self.basis_functions_predictor, size) @ coefficients
        return RandomVariable(values, time=self.time)

    def __repr__(self):
        return f"RegressionConditionalExpectation(n_basis={len(self.basis_functions)}, time={self.time})"
