# stochastic/regression.py
from __future__ import annotations
import numpy as np
from scipy.linalg import lstsq
from typing import Sequence, Union

from .random_variable import RandomVariable, plain

ArrayLike = Union[RandomVariable, np.ndarray, Sequence[float], float]


def _realizations(x: ArrayLike, size: int) -> np.ndarray:
    x = plain(x) if hasattr(x, "get_values") else x
    val = x.get_realizations() if isinstance(x, RandomVariable) else np.atleast_1d(np.asarray(x, dtype=float))
    return np.broadcast_to(val, (size,)) if val.size == 1 else val


def _size(x: ArrayLike) -> int:
    x = plain(x) if hasattr(x, "get_values") else x
    return x.size() if isinstance(x, RandomVariable) else int(np.size(x))


def design_matrix(basis_functions: Sequence[ArrayLike], size: int) -> np.ndarray:
    """Stack basis functions as columns; deterministic basis functions are broadcast."""
    return np.column_stack([_realizations(b, size) for b in basis_functions])


class LinearRegression:
    """
    Ordinary least squares regression of a vector on a set of basis functions,
    i.e. the coefficients a minimizing || y - sum_k a_k B_k ||^2.
    """

    def __init__(self, basis_functions: Sequence[ArrayLike]):
        if len(basis_functions) == 0:
            raise ValueError("LinearRegression requires at least one basis function.")
        self.basis_functions = list(basis_functions)

    def get_regression_coefficients(self, value: ArrayLike) -> np.ndarray:
        size = max([_size(value)] + [_size(b) for b in self.basis_functions])
        X = design_matrix(self.basis_functions, size)
        y = _realizations(value, size)
        coefficients, _, _, _ = lstsq(X, y)
        return coefficients
