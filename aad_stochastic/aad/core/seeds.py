# aad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the output and let derivatives grow
# backwards through the operator tree.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...stochastic.random_variable import RandomVariable
from .factory import DifferentiableFactory, default_factory
from .var import ADVar

ZERO = RandomVariable(0.0)


def value(x: Any) -> Any:
    """Return the values of an ADVar; pass through anything else unchanged."""
    return x.get_values() if isinstance(x, ADVar) else x


def _derivatives(y: Any, xs: List[ADVar]) -> List[Any]:
    # an output that is not differentiable does not depend on the inputs
    if not isinstance(y, ADVar):
        return [ZERO for _ in xs]
    gradient = y.get_gradient(independent_ids={x.get_id() for x in xs})
    return [gradient.get(x.get_id(), ZERO) for x in xs]


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[ADVar], Any], x0: Any,
         factory: Optional[DifferentiableFactory] = None):
    """
    Derivative of y=f(x) at x0 (single input), one reverse pass.
    x0 may be a number, a vector of realizations or a RandomVariable.
    """
    factory = factory if factory is not None else default_factory()
    x = factory.create_random_variable(x0)
    return _derivatives(f(x), [x])[0]


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, ADVar]], Any], inputs: Dict[str, Any],
          factory: Optional[DifferentiableFactory] = None) -> Dict[str, Any]:
    """
    Derivatives of y=f(vars) w.r.t. ALL inputs (dict form), one reverse pass.

    Parameters
    ----------
    f       : function taking a dict {name: ADVar} and returning an ADVar
    inputs  : dict {name: number | vector | RandomVariable}

    Returns
    -------
    dict {name: derivative}  # in the same key order as `inputs`
    """
    factory = factory if factory is not None else default_factory()
    vars_ad = {k: factory.create_random_variable(v) for k, v in inputs.items()}
    derivatives = _derivatives(f(vars_ad), list(vars_ad.values()))
    return dict(zip(vars_ad.keys(), derivatives))


def grads_list(f: Callable[[List[ADVar]], Any], x0_list: Iterable[Any],
               factory: Optional[DifferentiableFactory] = None) -> List[Any]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of derivatives in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [RandomVariable(4.0), RandomVariable(3.0)]
    """
    factory = factory if factory is not None else default_factory()
    xs = [factory.create_random_variable(v) for v in x0_list]
    return _derivatives(f(xs), xs)
