# stochastic/dispatch.py
"""
Type-priority dispatch shared by every value variant.

Each value type carries an integer ``type_priority``:

    plain numbers          0
    RandomVariable         1
    ADVar                  3   (nested ADVar: inner priority + 1)

For a binary operation ``x.op(y)`` the result must have the type of the
higher-priority operand, whatever the call order. When ``y`` outranks ``x``
the call is handed to ``y`` using the mirrored operation, e.g. ``x.sub(y)``
becomes ``y.bus(x)`` (= x - y evaluated by y).
"""
from __future__ import annotations
import functools
import numbers

import numpy as np

NUMBER_PRIORITY = 0
# raw arrays and sequences are taken as plain random variables
VECTOR_PRIORITY = 1

# op -> operation on the other operand giving the same result
MIRRORED = {
    "add": "add",
    "mult": "mult",
    "cap": "cap",
    "floor": "floor",
    "sub": "bus",
    "bus": "sub",
    "div": "vid",
    "vid": "div",
}


def is_number(x) -> bool:
    return isinstance(x, numbers.Real)


def type_priority(x) -> int:
    """Priority of a value; plain Python numbers rank lowest."""
    if is_number(x):
        return NUMBER_PRIORITY
    if isinstance(x, (list, tuple, np.ndarray)):
        return VECTOR_PRIORITY
    return x.get_type_priority()


def outranks(other, receiver) -> bool:
    """True if `other` must take over an operation called on `receiver`."""
    return type_priority(other) > type_priority(receiver)


def dispatching(op_name: str):
    """
    Decorator for binary methods ``method(self, other, *args)``.

    If `other` outranks `self`, the mirrored method of `other` is invoked with
    `self` as its argument instead of running the decorated body.
    """
    mirror = MIRRORED[op_name]

    def decorate(method):
        @functools.wraps(method)
        def wrapper(self, other, *args):
            if outranks(other, self):
                return getattr(other, mirror)(self, *args)
            return method(self, other, *args)
        return wrapper

    return decorate
