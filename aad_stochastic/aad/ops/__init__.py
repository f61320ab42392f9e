# aad/ops/__init__.py

# Convenience re-exports so users can do: from aad.ops import mult, exp, ...
from .arithmetic import add, sub, bus, mult, div, vid, neg, pow, squared, invert
from .arithmetic import add_product, add_ratio, sub_ratio, accrue, discount
from .transcendental import exp, log, sqrt, sin, cos
from .special import cap, floor, abs, choose, average, conditional_expectation

__all__ = [
    "add", "sub", "bus", "mult", "div", "vid", "neg", "pow", "squared", "invert",
    "add_product", "add_ratio", "sub_ratio", "accrue", "discount",
    "exp", "log", "sqrt", "sin", "cos",
    "cap", "floor", "abs", "choose", "average", "conditional_expectation",
]
