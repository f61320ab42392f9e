# aad/ops/transcendental.py
from ..core.node import OperatorType
from .arithmetic import _record


def exp(x):
    return _record(x, OperatorType.EXP, (x,), lambda a: a.exp())


def log(x):
    return _record(x, OperatorType.LOG, (x,), lambda a: a.log())


def sqrt(x):
    return _record(x, OperatorType.SQRT, (x,), lambda a: a.sqrt())


def sin(x):
    return _record(x, OperatorType.SIN, (x,), lambda a: a.sin())


def cos(x):
    return _record(x, OperatorType.COS, (x,), lambda a: a.cos())
