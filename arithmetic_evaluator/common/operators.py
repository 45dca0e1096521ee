"""Operator table shared by the tokenizer and the evaluator."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import math
import operator
from types import MappingProxyType
from typing import Callable, Mapping, NamedTuple


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]


class Associativity(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class OperatorSpec(NamedTuple):
    """Precedence, associativity and implementation of a binary operator."""

    name: str
    precedence: int
    associativity: Associativity
    function: OperatorFn


def power(left: float, right: float) -> float:
    """Raise ``left`` to ``right``; ``math.pow`` never falls back to complex numbers."""
    return math.pow(left, right)


def scale(left: float, right: float) -> float:
    """
    Scientific scaling: ``left * 10^right``.

    The power of ten is split in two when it does not fit in a float on its
    own, so only a product that is itself out of range overflows.
    """
    if left == 0:
        return left
    try:
        result = left * math.pow(10.0, right)
    except OverflowError:
        half = math.pow(10.0, right / 2)
        result = left * half * half
    if math.isinf(result) and not math.isinf(left):
        raise OverflowError("math range error")
    return result


# Mapping of operator symbols to their specification, read-only for the whole process
OPERATORS: Mapping[str, OperatorSpec] = MappingProxyType({
    "+": OperatorSpec("add", 1, Associativity.LEFT, operator.add),
    "-": OperatorSpec("subtract", 1, Associativity.LEFT, operator.sub),
    "*": OperatorSpec("multiply", 2, Associativity.LEFT, operator.mul),
    "/": OperatorSpec("divide", 2, Associativity.LEFT, operator.truediv),
    "%": OperatorSpec("modulo", 2, Associativity.LEFT, math.fmod),
    "^": OperatorSpec("power", 3, Associativity.RIGHT, power),
    "E": OperatorSpec("scale", 3, Associativity.RIGHT, scale),
})

# Operators whose right operand must not be zero
DIVISION_OPERATORS = frozenset({"/", "%"})
