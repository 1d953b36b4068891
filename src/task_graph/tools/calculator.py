"""
Calculator tool.

`calculate` is a pure function shared by the in-process calculate agent and
the client bridge's local resolver. Operands may arrive as numbers or numeric
strings; both are coerced with float(). Powers and roots stay real: a
negative base with a fractional exponent gives NaN, never a complex number.
"""

from __future__ import annotations

import math
from typing import Union

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from task_graph.exceptions import UnknownOperatorError

Number = Union[int, float, str]


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except ValueError:
        # Negative base with a fractional exponent has no real result
        return math.nan


_OPERATIONS = {
    "add": lambda a, b: a + b,
    "+": lambda a, b: a + b,
    "subtract": lambda a, b: a - b,
    "-": lambda a, b: a - b,
    "multiply": lambda a, b: a * b,
    "*": lambda a, b: a * b,
    "divide": lambda a, b: a / b,
    "/": lambda a, b: a / b,
    "power": _power,
    "^": _power,
    "root": lambda a, b: _power(a, 1 / b),
}

SUPPORTED_OPERATORS = tuple(_OPERATIONS)


def _to_number(value: Number) -> float:
    return float(value) if isinstance(value, str) else value


def calculate(a: Number, b: Number, operator: str) -> float:
    """Apply `operator` to a and b. Raises UnknownOperatorError for unsupported tokens."""
    operation = _OPERATIONS.get(operator)
    if operation is None:
        raise UnknownOperatorError(operator)
    return operation(_to_number(a), _to_number(b))


def format_result(value: float) -> str:
    """Render integral floats without a trailing '.0' (6.0 -> '6')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CalculateInput(BaseModel):
    a: Number = Field(description="First operand")
    b: Number = Field(description="Second operand")
    operator: str = Field(
        description=(
            "One of: add, subtract, multiply, divide, power, root "
            "(or the symbols +, -, *, /, ^)"
        )
    )


@tool("calculate", args_schema=CalculateInput)
def calculator_tool(a: Number, b: Number, operator: str) -> str:
    """
    Perform a single math operation on two operands.

    Supports addition, subtraction, multiplication, division, exponentiation
    (a to the power of b) and roots (the b-th root of a). Call once per
    operation; chain results across plan steps.
    """
    return format_result(calculate(a, b, operator))
