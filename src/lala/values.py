"""Runtime value model and display rules for the lala evaluator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .ast import Node
from .errors import TypeMismatch
from .matrix import Matrix

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


@dataclass(frozen=True)
class IntegerValue:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"IntegerValue expects an int, got {type(self.value).__name__}")
        if not _INT_MIN <= self.value <= _INT_MAX:
            raise ValueError(f"IntegerValue {self.value} does not fit in 32 bits")


@dataclass(frozen=True)
class DoubleValue:
    value: float


@dataclass(frozen=True)
class MatrixValue:
    matrix: Matrix


@dataclass(frozen=True)
class FunctionValue:
    name: str
    params: tuple[str, ...]
    body: tuple[Node, ...]

    @property
    def arity(self) -> int:
        return len(self.params)


Value = Union[IntegerValue, DoubleValue, MatrixValue, FunctionValue]


class ValueKind(str, Enum):
    INTEGER = "Integer"
    DOUBLE = "Double"
    MATRIX = "Matrix"
    FUNCTION = "Function"


def kind_of(value: Value) -> ValueKind:
    if isinstance(value, IntegerValue):
        return ValueKind.INTEGER
    if isinstance(value, DoubleValue):
        return ValueKind.DOUBLE
    if isinstance(value, MatrixValue):
        return ValueKind.MATRIX
    if isinstance(value, FunctionValue):
        return ValueKind.FUNCTION
    raise TypeError(f"Unsupported runtime type {type(value).__name__}")


def validate_value(value: object, *, where: str = "value") -> None:
    if isinstance(value, (IntegerValue, DoubleValue, MatrixValue, FunctionValue)):
        return
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")


def expect_matrix(value: Value, *, op: str) -> Matrix:
    if isinstance(value, MatrixValue):
        return value.matrix
    raise TypeMismatch(expected=ValueKind.MATRIX.value, op=op, found=kind_of(value).value)


def format_matrix(matrix: Matrix) -> str:
    cells = [[f"{x:.2f}" for x in row] for row in matrix.tolist()]
    width = max(len(cell) for row in cells for cell in row)
    return "\n".join("[" + " ".join(cell.rjust(width) for cell in row) + "]" for row in cells)


def format_value(value: Value) -> str:
    if isinstance(value, IntegerValue):
        return str(value.value)
    if isinstance(value, DoubleValue):
        text = repr(float(value.value))
        # Integral doubles print like integers: -2.0 shows as -2.
        return text[:-2] if text.endswith(".0") else text
    if isinstance(value, MatrixValue):
        return format_matrix(value.matrix)
    if isinstance(value, FunctionValue):
        return f"fun {value.name}({', '.join(value.params)})"
    raise TypeError(f"Unsupported runtime type {type(value).__name__}")
