"""lala public API.

Importing the package turns on ``jax_enable_x64`` so matrices are stored and
computed in float64. Host applications that share the jax config see the switch.
"""

__version__ = "0.1.0"

import jax

jax.config.update("jax_enable_x64", True)

from .parser import ParseError, parse, parse_program
from .errors import (
    ArityMismatch,
    CallDepthExceeded,
    DimensionMismatch,
    InvalidExpression,
    InvalidFunctionBody,
    InvalidMatrixCell,
    InvalidMatrixShape,
    InvalidReturnStatement,
    LalaArithmeticError,
    LalaError,
    LalaNameError,
    LalaParseError,
    LalaRuntimeError,
    LalaShapeError,
    LalaTypeError,
    LinkError,
    NestingTooDeep,
    NotSquare,
    SingularMatrix,
    TypeMismatch,
    UndefinedFunction,
    UndefinedVariable,
    UnknownCommand,
)
from .matrix import Matrix
from .values import DoubleValue, FunctionValue, IntegerValue, MatrixValue, Value, ValueKind, format_value
from .environment import Environment
from .commands import link
from .interpreter import evaluate, interpret, run

__all__ = [
    "__version__",
    "parse",
    "parse_program",
    "ParseError",
    "interpret",
    "run",
    "evaluate",
    "link",
    "Environment",
    "Matrix",
    "Value",
    "ValueKind",
    "IntegerValue",
    "DoubleValue",
    "MatrixValue",
    "FunctionValue",
    "format_value",
    "LalaError",
    "LalaParseError",
    "LalaRuntimeError",
    "LalaNameError",
    "LalaTypeError",
    "LalaShapeError",
    "LalaArithmeticError",
    "LinkError",
    "UndefinedVariable",
    "UndefinedFunction",
    "TypeMismatch",
    "InvalidMatrixCell",
    "InvalidExpression",
    "DimensionMismatch",
    "NestingTooDeep",
    "NotSquare",
    "InvalidMatrixShape",
    "SingularMatrix",
    "ArityMismatch",
    "InvalidFunctionBody",
    "InvalidReturnStatement",
    "UnknownCommand",
    "CallDepthExceeded",
]
