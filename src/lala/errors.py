"""Structured error types for parser/runtime separation."""

from __future__ import annotations

from dataclasses import dataclass

from .parser import ParseError


class LalaError(Exception):
    """Base class for structured lala errors."""


@dataclass(frozen=True)
class LalaParseError(LalaError):
    """Wraps parser failures with explicit parse-stage typing."""

    message: str
    start: int
    end: int
    expected: tuple[str, ...] = ()
    found: str | None = None

    @classmethod
    def from_parse_error(cls, err: ParseError) -> "LalaParseError":
        return cls(
            message=err.message,
            start=err.start,
            end=err.end,
            expected=err.expected,
            found=err.found,
        )

    def __str__(self) -> str:
        expected = ""
        if self.expected:
            expected = f"; expected {', '.join(self.expected)}"
        found = ""
        if self.found is not None:
            found = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected}{found}"


@dataclass(frozen=True)
class LinkError(LalaError):
    """A file named by the link command could not be read."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"Cannot link {self.path!r}: {self.reason}"


class LalaRuntimeError(LalaError):
    """Generic runtime failure after successful parse."""


class LalaNameError(LalaRuntimeError):
    """A name could not be resolved to a usable binding."""


class LalaTypeError(LalaRuntimeError):
    """Runtime value-kind compatibility failure."""


class LalaShapeError(LalaRuntimeError):
    """Runtime matrix shape compatibility failure."""


class LalaArithmeticError(LalaRuntimeError):
    """Numeric operation has no defined result."""


@dataclass(frozen=True)
class UndefinedVariable(LalaNameError):
    name: str

    def __str__(self) -> str:
        return f"Undefined variable {self.name!r}"


@dataclass(frozen=True)
class UndefinedFunction(LalaNameError):
    name: str

    def __str__(self) -> str:
        return f"Undefined function {self.name!r}"


@dataclass(frozen=True)
class TypeMismatch(LalaTypeError):
    expected: str
    op: str
    found: str | None = None

    def __str__(self) -> str:
        found = "" if self.found is None else f", found {self.found}"
        return f"{self.op} expects a {self.expected} operand{found}"


@dataclass(frozen=True)
class InvalidMatrixCell(LalaTypeError):
    row: int
    col: int
    found: str

    def __str__(self) -> str:
        return f"Matrix cell ({self.row}, {self.col}) must be a numeric literal, found {self.found}"


@dataclass(frozen=True)
class InvalidExpression(LalaTypeError):
    node: str

    def __str__(self) -> str:
        return f"{self.node} is a statement and cannot be evaluated as an expression"


@dataclass(frozen=True)
class DimensionMismatch(LalaShapeError):
    op: str
    left: tuple[int, int]
    right: tuple[int, int]

    def __str__(self) -> str:
        lr, lc = self.left
        rr, rc = self.right
        return f"Dimensions not matched for {self.op}: left is {lr} by {lc}, right is {rr} by {rc}"


@dataclass(frozen=True)
class NotSquare(LalaShapeError):
    op: str
    rows: int
    cols: int

    def __str__(self) -> str:
        return f"{self.op} requires a square matrix, got {self.rows} by {self.cols}"


@dataclass(frozen=True)
class InvalidMatrixShape(LalaShapeError):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class SingularMatrix(LalaArithmeticError):
    def __str__(self) -> str:
        return "Determinant is zero; matrix has no inverse"


@dataclass(frozen=True)
class ArityMismatch(LalaRuntimeError):
    name: str
    expected: int
    found: int

    def __str__(self) -> str:
        return f"Function {self.name!r} takes {self.expected} argument(s), got {self.found}"


@dataclass(frozen=True)
class InvalidFunctionBody(LalaRuntimeError):
    name: str
    node: str

    def __str__(self) -> str:
        return f"Function {self.name!r} body may only contain assignments and function declarations, found {self.node}"


@dataclass(frozen=True)
class InvalidReturnStatement(LalaRuntimeError):
    name: str
    node: str | None

    def __str__(self) -> str:
        if self.node is None:
            return f"Function {self.name!r} has an empty body; it must end with a variable name"
        return f"Function {self.name!r} must end with a bare variable name, found {self.node}"


@dataclass(frozen=True)
class UnknownCommand(LalaRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"Unknown command {self.name!r}"


@dataclass(frozen=True)
class CallDepthExceeded(LalaRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"Maximum call depth exceeded while applying {self.name!r}"


@dataclass(frozen=True)
class NestingTooDeep(LalaRuntimeError):
    """A statement nests deeper than the interpreter stack allows."""

    stage: str

    def __str__(self) -> str:
        return f"Expression nested too deeply during {self.stage}"
