"""AST nodes for the lala matrix language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MonadicVerb(str, Enum):
    RANK = "rank"
    INVERSE = "inverse"
    RREF = "rref"
    TRANSPOSE = "transpose"
    DETERMINANT = "determinant"


class DyadicVerb(str, Enum):
    DOT = "dot"
    PLUS = "plus"
    TIMES = "times"


@dataclass(frozen=True)
class IntLiteral:
    value: int


@dataclass(frozen=True)
class DoubleLiteral:
    value: float


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class MatrixLiteral:
    rows: tuple[tuple["Node", ...], ...]


@dataclass(frozen=True)
class MonadicOp:
    verb: MonadicVerb
    operand: "Node"


@dataclass(frozen=True)
class DyadicOp:
    verb: DyadicVerb
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class FunctionApp:
    name: str
    args: tuple["Node", ...]


@dataclass(frozen=True)
class Assignment:
    ident: str
    expr: "Node"


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    params: tuple[str, ...]
    body: tuple["Node", ...]


@dataclass(frozen=True)
class Command:
    name: str
    params: tuple[str, ...]


@dataclass(frozen=True)
class Program:
    statements: tuple["Node", ...]


Expr = Union[IntLiteral, DoubleLiteral, Ident, MatrixLiteral, MonadicOp, DyadicOp, FunctionApp]
Node = Union[Expr, Assignment, FunctionDecl, Command]
