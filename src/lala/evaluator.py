"""Expression evaluator and function application for the lala language."""

from __future__ import annotations

import logging
from typing import Callable, Final

import jax.numpy as jnp

from . import matrix as mx
from .ast import (
    Assignment,
    Command,
    DoubleLiteral,
    DyadicOp,
    DyadicVerb,
    FunctionApp,
    FunctionDecl,
    Ident,
    IntLiteral,
    MatrixLiteral,
    MonadicOp,
    MonadicVerb,
    Node,
)
from .environment import Environment
from .errors import (
    ArityMismatch,
    CallDepthExceeded,
    InvalidExpression,
    InvalidFunctionBody,
    InvalidMatrixCell,
    InvalidMatrixShape,
    InvalidReturnStatement,
)
from .matrix import Matrix
from .values import DoubleValue, FunctionValue, IntegerValue, MatrixValue, Value, expect_matrix

logger = logging.getLogger(__name__)


_MONADIC_KERNELS: Final[dict[MonadicVerb, Callable[[Matrix], Value]]] = {
    MonadicVerb.RANK: lambda m: IntegerValue(mx.rank(m)),
    MonadicVerb.INVERSE: lambda m: MatrixValue(mx.inverse(m)),
    MonadicVerb.RREF: lambda m: MatrixValue(mx.rref(m)),
    MonadicVerb.TRANSPOSE: lambda m: MatrixValue(mx.transpose(m)),
    MonadicVerb.DETERMINANT: lambda m: DoubleValue(mx.det(m)),
}

_DYADIC_KERNELS: Final[dict[DyadicVerb, Callable[[Matrix, Matrix], Matrix]]] = {
    DyadicVerb.DOT: mx.dot,
    DyadicVerb.PLUS: lambda l, r: mx.combine(l, r, jnp.add, op="plus"),
    DyadicVerb.TIMES: lambda l, r: mx.combine(l, r, jnp.multiply, op="times"),
}


def construct_matrix(node: MatrixLiteral) -> Matrix:
    if not node.rows or not node.rows[0]:
        raise InvalidMatrixShape("Matrix literal must have at least one row and one column")

    width = len(node.rows[0])
    cells: list[list[float]] = []
    for r, row in enumerate(node.rows):
        if len(row) != width:
            raise InvalidMatrixShape(f"Ragged matrix literal: row {r} has {len(row)} entries, expected {width}")
        values: list[float] = []
        for c, cell in enumerate(row):
            if isinstance(cell, (IntLiteral, DoubleLiteral)):
                values.append(float(cell.value))
            else:
                raise InvalidMatrixCell(row=r, col=c, found=type(cell).__name__)
        cells.append(values)
    return Matrix.from_rows(cells)


def eval_monadic(verb: MonadicVerb, operand: Value) -> Value:
    m = expect_matrix(operand, op=verb.value)
    return _MONADIC_KERNELS[verb](m)


def eval_dyadic(verb: DyadicVerb, left: Value, right: Value) -> Value:
    lm = expect_matrix(left, op=verb.value)
    rm = expect_matrix(right, op=verb.value)
    return MatrixValue(_DYADIC_KERNELS[verb](lm, rm))


def eval_expr(node: Node, env: Environment) -> Value:
    if isinstance(node, IntLiteral):
        return IntegerValue(node.value)

    if isinstance(node, DoubleLiteral):
        return DoubleValue(float(node.value))

    if isinstance(node, MatrixLiteral):
        return MatrixValue(construct_matrix(node))

    if isinstance(node, Ident):
        return env.lookup(node.name)

    if isinstance(node, MonadicOp):
        operand = eval_expr(node.operand, env)
        return eval_monadic(node.verb, operand)

    if isinstance(node, DyadicOp):
        left = eval_expr(node.left, env)
        right = eval_expr(node.right, env)
        return eval_dyadic(node.verb, left, right)

    if isinstance(node, FunctionApp):
        return apply_function(node, env)

    if isinstance(node, (Assignment, FunctionDecl, Command)):
        raise InvalidExpression(type(node).__name__)

    raise TypeError(f"Unsupported expression node: {type(node)!r}")


def assign(node: Assignment, env: Environment) -> Value:
    value = eval_expr(node.expr, env)
    env[node.ident] = value
    return value


def declare_function(node: FunctionDecl, env: Environment) -> FunctionValue:
    fn = FunctionValue(name=node.name, params=node.params, body=node.body)
    env[node.name] = fn
    return fn


def apply_function(node: FunctionApp, env: Environment) -> Value:
    fn = env.lookup_function(node.name)
    if len(node.args) != fn.arity:
        raise ArityMismatch(name=fn.name, expected=fn.arity, found=len(node.args))

    logger.debug("applying %s with %d argument(s)", fn.name, len(node.args))
    scope = env.call_scope()
    try:
        # Arguments see parameters bound by earlier arguments.
        for param, arg in zip(fn.params, node.args):
            scope[param] = eval_expr(arg, scope)
        return _run_body(fn, scope)
    except RecursionError:
        raise CallDepthExceeded(fn.name) from None


def _run_body(fn: FunctionValue, scope: Environment) -> Value:
    if not fn.body:
        raise InvalidReturnStatement(name=fn.name, node=None)

    *steps, last = fn.body
    for stmt in steps:
        if isinstance(stmt, Assignment):
            assign(stmt, scope)
        elif isinstance(stmt, FunctionDecl):
            declare_function(stmt, scope)
        else:
            raise InvalidFunctionBody(name=fn.name, node=type(stmt).__name__)

    if not isinstance(last, Ident):
        raise InvalidReturnStatement(name=fn.name, node=type(last).__name__)
    return scope.lookup(last.name)
