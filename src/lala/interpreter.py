"""Statement driver: runs a flat statement sequence against an environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from functools import lru_cache
from typing import Final

from .ast import Assignment, Command, DoubleLiteral, DyadicOp, FunctionApp, FunctionDecl, Ident, IntLiteral, MatrixLiteral, MonadicOp, Node, Program
from .commands import run_command
from .environment import Environment
from .errors import LalaParseError, NestingTooDeep
from .evaluator import assign, declare_function, eval_expr
from .parser import ParseError, parse_program
from .values import Value, format_value

logger = logging.getLogger(__name__)

_PROGRAM_CACHE_MAX: Final[int] = max(1, int(os.environ.get("LALA_PROGRAM_CACHE_MAX", "256")))

_EXPRESSION_NODES: Final = (IntLiteral, DoubleLiteral, Ident, MatrixLiteral, MonadicOp, DyadicOp, FunctionApp)


@lru_cache(maxsize=_PROGRAM_CACHE_MAX)
def _parse_program_cached(source: str) -> Program:
    return parse_program(source)


def parse_source(source: str) -> Program:
    try:
        return _parse_program_cached(source)
    except ParseError as exc:
        raise LalaParseError.from_parse_error(exc) from exc
    except RecursionError:
        raise NestingTooDeep(stage="parsing") from None


def _execute(stmt: Node, env: Environment) -> tuple[Value | None, str]:
    """Run one statement; returns the produced value (if any) and its visible text."""
    try:
        return _dispatch(stmt, env)
    except RecursionError:
        raise NestingTooDeep(stage="evaluation") from None


def _dispatch(stmt: Node, env: Environment) -> tuple[Value | None, str]:
    if isinstance(stmt, Assignment):
        value = assign(stmt, env)
        return value, format_value(value)

    if isinstance(stmt, FunctionDecl):
        fn = declare_function(stmt, env)
        return fn, f"defined {format_value(fn)}"

    if isinstance(stmt, Command):
        return None, run_command(stmt.name, stmt.params, env)

    if isinstance(stmt, _EXPRESSION_NODES):
        value = eval_expr(stmt, env)
        return value, format_value(value)

    logger.warning("skipping unrecognized statement %r", stmt)
    return None, f"<unrecognized statement: {type(stmt).__name__}>"


def interpret(statements: Iterable[Node], env: Environment | None = None, suppress_output: bool = False) -> str:
    """Run ``statements`` in order and return the last visible result.

    Without ``env`` the statements run in a fresh environment that is dropped
    afterwards. The first failure propagates unchanged and later statements
    are not run. With ``suppress_output`` the environment is still updated but
    no result text is produced.
    """
    runtime_env = Environment() if env is None else env
    output = ""
    for stmt in statements:
        _, text = _execute(stmt, runtime_env)
        if not suppress_output:
            output = text
    return output


def run(source: str, env: Environment | None = None, *, suppress_output: bool = False) -> str:
    """Parse and interpret ``source``."""
    program = parse_source(source)
    return interpret(program.statements, env, suppress_output)


def evaluate(source: str, env: Environment | None = None) -> Value | None:
    """Parse and run ``source``, returning the value of its last statement.

    Commands and unrecognized statements produce ``None``.
    """
    runtime_env = Environment() if env is None else env
    result: Value | None = None
    for stmt in parse_source(source).statements:
        result, _ = _execute(stmt, runtime_env)
    return result
