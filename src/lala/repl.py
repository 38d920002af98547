"""Interactive line-by-line shell over one persistent environment."""

from __future__ import annotations

import sys
from typing import Callable, TextIO

from . import __version__
from .environment import Environment
from .errors import LalaError
from .interpreter import run

BANNER = f"Lala Shell v{__version__}"
PROMPT = "λ "


def repl(
    env: Environment | None = None,
    *,
    prompt: str = PROMPT,
    read_line: Callable[[str], str] = input,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> Environment:
    """Read, interpret and print until EOF or ``exit``; returns the session environment."""
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    session = Environment() if env is None else env

    print(BANNER, file=out)
    print("Type 'exit' or press Ctrl+D to quit.", file=out)
    while True:
        try:
            line = read_line(prompt).strip()
        except EOFError:
            print(file=out)
            break
        if not line:
            continue
        if line == "exit":
            break
        try:
            result = run(line, session)
        except LalaError as exc:
            print(f"error: {exc}", file=err)
            continue
        if result:
            print(result, file=out)
    return session
