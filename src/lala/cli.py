"""Command-line entry point: link files, run scripts, or start the shell."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .commands import link
from .environment import Environment
from .errors import LalaError
from .interpreter import run
from .repl import repl

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lala", description=__doc__)
    parser.add_argument("scripts", nargs="*", help="script files to run in order, sharing one environment")
    parser.add_argument(
        "-l",
        "--link",
        action="append",
        default=[],
        metavar="FILE",
        help="link FILE into the session environment before anything else (repeatable)",
    )
    parser.add_argument("-i", "--interactive", action="store_true", help="start the shell after running scripts")
    parser.add_argument("-q", "--quiet", action="store_true", help="do not print script results")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log more (-v info, -vv debug)")
    return parser


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    level = logging.getLevelName(os.environ.get("LALA_LOG_LEVEL", "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=_log_level(args.verbose), format="%(levelname)s %(name)s: %(message)s")
    try:
        return _run(args)
    except KeyboardInterrupt:
        print("\nExiting.")
        return 130


def _run(args: argparse.Namespace) -> int:
    env = Environment()
    try:
        if args.link:
            link(args.link, env)
            logger.info("linked %d file(s)", len(args.link))
        for script in args.scripts:
            path = Path(script)
            try:
                source = path.read_text(encoding="utf-8")
            except OSError as exc:
                print(f"error: cannot read {script}: {exc.strerror or exc}", file=sys.stderr)
                return 1
            result = run(source, env, suppress_output=args.quiet)
            if result:
                print(result)
    except LalaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.interactive or not args.scripts:
        repl(env)
    return 0
