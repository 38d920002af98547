"""Commands that a statement can dispatch by name, such as ``:link``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextvars import ContextVar
from pathlib import Path
from typing import Callable, Final

from .environment import Environment
from .errors import LinkError, UnknownCommand

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Sequence[str], Environment], str]


_ACTIVE_LINKS: ContextVar[frozenset[Path]] = ContextVar("lala_active_links", default=frozenset())


def link(files: Sequence[str], env: Environment) -> None:
    """Interpret each file, in order, into ``env`` with output suppressed.

    Files share one staging scope, so later files can use names bound by
    earlier ones. Bindings reach ``env`` only once every file has run; the
    first failure aborts the whole link and leaves ``env`` untouched. A file
    that links itself, directly or through other files, raises ``LinkError``.
    """
    from .interpreter import interpret, parse_source

    staged = env.call_scope()
    for file in files:
        path = Path(file)
        key = path.resolve()
        active = _ACTIVE_LINKS.get()
        if key in active:
            raise LinkError(path=str(file), reason="link cycle")
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise LinkError(path=str(file), reason=exc.strerror or str(exc)) from exc
        logger.debug("linking %s", path)
        program = parse_source(source)
        token = _ACTIVE_LINKS.set(active | {key})
        try:
            interpret(program.statements, staged, suppress_output=True)
        finally:
            _ACTIVE_LINKS.reset(token)

    env.update(staged.bindings)


def _link_command(params: Sequence[str], env: Environment) -> str:
    link(params, env)
    return f"linked {len(params)} file(s)"


COMMANDS: Final[dict[str, CommandHandler]] = {
    "link": _link_command,
}


def run_command(name: str, params: Sequence[str], env: Environment) -> str:
    handler = COMMANDS.get(name)
    if handler is None:
        raise UnknownCommand(name)
    return handler(params, env)
