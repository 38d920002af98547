"""Tokenization for the lala matrix language."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


class LexError(SyntaxError):
    def __init__(self, message: str, start: int, end: int) -> None:
        super().__init__(f"{message} at index {start}")
        self.message = message
        self.start = start
        self.end = end


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    "[": "LBRACK",
    "]": "RBRACK",
    ",": "COMMA",
    ";": "SEMI",
    ":": "COLON",
    "=": "ASSIGN",
}

# Longest glyphs first so that ">>" wins over a lone ">".
_MONADIC_GLYPHS = (">>", ">+", "#", "?", "$")
_DYADIC_GLYPHS = ("++", "**", "@")

_KEYWORDS = {"fun"}

_NUMBER_RE = re.compile(
    r"""
    -?                                  # leading sign
    (?:
        [0-9]+(?P<frac>\.[0-9]*)?
      |
        (?P<lead_frac>\.[0-9]+)
    )
    (?P<exp>[eE][+\-]?[0-9]+)?
    """,
    re.VERBOSE,
)


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _starts_number(source: str, i: int) -> bool:
    ch = source[i]
    if ch.isdigit():
        return True
    nxt = source[i + 1] if i + 1 < len(source) else ""
    if ch == ".":
        return nxt.isdigit()
    if ch == "-":
        return nxt.isdigit() or (nxt == "." and i + 2 < len(source) and source[i + 2].isdigit())
    return False


def _scan_number(source: str, start: int) -> Token:
    m = _NUMBER_RE.match(source, start)
    if m is None:
        raise LexError("Invalid numeric literal", start, start + 1)
    end = m.end()
    if end < len(source) and _is_ident_start(source[end]):
        raise LexError(f"Invalid numeric literal {source[start:end + 1]!r}", start, end + 1)
    is_float = bool(m.group("frac") or m.group("lead_frac") or m.group("exp"))
    return Token("FLOAT" if is_float else "INT", source[start:end], start, end)


def _scan_string(source: str, start: int) -> tuple[str, int]:
    assert source[start] == '"'
    i = start + 1
    out: list[str] = []
    while i < len(source):
        ch = source[i]
        if ch == '"':
            return "".join(out), i + 1
        if ch == "\\":
            if i + 1 >= len(source):
                break
            esc = source[i + 1]
            if esc not in {'"', "\\"}:
                raise LexError(f"Unknown escape sequence \\{esc}", i, i + 2)
            out.append(esc)
            i += 2
            continue
        if ch in {"\n", "\r"}:
            break
        out.append(ch)
        i += 1
    raise LexError("Unterminated string literal", start, i)


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch in {" ", "\t", "\f", "\v"}:
            i += 1
            continue

        if source.startswith("//", i):
            while i < len(source) and source[i] not in {"\n", "\r"}:
                i += 1
            continue

        if ch in {"\n", "\r"}:
            start = i
            while i < len(source) and source[i] in {"\n", "\r"}:
                i += 1
            tokens.append(Token("SEP", "\n", start, i))
            continue

        if _starts_number(source, i):
            tok = _scan_number(source, i)
            tokens.append(tok)
            i = tok.end
            continue

        glyph = next((g for g in _MONADIC_GLYPHS if source.startswith(g, i)), None)
        if glyph is not None:
            tokens.append(Token("MONADIC", glyph, i, i + len(glyph)))
            i += len(glyph)
            continue

        glyph = next((g for g in _DYADIC_GLYPHS if source.startswith(g, i)), None)
        if glyph is not None:
            tokens.append(Token("DYADIC", glyph, i, i + len(glyph)))
            i += len(glyph)
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if ch == '"':
            value, end = _scan_string(source, i)
            tokens.append(Token("STRING", value, i, end))
            i = end
            continue

        if _is_ident_start(ch):
            start = i
            i += 1
            while i < len(source) and _is_ident_continue(source[i]):
                i += 1
            ident = source[start:i]
            kind = "KEYWORD" if ident in _KEYWORDS else "NAME"
            tokens.append(Token(kind, ident, start, i))
            continue

        raise LexError(f"Unexpected character {ch!r}", i, i + 1)

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
