"""Parser for the lala matrix language."""

from __future__ import annotations

from dataclasses import dataclass

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
    Program,
)
from .lexer import LexError, Token, tokenize

_MONADIC_GLYPHS = {
    "#": MonadicVerb.RANK,
    "?": MonadicVerb.INVERSE,
    ">>": MonadicVerb.RREF,
    ">+": MonadicVerb.TRANSPOSE,
    "$": MonadicVerb.DETERMINANT,
}
_DYADIC_GLYPHS = {
    "@": DyadicVerb.DOT,
    "++": DyadicVerb.PLUS,
    "**": DyadicVerb.TIMES,
}
_NAMED_MONADIC = {
    "rank": MonadicVerb.RANK,
    "inv": MonadicVerb.INVERSE,
    "inverse": MonadicVerb.INVERSE,
    "rref": MonadicVerb.RREF,
    "transpose": MonadicVerb.TRANSPOSE,
    "det": MonadicVerb.DETERMINANT,
}
_NAMED_DYADIC = {
    "dot": DyadicVerb.DOT,
    "plus": DyadicVerb.PLUS,
    "times": DyadicVerb.TIMES,
}
_RESERVED_NAMES = set(_NAMED_MONADIC) | set(_NAMED_DYADIC)

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_STATEMENT_END = {"SEP", "SEMI", "RBRACE", "EOF"}


class ParseError(SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


@dataclass
class _Parser:
    tokens: list[Token]
    index: int = 0

    def parse_program(self) -> Program:
        statements: list[Node] = []
        self._consume_separators()
        while self._peek().kind != "EOF":
            statements.append(self._parse_statement())
            self._end_statement()
        return Program(statements=tuple(statements))

    def parse_statement_only(self) -> Node:
        self._consume_separators()
        stmt = self._parse_statement()
        self._consume_separators()
        self._expect("EOF")
        return stmt

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_next(self) -> Token:
        return self.tokens[min(self.index + 1, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text.strip() or token.text!r})"
        else:
            found = token.kind
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found)

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    def _consume_separators(self) -> None:
        while self._peek().kind in {"SEP", "SEMI"}:
            self._advance()

    def _skip_newlines(self) -> None:
        while self._peek().kind == "SEP":
            self._advance()

    def _end_statement(self) -> None:
        tok = self._peek()
        if tok.kind not in _STATEMENT_END:
            self._error(tok, message="Expected end of statement", expected=("SEP", "SEMI"))
        self._consume_separators()

    def _parse_statement(self) -> Node:
        tok = self._peek()

        if tok.kind == "KEYWORD" and tok.text == "fun":
            return self._parse_function_decl()

        if tok.kind == "COLON":
            return self._parse_command()

        if tok.kind == "NAME" and self._peek_next().kind == "ASSIGN":
            name_tok = self._advance()
            self._check_bindable(name_tok)
            self._advance()
            return Assignment(ident=name_tok.text, expr=self._parse_expression())

        return self._parse_expression()

    def _check_bindable(self, tok: Token) -> None:
        if tok.text in _RESERVED_NAMES:
            self._error(tok, message=f"Cannot bind reserved name {tok.text!r}")

    def _parse_function_decl(self) -> FunctionDecl:
        self._advance()
        name_tok = self._expect("NAME")
        self._check_bindable(name_tok)
        self._expect("LPAREN")
        params: list[str] = []
        if not self._match("RPAREN"):
            while True:
                param_tok = self._expect("NAME")
                self._check_bindable(param_tok)
                if param_tok.text in params:
                    self._error(param_tok, message=f"Duplicate parameter {param_tok.text!r}")
                params.append(param_tok.text)
                if self._match("RPAREN"):
                    break
                self._expect("COMMA")

        self._skip_newlines()
        self._expect("LBRACE")
        body: list[Node] = []
        self._consume_separators()
        while not self._match("RBRACE"):
            if self._peek().kind == "EOF":
                self._error(expected=("RBRACE",))
            body.append(self._parse_statement())
            if self._peek().kind == "RBRACE":
                continue
            self._end_statement()
        return FunctionDecl(name=name_tok.text, params=tuple(params), body=tuple(body))

    def _parse_command(self) -> Command:
        self._advance()
        name_tok = self._expect("NAME")
        params: list[str] = []
        while self._peek().kind == "STRING":
            params.append(self._advance().text)
        return Command(name=name_tok.text, params=tuple(params))

    def _parse_expression(self) -> Node:
        left = self._parse_unary()
        tok = self._peek()
        if tok.kind == "DYADIC":
            self._advance()
            # Right-associative with uniform precedence.
            right = self._parse_expression()
            return DyadicOp(verb=_DYADIC_GLYPHS[tok.text], left=left, right=right)
        return left

    def _parse_unary(self) -> Node:
        tok = self._peek()
        if tok.kind == "MONADIC":
            self._advance()
            return MonadicOp(verb=_MONADIC_GLYPHS[tok.text], operand=self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Node:
        tok = self._peek()

        if tok.kind in {"INT", "FLOAT"}:
            return self._parse_number()

        if tok.kind == "NAME":
            self._advance()
            if self._peek().kind == "LPAREN":
                return self._parse_application(tok)
            if tok.text in _RESERVED_NAMES:
                self._error(tok, message=f"Verb {tok.text!r} must be applied to arguments", expected=("LPAREN",))
            return Ident(name=tok.text)

        if self._match("LPAREN"):
            self._skip_newlines()
            expr = self._parse_expression()
            self._skip_newlines()
            self._expect("RPAREN")
            return expr

        if self._match("LBRACK"):
            return self._parse_matrix(tok)

        self._error(tok, expected=("INT", "FLOAT", "NAME", "LPAREN", "LBRACK"))
        raise AssertionError("unreachable")

    def _parse_number(self) -> IntLiteral | DoubleLiteral:
        tok = self._advance()
        if tok.kind == "FLOAT":
            return DoubleLiteral(value=float(tok.text))
        value = int(tok.text)
        if not _INT_MIN <= value <= _INT_MAX:
            self._error(tok, message=f"Integer literal {tok.text} does not fit in 32 bits")
        return IntLiteral(value=value)

    def _parse_application(self, name_tok: Token) -> Node:
        self._expect("LPAREN")
        args: list[Node] = []
        self._skip_newlines()
        if not self._match("RPAREN"):
            while True:
                args.append(self._parse_expression())
                self._skip_newlines()
                if self._match("RPAREN"):
                    break
                self._expect("COMMA")
                self._skip_newlines()

        name = name_tok.text
        if name in _NAMED_MONADIC:
            if len(args) != 1:
                self._error(name_tok, message=f"Verb {name!r} takes exactly one argument")
            return MonadicOp(verb=_NAMED_MONADIC[name], operand=args[0])
        if name in _NAMED_DYADIC:
            if len(args) != 2:
                self._error(name_tok, message=f"Verb {name!r} takes exactly two arguments")
            return DyadicOp(verb=_NAMED_DYADIC[name], left=args[0], right=args[1])
        return FunctionApp(name=name, args=tuple(args))

    def _parse_matrix(self, open_tok: Token) -> MatrixLiteral:
        self._skip_newlines()
        rows: list[tuple[Node, ...]] = []

        if self._peek().kind == "LBRACK":
            # Nested form: [[1, 2], [3, 4]]
            while self._match("LBRACK"):
                rows.append(self._parse_matrix_cells(closing_kinds={"RBRACK"}))
                self._expect("RBRACK")
                self._skip_newlines()
                if self._match("COMMA"):
                    self._skip_newlines()
            self._expect("RBRACK")
        else:
            # Flat form: [1 2; 3 4]
            while True:
                rows.append(self._parse_matrix_cells(closing_kinds={"RBRACK", "SEMI"}))
                if self._match("RBRACK"):
                    break
                self._expect("SEMI")
                self._skip_newlines()

        width = len(rows[0])
        for row in rows:
            if len(row) != width:
                self._error(open_tok, message="Matrix rows must all have the same length")
        return MatrixLiteral(rows=tuple(rows))

    def _parse_matrix_cells(self, *, closing_kinds: set[str]) -> tuple[Node, ...]:
        cells: list[Node] = []
        self._skip_newlines()
        while self._peek().kind not in closing_kinds:
            tok = self._peek()
            if tok.kind not in {"INT", "FLOAT"}:
                self._error(tok, message="Matrix cells must be numeric literals", expected=("INT", "FLOAT"))
            cells.append(self._parse_number())
            self._skip_newlines()
            if self._match("COMMA"):
                self._skip_newlines()
        if not cells:
            self._error(message="Matrix rows cannot be empty", expected=("INT", "FLOAT"))
        return tuple(cells)


def _tokenize(source: str) -> list[Token]:
    try:
        return tokenize(source)
    except LexError as exc:
        raise ParseError(exc.message, exc.start, exc.end) from exc


def parse(source: str) -> Node:
    tokens = _tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_statement_only()


def parse_program(source: str) -> Program:
    tokens = _tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_program()
