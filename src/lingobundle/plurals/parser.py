"""Parser for gettext ``Plural-Forms`` headers.

A header has the shape::

    nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n != 0 ? 1 : 2);

The expression uses a small subset of C over the single variable ``n``.
Precedence, lowest first:

    ?:            right associative
    ||            left, short-circuit
    &&            left, short-circuit
    == !=         left
    < <= > >=     left
    + -           left
    * / %         left
    !             prefix
    literal, n, ( expr )

See: https://www.gnu.org/software/gettext/manual/gettext.html#Plural-forms
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator

from lingobundle.arith import INT64_MAX
from lingobundle.exceptions import (
    MalformedHeaderError,
    PluralSyntaxError,
    UnknownIdentifierError,
)
from lingobundle.plurals.ast import (
    BinaryOp,
    Conditional,
    Expression,
    IntegerLiteral,
    Operator,
    UnaryOp,
    Variable,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXPRESSION_LENGTH = 1000
DEFAULT_MAX_NESTING_DEPTH = 64


# =============================================================================
# Plural Rule
# =============================================================================


@dataclass(frozen=True)
class PluralRule:
    """A parsed Plural-Forms header.

    Attributes:
        nplurals: Number of plural forms (at least 1).
        expression: Root of the expression tree selecting a form index.
        header: Source header text.
    """

    nplurals: int
    expression: Expression
    header: str = ""

    def __str__(self) -> str:
        return f"nplurals={self.nplurals}; plural={self.expression};"


# =============================================================================
# Tokenizer
# =============================================================================


_TOKEN_PATTERN = re.compile(
    r"""
        (?P<WHITESPACE>\s+)                         |
        (?P<NUMBER>[0-9]+)                          |  # decimal integer
        (?P<NAME>[A-Za-z_][A-Za-z0-9_]*)            |  # only n is accepted later
        (?P<PAREN>[()])                             |
        (?P<OPERATOR>\|\||&&|[=!<>]=|[-+*/%?:<>!])  |
        (?P<INVALID>.)
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    """A lexical token with its offset in the source text."""

    kind: str
    text: str
    position: int


def tokenize(text: str) -> Iterator[Token]:
    """Split a plural expression into tokens.

    The stream always ends with an ``END`` token.

    Raises:
        PluralSyntaxError: On characters outside the grammar.
    """
    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup or "INVALID"
        if kind == "WHITESPACE":
            continue
        value = match.group(kind)
        if kind == "INVALID":
            raise PluralSyntaxError(
                f"Invalid character in plural expression: {value!r}",
                text,
                match.start(),
            )
        yield Token(kind, value, match.start())
    yield Token("END", "", len(text))


# =============================================================================
# Expression Parser
# =============================================================================


_BINARY_LEVELS: tuple[frozenset[str], ...] = (
    frozenset({"||"}),
    frozenset({"&&"}),
    frozenset({"==", "!="}),
    frozenset({"<", "<=", ">", ">="}),
    frozenset({"+", "-"}),
    frozenset({"*", "/", "%"}),
)


class ExpressionParser:
    """Recursive-descent parser for plural expressions.

    Example:
        >>> ExpressionParser("n != 1").parse()
        BinaryOp(op=<Operator.NE: '!='>, left=Variable(name='n'), ...)
    """

    def __init__(
        self,
        text: str,
        max_length: int = DEFAULT_MAX_EXPRESSION_LENGTH,
        max_depth: int = DEFAULT_MAX_NESTING_DEPTH,
    ) -> None:
        self._text = text
        self._max_length = max_length
        self._max_depth = max_depth
        self._tokens: list[Token] = []
        self._index = 0
        self._depth = 0
        self._heights: dict[int, int] = {}

    def parse(self) -> Expression:
        """Parse the whole text as one expression.

        Raises:
            PluralSyntaxError: On malformed input.
            UnknownIdentifierError: On identifiers other than ``n``.
        """
        if len(self._text) > self._max_length:
            raise PluralSyntaxError(
                f"Plural expression too long: {len(self._text)} > {self._max_length}",
                self._text,
            )

        self._tokens = list(tokenize(self._text))
        self._index = 0
        self._depth = 0
        self._heights = {}

        expr = self._parse_conditional()
        token = self._peek()
        if token.kind != "END":
            if token.text == ")":
                raise PluralSyntaxError(
                    "Unbalanced parenthesis in plural expression",
                    self._text,
                    token.position,
                )
            raise self._unexpected(token)
        return expr

    # -- token helpers -------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != "END":
            self._index += 1
        return token

    def _at_operator(self, symbols: frozenset[str]) -> bool:
        token = self._peek()
        return token.kind == "OPERATOR" and token.text in symbols

    def _unexpected(self, token: Token) -> PluralSyntaxError:
        if token.kind == "END":
            return PluralSyntaxError(
                "Unexpected end of plural expression", self._text, token.position
            )
        return PluralSyntaxError(
            f"Unexpected token in plural expression: {token.text!r}",
            self._text,
            token.position,
        )

    def _enter(self, token: Token) -> None:
        self._depth += 1
        if self._depth > self._max_depth:
            raise PluralSyntaxError(
                f"Plural expression nested deeper than {self._max_depth}",
                self._text,
                token.position,
            )

    def _leave(self) -> None:
        self._depth -= 1

    def _node(self, node: Expression, token: Token, *children: Expression) -> Expression:
        # operator nesting of the tree, bounded like textual nesting
        height = 1 + max(self._heights.get(id(child), 0) for child in children)
        if height > self._max_depth:
            raise PluralSyntaxError(
                f"Plural expression nested deeper than {self._max_depth}",
                self._text,
                token.position,
            )
        self._heights[id(node)] = height
        return node

    # -- grammar -------------------------------------------------------------

    def _parse_conditional(self) -> Expression:
        cond = self._parse_binary(0)
        if not self._at_operator(frozenset({"?"})):
            return cond

        token = self._advance()
        self._enter(token)
        then = self._parse_conditional()
        if not self._at_operator(frozenset({":"})):
            raise self._unexpected(self._peek())
        self._advance()
        else_ = self._parse_conditional()
        self._leave()
        return self._node(Conditional(cond, then, else_), token, cond, then, else_)

    def _parse_binary(self, level: int) -> Expression:
        if level == len(_BINARY_LEVELS):
            return self._parse_unary()

        symbols = _BINARY_LEVELS[level]
        left = self._parse_binary(level + 1)
        while self._at_operator(symbols):
            token = self._advance()
            right = self._parse_binary(level + 1)
            left = self._node(BinaryOp(Operator(token.text), left, right), token, left, right)
        return left

    def _parse_unary(self) -> Expression:
        if self._at_operator(frozenset({"!"})):
            token = self._advance()
            self._enter(token)
            operand = self._parse_unary()
            self._leave()
            return self._node(UnaryOp(Operator.NOT, operand), token, operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        token = self._advance()

        if token.kind == "NUMBER":
            value = int(token.text, 10)
            if value > INT64_MAX:
                raise PluralSyntaxError(
                    f"Integer literal out of range: {token.text}",
                    self._text,
                    token.position,
                )
            return IntegerLiteral(value)

        if token.kind == "NAME":
            if token.text != "n":
                raise UnknownIdentifierError(token.text, self._text, token.position)
            return Variable()

        if token.kind == "PAREN" and token.text == "(":
            self._enter(token)
            inner = self._parse_conditional()
            closing = self._advance()
            if closing.kind != "PAREN" or closing.text != ")":
                raise PluralSyntaxError(
                    "Unbalanced parenthesis in plural expression",
                    self._text,
                    token.position,
                )
            self._leave()
            return inner

        raise self._unexpected(token)


def parse_expression(
    text: str,
    max_length: int = DEFAULT_MAX_EXPRESSION_LENGTH,
    max_depth: int = DEFAULT_MAX_NESTING_DEPTH,
) -> Expression:
    """Parse a bare plural expression such as ``n != 1``."""
    return ExpressionParser(text, max_length, max_depth).parse()


# =============================================================================
# Header Parser
# =============================================================================


_HEADER_PATTERN = re.compile(
    r"^\s*nplurals\s*=\s*(?P<nplurals>[^;]*?)\s*;\s*plural\s*=(?P<plural>.*)$",
    re.DOTALL,
)
_DECIMAL = re.compile(r"[0-9]+")


def parse_plural_forms(
    header: str,
    max_length: int = DEFAULT_MAX_EXPRESSION_LENGTH,
    max_depth: int = DEFAULT_MAX_NESTING_DEPTH,
) -> PluralRule:
    """Parse a ``nplurals=N; plural=EXPR;`` header.

    Args:
        header: Header value (without the ``Plural-Forms:`` prefix).
        max_length: Maximum accepted expression length.
        max_depth: Maximum nesting of parentheses and of operators in the tree.

    Returns:
        Parsed PluralRule.

    Raises:
        MalformedHeaderError: If the header shape is wrong.
        PluralSyntaxError: If the expression is malformed.
        UnknownIdentifierError: If the expression uses a name other than ``n``.
    """
    match = _HEADER_PATTERN.match(header)
    if match is None:
        raise MalformedHeaderError(
            "Plural-Forms header must look like 'nplurals=<N>; plural=<expr>;'",
            header,
        )

    raw_count = match.group("nplurals")
    if not _DECIMAL.fullmatch(raw_count):
        raise MalformedHeaderError(
            f"nplurals must be a decimal integer, got {raw_count!r}",
            header,
            match.start("nplurals"),
        )
    nplurals = int(raw_count, 10)
    if nplurals < 1:
        raise MalformedHeaderError(
            f"nplurals must be at least 1, got {nplurals}",
            header,
            match.start("nplurals"),
        )

    body = match.group("plural").strip()
    if body.endswith(";"):
        body = body[:-1].rstrip()
    if not body:
        raise MalformedHeaderError("Plural-Forms header has an empty plural expression", header)

    try:
        expression = parse_expression(body, max_length, max_depth)
    except (PluralSyntaxError, UnknownIdentifierError) as e:
        offset = match.start("plural") + match.group("plural").find(body)
        position = e.position + offset if e.position >= 0 else -1
        if isinstance(e, UnknownIdentifierError):
            raise UnknownIdentifierError(e.identifier, header, position) from None
        raise PluralSyntaxError(str(e), header, position) from None

    logger.debug("Parsed plural rule: nplurals=%d, plural=%s", nplurals, expression)
    return PluralRule(nplurals=nplurals, expression=expression, header=header)
