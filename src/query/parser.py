# src/query/parser.py — v1
"""Recursive-descent parser for the boolean keyword query language.

Grammar, lowest precedence first::

    query     := or_expr EOF
    or_expr   := and_expr ( OR and_expr )*
    and_expr  := unary ( AND unary | juxtaposed )*
    juxtaposed:= unary                      -- implicit AND
    unary     := NOT unary | primary
    primary   := '(' or_expr ')' | term
    term      := FIELD ':' value | value
    value     := WORD | STRING

Binary operators associate to the left. Juxtaposition is its own
production and builds the same And node as an explicit AND.
"""

from __future__ import annotations

import logging

from podgraph.core.errors import QueryParseError
from podgraph.query.lexer import Token, TokenKind, tokenize
from podgraph.query.nodes import FILTER_FIELDS, TEXT_FIELD, And, Not, Or, QueryNode, Term

logger = logging.getLogger(__name__)

_FIELD_LOOKUP: dict[str, str] = {f.lower(): f for f in FILTER_FIELDS}

# Tokens that can open a unary expression, and therefore a juxtaposed term.
_UNARY_START = frozenset(
    {TokenKind.NOT, TokenKind.LPAREN, TokenKind.WORD, TokenKind.STRING}
)


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    # --- Token cursor ---

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.kind is not TokenKind.EOF:
            self._pos += 1
        return token

    def _expect(self, kind: TokenKind) -> Token:
        token = self._peek()
        if token.kind is not kind:
            raise QueryParseError(
                f"Expected {kind.value}, found {token.kind.value} {token.value!r}",
                position=token.position,
            )
        return self._advance()

    # --- Productions ---

    def parse(self) -> QueryNode:
        if self._peek().kind is TokenKind.EOF:
            raise QueryParseError("Empty query", position=0)
        node = self._or_expr()
        self._expect(TokenKind.EOF)
        return node

    def _or_expr(self) -> QueryNode:
        node = self._and_expr()
        while self._peek().kind is TokenKind.OR:
            self._advance()
            node = Or(node, self._and_expr())
        return node

    def _and_expr(self) -> QueryNode:
        node = self._unary()
        while True:
            kind = self._peek().kind
            if kind is TokenKind.AND:
                self._advance()
                node = And(node, self._unary())
            elif kind in _UNARY_START:
                node = And(node, self._juxtaposed())
            else:
                return node

    def _juxtaposed(self) -> QueryNode:
        return self._unary()

    def _unary(self) -> QueryNode:
        if self._peek().kind is TokenKind.NOT:
            self._advance()
            return Not(self._unary())
        return self._primary()

    def _primary(self) -> QueryNode:
        token = self._peek()
        if token.kind is TokenKind.LPAREN:
            self._advance()
            node = self._or_expr()
            self._expect(TokenKind.RPAREN)
            return node
        return self._term()

    def _term(self) -> Term:
        token = self._peek()
        if token.kind is TokenKind.WORD and self._peek(1).kind is TokenKind.COLON:
            field = _FIELD_LOOKUP.get(token.value.lower())
            if field is None:
                raise QueryParseError(
                    f"Unknown field {token.value!r}; expected one of {', '.join(FILTER_FIELDS)}",
                    position=token.position,
                )
            self._advance()
            self._advance()
            return Term(field, self._value())
        return Term(TEXT_FIELD, self._value())

    def _value(self) -> str:
        token = self._peek()
        if token.kind not in (TokenKind.WORD, TokenKind.STRING):
            raise QueryParseError(
                f"Expected a term, found {token.kind.value} {token.value!r}",
                position=token.position,
            )
        return self._advance().value


def parse_query(query: str) -> QueryNode:
    """Parse a keyword query string into an AST.

    Raises:
        QueryParseError: On any syntax error, unterminated quote or unknown field.
    """
    return _Parser(tokenize(query)).parse()


def try_parse_query(query: str) -> QueryNode | None:
    """Parse, returning None instead of raising on a malformed query."""
    try:
        return parse_query(query)
    except QueryParseError as e:
        logger.debug("Rejected query %r: %s", query, e)
        return None
