# src/query/lexer.py — v1
"""Tokenizer for the boolean keyword query language.

Tokens: '(' ')' ':', keywords AND/OR/NOT (any case), double-quoted
strings with backslash escapes, and bare words [a-zA-Z0-9._-]+.
Field names are ordinary words here; the parser decides whether a word
is a field by looking for the ':' that follows it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from podgraph.core.errors import QueryParseError


class TokenKind(str, Enum):
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COLON = "COLON"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    WORD = "WORD"
    STRING = "STRING"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    position: int


KEYWORDS: dict[str, TokenKind] = {
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
}

_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ":": TokenKind.COLON,
}

_WORD = re.compile(r"[a-zA-Z0-9._-]+")
_SPACE = re.compile(r"\s+")


def _read_string(query: str, start: int) -> tuple[str, int]:
    """Read a double-quoted string starting at ``start`` (the opening quote).

    ``\\"`` and ``\\\\`` unescape; any other backslash is kept verbatim.

    Returns:
        (value, index just past the closing quote)
    """
    chars: list[str] = []
    i = start + 1
    while i < len(query):
        ch = query[i]
        if ch == "\\" and i + 1 < len(query) and query[i + 1] in ('"', "\\"):
            chars.append(query[i + 1])
            i += 2
            continue
        if ch == '"':
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    raise QueryParseError("Unterminated quoted string", position=start)


def tokenize(query: str) -> list[Token]:
    """Split a query string into tokens, ending with an EOF token.

    Raises:
        QueryParseError: On an unterminated quote or an unexpected character.
    """
    tokens: list[Token] = []
    i = 0
    while i < len(query):
        space = _SPACE.match(query, i)
        if space:
            i = space.end()
            continue

        ch = query[i]
        if ch in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[ch], ch, i))
            i += 1
            continue

        if ch == '"':
            value, end = _read_string(query, i)
            tokens.append(Token(TokenKind.STRING, value, i))
            i = end
            continue

        word = _WORD.match(query, i)
        if word:
            text = word.group()
            kind = KEYWORDS.get(text.lower(), TokenKind.WORD)
            tokens.append(Token(kind, text, i))
            i = word.end()
            continue

        raise QueryParseError(f"Unexpected character {ch!r}", position=i)

    tokens.append(Token(TokenKind.EOF, "", len(query)))
    return tokens
