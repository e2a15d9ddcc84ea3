# tests/unit/query/test_lexer.py — v1
"""Tests for query/lexer.py — keyword query tokenizer."""

from __future__ import annotations

import pytest

from podgraph.core.errors import QueryParseError
from podgraph.query.lexer import TokenKind, tokenize


def _kinds(query: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(query)]


class TestTokenize:
    def test_empty_query_is_eof_only(self):
        assert _kinds("") == [TokenKind.EOF]
        assert _kinds("   ") == [TokenKind.EOF]

    def test_bare_words(self):
        tokens = tokenize("laptop v1.2_beta-x")
        assert [t.value for t in tokens[:-1]] == ["laptop", "v1.2_beta-x"]
        assert tokens[0].kind is TokenKind.WORD

    def test_keywords_case_insensitive(self):
        assert _kinds("a and b Or NOT c") == [
            TokenKind.WORD,
            TokenKind.AND,
            TokenKind.WORD,
            TokenKind.OR,
            TokenKind.NOT,
            TokenKind.WORD,
            TokenKind.EOF,
        ]

    def test_keyword_keeps_original_spelling(self):
        assert tokenize("And")[0].value == "And"

    def test_field_filter(self):
        assert _kinds('category:"Person"') == [
            TokenKind.WORD,
            TokenKind.COLON,
            TokenKind.STRING,
            TokenKind.EOF,
        ]

    def test_parentheses(self):
        assert _kinds("(a)") == [
            TokenKind.LPAREN,
            TokenKind.WORD,
            TokenKind.RPAREN,
            TokenKind.EOF,
        ]

    def test_positions(self):
        tokens = tokenize("ab  OR cd")
        assert [t.position for t in tokens] == [0, 4, 7, 9]


class TestQuotedStrings:
    def test_internal_whitespace_kept(self):
        token = tokenize('"science  fiction"')[0]
        assert token.kind is TokenKind.STRING
        assert token.value == "science  fiction"

    def test_quoted_keyword_is_a_string(self):
        token = tokenize('"AND"')[0]
        assert token.kind is TokenKind.STRING
        assert token.value == "AND"

    def test_escaped_quote(self):
        assert tokenize(r'"say \"hi\""')[0].value == 'say "hi"'

    def test_escaped_backslash(self):
        assert tokenize(r'"a\\b"')[0].value == "a\\b"

    def test_other_backslash_kept(self):
        assert tokenize(r'"a\nb"')[0].value == "a\\nb"

    def test_empty_string(self):
        assert tokenize('""')[0].value == ""


class TestErrors:
    def test_unterminated_quote(self):
        with pytest.raises(QueryParseError, match="Unterminated") as exc:
            tokenize('books AND "science fiction')
        assert exc.value.position == 10

    def test_escaped_closing_quote_is_unterminated(self):
        with pytest.raises(QueryParseError):
            tokenize(r'"abc\"')

    def test_unexpected_character(self):
        with pytest.raises(QueryParseError, match="Unexpected character") as exc:
            tokenize("a @ b")
        assert exc.value.position == 2
