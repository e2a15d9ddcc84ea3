# src/query/compiler.py — v1
"""Compile keyword query ASTs into Gremlin traversals over document vertices.

Each node becomes an anonymous-traversal predicate evaluated against a
document vertex:

    Term(f, v)  -> __.in('appears_in').hasLabel('entity').has(f, v)
    And(l, r)   -> __.and(l, r)
    Or(l, r)    -> __.or(l, r)
    Not(x)      -> __.not(x)

Values come from user input and are always embedded through
escape_literal. A query that fails to parse compiles to the empty
traversal instead of raising.
"""

from __future__ import annotations

import logging

from podgraph.core.errors import QueryValidationError
from podgraph.query.nodes import And, Not, Or, QueryNode, Term
from podgraph.query.parser import try_parse_query
from podgraph.store.traversal import Traversal, empty_traversal, quote_literal

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 50

_APPEARS_IN = quote_literal("appears_in")
_ENTITY = quote_literal("entity")
_DOCUMENT = quote_literal("document")


def compile_predicate(node: QueryNode) -> str:
    """Render the Gremlin predicate for one AST node (recursively)."""
    if isinstance(node, Term):
        return (
            f"__.in({_APPEARS_IN}).hasLabel({_ENTITY})"
            f".has({quote_literal(node.field)}, {quote_literal(node.value)})"
        )
    if isinstance(node, And):
        return f"__.and({compile_predicate(node.left)}, {compile_predicate(node.right)})"
    if isinstance(node, Or):
        return f"__.or({compile_predicate(node.left)}, {compile_predicate(node.right)})"
    if isinstance(node, Not):
        return f"__.not({compile_predicate(node.operand)})"
    raise TypeError(f"Unknown query node: {node!r}")


def _validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise QueryValidationError(f"limit must be a positive integer, got {limit!r}")
    return limit


def compile_query(node: QueryNode, limit: int = DEFAULT_RESULT_LIMIT) -> Traversal:
    """Wrap a query AST into a deduplicated, limited document search."""
    limit = _validate_limit(limit)
    script = (
        f"g.V().hasLabel({_DOCUMENT})"
        f".where({compile_predicate(node)})"
        f".dedup().limit({limit}).valueMap(true)"
    )
    return Traversal(
        script=script,
        step="match_documents",
        arguments={"query": node, "limit": limit},
    )


def build_search_traversal(query: str, limit: int = DEFAULT_RESULT_LIMIT) -> Traversal:
    """Parse and compile a keyword query string.

    Malformed queries yield the empty traversal, so a bad query string
    returns no rows rather than failing.

    Raises:
        QueryValidationError: If ``limit`` is not a positive integer.
    """
    limit = _validate_limit(limit)
    node = try_parse_query(query)
    if node is None:
        logger.info("Query did not parse, returning empty traversal")
        return empty_traversal()
    return compile_query(node, limit)
