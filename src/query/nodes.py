# src/query/nodes.py — v1
"""Keyword query AST: Term, And, Or, Not.

Nodes are immutable and compare structurally, so two query strings that
mean the same thing parse to equal trees.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Union

TEXT_FIELD = "text"

# Field names accepted before ':' in a query, in their canonical spelling.
FILTER_FIELDS: tuple[str, ...] = ("category", "subCategory", "type")


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


@dataclass(frozen=True)
class Term:
    """Leaf filter: an entity whose ``field`` equals ``value`` appears in the document."""

    field: str
    value: str

    def __str__(self) -> str:
        if self.field == TEXT_FIELD:
            return f'"{_escape(self.value)}"'
        return f'{self.field}:"{_escape(self.value)}"'


@dataclass(frozen=True)
class And:
    left: QueryNode
    right: QueryNode

    def __str__(self) -> str:
        return f"({self.left} AND {self.right})"


@dataclass(frozen=True)
class Or:
    left: QueryNode
    right: QueryNode

    def __str__(self) -> str:
        return f"({self.left} OR {self.right})"


@dataclass(frozen=True)
class Not:
    operand: QueryNode

    def __str__(self) -> str:
        return f"NOT {self.operand}"


QueryNode = Union[Term, And, Or, Not]


def iter_terms(node: QueryNode) -> Iterator[Term]:
    """Yield every Term leaf, left to right."""
    if isinstance(node, Term):
        yield node
    elif isinstance(node, Not):
        yield from iter_terms(node.operand)
    else:
        yield from iter_terms(node.left)
        yield from iter_terms(node.right)


def evaluate(node: QueryNode, matches: Callable[[Term], bool]) -> bool:
    """Evaluate the boolean structure of ``node`` given a predicate for leaves."""
    if isinstance(node, Term):
        return matches(node)
    if isinstance(node, Not):
        return not evaluate(node.operand, matches)
    if isinstance(node, And):
        return evaluate(node.left, matches) and evaluate(node.right, matches)
    if isinstance(node, Or):
        return evaluate(node.left, matches) or evaluate(node.right, matches)
    raise TypeError(f"Unknown query node: {node!r}")
