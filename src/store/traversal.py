# src/store/traversal.py — v1
"""Executable traversal objects and literal escaping for Gremlin scripts.

A Traversal carries the Gremlin-Groovy script sent to a remote engine
together with the structured step it encodes, so that in-process
backends can evaluate the same operation without parsing Groovy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

EMPTY_SCRIPT = "g.V().limit(0)"


@dataclass(frozen=True)
class Traversal:
    """Opaque executable graph query handed to a BaseGraphStore."""

    script: str
    bindings: Mapping[str, Any] = field(default_factory=dict)
    step: str | None = None
    arguments: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.step == "empty"


def empty_traversal() -> Traversal:
    """A traversal guaranteed to return zero rows on every backend."""
    return Traversal(script=EMPTY_SCRIPT, step="empty")


def escape_literal(value: str) -> str:
    """Escape a value for embedding in a single-quoted Gremlin-Groovy string.

    Backslashes are escaped before quotes so that an input ending in a
    backslash cannot un-escape the closing quote. Line breaks are escaped
    because single-quoted Groovy strings cannot span lines.
    """
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def quote_literal(value: str) -> str:
    """Escape and wrap a value in single quotes."""
    return f"'{escape_literal(value)}'"
