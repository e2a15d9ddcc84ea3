# src/core/errors.py — v1
"""Error hierarchy shared by the store, graph, query and pipeline layers."""

from __future__ import annotations


class PodgraphError(Exception):
    """Base class for all podgraph errors."""


class QueryParseError(PodgraphError):
    """Malformed keyword query. Recovered inside the compiler, never surfaced."""

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)


class QueryValidationError(PodgraphError):
    """Missing or invalid caller parameters for a search operation."""


class GraphStoreError(PodgraphError):
    """Network, auth or traversal execution failure against the graph engine."""


class GraphStoreTimeoutError(GraphStoreError):
    """A traversal did not complete within the configured timeout."""


class UpstreamExtractionError(PodgraphError):
    """The NLP service failed for one document or one text of a document."""

    def __init__(self, message: str, document_id: str | None = None) -> None:
        self.document_id = document_id
        super().__init__(message)
