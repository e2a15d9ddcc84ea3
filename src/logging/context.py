# src/logging/context.py — v1
"""Contextual logging support: attach document_id, run_id and operation to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Set per document; asyncio tasks inherit a copy at creation time.
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    document_id: str | None = None
    run_id: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        run_id=_run_id.get(),
        operation=_operation.get(),
    )


def set_document_context(document_id: str, run_id: str | None = None) -> None:
    """Set document-level context (called once per recorded document)."""
    _document_id.set(document_id)
    if run_id is not None:
        _run_id.set(run_id)


def set_operation_context(operation: str | None) -> None:
    """Set the graph or search operation currently executing."""
    _operation.set(operation)


@contextmanager
def document_context(document_id: str, run_id: str | None = None) -> Iterator[None]:
    """Scope document context to a block, restoring the previous values on exit."""
    doc_token = _document_id.set(document_id)
    run_token = _run_id.set(run_id) if run_id is not None else None
    try:
        yield
    finally:
        _document_id.reset(doc_token)
        if run_token is not None:
            _run_id.reset(run_token)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _run_id.set(None)
    _operation.set(None)
