# src/store/base_graph_store.py — v1
"""Abstract graph store interface.

A store owns the connection lifecycle only; it executes traversals and
returns decoded rows. It holds no graph semantics of its own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from podgraph.store.traversal import Traversal


class BaseGraphStore(ABC):
    """Unified interface for graph store backends."""

    @abstractmethod
    async def open(self) -> None:
        """Acquire connections. Idempotent."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections. Idempotent."""

    @abstractmethod
    async def execute(self, traversal: Traversal) -> list[Any]:
        """Execute a traversal and return its decoded result rows.

        Raises:
            GraphStoreError: On network, auth or execution failure.
            GraphStoreTimeoutError: When the traversal exceeds the timeout.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (gremlin, memory)."""

    async def __aenter__(self) -> BaseGraphStore:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
