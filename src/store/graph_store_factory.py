# src/store/graph_store_factory.py — v1
"""Factory: instantiate graph store from configuration."""

from __future__ import annotations

import logging

from podgraph.config.settings import Settings
from podgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


class UnsupportedGraphStoreError(ValueError):
    """Raised when a graph store type is not supported."""


def create_graph_store(settings: Settings) -> BaseGraphStore:
    """Instantiate the configured graph store (not yet opened).

    Args:
        settings: Application settings (GRAPH_STORE_TYPE and GREMLIN_*).

    Returns:
        Configured BaseGraphStore instance.

    Raises:
        UnsupportedGraphStoreError: If type is not supported.
    """
    store_type = settings.graph_store_type

    if store_type == "memory":
        from podgraph.store.memory_store import InMemoryGraphStore
        return InMemoryGraphStore()

    if store_type == "gremlin":
        from podgraph.store.gremlin_store import GremlinGraphStore
        return GremlinGraphStore(
            endpoint=settings.gremlin_endpoint,
            username=settings.gremlin_username,
            password=settings.gremlin_key,
            traversal_source=settings.gremlin_traversal_source,
            pool_size=settings.gremlin_pool_size,
            timeout_s=settings.gremlin_timeout_s,
        )

    raise UnsupportedGraphStoreError(
        f"Unsupported graph store type: {store_type!r}. "
        f"Available: gremlin, memory"
    )
