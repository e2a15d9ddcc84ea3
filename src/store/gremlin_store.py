# src/store/gremlin_store.py — v1
"""Gremlin graph store adapter.

Uses the gremlinpython driver against a Gremlin Server compatible
endpoint (Azure Cosmos DB Gremlin API in production). Scripts are sent
with named bindings; responses use the GraphSON v2 serializer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from podgraph.core.errors import GraphStoreError, GraphStoreTimeoutError
from podgraph.store.base_graph_store import BaseGraphStore
from podgraph.store.traversal import Traversal

logger = logging.getLogger(__name__)


class GremlinGraphStore(BaseGraphStore):
    """Graph store backed by a remote Gremlin engine."""

    def __init__(
        self,
        endpoint: str,
        username: str = "",
        password: str = "",
        traversal_source: str = "g",
        pool_size: int = 4,
        timeout_s: float = 30.0,
        client: Any = None,
    ) -> None:
        self._endpoint = endpoint
        self._username = username
        self._password = password
        self._traversal_source = traversal_source
        self._pool_size = pool_size
        self._timeout_s = timeout_s
        self._client = client

    async def open(self) -> None:
        if self._client is not None:
            return
        try:
            from gremlin_python.driver import client as gremlin_client
            from gremlin_python.driver import serializer
        except ImportError as e:
            raise ImportError(
                "gremlinpython package required: pip install gremlinpython"
            ) from e

        self._client = gremlin_client.Client(
            self._endpoint,
            self._traversal_source,
            username=self._username,
            password=self._password,
            pool_size=self._pool_size,
            message_serializer=serializer.GraphSONSerializersV2d0(),
        )
        logger.info("Opened Gremlin client to %s", self._endpoint)

    async def close(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        await asyncio.to_thread(client.close)
        logger.info("Closed Gremlin client to %s", self._endpoint)

    async def execute(self, traversal: Traversal) -> list[Any]:
        if traversal.is_empty:
            return []
        if self._client is None:
            raise GraphStoreError("Gremlin store is not open")

        bindings = dict(traversal.bindings)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._submit, traversal.script, bindings),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise GraphStoreTimeoutError(
                f"Traversal '{traversal.step or 'script'}' timed out after {self._timeout_s}s"
            ) from e
        except Exception as e:
            logger.debug("Failed script: %s", traversal.script)
            raise GraphStoreError(
                f"Traversal '{traversal.step or 'script'}' failed: {e}"
            ) from e

    def _submit(self, script: str, bindings: dict[str, Any]) -> list[Any]:
        """Blocking submit; runs in a worker thread."""
        result_set = self._client.submit(script, bindings or None)
        return list(result_set.all().result())

    @property
    def provider_name(self) -> str:
        return "gremlin"
