# src/graph/canonicalizer.py — v1
"""Entity canonicalization: canonical entity vertices, document vertices and appears_in edges.

All three writes are conditional creates. Store failures propagate as
GraphStoreError and are not retried here; the caller retries the whole
document.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Mapping

from podgraph.core.models import ExtractedEntity
from podgraph.graph.identity import entity_vertex_id, partition_key
from podgraph.graph.relationships import APPEARS_IN
from podgraph.graph.traversals import upsert_edge, upsert_vertex
from podgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)

ENTITY_LABEL = "entity"
DOCUMENT_LABEL = "document"
DOCUMENT_PARTITION = "document"

# Document properties owned by the graph layer; metadata cannot override them.
RESERVED_DOCUMENT_KEYS = frozenset({"id", "label", "category", "partitionKey", "processedAt"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EntityCanonicalizer:
    """Writes canonical entity and document vertices and their appearance edges.

    Args:
        store: Open graph store.
        clock: Timestamp source, injectable for tests.
    """

    def __init__(
        self,
        store: BaseGraphStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    async def upsert_canonical_entity(self, entity: ExtractedEntity) -> str:
        """Create the entity vertex if absent and return its canonical id.

        Re-observing the same text (any casing) returns the same id and
        leaves the existing vertex's properties untouched.
        """
        vertex_id = entity_vertex_id(entity.text)
        properties = {
            "text": entity.text,
            "category": entity.category,
            "subCategory": entity.sub_category,
            "type": entity.entity_type,
            "partitionKey": partition_key(entity.category),
            "createdAt": self._clock().isoformat(),
        }
        await self._store.execute(upsert_vertex(vertex_id, ENTITY_LABEL, properties))
        logger.debug("Upserted entity %r as %s", entity.text, vertex_id)
        return vertex_id

    async def upsert_document_vertex(
        self, document_id: str, metadata: Mapping[str, str] | None = None
    ) -> None:
        """Create the document vertex if absent, attaching metadata at creation only."""
        properties: dict[str, object] = {}
        for key, value in (metadata or {}).items():
            if key in RESERVED_DOCUMENT_KEYS:
                logger.warning(
                    "Ignoring reserved metadata key %r on document %s", key, document_id
                )
                continue
            properties[key] = value
        properties.update(
            {
                "processedAt": self._clock().isoformat(),
                "category": DOCUMENT_LABEL,
                "partitionKey": DOCUMENT_PARTITION,
            }
        )
        await self._store.execute(upsert_vertex(document_id, DOCUMENT_LABEL, properties))
        logger.debug("Upserted document %s", document_id)

    async def create_appearance_edge(
        self,
        entity: ExtractedEntity,
        canonical_entity_id: str,
        document_id: str,
    ) -> None:
        """Link an entity to a document once; later calls for the same pair change nothing."""
        properties = {
            "confidenceScore": entity.confidence_score,
            "offset": entity.offset,
            "length": entity.length,
            "createdAt": self._clock().isoformat(),
        }
        await self._store.execute(
            upsert_edge(APPEARS_IN, canonical_entity_id, document_id, properties)
        )
