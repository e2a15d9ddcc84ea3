# src/graph/inferencer.py — v1
"""Semantic relationship edges between canonical entities seen in one document."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from podgraph.core.models import ExtractedEntity
from podgraph.graph.canonicalizer import utc_now
from podgraph.graph.identity import entity_vertex_id
from podgraph.graph.relationships import InferredRelationship, resolve_relationship
from podgraph.graph.traversals import upsert_edge
from podgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


class RelationshipInferencer:
    """Upserts the inferred relationship edge for a co-occurring entity pair.

    Args:
        store: Open graph store.
        persist_co_occurs: Write generic ``co_occurs`` edges too. Off by
            default to bound graph density.
        clock: Timestamp source, injectable for tests.
    """

    def __init__(
        self,
        store: BaseGraphStore,
        persist_co_occurs: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._persist_co_occurs = persist_co_occurs
        self._clock = clock

    @property
    def persist_co_occurs(self) -> bool:
        return self._persist_co_occurs

    async def create_semantic_relationship(
        self,
        entity_a: ExtractedEntity,
        entity_b: ExtractedEntity,
        document_id: str,
    ) -> InferredRelationship | None:
        """Create the labeled edge between two entities unless it already exists.

        Returns:
            The relationship written (or found), or None when the pair was
            skipped: same canonical entity, or a generic pair while
            ``persist_co_occurs`` is off.
        """
        source_id = entity_vertex_id(entity_a.text)
        target_id = entity_vertex_id(entity_b.text)
        if source_id == target_id:
            return None

        relationship = resolve_relationship(entity_a, entity_b)
        if relationship.is_generic and not self._persist_co_occurs:
            logger.debug(
                "Skipping co_occurs between %r and %r", entity_a.text, entity_b.text
            )
            return None

        properties = {
            "firstSeenIn": document_id,
            "firstSeenAt": self._clock().isoformat(),
        }
        await self._store.execute(
            upsert_edge(
                relationship.label,
                entity_vertex_id(relationship.source.text),
                entity_vertex_id(relationship.target.text),
                properties,
            )
        )
        logger.debug(
            "Upserted %s: %r -> %r",
            relationship.label, relationship.source.text, relationship.target.text,
        )
        return relationship
