# src/pipeline/recorder.py — v1
"""Graph mutation for one document: vertices, appearance edges, relationships.

The document is the unit of work. Every write is a conditional create,
so a failure part-way leaves a consistent (partial) graph and the whole
document can be recorded again safely.
"""

from __future__ import annotations

import asyncio
import logging
import time
from itertools import combinations
from typing import TYPE_CHECKING, Awaitable, Iterable, TypeVar

from podgraph.core.models import ExtractedEntity, RecordResult, SourceDocument
from podgraph.graph.canonicalizer import EntityCanonicalizer
from podgraph.graph.identity import entity_vertex_id
from podgraph.graph.inferencer import RelationshipInferencer
from podgraph.logging.context import document_context, set_operation_context

if TYPE_CHECKING:
    from podgraph.config.settings import Settings
    from podgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.7

T = TypeVar("T")


def filter_confident_entities(
    entities: Iterable[ExtractedEntity],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> list[ExtractedEntity]:
    """Keep entities whose recognition confidence is at least ``threshold``."""
    return [e for e in entities if e.confidence_score >= threshold]


def distinct_entities(entities: Iterable[ExtractedEntity]) -> list[ExtractedEntity]:
    """First occurrence of each canonical entity, in input order."""
    seen: set[str] = set()
    result: list[ExtractedEntity] = []
    for entity in entities:
        vertex_id = entity_vertex_id(entity.text)
        if vertex_id not in seen:
            seen.add(vertex_id)
            result.append(entity)
    return result


async def _gather_all(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await everything, then raise the first failure if any.

    Unlike a bare gather, no write is left running in the background when
    another one fails.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results  # type: ignore[return-value]


class DocumentGraphRecorder:
    """Drives canonicalization and relationship inference over a document's entities.

    Args:
        canonicalizer: Entity and document vertex writer.
        inferencer: Relationship edge writer.
        confidence_threshold: Minimum recognition confidence to persist an entity.
        write_concurrency: Maximum in-flight store writes for one document.
    """

    def __init__(
        self,
        canonicalizer: EntityCanonicalizer,
        inferencer: RelationshipInferencer,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        write_concurrency: int = 8,
    ) -> None:
        if isinstance(write_concurrency, bool) or not isinstance(write_concurrency, int) or write_concurrency < 1:
            raise ValueError(
                f"write_concurrency must be a positive integer, got {write_concurrency!r}"
            )
        self._canonicalizer = canonicalizer
        self._inferencer = inferencer
        self._confidence_threshold = confidence_threshold
        self._write_concurrency = write_concurrency

    @classmethod
    def from_store(
        cls, store: BaseGraphStore, settings: Settings | None = None
    ) -> DocumentGraphRecorder:
        """Wire a recorder onto an open store, using settings for policy."""
        if settings is None:
            return cls(EntityCanonicalizer(store), RelationshipInferencer(store))
        return cls(
            EntityCanonicalizer(store),
            RelationshipInferencer(store, persist_co_occurs=settings.persist_co_occurs),
            confidence_threshold=settings.confidence_threshold,
            write_concurrency=settings.write_concurrency,
        )

    async def record_document(self, document: SourceDocument) -> RecordResult:
        """Write a document, its confident entities and their pairwise relationships.

        Entity vertex upserts run concurrently; each appearance edge waits
        for its own vertex. Relationship edges start once every vertex of
        the document exists.

        Returns:
            RecordResult listing the entities that passed the confidence filter.

        Raises:
            GraphStoreError: If any write fails (after all in-flight writes settle).
        """
        with document_context(document.id):
            set_operation_context("record_document")
            try:
                result = await self._record(document)
            finally:
                set_operation_context(None)
        return result

    async def _record(self, document: SourceDocument) -> RecordResult:
        start = time.monotonic()

        persisted = filter_confident_entities(
            document.entities, self._confidence_threshold
        )
        unique = distinct_entities(persisted)
        semaphore = asyncio.Semaphore(self._write_concurrency)

        await self._canonicalizer.upsert_document_vertex(
            document.id, document.metadata
        )

        async def write_entity(entity: ExtractedEntity) -> None:
            async with semaphore:
                vertex_id = await self._canonicalizer.upsert_canonical_entity(entity)
            async with semaphore:
                await self._canonicalizer.create_appearance_edge(
                    entity, vertex_id, document.id
                )

        await _gather_all(write_entity(e) for e in unique)

        async def write_relationship(a: ExtractedEntity, b: ExtractedEntity) -> None:
            async with semaphore:
                await self._inferencer.create_semantic_relationship(a, b, document.id)

        pairs = list(combinations(unique, 2))
        await _gather_all(write_relationship(a, b) for a, b in pairs)

        logger.info(
            "Recorded document %s: %d/%d entities persisted, %d pairs in %.2fs",
            document.id,
            len(persisted),
            len(document.entities),
            len(pairs),
            time.monotonic() - start,
        )
        return RecordResult(
            document_id=document.id,
            persisted_entities=persisted,
            relationship_pairs=len(pairs),
        )
