# src/query/search.py — v1
"""Keyword and structured search over the canonical entity graph.

Structured operations use bound parameters only. Entities are addressed
by canonical vertex id, so lookups by text are case-insensitive the same
way entity identity is.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from podgraph.core.errors import QueryValidationError, UpstreamExtractionError
from podgraph.graph.identity import entity_vertex_id
from podgraph.logging.context import set_operation_context
from podgraph.query.compiler import DEFAULT_RESULT_LIMIT, build_search_traversal, compile_query
from podgraph.query.nodes import TEXT_FIELD, And, QueryNode, Term
from podgraph.store.traversal import Traversal, empty_traversal

if TYPE_CHECKING:
    from podgraph.config.settings import Settings
    from podgraph.core.models import ExtractedEntity
    from podgraph.nlp.base_language_client import BaseLanguageClient
    from podgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_LIMIT = 500
DEFAULT_MAX_HOPS = 4


# === Traversal builders ===


def entities_by_category_traversal(
    category: str, sub_category: str | None, limit: int
) -> Traversal:
    bindings: dict[str, Any] = {"cat": category, "lim": limit}
    script = "g.V().hasLabel('entity').has('category', cat)"
    if sub_category is not None:
        script += ".has('subCategory', sub)"
        bindings["sub"] = sub_category
    script += ".limit(lim).valueMap(true)"
    return Traversal(
        script,
        bindings,
        step="entities_by_category",
        arguments={"category": category, "sub_category": sub_category, "limit": limit},
    )


def entities_by_text_traversal(pattern: str, category: str | None, limit: int) -> Traversal:
    bindings: dict[str, Any] = {"pattern": pattern, "lim": limit}
    script = "g.V().hasLabel('entity')"
    if category is not None:
        script += ".has('category', cat)"
        bindings["cat"] = category
    script += ".has('text', containing(pattern)).limit(lim).valueMap(true)"
    return Traversal(
        script,
        bindings,
        step="entities_by_text",
        arguments={"pattern": pattern, "category": category, "limit": limit},
    )


def related_entities_traversal(entity_id: str, max_hops: int, limit: int) -> Traversal:
    script = (
        "g.V(eid).repeat(__.both().simplePath()).emit().times(hops)"
        ".hasLabel('entity').dedup().limit(lim).valueMap(true)"
    )
    return Traversal(
        script,
        {"eid": entity_id, "hops": max_hops, "lim": limit},
        step="related_entities",
        arguments={"entity_id": entity_id, "max_hops": max_hops, "limit": limit},
    )


def documents_for_entity_traversal(entity_id: str, limit: int) -> Traversal:
    script = (
        "g.V(eid).out('appears_in').hasLabel('document')"
        ".dedup().limit(lim).valueMap(true)"
    )
    return Traversal(
        script,
        {"eid": entity_id, "lim": limit},
        step="documents_for_entity",
        arguments={"entity_id": entity_id, "limit": limit},
    )


def entities_in_document_traversal(document_id: str) -> Traversal:
    script = (
        "g.V(docId).hasLabel('document').inE('appears_in')"
        ".project('context', 'entity')"
        ".by(valueMap(true)).by(outV().valueMap(true))"
    )
    return Traversal(
        script,
        {"docId": document_id},
        step="entities_in_document",
        arguments={"document_id": document_id},
    )


def frequent_co_occurrences_traversal(min_occurrences: int, limit: int) -> Traversal:
    # Each (a, document, b) path is one co-occurrence; gt('a') by text keeps
    # one ordering of every pair.
    script = (
        "g.V().hasLabel('entity').as('a')"
        ".out('appears_in').in('appears_in').hasLabel('entity')"
        ".where(gt('a')).by('text').as('b')"
        ".select('a', 'b').by('text')"
        ".groupCount().unfold()"
        ".where(select(values).is(gte(minCount)))"
        ".order().by(values, decr)"
        ".by(select(keys).select('a')).by(select(keys).select('b'))"
        ".limit(lim)"
        ".project('pair', 'coOccurrences').by(select(keys)).by(select(values))"
    )
    return Traversal(
        script,
        {"minCount": min_occurrences, "lim": limit},
        step="frequent_co_occurrences",
        arguments={"min_occurrences": min_occurrences, "limit": limit},
    )


def common_connections_traversal(seed_ids: list[str], limit: int) -> Traversal:
    script = (
        "g.V(seedIds).both().hasLabel('entity')"
        ".not(__.hasId(within(seedIds))).dedup()"
        ".where(__.both().hasId(within(seedIds)).dedup().count().is(eq(seedCount)))"
        ".limit(lim).valueMap(true)"
    )
    return Traversal(
        script,
        {"seedIds": seed_ids, "seedCount": len(seed_ids), "lim": limit},
        step="common_connections",
        arguments={"seed_ids": seed_ids, "limit": limit},
    )


# === Row shaping ===


def _key_name(key: Any) -> str:
    """valueMap(true) keys are plain strings on Cosmos and T tokens on TinkerPop."""
    return key if isinstance(key, str) else getattr(key, "name", str(key))


def flatten_value_map(row: dict[Any, Any]) -> dict[str, Any]:
    """Unwrap single-valued property lists of a valueMap row."""
    flat: dict[str, Any] = {}
    for key, value in row.items():
        if isinstance(value, list) and len(value) == 1:
            value = value[0]
        flat[_key_name(key)] = value
    return flat


def _require_text(name: str, value: str | None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QueryValidationError(f"{name} must be a non-empty string")
    return value


class GraphSearchService:
    """Read-side operations over the canonical graph.

    Args:
        store: Open graph store.
        default_limit: Result cap used by ``search`` when none is given.
        max_limit: Upper bound applied to every caller-supplied limit.
        max_hops: Upper bound on related-entity traversal depth.
    """

    def __init__(
        self,
        store: BaseGraphStore,
        default_limit: int = DEFAULT_RESULT_LIMIT,
        max_limit: int = DEFAULT_MAX_LIMIT,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> None:
        self._store = store
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._max_hops = max_hops

    @classmethod
    def from_store(
        cls, store: BaseGraphStore, settings: Settings | None = None
    ) -> GraphSearchService:
        if settings is None:
            return cls(store)
        return cls(
            store,
            default_limit=settings.query_default_limit,
            max_limit=settings.query_max_limit,
            max_hops=settings.related_max_hops,
        )

    # --- Bounds ---

    def _bounded_limit(self, limit: int) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise QueryValidationError(f"limit must be a positive integer, got {limit!r}")
        if limit > self._max_limit:
            logger.warning("Limit %d capped to %d", limit, self._max_limit)
            return self._max_limit
        return limit

    def _bounded_hops(self, max_hops: int) -> int:
        if isinstance(max_hops, bool) or not isinstance(max_hops, int) or max_hops < 1:
            raise QueryValidationError(f"max_hops must be a positive integer, got {max_hops!r}")
        if max_hops > self._max_hops:
            logger.warning("Hop count %d capped to %d", max_hops, self._max_hops)
            return self._max_hops
        return max_hops

    async def _run(self, operation: str, traversal: Traversal) -> list[Any]:
        set_operation_context(operation)
        try:
            rows = await self._store.execute(traversal)
        finally:
            set_operation_context(None)
        logger.debug("%s returned %d rows", operation, len(rows))
        return rows

    async def _run_value_maps(self, operation: str, traversal: Traversal) -> list[dict[str, Any]]:
        return [flatten_value_map(r) for r in await self._run(operation, traversal)]

    # --- Keyword query ---

    async def search(self, query: str, limit: int | None = None) -> list[dict[str, Any]]:
        """Documents matching a boolean keyword query. Malformed queries return []."""
        bounded = self._bounded_limit(self._default_limit if limit is None else limit)
        return await self._run_value_maps("search", build_search_traversal(query, bounded))

    # --- Structured search ---

    async def find_entities_by_category(
        self, category: str, sub_category: str | None = None, limit: int = 100
    ) -> list[dict[str, Any]]:
        """Entities of a category, optionally narrowed to a subcategory."""
        traversal = entities_by_category_traversal(
            _require_text("category", category),
            None if sub_category is None else _require_text("sub_category", sub_category),
            self._bounded_limit(limit),
        )
        return await self._run_value_maps("find_entities_by_category", traversal)

    async def search_entities_by_text_pattern(
        self, pattern: str, category: str | None = None, limit: int = 100
    ) -> list[dict[str, Any]]:
        """Entities whose text contains ``pattern`` (case-sensitive)."""
        traversal = entities_by_text_traversal(
            _require_text("pattern", pattern),
            None if category is None else _require_text("category", category),
            self._bounded_limit(limit),
        )
        return await self._run_value_maps("search_entities_by_text_pattern", traversal)

    async def find_related_entities(
        self, entity_text: str, max_hops: int = 2, limit: int = 50
    ) -> list[dict[str, Any]]:
        """Entities reachable from a seed entity within ``max_hops`` edges."""
        traversal = related_entities_traversal(
            entity_vertex_id(_require_text("entity_text", entity_text)),
            self._bounded_hops(max_hops),
            self._bounded_limit(limit),
        )
        return await self._run_value_maps("find_related_entities", traversal)

    async def find_documents_for_entity(
        self, entity_text: str, limit: int = 50
    ) -> list[dict[str, Any]]:
        """Documents an entity appears in."""
        traversal = documents_for_entity_traversal(
            entity_vertex_id(_require_text("entity_text", entity_text)),
            self._bounded_limit(limit),
        )
        return await self._run_value_maps("find_documents_for_entity", traversal)

    async def find_entities_in_document(self, document_id: str) -> list[dict[str, Any]]:
        """Entities appearing in a document, each with its appearance-edge context."""
        traversal = entities_in_document_traversal(_require_text("document_id", document_id))
        rows = await self._run("find_entities_in_document", traversal)
        return [
            {
                "context": flatten_value_map(r["context"]),
                "entity": flatten_value_map(r["entity"]),
            }
            for r in rows
        ]

    async def find_frequent_co_occurring_entities(
        self, min_occurrences: int = 5, limit: int = 20
    ) -> list[dict[str, Any]]:
        """Entity pairs appearing together in at least ``min_occurrences`` documents.

        Returns:
            ``{"pair": [text_a, text_b], "coOccurrences": n}`` rows, highest count first.
        """
        if isinstance(min_occurrences, bool) or not isinstance(min_occurrences, int) or min_occurrences < 1:
            raise QueryValidationError(
                f"min_occurrences must be a positive integer, got {min_occurrences!r}"
            )
        traversal = frequent_co_occurrences_traversal(
            min_occurrences, self._bounded_limit(limit)
        )
        rows = await self._run("find_frequent_co_occurring_entities", traversal)
        return [
            {
                "pair": [r["pair"]["a"], r["pair"]["b"]],
                "coOccurrences": r["coOccurrences"],
            }
            for r in rows
        ]

    async def find_common_connections(
        self, entity_texts: Iterable[str], limit: int = 10
    ) -> list[dict[str, Any]]:
        """Entities directly connected to every one of the seed entities.

        Raises:
            QueryValidationError: If fewer than two distinct seeds are given.
        """
        if isinstance(entity_texts, str):
            raise QueryValidationError("entity_texts must be a collection of strings, not a string")
        seed_ids: list[str] = []
        for text in entity_texts:
            vertex_id = entity_vertex_id(_require_text("entity text", text))
            if vertex_id not in seed_ids:
                seed_ids.append(vertex_id)
        if len(seed_ids) < 2:
            raise QueryValidationError(
                "At least two distinct entity texts are required to find common connections"
            )
        traversal = common_connections_traversal(seed_ids, self._bounded_limit(limit))
        return await self._run_value_maps("find_common_connections", traversal)

    # --- Entity-list search ---

    async def search_by_entities(
        self, entities: Iterable[ExtractedEntity], limit: int = 50
    ) -> list[dict[str, Any]]:
        """Documents in which every one of ``entities`` appears (matched by text).

        An empty entity list matches nothing.
        """
        bounded = self._bounded_limit(limit)
        node: QueryNode | None = None
        seen: set[str] = set()
        for entity in entities:
            if entity.text in seen:
                continue
            seen.add(entity.text)
            term = Term(TEXT_FIELD, entity.text)
            node = term if node is None else And(node, term)
        traversal = empty_traversal() if node is None else compile_query(node, bounded)
        return await self._run_value_maps("search_by_entities", traversal)

    async def search_natural_language(
        self, question: str, language_client: BaseLanguageClient, limit: int = 50
    ) -> list[dict[str, Any]]:
        """Documents mentioning every entity recognized in a free-text question.

        A question whose entities cannot be recognized returns no rows.
        """
        question = _require_text("question", question)
        bounded = self._bounded_limit(limit)
        try:
            results = await language_client.recognize_entities([question])
        except UpstreamExtractionError as exc:
            logger.warning("Entity recognition failed for question: %s", exc)
            return []
        if not results or results[0].is_error:
            logger.warning(
                "No entities recognized for question: %s",
                results[0].error if results else "empty response",
            )
            return []
        entities = results[0].entities
        logger.debug("Question resolved to %d entities", len(entities))
        return await self.search_by_entities(entities, bounded)
