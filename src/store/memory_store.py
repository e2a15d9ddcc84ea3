# src/store/memory_store.py — v1
"""In-process graph store backed by a NetworkX MultiDiGraph.

Evaluates the structured step of each Traversal with the same
conditional-create semantics as the Gremlin scripts, so the graph layer
can run locally and be tested against small fixture graphs.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from typing import Any, Callable

import networkx as nx

from podgraph.core.errors import GraphStoreError
from podgraph.query.nodes import QueryNode, Term, evaluate
from podgraph.store.base_graph_store import BaseGraphStore
from podgraph.store.traversal import Traversal

logger = logging.getLogger(__name__)

APPEARS_IN = "appears_in"
ENTITY_LABEL = "entity"
DOCUMENT_LABEL = "document"


class InMemoryGraphStore(BaseGraphStore):
    """Graph store held in memory. Vertices and edges never leave the process."""

    def __init__(self, graph: nx.MultiDiGraph | None = None) -> None:
        self._graph = graph if graph is not None else nx.MultiDiGraph()
        self._steps: dict[str, Callable[..., list[Any]]] = {
            "upsert_vertex": self._upsert_vertex,
            "upsert_edge": self._upsert_edge,
            "match_documents": self._match_documents,
            "entities_by_category": self._entities_by_category,
            "entities_by_text": self._entities_by_text,
            "related_entities": self._related_entities,
            "documents_for_entity": self._documents_for_entity,
            "entities_in_document": self._entities_in_document,
            "frequent_co_occurrences": self._frequent_co_occurrences,
            "common_connections": self._common_connections,
        }

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._graph

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def execute(self, traversal: Traversal) -> list[Any]:
        if traversal.is_empty:
            return []
        handler = self._steps.get(traversal.step or "")
        if handler is None:
            raise GraphStoreError(
                f"In-memory store cannot evaluate step {traversal.step!r}"
            )
        return handler(**traversal.arguments)

    @property
    def provider_name(self) -> str:
        return "memory"

    async def node_count(self) -> int:
        """Return total number of vertices."""
        return self._graph.number_of_nodes()

    async def edge_count(self, label: str | None = None) -> int:
        """Return total number of edges, optionally of one label."""
        if label is None:
            return self._graph.number_of_edges()
        return sum(1 for _, _, k in self._graph.edges(keys=True) if k == label)

    # --- Row shaping ---

    def _vertex_map(self, vertex_id: str) -> dict[str, Any]:
        """valueMap(true) shape: id and label plus list-wrapped properties."""
        data = self._graph.nodes[vertex_id]
        row: dict[str, Any] = {"id": vertex_id, "label": data["label"]}
        row.update({k: [v] for k, v in data["properties"].items()})
        return row

    def _edge_map(self, out_id: str, in_id: str, label: str) -> dict[str, Any]:
        data = self._graph.edges[out_id, in_id, label]
        row: dict[str, Any] = {"id": data["edge_id"], "label": label}
        row.update(data["properties"])
        return row

    def _vertices(self, label: str) -> list[str]:
        return [n for n, d in self._graph.nodes(data=True) if d["label"] == label]

    def _prop(self, vertex_id: str, key: str) -> Any:
        return self._graph.nodes[vertex_id]["properties"].get(key)

    def _is_label(self, vertex_id: str, label: str) -> bool:
        return self._graph.nodes[vertex_id]["label"] == label

    def _entity_neighbors(self, vertex_id: str) -> set[str]:
        """Entity vertices adjacent through an edge in either direction."""
        adjacent = set(self._graph.successors(vertex_id)) | set(
            self._graph.predecessors(vertex_id)
        )
        return {n for n in adjacent if self._is_label(n, ENTITY_LABEL)}

    # --- Mutation steps ---

    def _upsert_vertex(
        self, vertex_id: str, label: str, properties: dict[str, Any]
    ) -> list[Any]:
        if not self._graph.has_node(vertex_id):
            self._graph.add_node(vertex_id, label=label, properties=dict(properties))
        return [self._vertex_map(vertex_id)]

    def _upsert_edge(
        self, label: str, out_id: str, in_id: str, properties: dict[str, Any]
    ) -> list[Any]:
        if not (self._graph.has_node(out_id) and self._graph.has_node(in_id)):
            # Same as the Gremlin script: a missing endpoint yields no rows.
            return []
        if not self._graph.has_edge(out_id, in_id, key=label):
            self._graph.add_edge(
                out_id,
                in_id,
                key=label,
                edge_id=str(uuid.uuid4()),
                properties=dict(properties),
            )
        return [self._edge_map(out_id, in_id, label)]

    # --- Query steps ---

    def _match_documents(self, query: QueryNode, limit: int) -> list[Any]:
        rows: list[Any] = []
        for doc_id in self._vertices(DOCUMENT_LABEL):
            appearing = [
                src
                for src, _, key in self._graph.in_edges(doc_id, keys=True)
                if key == APPEARS_IN and self._is_label(src, ENTITY_LABEL)
            ]

            def matches(term: Term, appearing: list[str] = appearing) -> bool:
                return any(self._prop(e, term.field) == term.value for e in appearing)

            if evaluate(query, matches):
                rows.append(self._vertex_map(doc_id))
                if len(rows) >= limit:
                    break
        return rows

    def _entities_by_category(
        self, category: str, sub_category: str | None, limit: int
    ) -> list[Any]:
        rows = [
            self._vertex_map(v)
            for v in self._vertices(ENTITY_LABEL)
            if self._prop(v, "category") == category
            and (sub_category is None or self._prop(v, "subCategory") == sub_category)
        ]
        return rows[:limit]

    def _entities_by_text(
        self, pattern: str, category: str | None, limit: int
    ) -> list[Any]:
        rows = [
            self._vertex_map(v)
            for v in self._vertices(ENTITY_LABEL)
            if (category is None or self._prop(v, "category") == category)
            and pattern in (self._prop(v, "text") or "")
        ]
        return rows[:limit]

    def _related_entities(self, entity_id: str, max_hops: int, limit: int) -> list[Any]:
        if not self._graph.has_node(entity_id):
            return []
        undirected = self._graph.to_undirected(as_view=True)
        distances = nx.single_source_shortest_path_length(
            undirected, entity_id, cutoff=max_hops
        )
        reached = sorted(
            (d, n) for n, d in distances.items()
            if n != entity_id and self._is_label(n, ENTITY_LABEL)
        )
        return [self._vertex_map(n) for _, n in reached[:limit]]

    def _documents_for_entity(self, entity_id: str, limit: int) -> list[Any]:
        if not self._graph.has_node(entity_id):
            return []
        docs = [
            dst
            for _, dst, key in self._graph.out_edges(entity_id, keys=True)
            if key == APPEARS_IN
        ]
        return [self._vertex_map(d) for d in docs[:limit]]

    def _entities_in_document(self, document_id: str) -> list[Any]:
        if not self._graph.has_node(document_id) or not self._is_label(
            document_id, DOCUMENT_LABEL
        ):
            return []
        return [
            {
                "context": self._edge_map(src, document_id, key),
                "entity": self._vertex_map(src),
            }
            for src, _, key in self._graph.in_edges(document_id, keys=True)
            if key == APPEARS_IN
        ]

    def _frequent_co_occurrences(self, min_occurrences: int, limit: int) -> list[Any]:
        counts: Counter[tuple[str, str]] = Counter()
        for doc_id in self._vertices(DOCUMENT_LABEL):
            texts = sorted(
                {
                    self._prop(src, "text")
                    for src, _, key in self._graph.in_edges(doc_id, keys=True)
                    if key == APPEARS_IN
                }
            )
            for i, a in enumerate(texts):
                for b in texts[i + 1:]:
                    counts[(a, b)] += 1

        ranked = sorted(
            ((pair, n) for pair, n in counts.items() if n >= min_occurrences),
            key=lambda item: (-item[1], item[0]),
        )
        return [
            {"pair": {"a": a, "b": b}, "coOccurrences": n}
            for (a, b), n in ranked[:limit]
        ]

    def _common_connections(self, seed_ids: list[str], limit: int) -> list[Any]:
        seeds = [s for s in set(seed_ids) if self._graph.has_node(s)]
        if not seeds or len(seeds) < len(set(seed_ids)):
            return []
        common = set.intersection(*(self._entity_neighbors(s) for s in seeds))
        common -= set(seeds)
        ordered = sorted(common, key=lambda v: self._prop(v, "text") or v)
        return [self._vertex_map(v) for v in ordered[:limit]]
