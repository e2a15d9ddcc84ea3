# tests/unit/store/test_memory_store.py — v1
"""Tests for store/memory_store.py — NetworkX-backed traversal evaluation."""

from __future__ import annotations

import pytest

from podgraph.core.errors import GraphStoreError
from podgraph.graph.traversals import upsert_edge, upsert_vertex
from podgraph.query.nodes import And, Not, Or, Term
from podgraph.store.memory_store import InMemoryGraphStore
from podgraph.store.traversal import Traversal, empty_traversal


async def _entity(store: InMemoryGraphStore, vid: str, text: str, category: str) -> None:
    await store.execute(
        upsert_vertex(vid, "entity", {"text": text, "category": category, "type": category})
    )


async def _document(store: InMemoryGraphStore, did: str) -> None:
    await store.execute(upsert_vertex(did, "document", {"category": "document"}))


async def _appears(store: InMemoryGraphStore, vid: str, did: str) -> None:
    await store.execute(upsert_edge("appears_in", vid, did, {"confidenceScore": 0.9}))


class TestMutationSteps:
    @pytest.mark.asyncio
    async def test_upsert_vertex_returns_value_map(self, memory_store):
        rows = await memory_store.execute(
            upsert_vertex("v1", "entity", {"text": "Alice", "category": "Person"})
        )
        assert rows == [
            {"id": "v1", "label": "entity", "text": ["Alice"], "category": ["Person"]}
        ]

    @pytest.mark.asyncio
    async def test_upsert_vertex_keeps_first_properties(self, memory_store):
        await memory_store.execute(upsert_vertex("v1", "entity", {"text": "Alice"}))
        rows = await memory_store.execute(upsert_vertex("v1", "entity", {"text": "ALICE"}))
        assert rows[0]["text"] == ["Alice"]
        assert await memory_store.node_count() == 1

    @pytest.mark.asyncio
    async def test_upsert_edge_once_per_label(self, memory_store):
        await _entity(memory_store, "a", "A", "Person")
        await _entity(memory_store, "b", "B", "Person")
        first = await memory_store.execute(upsert_edge("knows", "a", "b", {"n": 1}))
        second = await memory_store.execute(upsert_edge("knows", "a", "b", {"n": 2}))
        assert first[0]["id"] == second[0]["id"]
        assert second[0]["n"] == 1
        await memory_store.execute(upsert_edge("likes", "a", "b", {}))
        assert await memory_store.edge_count() == 2
        assert await memory_store.edge_count("knows") == 1

    @pytest.mark.asyncio
    async def test_upsert_edge_missing_endpoint(self, memory_store):
        await _entity(memory_store, "a", "A", "Person")
        assert await memory_store.execute(upsert_edge("knows", "a", "zzz", {})) == []
        assert await memory_store.edge_count() == 0


class TestExecute:
    @pytest.mark.asyncio
    async def test_empty_traversal(self, memory_store):
        assert await memory_store.execute(empty_traversal()) == []

    @pytest.mark.asyncio
    async def test_unknown_step(self, memory_store):
        with pytest.raises(GraphStoreError, match="cannot evaluate"):
            await memory_store.execute(Traversal("g.V()", step="drop_everything"))

    @pytest.mark.asyncio
    async def test_script_only_traversal_rejected(self, memory_store):
        with pytest.raises(GraphStoreError):
            await memory_store.execute(Traversal("g.V().count()"))

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with InMemoryGraphStore() as store:
            assert store.provider_name == "memory"


class TestMatchDocuments:
    async def _ids(self, store, query, limit=50):
        rows = await store.execute(
            Traversal("", step="match_documents", arguments={"query": query, "limit": limit})
        )
        return sorted(r["id"] for r in rows)

    @pytest.mark.asyncio
    async def test_boolean_matching(self):
        store = InMemoryGraphStore()
        await _entity(store, "laptop", "laptop", "Product")
        await _entity(store, "tablet", "tablet", "Product")
        await _entity(store, "phone", "phone", "Product")
        for did in ("d1", "d2", "d3"):
            await _document(store, did)
        await _appears(store, "laptop", "d1")
        await _appears(store, "phone", "d1")
        await _appears(store, "tablet", "d2")
        await _appears(store, "phone", "d3")

        t = lambda v: Term("text", v)  # noqa: E731
        assert await self._ids(store, t("phone")) == ["d1", "d3"]
        assert await self._ids(store, And(t("laptop"), t("phone"))) == ["d1"]
        assert await self._ids(store, Or(t("laptop"), t("tablet"))) == ["d1", "d2"]
        assert await self._ids(
            store, And(Or(t("laptop"), t("tablet")), Not(t("phone")))
        ) == ["d2"]
        assert await self._ids(store, Term("category", "Product")) == ["d1", "d2", "d3"]
        assert len(await self._ids(store, Term("category", "Product"), limit=2)) == 2
