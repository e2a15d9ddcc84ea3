# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides sample entities, a fixed clock and in-memory graph stores.
No external dependencies: Gremlin and Azure clients are faked.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from podgraph.config.settings import Settings
from podgraph.core.models import ExtractedEntity, SourceDocument
from podgraph.graph.canonicalizer import EntityCanonicalizer
from podgraph.graph.inferencer import RelationshipInferencer
from podgraph.pipeline.recorder import DocumentGraphRecorder
from podgraph.store.memory_store import InMemoryGraphStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_entity(
    text: str,
    category: str = "Person",
    confidence: float = 0.9,
    sub_category: str | None = None,
    offset: int | None = 0,
    length: int | None = None,
) -> ExtractedEntity:
    return ExtractedEntity(
        text=text,
        category=category,
        sub_category=sub_category,
        confidence_score=confidence,
        offset=offset,
        length=len(text) if length is None else length,
    )


def fixed_clock() -> datetime:
    return FIXED_NOW


# === FIXTURES: Sample data ===


@pytest.fixture
def alice() -> ExtractedEntity:
    return make_entity("Alice", "Person")


@pytest.fixture
def acme() -> ExtractedEntity:
    return make_entity("Acme", "Organization")


@pytest.fixture
def sample_document(alice: ExtractedEntity, acme: ExtractedEntity) -> SourceDocument:
    return SourceDocument(
        id="doc-1",
        metadata={"title": "Hiring thread", "author": "bob"},
        entities=[alice, acme, make_entity("Seattle", "Location")],
    )


# === FIXTURES: Graph ===


@pytest.fixture
def memory_store() -> InMemoryGraphStore:
    return InMemoryGraphStore()


@pytest.fixture
def canonicalizer(memory_store: InMemoryGraphStore) -> EntityCanonicalizer:
    return EntityCanonicalizer(memory_store, clock=fixed_clock)


@pytest.fixture
def recorder(memory_store: InMemoryGraphStore) -> DocumentGraphRecorder:
    return DocumentGraphRecorder(
        EntityCanonicalizer(memory_store, clock=fixed_clock),
        RelationshipInferencer(memory_store, clock=fixed_clock),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)
