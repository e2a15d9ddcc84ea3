# src/graph/identity.py — v1
"""Canonical vertex identity for entities.

Entities are shared across the whole graph: the id depends only on the
lower-cased text, never on the document or the category.
"""

from __future__ import annotations

import hashlib

ENTITY_ID_PREFIX = "ent-"


def entity_vertex_id(text: str) -> str:
    """Deterministic, case-insensitive vertex id for an entity text.

    SHA-256 hex keeps ids free of characters that Cosmos DB rejects in
    resource ids ('/', '\\', '?', '#').
    """
    digest = hashlib.sha256(text.lower().encode("utf-8")).hexdigest()
    return f"{ENTITY_ID_PREFIX}{digest}"


def partition_key(category: str) -> str:
    """Store-level shard key for an entity vertex."""
    return category.lower()
