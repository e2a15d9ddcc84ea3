# src/graph/traversals.py — v1
"""Conditional-create traversals for vertices and edges.

Every mutation is an upsert in the create-if-absent sense: an existing
vertex or edge is returned untouched, so re-running a write never
changes properties set by the first writer. Values travel as bindings;
only internal labels are embedded in the script.
"""

from __future__ import annotations

from typing import Any, Mapping

from podgraph.store.traversal import Traversal, quote_literal


def _property_steps(
    properties: Mapping[str, Any], bindings: dict[str, Any]
) -> str:
    """Render ``.property(k, v)`` steps with bound keys and values. None values are skipped."""
    steps: list[str] = []
    for i, (key, value) in enumerate(
        (k, v) for k, v in properties.items() if v is not None
    ):
        bindings[f"pk{i}"] = key
        bindings[f"pv{i}"] = value
        steps.append(f".property(pk{i}, pv{i})")
    return "".join(steps)


def upsert_vertex(
    vertex_id: str, label: str, properties: Mapping[str, Any]
) -> Traversal:
    """Create the vertex if no vertex with ``vertex_id`` exists; return it either way."""
    bindings: dict[str, Any] = {"vid": vertex_id}
    props = _property_steps(properties, bindings)
    script = (
        f"g.V(vid).fold().coalesce(unfold(), "
        f"addV({quote_literal(label)}).property(id, vid){props})"
    )
    clean = {k: v for k, v in properties.items() if v is not None}
    return Traversal(
        script=script,
        bindings=bindings,
        step="upsert_vertex",
        arguments={"vertex_id": vertex_id, "label": label, "properties": clean},
    )


def upsert_edge(
    label: str, out_id: str, in_id: str, properties: Mapping[str, Any]
) -> Traversal:
    """Create a ``label`` edge out_id -> in_id unless one already exists."""
    bindings: dict[str, Any] = {"outId": out_id, "inId": in_id}
    props = _property_steps(properties, bindings)
    quoted = quote_literal(label)
    script = (
        f"g.V(outId).as('o').V(inId).coalesce("
        f"__.inE({quoted}).where(__.outV().as('o')), "
        f"__.addE({quoted}).from('o'){props})"
    )
    clean = {k: v for k, v in properties.items() if v is not None}
    return Traversal(
        script=script,
        bindings=bindings,
        step="upsert_edge",
        arguments={
            "label": label,
            "out_id": out_id,
            "in_id": in_id,
            "properties": clean,
        },
    )
