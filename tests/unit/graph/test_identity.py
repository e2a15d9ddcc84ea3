# tests/unit/graph/test_identity.py — v1
"""Tests for graph/identity.py — canonical entity ids."""

from __future__ import annotations

import re

from podgraph.graph.identity import ENTITY_ID_PREFIX, entity_vertex_id, partition_key


class TestEntityVertexId:
    def test_case_insensitive(self):
        assert entity_vertex_id("Microsoft") == entity_vertex_id("MICROSOFT")

    def test_different_text_different_id(self):
        assert entity_vertex_id("Microsoft") != entity_vertex_id("Microsoft Corp")

    def test_whitespace_significant(self):
        assert entity_vertex_id("New York") != entity_vertex_id("NewYork")

    def test_format_is_store_safe(self):
        vid = entity_vertex_id("AC/DC? #1 \\o/")
        assert vid.startswith(ENTITY_ID_PREFIX)
        assert re.fullmatch(r"ent-[0-9a-f]{64}", vid)

    def test_unicode(self):
        assert entity_vertex_id("Zürich") == entity_vertex_id("ZÜRICH")


class TestPartitionKey:
    def test_lowercased_category(self):
        assert partition_key("PersonType") == "persontype"
