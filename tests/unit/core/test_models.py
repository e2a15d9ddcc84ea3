# tests/unit/core/test_models.py — v1
"""Tests for core/models.py, core/categories.py and core/errors.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from podgraph.core.categories import EntityCategory
from podgraph.core.errors import GraphStoreTimeoutError, PodgraphError, QueryParseError
from podgraph.core.models import EntityRecognitionResult, ExtractedEntity, SourceDocument


class TestExtractedEntity:
    def test_wire_aliases(self):
        entity = ExtractedEntity.model_validate(
            {"text": "Acme", "category": "Organization", "subCategory": None, "confidenceScore": 0.8}
        )
        assert entity.confidence_score == 0.8
        assert entity.sub_category is None

    def test_entity_type(self):
        assert ExtractedEntity(text="a", category="DateTime", confidence_score=1).entity_type == "DateTime"
        entity = ExtractedEntity(text="a", category="DateTime", sub_category="Date", confidence_score=1)
        assert entity.entity_type == "Date"

    @pytest.mark.parametrize("score", [-0.1, 1.01])
    def test_confidence_bounds(self, score):
        with pytest.raises(ValidationError):
            ExtractedEntity(text="a", category="Person", confidence_score=score)

    def test_blank_text_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedEntity(text="  ", category="Person", confidence_score=0.9)

    def test_frozen(self):
        entity = ExtractedEntity(text="a", category="Person", confidence_score=0.9)
        with pytest.raises(ValidationError):
            entity.text = "b"  # type: ignore[misc]


class TestDocumentModels:
    def test_source_document_defaults(self):
        document = SourceDocument(id="d1")
        assert document.metadata == {}
        assert document.entities == []

    def test_recognition_error(self):
        assert EntityRecognitionResult(index=0, error="bad").is_error
        assert not EntityRecognitionResult(index=0).is_error


class TestEntityCategory:
    def test_parse(self):
        assert EntityCategory.parse("Person") is EntityCategory.PERSON
        assert EntityCategory.parse("person") is None

    def test_rank_follows_declaration(self):
        assert EntityCategory.PERSON.rank == 0
        assert EntityCategory.PERSON.rank < EntityCategory.ORGANIZATION.rank < EntityCategory.QUANTITY.rank


class TestErrors:
    def test_parse_error_position(self):
        error = QueryParseError("Unexpected", position=4)
        assert error.position == 4
        assert "offset 4" in str(error)

    def test_hierarchy(self):
        assert issubclass(GraphStoreTimeoutError, PodgraphError)
