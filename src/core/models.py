# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


# === EXTRACTION ===


class ExtractedEntity(BaseModel):
    """One entity span recognised by the NLP service inside a document."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(min_length=1)
    category: str = Field(min_length=1)
    sub_category: str | None = Field(default=None, alias="subCategory")
    confidence_score: float = Field(ge=0.0, le=1.0, alias="confidenceScore")
    offset: int | None = None
    length: int | None = None

    @field_validator("text", "category")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @property
    def entity_type(self) -> str:
        """Most specific classification: subcategory when present, else category."""
        return self.sub_category or self.category


class EntityRecognitionResult(BaseModel):
    """Per-text outcome of an entity recognition call.

    Exactly one of ``entities`` (possibly empty) or ``error`` is meaningful.
    """

    index: int
    entities: list[ExtractedEntity] = Field(default_factory=list)
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


# === DOCUMENTS ===


class SourceDocument(BaseModel):
    """A document and its extracted entities, ready to be recorded in the graph."""

    id: str = Field(min_length=1)
    metadata: dict[str, str] = Field(default_factory=dict)
    entities: list[ExtractedEntity] = Field(default_factory=list)


class RawDocument(BaseModel):
    """A document before entity extraction (e.g. a thread and its comments)."""

    id: str = Field(min_length=1)
    texts: list[str] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)


# === RESULTS ===


class RecordResult(BaseModel):
    """What record_document wrote for one document."""

    document_id: str
    persisted_entities: list[ExtractedEntity] = Field(default_factory=list)
    relationship_pairs: int = 0


class BatchIngestResult(BaseModel):
    """Outcome of ingesting a batch of raw documents."""

    recorded: list[RecordResult] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
