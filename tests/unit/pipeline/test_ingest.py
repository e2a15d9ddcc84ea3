# tests/unit/pipeline/test_ingest.py — v1
"""Tests for pipeline/ingest.py — batch extraction and recording."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from podgraph.core.errors import GraphStoreError, UpstreamExtractionError
from podgraph.core.models import EntityRecognitionResult, ExtractedEntity, RawDocument
from podgraph.nlp.base_language_client import BaseLanguageClient
from podgraph.pipeline.ingest import DocumentIngestor
from podgraph.pipeline.recorder import DocumentGraphRecorder
from podgraph.pipeline.retry import RetryPolicy

NO_WAIT = RetryPolicy(max_retries=1, base_delay_s=0.0, jitter=False)


def _entity(text: str, category: str = "Person") -> ExtractedEntity:
    return ExtractedEntity(text=text, category=category, confidence_score=0.9)


def _language_client(side_effect) -> AsyncMock:
    client = AsyncMock(spec=BaseLanguageClient)
    client.recognize_entities.side_effect = side_effect
    return client


class TestExtract:
    @pytest.mark.asyncio
    async def test_failed_text_contributes_nothing(self, recorder):
        client = _language_client(
            lambda texts: [
                EntityRecognitionResult(index=0, entities=[_entity("Alice")]),
                EntityRecognitionResult(index=1, error="InvalidDocument: empty"),
                EntityRecognitionResult(index=2, entities=[_entity("Acme", "Organization")]),
            ]
        )
        ingestor = DocumentIngestor(client, recorder, NO_WAIT)
        document = await ingestor.extract(
            RawDocument(id="d1", texts=["a", "", "c"], metadata={"title": "T"})
        )
        assert [e.text for e in document.entities] == ["Alice", "Acme"]
        assert document.metadata == {"title": "T"}

    @pytest.mark.asyncio
    async def test_no_texts_skips_service(self, recorder):
        client = _language_client(AssertionError("not called"))
        document = await DocumentIngestor(client, recorder).extract(RawDocument(id="d1"))
        assert document.entities == []
        client.recognize_entities.assert_not_called()

    @pytest.mark.asyncio
    async def test_service_failure_tagged_with_document(self, recorder):
        client = _language_client(UpstreamExtractionError("503"))
        with pytest.raises(UpstreamExtractionError) as exc:
            await DocumentIngestor(client, recorder).extract(RawDocument(id="d9", texts=["x"]))
        assert exc.value.document_id == "d9"


class TestIngest:
    @pytest.mark.asyncio
    async def test_batch_continues_past_failed_document(self, memory_store, recorder):
        def recognize(texts):
            if texts == ["broken"]:
                raise UpstreamExtractionError("service unavailable")
            return [EntityRecognitionResult(index=0, entities=[_entity(texts[0])])]

        ingestor = DocumentIngestor(_language_client(recognize), recorder, NO_WAIT)
        result = await ingestor.ingest(
            [
                RawDocument(id="d1", texts=["Alice"]),
                RawDocument(id="d2", texts=["broken"]),
                RawDocument(id="d3", texts=["Bob"]),
            ]
        )
        assert [r.document_id for r in result.recorded] == ["d1", "d3"]
        assert result.skipped == ["d2"]
        assert result.failed == []
        assert memory_store.graph.has_node("d3")
        assert not memory_store.graph.has_node("d2")

    @pytest.mark.asyncio
    async def test_record_retried_then_reported_failed(self):
        client = _language_client(
            lambda texts: [EntityRecognitionResult(index=0, entities=[_entity("Alice")])]
        )
        recorder = AsyncMock(spec=DocumentGraphRecorder)
        recorder.record_document.side_effect = GraphStoreError("429")
        ingestor = DocumentIngestor(client, recorder, NO_WAIT)
        result = await ingestor.ingest([RawDocument(id="d1", texts=["x"])])
        assert result.failed == ["d1"]
        assert result.recorded == []
        assert recorder.record_document.await_count == 2

    @pytest.mark.asyncio
    async def test_transient_store_error_recovers(self, memory_store):
        client = _language_client(
            lambda texts: [EntityRecognitionResult(index=0, entities=[_entity("Alice")])]
        )
        real = DocumentGraphRecorder.from_store(memory_store)
        outcomes: list[Exception | None] = [GraphStoreError("blip"), None]

        async def flaky(document):
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome
            return await real.record_document(document)

        recorder = AsyncMock(spec=DocumentGraphRecorder)
        recorder.record_document.side_effect = flaky
        result = await DocumentIngestor(client, recorder, NO_WAIT).ingest(
            [RawDocument(id="d1", texts=["x"])]
        )
        assert [r.document_id for r in result.recorded] == ["d1"]
        assert memory_store.graph.has_node("d1")
