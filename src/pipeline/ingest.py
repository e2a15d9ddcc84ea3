# src/pipeline/ingest.py — v1
"""Batch ingestion: entity recognition, then graph recording per document.

A document whose recognition call fails is skipped. A document whose
graph writes keep failing after retries is reported as failed. Neither
stops the rest of the batch.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Iterable

from podgraph.core.errors import UpstreamExtractionError
from podgraph.core.models import (
    BatchIngestResult,
    ExtractedEntity,
    RawDocument,
    SourceDocument,
)
from podgraph.logging.context import document_context
from podgraph.pipeline.retry import RetryExhausted, RetryPolicy, with_retry

if TYPE_CHECKING:
    from podgraph.nlp.base_language_client import BaseLanguageClient
    from podgraph.pipeline.recorder import DocumentGraphRecorder

logger = logging.getLogger(__name__)


class DocumentIngestor:
    """Turns raw documents into recorded graph documents.

    Args:
        language_client: Entity recognition provider.
        recorder: Graph writer for one document.
        retry_policy: Backoff applied to each document's graph writes.
    """

    def __init__(
        self,
        language_client: BaseLanguageClient,
        recorder: DocumentGraphRecorder,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._language_client = language_client
        self._recorder = recorder
        self._retry_policy = retry_policy or RetryPolicy()

    async def extract(self, document: RawDocument) -> SourceDocument:
        """Recognize entities across all texts of a raw document.

        Texts the service rejects contribute no entities.

        Raises:
            UpstreamExtractionError: If the recognition call itself fails.
        """
        entities: list[ExtractedEntity] = []
        if document.texts:
            try:
                results = await self._language_client.recognize_entities(document.texts)
            except UpstreamExtractionError as e:
                e.document_id = document.id
                raise
            for result in results:
                if result.is_error:
                    logger.warning(
                        "Text %d of document %s skipped: %s",
                        result.index, document.id, result.error,
                    )
                    continue
                entities.extend(result.entities)
        return SourceDocument(id=document.id, metadata=document.metadata, entities=entities)

    async def ingest(
        self, batch: Iterable[RawDocument], run_id: str | None = None
    ) -> BatchIngestResult:
        """Extract and record every document of a batch, one at a time."""
        run_id = run_id or uuid.uuid4().hex[:12]
        outcome = BatchIngestResult()

        for raw in batch:
            with document_context(raw.id, run_id):
                try:
                    document = await self.extract(raw)
                except UpstreamExtractionError as e:
                    logger.error("Skipping document %s: %s", raw.id, e)
                    outcome.skipped.append(raw.id)
                    continue

                try:
                    recorded = await with_retry(
                        self._recorder.record_document,
                        document,
                        operation=f"record_document:{raw.id}",
                        policy=self._retry_policy,
                    )
                except RetryExhausted as e:
                    logger.error("Failed to record document %s: %s", raw.id, e)
                    outcome.failed.append(raw.id)
                    continue
                outcome.recorded.append(recorded)

        logger.info(
            "Batch %s: %d recorded, %d skipped, %d failed",
            run_id, len(outcome.recorded), len(outcome.skipped), len(outcome.failed),
        )
        return outcome
