# src/nlp/azure_language.py — v1
"""Azure AI Language adapter implementing BaseLanguageClient.

Uses the async client of the azure-ai-textanalytics SDK. Recognition
requests are split into batches the service accepts; per-text failures
come back as error results, service-level failures raise
UpstreamExtractionError.
"""

from __future__ import annotations

import logging
from typing import Any

from podgraph.core.errors import UpstreamExtractionError
from podgraph.core.models import EntityRecognitionResult, ExtractedEntity
from podgraph.nlp.base_language_client import BaseLanguageClient, SummaryKind

logger = logging.getLogger(__name__)

# Service limit on documents per synchronous entity recognition request.
RECOGNITION_BATCH_SIZE = 5


def _import_sdk() -> Any:
    try:
        from azure.ai.textanalytics import aio
    except ImportError as e:
        raise ImportError(
            "azure-ai-textanalytics package required: pip install podgraph[azure]"
        ) from e
    return aio


def _azure_error() -> type[Exception]:
    from azure.core.exceptions import AzureError

    return AzureError


def _to_entity(raw: Any) -> ExtractedEntity:
    return ExtractedEntity(
        text=raw.text,
        category=raw.category,
        sub_category=raw.subcategory,
        confidence_score=raw.confidence_score,
        offset=raw.offset,
        length=raw.length,
    )


class AzureLanguageClient(BaseLanguageClient):
    """Azure AI Language adapter.

    Args:
        endpoint: Language resource endpoint.
        key: Language resource key.
        language: Language hint passed with every request.
        client: Pre-built async TextAnalyticsClient (tests inject a fake).
    """

    def __init__(
        self,
        endpoint: str = "",
        key: str = "",
        language: str = "en",
        client: Any | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._key = key
        self._language = language
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            aio = _import_sdk()
            from azure.core.credentials import AzureKeyCredential

            self._client = aio.TextAnalyticsClient(
                endpoint=self._endpoint, credential=AzureKeyCredential(self._key)
            )
        return self._client

    async def recognize_entities(self, texts: list[str]) -> list[EntityRecognitionResult]:
        client = self._get_client()
        results: list[EntityRecognitionResult] = []
        for start in range(0, len(texts), RECOGNITION_BATCH_SIZE):
            batch = texts[start:start + RECOGNITION_BATCH_SIZE]
            try:
                responses = await client.recognize_entities(batch, language=self._language)
            except _azure_error() as e:
                raise UpstreamExtractionError(f"Entity recognition failed: {e}") from e

            for offset, response in enumerate(responses):
                index = start + offset
                if response.is_error:
                    message = f"{response.error.code}: {response.error.message}"
                    logger.warning("Entity recognition failed for text %d: %s", index, message)
                    results.append(EntityRecognitionResult(index=index, error=message))
                    continue
                results.append(
                    EntityRecognitionResult(
                        index=index, entities=[_to_entity(e) for e in response.entities]
                    )
                )
        return results

    async def summarize(self, texts: list[str], kind: SummaryKind = "extractive") -> str:
        client = self._get_client()
        try:
            if kind == "extractive":
                poller = await client.begin_extract_summary(
                    texts, max_sentence_count=1, language=self._language
                )
            else:
                poller = await client.begin_abstract_summary(
                    texts, sentence_count=1, language=self._language
                )
            pages = await poller.result()
            parts: list[str] = []
            async for result in pages:
                if result.is_error:
                    logger.warning(
                        "Could not summarize text %s: %s (%s)",
                        result.id, result.error.message, result.error.code,
                    )
                    continue
                items = result.sentences if kind == "extractive" else result.summaries
                parts.append(".\n".join(item.text for item in items))
        except _azure_error() as e:
            raise UpstreamExtractionError(f"{kind.capitalize()} summarization failed: {e}") from e

        if texts and not parts:
            raise UpstreamExtractionError(f"No text could be summarized ({kind})")
        return "\n".join(parts).strip()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    @property
    def provider_name(self) -> str:
        return "azure"
