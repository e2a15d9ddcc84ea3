# src/nlp/base_language_client.py — v1
"""Abstract language-service client interface.

Entity recognition and summarization are external services; the graph
layer only ever sees their normalized output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from podgraph.core.models import EntityRecognitionResult

SummaryKind = Literal["extractive", "abstractive"]


class BaseLanguageClient(ABC):
    """Unified interface for language-service providers."""

    @abstractmethod
    async def recognize_entities(self, texts: list[str]) -> list[EntityRecognitionResult]:
        """Recognize entities in each text.

        Returns one result per input text, in input order. A text the
        service could not process yields a result with ``error`` set and
        no entities.
        """

    @abstractmethod
    async def summarize(self, texts: list[str], kind: SummaryKind = "extractive") -> str:
        """Summarize a set of texts into one string.

        Texts the service rejects individually are skipped.

        Raises:
            UpstreamExtractionError: If no text could be summarized.
        """

    async def close(self) -> None:
        """Release provider resources. No-op by default."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (azure)."""
