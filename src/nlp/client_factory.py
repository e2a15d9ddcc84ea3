# src/nlp/client_factory.py — v1
"""Factory: instantiate the language-service client from settings."""

from __future__ import annotations

import logging

from podgraph.config.settings import Settings
from podgraph.nlp.base_language_client import BaseLanguageClient

logger = logging.getLogger(__name__)


class UnsupportedLanguageProviderError(ValueError):
    """Raised when no language provider is configured or it is unknown."""


def create_language_client(settings: Settings) -> BaseLanguageClient:
    """Instantiate the configured language client.

    Raises:
        UnsupportedLanguageProviderError: If LANGUAGE_PROVIDER is 'none' or unknown.
    """
    provider = settings.language_provider
    if provider == "azure":
        from podgraph.nlp.azure_language import AzureLanguageClient

        logger.debug("Creating language client: provider=azure")
        return AzureLanguageClient(
            endpoint=settings.language_endpoint,
            key=settings.language_key,
            language=settings.language_code,
        )
    raise UnsupportedLanguageProviderError(
        f"No language client for provider {provider!r}. Set LANGUAGE_PROVIDER=azure"
    )
