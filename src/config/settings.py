# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for graph store, graph policy, query bounds,
NLP provider and logging settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Graph store ===
    graph_store_type: Literal["gremlin", "memory"] = "memory"
    gremlin_endpoint: str = ""
    gremlin_database: str = ""
    gremlin_container: str = ""
    gremlin_key: str = ""
    gremlin_traversal_source: str = "g"
    gremlin_pool_size: int = 4
    gremlin_timeout_s: float = 30.0

    # === Graph policy ===
    confidence_threshold: float = 0.7
    persist_co_occurs: bool = False
    write_concurrency: int = 8

    # === Query bounds ===
    query_default_limit: int = 50
    query_max_limit: int = 500
    related_max_hops: int = 4

    # === NLP service ===
    language_provider: Literal["none", "azure"] = "none"
    language_endpoint: str = ""
    language_key: str = ""
    language_code: str = "en"

    # === Ingestion retry ===
    ingest_max_retries: int = 3
    ingest_retry_base_delay_s: float = 1.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("confidence_threshold")
    @classmethod
    def validate_confidence_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("confidence_threshold must be within [0, 1]")
        return v

    @field_validator(
        "write_concurrency",
        "query_default_limit",
        "query_max_limit",
        "related_max_hops",
        "gremlin_pool_size",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @field_validator("ingest_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ingest_max_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.graph_store_type == "gremlin":
            missing = [
                name
                for name in (
                    "gremlin_endpoint",
                    "gremlin_database",
                    "gremlin_container",
                    "gremlin_key",
                )
                if not getattr(self, name)
            ]
            if missing:
                errors.append(
                    "GRAPH_STORE_TYPE=gremlin requires " + ", ".join(m.upper() for m in missing)
                )

        if self.language_provider == "azure" and not (
            self.language_endpoint and self.language_key
        ):
            errors.append(
                "LANGUAGE_PROVIDER=azure requires LANGUAGE_ENDPOINT and LANGUAGE_KEY"
            )

        if self.query_default_limit > self.query_max_limit:
            errors.append("QUERY_DEFAULT_LIMIT must be <= QUERY_MAX_LIMIT")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def gremlin_username(self) -> str:
        """Resource path used as the SASL username by Cosmos DB Gremlin accounts."""
        return f"/dbs/{self.gremlin_database}/colls/{self.gremlin_container}"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
