# src/pipeline/retry.py — v1
"""Retry a whole unit of graph work with exponential backoff.

Only store failures are retried. Every graph write is a conditional
create, so repeating a partially applied document converges on the same
graph.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from podgraph.core.errors import GraphStoreError, PodgraphError

logger = logging.getLogger(__name__)


class RetryExhausted(PodgraphError):
    """All attempts of a retried operation failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Operation '{operation}' failed after {attempts} attempts: {last_error}"
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff policy. ``max_retries`` counts retries after the first attempt."""

    max_retries: int = 3
    base_delay_s: float = 1.0
    backoff_factor: float = 2.0
    jitter: bool = True
    retry_on: tuple[type[Exception], ...] = (GraphStoreError,)

    @classmethod
    def from_settings(cls, settings: Any) -> RetryPolicy:
        return cls(
            max_retries=settings.ingest_max_retries,
            base_delay_s=settings.ingest_retry_base_delay_s,
        )


def compute_delay(policy: RetryPolicy, attempt: int) -> float:
    """Delay before retry number ``attempt`` (0-based)."""
    delay = policy.base_delay_s * (policy.backoff_factor ** attempt)
    if policy.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    operation: str = "unknown",
    policy: RetryPolicy | None = None,
    **kwargs: Any,
) -> Any:
    """Await ``fn(*args, **kwargs)``, retrying on the policy's error types.

    Errors outside ``policy.retry_on`` propagate unchanged on first sight.

    Raises:
        RetryExhausted: If every attempt failed with a retryable error.
    """
    policy = policy or RetryPolicy()
    attempts = 0

    while True:
        try:
            return await fn(*args, **kwargs)
        except policy.retry_on as e:
            attempts += 1
            if attempts > policy.max_retries:
                raise RetryExhausted(operation, attempts, e) from e

            delay = compute_delay(policy, attempts - 1)
            logger.warning(
                "Operation '%s' failed: %s (attempt %d/%d), retrying in %.1fs",
                operation, e, attempts, policy.max_retries + 1, delay,
            )
            await asyncio.sleep(delay)
