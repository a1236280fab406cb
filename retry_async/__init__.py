"""Retry asynchronous operations with exponential backoff, jitter and per-attempt timeouts."""

from __future__ import annotations

from .config import RetryConfig
from .core import RetryState
from .resilience import (
    AttemptTimeoutError,
    RetryExecutor,
    RetryLogicError,
    compute_delay_ms,
    retry,
    retry_async,
)

__all__ = [
    "AttemptTimeoutError",
    "RetryConfig",
    "RetryExecutor",
    "RetryLogicError",
    "RetryState",
    "compute_delay_ms",
    "retry",
    "retry_async",
]
