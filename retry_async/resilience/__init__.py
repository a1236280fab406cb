from __future__ import annotations

from .backoff import compute_delay_ms, wait_doubling_backoff
from .errors import AttemptTimeoutError, RetryLogicError
from .retry import RetryExecutor, retry, retry_async

__all__ = [
    "AttemptTimeoutError",
    "RetryExecutor",
    "RetryLogicError",
    "compute_delay_ms",
    "retry",
    "retry_async",
    "wait_doubling_backoff",
]
