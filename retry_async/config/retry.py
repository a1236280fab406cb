from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


def _always_retry(_error: BaseException) -> bool:
    return True


def _ignore_retry(_attempt: int, _error: BaseException) -> None:
    return None


def _ignore_success(_attempt: int) -> None:
    return None


def _ignore_failure(_error: BaseException) -> None:
    return None


class RetryConfig(BaseModel):
    """Configuration for the retry loop with exponential backoff.

    Durations are milliseconds. ``retries`` is the total attempt budget,
    not the number of retries after the first attempt.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    retries: int = Field(default=3, ge=1, description="Maximum number of attempts")

    # Backoff
    initial_delay_ms: int = Field(
        default=500,
        ge=0,
        description="Delay before the first retry, doubled on every following retry",
    )
    max_delay_ms: int = Field(
        default=5000,
        ge=0,
        description="Upper bound on a single backoff delay",
    )
    jitter: bool = Field(
        default=False,
        description="Perturb each delay by up to +/-30%",
    )

    # Timeouts
    timeout_per_attempt_ms: int = Field(
        default=0,
        ge=0,
        description="Deadline for a single attempt (0 = disabled)",
    )
    cancel_on_timeout: bool = Field(
        default=False,
        description="Cancel the operation when its attempt times out instead of abandoning it",
    )

    # Hooks
    retry_if: Callable[[BaseException], bool] = Field(
        default=_always_retry,
        description="Predicate deciding whether a failure is retryable",
    )
    on_retry: Callable[[int, BaseException], None] = Field(
        default=_ignore_retry,
        description="Called with the failed attempt number and its error before sleeping",
    )
    on_success: Callable[[int], None] = Field(
        default=_ignore_success,
        description="Called with the attempt number that succeeded",
    )
    on_failure: Callable[[BaseException], None] = Field(
        default=_ignore_failure,
        description="Called with the final error before it is raised",
    )
