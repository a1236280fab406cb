from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING

from tenacity.wait import wait_base

if TYPE_CHECKING:
    from tenacity import RetryCallState

    from ..config.retry import RetryConfig

JITTER_RATIO = 0.3


def compute_delay_ms(
    attempt: int,
    initial_delay_ms: int,
    max_delay_ms: int,
    jitter: bool = False,
    rng: random.Random | None = None,
) -> int:
    """Backoff delay to sleep after ``attempt`` failed.

    Parameters
    ----------
    attempt : int
        Number of the attempt that just failed, starting at 1.
    initial_delay_ms : int
        Delay after the first failure; doubled for each following attempt.
    max_delay_ms : int
        Upper bound on the returned delay.
    jitter : bool
        Add or subtract up to 30% of the base delay, chosen at random.
    rng : random.Random | None
        Random source, the module-level generator when omitted.

    Returns
    -------
    int
        Delay in milliseconds, within ``[0, max_delay_ms]``.
    """
    delay = initial_delay_ms * 2 ** (attempt - 1)

    if jitter:
        source = rng or random
        magnitude = math.floor(source.random() * delay * JITTER_RATIO)
        delay += magnitude if source.random() > 0.5 else -magnitude

    return max(0, min(delay, max_delay_ms))


class wait_doubling_backoff(wait_base):  # noqa: N801
    """Tenacity wait strategy computing the delay from :func:`compute_delay_ms`."""

    def __init__(self, config: RetryConfig, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        delay_ms = compute_delay_ms(
            retry_state.attempt_number,
            self._config.initial_delay_ms,
            self._config.max_delay_ms,
            jitter=self._config.jitter,
            rng=self._rng,
        )
        return delay_ms / 1000
