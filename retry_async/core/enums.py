from __future__ import annotations

from enum import StrEnum


class RetryState(StrEnum):
    ATTEMPTING = "attempting"
    RETRY_WAITING = "retry_waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
