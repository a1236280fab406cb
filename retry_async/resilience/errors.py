from __future__ import annotations


class AttemptTimeoutError(TimeoutError):
    """Raised in place of an attempt's outcome when it misses its deadline."""

    def __init__(self, attempt: int, timeout_ms: int) -> None:
        super().__init__(f"Attempt {attempt} timed out after {timeout_ms} ms")
        self.attempt = attempt
        self.timeout_ms = timeout_ms


class RetryLogicError(RuntimeError): ...
