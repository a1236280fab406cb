from __future__ import annotations

import asyncio
import inspect
import random
from collections.abc import Callable, Coroutine
from functools import partial, wraps
from typing import TYPE_CHECKING, Any, cast

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt
from tenacity.retry import retry_base

from ..config.retry import RetryConfig
from ..core.enums import RetryState
from ..core.types import P, R
from ..logger import get_logger
from .backoff import wait_doubling_backoff
from .errors import AttemptTimeoutError, RetryLogicError
from .types import Operation, Sleeper

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

logger: BoundLogger = get_logger(__name__)


class _RetryRun(retry_base):
    """Lifecycle of a single ``execute`` call.

    Serves as the tenacity retry condition and as its ``before``/``before_sleep``
    hooks, so ``state`` tracks every transition tenacity takes.
    """

    def __init__(self, config: RetryConfig) -> None:
        self.config = config
        self.state = RetryState.ATTEMPTING

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return False

        error = outcome.exception()
        # Cancellation and interpreter exits are never retried nor reported.
        if not isinstance(error, Exception):
            return False

        if retry_state.attempt_number < self.config.retries and self.config.retry_if(error):
            self.state = RetryState.RETRY_WAITING
            return True

        self.state = RetryState.FAILED
        return False

    def before_attempt(self, retry_state: RetryCallState) -> None:
        self.state = RetryState.ATTEMPTING
        logger.debug(
            "Starting attempt",
            attempt=retry_state.attempt_number,
            retries=self.config.retries,
        )

    def before_sleep(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        error = cast(BaseException, outcome.exception() if outcome is not None else None)

        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Attempt failed, retrying",
            attempt=retry_state.attempt_number,
            retries=self.config.retries,
            delay_ms=round(delay * 1000),
            error=repr(error),
        )
        self.config.on_retry(retry_state.attempt_number, error)

    def succeed(self, attempt: int) -> None:
        self.state = RetryState.SUCCEEDED
        if attempt > 1:
            logger.info("Operation succeeded after retries", attempt=attempt)
        else:
            logger.debug("Operation succeeded", attempt=attempt)
        self.config.on_success(attempt)

    def fail(self, error: Exception) -> None:
        logger.error(
            "Operation failed, giving up",
            retries=self.config.retries,
            error=repr(error),
        )
        self.config.on_failure(error)


class RetryExecutor:
    """Re-invoke an asynchronous operation until it succeeds or the budget is spent.

    Per-call state lives in the call itself, so one executor can serve any
    number of concurrent ``execute`` calls with different configurations.

    Usage Pattern
    -------------
    ```python
    executor = RetryExecutor(RetryConfig(retries=5, jitter=True))

    body = await executor.execute(lambda: fetch(url))

    # Override the executor default for one call
    body = await executor.execute(
        lambda: fetch(url),
        RetryConfig(retries=2, timeout_per_attempt_ms=1500),
    )
    ```
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        sleep: Sleeper = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or RetryConfig()
        self._sleep = sleep
        self._rng = rng
        self._abandoned: set[asyncio.Future[Any]] = set()

    @property
    def config(self) -> RetryConfig:
        """Configuration used when ``execute`` is called without one."""
        return self._config

    async def execute(self, operation: Operation[R], config: RetryConfig | None = None) -> R:
        """Run ``operation`` under the retry policy.

        Parameters
        ----------
        operation : Operation[R]
            Zero-argument callable returning an awaitable.
        config : RetryConfig | None
            Policy for this call, the executor default when omitted.

        Returns
        -------
        R
            The value of the first successful attempt.

        Raises
        ------
        Exception
            The error of the last attempt, unmodified. An
            :class:`AttemptTimeoutError` when that attempt timed out.
        """
        effective = config or self._config
        run = _RetryRun(effective)

        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(effective.retries),
            wait=wait_doubling_backoff(effective, self._rng),
            retry=run,
            before=run.before_attempt,
            before_sleep=run.before_sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                attempt_number = attempt.retry_state.attempt_number
                with attempt:
                    value = await self._run_attempt(operation, effective, attempt_number)

                outcome = attempt.retry_state.outcome
                if outcome is not None and not outcome.failed:
                    run.succeed(attempt_number)
                    return value
        except Exception as error:
            if run.state is RetryState.FAILED:
                run.fail(error)
            raise

        raise RetryLogicError("Retry loop completed without success or failure")

    async def _run_attempt(self, operation: Operation[R], config: RetryConfig, attempt: int) -> R:
        if not config.timeout_per_attempt_ms:
            return await operation()

        task: asyncio.Future[R] = asyncio.ensure_future(operation())
        try:
            done, _ = await asyncio.wait({task}, timeout=config.timeout_per_attempt_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            return task.result()

        self._abandon(task, cancel=config.cancel_on_timeout)
        raise AttemptTimeoutError(attempt, config.timeout_per_attempt_ms)

    def _abandon(self, task: asyncio.Future[Any], *, cancel: bool) -> None:
        if cancel:
            task.cancel()
        self._abandoned.add(task)
        task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Future[Any]) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug("Abandoned attempt finished with error", error=repr(error))


_default_executor = RetryExecutor()


async def retry_async(operation: Operation[R], config: RetryConfig | None = None) -> R:
    """Run ``operation`` with ``config`` on a shared, stateless executor."""
    return await _default_executor.execute(operation, config)


def retry(
    config: RetryConfig | None = None,
    *,
    executor: RetryExecutor | None = None,
) -> Callable[[Callable[P, Coroutine[Any, Any, R]]], Callable[P, Coroutine[Any, Any, R]]]:
    """Decorate a coroutine function so each call runs under the retry policy."""
    runner = executor or RetryExecutor(config)

    def decorator(func: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, Coroutine[Any, Any, R]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"retry() requires a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            return await runner.execute(partial(func, *args, **kwargs), config)

        return wrapper

    return decorator
