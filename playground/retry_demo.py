"""
Retry Executor Usage Example
============================

This example drives a flaky operation through the retry executor:
1. Configuration with backoff, jitter and a per-attempt timeout
2. Selective retries through ``retry_if``
3. Lifecycle callbacks reporting each transition
4. The decorator form

Running This Example
--------------------
    pip install -e ".[playground]"

    # Console logs
    python playground/retry_demo.py

    # JSON logs
    LOG_JSON_OUTPUT=true python playground/retry_demo.py
"""

from __future__ import annotations

import asyncio
import random

from rich.console import Console
from rich.panel import Panel

from retry_async import AttemptTimeoutError, RetryConfig, retry, retry_async
from retry_async.logger import LoggingConfig, configure_logging

console = Console()


class RandomFailure(Exception):
    """Failure worth retrying."""


async def unstable_task() -> str:
    """Fails 70% of the time, occasionally hangs past the attempt deadline."""
    roll = random.random()
    if roll < 0.1:
        await asyncio.sleep(5)
    if roll < 0.7:
        raise RandomFailure("Random failure")
    return "Success!"


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, (RandomFailure, AttemptTimeoutError))


def on_retry(attempt: int, error: BaseException) -> None:
    console.print(f"  [yellow]↻[/yellow] Attempt {attempt} failed: {error}")


def on_success(attempt: int) -> None:
    console.print(f"  [green]✓[/green] Success after {attempt} tries")


def on_failure(error: BaseException) -> None:
    console.print(f"  [red]✗[/red] All retries failed: {error}")


CONFIG = RetryConfig(
    retries=5,
    initial_delay_ms=500,
    max_delay_ms=3000,
    jitter=True,
    timeout_per_attempt_ms=1500,
    cancel_on_timeout=True,
    retry_if=is_retryable,
    on_retry=on_retry,
    on_success=on_success,
    on_failure=on_failure,
)


@retry(CONFIG.model_copy(update={"retries": 3, "initial_delay_ms": 100}))
async def decorated_task() -> str:
    return await unstable_task()


async def main() -> None:
    configure_logging(LoggingConfig(library_log_levels={"retry_async": "WARNING"}))
    console.print(Panel("[bold]Retry Executor Demo[/bold]", expand=False))

    console.print("\n[bold]1. retry_async with a flaky operation...[/bold]")
    try:
        result = await retry_async(unstable_task, CONFIG)
        console.print(f"  Final result: {result}")
    except Exception as e:
        console.print(f"  [red]Retry process failed:[/red] {e}")

    console.print("\n[bold]2. Decorated coroutine...[/bold]")
    try:
        result = await decorated_task()
        console.print(f"  Final result: {result}")
    except Exception as e:
        console.print(f"  [red]Retry process failed:[/red] {e}")

    console.print(Panel("[bold green]Retry Demo Complete[/bold green]", expand=False))


if __name__ == "__main__":
    asyncio.run(main())
