"""
utils/retry.py — Exponential-backoff retry for the async downloader.

Wraps tenacity's AsyncRetrying. Each scheduled retry is logged with the
error that caused it; giving up on a retryable error is logged once more
before the exception propagates. Store writes are never retried.

Usage:
    from argeo_pipeline.utils.retry import with_retry

    @with_retry(max_attempts=3, base_delay=1.0, retry_on=(httpx.TransportError,))
    async def fetch(url: str) -> bytes:
        ...
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, Any]])


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
) -> Callable[[F], F]:
    """
    Retry an async function on `retry_on` exceptions.

    Waits base_delay * 2^(n-1) seconds between attempts, at most max_delay.
    Other exceptions propagate on the first occurrence.
    """

    def decorator(fn: F) -> F:
        name = fn.__qualname__

        def before_sleep(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            log.warning(
                "retry_scheduled",
                function=name,
                attempt=state.attempt_number,
                max_attempts=max_attempts,
                sleep_s=round(state.next_action.sleep, 2) if state.next_action else None,
                error=str(error),
            )

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=base_delay, max=max_delay),
                retry=retry_if_exception_type(retry_on),
                before_sleep=before_sleep,
                reraise=True,
            )
            try:
                return await retrying(fn, *args, **kwargs)
            except retry_on as exc:
                log.error(
                    "retry_exhausted",
                    function=name,
                    attempts=retrying.statistics.get("attempt_number", max_attempts),
                    error=str(exc),
                )
                raise

        return wrapper  # type: ignore[return-value]

    return decorator
