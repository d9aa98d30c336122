"""Retry handler with exponential backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from stackr_ai.telemetry import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[Any]]

QUOTA_ERROR_CODE = "insufficient_quota"


def get_status_code(error: BaseException) -> Optional[int]:
    """Best-effort HTTP status of an upstream error."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def get_error_code(error: BaseException) -> Optional[str]:
    """Best-effort machine-readable code of an upstream error."""
    for attr in ("error_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, str):
            return value
    return None


def is_retryable_error(error: BaseException) -> bool:
    """Rate limits and server errors are worth retrying on the same provider."""
    status = get_status_code(error)
    return status is not None and (status == 429 or 500 <= status < 600)


def is_quota_error(error: BaseException) -> bool:
    """Quota-class failures move the request on to the next provider."""
    return get_status_code(error) == 429 or get_error_code(error) == QUOTA_ERROR_CODE


class RetryHandler:
    """Runs one provider call with bounded retries and exponential backoff.

    ``max_retries`` bounds the total number of attempts. After the n-th
    retryable failure the handler sleeps ``initial_delay * 2 ** (n - 1)``
    seconds. Non-retryable errors, and the error of the last allowed attempt,
    propagate unchanged.
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        sleep: Sleeper = asyncio.sleep,
        retry_predicate: Callable[[BaseException], bool] = is_retryable_error,
    ):
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.sleep = sleep
        self.retry_predicate = retry_predicate

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "retry_scheduled",
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            attempt=retry_state.attempt_number,
            max_retries=retry_state.retry_object.stop.max_attempt_number,
            error=str(error),
        )

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
    ) -> T:
        """Execute ``func`` with retry logic; per-call arguments override the defaults."""
        attempts = max(1, max_retries if max_retries is not None else self.max_retries)
        delay = initial_delay if initial_delay is not None else self.initial_delay

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=delay, exp_base=2, min=0),
            retry=retry_if_exception(self.retry_predicate),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                return await func()

        # This should never be reached
        raise RuntimeError("Retry loop completed without returning")
