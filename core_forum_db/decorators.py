# core_forum_db/decorators.py
"""
Safe execution, retry with exponential backoff, and query logging
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential
)

from .config import DatabaseConfig
from .constants import (
    DEFAULT_BACKOFF_MULTIPLIER, DEFAULT_INITIAL_DELAY, DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES, SLOW_QUERY_THRESHOLD
)
from .exceptions import classify_database_error, is_retryable_error

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class RetryOptions:
    """Backoff policy for retry_execute (delays in seconds)"""
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER

    def __post_init__(self):
        """Validate retry options"""
        if self.max_retries < 0:
            raise ValueError("Max retries cannot be negative")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Delays cannot be negative")
        if self.backoff_multiplier < 1:
            raise ValueError("Backoff multiplier must be at least 1")

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "RetryOptions":
        return cls(
            max_retries=config.max_retries,
            initial_delay=config.initial_delay,
            max_delay=config.max_delay,
            backoff_multiplier=config.backoff_multiplier,
        )


async def safe_execute(operation: Operation) -> Any:
    """
    Run an operation, converting any failure into a typed DatabaseError

    Already typed errors pass through unchanged. Nothing is swallowed.
    """
    try:
        return await operation()
    except Exception as e:
        classified = classify_database_error(e)
        if classified is e:
            raise
        raise classified from e


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    wait_time = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Retryable {error.kind.value} error, "
        f"retrying in {wait_time:.2f}s "
        f"(attempt {retry_state.attempt_number}): {error}"
    )


async def retry_execute(
    operation: Operation,
    options: Optional[RetryOptions] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
) -> Any:
    """
    Run an operation with exponential backoff on transient failures

    Validation, not-found and duplicate errors are raised on first
    occurrence. Other failures are retried up to ``max_retries`` times,
    waiting ``initial_delay * backoff_multiplier ** n`` capped at
    ``max_delay`` between attempts.

    Args:
        operation: Zero-argument coroutine function
        options: Backoff policy, defaults to RetryOptions()
        sleep: Awaitable sleep used between attempts

    Returns:
        The operation's result

    Raises:
        DatabaseError: The classified error of the last attempt
    """
    opts = options or RetryOptions()
    retrying = AsyncRetrying(
        stop=stop_after_attempt(opts.max_retries + 1),
        wait=wait_exponential(
            multiplier=opts.initial_delay,
            max=opts.max_delay,
            exp_base=opts.backoff_multiplier,
        ),
        retry=retry_if_exception(is_retryable_error),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    return await retrying(safe_execute, operation)


def retry_on_transient_error(options: Optional[RetryOptions] = None):
    """
    Retry decorator for coroutine functions

    Args:
        options: Backoff policy passed to retry_execute
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"{func.__name__} must be a coroutine function")

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            return await retry_execute(lambda: func(*args, **kwargs), options)

        return async_wrapper

    return decorator


def log_query_execution(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Log SQL execution time and failures

    The first string argument is treated as the SQL text. A
    ``slow_query_threshold`` attribute on the bound instance overrides the
    default threshold.
    """
    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.time()
        sql = next((arg for arg in args if isinstance(arg, str)), func.__name__)
        threshold = getattr(args[0], "slow_query_threshold", SLOW_QUERY_THRESHOLD) if args else SLOW_QUERY_THRESHOLD

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            elapsed = time.time() - start_time
            logger.error(f"Query failed after {elapsed:.3f}s: {sql[:100]}: {e}")
            raise

        elapsed = time.time() - start_time
        if elapsed > threshold:
            logger.warning(f"Slow query executed in {elapsed:.3f}s: {sql[:100]}")
        else:
            logger.debug(f"Query executed in {elapsed:.3f}s: {sql[:100]}")
        return result

    return async_wrapper
