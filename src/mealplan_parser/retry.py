"""Async retry with exponential backoff for recipe page fetches.

The fetcher never retries on its own; callers that want resilience wrap it
here. Only errors that say they are worth retrying (timeouts, connection
failures, HTTP 429 and 5xx) are retried, everything else propagates on the
first attempt.

Example:
    >>> from mealplan_parser.recipe_import import fetch_recipe_html
    >>> fetch = with_retry(max_attempts=3)(fetch_recipe_html)
    >>> html = await fetch("https://example.com/recipe")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from .exceptions import RecipeFetchError

if TYPE_CHECKING:
    from .config import ImportConfig

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def is_retryable(error: Exception) -> bool:
    """Check whether an error is a fetch failure flagged as retryable."""
    return isinstance(error, RecipeFetchError) and error.retryable


def with_retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    should_retry: Callable[[Exception], bool] = is_retryable,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator for async functions with exponential backoff retry.

    Args:
        max_attempts: Maximum number of attempts (including the first)
        initial_delay: Delay in seconds before the first retry
        max_delay: Maximum delay in seconds between retries
        exponential_base: Base for exponential backoff calculation
        should_retry: Predicate deciding whether a raised error is retried

    Returns:
        Decorated async function with retry logic

    Note:
        The delay between attempts follows: delay = min(initial * base^attempt, max)
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        # functools.partial objects carry no __name__
        name = getattr(func, "__name__", type(func).__name__)

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not should_retry(e):
                        raise
                    if attempt == max_attempts:
                        logger.error(f"All {max_attempts} attempts failed for {name}: {e}")
                        raise
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed for "
                        f"{name}: {e}. Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * exponential_base, max_delay)

            raise RuntimeError("Retry logic error: max_attempts must be at least 1")

        return wrapper

    return decorator


@dataclass
class RetryPolicy:
    """Retry behavior for fetches.

    Example:
        >>> policy = RetryPolicy.from_config(config)
        >>> fetch = policy.wrap(fetch_recipe_html)
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0

    @classmethod
    def from_config(cls, config: ImportConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.retry_attempts,
            initial_delay=config.initial_retry_delay,
            max_delay=config.max_retry_delay,
        )

    def wrap(self, func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        """Apply this policy to an async function."""
        return with_retry(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            exponential_base=self.exponential_base,
        )(func)
