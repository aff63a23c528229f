# ABOUTME: Retry policies built on tenacity for page loads and LLM calls
# ABOUTME: Page loads retry FetchError with backoff; LLM calls get rate limiting and error classification

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import anyio
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mathcomp_ingest.extraction.base import DocumentHandle, FetchError
from mathcomp_ingest.utils.logging import get_logger

if TYPE_CHECKING:
    from mathcomp_ingest.extraction.base import PageLoader

logger = get_logger(__name__)


class LLMAPIError(Exception):
    """Base exception for LLM API-related errors."""

    pass


class LLMRateLimitError(LLMAPIError):
    """Raised when API rate limit is exceeded."""

    pass


class LLMQuotaExceededError(LLMAPIError):
    """Raised when API quota is exceeded."""

    pass


class LLMTimeoutError(LLMAPIError):
    """Raised when API request times out."""

    pass


class LLMConnectionError(LLMAPIError):
    """Raised when connection to API fails."""

    pass


def _retry_logger(url: str) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning("Page load failed, retrying", url=url, attempt=retry_state.attempt_number, error=str(exc))

    return log


async def fetch_with_retry(
    loader: "PageLoader",
    url: str,
    attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 8.0,
) -> DocumentHandle:
    """Load a page, retrying only FetchError with exponential backoff.

    The last FetchError is re-raised once ``attempts`` loads have failed.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(FetchError),
        before_sleep=_retry_logger(url),
        reraise=True,
    ):
        with attempt:
            return await loader.load(url)

    raise FetchError(f"Gave up loading {url}")


# Global rate limiter state
_rate_limiter_state = {
    "calls_per_second": 1.0,
    "last_call_time": 0.0,
}


async def _apply_rate_limiting():
    """Space LLM calls at least 1/calls_per_second apart."""
    state = _rate_limiter_state

    if state["calls_per_second"] <= 0:
        return

    min_interval = 1.0 / state["calls_per_second"]
    time_since_last = time.time() - state["last_call_time"]

    if time_since_last < min_interval:
        sleep_time = min_interval - time_since_last
        logger.debug("Rate limiting", sleep_time=sleep_time)
        await anyio.sleep(sleep_time)

    state["last_call_time"] = time.time()


def _convert_exception(e: Exception) -> LLMAPIError:
    """Map a provider exception onto the LLMAPIError family by its message."""
    error_str = str(e).lower()

    if "rate limit" in error_str or "429" in error_str:
        return LLMRateLimitError(f"Rate limit exceeded: {e}")
    elif "quota" in error_str or "billing" in error_str:
        return LLMQuotaExceededError(f"API quota exceeded: {e}")
    elif "timeout" in error_str or "timed out" in error_str:
        return LLMTimeoutError(f"Request timeout: {e}")
    elif "connection" in error_str or "network" in error_str:
        return LLMConnectionError(f"Connection failed: {e}")
    else:
        return LLMAPIError(f"LLM API call failed: {e}")


def llm_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
    with_rate_limiting: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Retry transient LLM failures; quota and unknown errors fail immediately."""

    def decorator(func: Callable):
        async def wrapper(*args, **kwargs):
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
                retry=retry_if_exception_type((LLMRateLimitError, LLMTimeoutError, LLMConnectionError)),
                reraise=True,
            ):
                with attempt:
                    if with_rate_limiting:
                        await _apply_rate_limiting()
                    try:
                        return await func(*args, **kwargs)
                    except LLMAPIError:
                        raise
                    except Exception as e:
                        raise _convert_exception(e) from e

        return wrapper

    return decorator


def configure_llm_rate_limit(calls_per_second: float = 1.0) -> None:
    """Set the global LLM call rate; zero or less disables limiting."""
    _rate_limiter_state["calls_per_second"] = calls_per_second
    logger.debug("LLM rate limit configured", calls_per_second=calls_per_second)


def get_llm_retry_status() -> dict[str, Any]:
    """Get current status of the LLM rate limiter."""
    return {
        "rate_limiter": {
            "calls_per_second": _rate_limiter_state["calls_per_second"],
            "last_call_time": _rate_limiter_state["last_call_time"],
        },
    }
