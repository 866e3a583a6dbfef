"""
Retry — policies for the calls the storefront retries.

Retrying itself is combinators.retry; this module only decides which
failures are worth another attempt and builds the policies:

    from combinators import retry as C_retry
    from storefront import retry as R

    result = await C_retry(api.fetch_cart(), policy=R.fixed(3, 1.0))

Each attempt re-runs the LazyCoroResult, so every attempt is a fresh request.
"""

from __future__ import annotations

import logging

from combinators import RetryPolicy

from storefront.errors import ApiError

logger = logging.getLogger(__name__)

# Upper bound for a single exponential backoff delay, in seconds
MAX_BACKOFF_DELAY = 60.0


def retry_transient(err: object) -> bool:
    """
    Default predicate.

    ApiErrors retry only when transient (NETWORK, SERVER); a 4xx will not
    change on a second attempt. Any other error type is retried.
    """
    retryable = err.is_retryable if isinstance(err, ApiError) else True
    if retryable:
        logger.warning("Transient failure, retrying: %s", err)
    return retryable


def retry_always(err: object) -> bool:
    logger.warning("Failure, retrying: %s", err)
    return True


def fixed(attempts: int = 3, delay: float = 1.0, retry_on=retry_transient) -> RetryPolicy:
    """attempts counts the first call: attempts=3 is one call plus two retries."""
    return RetryPolicy.fixed(attempts, delay, retry_on=retry_on)


def exponential(
    attempts: int,
    delay: float,
    multiplier: float = 2.0,
    retry_on=retry_transient,
) -> RetryPolicy:
    """First retry waits delay; each later one waits multiplier times longer."""
    return RetryPolicy.exponential(
        attempts,
        initial=delay,
        multiplier=multiplier,
        max_delay=max(delay, MAX_BACKOFF_DELAY),
        retry_on=retry_on,
    )


def backoff(attempts: int, delay: float, multiplier: float = 1.0) -> RetryPolicy:
    """Fixed policy for multiplier 1.0, exponential above it."""
    if multiplier == 1.0:
        return fixed(attempts, delay)
    return exponential(attempts, delay, multiplier)


# Cart fetch and admin notify: 3 attempts, 1s apart, no backoff
FIXED_3X1S = fixed(3, 1.0)

# Single attempt, used where a call must fail fast
NO_RETRY = fixed(1, 0.0)


__all__ = (
    "RetryPolicy",
    "MAX_BACKOFF_DELAY",
    "retry_transient",
    "retry_always",
    "fixed",
    "exponential",
    "backoff",
    "FIXED_3X1S",
    "NO_RETRY",
)
