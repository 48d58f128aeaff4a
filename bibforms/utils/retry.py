"""
Retry helpers for Supabase access.

retry_supabase_query covers transient connection errors ("Connection reset by
peer") on a single query. poll_until_found covers read-after-write lag: the
query succeeds but the row written a moment ago is not visible yet.
"""
import asyncio
import time
import logging
from typing import Awaitable, Callable, Any, Optional, Tuple, TypeVar

from bibforms.exceptions import TransientUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_DELAY = 4.0


def _is_connection_reset(error: Exception) -> bool:
    error_str = str(error).lower()
    return (
        isinstance(error, ConnectionResetError)
        or "connection reset" in error_str
        or "errno 104" in error_str
    )


def retry_supabase_query(query_func: Callable[[], T], max_retries: int = 3, base_delay: float = 0.5) -> T:
    """
    Execute a Supabase query with retry logic for transient errors.

    Usage:
        result = retry_supabase_query(
            lambda: client.table("forms").select("*").execute()
        )

    Args:
        query_func: A callable that executes the Supabase query
        max_retries: Maximum number of retry attempts
        base_delay: First backoff delay in seconds, doubled on every retry

    Returns:
        The query result
    """
    for attempt in range(max_retries + 1):
        try:
            return query_func()
        except Exception as e:
            if not _is_connection_reset(e) or attempt >= max_retries:
                raise
            delay = min(base_delay * (2 ** attempt), MAX_DELAY)
            logger.warning(
                f"Supabase connection reset, retry {attempt + 1}/{max_retries}. "
                f"Waiting {delay}s..."
            )
            time.sleep(delay)

    raise RuntimeError("unreachable")


async def poll_until_found(
    fetch: Callable[[], Awaitable[Optional[T]]],
    max_attempts: int,
    interval: float,
    label: str = "record",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Tuple[T, int]:
    """
    Call fetch until it returns something other than None.

    Fixed-interval polling: one read per attempt, `interval` seconds between
    reads and no wait after the last one.

    Args:
        fetch: Coroutine function returning the row or None
        max_attempts: Total number of reads allowed
        interval: Seconds to wait between two reads
        label: Name used in log lines and the error message
        sleep: Awaitable sleep, swappable in tests

    Returns:
        Tuple of (row, number of reads performed)

    Raises:
        TransientUnavailable: if every read came back empty
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        result = await fetch()
        if result is not None:
            return result, attempt

        logger.info(f"Attempt {attempt}/{max_attempts} - {label} not available yet")
        if attempt < max_attempts:
            await sleep(interval)

    raise TransientUnavailable(
        f"{label} not available after {max_attempts} attempts",
        attempts=max_attempts
    )
