"""Shared retry decorator for document store file access.

Reads and writes against an NDJSON store can fail transiently (network
mounts, files briefly locked by a sync client). Those ``OSError`` s are
retried; errors that another attempt cannot fix are raised immediately.
"""

from __future__ import annotations

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from portable_blocks.config import (
    STORE_MAX_RETRIES,
    STORE_RETRY_MAX_SECONDS,
    STORE_RETRY_MIN_SECONDS,
)

# tenacity's before_sleep_log requires a stdlib logger, NOT structlog.
_tenacity_logger = logging.getLogger("portable_blocks.retry")

_PERMANENT_ERRORS: tuple[type[OSError], ...] = (
    FileNotFoundError,
    PermissionError,
    IsADirectoryError,
    NotADirectoryError,
)


def _is_transient_io_error(exc: BaseException) -> bool:
    """Check if an exception is an I/O error worth retrying.

    Args:
        exc: The exception to inspect.

    Returns:
        True for ``OSError`` subclasses other than missing paths and
        permission problems.
    """
    return isinstance(exc, OSError) and not isinstance(exc, _PERMANENT_ERRORS)


store_retry = retry(
    retry=retry_if_exception(_is_transient_io_error),
    stop=stop_after_attempt(STORE_MAX_RETRIES),
    wait=wait_random_exponential(min=STORE_RETRY_MIN_SECONDS, max=STORE_RETRY_MAX_SECONDS),
    before_sleep=before_sleep_log(_tenacity_logger, logging.WARNING),
    reraise=True,
)
"""Retry decorator for store reads and writes.

Three attempts with random exponential backoff. ``reraise=True`` surfaces
the last ``OSError`` instead of ``tenacity.RetryError`` so callers can wrap
it in ``StoreError``.
"""
