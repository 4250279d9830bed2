"""Retry utilities for storage operations.

Delivery log writes are retried with exponential backoff when the
persistence collaborator reports a transient StorageError.
"""

from __future__ import annotations

import logging

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from formpulse.exceptions import StorageError

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts with context."""
    logger.warning(
        "Retrying storage operation",
        extra={
            "attempt": retry_state.attempt_number,
            "fn_name": retry_state.fn.__name__ if retry_state.fn else "unknown",
            "exception": str(retry_state.outcome.exception()) if retry_state.outcome else None,
        },
    )


# Only StorageError is retried; anything else is a bug and surfaces at once.
storage_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type(StorageError),
    before_sleep=_log_retry,
    reraise=True,
)
