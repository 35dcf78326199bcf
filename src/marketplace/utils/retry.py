"""Bounded retry for operations that can lose a race."""

from collections.abc import Callable
from typing import TypeVar

import structlog

from marketplace.config import max_conflict_retries
from marketplace.errors import StorageConflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def retry_on_conflict(operation: Callable[[], T], *, label: str, attempts: int | None = None) -> T:
    """Run ``operation``, re-running it after each ``StorageConflict``.

    Every other exception propagates on first occurrence. When the attempts
    are used up the last conflict is re-raised for the caller to surface as a
    retryable failure.
    """
    limit = attempts or max_conflict_retries()
    for attempt in range(1, limit + 1):
        try:
            return operation()
        except StorageConflict as exc:
            if attempt == limit:
                logger.error("Storage conflict retries exhausted", operation=label, attempts=limit)
                raise
            logger.warning(
                "Storage conflict, retrying",
                operation=label,
                attempt=attempt,
                reason=exc.message,
            )
    raise AssertionError("unreachable")
