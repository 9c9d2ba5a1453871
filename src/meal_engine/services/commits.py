"""Optimistic commit loop shared by the write services."""

import logging
from collections.abc import Callable
from typing import TypeVar

from meal_engine.domain.errors import (
    CommitRetriesExhausted,
    ConcurrencyConflict,
    IntegrityViolation,
)

logger = logging.getLogger(__name__)
integrity_logger = logging.getLogger("meal_engine.integrity")

DEFAULT_MAX_ATTEMPTS = 3

T = TypeVar("T")


def commit_with_retry(
    attempt: Callable[[], T],
    operation: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """Run ``attempt`` until its commit stops conflicting.

    Each attempt must re-read everything it changes. Integrity violations are
    reported on the alerting logger and propagate unchanged.
    """
    last_conflict: ConcurrencyConflict | None = None
    for number in range(1, max_attempts + 1):
        try:
            return attempt()
        except ConcurrencyConflict as exc:
            last_conflict = exc
            logger.info(
                "Conflict during %s (attempt %s of %s): %s",
                operation,
                number,
                max_attempts,
                exc,
            )
        except IntegrityViolation as exc:
            integrity_logger.critical(
                "Integrity violation during %s: %s", operation, exc
            )
            raise
    raise CommitRetriesExhausted(
        f"{operation} kept conflicting after {max_attempts} attempts"
    ) from last_conflict
