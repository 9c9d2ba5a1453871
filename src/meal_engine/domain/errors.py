"""Error kinds for subscription and order operations."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Machine-readable failure codes."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    CUTOFF_PASSED = "CUTOFF_PASSED"
    PAST_DATE = "PAST_DATE"
    VALIDATION = "VALIDATION"
    INTEGRITY_VIOLATION = "INTEGRITY_VIOLATION"


@dataclass(frozen=True)
class Failure:
    """A rejected business operation, returned instead of raised."""

    kind: ErrorKind
    message: str

    @property
    def code(self) -> str:
        """Return the machine-readable failure code."""
        return self.kind.value


def not_found(message: str) -> Failure:
    return Failure(ErrorKind.NOT_FOUND, message)


def invalid_transition(message: str) -> Failure:
    return Failure(ErrorKind.INVALID_TRANSITION, message)


def validation(message: str) -> Failure:
    return Failure(ErrorKind.VALIDATION, message)


class IntegrityViolation(RuntimeError):
    """Raised when committing would break a stored invariant."""

    kind = ErrorKind.INTEGRITY_VIOLATION

    @property
    def code(self) -> str:
        return self.kind.value


class ConcurrencyConflict(RuntimeError):
    """Raised by repositories when an optimistic check fails on commit."""


class CommitRetriesExhausted(RuntimeError):
    """Raised when a change set keeps conflicting after every retry."""
