"""Translation of domain failures into HTTP responses."""

import logging
from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meal_engine.domain.errors import (
    CommitRetriesExhausted,
    ErrorKind,
    Failure,
    IntegrityViolation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_TRANSITION: 409,
    ErrorKind.QUOTA_EXCEEDED: 409,
    ErrorKind.CUTOFF_PASSED: 409,
    ErrorKind.PAST_DATE: 409,
    ErrorKind.INTEGRITY_VIOLATION: 500,
}


class FailureResponse(Exception):
    """Carries a business failure out of a route handler."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message)
        self.failure = failure


def unwrap(result: T | Failure) -> T:
    """Return a successful result or abort the request with its failure."""
    if isinstance(result, Failure):
        raise FailureResponse(result)
    return result


def register_error_handlers(app: FastAPI) -> None:
    """Render failures as ``{"code": ..., "message": ...}`` bodies."""

    @app.exception_handler(FailureResponse)
    async def handle_failure(_request: Request, exc: FailureResponse) -> JSONResponse:
        failure = exc.failure
        logger.info("Rejected request: %s %s", failure.code, failure.message)
        return JSONResponse(
            status_code=STATUS_BY_KIND[failure.kind],
            content={"code": failure.code, "message": failure.message},
        )

    @app.exception_handler(IntegrityViolation)
    async def handle_integrity(
        _request: Request, exc: IntegrityViolation
    ) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"code": exc.code, "message": str(exc)},
        )

    @app.exception_handler(CommitRetriesExhausted)
    async def handle_retries(
        _request: Request, exc: CommitRetriesExhausted
    ) -> JSONResponse:
        logger.warning("Giving up after repeated conflicts: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"code": "CONCURRENT_MODIFICATION", "message": str(exc)},
        )
