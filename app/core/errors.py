"""
Typed errors raised by the balance, booster and accrual services.

Services raise these; the HTTP layer translates them with core_error_handler.
"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CoreError(Exception):
    """Base error with a stable code and the HTTP status the API maps it to."""

    code = "ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class NotFoundError(CoreError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientBalanceError(CoreError):
    """A debit or negative delta would take the balance below zero."""

    code = "INSUFFICIENT_BALANCE"
    status_code = status.HTTP_409_CONFLICT


# Ledger callers know this condition as a negative-balance failure.
NegativeBalanceError = InsufficientBalanceError


class UnknownCatalogReferenceError(CoreError):
    """A persisted activation points at a booster id the catalog does not have."""

    code = "UNKNOWN_CATALOG_REFERENCE"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class PersistenceError(CoreError):
    code = "PERSISTENCE_ERROR"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ValidationError(CoreError):
    code = "VALIDATION_ERROR"
    status_code = 422


class InvalidTransitionError(CoreError):
    """Transaction status change out of a terminal state."""

    code = "INVALID_TRANSITION"
    status_code = status.HTTP_409_CONFLICT


class ConflictError(CoreError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )
