"""
Domain errors and the FastAPI exception handlers that translate them.

Service code raises BankAPIError without importing HTTP concepts. Every
error carries a kind from the closed ErrorKind set; STATUS_BY_KIND is the
only place where a kind is turned into an HTTP status code.

Response body:
    {"message": "..."}                     for every error
    {"message": "...", "details": [...]}   for validation errors, where each
                                           detail is {field, message, type}

Unexpected exceptions are logged with their traceback and reported to the
caller as a generic message. Internal details never reach the response.
"""

import enum
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    UNAUTHORISED = "unauthorised"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    BALANCE_LIMIT = "balance_limit"
    COMMIT_FAILURE = "commit_failure"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORISED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_FUNDS: 422,  # Unprocessable Entity: valid request, business rule rejects it
    ErrorKind.BALANCE_LIMIT: 422,
    ErrorKind.COMMIT_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Kinds whose message is replaced by the generic one on the way out
_HIDDEN_KINDS = {ErrorKind.COMMIT_FAILURE}


class BankAPIError(Exception):
    """
    A domain error tagged with its kind.

    Attributes:
        kind: One of ErrorKind; decides the HTTP status.
        message: Human-readable message returned to the caller.
        details: Per-field violations (validation errors only).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: list[dict[str, str]] | None = None,
    ):
        self.kind = kind
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_content(self) -> dict[str, Any]:
        if self.kind in _HIDDEN_KINDS:
            return {"message": UNEXPECTED_ERROR_MESSAGE}
        content: dict[str, Any] = {"message": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


# ---------------------------------------------------------------------------
# Constructors for each kind
# ---------------------------------------------------------------------------

def validation_error(
    message: str = "Validation failed",
    details: list[dict[str, str]] | None = None,
) -> BankAPIError:
    return BankAPIError(ErrorKind.VALIDATION, message, details)


def unauthorised_error(message: str = "Access token is missing or invalid") -> BankAPIError:
    return BankAPIError(ErrorKind.UNAUTHORISED, message)


def forbidden_error(message: str = "Access forbidden") -> BankAPIError:
    return BankAPIError(ErrorKind.FORBIDDEN, message)


def not_found_error(message: str = "Resource not found") -> BankAPIError:
    return BankAPIError(ErrorKind.NOT_FOUND, message)


def conflict_error(message: str) -> BankAPIError:
    return BankAPIError(ErrorKind.CONFLICT, message)


def insufficient_funds_error() -> BankAPIError:
    return BankAPIError(
        ErrorKind.INSUFFICIENT_FUNDS,
        "Insufficient funds to process transaction",
    )


def balance_limit_error() -> BankAPIError:
    return BankAPIError(
        ErrorKind.BALANCE_LIMIT,
        "Transaction would exceed the maximum account balance",
    )


def commit_failure_error(message: str = "Failed to commit transaction") -> BankAPIError:
    return BankAPIError(ErrorKind.COMMIT_FAILURE, message)


def field_violation(field: str, message: str, violation_type: str) -> dict[str, str]:
    """One entry of a validation error's details list."""
    return {"field": field, "message": message, "type": violation_type}


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the error boundary with the FastAPI application.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        if exc.kind in _HIDDEN_KINDS:
            logger.error(
                "Request failed: %s",
                exc.message,
                exc_info=exc,
                extra={"path": request.url.path, "error_kind": exc.kind.value},
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # FastAPI prefixes each location with its source ("body", "path", ...)
        details = [
            field_violation(
                ".".join(str(part) for part in error["loc"][1:]),
                error["msg"],
                error["type"],
            )
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation failed", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": UNEXPECTED_ERROR_MESSAGE},
        )
