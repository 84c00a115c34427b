# expense_tracker/core/errors.py
"""Domain exceptions and the FastAPI handlers that turn them into JSON errors.

Receipt failures are split so the client can tell "couldn't read this receipt"
(InvalidReceiptDataError) apart from "service unavailable" (ReceiptServiceError).
"""
import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette import status

logger = logging.getLogger(__name__)


class ReceiptError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "receipt_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFileTypeError(ReceiptError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    error_code = "unsupported_file_type"


class FileTooLargeError(ReceiptError):
    status_code = 413
    error_code = "file_too_large"


class ReceiptServiceError(ReceiptError):
    """The AI completion call failed (transport, auth, non-2xx)."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "service_unavailable"


class InvalidReceiptDataError(ReceiptError):
    """The model answered, but not with a usable receipt object."""

    status_code = 422
    error_code = "invalid_receipt_data"


class EmptyAIResponseError(InvalidReceiptDataError):
    error_code = "empty_response"


class MalformedAIResponseError(InvalidReceiptDataError):
    error_code = "unparseable_response"


def receipt_error_handler(request: Request, exc: ReceiptError):  # type: ignore
    logger.warning("receipt processing failed (%s): %s", exc.error_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": exc.message},
    )


def database_unavailable_handler(request: Request, exc: OperationalError):  # type: ignore
    logger.error("database unavailable for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "database_unavailable",
            "detail": "The database is temporarily unavailable. Please try again.",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": jsonable_encoder(exc.errors())},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "detail": "An unexpected error occurred."},
    )
