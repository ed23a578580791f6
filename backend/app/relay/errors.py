"""Error Mapper: every failure becomes a ``{success: false, message}`` body.

Upload rejections are client errors (400); anything else is reported as a
500 with a generic message while the details go to the server log.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.uploads.errors import FileTooLargeError, UnsupportedFileTypeError, UploadError

from .schemas import RelayResponse

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
INVALID_PAYLOAD_MESSAGE = "Invalid request payload."


def relay_response(success: bool, message: str, status_code: int = 200) -> JSONResponse:
    body = RelayResponse(success=success, message=message)
    return JSONResponse(body.model_dump(), status_code=status_code)


def error_response(exc: BaseException, fallback_message: str) -> JSONResponse:
    """Classify *exc* and build its JSON error response.

    Args:
        exc: The caught exception.
        fallback_message: Client-facing message for non-upload errors.
    """
    if isinstance(exc, FileTooLargeError):
        return relay_response(False, f"File size exceeds {exc.limit_mb} MB limit.", 400)
    if isinstance(exc, UnsupportedFileTypeError):
        return relay_response(False, str(exc), 400)
    if isinstance(exc, UploadError):
        return relay_response(False, f"File upload error: {exc}", 400)
    return relay_response(False, fallback_message, 500)


async def _upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
    logger.warning("Upload rejected on %s: %s", request.url.path, exc)
    return error_response(exc, UNEXPECTED_ERROR_MESSAGE)


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    logger.warning("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
    response = relay_response(False, str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Invalid payload on %s: %s", request.url.path, exc.errors())
    return relay_response(False, INVALID_PAYLOAD_MESSAGE, 400)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return error_response(exc, UNEXPECTED_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    """Install the relay's exception handlers on *app*."""
    app.add_exception_handler(UploadError, _upload_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
