"""Request-scoped errors and the default error handler.

Every error response rendered by ``default_error_handler`` uses the same
envelope:
    {
        "code": "error_code",
        "message": "Human-readable message",
        "details": null,
        "request_id": "uuid"
    }
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from weblayer.request import WebRequest

logger = logging.getLogger(__name__)

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_REQUEST_ENTITY_TOO_LARGE = 413
STATUS_EXPECTATION_FAILED = 417
STATUS_INTERNAL_SERVER_ERROR = 500


class WebError(Exception):
    code = "web_error"
    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class FormError(WebError):
    code = "form_invalid"
    message = "Error reading or parsing form."


class RequestEntityTooLarge(FormError):
    code = "request_entity_too_large"
    message = "Request body exceeds the configured limit."


class XSRFError(WebError):
    code = "xsrf_invalid"
    message = "xsrf token rejected"


class MissingXSRFToken(XSRFError):
    code = "xsrf_missing"
    message = "missing xsrf token"


class BadXSRFToken(XSRFError):
    code = "xsrf_bad"
    message = "bad xsrf token"


class RandomSourceError(RuntimeError):
    """The secure random source failed; tokens can no longer be issued."""


def _error_payload(
    code: str, message: str, details: object, request_id: str
) -> dict:
    return {
        "code": code,
        "message": message,
        "details": details,
        "request_id": request_id,
    }


async def default_error_handler(
    request: WebRequest, status: int, exc: Exception
) -> None:
    if isinstance(exc, WebError):
        code, message = exc.code, exc.message
    elif status >= 500:
        code, message = "internal_error", "Internal server error"
    else:
        code, message = f"http_{status}", "Request failed"
    extra = {
        "request_id": request.request_id,
        "method": request.method,
        "path": request.url.path,
        "status": status,
        "reason": code,
    }
    if status >= 500:
        logger.error("request_error", extra=extra)
        # Internal details never reach the client.
        message = "Internal server error"
    else:
        logger.info("request_error", extra=extra)
    response = JSONResponse(
        status_code=status,
        content=_error_payload(code, message, None, request.request_id),
    )
    await request.send_response(response)
