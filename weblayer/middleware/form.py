"""Form parsing with optional XSRF protection.

``FormHandler`` parses url-encoded request bodies into the request
parameters before running the XSRF guard and the downstream handler. Bodies
larger than ``max_request_body_len`` are answered with 413, or 417 when the
client sent an ``Expect`` header; other parse failures get 400.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable

from weblayer.errors import (
    STATUS_BAD_REQUEST,
    STATUS_EXPECTATION_FAILED,
    STATUS_REQUEST_ENTITY_TOO_LARGE,
    FormError,
    RequestEntityTooLarge,
)
from weblayer.handlers import Handler
from weblayer.headers import HEADER_EXPECT
from weblayer.middleware.xsrf import XSRFGuard
from weblayer.request import WebRequest
from weblayer.tokens import generate_token as default_generate_token

logger = logging.getLogger(__name__)


def _form_error_status(request: WebRequest, exc: FormError) -> int:
    if isinstance(exc, RequestEntityTooLarge):
        if request.header.get(HEADER_EXPECT, ""):
            return STATUS_EXPECTATION_FAILED
        return STATUS_REQUEST_ENTITY_TOO_LARGE
    return STATUS_BAD_REQUEST


class FormHandler:
    def __init__(
        self,
        max_request_body_len: int,
        check_xsrf: bool,
        handler: Handler,
        generate_token: Callable[[], str] | None = None,
    ) -> None:
        self.max_request_body_len = max_request_body_len
        self.handler = handler
        self.xsrf_guard = XSRFGuard(
            enabled=check_xsrf,
            generate_token=generate_token or default_generate_token,
        )

    @property
    def check_xsrf(self) -> bool:
        return self.xsrf_guard.enabled

    async def __call__(self, request: WebRequest) -> None:
        try:
            await request.parse_form(self.max_request_body_len)
        except FormError as exc:
            status = _form_error_status(request, exc)
            logger.info(
                "Form rejected (%s): %s",
                status,
                exc.message,
                extra={"request_id": request.request_id},
            )
            await request.error(status, exc)
            return

        if not await self.xsrf_guard(request):
            return

        await self.handler(request)


def process_form(
    max_request_body_len: int, check_xsrf: bool, handler: Handler
) -> FormHandler:
    """Deprecated: use ``FormHandler``."""
    warnings.warn(
        "process_form is deprecated; use FormHandler",
        DeprecationWarning,
        stacklevel=2,
    )
    return FormHandler(max_request_body_len, check_xsrf, handler)
