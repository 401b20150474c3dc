"""XSRF protection using a double-submit cookie.

The expected token is always taken from the request's ``xsrf`` cookie; no
token is stored on the server. When the cookie is missing or malformed a new
token is minted and a response filter arranges for it to be set on whatever
response is eventually sent, including error responses.

The submitted token is read from the ``xsrf`` request parameter, falling
back to the ``X-XSRFToken`` header for clients that cannot post a form
field. POST, PUT and DELETE requests with a mismatched token are rejected
with 404. Other methods pass through. In every case the ``xsrf`` parameter
seen downstream holds the expected token, so rendered forms carry a valid
value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from hmac import compare_digest

from starlette.datastructures import MutableHeaders

from weblayer.cookies import Cookie
from weblayer.errors import STATUS_NOT_FOUND, BadXSRFToken, MissingXSRFToken
from weblayer.headers import HEADER_SET_COOKIE, HEADER_X_XSRF_TOKEN
from weblayer.request import WebRequest
from weblayer.responders import filter_respond
from weblayer.tokens import XSRF_TOKEN_LEN
from weblayer.tokens import generate_token as default_generate_token

logger = logging.getLogger(__name__)

XSRF_COOKIE_NAME = "xsrf"
XSRF_PARAM_NAME = "xsrf"

MUTATING_METHODS = frozenset({"POST", "PUT", "DELETE"})


class XSRFGuard:
    def __init__(
        self,
        enabled: bool = True,
        generate_token: Callable[[], str] = default_generate_token,
        token_len: int = XSRF_TOKEN_LEN,
    ) -> None:
        self.enabled = enabled
        self.generate_token = generate_token
        self.token_len = token_len

    def _mint(self, request: WebRequest) -> str:
        token = self.generate_token()
        cookie = Cookie(
            XSRF_COOKIE_NAME, token, secure=request.url.scheme == "https"
        ).serialize()

        def set_cookie(status: int, headers: MutableHeaders) -> tuple[int, MutableHeaders]:
            headers.append(HEADER_SET_COOKIE, cookie)
            return status, headers

        filter_respond(request, set_cookie)
        logger.debug("Minted xsrf token", extra={"request_id": request.request_id})
        return token

    async def __call__(self, request: WebRequest) -> bool:
        """Return True when the request may proceed downstream.

        A rejected request has already been answered through its error
        handler.
        """
        if not self.enabled:
            return True

        expected = request.cookie.get(XSRF_COOKIE_NAME, "")
        if len(expected) != self.token_len:
            expected = self._mint(request)

        actual = request.get_param(XSRF_PARAM_NAME)
        if not actual:
            actual = request.header.get(HEADER_X_XSRF_TOKEN, "")

        matched = compare_digest(expected.encode(), actual.encode())
        request.param[XSRF_PARAM_NAME] = expected
        if matched or request.method not in MUTATING_METHODS:
            return True

        exc = MissingXSRFToken() if not actual else BadXSRFToken()
        logger.warning(
            "xsrf_rejected",
            extra={
                "request_id": request.request_id,
                "method": request.method,
                "path": request.url.path,
                "remote_addr": request.remote_addr,
                "reason": exc.code,
            },
        )
        await request.error(STATUS_NOT_FOUND, exc)
        return False
