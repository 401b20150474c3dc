"""Mutable per-request record shared by the handler chain.

A ``WebRequest`` lives for a single ASGI ``http`` call. Handlers may rewrite
its attributes in place (remote address, URL scheme, parameters, responder,
error handler) before delegating downstream.
"""

from __future__ import annotations

import uuid
from urllib.parse import parse_qsl

from starlette.datastructures import URL, Headers, MultiDict, MutableHeaders
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from weblayer.cookies import parse_cookies
from weblayer.errors import FormError, RequestEntityTooLarge, default_error_handler
from weblayer.handlers import ErrorHandler
from weblayer.headers import (
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_COOKIE,
    HEADER_X_REQUEST_ID,
)
from weblayer.responders import ASGIResponder, Responder, ResponseBody

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class WebRequest:
    def __init__(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.scope = scope
        self._request = Request(scope, receive)
        self.method: str = scope["method"]
        self.url = URL(scope=scope)
        self.header = Headers(scope=scope)
        client = scope.get("client")
        self.remote_addr: str = client[0] if client else ""
        self.cookie = parse_cookies(self.header.getlist(HEADER_COOKIE))
        self.param = MultiDict(
            parse_qsl(
                scope.get("query_string", b"").decode("latin-1"),
                keep_blank_values=True,
            )
        )
        self.request_id: str = self.header.get(HEADER_X_REQUEST_ID) or str(
            uuid.uuid4()
        )
        self.root_responder = ASGIResponder(send)
        self.responder: Responder = self.root_responder
        self.error_handler: ErrorHandler = error_handler or default_error_handler
        self._form_parsed = False

    async def parse_form(self, max_len: int) -> None:
        """Append url-encoded body parameters to ``param``.

        Bodies of other content types are left unread. Raises
        ``RequestEntityTooLarge`` when the declared or received body exceeds
        ``max_len`` and ``FormError`` when the body cannot be read or decoded.
        """
        if self._form_parsed:
            return
        self._form_parsed = True

        content_type = self.header.get(HEADER_CONTENT_TYPE, "")
        if content_type.split(";", 1)[0].strip().lower() != FORM_CONTENT_TYPE:
            return

        declared = self.header.get(HEADER_CONTENT_LENGTH)
        if declared is not None:
            try:
                declared_len = int(declared)
            except ValueError:
                raise FormError("Invalid Content-Length header.") from None
            if declared_len > max_len:
                raise RequestEntityTooLarge()

        body = bytearray()
        try:
            async for chunk in self._request.stream():
                body.extend(chunk)
                if len(body) > max_len:
                    raise RequestEntityTooLarge()
        except ClientDisconnect as exc:
            raise FormError() from exc

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormError() from exc
        for name, value in parse_qsl(text, keep_blank_values=True):
            self.param.append(name, value)

    def get_param(self, name: str, default: str = "") -> str:
        """First value of a request parameter; query values precede body values."""
        values = self.param.getlist(name)
        return values[0] if values else default

    async def respond(self, status: int, headers: MutableHeaders) -> ResponseBody:
        return await self.responder.respond(status, headers)

    async def send_response(self, response: Response) -> None:
        """Emit a fully rendered Starlette response through the responder chain."""
        headers = MutableHeaders(raw=list(response.raw_headers))
        body = await self.respond(response.status_code, headers)
        if self.method != "HEAD":
            await body.write(response.body)
        await body.close()

    async def error(self, status: int, exc: Exception) -> None:
        await self.error_handler(self, status, exc)
