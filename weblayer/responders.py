"""Responders and the response filter chain.

A responder turns ``(status, headers)`` into a started response and hands
back a ``ResponseBody`` for the payload. Middleware that needs to rewrite the
status or headers of whatever response the downstream handler eventually
produces calls ``filter_respond``; the filter runs only when the response is
emitted. Each installation wraps the responder that was active before it, so
the last filter installed sees the response first.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from starlette.datastructures import MutableHeaders
from starlette.types import Send

if TYPE_CHECKING:
    from weblayer.request import WebRequest

ResponseFilter = Callable[[int, MutableHeaders], tuple[int, MutableHeaders]]


class ResponseBody:
    def __init__(self, send: Send) -> None:
        self._send = send
        self.closed = False

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise RuntimeError("Response body already closed")
        if data:
            await self._send(
                {"type": "http.response.body", "body": data, "more_body": True}
            )

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


class Responder(Protocol):
    async def respond(self, status: int, headers: MutableHeaders) -> ResponseBody:
        ...


class ASGIResponder:
    """Root responder writing directly to the ASGI ``send`` channel."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self.started = False
        self.status: int | None = None

    async def respond(self, status: int, headers: MutableHeaders) -> ResponseBody:
        if self.started:
            raise RuntimeError("Response already started")
        self.started = True
        self.status = status
        await self._send(
            {"type": "http.response.start", "status": status, "headers": headers.raw}
        )
        return ResponseBody(self._send)


class FilterResponder:
    def __init__(self, responder: Responder, response_filter: ResponseFilter) -> None:
        self.responder = responder
        self.response_filter = response_filter

    async def respond(self, status: int, headers: MutableHeaders) -> ResponseBody:
        status, headers = self.response_filter(status, headers)
        return await self.responder.respond(status, headers)


def filter_respond(request: WebRequest, response_filter: ResponseFilter) -> None:
    """Route the request's future response through ``response_filter``."""
    request.responder = FilterResponder(request.responder, response_filter)
