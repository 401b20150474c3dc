"""ASGI entry point running a ``Handler`` chain per HTTP request."""

from __future__ import annotations

import logging
import os
import time

from starlette.datastructures import MutableHeaders
from starlette.types import Receive, Scope, Send

from weblayer.config import Settings, validate_settings
from weblayer.errors import STATUS_INTERNAL_SERVER_ERROR, WebError
from weblayer.handlers import ErrorHandler, Handler
from weblayer.headers import HEADER_X_REQUEST_ID
from weblayer.request import WebRequest
from weblayer.responders import filter_respond

logger = logging.getLogger(__name__)


class WebApp:
    def __init__(
        self,
        handler: Handler,
        settings: Settings | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.handler = handler
        self.settings = settings
        self.error_handler = error_handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            await self._serve_http(scope, receive, send)
        elif scope["type"] == "lifespan":
            await self._lifespan(receive, send)
        else:
            raise RuntimeError(f"Unsupported scope type: {scope['type']}")

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                if self.settings is not None:
                    for w in validate_settings(self.settings):
                        logger.warning("Config warning: %s", w)
                logger.info("Application started (pid=%s)", os.getpid())
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                logger.info("Application shutting down")
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _serve_http(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = WebRequest(scope, receive, send, error_handler=self.error_handler)
        root = request.root_responder
        status_code = STATUS_INTERNAL_SERVER_ERROR

        def record_status(status: int, headers: MutableHeaders) -> tuple[int, MutableHeaders]:
            nonlocal status_code
            status_code = status
            headers[HEADER_X_REQUEST_ID] = request.request_id
            return status, headers

        # Installed first so it sees the final status after every other filter.
        filter_respond(request, record_status)
        start = time.monotonic()
        try:
            await self.handler(request)
            if not root.started:
                await request.error(
                    STATUS_INTERNAL_SERVER_ERROR,
                    WebError("Handler did not send a response"),
                )
        except Exception:
            logger.exception(
                "request_failed",
                extra={
                    "request_id": request.request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "remote_addr": request.remote_addr,
                    "duration_ms": round((time.monotonic() - start) * 1000.0, 2),
                },
            )
            raise
        logger.info(
            "request_completed",
            extra={
                "request_id": request.request_id,
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "remote_addr": request.remote_addr,
                "scheme": request.url.scheme,
                "duration_ms": round((time.monotonic() - start) * 1000.0, 2),
            },
        )
