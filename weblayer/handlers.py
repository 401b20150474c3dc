from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from weblayer.request import WebRequest

Handler = Callable[["WebRequest"], Awaitable[None]]
ErrorHandler = Callable[["WebRequest", int, Exception], Awaitable[None]]


def set_error_handler(error_handler: ErrorHandler, handler: Handler) -> Handler:
    """Return a handler that installs ``error_handler`` on each request."""

    async def serve(request: WebRequest) -> None:
        request.error_handler = error_handler
        await handler(request)

    return serve
