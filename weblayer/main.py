from __future__ import annotations

import html
import logging
from collections.abc import Callable

from starlette.responses import HTMLResponse, JSONResponse

from weblayer.asgi import WebApp
from weblayer.config import Settings, settings
from weblayer.errors import STATUS_NOT_FOUND, WebError
from weblayer.handlers import Handler
from weblayer.logging import configure_logging
from weblayer.middleware.form import FormHandler
from weblayer.middleware.proxy import ProxyHeaderHandler
from weblayer.middleware.xsrf import XSRF_PARAM_NAME
from weblayer.request import WebRequest

logger = logging.getLogger(__name__)


def build_handler(
    s: Settings,
    handler: Handler,
    generate_token: Callable[[], str] | None = None,
) -> Handler:
    """Wrap ``handler`` with form parsing, XSRF checks and proxy trust.

    The proxy handler is outermost so the XSRF cookie sees the forwarded
    scheme.
    """
    wrapped: Handler = FormHandler(
        s.max_request_body_len,
        s.xsrf_check,
        handler,
        generate_token=generate_token,
    )
    if s.proxy_addr_header or s.proxy_scheme_header:
        wrapped = ProxyHeaderHandler(
            s.proxy_addr_header, s.proxy_scheme_header, wrapped
        )
    return wrapped


_FORM_PAGE = """<!doctype html>
<html>
  <body>
    <form method="post" action="/">
      <input type="hidden" name="{param}" value="{token}">
      <input type="text" name="message" value="">
      <button type="submit">Send</button>
    </form>
  </body>
</html>
"""


async def home(request: WebRequest) -> None:
    if request.method == "POST":
        message = request.get_param("message")
        logger.info("Form accepted", extra={"request_id": request.request_id})
        await request.send_response(JSONResponse({"status": "ok", "message": message}))
        return
    token = request.get_param(XSRF_PARAM_NAME)
    page = _FORM_PAGE.format(param=XSRF_PARAM_NAME, token=html.escape(token))
    await request.send_response(HTMLResponse(page))


async def health(request: WebRequest) -> None:
    """Liveness probe, always returns ok if the process is running."""
    await request.send_response(JSONResponse({"status": "ok"}))


_ROUTES: dict[str, Handler] = {
    "/": home,
    "/health": health,
}


async def router(request: WebRequest) -> None:
    route = _ROUTES.get(request.url.path)
    if route is None:
        await request.error(STATUS_NOT_FOUND, WebError("Not found"))
        return
    await route(request)


def create_app(s: Settings = settings) -> WebApp:
    return WebApp(build_handler(s, router), settings=s)


configure_logging(settings.log_level)
app = create_app()
