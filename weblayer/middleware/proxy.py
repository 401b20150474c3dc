"""Trust client address and scheme headers set by a reverse proxy.

Only enable this behind a proxy that overwrites the configured headers on
every request, e.g. for nginx:

    location / {
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Scheme $scheme;
        proxy_set_header Host $http_host;
        proxy_pass http://127.0.0.1:8001;
    }

and set PROXY_ADDR_HEADER=X-Real-IP, PROXY_SCHEME_HEADER=X-Scheme.
"""

from __future__ import annotations

import logging

from weblayer.handlers import Handler
from weblayer.request import WebRequest

logger = logging.getLogger(__name__)


class ProxyHeaderHandler:
    def __init__(self, addr_name: str, scheme_name: str, handler: Handler) -> None:
        self.addr_name = addr_name
        self.scheme_name = scheme_name
        self.handler = handler

    async def __call__(self, request: WebRequest) -> None:
        if self.addr_name:
            addr = request.header.get(self.addr_name, "")
            if addr:
                request.remote_addr = addr
        if self.scheme_name:
            scheme = request.header.get(self.scheme_name, "")
            if scheme:
                request.url = request.url.replace(scheme=scheme)
        await self.handler(request)
