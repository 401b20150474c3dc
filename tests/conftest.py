from __future__ import annotations

from collections.abc import Callable

import pytest
from starlette.responses import JSONResponse
from starlette.testclient import TestClient

from weblayer.asgi import WebApp
from weblayer.handlers import Handler
from weblayer.request import WebRequest


class FixedTokens:
    """Deterministic stand-in for the token generator."""

    def __init__(self, *tokens: str) -> None:
        self._tokens = list(tokens)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self._tokens.pop(0)


class RecordingHandler:
    """Downstream handler that records what it saw and answers 200."""

    def __init__(self) -> None:
        self.seen: list[dict] = []

    @property
    def called(self) -> bool:
        return bool(self.seen)

    async def __call__(self, request: WebRequest) -> None:
        self.seen.append(
            {
                "method": request.method,
                "xsrf": request.param.get("xsrf"),
                "params": request.param.multi_items(),
                "remote_addr": request.remote_addr,
                "scheme": request.url.scheme,
            }
        )
        await request.send_response(JSONResponse({"ok": True}))


@pytest.fixture
def tokens() -> FixedTokens:
    return FixedTokens("feedf00d", "0badc0de")


@pytest.fixture
def downstream() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    def _make(handler: Handler, **kwargs) -> TestClient:
        return TestClient(WebApp(handler), **kwargs)

    return _make
