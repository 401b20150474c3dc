"""Tests for the response filter chain."""

from __future__ import annotations

import pytest
from starlette.datastructures import MutableHeaders

from weblayer.request import WebRequest
from weblayer.responders import ASGIResponder, FilterResponder, filter_respond


def _scope() -> dict:
    return {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/",
        "query_string": b"",
        "headers": [],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }


async def _receive() -> dict:
    return {"type": "http.request", "body": b"", "more_body": False}


def _request(sent: list[dict]) -> WebRequest:
    async def send(message: dict) -> None:
        sent.append(message)

    return WebRequest(_scope(), _receive, send)


@pytest.mark.asyncio
async def test_filters_run_at_response_time_last_installed_first() -> None:
    sent: list[dict] = []
    request = _request(sent)
    calls: list[str] = []

    def first(status: int, headers: MutableHeaders) -> tuple[int, MutableHeaders]:
        calls.append("first")
        headers.append("X-Trace", "first")
        return status, headers

    def second(status: int, headers: MutableHeaders) -> tuple[int, MutableHeaders]:
        calls.append("second")
        headers.append("X-Trace", "second")
        return status + 1, headers

    filter_respond(request, first)
    filter_respond(request, second)
    assert calls == []

    body = await request.respond(200, MutableHeaders())
    await body.write(b"hello")
    await body.close()

    assert calls == ["second", "first"]
    start = sent[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 201
    assert start["headers"] == [(b"x-trace", b"second"), (b"x-trace", b"first")]
    assert sent[1] == {"type": "http.response.body", "body": b"hello", "more_body": True}
    assert sent[2] == {"type": "http.response.body", "body": b"", "more_body": False}


@pytest.mark.asyncio
async def test_filter_respond_wraps_previous_responder() -> None:
    request = _request([])
    root = request.responder

    def noop(status: int, headers: MutableHeaders) -> tuple[int, MutableHeaders]:
        return status, headers

    filter_respond(request, noop)
    assert isinstance(request.responder, FilterResponder)
    assert request.responder.responder is root
    assert request.root_responder is root


@pytest.mark.asyncio
async def test_root_responder_rejects_second_response() -> None:
    sent: list[dict] = []

    async def send(message: dict) -> None:
        sent.append(message)

    responder = ASGIResponder(send)
    await responder.respond(204, MutableHeaders())
    assert responder.started is True
    assert responder.status == 204
    with pytest.raises(RuntimeError):
        await responder.respond(200, MutableHeaders())
    assert len(sent) == 1


@pytest.mark.asyncio
async def test_body_write_after_close_raises() -> None:
    request = _request([])
    body = await request.respond(200, MutableHeaders())
    await body.close()
    await body.close()
    with pytest.raises(RuntimeError):
        await body.write(b"late")
