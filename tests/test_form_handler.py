"""Tests for FormHandler body parsing and error statuses."""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from weblayer.errors import FormError, RequestEntityTooLarge
from weblayer.middleware.form import FormHandler, process_form
from weblayer.request import WebRequest

from conftest import RecordingHandler


@pytest.fixture
def client(make_client, downstream: RecordingHandler) -> TestClient:
    return make_client(FormHandler(32, False, downstream))


class TestFormParsing:
    def test_body_params_follow_query_params(
        self, client: TestClient, downstream: RecordingHandler
    ) -> None:
        resp = client.post("/?a=1", data={"a": "2", "b": ""})
        assert resp.status_code == 200
        assert downstream.seen[0]["params"] == [("a", "1"), ("a", "2"), ("b", "")]

    def test_non_form_body_is_not_parsed(
        self, client: TestClient, downstream: RecordingHandler
    ) -> None:
        resp = client.post("/", content=b"a=1", headers={"Content-Type": "text/plain"})
        assert resp.status_code == 200
        assert downstream.seen[0]["params"] == []

    def test_body_too_large(self, client: TestClient, downstream: RecordingHandler) -> None:
        resp = client.post("/", data={"field": "x" * 64})
        assert resp.status_code == 413
        assert resp.json()["code"] == "request_entity_too_large"
        assert not downstream.called

    def test_body_too_large_with_expect_header(
        self, client: TestClient, downstream: RecordingHandler
    ) -> None:
        resp = client.post(
            "/", data={"field": "x" * 64}, headers={"Expect": "100-continue"}
        )
        assert resp.status_code == 417
        assert not downstream.called

    def test_undecodable_body_is_bad_request(
        self, client: TestClient, downstream: RecordingHandler
    ) -> None:
        resp = client.post(
            "/",
            content=b"a=\xff\xfe",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "form_invalid"
        assert body["message"] == "Error reading or parsing form."
        assert not downstream.called

    def test_process_form_is_deprecated(self, downstream: RecordingHandler) -> None:
        with pytest.warns(DeprecationWarning):
            handler = process_form(32, True, downstream)
        assert isinstance(handler, FormHandler)
        assert handler.check_xsrf is True


def _form_request(headers: list[tuple[bytes, bytes]], chunks: list[bytes]) -> WebRequest:
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/",
        "query_string": b"",
        "headers": [(b"content-type", b"application/x-www-form-urlencoded"), *headers],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict:
        return messages.pop(0)

    async def send(message: dict) -> None:  # pragma: no cover
        return None

    return WebRequest(scope, receive, send)


@pytest.mark.asyncio
async def test_streamed_body_over_limit_without_content_length() -> None:
    request = _form_request([], [b"a=" + b"x" * 10, b"y" * 10])
    with pytest.raises(RequestEntityTooLarge):
        await request.parse_form(16)


@pytest.mark.asyncio
async def test_invalid_content_length() -> None:
    request = _form_request([(b"content-length", b"abc")], [b"a=1"])
    with pytest.raises(FormError):
        await request.parse_form(16)


@pytest.mark.asyncio
async def test_parse_form_is_idempotent() -> None:
    request = _form_request([], [b"a=1&", b"b=2"])
    await request.parse_form(16)
    await request.parse_form(16)
    assert request.param.multi_items() == [("a", "1"), ("b", "2")]
