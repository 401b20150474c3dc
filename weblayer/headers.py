"""Canonical header names used by the request pipeline."""

from __future__ import annotations

HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_COOKIE = "Cookie"
HEADER_EXPECT = "Expect"
HEADER_SET_COOKIE = "Set-Cookie"
HEADER_X_REQUEST_ID = "X-Request-Id"
HEADER_X_XSRF_TOKEN = "X-XSRFToken"
