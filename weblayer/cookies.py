from __future__ import annotations

import http.cookies
from collections.abc import Iterable
from dataclasses import dataclass

from starlette.requests import cookie_parser


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    path: str | None = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str | None = "lax"

    def serialize(self) -> str:
        """Render the value of a ``Set-Cookie`` header for this cookie."""
        cookie: http.cookies.BaseCookie[str] = http.cookies.SimpleCookie()
        cookie[self.name] = self.value
        morsel = cookie[self.name]
        if self.path is not None:
            morsel["path"] = self.path
        if self.http_only:
            morsel["httponly"] = True
        if self.secure:
            morsel["secure"] = True
        if self.same_site is not None:
            morsel["samesite"] = self.same_site
        return cookie.output(header="").strip()

    def __str__(self) -> str:
        return self.serialize()


def parse_cookies(header_values: Iterable[str]) -> dict[str, str]:
    """Parse ``Cookie`` header values; the first occurrence of a name wins."""
    cookies: dict[str, str] = {}
    for header_value in header_values:
        for chunk in header_value.split(";"):
            for name, value in cookie_parser(chunk).items():
                cookies.setdefault(name, value)
    return cookies
