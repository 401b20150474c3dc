from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from weblayer.errors import RandomSourceError

logger = logging.getLogger(__name__)

XSRF_TOKEN_LEN = 8

RandomSource = Callable[[int], bytes]


class TokenGenerator:
    """Hex tokens of ``length`` characters read from ``random_source``.

    The source must be safe to call from concurrent requests. A failing or
    short read raises ``RandomSourceError``; it is never retried and never
    replaced with a weaker source.
    """

    def __init__(
        self,
        random_source: RandomSource = secrets.token_bytes,
        length: int = XSRF_TOKEN_LEN,
    ) -> None:
        if length <= 0 or length % 2:
            raise ValueError("token length must be a positive even number")
        self.random_source = random_source
        self.length = length

    def __call__(self) -> str:
        size = self.length // 2
        try:
            data = self.random_source(size)
        except OSError as exc:
            logger.critical("Secure random source failed: %s", exc)
            raise RandomSourceError("rand read failed") from exc
        if len(data) != size:
            logger.critical(
                "Secure random source returned %d of %d bytes", len(data), size
            )
            raise RandomSourceError("rand read failed")
        return data.hex()


_default_generator = TokenGenerator()


def generate_token() -> str:
    return _default_generator()
