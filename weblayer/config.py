import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    # Form parsing
    max_request_body_len: int = int(
        os.getenv("MAX_REQUEST_BODY_LEN", str(1024 * 1024))
    )  # 1MB
    xsrf_check: bool = _env_bool("XSRF_CHECK", "true")

    # Reverse proxy (canonical header names, empty = disabled)
    proxy_addr_header: str = os.getenv("PROXY_ADDR_HEADER", "")
    proxy_scheme_header: str = os.getenv("PROXY_SCHEME_HEADER", "")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def validate_settings(s: Settings) -> list[str]:
    """Validate settings at startup. Returns list of warnings."""
    warnings: list[str] = []

    if not s.xsrf_check:
        warnings.append("XSRF_CHECK is disabled; forms are not protected")

    if s.max_request_body_len <= 0:
        warnings.append(
            "MAX_REQUEST_BODY_LEN is not positive; every form body will be rejected"
        )

    if bool(s.proxy_addr_header) != bool(s.proxy_scheme_header):
        warnings.append(
            "Only one of PROXY_ADDR_HEADER / PROXY_SCHEME_HEADER is set"
        )

    return warnings


settings = Settings()
