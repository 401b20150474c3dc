"""Gunicorn configuration for weblayer.

Usage:
    gunicorn -c gunicorn.conf.py weblayer.main:app

Worker logs use the same JSON format as the application. Requests are
logged once, by weblayer.asgi, so gunicorn's access log stays off unless
GUNICORN_ACCESSLOG names a destination.
"""
from __future__ import annotations

import multiprocessing
import os

from weblayer.logging import logging_config

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8001")
workers = int(os.getenv("GUNICORN_WORKERS", str(multiprocessing.cpu_count() * 2 + 1)))
worker_class = "uvicorn.workers.UvicornWorker"

# Form bodies are bounded by MAX_REQUEST_BODY_LEN; keep header limits tight.
limit_request_fields = int(os.getenv("GUNICORN_LIMIT_REQUEST_FIELDS", "100"))
limit_request_field_size = int(os.getenv("GUNICORN_LIMIT_REQUEST_FIELD_SIZE", "8190"))

timeout = int(os.getenv("GUNICORN_TIMEOUT", "30"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

# Address and scheme come from PROXY_ADDR_HEADER / PROXY_SCHEME_HEADER in
# ProxyHeaderHandler, not from gunicorn's X-Forwarded-* handling.
forwarded_allow_ips = os.getenv("GUNICORN_FORWARDED_ALLOW_IPS", "127.0.0.1")

loglevel = os.getenv("LOG_LEVEL", "info").lower()
logconfig_dict = logging_config(loglevel)
accesslog = os.getenv("GUNICORN_ACCESSLOG") or None
errorlog = "-"

proc_name = "weblayer"
