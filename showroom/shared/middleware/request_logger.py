# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import re
import secrets
import time
from typing import Any

from flask import Flask, Response, g, request

from showroom.shared.logging import clear_correlation_id, logger, set_correlation_id

from .rate_limit import client_address

REQUEST_ID_HEADER = "X-Request-ID"

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
_SENSITIVE_PARAMS = ("password", "token", "secret", "key", "signature")
# Health checks and metric scrapes hit these constantly; keep them out of INFO.
_QUIET_PATHS = ("/api/health", "/api/metrics")
_REQUEST_ID_RE = re.compile(r"^[\w\-]{1,64}$")


def _fingerprint(value: str) -> str:
    return f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    return {
        key: _fingerprint(value) if key.lower() in _SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def _sanitize_params(params: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "<redacted>" if any(s in key.lower() for s in _SENSITIVE_PARAMS) else value
        for key, value in params.items()
    }


def _upload_summary() -> str:
    if not request.files:
        return ""
    files = [f for key in request.files for f in request.files.getlist(key)]
    return f", files={len(files)}"


def _incoming_request_id() -> str:
    candidate = request.headers.get(REQUEST_ID_HEADER, "")
    return candidate if _REQUEST_ID_RE.match(candidate) else secrets.token_urlsafe(8)


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:
    @app.before_request
    def _before_request() -> None:
        g.request_id = _incoming_request_id()
        set_correlation_id(g.request_id)
        g.request_start_time = time.perf_counter()

        log = logger.debug if request.path in _QUIET_PATHS else logger.info
        if debug_mode:
            log(
                f"Request started: {request.method} {request.path} from {client_address()}, "
                f"query={_sanitize_params(dict(request.args))}, "
                f"headers={_sanitize_headers(dict(request.headers))}, "
                f"body_size={request.content_length or 0}{_upload_summary()}"
            )
        else:
            log(f"Request: {request.method} {request.path} from {client_address()}")

    @app.after_request
    def _after_request(response: Response) -> Response:
        duration = time.perf_counter() - g.get("request_start_time", time.perf_counter())
        log = logger.debug if request.path in _QUIET_PATHS else logger.info
        principal = f", principal={g.principal}" if g.get("principal") else ""
        log(
            f"Response: {request.method} {request.path} "
            f"status={response.status_code}, duration={duration:.3f}s{principal}"
        )
        response.headers.setdefault(REQUEST_ID_HEADER, g.get("request_id", "-"))
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"Request error: {type(exc).__name__} on {request.method} {request.path}")
        clear_correlation_id()


__all__ = ["REQUEST_ID_HEADER", "configure_request_logging"]
