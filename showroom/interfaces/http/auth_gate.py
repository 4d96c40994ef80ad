# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g, request

from showroom.application.services.session_issuer import SessionIssuer
from showroom.domain.admin.entities import Principal
from showroom.shared.config import AppConfig
from showroom.shared.logging import logger
from showroom.shared.middleware.rate_limit import CONFIG_EXTENSION

SESSIONS_EXTENSION = "showroom.sessions"


def session_token() -> str | None:
    """Token from the session cookie, falling back to ``Authorization: Bearer``."""
    config: AppConfig = current_app.extensions[CONFIG_EXTENSION]
    token = request.cookies.get(config.security.cookie_name)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip() or None
    return None


def current_principal() -> Principal:
    return g.session_principal


def require_session(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        sessions: SessionIssuer = current_app.extensions[SESSIONS_EXTENSION]
        token = session_token()
        if not token:
            logger.warning(
                f"No session token on {request.method} {request.path} "
                f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
            )
        principal = sessions.verify(token)

        g.principal = principal.username
        g.session_principal = principal
        logger.debug(f"Auth OK: admin={principal.username} {request.method} {request.path}")
        return func(*args, **kwargs)

    return wrapper


__all__ = ["SESSIONS_EXTENSION", "current_principal", "require_session", "session_token"]
