# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from threading import Lock

from flask import current_app, request

from showroom.shared.config import AppConfig
from showroom.shared.errors import RateLimitedError
from showroom.shared.logging import logger

CONFIG_EXTENSION = "showroom.config"
_LIMITERS_EXTENSION = "showroom.rate_limiters"


class SlidingWindowLimiter:
    """At most ``limit`` hits per key within any ``window_seconds`` span."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = max(1, int(limit))
        self.window = max(0.1, float(window_seconds))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def hit(self, key: str) -> bool:
        now = self._clock()
        horizon = now - self.window
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(horizon)
                self._last_sweep = now
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= horizon:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def _sweep(self, horizon: float) -> None:
        # Keys whose newest hit left the window hold no state worth keeping.
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for key in idle:
            del self._hits[key]


def client_address() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",", 1)[0].strip()
    return first or request.remote_addr or "unknown"


def _app_limiter(scope: str, limit: int | None, window_seconds: float | None) -> SlidingWindowLimiter | None:
    config: AppConfig = current_app.extensions[CONFIG_EXTENSION]
    security = config.security
    if not security.enable_rate_limit:
        return None
    registry: dict[str, SlidingWindowLimiter] = current_app.extensions.setdefault(_LIMITERS_EXTENSION, {})
    if scope not in registry:
        registry[scope] = SlidingWindowLimiter(
            limit or security.rate_limit_requests,
            window_seconds or security.rate_limit_window,
        )
    return registry[scope]


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    """Limit a view per client address. Counters belong to the current app."""

    def decorator(view: Callable):
        scope = f"{view.__module__}.{view.__qualname__}"

        @wraps(view)
        def limited(*args, **kwargs):
            limiter = _app_limiter(scope, limit, window_seconds)
            if limiter is not None and not limiter.hit(client_address()):
                logger.warning(
                    f"rate_limit: rejected {request.method} {request.path} "
                    f"client={client_address()} limit={limiter.limit}/{limiter.window:g}s"
                )
                raise RateLimitedError(context={"retry_after_seconds": limiter.window})
            return view(*args, **kwargs)

        return limited

    return decorator


__all__ = ["CONFIG_EXTENSION", "SlidingWindowLimiter", "client_address", "rate_limit"]
