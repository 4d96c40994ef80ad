# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Retries and a circuit breaker for calls to remote asset backends."""

from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock
from typing import Any, TypeVar

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from showroom.shared.config.settings import ResilienceConfig
from showroom.shared.logging import logger

T = TypeVar("T")


class CircuitOpenError(RuntimeError):
    pass


class CircuitBreaker:
    """Refuses calls for ``reset_timeout`` seconds after enough consecutive failures."""

    def __init__(
        self,
        failure_threshold: int,
        reset_timeout: float,
        *,
        name: str = "remote",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._threshold = max(1, failure_threshold)
        self._reset_timeout = reset_timeout
        self._clock = clock
        self._failures = 0
        self._opened_at: float | None = None
        self._lock = Lock()

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._opened_at is not None

    def allow(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return True
            if self._clock() - self._opened_at < self._reset_timeout:
                return False
            logger.info(f"breaker.{self.name}: half-open, letting a call through")
            self._opened_at = None
            self._failures = self._threshold - 1
            return True

    def record(self, ok: bool) -> None:
        with self._lock:
            if ok:
                self._failures = 0
                self._opened_at = None
                return
            self._failures += 1
            if self._failures >= self._threshold and self._opened_at is None:
                self._opened_at = self._clock()
                logger.error(f"breaker.{self.name}: open after {self._failures} failures")


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"resilience: retrying attempt={retry_state.attempt_number} "
        f"error={type(exc).__name__ if exc else '-'}"
    )


def resilient_call(  # noqa: UP047
    func: Callable[..., T],
    *args: Any,
    config: ResilienceConfig,
    breaker: CircuitBreaker | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    **kwargs: Any,
) -> T:
    """Call ``func`` with exponential-backoff retries on ``retry_on`` errors.

    The breaker counts one failure per exhausted call, not per attempt, and only
    for ``retry_on`` errors: a remote that answers with a client error is up.
    Timeouts belong to the callee and retry like other listed errors.
    """
    if breaker is not None and not breaker.allow():
        raise CircuitOpenError(f"circuit '{breaker.name}' is open")

    retrying = Retrying(
        stop=stop_after_attempt(config.max_retries + 1),
        wait=wait_exponential(multiplier=config.backoff_base, max=config.backoff_cap),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        result = retrying(func, *args, **kwargs)
    except retry_on:
        if breaker is not None:
            breaker.record(ok=False)
        raise
    except Exception:
        if breaker is not None:
            breaker.record(ok=True)
        raise
    if breaker is not None:
        breaker.record(ok=True)
    return result


__all__ = ["CircuitBreaker", "CircuitOpenError", "resilient_call"]
