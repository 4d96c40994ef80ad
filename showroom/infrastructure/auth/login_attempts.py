# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from showroom.shared.logging import logger


@dataclass
class _FailureLog:
    times: list[float] = field(default_factory=list)
    sources: set[str] = field(default_factory=set)
    locked_until: float | None = None

    def prune(self, cutoff: float) -> None:
        self.times = [t for t in self.times if t > cutoff]

    def is_stale(self, now: float, cutoff: float) -> bool:
        if self.locked_until is not None:
            return self.locked_until <= now
        return not self.times or self.times[-1] <= cutoff


class LoginAttemptsTracker:
    """Locks a username out after repeated failed logins.

    Unknown usernames are tracked the same way as the real one, so a lockout
    says nothing about which username is valid. Records that can no longer
    lead to a lockout are swept; ``max_tracked`` bounds the rest.
    """

    FAILURE_WINDOW: float = 60 * 60
    SWEEP_INTERVAL: float = 60

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        lockout_duration: float = 15 * 60,
        max_tracked: int = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_attempts = max(1, max_attempts)
        self._lockout_duration = lockout_duration
        self._max_tracked = max(1, max_tracked)
        self._clock = clock
        self._logs: dict[str, _FailureLog] = {}
        self._last_sweep = clock()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._logs)

    def record_attempt(self, username: str, success: bool, ip_address: str | None = None) -> None:
        with self._lock:
            if success:
                previous = self._logs.pop(username, None)
                if previous is not None and previous.locked_until is not None:
                    logger.info(f"login_attempts: cleared lockout user={username}")
                return

            now = self._clock()
            self._sweep(now, incoming=username)
            entry = self._logs.setdefault(username, _FailureLog())
            entry.prune(now - self.FAILURE_WINDOW)
            entry.times.append(now)
            if ip_address:
                entry.sources.add(ip_address)
            if len(entry.times) >= self._max_attempts and entry.locked_until is None:
                entry.locked_until = now + self._lockout_duration
                logger.warning(
                    f"login_attempts: locked user={username} failures={len(entry.times)} "
                    f"for={self._lockout_duration}s sources={sorted(entry.sources) or 'unknown'}"
                )

    def lockout_remaining(self, username: str) -> float:
        with self._lock:
            entry = self._logs.get(username)
            if entry is None or entry.locked_until is None:
                return 0.0
            remaining = entry.locked_until - self._clock()
            if remaining > 0:
                return remaining
            # Lock served; start counting from zero again.
            del self._logs[username]
            logger.info(f"login_attempts: lockout expired user={username}")
            return 0.0

    def is_locked(self, username: str) -> bool:
        return self.lockout_remaining(username) > 0

    def _sweep(self, now: float, incoming: str) -> None:
        # Caller holds the lock.
        if now - self._last_sweep >= self.SWEEP_INTERVAL:
            cutoff = now - self.FAILURE_WINDOW
            stale = [name for name, entry in self._logs.items() if entry.is_stale(now, cutoff)]
            for name in stale:
                del self._logs[name]
            self._last_sweep = now
            if stale:
                logger.debug(f"login_attempts: swept {len(stale)} stale records")

        # Oldest unlocked records go first; active lockouts are kept.
        if incoming in self._logs:
            return
        overflow = len(self._logs) - self._max_tracked + 1
        if overflow > 0:
            victims = [name for name, entry in self._logs.items() if entry.locked_until is None][:overflow]
            for name in victims:
                del self._logs[name]
            logger.warning(f"login_attempts: tracking limit reached, dropped {len(victims)} records")


__all__ = ["LoginAttemptsTracker"]
