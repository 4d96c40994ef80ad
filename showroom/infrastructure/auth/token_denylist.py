# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from threading import Lock

from showroom.domain.admin.repositories import TokenDenylist


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryTokenDenylist(TokenDenylist):
    """Revoked token ids, each kept only until the token would expire anyway."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._revoked: dict[str, datetime] = {}
        self._lock = Lock()

    def revoke(self, token_id: str, expires_at: datetime) -> None:
        with self._lock:
            self._purge()
            self._revoked[token_id] = expires_at

    def is_revoked(self, token_id: str) -> bool:
        with self._lock:
            self._purge()
            return token_id in self._revoked

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._revoked)

    def _purge(self) -> None:
        now = self._clock()
        for token_id in [tid for tid, exp in self._revoked.items() if exp <= now]:
            del self._revoked[token_id]
