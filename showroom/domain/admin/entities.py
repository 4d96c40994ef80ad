# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from showroom.domain.exceptions import InvariantViolation


@dataclass(slots=True, frozen=True)
class AdminCredential:
    """The one administrator identity."""

    username: str
    password_hash: str

    def __post_init__(self) -> None:
        if not self.username:
            raise InvariantViolation("username must not be empty", field="username")
        if not self.password_hash:
            raise InvariantViolation("password hash must not be empty", field="password_hash")


@dataclass(slots=True, frozen=True)
class Principal:
    """Verified identity carried by a session token."""

    username: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class IssuedSession:
    token: str
    principal: Principal

    @property
    def max_age(self) -> int:
        return int((self.principal.expires_at - self.principal.issued_at).total_seconds())
