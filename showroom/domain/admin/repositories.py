# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import AdminCredential


class CredentialRepository(Protocol):
    def get(self) -> AdminCredential | None: ...

    def add(self, credential: AdminCredential) -> AdminCredential:
        """Insert the singleton; raises AlreadyExistsError if one is present."""
        ...

    def replace(self, expected_hash: str, credential: AdminCredential) -> bool:
        """Swap the stored credential iff its hash still equals ``expected_hash``."""
        ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenDenylist(Protocol):
    def revoke(self, token_id: str, expires_at: datetime) -> None: ...
    def is_revoked(self, token_id: str) -> bool: ...
