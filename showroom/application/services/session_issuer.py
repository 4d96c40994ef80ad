# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed, stateless admin session tokens."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from itsdangerous import BadSignature, URLSafeSerializer

from showroom.application.services.credential_store import CredentialStore
from showroom.domain.admin.entities import IssuedSession, Principal
from showroom.domain.admin.exceptions import (
    AuthError,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginLockedError,
)
from showroom.domain.admin.repositories import TokenDenylist
from showroom.infrastructure.auth.login_attempts import LoginAttemptsTracker
from showroom.shared.logging import logger

TOKEN_SALT = "showroom.session"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionIssuer:
    def __init__(
        self,
        *,
        credentials: CredentialStore,
        secret_key: str,
        ttl: timedelta = timedelta(hours=1),
        attempts: LoginAttemptsTracker | None = None,
        denylist: TokenDenylist | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._credentials = credentials
        self._serializer = URLSafeSerializer(secret_key, salt=TOKEN_SALT)
        self._ttl = ttl
        self._attempts = attempts
        self._denylist = denylist
        self._clock = clock

    def login(self, username: str, password: str, ip_address: str | None = None) -> IssuedSession:
        if self._attempts is not None:
            remaining = self._attempts.lockout_remaining(username)
            if remaining > 0:
                raise LoginLockedError(lockout_remaining=remaining)

        credential = self._credentials.authenticate(username, password)
        if self._attempts is not None:
            self._attempts.record_attempt(username, success=credential is not None, ip_address=ip_address)
        if credential is None:
            logger.warning(f"session.login: invalid credentials (username='{username}')")
            raise InvalidCredentialsError()

        return self.issue(credential.username)

    def issue(self, username: str) -> IssuedSession:
        issued_at = self._clock()
        principal = Principal(
            username=username,
            token_id=secrets.token_urlsafe(12),
            issued_at=issued_at,
            expires_at=issued_at + self._ttl,
        )
        token = self._serializer.dumps(
            {
                "sub": principal.username,
                "jti": principal.token_id,
                "iat": principal.issued_at.timestamp(),
                "exp": principal.expires_at.timestamp(),
            }
        )
        logger.info(
            f"session.issue: ok (username='{username}', exp={principal.expires_at.isoformat()})"
        )
        return IssuedSession(token=token, principal=principal)

    def verify(self, token: str | None) -> Principal:
        if not token:
            raise AuthError()

        try:
            payload = self._serializer.loads(token)
        except BadSignature as exc:
            logger.warning("session.verify: bad signature")
            raise InvalidTokenError() from exc

        principal = self._principal_from(payload)
        if principal.expires_at <= self._clock():
            logger.info(f"session.verify: expired (username='{principal.username}')")
            raise InvalidTokenError()
        if self._denylist is not None and self._denylist.is_revoked(principal.token_id):
            logger.info(f"session.verify: revoked (username='{principal.username}')")
            raise InvalidTokenError()
        return principal

    def logout(self, token: str | None) -> None:
        """Acknowledge a logout; tokens stay valid unless a denylist is configured."""
        if self._denylist is None or not token:
            return
        try:
            principal = self.verify(token)
        except AuthError:
            return
        self._denylist.revoke(principal.token_id, principal.expires_at)
        logger.info(f"session.logout: revoked (username='{principal.username}')")

    @staticmethod
    def _principal_from(payload: Any) -> Principal:
        if not isinstance(payload, dict):
            raise InvalidTokenError()
        try:
            username = payload["sub"]
            token_id = payload["jti"]
            issued_at = datetime.fromtimestamp(float(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(float(payload["exp"]), UTC)
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise InvalidTokenError() from exc
        if not isinstance(username, str) or not isinstance(token_id, str):
            raise InvalidTokenError()
        return Principal(
            username=username,
            token_id=token_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
