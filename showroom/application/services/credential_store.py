# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets

from showroom.domain.admin.entities import AdminCredential
from showroom.domain.admin.exceptions import AlreadyExistsError, InvalidCredentialsError
from showroom.domain.admin.repositories import CredentialRepository, PasswordHasher
from showroom.shared.logging import logger


class CredentialStore:
    """Owns the single administrator identity: bootstrap, rotation, checks."""

    def __init__(
        self,
        *,
        credentials: CredentialRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._credentials = credentials
        self._password_hasher = password_hasher
        self._dummy_hash: str | None = None

    def exists(self) -> bool:
        return self._credentials.get() is not None

    def bootstrap(self, username: str, password: str) -> AdminCredential:
        if self._credentials.get() is not None:
            logger.warning("admin.bootstrap: refused, credential already exists")
            raise AlreadyExistsError()

        credential = AdminCredential(
            username=username,
            password_hash=self._password_hasher.hash(password),
        )
        persisted = self._credentials.add(credential)
        logger.info(f"admin.bootstrap: ok (username='{username}')")
        return persisted

    def authenticate(self, username: str, password: str) -> AdminCredential | None:
        """Return the credential when both username and password match.

        A hash verification runs even when the username is unknown so both
        failure modes cost the same.
        """
        credential = self._credentials.get()
        if credential is None or not secrets.compare_digest(
            credential.username.encode(), username.encode()
        ):
            self._password_hasher.verify(password, self._dummy())
            return None
        if not self._password_hasher.verify(password, credential.password_hash):
            return None
        return credential

    def rotate(self, current_password: str, new_username: str, new_password: str) -> AdminCredential:
        current = self._credentials.get()
        if current is None:
            self._password_hasher.verify(current_password, self._dummy())
            logger.warning("admin.rotate: no credential to rotate")
            raise InvalidCredentialsError()
        if not self._password_hasher.verify(current_password, current.password_hash):
            logger.warning("admin.rotate: current password mismatch")
            raise InvalidCredentialsError()

        replacement = AdminCredential(
            username=new_username,
            password_hash=self._password_hasher.hash(new_password),
        )
        if not self._credentials.replace(current.password_hash, replacement):
            # Someone rotated between our read and write.
            logger.warning("admin.rotate: credential changed concurrently")
            raise InvalidCredentialsError()

        logger.info(
            f"admin.rotate: ok (old_username='{current.username}', new_username='{new_username}')"
        )
        return replacement

    def _dummy(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash
