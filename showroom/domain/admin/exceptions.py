# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from showroom.shared.errors.base import DomainError


class AuthError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED


class InvalidCredentialsError(AuthError):
    code = "invalid_credentials"


class InvalidTokenError(AuthError):
    code = "invalid_token"
    status = HTTPStatus.FORBIDDEN


class AlreadyExistsError(DomainError):
    code = "admin_already_exists"
    status = HTTPStatus.FORBIDDEN


class LoginLockedError(DomainError):
    code = "login_locked"
    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(context={"lockout_remaining_seconds": round(lockout_remaining, 1)})
