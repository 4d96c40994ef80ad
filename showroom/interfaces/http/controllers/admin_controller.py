# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import TypeVar

from flask import Blueprint, Response, jsonify, request
from pydantic import BaseModel, ValidationError

from showroom.application.services.credential_store import CredentialStore
from showroom.application.services.session_issuer import SessionIssuer
from showroom.domain.admin.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    LoginLockedError,
)
from showroom.infrastructure.audit import AuditAction, audit_log
from showroom.interfaces.http.auth_gate import current_principal, require_session, session_token
from showroom.interfaces.http.dto.admin import (
    CredentialsRequestDTO,
    ExistsDTO,
    OkDTO,
    RotateRequestDTO,
)
from showroom.shared.config.settings import SecurityConfig
from showroom.shared.errors.validation import raise_validation_error
from showroom.shared.logging import logger
from showroom.shared.middleware.rate_limit import client_address, rate_limit

_DTO = TypeVar("_DTO", bound=BaseModel)


def _json_body(model: type[_DTO]) -> _DTO:
    try:
        return model.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        raise_validation_error(exc)


class AdminController:
    def __init__(
        self,
        *,
        credentials: CredentialStore,
        sessions: SessionIssuer,
        security: SecurityConfig,
        cookie_secure: bool,
    ) -> None:
        self._credentials = credentials
        self._sessions = sessions
        self._security = security
        self._cookie_secure = cookie_secure

    def exists(self) -> tuple[Response, int]:
        payload = ExistsDTO(exists=self._credentials.exists()).model_dump()
        return jsonify(payload), 200

    @rate_limit(limit=5, window_seconds=60.0)
    def bootstrap(self) -> tuple[Response, int]:
        dto = _json_body(CredentialsRequestDTO)
        ip_address = client_address()
        try:
            self._credentials.bootstrap(dto.username, dto.password)
        except AlreadyExistsError:
            audit_log(
                AuditAction.ADMIN_BOOTSTRAP,
                username=dto.username,
                ip_address=ip_address,
                details={"reason": "already_exists"},
                success=False,
            )
            raise

        audit_log(AuditAction.ADMIN_BOOTSTRAP, username=dto.username, ip_address=ip_address)
        logger.info(f"admin.bootstrap: ok username={dto.username}")
        return jsonify(OkDTO().model_dump()), 201

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        dto = _json_body(CredentialsRequestDTO)
        ip_address = client_address()
        try:
            issued = self._sessions.login(dto.username, dto.password, ip_address)
        except LoginLockedError:
            audit_log(AuditAction.LOGIN_LOCKED, username=dto.username, ip_address=ip_address, success=False)
            raise
        except InvalidCredentialsError:
            audit_log(AuditAction.LOGIN_FAILED, username=dto.username, ip_address=ip_address, success=False)
            raise

        audit_log(AuditAction.LOGIN_SUCCESS, username=dto.username, ip_address=ip_address)

        response = jsonify(OkDTO().model_dump())
        response.set_cookie(
            self._security.cookie_name,
            issued.token,
            httponly=True,
            samesite=self._security.cookie_samesite,
            secure=self._cookie_secure,
            max_age=issued.max_age,
        )
        logger.info(f"admin.login: ok username={dto.username}")
        return response, 200

    @require_session
    def rotate(self) -> tuple[Response, int]:
        dto = _json_body(RotateRequestDTO)
        principal = current_principal()
        ip_address = client_address()
        try:
            self._credentials.rotate(dto.current_password, dto.username, dto.new_password)
        except InvalidCredentialsError:
            audit_log(
                AuditAction.CREDENTIALS_ROTATED,
                username=principal.username,
                ip_address=ip_address,
                success=False,
            )
            raise

        audit_log(
            AuditAction.CREDENTIALS_ROTATED,
            username=principal.username,
            ip_address=ip_address,
            details={"new_username": dto.username},
        )
        return jsonify(OkDTO().model_dump()), 200

    def logout(self) -> tuple[Response, int]:
        self._sessions.logout(session_token())

        audit_log(AuditAction.LOGOUT, ip_address=client_address())

        response = jsonify(OkDTO().model_dump())
        response.delete_cookie(
            self._security.cookie_name,
            httponly=True,
            samesite=self._security.cookie_samesite,
            secure=self._cookie_secure,
        )
        logger.info("admin.logout: ok")
        return response, 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("admin", __name__, url_prefix="/api/admin")
        bp.add_url_rule("/exists", view_func=self.exists, methods=["GET"])
        bp.add_url_rule("/bootstrap", view_func=self.bootstrap, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/rotate", view_func=self.rotate, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        return bp
