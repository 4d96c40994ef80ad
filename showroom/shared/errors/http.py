# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from showroom.shared.logging import logger

from .base import AppError


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    return jsonify(error.to_dict()), error.status


def register_error_handler(
    app: Flask,
    *,
    debug_mode: bool = False,
    default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
) -> None:
    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        where = f"{request.method} {request.path}"
        if exc.is_server_error:
            # Chained cause (SQLAlchemy, Cloudinary SDK) carries the detail.
            cause = exc.__cause__
            detail = f" cause={type(cause).__name__}: {cause}" if cause is not None else ""
            logger.error(f"http.error: {exc.code} status={int(exc.status)} on {where}{detail}")
        else:
            logger.info(f"http.error: {exc.code} status={int(exc.status)} on {where}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        return jsonify({"error": (exc.name or "http_error").lower().replace(" ", "_")}), exc.code or 500

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {_client_ip()}, principal={getattr(g, 'principal', None)}, "
                f"body_size={request.content_length or 0}"
            )
        else:
            logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.path}")
        return jsonify({"error": "internal_error"}), default_status
