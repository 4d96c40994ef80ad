# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Error types rendered by the HTTP layer as ``{"error": code, "context": {...}}``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, ClassVar


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    @property
    def is_server_error(self) -> bool:
        return self.status >= HTTPStatus.INTERNAL_SERVER_ERROR

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class _DeclaredError(AppError):
    """Subclasses declare ``code`` and ``status`` as class attributes."""

    default_code: ClassVar[str] = "error"
    default_status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        # Before AppError.__init__ runs, only class attributes are visible.
        super().__init__(
            code=code or getattr(self, "code", self.default_code),
            status=status or getattr(self, "status", self.default_status),
            context=context,
        )


class DomainError(_DeclaredError):
    default_code = "domain_error"
    default_status = HTTPStatus.BAD_REQUEST


class InfrastructureError(_DeclaredError):
    default_code = "infrastructure_error"


class ValidationError(_DeclaredError):
    code = "validation_error"
    status = HTTPStatus.BAD_REQUEST


class RateLimitedError(_DeclaredError):
    code = "rate_limited"
    status = HTTPStatus.TOO_MANY_REQUESTS


class UpstreamError(InfrastructureError):
    """The asset store could not complete a request."""

    code = "upstream_error"
    status = HTTPStatus.BAD_GATEWAY


class PersistenceError(InfrastructureError):
    """The record store is unavailable or rejected a write."""

    code = "persistence_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
