# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Audit trail for administrator and catalog actions.

Events are written to the application log under the ``audit`` channel; there
is no separate store.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from showroom.shared.logging import logger


class AuditAction(str, Enum):
    ADMIN_BOOTSTRAP = "admin_bootstrap"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    LOGOUT = "logout"
    CREDENTIALS_ROTATED = "credentials_rotated"

    CATALOG_ITEM_CREATED = "catalog_item_created"
    CATALOG_ITEM_UPDATED = "catalog_item_updated"
    CATALOG_ITEM_DELETED = "catalog_item_deleted"


_REDACTED_MARKERS = ("password", "token", "secret", "key", "signature")


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    return {
        name: "***" if any(marker in name.lower() for marker in _REDACTED_MARKERS) else value
        for name, value in details.items()
    }


def audit_log(
    action: AuditAction,
    username: str | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    parts = [f"audit.{action.value}:", f"user={username or '-'}", f"ip={ip_address or '-'}"]
    if not success:
        parts.append("outcome=denied")
    parts.extend(f"{name}={value}" for name, value in _redact(details or {}).items())

    log = logger.bind(channel="audit")
    (log.info if success else log.warning)(" ".join(parts))


__all__ = ["AuditAction", "audit_log"]
