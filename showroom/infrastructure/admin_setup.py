# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from showroom.application.services.credential_store import CredentialStore
from showroom.domain.admin.exceptions import AlreadyExistsError
from showroom.infrastructure.audit import AuditAction, audit_log
from showroom.shared.config import AppConfig
from showroom.shared.logging import logger


class AdminSetupError(Exception):
    pass


def setup_admin_user(config: AppConfig, credentials: CredentialStore) -> bool:
    """Create the administrator from ADMIN_USERNAME/ADMIN_PASSWORD if none exists.

    Returns True when a credential was created by this call.
    """
    if not config.admin_username and not config.admin_password:
        logger.info("admin_setup: No ADMIN_USERNAME configured, skipping admin setup")
        return False
    if not config.admin_username or not config.admin_password:
        raise AdminSetupError("ADMIN_USERNAME and ADMIN_PASSWORD must be set together")

    if credentials.exists():
        logger.info("admin_setup: Administrator already configured, environment credentials ignored")
        return False

    try:
        credentials.bootstrap(config.admin_username, config.admin_password)
    except AlreadyExistsError:
        logger.info("admin_setup: Administrator created concurrently, skipping")
        return False

    audit_log(
        AuditAction.ADMIN_BOOTSTRAP,
        username=config.admin_username,
        details={"source": "environment"},
    )
    return True


__all__ = ["AdminSetupError", "setup_admin_user"]
