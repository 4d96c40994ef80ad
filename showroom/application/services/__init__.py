# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .catalog_service import CatalogService
from .credential_store import CredentialStore
from .password_hashing import WerkzeugPasswordHasher
from .session_issuer import SessionIssuer

__all__ = [
    "CatalogService",
    "CredentialStore",
    "SessionIssuer",
    "WerkzeugPasswordHasher",
]
