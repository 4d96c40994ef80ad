# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .admin.entities import AdminCredential, IssuedSession, Principal
from .catalog.entities import CatalogItem, ImageUpload, ListingFields
from .exceptions import InvariantViolation

__all__ = [
    "AdminCredential",
    "CatalogItem",
    "ImageUpload",
    "InvariantViolation",
    "IssuedSession",
    "ListingFields",
    "Principal",
]
