# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .catalog import SqlAlchemyCatalogRepository
from .credentials import SqlAlchemyCredentialRepository

__all__ = ["SqlAlchemyCatalogRepository", "SqlAlchemyCredentialRepository"]
