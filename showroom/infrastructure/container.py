# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from showroom.application.services.catalog_service import CatalogService
from showroom.application.services.credential_store import CredentialStore
from showroom.application.services.password_hashing import WerkzeugPasswordHasher
from showroom.application.services.session_issuer import SessionIssuer
from showroom.domain.catalog.repositories import AssetStore
from showroom.infrastructure.assets import build_asset_store
from showroom.infrastructure.auth import InMemoryTokenDenylist, LoginAttemptsTracker
from showroom.infrastructure.db import Database
from showroom.infrastructure.repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyCredentialRepository,
)
from showroom.interfaces.http.controllers.admin_controller import AdminController
from showroom.interfaces.http.controllers.catalog_controller import CatalogController
from showroom.interfaces.http.controllers.misc_controller import MiscController
from showroom.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig, *, asset_store: AssetStore | None = None) -> None:
        self.config = config
        self._asset_store_override = asset_store

    @cached_property
    def database(self) -> Database:
        db = Database(self.config.database)
        db.init_db()
        return db

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self.config.security.password_hash_method)

    @cached_property
    def credential_repository(self) -> SqlAlchemyCredentialRepository:
        return SqlAlchemyCredentialRepository(self.database)

    @cached_property
    def catalog_repository(self) -> SqlAlchemyCatalogRepository:
        repository = SqlAlchemyCatalogRepository(self.database)
        repository.ensure_sequence()
        return repository

    @cached_property
    def asset_store(self) -> AssetStore:
        if self._asset_store_override is not None:
            return self._asset_store_override
        return build_asset_store(self.config)

    # Administrator

    @cached_property
    def credential_store(self) -> CredentialStore:
        return CredentialStore(
            credentials=self.credential_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker:
        return LoginAttemptsTracker(
            max_attempts=self.config.security.login_max_attempts,
            lockout_duration=self.config.security.login_lockout_seconds,
        )

    @cached_property
    def token_denylist(self) -> InMemoryTokenDenylist | None:
        if not self.config.security.revoke_on_logout:
            return None
        return InMemoryTokenDenylist()

    @cached_property
    def session_issuer(self) -> SessionIssuer:
        return SessionIssuer(
            credentials=self.credential_store,
            secret_key=self.config.secret_key,
            ttl=timedelta(seconds=self.config.security.session_ttl),
            attempts=self.login_attempts,
            denylist=self.token_denylist,
        )

    # Catalog

    @cached_property
    def catalog_service(self) -> CatalogService:
        return CatalogService(
            items=self.catalog_repository,
            assets=self.asset_store,
            max_images=self.config.catalog.max_images,
            upload_workers=self.config.catalog.upload_workers,
            upload_policy=self.config.catalog.upload_policy,
        )

    # Controllers

    @cached_property
    def admin_controller(self) -> AdminController:
        return AdminController(
            credentials=self.credential_store,
            sessions=self.session_issuer,
            security=self.config.security,
            cookie_secure=self.config.session_cookie_secure(),
        )

    @cached_property
    def catalog_controller(self) -> CatalogController:
        return CatalogController(catalog=self.catalog_service)

    @cached_property
    def misc_controller(self) -> MiscController:
        local_root = self.config.assets.local_root if self.config.assets.backend == "local" else None
        return MiscController(
            database=self.database,
            metrics_enabled=self.config.observability.metrics_enabled,
            service_name=self.config.observability.service_name,
            local_assets_root=local_root,
            local_assets_url=self.config.assets.public_base_url,
        )


__all__ = ["Container"]
