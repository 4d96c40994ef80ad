# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from showroom.domain.admin.entities import AdminCredential
from showroom.domain.admin.exceptions import AlreadyExistsError
from showroom.domain.admin.repositories import CredentialRepository
from showroom.infrastructure.db.models import ADMIN_ROW_ID, AdminCredentialRow
from showroom.infrastructure.db.session import Database

from ._errors import persistence_errors


class SqlAlchemyCredentialRepository(CredentialRepository):
    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self) -> AdminCredential | None:
        with persistence_errors("credentials.get"), self._db.session_scope() as session:
            row = session.get(AdminCredentialRow, ADMIN_ROW_ID)
            if row is None:
                return None
            return AdminCredential(username=row.username, password_hash=row.password_hash)

    def add(self, credential: AdminCredential) -> AdminCredential:
        with persistence_errors("credentials.add"):
            try:
                with self._db.session_scope() as session:
                    session.add(
                        AdminCredentialRow(
                            id=ADMIN_ROW_ID,
                            username=credential.username,
                            password_hash=credential.password_hash,
                        )
                    )
                    session.flush()
            except IntegrityError as exc:
                raise AlreadyExistsError() from exc
        return credential

    def replace(self, expected_hash: str, credential: AdminCredential) -> bool:
        with persistence_errors("credentials.replace"), self._db.session_scope() as session:
            result = session.execute(
                update(AdminCredentialRow)
                .where(
                    AdminCredentialRow.id == ADMIN_ROW_ID,
                    AdminCredentialRow.password_hash == expected_hash,
                )
                .values(
                    username=credential.username,
                    password_hash=credential.password_hash,
                    updated_at=datetime.now(UTC),
                )
            )
            return result.rowcount == 1
