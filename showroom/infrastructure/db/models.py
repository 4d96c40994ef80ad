# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from showroom.domain.catalog.entities import MODEL_MAX_LENGTH, TRANSMISSION_MAX_LENGTH
from showroom.infrastructure.db.session import Base

ADMIN_ROW_ID = 1


class AdminCredentialRow(Base):
    __tablename__ = "admin_credentials"
    # A fixed primary key makes a second administrator a uniqueness violation.
    __table_args__ = (CheckConstraint(f"id = {ADMIN_ROW_ID}", name="ck_single_admin"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    username: Mapped[str] = mapped_column(String(64))
    password_hash: Mapped[str] = mapped_column(String(256))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class CatalogItemRow(Base):
    __tablename__ = "catalog_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    model: Mapped[str] = mapped_column(String(MODEL_MAX_LENGTH), index=True)
    year: Mapped[int] = mapped_column(Integer)
    seating_capacity: Mapped[int] = mapped_column(Integer)
    transmission: Mapped[str] = mapped_column(String(TRANSMISSION_MAX_LENGTH))
    description: Mapped[str] = mapped_column(Text)
    features: Mapped[list[str]] = mapped_column(JSON, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0", index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class IdSequenceRow(Base):
    """Monotonic counters; values are only ever incremented."""

    __tablename__ = "id_sequences"
    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
