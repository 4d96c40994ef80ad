# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Sequence
from threading import Lock

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from showroom.domain.catalog.entities import CatalogItem, ListingFields
from showroom.domain.catalog.exceptions import NotFoundError
from showroom.domain.catalog.repositories import CatalogRepository
from showroom.infrastructure.db.models import CatalogItemRow, IdSequenceRow
from showroom.infrastructure.db.session import Database
from showroom.shared.logging import logger

from ._errors import persistence_errors

SEQUENCE_NAME = "catalog_items"


def _to_domain(row: CatalogItemRow) -> CatalogItem:
    return CatalogItem(
        id=row.id,
        fields=ListingFields(
            model=row.model,
            year=row.year,
            seating_capacity=row.seating_capacity,
            transmission=row.transmission,
            description=row.description,
            features=tuple(row.features or ()),
            featured=bool(row.featured),
        ),
        images=tuple(row.images or ()),
    )


def _apply(row: CatalogItemRow, item: CatalogItem) -> None:
    row.model = item.fields.model
    row.year = item.fields.year
    row.seating_capacity = item.fields.seating_capacity
    row.transmission = item.fields.transmission
    row.description = item.fields.description
    row.features = list(item.fields.features)
    row.images = list(item.images)
    row.featured = item.fields.featured


class SqlAlchemyCatalogRepository(CatalogRepository):
    def __init__(self, db: Database) -> None:
        self._db = db
        self._sequence_lock = Lock()

    def ensure_sequence(self) -> None:
        """Create the id counter, seeded past every id already in use."""
        with persistence_errors("catalog.ensure_sequence"):
            try:
                with self._db.session_scope() as session:
                    if session.get(IdSequenceRow, SEQUENCE_NAME) is not None:
                        return
                    seed = session.scalar(select(func.max(CatalogItemRow.id))) or 0
                    session.add(IdSequenceRow(name=SEQUENCE_NAME, value=seed))
                    session.flush()
                    logger.info(f"catalog.sequence: created (seed={seed})")
            except IntegrityError:
                logger.debug("catalog.sequence: created concurrently")

    def next_id(self) -> int:
        with self._sequence_lock, persistence_errors("catalog.next_id"):
            with self._db.session_scope() as session:
                result = session.execute(
                    update(IdSequenceRow)
                    .where(IdSequenceRow.name == SEQUENCE_NAME)
                    .values(value=IdSequenceRow.value + 1)
                )
                if result.rowcount != 1:
                    raise RuntimeError("catalog id sequence is missing; call ensure_sequence()")
                return int(
                    session.scalar(
                        select(IdSequenceRow.value).where(IdSequenceRow.name == SEQUENCE_NAME)
                    )
                )

    def add(self, item: CatalogItem) -> CatalogItem:
        with persistence_errors("catalog.add"), self._db.session_scope() as session:
            row = CatalogItemRow(id=item.id)
            _apply(row, item)
            session.add(row)
        return item

    def get(self, item_id: int) -> CatalogItem | None:
        with persistence_errors("catalog.get"), self._db.session_scope() as session:
            row = session.get(CatalogItemRow, item_id)
            return _to_domain(row) if row is not None else None

    def list_all(self) -> Sequence[CatalogItem]:
        with persistence_errors("catalog.list"), self._db.session_scope() as session:
            rows = session.scalars(select(CatalogItemRow).order_by(CatalogItemRow.id.desc())).all()
            return [_to_domain(row) for row in rows]

    def save(self, item: CatalogItem) -> CatalogItem:
        with persistence_errors("catalog.save"), self._db.session_scope() as session:
            row = session.get(CatalogItemRow, item.id)
            if row is None:
                raise NotFoundError(item.id)
            _apply(row, item)
        return item

    def remove(self, item_id: int) -> bool:
        with persistence_errors("catalog.remove"), self._db.session_scope() as session:
            result = session.execute(delete(CatalogItemRow).where(CatalogItemRow.id == item_id))
            return result.rowcount == 1
