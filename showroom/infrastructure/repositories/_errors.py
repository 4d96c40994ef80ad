# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from showroom.shared.errors import PersistenceError
from showroom.shared.logging import logger


@contextmanager
def persistence_errors(operation: str) -> Iterator[None]:
    """Translate driver/ORM failures into PersistenceError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception(f"db.{operation}: failed")
        raise PersistenceError(context={"operation": operation}) from exc
