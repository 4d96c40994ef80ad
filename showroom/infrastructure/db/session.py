# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, make_url, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from showroom.shared.config.settings import DatabaseConfig
from showroom.shared.logging import logger


class Base(DeclarativeBase):
    pass


class Database:
    """Engine and session factory owned by the application container."""

    def __init__(self, config: DatabaseConfig) -> None:
        connect_args: dict[str, object] = {}
        engine_kwargs: dict[str, object] = {}
        if config.url.startswith("sqlite"):
            database = make_url(config.url).database
            if database and database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)
            connect_args = {
                "check_same_thread": False,
                "timeout": int(config.pool_timeout),
            }
        else:
            engine_kwargs = {
                "pool_size": config.pool_size,
                "max_overflow": config.max_overflow,
                "pool_timeout": config.pool_timeout,
            }

        self.engine: Engine = create_engine(
            config.url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
            **engine_kwargs,
        )
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        logger.debug("db.session: opened")
        try:
            yield session
            session.commit()
            logger.debug("db.session: committed")
        except Exception:
            logger.debug("db.session: error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ensured")

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()
