# barber_agenda/db.py

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from barber_agenda.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    if not url.startswith("sqlite"):
        return create_engine(url, echo=settings.DB_ECHO, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}  # required for SQLite + FastAPI
    if url in ("sqlite://", "sqlite:///:memory:"):
        # Keep a single connection so every session sees the same in-memory database
        return create_engine(url, echo=settings.DB_ECHO, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, echo=settings.DB_ECHO, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    # Importing the models registers their tables on SQLModel.metadata
    from barber_agenda import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready on %s", engine.url.render_as_string(hide_password=True))