"""
Database connection and session management.
"""
from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import Settings, settings


def build_engine(config: Settings) -> Engine:
    """
    Create the SQLAlchemy engine described by the settings.
    """
    url = make_url(config.sqlalchemy_url)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_recycle=config.db_pool_recycle,
        connect_args={"connect_timeout": config.db_connect_timeout},
        echo=False,
    )


engine: Engine = build_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting a database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """
    Initialize database by registering models and creating tables.
    """
    from app.models import Base

    Base.metadata.create_all(bind=bind or engine)


def database_health(bind: Engine | None = None) -> dict[str, Any]:
    """
    Return structured database health details.
    """
    target = bind or engine
    try:
        with target.connect() as connection:
            connection.execute(text("SELECT 1"))
        return {
            "ok": True,
            "backend": target.url.get_backend_name(),
            "database": target.url.database,
        }
    except SQLAlchemyError as exc:
        return {
            "ok": False,
            "backend": target.url.get_backend_name(),
            "error": str(exc),
        }
