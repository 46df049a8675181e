# app/data/database.py
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import DateTime, create_engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from app.domain.errors import OptimisticConflictError
from app.utils.settings import DATABASE_URL, DB_MAX_OVERFLOW, DB_POOL_RECYCLE, DB_POOL_SIZE
from app.utils.logging import get_logger

logger = get_logger(__name__)

# SQLSTATE serialization_failure - tak Postgres/DSQL zgłaszają konflikt optymistyczny
SERIALIZATION_FAILURE = "40001"


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        pool_recycle=DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """DateTime z timezone; sqlite zwraca naive, więc doklejamy UTC przy odczycie."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def process_bind_param(self, value: datetime | None, dialect):
        if value is not None and value.tzinfo is not None and dialect.name == "sqlite":
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


def is_serialization_failure(error: DBAPIError) -> bool:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code == SERIALIZATION_FAILURE


@contextmanager
def transaction(session_factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """
    Jedna transakcja na jednostkę pracy: commit na wyjściu, rollback przy błędzie.
    Każde wywołanie to nowa sesja, więc retry nie dziedziczy nieudanej transakcji.
    Konflikt 40001 (również przy commit) zamieniany na OptimisticConflictError.
    """
    session = session_factory()
    try:
        with session.begin():
            yield session
    except DBAPIError as e:
        if is_serialization_failure(e):
            logger.warning(f"Serialization failure: {e.orig}")
            raise OptimisticConflictError(f"Concurrent modification detected: {e.orig}") from e
        raise
    finally:
        session.close()


def get_db():
    """FastAPI dependency: sesja na request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    # rejestracja modeli w Base.metadata przed create_all
    import app.data.models  # noqa: F401

    target = bind or engine
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=target)
