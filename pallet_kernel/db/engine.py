"""
Module: pallet_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities for the durable key-value store.
Architecture position: Kernel > DB. May import from db/base.py. MUST NOT
    import from services/, selectors/ or domain/.

Invariants enforced:
    - SQLite is the default backend. In-memory SQLite URLs share a single
      connection (StaticPool) so every session sees the same database.
    - session_scope() commits on success and rolls back on any exception,
      so each key-value write is all-or-nothing.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
    - SQLAlchemyError from the driver on connection failure; SqlKeyValueStore
      translates it into StorageUnavailableError.
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pallet_kernel.logging_config import get_logger

logger = get_logger("db.engine")

# Module-level engine and session factory
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

DEFAULT_DATABASE_URL = "sqlite:///pallet_tracker.db"


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def init_engine_from_url(
    database_url: str = DEFAULT_DATABASE_URL,
    echo: bool = False,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    Preconditions: database_url is a valid SQLAlchemy URL. A second call
        replaces the first engine.
    Postconditions: Module-level _engine and _SessionFactory are initialized.

    Args:
        database_url: e.g. ``sqlite:///pallet_tracker.db`` or ``sqlite://``.
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    _engine = create_engine(database_url, **kwargs)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={
            "dialect": _engine.dialect.name,
            "echo": echo,
        },
    )

    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """
    Get the session factory for creating sessions.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed. The exception
        is re-raised to the caller.

    Args:
        factory: Session factory to use; defaults to the module-level one.

    Usage:
        with session_scope() as session:
            session.add(entry)
            # Commits on successful exit, rolls back on exception
    """
    session = factory() if factory is not None else get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """
    Create the key-value table if it does not exist.

    Args:
        engine: Engine to use; defaults to the module-level one.
    """
    from pallet_kernel.db.base import Base

    Base.metadata.create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """
    Drop all tables. Use with caution - primarily for testing.
    """
    from pallet_kernel.db.base import Base

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """
    Reset the engine and session factory.

    Useful for test cleanup.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose() -> None:
    """Dispose the engine on process exit to release pooled connections."""
    if _engine is None:
        return
    try:
        _engine.dispose()
    except SQLAlchemyError:
        logger.warning("engine_dispose_failed", exc_info=True)


atexit.register(_atexit_dispose)
