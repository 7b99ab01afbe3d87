"""
Module: pallet_kernel.db.sql_store
Responsibility: Durable KeyValueStore backed by the ``kv_entries`` table.
Architecture position: Kernel > DB. Imports db/base.py and db/engine.py.

Invariants enforced:
    - Each ``set`` runs in its own session_scope: the row is replaced and
      committed, or the prior value is retained.
    - ``revision`` is bumped on every overwrite.
    - Driver errors never escape as SQLAlchemyError; they are re-raised as
      StorageUnavailableError with the key and operation attached.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pallet_kernel.db.base import KeyValueEntry
from pallet_kernel.db.engine import session_scope
from pallet_kernel.db.kv import KeyValueStore
from pallet_kernel.domain.clock import Clock, SystemClock
from pallet_kernel.exceptions import StorageUnavailableError
from pallet_kernel.logging_config import get_logger

logger = get_logger("db.sql_store")


class SqlKeyValueStore(KeyValueStore):
    """
    KeyValueStore over a SQLAlchemy session factory.

    Contract:
        The caller creates the table (``create_tables``) before first use.
        The store owns its sessions; callers never pass one in.
    """

    def __init__(self, session_factory: sessionmaker[Session], clock: Clock | None = None):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    def get(self, key: str) -> str | None:
        try:
            with session_scope(self._session_factory) as session:
                return session.execute(
                    select(KeyValueEntry.value).where(KeyValueEntry.key == key)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(key, "get", str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                entry = session.get(KeyValueEntry, key)
                now = self._clock.now()
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value, revision=1, updated_at=now))
                    revision = 1
                else:
                    entry.value = value
                    entry.revision += 1
                    entry.updated_at = now
                    revision = entry.revision
        except SQLAlchemyError as e:
            raise StorageUnavailableError(key, "set", str(e)) from e

        logger.debug("kv_written", extra={"key": key, "revision": revision, "size": len(value)})

    def revision(self, key: str) -> int:
        """Current revision of ``key``; 0 if it was never written."""
        try:
            with session_scope(self._session_factory) as session:
                rev = session.execute(
                    select(KeyValueEntry.revision).where(KeyValueEntry.key == key)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(key, "get", str(e)) from e
        return rev or 0
