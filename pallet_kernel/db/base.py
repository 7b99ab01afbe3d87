"""
Module: pallet_kernel.db.base
Responsibility: Declarative base and the single ORM model of the durable
    store: one row per key of the key-value contract.
Architecture position: Kernel > DB. Imported by db/engine.py and
    db/sql_store.py only.

Invariants enforced:
    - ``key`` is the primary key; each collection lives in exactly one row.
    - ``revision`` increases by one on every write to a key. Writes do not
      compare it (single writer); it is the hook for optimistic checks if a
      second writer is introduced.
    - ``updated_at`` is timezone-aware.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for pallet kernel ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class KeyValueEntry(Base):
    """
    One stored document.

    Contract:
        ``value`` holds the full serialized collection for ``key``. Writes
        replace the whole document; there are no partial updates.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)

    value: Mapped[str] = mapped_column(Text, nullable=False)

    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValueEntry {self.key} rev={self.revision}>"
