"""
BaseRepository -- shared read-modify-write plumbing for every collection.

Responsibility:
    Each repository owns one JsonCollection. A mutation reads the full list,
    changes it in memory, and writes the full list back. This base class
    provides the decode/encode step so that every repository turns stored
    dicts into frozen domain records the same way.

Architecture position:
    Kernel > Services -- imperative shell over db/collections.py and the
    pure records in domain/.

Invariants enforced:
    - One logical writer. There is no locking; a concurrent writer against
      the same store is last-writer-wins.
    - Undecodable stored items are skipped (and logged), never surfaced as
      exceptions to callers. They are dropped on the next write.

Failure modes:
    - None raised. Storage problems are absorbed by JsonCollection.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pallet_kernel.db.collections import JsonCollection
from pallet_kernel.domain.clock import Clock
from pallet_kernel.logging_config import get_logger

RecordType = TypeVar("RecordType")

logger = get_logger("services.base")


class BaseRepository(ABC, Generic[RecordType]):
    """
    Abstract base for collection-backed repositories.

    Contract:
        Subclasses implement ``_decode`` and ``_encode`` for their record
        type and call ``_load`` / ``_save`` around each mutation.
    """

    def __init__(self, collection: JsonCollection, clock: Clock):
        self.collection = collection
        self.clock = clock

    @abstractmethod
    def _decode(self, data: dict[str, Any]) -> RecordType:
        ...

    @abstractmethod
    def _encode(self, record: RecordType) -> dict[str, Any]:
        ...

    def _load(self) -> list[RecordType]:
        return decode_all(self.collection, self._decode)

    def _save(self, records: list[RecordType]) -> bool:
        return self.collection.write([self._encode(r) for r in records])


def decode_all(
    collection: JsonCollection,
    decode: Callable[[dict[str, Any]], RecordType],
) -> list[RecordType]:
    """Decode every stored item, skipping the ones that do not parse."""
    records: list[RecordType] = []
    skipped = 0
    for item in collection.read():
        try:
            records.append(decode(item))
        except (KeyError, TypeError, ValueError, ArithmeticError):
            skipped += 1
    if skipped:
        logger.warning(
            "records_skipped",
            extra={"key": collection.key, "skipped": skipped, "kept": len(records)},
        )
    return records
