"""
Module: pallet_kernel.db.collections
Responsibility: Namespaced JSON documents on top of a KeyValueStore -- a
    list collection per record type and a scalar slot for single values.
Architecture position: Kernel > DB. Used by every repository in services/.

Invariants enforced:
    - Keys are ``{namespace}_{name}_v1`` and never change for a collection.
    - Reads never raise: a missing key, undecodable JSON, a non-list
      document or an unavailable store all read as the empty default.
    - Writes replace the whole document. If the store is unavailable the
      write is dropped with a warning and ``write`` returns False; the
      caller's in-memory result for the current call still stands.
"""

import json
from typing import Any

from pallet_kernel.db.kv import KeyValueStore
from pallet_kernel.exceptions import StorageUnavailableError
from pallet_kernel.logging_config import get_logger

logger = get_logger("db.collections")

KEY_VERSION = "v1"


def collection_key(namespace: str, name: str) -> str:
    """Storage key for a named collection, e.g. ``pt_pallets_v1``."""
    return f"{namespace}_{name}_{KEY_VERSION}"


class JsonCollection:
    """
    A list of JSON objects stored under one key.

    Contract:
        ``read`` returns a fresh list each call; mutating it does not touch
        storage until ``write`` is called with it.
    """

    def __init__(self, store: KeyValueStore, name: str, namespace: str = "pt"):
        self._store = store
        self.name = name
        self.key = collection_key(namespace, name)

    def read(self) -> list[dict[str, Any]]:
        try:
            raw = self._store.get(self.key)
        except StorageUnavailableError:
            logger.warning("storage_read_failed", extra={"key": self.key})
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("collection_decode_failed", extra={"key": self.key})
            return []

        if not isinstance(data, list):
            logger.warning(
                "collection_not_a_list",
                extra={"key": self.key, "type": type(data).__name__},
            )
            return []

        return [item for item in data if isinstance(item, dict)]

    def write(self, items: list[dict[str, Any]]) -> bool:
        """Replace the stored list. Returns False if the store refused it."""
        payload = json.dumps(items, separators=(",", ":"), ensure_ascii=False)
        try:
            self._store.set(self.key, payload)
        except StorageUnavailableError as e:
            logger.warning(
                "storage_write_failed",
                extra={"key": self.key, "items": len(items), "reason": e.reason},
            )
            return False
        return True

    def clear(self) -> bool:
        return self.write([])


class JsonSlot:
    """A single string value stored under one key (e.g. the last scan)."""

    def __init__(self, store: KeyValueStore, name: str, namespace: str = "pt"):
        self._store = store
        self.name = name
        self.key = collection_key(namespace, name)

    def read(self, default: str = "") -> str:
        try:
            raw = self._store.get(self.key)
        except StorageUnavailableError:
            logger.warning("storage_read_failed", extra={"key": self.key})
            return default
        return raw if raw is not None else default

    def write(self, value: str) -> bool:
        try:
            self._store.set(self.key, value)
        except StorageUnavailableError as e:
            logger.warning(
                "storage_write_failed",
                extra={"key": self.key, "reason": e.reason},
            )
            return False
        return True
