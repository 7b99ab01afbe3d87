"""
Module: pallet_kernel.db.kv
Responsibility: The key-value storage contract every collection is built on,
    and the in-memory implementation used by tests and ephemeral sessions.
Architecture position: Kernel > DB. Lowest storage layer. MUST NOT import
    from services/, selectors/ or domain/.

Invariants enforced:
    - ``get`` returns the last value passed to ``set`` for a key, or None.
    - ``set`` either fully succeeds or leaves the prior value in place.
    - An unreachable store raises StorageUnavailableError from both methods;
      it never returns partial data.

Failure modes:
    - StorageUnavailableError when the backing store cannot be reached.
"""

from abc import ABC, abstractmethod

from pallet_kernel.exceptions import StorageUnavailableError


class KeyValueStore(ABC):
    """
    Abstract string key-value store.

    Contract:
        Values are opaque strings (JSON documents in practice). The store
        knows nothing about collections or records.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None if absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the stored value for ``key``."""
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store.

    ``available`` can be switched off to simulate a store that refuses all
    access (e.g. browser storage disabled in private mode).
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self.available = True

    def get(self, key: str) -> str | None:
        if not self.available:
            raise StorageUnavailableError(key, "get")
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not self.available:
            raise StorageUnavailableError(key, "set")
        self._data[key] = value

    def keys(self) -> list[str]:
        """Stored keys, for inspection in tests."""
        return sorted(self._data)
