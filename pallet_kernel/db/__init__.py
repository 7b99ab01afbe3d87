"""Storage layer - key-value contract, SQL backing store, JSON collections."""

from pallet_kernel.db.base import Base, KeyValueEntry
from pallet_kernel.db.collections import JsonCollection, JsonSlot, collection_key
from pallet_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from pallet_kernel.db.kv import InMemoryKeyValueStore, KeyValueStore
from pallet_kernel.db.sql_store import SqlKeyValueStore

__all__ = [
    "Base",
    "KeyValueEntry",
    "JsonCollection",
    "JsonSlot",
    "collection_key",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
]
