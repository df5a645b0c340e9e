"""
Database module - ordered key-value store.

This module handles:
- Store connection lifecycle (engine, sessions, health checks)
- The key-value table definition
- The ordered store adapter (put / prefix scan / delete)
"""
from src.database.connection import StoreConnection
from src.database.models import Base, KVEntry
from src.database.store import OrderedStore, StoreKey, StoreValue

__all__ = [
    "StoreConnection",
    "Base",
    "KVEntry",
    "OrderedStore",
    "StoreKey",
    "StoreValue",
]
