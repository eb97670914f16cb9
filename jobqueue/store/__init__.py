"""
Store module.
Contains the store contract, its Redis and in-memory implementations, and connection management.
"""

from jobqueue.store.base import StoreClient
from jobqueue.store.connection import close_store, get_keys, get_store, init_store
from jobqueue.store.keys import Keys
from jobqueue.store.memory import MemoryStore
from jobqueue.store.redis_store import RedisStore

__all__ = [
    "StoreClient",
    "RedisStore",
    "MemoryStore",
    "Keys",
    "init_store",
    "close_store",
    "get_store",
    "get_keys",
]
