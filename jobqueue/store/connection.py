"""
Store connection management.
Handles the process-wide store client and key layout.
"""

import logging

from jobqueue.config import get_settings
from jobqueue.store.base import StoreClient
from jobqueue.store.keys import Keys
from jobqueue.store.redis_store import RedisStore

logger = logging.getLogger(__name__)

# Global store instance
_store: StoreClient | None = None


def init_store(store: StoreClient | None = None) -> StoreClient:
    """
    Initialize the process-wide store client.
    Should be called on application startup.

    Args:
        store: An explicit client to install. Defaults to Redis from settings.

    Returns:
        StoreClient: The installed client.
    """
    global _store
    if store is None:
        settings = get_settings()
        store = RedisStore.from_url(
            settings.redis_url,
            socket_timeout=settings.redis_socket_timeout_seconds,
        )
        logger.info("Store connection initialized", extra={"redis_url": settings.redis_url})
    _store = store
    return _store


async def close_store() -> None:
    """
    Close the store connection.
    Should be called on application shutdown.
    """
    global _store
    if _store is not None:
        await _store.close()
        _store = None


def get_store() -> StoreClient:
    """
    Dependency for getting the store client.

    Returns:
        StoreClient: The installed client.

    Raises:
        RuntimeError: If the store is not initialized.
    """
    if _store is None:
        raise RuntimeError("Store not initialized. Call init_store() first.")
    return _store


def get_keys() -> Keys:
    """Key layout for the configured namespace."""
    return Keys(namespace=get_settings().redis_namespace)
