"""
Store client contract.

Every queue, directory and failure-log operation is expressed against this
interface. Each method must be atomic on its own; no multi-key transactions
are required.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreClient(Protocol):
    """Shared key/list/set/counter store."""

    async def list_push(self, key: str, value: str) -> int:
        """Append value to the tail of a list. Returns the new length."""
        ...

    async def list_pop_front(self, key: str) -> str | None:
        """Remove and return the head of a list, or None when empty."""
        ...

    async def list_length(self, key: str) -> int:
        ...

    async def list_range(self, key: str, start: int, stop: int) -> list[str]:
        """Elements from start to stop inclusive, in list order."""
        ...

    async def set_add(self, key: str, member: str) -> None:
        ...

    async def set_remove(self, key: str, member: str) -> None:
        ...

    async def set_members(self, key: str) -> set[str]:
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, *keys: str) -> None:
        ...

    async def incr(self, key: str) -> int:
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...
